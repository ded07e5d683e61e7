from __future__ import annotations

from dataclasses import dataclass

from app.schemas.program import Program


@dataclass
class PaginationState:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class ProgramStore:
    """In-memory program list backing the list view, keyed by ``Program.key``."""

    def __init__(self, programs: list[Program] | None = None):
        self._programs: list[Program] = list(programs or [])
        self.pagination: PaginationState | None = None

    @property
    def programs(self) -> list[Program]:
        return list(self._programs)

    def __len__(self) -> int:
        return len(self._programs)

    def __contains__(self, key: str) -> bool:
        return self._index(key) is not None

    def _index(self, key: str) -> int | None:
        for index, program in enumerate(self._programs):
            if program.key == key:
                return index
        return None

    def get(self, key: str) -> Program | None:
        index = self._index(key)
        return self._programs[index] if index is not None else None

    def snapshot(self, key: str) -> Program | None:
        """Deep copy of a program, for rollback."""
        program = self.get(key)
        return program.model_copy(deep=True) if program is not None else None

    def replace_all(self, programs: list[Program], pagination: PaginationState | None = None) -> None:
        self._programs = list(programs)
        self.pagination = pagination

    def prepend(self, program: Program) -> None:
        self._programs.insert(0, program)

    def replace(self, key: str, program: Program) -> bool:
        index = self._index(key)
        if index is None:
            return False
        self._programs[index] = program
        return True

    def remove(self, key: str) -> Program | None:
        index = self._index(key)
        if index is None:
            return None
        return self._programs.pop(index)

    def restore(self, program: Program) -> None:
        """Re-insert a removed program, newest ``created_at`` first."""
        if program.key in self:
            return
        self._programs.append(program)
        self._programs.sort(key=lambda p: p.created_at, reverse=True)
