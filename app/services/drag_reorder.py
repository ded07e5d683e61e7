"""
Drag-and-drop reordering for the program editor.

A drag gesture names nodes by a typed payload (``DragItem``) rather than an
encoded string. The coordinator resolves the dragged node's position when the
drag starts, resolves the drop target when it ends, and issues exactly one
reorder operation when both are siblings in the same container:

- blocks reorder freely (they all live at the program root)
- weeks reorder only within their block
- days reorder only within their week
- activities reorder only within their day

Anything else (no target, a target of another kind, the item dropped on
itself, an id that no longer resolves, a cross-container drop) is a no-op.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from app.core.logging import get_logger
from app.schemas.program import Program
from app.services import program_tree
from app.services.program_tree import TreePath

logger = get_logger(__name__)


class DragKind(str, Enum):
    BLOCK = "block"
    WEEK = "week"
    DAY = "day"
    ACTIVITY = "activity"


@dataclass(frozen=True)
class DragItem:
    kind: DragKind
    id: str

    @classmethod
    def block(cls, block_id: str) -> "DragItem":
        return cls(DragKind.BLOCK, block_id)

    @classmethod
    def week(cls, week_id: str) -> "DragItem":
        return cls(DragKind.WEEK, week_id)

    @classmethod
    def day(cls, day_id: str) -> "DragItem":
        return cls(DragKind.DAY, day_id)

    @classmethod
    def activity(cls, activity_id: str) -> "DragItem":
        return cls(DragKind.ACTIVITY, activity_id)


class EditableDocument(Protocol):
    """What the coordinator needs from an editor."""

    @property
    def program(self) -> Program: ...

    def apply(self, mutation: Callable[[Program], Program]) -> bool: ...


def resolve(program: Program, item: DragItem) -> TreePath | None:
    """Locate ``item`` by linear search: blocks, then weeks, then days, then activities."""
    for b, block in enumerate(program.blocks):
        if item.kind is DragKind.BLOCK:
            if block.block_id == item.id:
                return TreePath(b)
            continue
        for w, week in enumerate(block.weeks):
            if item.kind is DragKind.WEEK:
                if week.week_id == item.id:
                    return TreePath(b, w)
                continue
            for d, day in enumerate(week.days):
                if item.kind is DragKind.DAY:
                    if day.day_id == item.id:
                        return TreePath(b, w, d)
                    continue
                for a, activity in enumerate(day.activities):
                    if str(activity.activity_id) == item.id:
                        return TreePath(b, w, d, a)
    return None


class DragReorderCoordinator:
    def __init__(self, document: EditableDocument):
        self._document = document
        self._dragged: DragItem | None = None
        self._source: TreePath | None = None

    @property
    def is_dragging(self) -> bool:
        return self._dragged is not None

    @property
    def source(self) -> TreePath | None:
        return self._source

    def drag_start(self, item: DragItem) -> bool:
        """Cache the dragged node's position; False if it cannot be found."""
        path = resolve(self._document.program, item)
        if path is None:
            logger.debug("drag_source_not_found", kind=item.kind.value, id=item.id)
            self._dragged = self._source = None
            return False
        self._dragged, self._source = item, path
        return True

    def drag_cancel(self) -> None:
        self._dragged = self._source = None

    def drag_end(self, over: DragItem | None) -> bool:
        """Finish the gesture; True if the program was reordered."""
        dragged, source = self._dragged, self._source
        self._dragged = self._source = None

        if dragged is None or source is None or over is None:
            return False
        if over == dragged or over.kind is not dragged.kind:
            return False

        target = resolve(self._document.program, over)
        if target is None or target == source:
            return False

        if source.parent() != target.parent():
            logger.info(
                "cross_container_drop_rejected",
                kind=dragged.kind.value,
                source=source,
                target=target,
            )
            return False

        return self._document.apply(self._reorder(dragged.kind, source, target))

    @staticmethod
    def _reorder(kind: DragKind, source: TreePath, target: TreePath) -> Callable[[Program], Program]:
        if kind is DragKind.BLOCK:
            return lambda p: program_tree.reorder_blocks(p, source.block, target.block)
        if kind is DragKind.WEEK:
            return lambda p: program_tree.reorder_weeks(p, source.block, source.week, target.week)
        if kind is DragKind.DAY:
            return lambda p: program_tree.reorder_days(
                p, source.block, source.week, source.day, target.day
            )
        return lambda p: program_tree.reorder_activities(
            p, source.block, source.week, source.day, source.activity, target.activity
        )
