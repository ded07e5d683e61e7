"""Statistics derived from a program tree.

Nothing here is cached or stored; every value is recomputed from the blocks
so it cannot drift from the document.
"""
from dataclasses import dataclass
from typing import Sequence

from app.schemas.program import Program, ProgramBlock


@dataclass(frozen=True)
class ProgramStats:
    duration_weeks: int
    total_days: int
    total_activities: int


def weeks_in(blocks: Sequence[ProgramBlock]) -> int:
    return sum(len(block.weeks) for block in blocks)


def duration_weeks(program: Program) -> int:
    return weeks_in(program.blocks)


def total_days(program: Program) -> int:
    return sum(len(week.days) for block in program.blocks for week in block.weeks)


def total_activities(program: Program) -> int:
    return sum(
        len(day.activities)
        for block in program.blocks
        for week in block.weeks
        for day in week.days
    )


def summarize(program: Program) -> ProgramStats:
    return ProgramStats(
        duration_weeks=duration_weeks(program),
        total_days=total_days(program),
        total_activities=total_activities(program),
    )
