"""Ordering helpers shared by the program tree operations.

Sibling positions are carried twice in a program document: by array position
and by a stored index (block ``order_index``, week ``week_number``, activity
``order_index``). These helpers rebuild the stored values from array order so
the two never disagree. Days are the exception: they are ordered by weekday.
"""
from typing import Sequence, TypeVar

from app.schemas.program import ProgramActivity, ProgramBlock, ProgramDay, ProgramWeek

T = TypeVar("T")

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def day_name(day_of_week: int) -> str:
    """Weekday name for 1 (Monday) .. 7 (Sunday)."""
    if 1 <= day_of_week <= len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[day_of_week - 1]
    return f"Day {day_of_week}"


def available_days(week: ProgramWeek) -> list[tuple[int, str]]:
    """Weekdays not yet scheduled in ``week`` as ``(day_of_week, label)`` pairs."""
    used = {day.day_of_week for day in week.days}
    return [
        (value, label)
        for value, label in enumerate(WEEKDAY_NAMES, start=1)
        if value not in used
    ]


def move(items: Sequence[T], old_index: int, new_index: int) -> list[T]:
    """Remove the item at ``old_index`` and insert it at ``new_index``."""
    result = list(items)
    result.insert(new_index, result.pop(old_index))
    return result


def renumber_blocks(blocks: Sequence[ProgramBlock]) -> list[ProgramBlock]:
    return [
        block if block.order_index == index else block.model_copy(update={"order_index": index})
        for index, block in enumerate(blocks)
    ]


def renumber_weeks(weeks: Sequence[ProgramWeek]) -> list[ProgramWeek]:
    return [
        week if week.week_number == index + 1 else week.model_copy(update={"week_number": index + 1})
        for index, week in enumerate(weeks)
    ]


def renumber_activities(activities: Sequence[ProgramActivity]) -> list[ProgramActivity]:
    return [
        activity if activity.order_index == index else activity.model_copy(update={"order_index": index})
        for index, activity in enumerate(activities)
    ]


def sort_days(days: Sequence[ProgramDay]) -> list[ProgramDay]:
    # stable, so equal weekdays keep their insertion order
    return sorted(days, key=lambda day: day.day_of_week)
