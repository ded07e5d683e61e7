"""
Structural operations over a program document.

Every function takes the current ``Program`` plus positional indices and
returns a new ``Program`` with exactly one change applied:

- Only the addressed path is copied; untouched siblings are shared with the
  input, and the input itself is never mutated.
- ``updated_at`` is refreshed on every applied change.
- An index that does not address an existing node (stale after a concurrent
  removal, negative, past the end) leaves the program unchanged. Nothing in
  this module raises for bad addressing.

Sibling numbering is renormalized after every add/remove/reorder: block
``order_index`` is ``0..n-1``, week ``week_number`` is ``1..n`` and activity
``order_index`` is ``0..n-1``. Days are kept sorted by ``day_of_week``.
"""
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from app.config.settings import get_settings
from app.core.logging import get_logger
from app.schemas.ids import new_node_id
from app.schemas.program import (
    Program,
    ProgramActivity,
    ProgramBlock,
    ProgramDay,
    ProgramWeek,
    utcnow,
)
from app.services.ordering import (
    day_name,
    move,
    renumber_activities,
    renumber_blocks,
    renumber_weeks,
    sort_days,
)

logger = get_logger(__name__)

BLOCK_FIELDS = frozenset({"name", "description", "volume_targets"})
WEEK_FIELDS = frozenset({"description", "volume_targets"})
DAY_FIELDS = frozenset({"name"})
ACTIVITY_FIELDS = frozenset({
    "sets",
    "reps",
    "intensity_percentage",
    "duration",
    "distance",
    "rest_period",
    "notes",
})
METADATA_FIELDS = frozenset({"name", "description", "gym_id", "is_template", "is_active"})


@dataclass(frozen=True)
class TreePath:
    """Position of a node: a block index plus optional week, day and activity indices."""

    block: int
    week: int | None = None
    day: int | None = None
    activity: int | None = None

    def parent(self) -> "TreePath | None":
        if self.activity is not None:
            return TreePath(self.block, self.week, self.day)
        if self.day is not None:
            return TreePath(self.block, self.week)
        if self.week is not None:
            return TreePath(self.block)
        return None


def _in_range(items: Sequence[Any], index: int) -> bool:
    return 0 <= index < len(items)


def _editable(updates: dict[str, Any], allowed: frozenset[str], node: str) -> dict[str, Any]:
    ignored = set(updates) - allowed
    if ignored:
        logger.debug("ignored_non_editable_fields", node=node, fields=sorted(ignored))
    return {key: value for key, value in updates.items() if key in allowed}


def _touch(program: Program, **changes: Any) -> Program:
    return program.model_copy(update={**changes, "updated_at": utcnow()})


def _map_block(
    program: Program,
    block_index: int,
    fn: Callable[[ProgramBlock], ProgramBlock | None],
) -> Program:
    if not _in_range(program.blocks, block_index):
        return program
    new_block = fn(program.blocks[block_index])
    if new_block is None:
        return program
    blocks = list(program.blocks)
    blocks[block_index] = new_block
    return _touch(program, blocks=blocks)


def _map_week(
    program: Program,
    block_index: int,
    week_index: int,
    fn: Callable[[ProgramWeek], ProgramWeek | None],
) -> Program:
    def on_block(block: ProgramBlock) -> ProgramBlock | None:
        if not _in_range(block.weeks, week_index):
            return None
        new_week = fn(block.weeks[week_index])
        if new_week is None:
            return None
        weeks = list(block.weeks)
        weeks[week_index] = new_week
        return block.model_copy(update={"weeks": weeks})

    return _map_block(program, block_index, on_block)


def _map_day(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    fn: Callable[[ProgramDay], ProgramDay | None],
) -> Program:
    def on_week(week: ProgramWeek) -> ProgramWeek | None:
        if not _in_range(week.days, day_index):
            return None
        new_day = fn(week.days[day_index])
        if new_day is None:
            return None
        days = list(week.days)
        days[day_index] = new_day
        return week.model_copy(update={"days": days})

    return _map_week(program, block_index, week_index, on_week)


# -- program -----------------------------------------------------------------

def update_metadata(program: Program, updates: dict[str, Any]) -> Program:
    """Merge name/description/gym/template flags into the program."""
    changes = _editable(updates, METADATA_FIELDS, "program")
    if not changes:
        return program
    return _touch(program, **changes)


# -- blocks ------------------------------------------------------------------

def add_block(program: Program, name: str | None = None) -> Program:
    block = ProgramBlock(
        block_id=new_node_id(),
        name=name or get_settings().default_block_name,
        order_index=len(program.blocks),
    )
    return _touch(program, blocks=[*program.blocks, block])


def remove_block(program: Program, block_index: int) -> Program:
    """Delete a block together with its weeks, days and activities."""
    if not _in_range(program.blocks, block_index):
        return program
    remaining = [block for index, block in enumerate(program.blocks) if index != block_index]
    return _touch(program, blocks=renumber_blocks(remaining))


def update_block(program: Program, block_index: int, updates: dict[str, Any]) -> Program:
    changes = _editable(updates, BLOCK_FIELDS, "block")
    if not changes:
        return program
    return _map_block(program, block_index, lambda block: block.model_copy(update=changes))


def reorder_blocks(program: Program, old_index: int, new_index: int) -> Program:
    if old_index == new_index:
        return program
    if not (_in_range(program.blocks, old_index) and _in_range(program.blocks, new_index)):
        return program
    return _touch(program, blocks=renumber_blocks(move(program.blocks, old_index, new_index)))


# -- weeks -------------------------------------------------------------------

def add_week(program: Program, block_index: int) -> Program:
    def on_block(block: ProgramBlock) -> ProgramBlock:
        week = ProgramWeek(week_id=new_node_id(), week_number=len(block.weeks) + 1)
        return block.model_copy(update={"weeks": [*block.weeks, week]})

    return _map_block(program, block_index, on_block)


def remove_week(program: Program, block_index: int, week_index: int) -> Program:
    def on_block(block: ProgramBlock) -> ProgramBlock | None:
        if not _in_range(block.weeks, week_index):
            return None
        remaining = [week for index, week in enumerate(block.weeks) if index != week_index]
        return block.model_copy(update={"weeks": renumber_weeks(remaining)})

    return _map_block(program, block_index, on_block)


def update_week(program: Program, block_index: int, week_index: int, updates: dict[str, Any]) -> Program:
    changes = _editable(updates, WEEK_FIELDS, "week")
    if not changes:
        return program
    return _map_week(program, block_index, week_index, lambda week: week.model_copy(update=changes))


def reorder_weeks(program: Program, block_index: int, old_index: int, new_index: int) -> Program:
    if old_index == new_index:
        return program

    def on_block(block: ProgramBlock) -> ProgramBlock | None:
        if not (_in_range(block.weeks, old_index) and _in_range(block.weeks, new_index)):
            return None
        weeks = renumber_weeks(move(block.weeks, old_index, new_index))
        return block.model_copy(update={"weeks": weeks})

    return _map_block(program, block_index, on_block)


# -- days --------------------------------------------------------------------

def add_day(
    program: Program,
    block_index: int,
    week_index: int,
    day_of_week: int,
    name: str | None = None,
) -> Program:
    """Schedule a weekday in a week; the week's days stay sorted by weekday.

    A weekday outside 1..7, or one the week already has, is not added.
    """
    if not 1 <= day_of_week <= 7:
        return program

    def on_week(week: ProgramWeek) -> ProgramWeek | None:
        if any(day.day_of_week == day_of_week for day in week.days):
            logger.debug("duplicate_weekday_skipped", day_of_week=day_of_week)
            return None
        day = ProgramDay(
            day_id=new_node_id(),
            day_of_week=day_of_week,
            name=name or day_name(day_of_week),
        )
        return week.model_copy(update={"days": sort_days([*week.days, day])})

    return _map_week(program, block_index, week_index, on_week)


def remove_day(program: Program, block_index: int, week_index: int, day_index: int) -> Program:
    def on_week(week: ProgramWeek) -> ProgramWeek | None:
        if not _in_range(week.days, day_index):
            return None
        remaining = [day for index, day in enumerate(week.days) if index != day_index]
        return week.model_copy(update={"days": remaining})

    return _map_week(program, block_index, week_index, on_week)


def update_day(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    updates: dict[str, Any],
) -> Program:
    changes = _editable(updates, DAY_FIELDS, "day")
    if not changes:
        return program
    return _map_day(
        program, block_index, week_index, day_index,
        lambda day: day.model_copy(update=changes),
    )


def reorder_days(
    program: Program,
    block_index: int,
    week_index: int,
    old_index: int,
    new_index: int,
) -> Program:
    """Move a day's contents to another scheduled weekday of the same week.

    The set of weekdays in the week does not change: days are moved in list
    order and then re-assigned the week's weekdays in ascending order, so the
    list stays sorted by ``day_of_week``. A day still carrying its default
    weekday name is renamed to its new weekday.
    """
    if old_index == new_index:
        return program

    def on_week(week: ProgramWeek) -> ProgramWeek | None:
        if not (_in_range(week.days, old_index) and _in_range(week.days, new_index)):
            return None
        slots = [day.day_of_week for day in week.days]
        days = []
        for day, slot in zip(move(week.days, old_index, new_index), slots):
            if day.day_of_week == slot:
                days.append(day)
                continue
            changes: dict[str, Any] = {"day_of_week": slot}
            if day.name == day_name(day.day_of_week):
                changes["name"] = day_name(slot)
            days.append(day.model_copy(update=changes))
        return week.model_copy(update={"days": days})

    return _map_week(program, block_index, week_index, on_week)


# -- activities --------------------------------------------------------------

def add_activity(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    activity: ProgramActivity,
) -> Program:
    """Append an already validated activity to the end of a day."""
    def on_day(day: ProgramDay) -> ProgramDay:
        activities = renumber_activities([*day.activities, activity])
        return day.model_copy(update={"activities": activities})

    return _map_day(program, block_index, week_index, day_index, on_day)


def remove_activity(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    activity_index: int,
) -> Program:
    def on_day(day: ProgramDay) -> ProgramDay | None:
        if not _in_range(day.activities, activity_index):
            return None
        remaining = [a for index, a in enumerate(day.activities) if index != activity_index]
        return day.model_copy(update={"activities": renumber_activities(remaining)})

    return _map_day(program, block_index, week_index, day_index, on_day)


def update_activity(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    activity_index: int,
    updates: dict[str, Any],
) -> Program:
    changes = _editable(updates, ACTIVITY_FIELDS, "activity")
    if not changes:
        return program

    def on_day(day: ProgramDay) -> ProgramDay | None:
        if not _in_range(day.activities, activity_index):
            return None
        activities = list(day.activities)
        activities[activity_index] = activities[activity_index].model_copy(update=changes)
        return day.model_copy(update={"activities": activities})

    return _map_day(program, block_index, week_index, day_index, on_day)


def reorder_activities(
    program: Program,
    block_index: int,
    week_index: int,
    day_index: int,
    old_index: int,
    new_index: int,
) -> Program:
    """Move an activity within its day; ``order_index`` is renormalized immediately."""
    if old_index == new_index:
        return program

    def on_day(day: ProgramDay) -> ProgramDay | None:
        if not (_in_range(day.activities, old_index) and _in_range(day.activities, new_index)):
            return None
        activities = renumber_activities(move(day.activities, old_index, new_index))
        return day.model_copy(update={"activities": activities})

    return _map_day(program, block_index, week_index, day_index, on_day)


# -- lookup ------------------------------------------------------------------

def node_at(program: Program, path: TreePath) -> Any | None:
    """Node addressed by ``path``, or None when the path is stale."""
    if not _in_range(program.blocks, path.block):
        return None
    node: Any = program.blocks[path.block]
    for index, attr in ((path.week, "weeks"), (path.day, "days"), (path.activity, "activities")):
        if index is None:
            return node
        children = getattr(node, attr)
        if not _in_range(children, index):
            return None
        node = children[index]
    return node
