"""Tests for the drag-and-drop reorder coordinator."""
import pytest

from app.schemas.program import Program
from app.services import program_tree
from app.services.drag_reorder import DragItem, DragReorderCoordinator, resolve
from app.services.program_tree import TreePath


class Document:
    """Bare editable document recording applied mutations."""

    def __init__(self, program: Program):
        self.program = program
        self.applied = 0

    def apply(self, mutation) -> bool:
        updated = mutation(self.program)
        if updated is self.program:
            return False
        self.program = updated
        self.applied += 1
        return True


@pytest.fixture
def document(make_program) -> Document:
    program = make_program(days=[[2, 3], [1]], activities_per_day=2, persisted=True)
    for index in range(3):
        program = program_tree.add_block(program, f"Extra {index}")
    return Document(program)


def _day(program: Program, block: int, week: int, day: int):
    return program.blocks[block].weeks[week].days[day]


class TestResolve:
    def test_resolves_each_kind(self, document):
        program = document.program
        activity = _day(program, 0, 1, 2).activities[1]

        assert resolve(program, DragItem.block(program.blocks[1].block_id)) == TreePath(1)
        assert resolve(program, DragItem.week(program.blocks[0].weeks[1].week_id)) == TreePath(0, 1)
        assert resolve(program, DragItem.day(_day(program, 0, 1, 2).day_id)) == TreePath(0, 1, 2)
        assert resolve(program, DragItem.activity(str(activity.activity_id))) == TreePath(0, 1, 2, 1)

    def test_unknown_id(self, document):
        assert resolve(document.program, DragItem.day("missing")) is None


class TestDragReorderCoordinator:
    """Drag gestures issue exactly one reorder within a single container."""

    def test_blocks_reorder(self, document):
        ids = [block.block_id for block in document.program.blocks]
        coordinator = DragReorderCoordinator(document)

        assert coordinator.drag_start(DragItem.block(ids[0]))
        assert coordinator.drag_end(DragItem.block(ids[2]))

        assert [b.block_id for b in document.program.blocks][:3] == [ids[1], ids[2], ids[0]]
        assert [b.order_index for b in document.program.blocks] == list(range(len(ids)))
        assert document.applied == 1
        assert not coordinator.is_dragging

    def test_weeks_reorder_within_block(self, document):
        weeks = document.program.blocks[0].weeks
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.week(weeks[1].week_id))
        assert coordinator.drag_end(DragItem.week(weeks[0].week_id))

        reordered = document.program.blocks[0].weeks
        assert [w.week_id for w in reordered] == [weeks[1].week_id, weeks[0].week_id]
        assert [w.week_number for w in reordered] == [1, 2]

    def test_activities_reorder_within_day(self, document):
        activities = _day(document.program, 0, 0, 0).activities
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.activity(str(activities[0].activity_id)))
        assert coordinator.drag_end(DragItem.activity(str(activities[1].activity_id)))

        reordered = _day(document.program, 0, 0, 0).activities
        assert [a.activity_id for a in reordered] == [activities[1].activity_id, activities[0].activity_id]
        assert [a.order_index for a in reordered] == [0, 1]

    def test_day_dropped_on_other_week_is_rejected(self, document):
        """Dragging a day from week A onto a day in week B changes neither week."""
        before = document.program
        source = _day(before, 0, 0, 0)
        target = _day(before, 0, 1, 1)
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.day(source.day_id))

        assert not coordinator.drag_end(DragItem.day(target.day_id))
        assert document.program is before
        assert document.applied == 0

    def test_activity_dropped_on_other_day_is_rejected(self, document):
        before = document.program
        source = _day(before, 0, 0, 0).activities[0]
        target = _day(before, 0, 0, 1).activities[1]
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.activity(str(source.activity_id)))

        assert not coordinator.drag_end(DragItem.activity(str(target.activity_id)))
        assert document.program is before

    def test_week_dropped_on_other_block_is_rejected(self, document):
        before = document.program
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.week(before.blocks[0].weeks[0].week_id))

        assert not coordinator.drag_end(DragItem.week(before.blocks[1].weeks[0].week_id))
        assert document.program is before

    @pytest.mark.parametrize("over", [None, "self", "other_kind", "missing"])
    def test_noop_drops(self, document, over):
        before = document.program
        day = _day(before, 0, 1, 0)
        item = DragItem.day(day.day_id)
        targets = {
            None: None,
            "self": item,
            "other_kind": DragItem.block(before.blocks[0].block_id),
            "missing": DragItem.day("gone"),
        }
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(item)

        assert not coordinator.drag_end(targets[over])
        assert document.program is before

    def test_drag_end_without_start(self, document):
        coordinator = DragReorderCoordinator(document)

        assert not coordinator.drag_end(DragItem.block(document.program.blocks[0].block_id))

    def test_drag_start_unknown_item(self, document):
        coordinator = DragReorderCoordinator(document)

        assert not coordinator.drag_start(DragItem.block("missing"))
        assert coordinator.source is None

    def test_cancel(self, document):
        blocks = document.program.blocks
        coordinator = DragReorderCoordinator(document)

        coordinator.drag_start(DragItem.block(blocks[0].block_id))
        coordinator.drag_cancel()

        assert not coordinator.drag_end(DragItem.block(blocks[1].block_id))
        assert document.applied == 0
