"""
ProgramEditor - in-memory editing session for one workout program.

Holds the program document, applies structural operations from
``program_tree`` to it, tracks unsaved changes and saves through the
``ProgramGateway``.

A program is a Draft until its first successful save (its id is the pending
``"new"`` placeholder) and Persisted afterwards; there is no way back.
"""
from typing import Any, Callable

from app.config.settings import get_settings
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.schemas.ids import DRAFT_PROGRAM_ID
from app.schemas.program import (
    ActivityTemplate,
    CreateProgram,
    Program,
    ProgramWeek,
    UpdateProgram,
)
from app.security.session import EditorSession
from app.services import notifications, program_tree
from app.services.activity_assignment import ActivityConfig, build_program_activity
from app.services.ordering import available_days
from app.services.program_gateway import ProgramGateway
from app.services.program_stats import ProgramStats, duration_weeks, summarize
from app.services.program_tree import TreePath

logger = get_logger(__name__)


def new_draft(name: str | None = None) -> Program:
    """Empty, never-saved program."""
    return Program(id=DRAFT_PROGRAM_ID, name=name or get_settings().default_program_name)


class ProgramEditor:
    def __init__(self, gateway: ProgramGateway, session: EditorSession | None = None):
        self.gateway = gateway
        self.session = session or gateway.client.session
        self._program: Program = new_draft()
        self.dirty = False
        self.saving = False
        self.revision = 0

    @property
    def program(self) -> Program:
        return self._program

    @property
    def is_draft(self) -> bool:
        return self._program.is_draft

    @property
    def stats(self) -> ProgramStats:
        return summarize(self._program)

    # -- lifecycle ---------------------------------------------------------

    def new_program(self, name: str | None = None, gym_id: str | None = None) -> Program:
        program = new_draft(name)
        gym = gym_id or self.session.gym_id
        if gym:
            program = program.model_copy(update={"gym_id": gym})
        self._replace(program)
        return program

    async def load(self, program_id: str) -> bool:
        program = await self.gateway.get_program(program_id)
        if program is None:
            return False
        self._replace(program)
        return True

    def _replace(self, program: Program) -> None:
        self._program = program
        self.dirty = False
        self.revision += 1

    def discard(self, confirm: Callable[[], bool] | None = None) -> bool:
        """
        Leave the editor, dropping unsaved changes.

        With unsaved changes ``confirm`` is asked first; if it declines (or is
        missing) nothing is discarded and False is returned.
        """
        if self.dirty:
            if confirm is None or not confirm():
                return False
            logger.info("unsaved_changes_discarded", program_id=self._program.key)
        self._replace(new_draft())
        return True

    # -- mutation ----------------------------------------------------------

    def apply(self, mutation: Callable[[Program], Program]) -> bool:
        """Run a tree operation against the document; True if it changed anything."""
        updated = mutation(self._program)
        if updated is self._program:
            return False
        self._program = updated
        self.dirty = True
        self.revision += 1
        return True

    def update_metadata(self, **updates: Any) -> bool:
        return self.apply(lambda p: program_tree.update_metadata(p, updates))

    def add_block(self, name: str | None = None) -> bool:
        return self.apply(lambda p: program_tree.add_block(p, name))

    def remove_block(self, block_index: int) -> bool:
        return self.apply(lambda p: program_tree.remove_block(p, block_index))

    def update_block(self, block_index: int, **updates: Any) -> bool:
        return self.apply(lambda p: program_tree.update_block(p, block_index, updates))

    def reorder_blocks(self, old_index: int, new_index: int) -> bool:
        return self.apply(lambda p: program_tree.reorder_blocks(p, old_index, new_index))

    def add_week(self, block_index: int) -> bool:
        return self.apply(lambda p: program_tree.add_week(p, block_index))

    def remove_week(self, block_index: int, week_index: int) -> bool:
        return self.apply(lambda p: program_tree.remove_week(p, block_index, week_index))

    def update_week(self, block_index: int, week_index: int, **updates: Any) -> bool:
        return self.apply(lambda p: program_tree.update_week(p, block_index, week_index, updates))

    def reorder_weeks(self, block_index: int, old_index: int, new_index: int) -> bool:
        return self.apply(lambda p: program_tree.reorder_weeks(p, block_index, old_index, new_index))

    def add_day(self, block_index: int, week_index: int, day_of_week: int) -> bool:
        return self.apply(lambda p: program_tree.add_day(p, block_index, week_index, day_of_week))

    def remove_day(self, block_index: int, week_index: int, day_index: int) -> bool:
        return self.apply(lambda p: program_tree.remove_day(p, block_index, week_index, day_index))

    def update_day(self, block_index: int, week_index: int, day_index: int, **updates: Any) -> bool:
        return self.apply(
            lambda p: program_tree.update_day(p, block_index, week_index, day_index, updates)
        )

    def reorder_days(self, block_index: int, week_index: int, old_index: int, new_index: int) -> bool:
        return self.apply(
            lambda p: program_tree.reorder_days(p, block_index, week_index, old_index, new_index)
        )

    def add_activity(
        self,
        path: TreePath,
        template: ActivityTemplate,
        config: ActivityConfig,
    ) -> bool:
        """Validate a prescription and append it to the day at ``path``.

        Raises:
            ValidationError: the prescription cannot be committed (nothing is changed)
        """
        day = program_tree.node_at(self._program, TreePath(path.block, path.week, path.day))
        if day is None or path.week is None or path.day is None:
            return False
        activity = build_program_activity(template, config, order_index=len(day.activities))
        return self.apply(
            lambda p: program_tree.add_activity(p, path.block, path.week, path.day, activity)
        )

    def remove_activity(self, path: TreePath) -> bool:
        if path.week is None or path.day is None or path.activity is None:
            return False
        return self.apply(
            lambda p: program_tree.remove_activity(p, path.block, path.week, path.day, path.activity)
        )

    def update_activity(self, path: TreePath, **updates: Any) -> bool:
        if path.week is None or path.day is None or path.activity is None:
            return False
        return self.apply(
            lambda p: program_tree.update_activity(
                p, path.block, path.week, path.day, path.activity, updates
            )
        )

    def reorder_activities(self, day_path: TreePath, old_index: int, new_index: int) -> bool:
        if day_path.week is None or day_path.day is None:
            return False
        return self.apply(
            lambda p: program_tree.reorder_activities(
                p, day_path.block, day_path.week, day_path.day, old_index, new_index
            )
        )

    def available_days(self, block_index: int, week_index: int) -> list[tuple[int, str]]:
        week = program_tree.node_at(self._program, TreePath(block_index, week_index))
        if not isinstance(week, ProgramWeek):
            return []
        return available_days(week)

    # -- persistence -------------------------------------------------------

    def _validate_for_save(self, program: Program) -> Program:
        if not program.name.strip():
            raise ValidationError("name", "Program name is required")
        gym_id = program.gym_id or self.session.gym_id
        if not gym_id:
            raise ValidationError("gym_id", "Choose a gym before saving the program")
        if gym_id != program.gym_id:
            program = program.model_copy(update={"gym_id": gym_id})
        return program

    async def save(self) -> bool:
        """
        Persist the document: create a Draft, update a Persisted program.

        Failed preconditions are reported as an error notification and no
        request is made. If the document was edited while the request was in
        flight, the server's id, version and timestamps are adopted but the
        local edits are kept and the editor stays dirty.

        Returns False without a request while another save of this editor
        is still in flight.
        """
        if self.saving:
            logger.info("save_already_in_progress", program_id=self._program.key)
            return False

        try:
            program = self._validate_for_save(self._program)
        except ValidationError as e:
            self.gateway.error = e.message
            self.gateway.notifier.notify(notifications.error(e.message))
            logger.info("save_rejected", code=e.code)
            return False

        started_at = self.revision
        weeks = duration_weeks(program)
        self.saving = True
        try:
            if program.is_draft:
                saved = await self.gateway.create_program(CreateProgram(
                    name=program.name,
                    description=program.description,
                    is_template=program.is_template,
                    gym_id=program.gym_id,
                    blocks=program.blocks,
                    duration_weeks=weeks,
                ))
            else:
                saved = await self.gateway.update_program(program.key, UpdateProgram(
                    name=program.name,
                    description=program.description,
                    is_template=program.is_template,
                    gym_id=program.gym_id,
                    blocks=program.blocks,
                    duration_weeks=weeks,
                    version=program.version,
                ))
        finally:
            self.saving = False

        if saved is None:
            return False

        if self.revision == started_at:
            self._replace(saved)
        else:
            # edits arrived while saving; keep them on top of the saved identity
            self._program = self._program.model_copy(update={
                "id": saved.id,
                "version": saved.version,
                "created_at": saved.created_at,
                "updated_at": saved.updated_at,
                "duration_weeks": saved.duration_weeks,
            })
            logger.info("save_completed_with_pending_edits", program_id=saved.key)
        return True
