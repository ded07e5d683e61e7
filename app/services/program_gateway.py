"""
ProgramGateway - persistence boundary between the local program list and the API.

Responsible for:
- Applying create/update/delete optimistically to the local ``ProgramStore``
- Issuing the API request and reconciling with the server's canonical program
- Rolling back exactly the affected program when a request fails
- Converting every failure into ``False`` plus a user-facing error notification

Nothing raised by the client escapes these methods. Saves to the same program
are queued behind a per-program lock, so a rollback snapshot is always taken
after the previous save for that program has settled.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from pydantic import ValidationError as SchemaError

from app.clients.workout_programs import WorkoutProgramsClient
from app.config.settings import get_settings
from app.core.exceptions import DomainError, user_message
from app.core.logging import get_logger
from app.repositories.program_store import PaginationState, ProgramStore
from app.schemas.ids import new_temp_id
from app.schemas.program import (
    CopyProgram,
    CreateProgram,
    Program,
    ProgramListParams,
    UpdateProgram,
    VolumeReport,
    utcnow,
)
from app.services import notifications
from app.services.notifications import LogNotifier, Notifier
from app.services.program_stats import weeks_in

logger = get_logger(__name__)

GATEWAY_ERRORS = (DomainError, SchemaError)


def optimistic_program(data: CreateProgram) -> Program:
    """Placeholder shown in the list while a create request is in flight."""
    now = utcnow()
    return Program(
        id=new_temp_id(),
        name=data.name,
        description=data.description or "",
        gym_id=data.gym_id or None,
        is_template=bool(data.is_template),
        blocks=list(data.blocks or []),
        duration_weeks=0,
        version=1,
        created_at=now,
        updated_at=now,
    )


def apply_update(program: Program, data: UpdateProgram) -> Program:
    """Merge the provided fields of ``data`` into ``program`` and bump its version."""
    changes: dict[str, Any] = {}
    if data.name:
        changes["name"] = data.name
    for field in ("description", "is_template", "gym_id", "blocks", "duration_weeks"):
        value = getattr(data, field)
        if value is not None:
            changes[field] = value
    changes["version"] = program.version + 1
    changes["updated_at"] = utcnow()
    return program.model_copy(update=changes)


class ProgramGateway:
    def __init__(
        self,
        client: WorkoutProgramsClient,
        store: ProgramStore | None = None,
        notifier: Notifier | None = None,
    ):
        self.client = client
        self.store = store or ProgramStore()
        self.notifier = notifier or LogNotifier()
        self.error: str | None = None
        self.last_saved: Program | None = None
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _serialized(self, key: str) -> AsyncIterator[None]:
        """Hold the save lock for ``key``; the entry is dropped when nobody holds or awaits it."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def is_saving(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def _succeed(self, message: str) -> None:
        if get_settings().notify_success:
            self.notifier.notify(notifications.success(message))

    def _fail(self, exc: Exception, fallback: str, **context: Any) -> None:
        message = user_message(exc, fallback)
        self.error = message
        logger.warning("program_operation_failed", error=message, error_type=type(exc).__name__, **context)
        self.notifier.notify(notifications.error(message))

    async def fetch_programs(self, params: ProgramListParams | None = None) -> bool:
        params = params or ProgramListParams(limit=get_settings().programs_page_limit)
        self.error = None
        try:
            page = await self.client.list_programs(params)
        except GATEWAY_ERRORS as e:
            self._fail(e, "Failed to fetch workout programs")
            return False

        self.store.replace_all(
            page.programs,
            PaginationState(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages,
                has_next_page=page.has_next_page,
                has_prev_page=page.has_prev_page,
            ),
        )
        return True

    async def get_program(self, program_id: str) -> Program | None:
        self.error = None
        try:
            program = await self.client.get_program(program_id)
        except GATEWAY_ERRORS as e:
            self._fail(e, "Failed to fetch workout program", program_id=program_id)
            return None
        self.store.replace(program.key, program)
        return program

    async def create(self, data: CreateProgram) -> bool:
        return await self.create_program(data) is not None

    async def create_program(self, data: CreateProgram) -> Program | None:
        """Create a program, showing a placeholder until the server answers.

        Returns the server's program, or None after a failure.
        """
        if data.blocks is not None and data.duration_weeks is None:
            data = data.model_copy(update={"duration_weeks": weeks_in(data.blocks)})

        placeholder = optimistic_program(data)
        self.store.prepend(placeholder)
        self.error = None
        logger.info("program_create_optimistic", temp_id=placeholder.key)

        try:
            created = await self.client.create_program(data)
        except GATEWAY_ERRORS as e:
            self.store.remove(placeholder.key)
            self._fail(e, "Failed to create workout program", temp_id=placeholder.key)
            return None

        if not self.store.replace(placeholder.key, created):
            self.store.prepend(created)
        self.last_saved = created
        logger.info("program_created", program_id=created.key, temp_id=placeholder.key)
        self._succeed("Workout program created successfully")
        return created

    async def update(self, program_id: str, data: UpdateProgram) -> bool:
        return await self.update_program(program_id, data) is not None

    async def update_program(self, program_id: str, data: UpdateProgram) -> Program | None:
        """
        Update a program optimistically and return the server's program.

        ``duration_weeks`` is recomputed from ``data.blocks`` when blocks are
        sent. On failure the local program is restored from a snapshot taken
        before the optimistic change and None is returned; on success it is
        replaced by the server's program, whose version wins over the local guess.
        """
        if data.blocks is not None:
            data = data.model_copy(update={"duration_weeks": weeks_in(data.blocks)})

        async with self._serialized(program_id):
            self.error = None
            snapshot = self.store.snapshot(program_id)
            if snapshot is not None:
                self.store.replace(program_id, apply_update(snapshot, data))
                logger.info("program_update_optimistic", program_id=program_id, version=snapshot.version + 1)

            try:
                updated = await self.client.update_program(program_id, data)
            except GATEWAY_ERRORS as e:
                if snapshot is not None:
                    self.store.replace(program_id, snapshot)
                    logger.info("program_update_rolled_back", program_id=program_id)
                self._fail(e, "Failed to update workout program", program_id=program_id)
                return None

            self.store.replace(program_id, updated)
            self.last_saved = updated
            self._succeed("Workout program updated successfully")
            return updated

    async def delete(self, program_id: str) -> bool:
        async with self._serialized(program_id):
            self.error = None
            removed = self.store.remove(program_id)

            try:
                await self.client.delete_program(program_id)
            except GATEWAY_ERRORS as e:
                if removed is not None:
                    self.store.restore(removed)
                self._fail(e, "Failed to delete workout program", program_id=program_id)
                return False

            self._succeed("Workout program deleted successfully")
            return True

    async def copy(self, program_id: str, data: CopyProgram) -> bool:
        """Duplicate a program on the server; the copy appears once the server returns it."""
        self.error = None
        try:
            copied = await self.client.copy_program(program_id, data)
        except GATEWAY_ERRORS as e:
            self._fail(e, "Failed to copy workout program", program_id=program_id)
            return False

        self.store.prepend(copied)
        self.last_saved = copied
        self._succeed("Workout program copied successfully")
        return True

    async def get_volume(self, program_id: str) -> VolumeReport | None:
        self.error = None
        try:
            return await self.client.get_volume(program_id)
        except GATEWAY_ERRORS as e:
            self._fail(e, "Failed to calculate volume", program_id=program_id)
            return None
