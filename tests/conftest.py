"""
Shared fixtures for the program editor tests.

Provides:
- ``make_program``: builds program documents with a given block/week/day shape
- ``FakeProgramApi``: in-memory stand-in for the gym API, served through
  ``httpx.MockTransport`` so no network is used
- Wired-up session, client, gateway and editor instances
"""
import json
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from app.clients.activities import ActivitiesClient
from app.clients.workout_programs import WorkoutProgramsClient
from app.repositories.program_store import ProgramStore
from app.schemas.ids import CommittedId, new_node_id, new_temp_id
from app.schemas.program import (
    ActivityTemplate,
    ActivityType,
    Program,
    ProgramActivity,
    ProgramBlock,
    ProgramDay,
    ProgramWeek,
)
from app.security.session import EditorSession
from app.services.notifications import RecordingNotifier
from app.services.program_editor import ProgramEditor
from app.services.program_gateway import ProgramGateway

BASE_URL = "http://testserver"
GYM_ID = "64b000000000000000000001"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class FakeProgramApi:
    """Minimal workout-program API keeping programs in a dict."""

    def __init__(self):
        self.programs: dict[str, dict] = {}
        self.templates: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.failures: list[tuple[int, str]] = []
        self.offline = False
        self.on_request: Callable[[httpx.Request], None] | None = None
        self._ids = count(1)

    def next_id(self) -> str:
        return f"{next(self._ids):024x}"

    def fail_next(self, status: int = 500, message: str = "Internal server error") -> None:
        self.failures.append((status, message))

    def seed(self, program: Program) -> Program:
        """Store ``program`` as if the server had created it; returns the server copy."""
        data = program.to_api()
        if program.is_draft:
            data["_id"] = self.next_id()
        data["blocks"] = self._assign_activity_ids(data.get("blocks", []))
        self.programs[data["_id"]] = data
        return Program.model_validate(data)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def _assign_activity_ids(self, blocks: list[dict]) -> list[dict]:
        for block in blocks:
            for week in block.get("weeks", []):
                for day in week.get("days", []):
                    for activity in day.get("activities", []):
                        activity.setdefault("activityId", self.next_id())
        return blocks

    @staticmethod
    def _ok(data: Any, status: int = 200) -> httpx.Response:
        return httpx.Response(status, json={"success": True, "message": "ok", "data": data})

    @staticmethod
    def _error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"success": False, "message": message})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.failures:
            return self._error(*self.failures.pop(0))

        parts = request.url.path.removeprefix("/api/").strip("/").split("/")
        body = json.loads(request.content) if request.content else {}

        if parts[0] == "activities":
            return self._ok({"activities": self.templates})
        if parts[0] != "workout-programs":
            return self._error(404, "Route not found")

        if len(parts) == 1:
            if request.method == "GET":
                return self._list(request)
            if request.method == "POST":
                return self._create(body)

        program_id = parts[1]
        existing = self.programs.get(program_id)
        if existing is None:
            return self._error(404, "Workout program not found")

        if len(parts) == 3 and parts[2] == "copy" and request.method == "POST":
            return self._copy(existing, body)
        if len(parts) == 3 and parts[2] == "volume":
            return self._ok({
                "programId": program_id,
                "programName": existing["name"],
                "blockCalculations": [
                    {
                        "blockId": block["blockId"],
                        "blockName": block["name"],
                        "volumeTargets": block.get("volumeTargets", []),
                        "actualPercentages": [{"activityGroup": "squat", "actualPercentage": 100.0}],
                    }
                    for block in existing.get("blocks", [])
                ],
            })
        if request.method == "GET":
            return self._ok({"program": existing})
        if request.method == "PUT":
            return self._update(existing, body)
        if request.method == "DELETE":
            del self.programs[program_id]
            return httpx.Response(200, json={"success": True, "message": "Workout program deleted successfully"})
        return self._error(405, "Method not allowed")

    def _list(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        limit = int(request.url.params.get("limit", "12"))
        programs = sorted(self.programs.values(), key=lambda p: p["createdAt"], reverse=True)
        if "isTemplate" in request.url.params:
            wanted = request.url.params["isTemplate"] == "true"
            programs = [p for p in programs if p.get("isTemplate", False) == wanted]
        total = len(programs)
        total_pages = (total + limit - 1) // limit
        return self._ok({
            "programs": programs[(page - 1) * limit: page * limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": total_pages,
                "hasNextPage": page < total_pages,
                "hasPrevPage": page > 1,
            },
        })

    def _create(self, body: dict) -> httpx.Response:
        if not body.get("name"):
            return self._error(400, "Program name is required")
        blocks = self._assign_activity_ids(body.get("blocks", []))
        now = _now()
        program = {
            "_id": self.next_id(),
            "name": body["name"],
            "description": body.get("description", ""),
            "gymId": body.get("gymId", GYM_ID),
            "isTemplate": body.get("isTemplate", False),
            "isActive": True,
            "blocks": blocks,
            "durationWeeks": sum(len(b.get("weeks", [])) for b in blocks),
            "version": 1,
            "createdAt": now,
            "updatedAt": now,
        }
        self.programs[program["_id"]] = program
        return self._ok({"program": program}, status=201)

    def _update(self, existing: dict, body: dict) -> httpx.Response:
        if "name" in body and not body["name"].strip():
            return self._error(400, "Program name cannot be empty")
        for key in ("name", "description", "isTemplate", "gymId"):
            if key in body:
                existing[key] = body[key]
        if "blocks" in body:
            existing["blocks"] = self._assign_activity_ids(body["blocks"])
            existing["durationWeeks"] = sum(len(b.get("weeks", [])) for b in existing["blocks"])
        existing["version"] = existing["version"] + 1
        existing["updatedAt"] = _now()
        return self._ok({"program": existing})

    def _copy(self, source: dict, body: dict) -> httpx.Response:
        if not body.get("name"):
            return self._error(400, "New program name is required")
        now = _now()
        program = json.loads(json.dumps(source))
        program.update({
            "_id": self.next_id(),
            "name": body["name"],
            "description": body.get("description", source.get("description", "")),
            "isTemplate": body.get("isTemplate", source.get("isTemplate", False)),
            "parentProgramId": {"_id": source["_id"], "name": source["name"], "version": source["version"]},
            "version": 1,
            "createdAt": now,
            "updatedAt": now,
        })
        self.programs[program["_id"]] = program
        return self._ok({"program": program}, status=201)


@pytest.fixture
def make_program():
    """
    Factory: ``make_program(days=[[2, 1], [0, 4, 1]])`` builds one block per
    inner list, one week per entry, with that many days in each week.
    """
    def _make(
        days: list[list[int]] | None = None,
        activities_per_day: int = 0,
        name: str = "Strength Cycle",
        persisted: bool = False,
        gym_id: str | None = GYM_ID,
    ) -> Program:
        blocks = []
        for b, week_days in enumerate(days or []):
            weeks = []
            for w, day_count in enumerate(week_days):
                program_days = []
                for d in range(day_count):
                    activities = [
                        ProgramActivity(
                            activity_id=CommittedId(value=new_node_id()) if persisted else new_temp_id("activity"),
                            template_id=f"tpl-{a}",
                            template_name=f"Exercise {a}",
                            order_index=a,
                            type=ActivityType.STRENGTH,
                            sets=3,
                            reps=5,
                        )
                        for a in range(activities_per_day)
                    ]
                    program_days.append(ProgramDay(
                        day_id=new_node_id(),
                        day_of_week=d + 1,
                        name=f"Day {d + 1}",
                        activities=activities,
                    ))
                weeks.append(ProgramWeek(week_id=new_node_id(), week_number=w + 1, days=program_days))
            blocks.append(ProgramBlock(block_id=new_node_id(), name=f"Block {b + 1}", order_index=b, weeks=weeks))

        program = Program(name=name, gym_id=gym_id, blocks=blocks)
        if persisted:
            program = program.model_copy(update={"id": CommittedId(value=new_node_id())})
        return program

    return _make


@pytest.fixture
def squat_template() -> ActivityTemplate:
    return ActivityTemplate.model_validate({"_id": "tpl-squat", "name": "Back Squat", "type": "primary lift"})


@pytest.fixture
def run_template() -> ActivityTemplate:
    return ActivityTemplate.model_validate({"_id": "tpl-run", "name": "400m Run", "type": "conditioning"})


def make_token(**claims: Any) -> str:
    payload = {
        "sub": "user-1",
        "userType": "coach",
        "gymId": GYM_ID,
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }
    payload.update(claims)
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def session() -> EditorSession:
    session = EditorSession()
    session.load(make_token())
    return session


@pytest.fixture
def fake_api() -> FakeProgramApi:
    return FakeProgramApi()


@pytest_asyncio.fixture
async def client(fake_api, session):
    client = WorkoutProgramsClient(session=session, base_url=BASE_URL, transport=fake_api.transport())
    yield client
    await client.close()


@pytest_asyncio.fixture
async def activities_client(fake_api, session):
    client = ActivitiesClient(session=session, base_url=BASE_URL, transport=fake_api.transport())
    yield client
    await client.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway(client, notifier) -> ProgramGateway:
    return ProgramGateway(client, ProgramStore(), notifier)


@pytest.fixture
def editor(gateway, session) -> ProgramEditor:
    return ProgramEditor(gateway, session)
