"""Client for the ``/workout-programs`` endpoints."""
from typing import Any

from app.clients.base import ApiClient
from app.config.settings import get_settings
from app.core.exceptions import ServerError
from app.schemas.program import (
    CopyProgram,
    CreateProgram,
    Program,
    ProgramListParams,
    ProgramPage,
    UpdateProgram,
    VolumeReport,
)


class WorkoutProgramsClient(ApiClient):
    resource = "/workout-programs"

    async def list_programs(self, params: ProgramListParams | None = None) -> ProgramPage:
        params = params or ProgramListParams()
        data = await self.request("GET", self.resource, params=params.to_query())
        if not isinstance(data, dict):
            raise ServerError("Malformed program list response")
        pagination = dict(data.get("pagination") or {})
        pagination.setdefault("limit", params.limit or get_settings().programs_page_limit)
        return ProgramPage.model_validate({"programs": data.get("programs", []), **pagination})

    async def get_program(self, program_id: str) -> Program:
        data = await self.request("GET", f"{self.resource}/{program_id}")
        return _program(data)

    async def create_program(self, data: CreateProgram) -> Program:
        result = await self.request("POST", self.resource, json=data.to_api())
        return _program(result)

    async def update_program(self, program_id: str, data: UpdateProgram) -> Program:
        result = await self.request("PUT", f"{self.resource}/{program_id}", json=data.to_api())
        return _program(result)

    async def delete_program(self, program_id: str) -> None:
        await self.request("DELETE", f"{self.resource}/{program_id}")

    async def copy_program(self, program_id: str, data: CopyProgram) -> Program:
        result = await self.request("POST", f"{self.resource}/{program_id}/copy", json=data.to_api())
        return _program(result)

    async def get_volume(self, program_id: str) -> VolumeReport:
        data = await self.request("GET", f"{self.resource}/{program_id}/volume")
        return VolumeReport.model_validate(data)


def _program(data: Any) -> Program:
    if not isinstance(data, dict) or "program" not in data:
        raise ServerError("Malformed program response")
    return Program.model_validate(data["program"])
