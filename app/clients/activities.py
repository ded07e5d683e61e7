"""Client for the activity template library (``/activities``)."""
from app.clients.base import ApiClient
from app.core.exceptions import ServerError
from app.schemas.program import ActivityTemplate


class ActivitiesClient(ApiClient):
    resource = "/activities"

    async def list_templates(self, search: str | None = None, limit: int | None = None) -> list[ActivityTemplate]:
        params: dict[str, str] = {}
        if search:
            params["search"] = search
        if limit:
            params["limit"] = str(limit)
        data = await self.request("GET", self.resource, params=params)
        if not isinstance(data, dict):
            raise ServerError("Malformed activity list response")
        return [ActivityTemplate.model_validate(item) for item in data.get("activities", [])]

    async def get_template(self, template_id: str) -> ActivityTemplate:
        data = await self.request("GET", f"{self.resource}/{template_id}")
        if not isinstance(data, dict):
            raise ServerError("Malformed activity response")
        return ActivityTemplate.model_validate(data.get("activity", data))
