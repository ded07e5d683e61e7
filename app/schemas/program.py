"""Workout program document and the request/response shapes of the program API."""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_serializer,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.schemas.ids import DRAFT_PROGRAM_ID, CommittedId, EntityId, PendingId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _flatten_reference(value: Any) -> Any:
    """Populated references arrive as ``{"_id": ..., "name": ...}``."""
    if isinstance(value, dict):
        return str(value.get("_id", "")) or None
    return value


Reference = Annotated[str, BeforeValidator(_flatten_reference)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_api(self) -> dict:
        """JSON body as the API expects it."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ActivityType(str, Enum):
    STRENGTH = "strength"
    CONDITIONING = "conditioning"
    DIAGNOSTIC = "diagnostic"


class VolumeTarget(ApiModel):
    activity_group: str
    target_percentage: float = Field(..., ge=0, le=100)


class ProgramActivity(ApiModel):
    activity_id: EntityId
    template_id: Reference
    template_name: str | None = None
    order_index: int = Field(default=0, ge=0)
    type: ActivityType = ActivityType.STRENGTH

    # strength
    sets: int | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    intensity_percentage: float | None = Field(default=None, ge=0, le=200)

    # conditioning
    duration: float | None = Field(default=None, ge=0)
    distance: float | None = Field(default=None, ge=0)

    rest_period: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _template_name_from_populated(cls, data: Any) -> Any:
        if isinstance(data, dict):
            template = data.get("templateId", data.get("template_id"))
            if isinstance(template, dict) and not data.get("templateName") and not data.get("template_name"):
                data = {**data, "templateName": template.get("name")}
        return data

    @field_serializer("activity_id")
    def _serialize_activity_id(self, value: PendingId | CommittedId) -> str:
        return str(value)

    @model_serializer(mode="wrap")
    def _drop_pending_id(self, handler):
        # the server assigns activity ids on first save
        data = handler(self)
        if isinstance(self.activity_id, PendingId):
            data.pop("activityId", None)
            data.pop("activity_id", None)
        return data

    @property
    def is_pending(self) -> bool:
        return isinstance(self.activity_id, PendingId)


class ProgramDay(ApiModel):
    day_id: str
    day_of_week: int = Field(..., ge=1, le=7)
    name: str
    activities: list[ProgramActivity] = Field(default_factory=list)


class ProgramWeek(ApiModel):
    week_id: str
    week_number: int = Field(..., ge=1)
    description: str = ""
    volume_targets: list[VolumeTarget] = Field(default_factory=list)
    days: list[ProgramDay] = Field(default_factory=list)


class ProgramBlock(ApiModel):
    block_id: str
    name: str
    description: str = ""
    order_index: int = Field(default=0, ge=0)
    volume_targets: list[VolumeTarget] = Field(default_factory=list)
    weeks: list[ProgramWeek] = Field(default_factory=list)


class Program(ApiModel):
    """Root aggregate; owns every block, week, day and activity below it."""

    id: EntityId = Field(default=DRAFT_PROGRAM_ID, alias="_id")
    name: str
    description: str = ""
    gym_id: Reference | None = None
    is_template: bool = False
    is_active: bool = True
    blocks: list[ProgramBlock] = Field(default_factory=list)
    duration_weeks: int = Field(default=0, ge=0)
    version: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    parent_program_id: Reference | None = None

    @field_serializer("id")
    def _serialize_id(self, value: PendingId | CommittedId) -> str:
        return str(value)

    @property
    def key(self) -> str:
        """Identity used by the local program list (temporary or real id)."""
        return str(self.id)

    @property
    def is_draft(self) -> bool:
        return isinstance(self.id, PendingId)


class CreateProgram(ApiModel):
    name: str
    description: str | None = None
    is_template: bool | None = None
    gym_id: str | None = None
    blocks: list[ProgramBlock] | None = None
    duration_weeks: int | None = None


class UpdateProgram(ApiModel):
    name: str | None = None
    description: str | None = None
    is_template: bool | None = None
    gym_id: str | None = None
    blocks: list[ProgramBlock] | None = None
    duration_weeks: int | None = None
    version: int | None = None


class CopyProgram(ApiModel):
    name: str
    description: str | None = None
    is_template: bool | None = None


class ProgramListParams(BaseModel):
    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=1, le=100)
    search: str | None = None
    is_template: bool | None = None
    gym_id: str | None = None
    sort: str | None = None

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        if self.page:
            query["page"] = str(self.page)
        if self.limit:
            query["limit"] = str(self.limit)
        if self.search:
            query["search"] = self.search
        if self.is_template is not None:
            query["isTemplate"] = "true" if self.is_template else "false"
        if self.gym_id:
            query["gymId"] = self.gym_id
        if self.sort:
            query["sort"] = self.sort
        return query


class ProgramPage(ApiModel):
    programs: list[Program]
    page: int = 1
    limit: int = 12
    total: int = 0
    total_pages: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False


class GroupPercentage(ApiModel):
    activity_group: str
    actual_percentage: float


class BlockVolume(ApiModel):
    block_id: str
    block_name: str
    volume_targets: list[VolumeTarget] = Field(default_factory=list)
    actual_percentages: list[GroupPercentage] = Field(default_factory=list)


class VolumeReport(ApiModel):
    program_id: Reference
    program_name: str
    block_calculations: list[BlockVolume] = Field(default_factory=list)


class ActivityTemplate(ApiModel):
    """Exercise definition from the activity library."""

    id: Reference = Field(..., alias="_id")
    name: str
    type: str = Field(default="primary lift", description="Template category, e.g. 'accessory lift'")
    activity_group_id: Reference | None = None
    activity_group_name: str | None = None
    description: str | None = None
    is_active: bool = True
