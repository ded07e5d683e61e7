"""Turning an activity template plus a prescription into a program activity."""
from pydantic import BaseModel, Field

from app.config.settings import get_settings
from app.core.exceptions import ValidationError
from app.schemas.ids import new_temp_id
from app.schemas.program import ActivityTemplate, ActivityType, ProgramActivity

CATEGORY_TYPES: dict[str, ActivityType] = {
    "primary lift": ActivityType.STRENGTH,
    "accessory lift": ActivityType.STRENGTH,
    "conditioning": ActivityType.CONDITIONING,
    "diagnostic": ActivityType.DIAGNOSTIC,
}


def activity_type_for(category: str | None) -> ActivityType:
    """Program activity type for a template category; unknown categories count as strength."""
    return CATEGORY_TYPES.get((category or "").strip().lower(), ActivityType.STRENGTH)


class ActivityConfig(BaseModel):
    """Prescription entered for an activity before it is added to a day."""

    sets: int | None = None
    reps: int | None = None
    intensity_percentage: float | None = Field(default=None, ge=0, le=200)
    duration: float | None = Field(default=None, ge=0)
    distance: float | None = Field(default=None, ge=0)
    rest_period: int | None = Field(default=None, ge=0)
    notes: str | None = None
    type: ActivityType | None = None


def validate_config(activity_type: ActivityType, config: ActivityConfig) -> None:
    """Raise ValidationError if the prescription cannot be committed."""
    if activity_type is ActivityType.STRENGTH:
        if not config.sets or config.sets <= 0:
            raise ValidationError("sets", "Please enter both sets and reps.", {"field": "sets", "value": config.sets})
        if not config.reps or config.reps <= 0:
            raise ValidationError("reps", "Please enter both sets and reps.", {"field": "reps", "value": config.reps})


def build_program_activity(
    template: ActivityTemplate,
    config: ActivityConfig,
    order_index: int = 0,
) -> ProgramActivity:
    """
    Validate ``config`` and build the activity to append to a day.

    The activity type is taken from the template category once, here, and
    stored; the template name is copied so later renames of the template do
    not change existing programs. Fields that do not apply to the type are
    dropped.

    Raises:
        ValidationError: strength activity without positive sets and reps
    """
    activity_type = config.type or activity_type_for(template.type)
    validate_config(activity_type, config)

    rest_period = config.rest_period
    if rest_period is None:
        rest_period = get_settings().default_rest_period

    fields: dict = {}
    if activity_type is ActivityType.STRENGTH:
        fields.update(
            sets=config.sets,
            reps=config.reps,
            intensity_percentage=config.intensity_percentage,
        )
    elif activity_type is ActivityType.CONDITIONING:
        fields.update(duration=config.duration, distance=config.distance)

    return ProgramActivity(
        activity_id=new_temp_id("activity"),
        template_id=template.id,
        template_name=template.name,
        order_index=order_index,
        type=activity_type,
        rest_period=rest_period,
        notes=config.notes,
        **fields,
    )
