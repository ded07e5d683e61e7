"""HTTP clients for the gym REST API."""
from app.clients.activities import ActivitiesClient
from app.clients.base import ApiClient
from app.clients.workout_programs import WorkoutProgramsClient

__all__ = [
    "ApiClient",
    "ActivitiesClient",
    "WorkoutProgramsClient",
]
