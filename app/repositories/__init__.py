"""Repositories package."""
from app.repositories.program_store import PaginationState, ProgramStore

__all__ = [
    "PaginationState",
    "ProgramStore",
]
