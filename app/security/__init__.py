"""Session state for authenticated API access."""
from .session import EditorSession, UserRole

__all__ = [
    "EditorSession",
    "UserRole",
]
