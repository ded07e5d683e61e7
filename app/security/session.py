"""Explicit editor session: who is signed in and which gym they work in."""
from datetime import datetime, timezone
from enum import Enum

from jose import JWTError, jwt

from app.core.exceptions import AuthenticationError
from app.core.logging import add_log_context, clear_log_context, get_logger

logger = get_logger(__name__)


class UserRole(str, Enum):
    ADMIN = "admin"
    GYM_OWNER = "gym_owner"
    COACH = "coach"
    CLIENT = "client"


class EditorSession:
    """
    Session state handed to the API client and the program editor.

    Created empty, filled by ``load`` after sign-in and emptied by ``clear``
    on sign-out. The access token is only read here, never verified; the API
    is the authority on whether it is still accepted.
    """

    def __init__(self):
        self.access_token: str | None = None
        self.user_id: str | None = None
        self.role: UserRole | None = None
        self.gym_id: str | None = None
        self.expires_at: datetime | None = None

    def load(
        self,
        access_token: str,
        user_id: str | None = None,
        role: UserRole | str | None = None,
        gym_id: str | None = None,
    ) -> None:
        """Start a session from an access token; missing fields come from its claims.

        Raises:
            AuthenticationError: token is not a readable JWT
        """
        try:
            claims = jwt.get_unverified_claims(access_token)
        except JWTError as e:
            raise AuthenticationError("Invalid access token", code="AUTH_TOKEN_INVALID") from e

        exp = claims.get("exp")
        self.access_token = access_token
        self.user_id = user_id or claims.get("userId") or claims.get("sub")
        raw_role = role or claims.get("userType") or claims.get("role")
        self.role = UserRole(raw_role) if raw_role else None
        self.gym_id = gym_id or claims.get("gymId")
        self.expires_at = datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None
        add_log_context(user_id=self.user_id, gym_id=self.gym_id)
        logger.info("session_loaded", user_id=self.user_id, role=raw_role, gym_id=self.gym_id)

    def clear(self) -> None:
        clear_log_context()
        self.access_token = None
        self.user_id = None
        self.role = None
        self.gym_id = None
        self.expires_at = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None and not self.is_expired

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def auth_headers(self) -> dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}
