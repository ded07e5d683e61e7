import random
import string
import time
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field


class PendingId(BaseModel):
    """Client-side placeholder for an entity the server has not assigned yet."""
    kind: Literal["pending"] = "pending"
    temp_id: str = Field(..., description="Temporary identifier, never sent to the server")

    def __str__(self) -> str:
        return self.temp_id


class CommittedId(BaseModel):
    """Server-assigned identifier."""
    kind: Literal["committed"] = "committed"
    value: str = Field(..., description="Server identifier")

    def __str__(self) -> str:
        return self.value


def _coerce_entity_id(value: Any) -> Any:
    # The API only ever hands out real ids, as bare strings or populated documents.
    if isinstance(value, str):
        return CommittedId(value=value)
    if isinstance(value, dict) and "kind" not in value and "_id" in value:
        return CommittedId(value=str(value["_id"]))
    return value


EntityId = Annotated[
    Union[PendingId, CommittedId],
    Field(discriminator="kind"),
    BeforeValidator(_coerce_entity_id),
]

DRAFT_PROGRAM_ID = PendingId(temp_id="new")


def new_temp_id(prefix: str = "temp") -> PendingId:
    """Build a temporary id such as ``temp_1718000000000_k3j9x0a1b``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return PendingId(temp_id=f"{prefix}_{int(time.time() * 1000)}_{suffix}")


def new_node_id() -> str:
    """24 hex digits, the same shape as the server's document ids."""
    return uuid.uuid4().hex[:24]


def is_pending(value: PendingId | CommittedId | None) -> bool:
    return isinstance(value, PendingId)
