"""Activity records emitted after authorized operations.

Records are immutable once built. Object payloads copied from stored
records have sensitive keys redacted.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.core.rbac.permissions import Actor, ActivityType


# Sensitive fields to redact from audit payloads
SENSITIVE_FIELDS = {
    "password",
    "password_hash",
    "token",
    "access_token",
    "refresh_token",
    "api_key",
    "secret",
    "client_secret",
}


def redact_sensitive(data: Any) -> Any:
    """Redact sensitive fields from data."""
    if isinstance(data, Mapping):
        return {
            k: "[REDACTED]" if str(k).lower() in SENSITIVE_FIELDS else redact_sensitive(v)
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    return data


class ActivityObject(BaseModel):
    """Reference to the object or target of an activity."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: Any = None
    type: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any], type: str) -> "ActivityObject":
        """Build an object reference carrying a redacted copy of ``record``."""
        payload = redact_sensitive(dict(record))
        payload["type"] = type
        return cls(**payload)


class ActivityRecord(BaseModel):
    """Immutable audit entry describing a completed authorized operation."""

    model_config = ConfigDict(frozen=True)

    actor: Actor
    object: Optional[ActivityObject] = None
    resource: str
    target: Optional[ActivityObject] = None
    timestamp: datetime
    took: int = Field(ge=0, description="Duration in milliseconds")
    type: ActivityType

    def __str__(self) -> str:
        return (
            f"{self.type.value} {self.resource} by "
            f"{self.actor.type.value}:{self.actor.id} took {self.took}ms"
        )
