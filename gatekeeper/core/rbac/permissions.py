"""Permission model for Gatekeeper RBAC.

Permissions are rows of ``(resource, action, attributes)``. The action
string is a verb optionally qualified by a possession::

    read:any   grants regardless of ownership
    read:own   grants only when the caller is the owner or a member
    read       same as read:any

The attribute string is an attribute mask specification, see
:mod:`gatekeeper.core.rbac.attributes`.
"""

from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

from gatekeeper.core.exceptions import MalformedRequest


class ActorType(str, Enum):
    """Kinds of identity an operation may be performed on behalf of."""

    APPLICATION = "Application"
    GROUP = "Group"
    ORGANIZATION = "Organization"
    PERSON = "Person"
    SERVICE = "Service"


class ActivityType(str, Enum):
    """Actions evaluated against resources and recorded in the audit trail."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ADD = "add"
    REMOVE = "remove"


class Possession(str, Enum):
    """Ownership qualifier on a granted action."""

    ANY = "any"
    OWN = "own"


class Actor(BaseModel):
    """Identity on whose behalf an operation runs."""

    model_config = ConfigDict(frozen=True)

    id: Any
    type: ActorType = ActorType.PERSON


class Grant(NamedTuple):
    """A permission row's action split into verb and possession."""
    verb: str
    possession: Possession

    def __str__(self) -> str:
        return f"{self.verb}:{self.possession.value}"

    @classmethod
    def from_string(cls, action: str) -> "Grant":
        """Parse an action string like 'read:any'."""
        parts = [p.strip() for p in str(action).split(":")]
        if len(parts) > 2 or not parts[0]:
            raise ValueError(f"Invalid action format: {action}")
        if len(parts) == 1:
            return cls(parts[0].lower(), Possession.ANY)
        return cls(parts[0].lower(), Possession(parts[1].lower()))

    def allows(self, verb: str, is_owner_or_member: bool) -> bool:
        """Check whether this grant covers ``verb`` for the given ownership."""
        if self.verb != verb:
            return False
        return self.possession is Possession.ANY or is_owner_or_member


def normalize_identifier(value: Any, kind: str) -> str:
    """Validate a resource or action identifier and return it as a string."""
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str) or not value.strip():
        raise MalformedRequest(f"{kind} identifier must be a non-empty string")
    return value.strip().lower()


def permission_matches(
    permission: Mapping[str, Any],
    resource: str,
    verb: str,
    is_owner_or_member: bool,
) -> Optional[bool]:
    """Test one permission row against a request.

    Returns None when the row's action string cannot be parsed.
    """
    if str(permission.get("resource", "")).strip().lower() != resource:
        return False
    try:
        grant = Grant.from_string(permission.get("action", ""))
    except ValueError:
        return None
    return grant.allows(verb, is_owner_or_member)
