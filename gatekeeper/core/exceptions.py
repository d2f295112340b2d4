"""Error taxonomy for Gatekeeper.

All errors propagate to the immediate caller of an operation; nothing in
the core retries or recovers locally.
"""

from typing import Any, Iterable


class GatekeeperError(Exception):
    """Base class for all errors raised by Gatekeeper."""


class AuthorizationDenied(GatekeeperError):
    """Raised when permission resolution does not grant the action."""

    def __init__(self, actor_id: Any, action: str, resource: str):
        super().__init__(
            f"Actor {actor_id} is not authorized to {action} {resource}"
        )
        self.actor_id = actor_id
        self.action = action
        self.resource = resource


class NotFound(GatekeeperError):
    """Base for store lookups that came back absent."""


class RecordNotFound(NotFound):
    """Raised when a single record id is absent from the store."""

    def __init__(self, record_id: Any):
        super().__init__(f"Record with id {record_id} not found")
        self.record_id = record_id


class RecordsNotFound(NotFound):
    """Raised when a store signals that a whole collection is absent."""

    def __init__(self, resource: str, record_ids: Iterable[Any] = ()):
        self.resource = resource
        self.record_ids = list(record_ids)
        if self.record_ids:
            ids = ", ".join(str(i) for i in self.record_ids)
            message = f"Records of {resource} with ids {ids} not found"
        else:
            message = f"Records of {resource} not found"
        super().__init__(message)


class MalformedRequest(GatekeeperError):
    """Raised for empty or invalid resource and action identifiers."""


class StoreFailure(GatekeeperError):
    """Raised by stores for failures other than an absent record."""
