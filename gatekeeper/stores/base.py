"""Collaborator protocols consumed by the Gatekeeper core.

Records cross these boundaries as plain mappings. A store signals an
absent record by returning None; anything else that goes wrong must be
raised, normally as :class:`gatekeeper.core.exceptions.StoreFailure`.
"""

from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable


Record = Mapping[str, Any]


@runtime_checkable
class Store(Protocol):
    """Persistence for one resource type."""

    async def find_all(self, relations: Optional[Sequence[str]] = None) -> Optional[Sequence[dict]]:
        ...

    async def find_one(self, record_id: Any, relations: Optional[Sequence[str]] = None) -> Optional[dict]:
        ...

    async def save(self, record: Record) -> dict:
        ...

    async def remove(self, record: Record) -> None:
        ...


@runtime_checkable
class RoleLookup(Protocol):
    """Read-only source of the roles (with permissions) held by an actor."""

    async def roles_for(self, actor: Any) -> Sequence[Record]:
        ...
