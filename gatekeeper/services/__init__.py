"""Resource operation handlers and the container that wires them together."""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from gatekeeper.core.audit import EventChannel
from gatekeeper.core.rbac import PermissionResolver
from gatekeeper.core.rbac.roles import get_all_default_roles
from gatekeeper.stores.base import RoleLookup, Store
from gatekeeper.stores.memory import MemoryRoleLookup, MemoryStore

from .base import CollectionResourceHandler, ResourceHandler, SearchResult
from .goals import GoalHandler
from .permissions import PermissionHandler
from .roles import RoleHandler
from .users import UserHandler


@dataclass
class Gatekeeper:
    """Handlers for every resource, sharing one resolver and one audit channel."""
    channel: EventChannel
    resolver: PermissionResolver
    roles: RoleHandler
    users: UserHandler
    permissions: PermissionHandler
    goals: GoalHandler

    @classmethod
    def build(
        cls,
        *,
        role_store: Store,
        user_store: Store,
        permission_store: Store,
        goal_store: Store,
        lookup: RoleLookup,
        channel: Optional[EventChannel] = None,
    ) -> "Gatekeeper":
        channel = channel or EventChannel()
        resolver = PermissionResolver(lookup)
        return cls(
            channel=channel,
            resolver=resolver,
            roles=RoleHandler(role_store, resolver, channel, members=permission_store),
            users=UserHandler(user_store, resolver, channel, members=role_store),
            permissions=PermissionHandler(permission_store, resolver, channel),
            goals=GoalHandler(goal_store, resolver, channel),
        )

    @classmethod
    def from_sql(cls, session_factory, *, channel: Optional[EventChannel] = None) -> "Gatekeeper":
        """Build an instance backed by the SQLAlchemy stores."""
        from gatekeeper.db.models import Goal, Permission, Role, User
        from gatekeeper.stores.sql import SqlRoleLookup, SqlStore

        return cls.build(
            role_store=SqlStore(session_factory, Role),
            user_store=SqlStore(session_factory, User),
            permission_store=SqlStore(session_factory, Permission),
            goal_store=SqlStore(session_factory, Goal),
            lookup=SqlRoleLookup(session_factory),
            channel=channel,
        )

    @classmethod
    def in_memory(
        cls,
        *,
        roles: Optional[Iterable[Mapping[str, Any]]] = None,
        users: Iterable[Mapping[str, Any]] = (),
        goals: Iterable[Mapping[str, Any]] = (),
        assignments: Optional[Mapping[Any, Iterable[Any]]] = None,
        channel: Optional[EventChannel] = None,
    ) -> "Gatekeeper":
        """Build a fully in-process instance, seeded with the default roles unless given."""
        permission_store = MemoryStore("permission")
        role_store = MemoryStore("role", relations={"permissions": permission_store})
        user_store = MemoryStore("user", relations={"roles": role_store})
        goal_store = MemoryStore("goal")

        role_store.load(get_all_default_roles().values() if roles is None else roles)
        user_store.load(users)
        goal_store.load(goals)

        return cls.build(
            role_store=role_store,
            user_store=user_store,
            permission_store=permission_store,
            goal_store=goal_store,
            lookup=MemoryRoleLookup(role_store, user_store=user_store, assignments=assignments),
            channel=channel,
        )


__all__ = [
    "Gatekeeper",
    "ResourceHandler",
    "CollectionResourceHandler",
    "SearchResult",
    "RoleHandler",
    "UserHandler",
    "PermissionHandler",
    "GoalHandler",
]
