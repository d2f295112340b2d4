"""Resource operation handlers.

Every operation follows the same sequence:

1. record the start time
2. resolve the permission (ownership flag false)
3. denied: raise :class:`AuthorizationDenied`, the store is never touched
4. granted: run the store operation; an absent record raises a not-found error
5. pass the result (or, for writes, the input) through the resolved filter
6. build and emit the activity record
7. return the filtered result

Nothing is emitted on a denied or failed operation.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from gatekeeper.core.audit import ActivityObject, ActivityRecord, EventChannel
from gatekeeper.core.exceptions import AuthorizationDenied, RecordNotFound, RecordsNotFound
from gatekeeper.core.rbac import Actor, ActivityType, AuthPermission, PermissionResolver
from gatekeeper.stores.base import Store

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    """Result of a list operation."""
    data: List[Dict[str, Any]]
    length: int
    total: int


class ResourceHandler:
    """Permission-gated CRUD over one resource type."""

    resource: str = ""
    relations: Tuple[str, ...] = ()

    def __init__(self, store: Store, resolver: PermissionResolver, channel: EventChannel):
        """
        Args:
            store: Persistence collaborator for this resource
            resolver: Permission resolver shared by all handlers
            channel: Process-wide audit channel
        """
        self.store = store
        self.resolver = resolver
        self.channel = channel

    async def list(self, actor: Actor) -> SearchResult:
        """List all records, filtered to the permitted attributes."""
        started = time.time()
        action = ActivityType.READ
        permission = await self._authorize(actor, action)

        records = await self.store.find_all(relations=self.relations)
        if records is None:
            raise RecordsNotFound(self.resource)

        data = permission.filter(records)
        self._emit(actor, action, started)
        return SearchResult(data=data, length=len(data), total=len(records))

    async def get(self, actor: Actor, record_id: Any) -> Dict[str, Any]:
        """Get a single record by id."""
        started = time.time()
        action = ActivityType.READ
        permission = await self._authorize(actor, action)

        record = await self.store.find_one(record_id, relations=self.relations)
        if record is None:
            raise RecordNotFound(record_id)

        self._emit(actor, action, started, object=ActivityObject(id=record.get("id"), type=self.resource))
        return permission.filter(record)

    async def save(self, actor: Actor, data: Any) -> Dict[str, Any]:
        """Create or update a record.

        The input is filtered before it reaches the store, so attributes the
        actor may not write are never persisted.
        """
        started = time.time()
        data = _as_mapping(data)
        action = ActivityType.UPDATE if data.get("id") is not None else ActivityType.CREATE
        permission = await self._authorize(actor, action)

        filtered = permission.filter(data)
        await self._check_references(filtered)
        saved = await self.store.save(filtered)

        self._emit(actor, action, started, object=ActivityObject.from_record(saved, self.resource))
        logger.info(f"Saved {self.resource} with ID {saved.get('id')} in the database")
        return permission.filter(saved)

    async def remove(self, actor: Actor, record_id: Any) -> bool:
        """Delete a record by id."""
        started = time.time()
        action = ActivityType.DELETE
        await self._authorize(actor, action)

        record = await self.store.find_one(record_id)
        if record is None:
            raise RecordNotFound(record_id)

        await self.store.remove(record)

        self._emit(actor, action, started, object=ActivityObject(id=record_id, type=self.resource))
        logger.info(f"Removed {self.resource} with ID {record_id} from the database")
        return True

    async def _check_references(self, data: Mapping[str, Any]) -> None:
        """Hook run on a filtered payload before it is saved."""

    async def _authorize(self, actor: Actor, action: ActivityType, resource: Optional[str] = None) -> AuthPermission:
        resource = resource or self.resource
        permission = await self.resolver.resolve(actor, False, action, resource)
        if not permission.granted:
            logger.warning(f"Denied {action.value} on {resource} for actor {actor.id}")
            raise AuthorizationDenied(actor.id, action.value, resource)
        return permission

    def _emit(
        self,
        actor: Actor,
        event_type: ActivityType,
        started: float,
        *,
        resource: Optional[str] = None,
        object: Optional[ActivityObject] = None,
        target: Optional[ActivityObject] = None,
    ) -> ActivityRecord:
        ended = max(time.time(), started)
        record = ActivityRecord(
            actor=actor,
            object=object,
            resource=resource or self.resource,
            target=target,
            timestamp=datetime.fromtimestamp(ended, tz=timezone.utc),
            took=int((ended - started) * 1000),
            type=event_type,
        )
        self.channel.emit(event_type, record)
        return record


class CollectionResourceHandler(ResourceHandler):
    """A resource that owns a nested collection of related entities.

    The collection is its own resource for permission purposes (e.g.
    "rolepermission"), and its filter applies to the collection members.
    """

    collection: str = ""
    collection_resource: str = ""
    item_type: str = ""

    def __init__(
        self,
        store: Store,
        resolver: PermissionResolver,
        channel: EventChannel,
        members: Optional[Store] = None,
    ):
        """
        Args:
            members: Store holding the collection's entities. Members added
                by id must already exist there.
        """
        super().__init__(store, resolver, channel)
        self.members = members

    async def _check_references(self, data: Mapping[str, Any]) -> None:
        for member in data.get(self.collection) or []:
            member_id = member.get("id")
            if member_id is not None and not await self._member_exists(member_id):
                raise RecordNotFound(member_id)

    async def _member_exists(self, member_id: Any) -> bool:
        return self.members is not None and await self.members.find_one(member_id) is not None

    async def get_related_collection(self, actor: Actor, record_id: Any) -> List[Dict[str, Any]]:
        """List the members of a record's collection."""
        started = time.time()
        action = ActivityType.READ
        permission = await self._authorize(actor, action, self.collection_resource)

        record = await self.store.find_one(record_id, relations=[self.collection])
        if record is None:
            raise RecordNotFound(record_id)

        self._emit(
            actor, action, started,
            resource=self.collection_resource,
            target=ActivityObject(id=record_id, type=self.resource),
        )
        return permission.filter(record.get(self.collection) or [])

    async def add_to_collection(self, actor: Actor, record_id: Any, item: Any) -> Dict[str, Any]:
        """Attach one related entity; an existing member is not duplicated."""
        started = time.time()
        action = ActivityType.CREATE
        permission = await self._authorize(actor, action, self.collection_resource)

        record = await self.store.find_one(record_id, relations=[self.collection])
        if record is None:
            raise RecordNotFound(record_id)

        item = permission.filter(_as_mapping(item))
        members = list(record.get(self.collection) or [])
        before = {str(m.get("id")) for m in members}
        item_id = item.get("id")
        if item_id is None:
            members.append(item)
        elif str(item_id) not in before:
            # Linking by id never creates the entity
            if not await self._member_exists(item_id):
                raise RecordNotFound(item_id)
            members.append(item)
        record[self.collection] = members
        saved = await self.store.save(record)

        if item_id is None:
            added = [m for m in saved.get(self.collection) or [] if str(m.get("id")) not in before]
            item_id = added[-1].get("id") if added else None

        self._emit(
            actor, ActivityType.ADD, started,
            resource=self.collection_resource,
            object=ActivityObject(id=item_id, type=self.item_type),
            target=ActivityObject(id=record_id, type=self.resource),
        )
        logger.info(f"Added {self.collection_resource} with ID {item_id} to {self.resource} {record_id}")
        return self._collection_view(permission, saved)

    async def remove_from_collection(self, actor: Actor, record_id: Any, item_id: Any) -> Dict[str, Any]:
        """Detach one related entity.

        Removing an id that is not a member leaves the collection unchanged,
        but the record is still saved and the removal is still audited.
        """
        started = time.time()
        action = ActivityType.DELETE
        permission = await self._authorize(actor, action, self.collection_resource)

        record = await self.store.find_one(record_id, relations=[self.collection])
        if record is None:
            raise RecordNotFound(record_id)

        record[self.collection] = [
            member for member in record.get(self.collection) or []
            if str(member.get("id")) != str(item_id)
        ]
        saved = await self.store.save(record)

        self._emit(
            actor, ActivityType.REMOVE, started,
            resource=self.collection_resource,
            object=ActivityObject(id=item_id, type=self.item_type),
            target=ActivityObject(id=record_id, type=self.resource),
        )
        logger.info(f"Removed {self.collection_resource} with ID {item_id} from {self.resource} {record_id}")
        return self._collection_view(permission, saved)

    def _collection_view(self, permission: AuthPermission, record: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "id": record.get("id"),
            self.collection: permission.filter(record.get(self.collection) or []),
        }


def _as_mapping(data: Any) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    if isinstance(data, Mapping):
        return dict(data)
    raise TypeError(f"Expected a mapping, got {type(data).__name__}")
