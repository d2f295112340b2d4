"""SQLAlchemy-backed store and role lookup.

Rows are converted to plain dicts at the boundary. Relationships are
loaded eagerly by the models, so a record carries its related members
(and theirs) without lazy loads. Database errors are raised as
:class:`StoreFailure`; a missing row is returned as None.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.core.exceptions import StoreFailure
from gatekeeper.db.models import User

logger = logging.getLogger(__name__)


def to_record(obj: Any, relations: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Serialize a mapped object; nested members carry all of their own relations."""
    mapper = inspect(type(obj))
    record = {column.key: getattr(obj, column.key) for column in mapper.column_attrs}
    for name in relations or ():
        if name not in mapper.relationships:
            continue
        related = mapper.relationships[name].mapper
        record[name] = [
            to_record(member, list(related.relationships.keys()))
            for member in getattr(obj, name) or []
        ]
    return record


def coerce_id(model: type, record_id: Any) -> Any:
    """Convert an id to the primary key's Python type; None if it cannot be."""
    column = inspect(model).primary_key[0]
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return record_id
    if record_id is None or isinstance(record_id, python_type):
        return record_id
    try:
        return python_type(record_id)
    except (TypeError, ValueError):
        return None


class SqlStore:
    """Implementation of :class:`gatekeeper.stores.base.Store` for one model."""

    def __init__(self, session_factory: async_sessionmaker, model: type):
        self.session_factory = session_factory
        self.model = model
        self.mapper = inspect(model)

    @property
    def name(self) -> str:
        return self.model.__tablename__

    async def find_all(self, relations: Optional[Sequence[str]] = None) -> List[dict]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(self.model))
                return [to_record(obj, relations) for obj in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreFailure(f"Failed to list {self.name}: {e}") from e

    async def find_one(self, record_id: Any, relations: Optional[Sequence[str]] = None) -> Optional[dict]:
        key = coerce_id(self.model, record_id)
        if key is None:
            return None
        try:
            async with self.session_factory() as session:
                obj = await session.get(self.model, key)
                return to_record(obj, relations) if obj is not None else None
        except SQLAlchemyError as e:
            raise StoreFailure(f"Failed to load {self.name} {record_id}: {e}") from e

    async def save(self, record: Mapping[str, Any]) -> dict:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    obj = await self._upsert(session, self.model, record)
                return to_record(obj, list(self.mapper.relationships.keys()))
        except SQLAlchemyError as e:
            raise StoreFailure(f"Failed to save {self.name}: {e}") from e

    async def remove(self, record: Mapping[str, Any]) -> None:
        key = coerce_id(self.model, record.get("id"))
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    obj = await session.get(self.model, key) if key is not None else None
                    if obj is not None:
                        await session.delete(obj)
        except SQLAlchemyError as e:
            raise StoreFailure(f"Failed to remove {self.name} {record.get('id')}: {e}") from e

    async def _upsert(self, session: AsyncSession, model: type, record: Mapping[str, Any]) -> Any:
        mapper = inspect(model)
        key = coerce_id(model, record.get("id"))
        obj = await session.get(model, key) if key is not None else None
        if obj is None:
            # Start collections empty so they never need a lazy load
            obj = model(**{name: [] for name in mapper.relationships.keys()})
            session.add(obj)

        for column in mapper.column_attrs:
            if column.key in record and (column.key != "id" or record["id"] is not None):
                setattr(obj, column.key, record[column.key])

        for name, relationship in mapper.relationships.items():
            if record.get(name) is None:
                continue
            members, seen = [], set()
            for member in record[name]:
                related = await self._resolve_member(session, relationship.mapper.class_, member)
                if id(related) not in seen:
                    seen.add(id(related))
                    members.append(related)
            setattr(obj, name, members)

        await session.flush()
        return obj

    async def _resolve_member(self, session: AsyncSession, model: type, member: Mapping[str, Any]) -> Any:
        key = coerce_id(model, member.get("id"))
        if key is not None:
            existing = await session.get(model, key)
            if existing is not None:
                return existing
        return await self._upsert(session, model, member)


class SqlRoleLookup:
    """Reads an actor's roles through the users table (actor id = user id)."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def roles_for(self, actor) -> List[dict]:
        key = coerce_id(User, actor.id)
        if key is None:
            return []
        try:
            async with self.session_factory() as session:
                user = await session.get(User, key)
                if user is None:
                    return []
                return [to_record(role, ["permissions"]) for role in user.roles]
        except SQLAlchemyError as e:
            raise StoreFailure(f"Failed to load roles for actor {actor.id}: {e}") from e
