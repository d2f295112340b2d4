"""In-process store and role lookup.

Keeps records as dicts and relation members as id links into a related
store, so a relation always reflects the current state of its members.
Every read returns deep copies; callers can never mutate stored state.
"""

import copy
import itertools
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


class MemoryStore:
    """Dict-backed implementation of :class:`gatekeeper.stores.base.Store`."""

    def __init__(
        self,
        name: str,
        relations: Optional[Mapping[str, "MemoryStore"]] = None,
    ):
        """
        Initialize the store.

        Args:
            name: Name of the stored entity, used in log and error messages
            relations: Relation field name to the store holding its members
        """
        self.name = name
        self.relations = dict(relations or {})
        self._rows: Dict[str, dict] = {}
        self._links: Dict[str, Dict[str, List[Any]]] = {}
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rows)

    async def find_all(self, relations: Optional[Sequence[str]] = None) -> List[dict]:
        return [self._materialize(key, relations) for key in self._rows]

    async def find_one(self, record_id: Any, relations: Optional[Sequence[str]] = None) -> Optional[dict]:
        if record_id is None or str(record_id) not in self._rows:
            return None
        return self._materialize(str(record_id), relations)

    async def save(self, record: Mapping[str, Any]) -> dict:
        data = dict(record)
        if data.get("id") is None:
            data["id"] = self._next_id()
        key = str(data["id"])

        existing = self._rows.get(key, {})
        row = {
            k: copy.deepcopy(v)
            for k, v in {**existing, **data}.items()
            if k not in self.relations
        }
        links = self._links.get(key) or {name: [] for name in self.relations}

        for name, store in self.relations.items():
            members = data.get(name)
            if members is None:
                continue
            member_ids: List[Any] = []
            for member in members:
                member_id = member.get("id")
                if member_id is None or str(member_id) not in store._rows:
                    member_id = (await store.save(member))["id"]
                if str(member_id) not in {str(m) for m in member_ids}:
                    member_ids.append(member_id)
            links[name] = member_ids

        self._rows[key] = row
        self._links[key] = links
        return self._materialize(key, list(self.relations))

    async def remove(self, record: Mapping[str, Any]) -> None:
        key = str(record.get("id"))
        self._rows.pop(key, None)
        self._links.pop(key, None)

    def load(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Synchronously seed the store, e.g. from fixtures."""
        for record in records:
            self._insert(record)

    def _insert(self, record: Mapping[str, Any]) -> Any:
        data = dict(record)
        if data.get("id") is None:
            data["id"] = self._next_id()
        key = str(data["id"])
        self._rows[key] = {k: copy.deepcopy(v) for k, v in data.items() if k not in self.relations}
        links = {name: [] for name in self.relations}
        for name, store in self.relations.items():
            for member in data.get(name) or []:
                member_id = member.get("id")
                if member_id is None or str(member_id) not in store._rows:
                    member_id = store._insert(member)
                links[name].append(member_id)
        self._links[key] = links
        return data["id"]

    def _next_id(self) -> int:
        candidate = next(self._sequence)
        while str(candidate) in self._rows:
            candidate = next(self._sequence)
        return candidate

    def _materialize(self, key: str, relations: Optional[Sequence[str]]) -> dict:
        record = copy.deepcopy(self._rows[key])
        for name in relations or ():
            store = self.relations.get(name)
            if store is None:
                continue
            record[name] = [
                store._materialize(str(member_id), list(store.relations))
                for member_id in self._links.get(key, {}).get(name, [])
                if str(member_id) in store._rows
            ]
        return record


class MemoryRoleLookup:
    """Resolves an actor's roles from explicit assignments and/or a user store."""

    def __init__(
        self,
        role_store: MemoryStore,
        user_store: Optional[MemoryStore] = None,
        assignments: Optional[Mapping[Any, Iterable[Any]]] = None,
    ):
        self.role_store = role_store
        self.user_store = user_store
        self.assignments: Dict[str, List[Any]] = {
            str(actor_id): list(role_ids)
            for actor_id, role_ids in (assignments or {}).items()
        }

    def assign(self, actor_id: Any, role_id: Any) -> None:
        self.assignments.setdefault(str(actor_id), []).append(role_id)

    async def roles_for(self, actor) -> List[dict]:
        role_ids = list(self.assignments.get(str(actor.id), []))
        if self.user_store is not None:
            user = await self.user_store.find_one(actor.id, relations=["roles"])
            if user is not None:
                role_ids.extend(role["id"] for role in user.get("roles") or [])

        roles = []
        for role_id in dict.fromkeys(str(r) for r in role_ids):
            role = await self.role_store.find_one(role_id, relations=["permissions"])
            if role is not None:
                roles.append(role)
        return roles
