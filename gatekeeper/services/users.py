"""User records and their role assignments."""

from typing import Any, Dict, List

from gatekeeper.core.rbac import Actor
from gatekeeper.core.rbac.resources import USERS, USER_ROLE

from .base import CollectionResourceHandler


class UserHandler(CollectionResourceHandler):
    resource = USERS
    relations = ("roles",)
    collection = "roles"
    collection_resource = USER_ROLE
    item_type = "role"

    async def get_roles(self, actor: Actor, user_id: Any) -> List[Dict[str, Any]]:
        return await self.get_related_collection(actor, user_id)

    async def add_role(self, actor: Actor, user_id: Any, role: Any) -> Dict[str, Any]:
        return await self.add_to_collection(actor, user_id, role)

    async def remove_role(self, actor: Actor, user_id: Any, role_id: Any) -> Dict[str, Any]:
        return await self.remove_from_collection(actor, user_id, role_id)
