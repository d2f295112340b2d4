"""Role administration: roles and the permissions attached to them."""

from typing import Any, Dict, List

from gatekeeper.core.rbac import Actor
from gatekeeper.core.rbac.resources import ROLE, ROLE_PERMISSION

from .base import CollectionResourceHandler


class RoleHandler(CollectionResourceHandler):
    """Handles CRUD operations on roles and their permission sets."""

    resource = ROLE
    relations = ("permissions",)
    collection = "permissions"
    collection_resource = ROLE_PERMISSION
    item_type = "permission"

    async def get_permissions(self, actor: Actor, role_id: Any) -> List[Dict[str, Any]]:
        return await self.get_related_collection(actor, role_id)

    async def add_permission(self, actor: Actor, role_id: Any, permission: Any) -> Dict[str, Any]:
        return await self.add_to_collection(actor, role_id, permission)

    async def remove_permission(self, actor: Actor, role_id: Any, permission_id: Any) -> Dict[str, Any]:
        return await self.remove_from_collection(actor, role_id, permission_id)
