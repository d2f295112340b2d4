"""Role management API endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import get_current_actor, get_gatekeeper
from gatekeeper.api.schemas import PermissionIn, RoleCreate, RoleUpdate
from gatekeeper.core.rbac import Actor
from gatekeeper.services import Gatekeeper, SearchResult

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=SearchResult)
async def list_roles(
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
):
    """List all roles the actor may see."""
    return await gatekeeper.roles.list(actor)


@router.get("/{role_id}")
async def get_role(
    role_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.roles.get(actor, role_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_role(
    role_data: RoleCreate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    """Create a role. A payload carrying an id is saved as an update of that id."""
    return await gatekeeper.roles.save(actor, role_data)


@router.put("/{role_id}")
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    data = role_data.model_dump(exclude_unset=True)
    data["id"] = role_id
    return await gatekeeper.roles.save(actor, data)


@router.delete("/{role_id}")
async def delete_role(
    role_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return {"deleted": await gatekeeper.roles.remove(actor, role_id)}


@router.get("/{role_id}/permissions")
async def list_role_permissions(
    role_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> List[Dict[str, Any]]:
    return await gatekeeper.roles.get_permissions(actor, role_id)


@router.post("/{role_id}/permissions", status_code=status.HTTP_201_CREATED)
async def add_role_permission(
    role_id: str,
    permission: PermissionIn,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.roles.add_permission(actor, role_id, permission)


@router.delete("/{role_id}/permissions/{permission_id}")
async def remove_role_permission(
    role_id: str,
    permission_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.roles.remove_permission(actor, role_id, permission_id)
