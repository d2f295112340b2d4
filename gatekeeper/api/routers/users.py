"""User API endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import get_current_actor, get_gatekeeper
from gatekeeper.api.schemas import RoleRef, UserCreate, UserUpdate
from gatekeeper.core.rbac import Actor
from gatekeeper.services import Gatekeeper, SearchResult

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=SearchResult)
async def list_users(
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
):
    return await gatekeeper.users.list(actor)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.users.get(actor, user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    """Create a user. Listed roles must already exist."""
    return await gatekeeper.users.save(actor, user_data)


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    data = user_data.model_dump(exclude_unset=True)
    data["id"] = user_id
    return await gatekeeper.users.save(actor, data)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return {"deleted": await gatekeeper.users.remove(actor, user_id)}


@router.get("/{user_id}/roles")
async def list_user_roles(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> List[Dict[str, Any]]:
    return await gatekeeper.users.get_roles(actor, user_id)


@router.post("/{user_id}/roles", status_code=status.HTTP_201_CREATED)
async def add_user_role(
    user_id: str,
    role: RoleRef,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.users.add_role(actor, user_id, role)


@router.delete("/{user_id}/roles/{role_id}")
async def remove_user_role(
    user_id: str,
    role_id: str,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.users.remove_role(actor, user_id, role_id)
