"""Goal API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from gatekeeper.api.deps import get_current_actor, get_gatekeeper
from gatekeeper.api.schemas import GoalCreate, GoalUpdate
from gatekeeper.core.rbac import Actor
from gatekeeper.services import Gatekeeper, SearchResult

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=SearchResult)
async def list_goals(
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
):
    return await gatekeeper.goals.list(actor)


@router.get("/{goal_id}")
async def get_goal(
    goal_id: int,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return await gatekeeper.goals.get(actor, goal_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_data: GoalCreate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    """Create a goal; counters start at zero unless given."""
    return await gatekeeper.goals.save(actor, goal_data.model_dump())


@router.put("/{goal_id}")
async def update_goal(
    goal_id: int,
    goal_data: GoalUpdate,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    data = goal_data.model_dump(exclude_unset=True)
    data["id"] = goal_id
    return await gatekeeper.goals.save(actor, data)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: int,
    actor: Actor = Depends(get_current_actor),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> Dict[str, Any]:
    return {"deleted": await gatekeeper.goals.remove(actor, goal_id)}
