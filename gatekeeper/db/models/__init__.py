"""Database models for Gatekeeper."""

from gatekeeper.db.models.goal import Goal
from gatekeeper.db.models.permission import Permission
from gatekeeper.db.models.role import Role, role_permissions
from gatekeeper.db.models.user import User, user_roles

__all__ = [
    "Goal",
    "Permission",
    "Role",
    "role_permissions",
    "User",
    "user_roles",
]
