"""Default role definitions for Gatekeeper.

Defines the 2 standard roles with their permission sets:
1. User - Authenticated user with basic privileges
2. Admin - Administrative user with all privileges
"""

from typing import Dict, List

from .resources import ROLE, ROLE_PERMISSION, PERMISSION, USERS, USER_ROLE, SEARCH, GOAL


def _build_permissions(*perms: tuple) -> List[dict]:
    """Build permission rows from (resource, action, attributes) tuples."""
    return [
        {"resource": resource, "action": action, "attributes": attributes}
        for resource, action, attributes in perms
    ]


# User: search and view other users without their age
USER_PERMISSIONS = _build_permissions(
    (SEARCH, "read:any", "*"),
    (USERS, "read:any", "*, !age"),
)

# Admin: full access to users, goals and role administration
ADMIN_PERMISSIONS = _build_permissions(
    (USERS, "read:any", "*"),
    (USERS, "create:any", "*"),
    (USERS, "update:any", "*"),
    (USERS, "delete:any", "*"),
    (USER_ROLE, "read:any", "*"),
    (USER_ROLE, "create:any", "*"),
    (USER_ROLE, "delete:any", "*"),
    (ROLE, "read:any", "*"),
    (ROLE, "create:any", "*"),
    (ROLE, "update:any", "*"),
    (ROLE, "delete:any", "*"),
    (ROLE_PERMISSION, "read:any", "*"),
    (ROLE_PERMISSION, "create:any", "*"),
    (ROLE_PERMISSION, "delete:any", "*"),
    (PERMISSION, "read:any", "*"),
    (PERMISSION, "create:any", "*"),
    (PERMISSION, "update:any", "*"),
    (PERMISSION, "delete:any", "*"),
    (GOAL, "read:any", "*"),
    (GOAL, "create:any", "*"),
    (GOAL, "update:any", "*"),
    (GOAL, "delete:any", "*"),
)


# Default roles configuration, keyed by role id
DEFAULT_ROLES: Dict[str, dict] = {
    "user": {
        "description": "Authenticated user with basic privileges",
        "permissions": USER_PERMISSIONS,
    },
    "admin": {
        "description": "Administrative user with all privileges",
        "permissions": ADMIN_PERMISSIONS,
    },
}


def get_default_role_permissions(role_key: str) -> List[dict]:
    """Get permissions list for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return [dict(p) for p in role["permissions"]]


def get_all_default_roles() -> Dict[str, dict]:
    """Get all default role definitions as role records."""
    return {
        key: {
            "id": key,
            "description": config["description"],
            "permissions": get_default_role_permissions(key),
        }
        for key, config in DEFAULT_ROLES.items()
    }
