"""Resource names and the filterable-field schema each one declares.

The resolver binds the schema of the requested resource into the filter
it returns, so nested entities (a role's permissions, a user's roles) are
filtered element by element.
"""

from typing import Dict

from .attributes import FieldDescriptor, FieldSchema


ROLE = "role"
ROLE_PERMISSION = "rolepermission"
PERMISSION = "permission"
USERS = "users"
USER_ROLE = "userrole"
SEARCH = "search"
GOAL = "goal"


PERMISSION_SCHEMA = FieldSchema.of(
    "permission",
    "id",
    "resource",
    "action",
    "attributes",
)

ROLE_SCHEMA = FieldSchema.of(
    "role",
    "id",
    "description",
    FieldDescriptor("permissions", PERMISSION_SCHEMA),
)

USER_SCHEMA = FieldSchema.of(
    "user",
    "id",
    "first_name",
    "last_name",
    "age",
    FieldDescriptor("roles", ROLE_SCHEMA),
)

GOAL_SCHEMA = FieldSchema.of(
    "goal",
    "id",
    "key",
    "name",
    "hits",
    "min_hits",
    "max_hits",
    "unique_users",
    "min_unique_users",
    "max_unique_users",
    "start",
    "stop",
    "deleted",
)


# Collection resources filter the members of the collection, not the parent
RESOURCE_SCHEMAS: Dict[str, FieldSchema] = {
    ROLE: ROLE_SCHEMA,
    ROLE_PERMISSION: PERMISSION_SCHEMA,
    PERMISSION: PERMISSION_SCHEMA,
    USERS: USER_SCHEMA,
    USER_ROLE: ROLE_SCHEMA,
    GOAL: GOAL_SCHEMA,
}
