"""Database seeding for Gatekeeper.

Creates the default roles with their permissions, and the two default
users holding them (actor ids 1 and 2).
"""

import logging
from typing import Dict

from sqlalchemy.ext.asyncio import async_sessionmaker

from gatekeeper.core.rbac.roles import DEFAULT_ROLES
from gatekeeper.db.models import Permission, Role, User

logger = logging.getLogger(__name__)


# Default users configuration, keyed by user id
DEFAULT_USERS: Dict[int, dict] = {
    1: {"first_name": "Basic", "last_name": "User", "age": 18, "roles": ["user"]},
    2: {"first_name": "Admin", "last_name": "User", "age": 30, "roles": ["admin"]},
}


async def seed_default_roles(session_factory: async_sessionmaker) -> Dict[str, Role]:
    """
    Create the default roles.

    Seeding is idempotent - roles that already exist are returned untouched.

    Args:
        session_factory: Async session factory

    Returns:
        Dict mapping role id to Role object
    """
    seeded = {}

    async with session_factory() as session:
        async with session.begin():
            for role_key, role_config in DEFAULT_ROLES.items():
                existing = await session.get(Role, role_key)
                if existing:
                    seeded[role_key] = existing
                    continue

                role = Role(
                    id=role_key,
                    description=role_config["description"],
                    permissions=[Permission(**p) for p in role_config["permissions"]],
                )
                session.add(role)
                seeded[role_key] = role
                logger.info(f"Seeded default role {role_key}")

    return seeded


async def seed_default_users(session_factory: async_sessionmaker) -> Dict[int, User]:
    """
    Create the default users. Run after :func:`seed_default_roles`.

    Seeding is idempotent - a user id that already exists is left untouched,
    and roles missing from the database are skipped with a warning.

    Returns:
        Dict mapping user id to User object
    """
    seeded = {}

    async with session_factory() as session:
        async with session.begin():
            for user_id, user_config in DEFAULT_USERS.items():
                existing = await session.get(User, user_id)
                if existing:
                    seeded[user_id] = existing
                    continue

                roles = []
                for role_id in user_config["roles"]:
                    role = await session.get(Role, role_id)
                    if role is None:
                        logger.warning(f"Default role {role_id} missing; not assigned to user {user_id}")
                        continue
                    roles.append(role)

                fields = {k: v for k, v in user_config.items() if k != "roles"}
                user = User(id=user_id, roles=roles, **fields)
                session.add(user)
                seeded[user_id] = user
                logger.info(f"Seeded default user {user_id} ({user.first_name} {user.last_name})")

    return seeded
