"""Pytest configuration and shared fixtures."""

import pytest

from gatekeeper.core.audit import RecordingSink
from gatekeeper.core.rbac import Actor
from gatekeeper.services import Gatekeeper


SEED_USERS = [
    {"id": 1, "first_name": "Basic", "last_name": "User", "age": 18, "roles": [{"id": "user"}]},
    {"id": 2, "first_name": "Admin", "last_name": "User", "age": 30, "roles": [{"id": "admin"}]},
]


@pytest.fixture
def sink():
    """Recording audit subscriber."""
    return RecordingSink()


@pytest.fixture
def gatekeeper(sink):
    """In-memory handlers seeded with the default roles and two users."""
    instance = Gatekeeper.in_memory(users=SEED_USERS)
    instance.channel.subscribe(sink)
    return instance


@pytest.fixture
def basic_actor():
    """Actor holding the "user" role."""
    return Actor(id=1)


@pytest.fixture
def admin_actor():
    """Actor holding the "admin" role."""
    return Actor(id=2)


@pytest.fixture
def anonymous_actor():
    """Actor without any role."""
    return Actor(id=99)
