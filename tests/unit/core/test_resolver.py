"""Tests for permission resolution."""

import logging

import pytest

from gatekeeper.core.exceptions import MalformedRequest
from gatekeeper.core.rbac import Actor, ActivityType, Grant, Possession, PermissionResolver
from gatekeeper.core.rbac.permissions import permission_matches
from gatekeeper.stores.memory import MemoryRoleLookup, MemoryStore


def make_resolver(roles, assignments):
    permission_store = MemoryStore("permission")
    role_store = MemoryStore("role", relations={"permissions": permission_store})
    role_store.load(roles)
    return PermissionResolver(MemoryRoleLookup(role_store, assignments=assignments))


def role(role_id, *permissions):
    return {
        "id": role_id,
        "description": role_id,
        "permissions": [
            {"resource": r, "action": a, "attributes": attrs}
            for r, a, attrs in permissions
        ],
    }


BASIC_USER = {"firstName": "Basic", "lastName": "User", "age": 18}


class TestGrant:
    """Test parsing of permission action strings."""

    def test_any_and_own(self):
        assert Grant.from_string("read:any") == Grant("read", Possession.ANY)
        assert Grant.from_string("update:own") == Grant("update", Possession.OWN)

    def test_bare_verb_means_any(self):
        assert Grant.from_string("read") == Grant("read", Possession.ANY)
        assert str(Grant.from_string("READ")) == "read:any"

    @pytest.mark.parametrize("action", ["", ":any", "read:some", "read:any:extra"])
    def test_invalid_actions(self, action):
        with pytest.raises(ValueError):
            Grant.from_string(action)

    def test_own_requires_ownership(self):
        grant = Grant.from_string("read:own")
        assert not grant.allows("read", False)
        assert grant.allows("read", True)
        assert not grant.allows("update", True)

    def test_any_ignores_ownership(self):
        grant = Grant.from_string("read:any")
        assert grant.allows("read", False)
        assert grant.allows("read", True)

    def test_permission_matches_reports_malformed(self):
        row = {"resource": "users", "action": "read:some", "attributes": "*"}
        assert permission_matches(row, "users", "read", False) is None
        assert permission_matches(row, "role", "read", False) is False


class TestPermissionResolver:
    """Test PermissionResolver."""

    @pytest.mark.asyncio
    async def test_actor_without_roles_is_denied(self):
        resolver = make_resolver([role("user", ("users", "read:any", "*"))], {})
        permission = await resolver.resolve(Actor(id=99), False, "read", "users")
        assert not permission.granted
        assert permission.filter(BASIC_USER) == BASIC_USER

    @pytest.mark.asyncio
    async def test_grant_binds_attribute_mask(self):
        resolver = make_resolver([role("user", ("users", "read:any", "*, !age"))], {1: ["user"]})
        permission = await resolver.resolve(Actor(id=1), False, ActivityType.READ, "users")
        assert permission.granted
        assert permission.filter(BASIC_USER) == {"firstName": "Basic", "lastName": "User"}

    @pytest.mark.asyncio
    async def test_other_action_or_resource_is_denied(self):
        resolver = make_resolver([role("user", ("users", "read:any", "*"))], {1: ["user"]})
        assert not (await resolver.resolve(Actor(id=1), False, "update", "users")).granted
        assert not (await resolver.resolve(Actor(id=1), False, "read", "role")).granted

    @pytest.mark.asyncio
    async def test_own_grant_needs_ownership_flag(self):
        resolver = make_resolver([role("user", ("users", "update:own", "*"))], {1: ["user"]})
        assert not (await resolver.resolve(Actor(id=1), False, "update", "users")).granted
        assert (await resolver.resolve(Actor(id=1), True, "update", "users")).granted

    @pytest.mark.asyncio
    async def test_masks_from_several_roles_are_merged(self):
        resolver = make_resolver(
            [
                role("names", ("users", "read:any", "firstName")),
                role("ages", ("users", "read:any", "age")),
            ],
            {1: ["names", "ages"]},
        )
        permission = await resolver.resolve(Actor(id=1), False, "read", "users")
        assert permission.filter(BASIC_USER) == {"firstName": "Basic", "age": 18}

    @pytest.mark.asyncio
    async def test_identifiers_are_case_insensitive(self):
        resolver = make_resolver([role("user", ("Users", "Read:Any", "*"))], {1: ["user"]})
        assert (await resolver.resolve(Actor(id=1), False, "READ", "users")).granted

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action,resource", [
        ("", "users"),
        ("   ", "users"),
        ("read", ""),
        (None, "users"),
        ("read:any", "users"),
    ])
    async def test_malformed_identifiers(self, action, resource):
        resolver = make_resolver([], {})
        with pytest.raises(MalformedRequest):
            await resolver.resolve(Actor(id=1), False, action, resource)

    @pytest.mark.asyncio
    async def test_malformed_permission_rows_are_skipped(self, caplog):
        resolver = make_resolver(
            [role("user", ("users", "read:sometimes", "*"), ("users", "read:any", "!*"))],
            {1: ["user"]},
        )
        with caplog.at_level(logging.WARNING, logger="gatekeeper.core.rbac.resolver"):
            permission = await resolver.resolve(Actor(id=1), False, "read", "users")
        assert not permission.granted
        assert len(caplog.records) == 2

    @pytest.mark.asyncio
    async def test_filter_is_bound_to_resource_schema(self):
        resolver = make_resolver([role("admin", ("role", "read:any", "*"))], {1: ["admin"]})
        permission = await resolver.resolve(Actor(id=1), False, "read", "role")
        assert permission.to_dict() == {"granted": True, "attributes": "*", "schema": "role"}

    @pytest.mark.asyncio
    async def test_denied_result_serializes(self):
        resolver = make_resolver([], {})
        permission = await resolver.resolve(Actor(id=1), False, "read", "role")
        assert permission.to_dict() == {"granted": False, "attributes": "*", "schema": None}
