"""RBAC (Role-Based Access Control) module for Gatekeeper.

Defines the permission model, attribute masks and permission resolution.
"""

from .permissions import Actor, ActorType, ActivityType, Grant, Possession
from .attributes import (
    ALLOW_ALL,
    AttributeFilter,
    AttributeMask,
    FieldDescriptor,
    FieldSchema,
    apply_mask,
    compile_mask,
    merge_masks,
)
from .resolver import AuthPermission, PermissionResolver

__all__ = [
    "Actor",
    "ActorType",
    "ActivityType",
    "Grant",
    "Possession",
    "ALLOW_ALL",
    "AttributeFilter",
    "AttributeMask",
    "FieldDescriptor",
    "FieldSchema",
    "apply_mask",
    "compile_mask",
    "merge_masks",
    "AuthPermission",
    "PermissionResolver",
]
