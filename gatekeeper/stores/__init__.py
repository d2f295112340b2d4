"""Storage collaborators for Gatekeeper resource handlers."""

from .base import Store, RoleLookup
from .memory import MemoryStore, MemoryRoleLookup

__all__ = [
    "Store",
    "RoleLookup",
    "MemoryStore",
    "MemoryRoleLookup",
]
