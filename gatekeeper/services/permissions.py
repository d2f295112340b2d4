from gatekeeper.core.rbac.resources import PERMISSION

from .base import ResourceHandler


class PermissionHandler(ResourceHandler):
    """Permission rows managed on their own, outside any role."""

    resource = PERMISSION
