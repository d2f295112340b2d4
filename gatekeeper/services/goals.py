"""Goals: named conversion targets with hit and unique-user counters."""

from gatekeeper.core.rbac.resources import GOAL

from .base import ResourceHandler


class GoalHandler(ResourceHandler):
    resource = GOAL
