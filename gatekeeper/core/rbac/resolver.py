"""Permission resolution for Gatekeeper.

Decides whether an actor may perform an action on a resource and, when it
may, hands back the attribute filter that every read or write of that
resource's data must pass through.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from gatekeeper.core.exceptions import MalformedRequest
from gatekeeper.stores.base import RoleLookup

from .attributes import ALLOW_ALL, AttributeFilter, AttributeMask, FieldSchema, compile_mask, merge_masks
from .permissions import Actor, ActivityType, normalize_identifier, permission_matches
from .resources import RESOURCE_SCHEMAS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthPermission:
    """Outcome of a permission resolution.

    ``filter`` is the only sanctioned way to expose or persist resource
    data; a denied result carries the identity filter.
    """
    granted: bool
    attribute_filter: AttributeFilter = field(default_factory=AttributeFilter)

    @property
    def mask(self) -> AttributeMask:
        return self.attribute_filter.mask

    def filter(self, data: Any) -> Any:
        return self.attribute_filter.apply(data)

    def to_dict(self) -> Dict[str, Any]:
        return {"granted": self.granted, **self.attribute_filter.to_dict()}


DENIED = AuthPermission(granted=False)


class PermissionResolver:
    """Resolves grants from the roles an actor currently holds."""

    def __init__(
        self,
        lookup: RoleLookup,
        schemas: Optional[Mapping[str, FieldSchema]] = None,
    ):
        """
        Initialize the resolver.

        Args:
            lookup: Collaborator returning the roles held by an actor
            schemas: Resource name to field schema; defaults to the built-in resources
        """
        self.lookup = lookup
        self.schemas = dict(RESOURCE_SCHEMAS if schemas is None else schemas)

    async def resolve(
        self,
        actor: Actor,
        is_owner_or_member: bool,
        action: Union[str, ActivityType],
        resource: str,
    ) -> AuthPermission:
        """
        Resolve the grant for ``action`` on ``resource``.

        Raises:
            MalformedRequest: if the action or resource identifier is empty
        """
        verb = normalize_identifier(action, "action")
        resource = normalize_identifier(resource, "resource")
        if ":" in verb:
            raise MalformedRequest(f"Action must be a bare verb, got {verb!r}")

        roles = await self.lookup.roles_for(actor) or []

        masks = []
        for role in roles:
            for permission in role.get("permissions") or []:
                matched = permission_matches(permission, resource, verb, is_owner_or_member)
                if matched is None:
                    logger.warning(
                        f"Skipping permission with malformed action {permission.get('action')!r} "
                        f"on role {role.get('id')}"
                    )
                    continue
                if not matched:
                    continue
                try:
                    masks.append(compile_mask(permission.get("attributes")))
                except ValueError as e:
                    logger.warning(f"Skipping permission on role {role.get('id')}: {e}")

        if not masks:
            logger.debug(f"No grant for {actor.id} to {verb} {resource}")
            return DENIED

        return AuthPermission(
            granted=True,
            attribute_filter=AttributeFilter(merge_masks(masks), self.schemas.get(resource)),
        )
