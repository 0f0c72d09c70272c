"""Enforcement helpers used by every mutating lifecycle operation.

Provides the ``Actor`` value passed into the core and the ``require_*``
functions that turn a negative decision into ``ForbiddenError``. The
precise reason goes to the log; the raised error carries only the
generic public message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import ForbiddenError, Reason
from .constants import Action, Resource, Role
from .hierarchy import SELF_PROTECTED_OPERATIONS, can_manage
from .table import PermissionTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation.

    Attributes:
        id: Account id of the caller.
        role: Canonical role (aliases are resolved on construction).
    """

    id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Actor id must not be empty")
        object.__setattr__(self, "role", Role.parse(self.role))

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN


def require_permission(
    table: PermissionTable,
    actor: Actor,
    action: Action | str,
    resource: Resource | str,
) -> None:
    """Raise ``ForbiddenError`` unless ``actor`` holds ``action`` on ``resource``."""
    if table.authorize(actor.role, action, resource):
        return

    action_value = getattr(action, "value", action)
    resource_value = getattr(resource, "value", resource)
    logger.warning(
        "Permission denied: %s on %s",
        action_value,
        resource_value,
        extra={"actor_id": actor.id, "actor_role": actor.role.value},
    )
    raise ForbiddenError(
        f"{action_value} on {resource_value} denied",
        reason=Reason.PERMISSION_DENIED,
        action=action_value,
        resource=resource_value,
    )


def require_management(
    actor: Actor,
    target_id: str,
    target_role: Role | str,
    operation: str,
) -> None:
    """Enforce the self-target override and the management edge.

    Order:
    1. ``delete`` / ``deactivate`` of one's own account → ``SELF_TARGET``
       (regardless of role, super_admin included)
    2. ``can_manage(actor.role, target_role)`` false → ``MANAGEMENT_DENIED``
    """
    if operation in SELF_PROTECTED_OPERATIONS and target_id == actor.id:
        logger.warning(
            "Refused %s of own account",
            operation,
            extra={"actor_id": actor.id, "actor_role": actor.role.value},
        )
        raise ForbiddenError(
            f"Cannot {operation} your own account",
            reason=Reason.SELF_TARGET,
            operation=operation,
        )

    if not can_manage(actor.role, target_role):
        target_value = getattr(target_role, "value", target_role)
        logger.warning(
            "Management denied: %s of %s account %s",
            operation,
            target_value,
            target_id,
            extra={"actor_id": actor.id, "actor_role": actor.role.value},
        )
        raise ForbiddenError(
            f"{operation} of {target_value} accounts denied",
            reason=Reason.MANAGEMENT_DENIED,
            operation=operation,
            target_role=target_value,
        )


def require_ownership(actor: Actor, owner_id: str | None, *, resource: Resource | str) -> None:
    """Per-record binding: only the record's owner (or a super_admin) may act on it."""
    if actor.is_super_admin or (owner_id is not None and owner_id == actor.id):
        return
    resource_value = getattr(resource, "value", resource)
    logger.warning(
        "Ownership check failed on %s",
        resource_value,
        extra={"actor_id": actor.id, "actor_role": actor.role.value},
    )
    raise ForbiddenError(
        f"Not the owner of this {resource_value} record",
        reason=Reason.NOT_OWNER,
        resource=resource_value,
    )


__all__ = [
    "Actor",
    "require_management",
    "require_ownership",
    "require_permission",
]
