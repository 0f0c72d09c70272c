"""Administrative actions on existing accounts: delete, deactivate, re-role.

Each operation names a specific target, so it must pass both the
permission table (on the resource owning the target's role) and the
management edge. super_admin accounts are never deleted or re-roled.
"""

from __future__ import annotations

from ..exceptions import ConflictError, ForbiddenError, NotFoundError, Reason, ValidationFailedError
from ..logging import get_actor_logger
from ..models import Account, AdminStatus
from ..permissions.access import Actor, require_management, require_permission
from ..permissions.constants import Action, Resource, Role
from .context import LifecycleContext


def _load_target(ctx: LifecycleContext, account_id: str) -> Account:
    account = ctx.repository.find_account_by_id(account_id)
    if account is None:
        raise NotFoundError("User not found", reason=Reason.ACCOUNT_NOT_FOUND, account_id=account_id)
    return account


def _refuse_super_admin(actor: Actor, target: Account, operation: str) -> None:
    if target.role is Role.SUPER_ADMIN:
        get_actor_logger(__name__, actor).warning(
            "Refused %s of super_admin account %s",
            operation,
            target.id,
        )
        raise ForbiddenError(
            f"Cannot {operation} super admin accounts",
            reason=Reason.PROTECTED_ACCOUNT,
            operation=operation,
        )


def delete_account(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    """Hard-delete an account. Returns the removed record."""
    target = _load_target(ctx, account_id)
    require_management(actor, target.id, target.role, "delete")
    _refuse_super_admin(actor, target, "delete")
    require_permission(ctx.table, actor, Action.DELETE, Resource.for_role(target.role))

    ctx.repository.delete_account(target.id)
    get_actor_logger(__name__, actor).info(
        "Deleted %s account %s",
        target.role.value,
        target.email,
    )
    return target


def deactivate_account(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    """Soft-delete: the account stays but login reports it deactivated.

    An admin target also moves to ``admin_status=deactivated`` so that
    :func:`campusgate.lifecycle.escalation.reactivate_admin` can reverse it.
    Admins that are pending, rejected or already deactivated are refused
    with ``INVALID_STATE``.
    """
    target = _load_target(ctx, account_id)
    require_management(actor, target.id, target.role, "deactivate")
    _refuse_super_admin(actor, target, "deactivate")
    require_permission(ctx.table, actor, Action.DELETE, Resource.for_role(target.role))

    changes: dict[str, object] = {"is_active": False}
    if target.role is Role.ADMIN:
        if target.admin_status not in (AdminStatus.APPROVED, None):
            raise ConflictError(
                f"Cannot deactivate an admin whose status is {target.admin_status.value}",
                reason=Reason.INVALID_STATE,
                account_id=target.id,
            )
        changes["admin_status"] = AdminStatus.DEACTIVATED

    updated = ctx.repository.update_account_status(target.id, **changes)
    get_actor_logger(__name__, actor).info(
        "Deactivated %s account %s",
        target.role.value,
        target.email,
    )
    return updated


def change_role(ctx: LifecycleContext, actor: Actor, account_id: str, new_role: Role | str) -> Account:
    """Move an account to another role. Nobody is promoted to super_admin."""
    try:
        role = Role.parse(new_role)
    except ValueError:
        raise ValidationFailedError("Invalid role specified", reason=Reason.INVALID_ROLE, role=str(new_role))

    require_permission(ctx.table, actor, Action.UPDATE, Resource.USERS)
    target = _load_target(ctx, account_id)
    _refuse_super_admin(actor, target, "change role of")
    if role is Role.SUPER_ADMIN:
        get_actor_logger(__name__, actor).warning(
            "Refused promotion of %s to super_admin",
            target.id,
        )
        raise ForbiddenError("Cannot promote users to super admin", reason=Reason.MANAGEMENT_DENIED)
    require_management(actor, target.id, target.role, "change_role")

    updated = ctx.repository.change_account_role(target.id, role)
    get_actor_logger(__name__, actor).info(
        "Changed role of %s from %s to %s",
        target.email,
        target.role.value,
        role.value,
    )
    return updated


__all__ = [
    "change_role",
    "deactivate_account",
    "delete_account",
]
