"""Administrator-specific flows.

Administrator accounts reach the system three ways:

- self-registration (:func:`register_admin`): an inactive ``pending``
  account awaiting a super_admin decision; never a waitlist entry;
- direct creation by a super_admin (:func:`create_admin`);
- a super_admin waitlisting a candidate (:func:`waitlist_admin`), later
  promoted through :func:`campusgate.lifecycle.approval.approve`.

Only super_admin holds any grant on ``admins``; the permission table
enforces that, not the functions here.
"""

from __future__ import annotations

import logging

from ..exceptions import NotFoundError, Reason, ValidationFailedError
from ..logging import get_actor_logger
from ..models import Account, AdminRegistration, AdminStatus, WaitlistEntry, WaitlistStatus
from ..permissions.access import Actor, require_management, require_permission
from ..permissions.constants import Action, Resource, Role
from .context import LifecycleContext
from .intake import ensure_email_unclaimed

logger = logging.getLogger(__name__)


def _check_registration(ctx: LifecycleContext, registration: AdminRegistration, *, confirm: bool) -> None:
    if confirm and registration.confirm_password != registration.password:
        raise ValidationFailedError("Passwords do not match", reason=Reason.INVALID_FIELD, field="confirm_password")
    if len(registration.password) < ctx.config.min_password_length:
        raise ValidationFailedError(
            f"Password must be at least {ctx.config.min_password_length} characters long.",
            reason=Reason.INVALID_FIELD,
            field="password",
        )
    if registration.department_id and ctx.repository.find_department(registration.department_id) is None:
        raise ValidationFailedError(
            "Department not found.",
            reason=Reason.DEPARTMENT_NOT_FOUND,
            department_id=registration.department_id,
        )


def _profile(registration: AdminRegistration) -> dict[str, object]:
    return registration.model_dump(include={"email", "first_name", "last_name", "phone_number", "department_id"})


def _load_admin(ctx: LifecycleContext, account_id: str, status: AdminStatus, label: str) -> Account:
    account = ctx.repository.find_account_by_id(account_id)
    if account is None or account.role is not Role.ADMIN or account.admin_status is not status:
        raise NotFoundError(f"{label} not found", reason=Reason.ACCOUNT_NOT_FOUND, account_id=account_id)
    return account


def register_admin(ctx: LifecycleContext, registration: AdminRegistration) -> Account:
    """Public admin sign-up: creates an inactive, unverified ``pending`` admin."""
    ensure_email_unclaimed(ctx, registration.email)
    _check_registration(ctx, registration, confirm=True)

    account = Account.with_plaintext_credential(
        ctx.hasher,
        registration.password,
        role=Role.ADMIN,
        is_active=False,
        is_verified=False,
        admin_status=AdminStatus.PENDING,
        created_at=ctx.clock(),
        **_profile(registration),
    )
    created = ctx.repository.create_account(account)
    logger.info("Admin registration received: %s", created.email, extra={"account_id": created.id})
    return created


def approve_admin_registration(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    """Activate a self-registered admin awaiting super_admin approval."""
    require_permission(ctx.table, actor, Action.UPDATE, Resource.ADMINS)
    _load_admin(ctx, account_id, AdminStatus.PENDING, "Pending admin registration")

    now = ctx.clock()
    approved = ctx.repository.update_account_status(
        account_id,
        admin_status=AdminStatus.APPROVED,
        approved_by=actor.id,
        approved_at=now,
        is_active=True,
        is_verified=True,
        verified_by=actor.id,
        verified_at=now,
    )
    get_actor_logger(__name__, actor).info(
        "Admin registration approved: %s",
        approved.email,
    )
    return approved


def reject_admin_registration(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    """Reject a self-registered admin. The record stays so login reports the rejection."""
    require_permission(ctx.table, actor, Action.UPDATE, Resource.ADMINS)
    _load_admin(ctx, account_id, AdminStatus.PENDING, "Pending admin registration")

    rejected = ctx.repository.update_account_status(
        account_id,
        admin_status=AdminStatus.REJECTED,
        is_active=False,
    )
    get_actor_logger(__name__, actor).warning(
        "Admin registration rejected: %s",
        rejected.email,
    )
    return rejected


def create_admin(ctx: LifecycleContext, actor: Actor, registration: AdminRegistration) -> Account:
    """Create an active, verified admin without any approval step."""
    require_permission(ctx.table, actor, Action.CREATE, Resource.ADMINS)
    ensure_email_unclaimed(ctx, registration.email)
    _check_registration(ctx, registration, confirm=registration.confirm_password is not None)

    now = ctx.clock()
    account = Account.with_plaintext_credential(
        ctx.hasher,
        registration.password,
        role=Role.ADMIN,
        is_active=True,
        is_verified=True,
        admin_status=AdminStatus.APPROVED,
        verified_by=actor.id,
        verified_at=now,
        approved_by=actor.id,
        approved_at=now,
        created_at=now,
        **_profile(registration),
    )
    created = ctx.repository.create_account(account)
    get_actor_logger(__name__, actor).info(
        "Admin created directly: %s",
        created.email,
    )
    return created


def waitlist_admin(ctx: LifecycleContext, actor: Actor, registration: AdminRegistration) -> WaitlistEntry:
    """Queue an admin candidate on the waitlist for a later super_admin approval."""
    require_permission(ctx.table, actor, Action.CREATE, Resource.ADMINS)
    ensure_email_unclaimed(ctx, registration.email)
    _check_registration(ctx, registration, confirm=registration.confirm_password is not None)

    entry = WaitlistEntry(
        password_hash=ctx.hasher.hash(registration.password),
        role=Role.ADMIN,
        status=WaitlistStatus.PENDING,
        submitted_at=ctx.clock(),
        **_profile(registration),
    )
    created = ctx.repository.create_waitlist_entry(entry)
    get_actor_logger(__name__, actor).info(
        "Admin candidate waitlisted: %s",
        created.email,
    )
    return created


def deactivate_admin(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    """Suspend an approved admin; login then reports the deactivation."""
    require_permission(ctx.table, actor, Action.UPDATE, Resource.ADMINS)
    require_management(actor, account_id, Role.ADMIN, "deactivate")
    _load_admin(ctx, account_id, AdminStatus.APPROVED, "Admin")

    updated = ctx.repository.update_account_status(
        account_id,
        admin_status=AdminStatus.DEACTIVATED,
        is_active=False,
    )
    get_actor_logger(__name__, actor).warning(
        "Admin deactivated: %s",
        updated.email,
    )
    return updated


def reactivate_admin(ctx: LifecycleContext, actor: Actor, account_id: str) -> Account:
    require_permission(ctx.table, actor, Action.UPDATE, Resource.ADMINS)
    require_management(actor, account_id, Role.ADMIN, "reactivate")
    _load_admin(ctx, account_id, AdminStatus.DEACTIVATED, "Deactivated admin")

    updated = ctx.repository.update_account_status(
        account_id,
        admin_status=AdminStatus.APPROVED,
        is_active=True,
    )
    get_actor_logger(__name__, actor).info(
        "Admin reactivated: %s",
        updated.email,
    )
    return updated


__all__ = [
    "approve_admin_registration",
    "create_admin",
    "deactivate_admin",
    "reactivate_admin",
    "register_admin",
    "reject_admin_registration",
    "waitlist_admin",
]
