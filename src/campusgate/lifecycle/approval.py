"""Waitlist decisions: approval (promotion to Account) and denial.

Approval is the only path from a waitlist entry to an account. It runs
as one transaction: the entry is re-read, removed, and the account is
created in its place, so an email never exists in both tables and two
concurrent approvals of one entry produce exactly one account.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from ..exceptions import ConflictError, ForbiddenError, NotFoundError, Reason
from ..logging import get_actor_logger
from ..models import Account, AdminStatus, WaitlistEntry, WaitlistStatus
from ..notifications import notify_safely
from ..permissions.access import Actor, require_permission
from ..permissions.constants import Action, Resource, Role
from .context import LifecycleContext

# Attributes copied verbatim from the entry onto the new account.
CARRIED_FIELDS = frozenset(
    {
        "email",
        "first_name",
        "last_name",
        "phone_number",
        "department_id",
        "semester",
        "admission_year",
        "designation",
        "qualification",
        "joining_date",
    }
)


def _load_pending(ctx: LifecycleContext, waitlist_id: str) -> WaitlistEntry:
    entry = ctx.repository.find_waitlist_by_id(waitlist_id)
    if entry is None:
        raise NotFoundError("Waitlist user not found", reason=Reason.WAITLIST_NOT_FOUND, waitlist_id=waitlist_id)
    if entry.status is not WaitlistStatus.PENDING:
        raise ConflictError(
            f"Waitlist entry is already {entry.status.value}",
            reason=Reason.NOT_PENDING,
            waitlist_id=waitlist_id,
        )
    return entry


def _recheck_pending(ctx: LifecycleContext, waitlist_id: str) -> WaitlistEntry:
    """Transactional re-read; losing a race surfaces as NOT_PENDING."""
    entry = ctx.repository.find_waitlist_by_id(waitlist_id)
    if entry is None or entry.status is not WaitlistStatus.PENDING:
        raise ConflictError(
            "Waitlist entry was decided concurrently",
            reason=Reason.NOT_PENDING,
            waitlist_id=waitlist_id,
        )
    return entry


def role_identifiers(ctx: LifecycleContext, entry: WaitlistEntry) -> dict[str, Any]:
    """Derive enrollment number + batch (students) or employee id (teachers)."""
    if entry.role not in (Role.STUDENT, Role.TEACHER):
        return {}

    department = ctx.repository.find_department(entry.department_id) if entry.department_id else None
    if department is None:
        raise NotFoundError(
            "Department not found",
            reason=Reason.DEPARTMENT_NOT_FOUND,
            department_id=entry.department_id,
        )

    if entry.role is Role.STUDENT:
        year = entry.admission_year or ctx.clock().year
        return {
            "enrollment_number": ctx.identifiers.generate_enrollment_number(department.code, year),
            "batch": f"{year}-{year + ctx.config.batch_span_years}",
        }
    return {"employee_id": ctx.identifiers.generate_employee_id(department.code)}


def approve(ctx: LifecycleContext, actor: Actor, waitlist_id: str) -> Account:
    """Promote a pending waitlist entry to an active, verified account.

    Raises:
        NotFoundError: Entry or its department is missing.
        ConflictError: Entry not pending (including a lost race), or the
            email already belongs to an account.
        ForbiddenError: Actor may not update the applicant's resource.
    """
    entry = _load_pending(ctx, waitlist_id)
    require_permission(ctx.table, actor, Action.UPDATE, Resource.for_role(entry.role))

    identifiers = role_identifiers(ctx, entry)
    now = ctx.clock()

    with ctx.repository.transaction():
        current = _recheck_pending(ctx, waitlist_id)
        if ctx.repository.find_account_by_email(current.email) is not None:
            raise ConflictError("User with this email already exists", reason=Reason.DUPLICATE_ACTIVE)

        account = Account.with_hashed_credential(
            current.password_hash,
            role=current.role,
            is_active=True,
            is_verified=True,
            admin_status=AdminStatus.APPROVED,
            verified_by=actor.id,
            verified_at=now,
            created_at=now,
            **current.model_dump(include=CARRIED_FIELDS),
            **identifiers,
        )
        # Entry goes first so the email is free when the account lands.
        ctx.repository.delete_waitlist_entry(current.id)
        created = ctx.repository.create_account(account)

    get_actor_logger(__name__, actor).info(
        "Approved waitlist entry %s as %s account %s",
        waitlist_id,
        created.role.value,
        created.id,
    )
    notify_safely(ctx.notifier.notify_approval, created)
    return created


def deny(ctx: LifecycleContext, actor: Actor, waitlist_id: str, reason: Optional[str] = None) -> WaitlistEntry:
    """Mark a pending entry denied. The entry is kept and blocks reapplication."""
    entry = _load_pending(ctx, waitlist_id)
    require_permission(ctx.table, actor, Action.UPDATE, Resource.for_role(entry.role))

    text = (reason or "").strip() or ctx.config.default_denial_reason

    with ctx.repository.transaction():
        _recheck_pending(ctx, waitlist_id)
        denied = ctx.repository.update_waitlist_status(
            waitlist_id,
            WaitlistStatus.DENIED,
            reason=text,
            decided_at=ctx.clock(),
        )

    get_actor_logger(__name__, actor).warning(
        "Denied waitlist entry %s (%s)",
        waitlist_id,
        denied.role.value,
    )
    notify_safely(ctx.notifier.notify_denial, denied, text)
    return denied


def remove_waitlist_entry(ctx: LifecycleContext, actor: Actor, waitlist_id: str) -> WaitlistEntry:
    """Delete an entry outright (pending or denied), freeing its email."""
    entry = ctx.repository.find_waitlist_by_id(waitlist_id)
    if entry is None:
        raise NotFoundError("Waitlist user not found", reason=Reason.WAITLIST_NOT_FOUND, waitlist_id=waitlist_id)
    require_permission(ctx.table, actor, Action.DELETE, Resource.for_role(entry.role))

    ctx.repository.delete_waitlist_entry(waitlist_id)
    get_actor_logger(__name__, actor).info(
        "Removed waitlist entry %s (%s, %s)",
        waitlist_id,
        entry.role.value,
        entry.status.value,
    )
    return entry


def visible_roles(ctx: LifecycleContext, actor: Actor) -> list[Role]:
    """Waitlist roles whose entries ``actor`` is allowed to decide."""
    return [
        role
        for role in (Role.STUDENT, Role.TEACHER, Role.ADMIN)
        if ctx.table.authorize(actor.role, Action.UPDATE, Resource.for_role(role))
    ]


def _require_visible(ctx: LifecycleContext, actor: Actor) -> list[Role]:
    roles = visible_roles(ctx, actor)
    if not roles:
        get_actor_logger(__name__, actor).warning(
            "Waitlist access denied",
        )
        raise ForbiddenError("waitlist access denied", reason=Reason.PERMISSION_DENIED)
    return roles


def list_waitlist(
    ctx: LifecycleContext,
    actor: Actor,
    *,
    status: WaitlistStatus | str | None = None,
    role: Role | str | None = None,
) -> list[WaitlistEntry]:
    """Entries newest first, restricted to the roles ``actor`` may decide."""
    roles = _require_visible(ctx, actor)
    wanted = Role.parse(role) if role else None
    if wanted is not None and wanted not in roles:
        return []
    entries = ctx.repository.list_waitlist(status=status, role=wanted)
    return [e for e in entries if e.role in roles]


def waitlist_stats(ctx: LifecycleContext, actor: Actor) -> dict[str, dict[str, int]]:
    """Pending / denied counts per role resource, as seen by ``actor``.

    Roles the actor cannot decide are reported as zero, so an admin always
    sees ``admins: 0``.
    """
    roles = _require_visible(ctx, actor)
    counts = Counter((e.status, e.role) for e in ctx.repository.list_waitlist() if e.role in roles)

    stats: dict[str, dict[str, int]] = {}
    for status in WaitlistStatus:
        bucket = {Resource.for_role(r).value: counts[(status, r)] for r in (Role.STUDENT, Role.TEACHER, Role.ADMIN)}
        bucket["total"] = sum(bucket.values())
        stats[status.value] = bucket
    return stats


__all__ = [
    "CARRIED_FIELDS",
    "approve",
    "deny",
    "list_waitlist",
    "remove_waitlist_entry",
    "role_identifiers",
    "visible_roles",
    "waitlist_stats",
]
