"""Applicant intake: public registration into the waitlist.

Only students and teachers may apply here. Administrator applications go
through :mod:`campusgate.lifecycle.escalation`.
"""

from __future__ import annotations

import logging

from ..exceptions import ConflictError, Reason, ValidationFailedError
from ..models import Application, WaitlistEntry, WaitlistStatus
from ..permissions.constants import SELF_SERVICE_ROLES, Role
from .context import LifecycleContext

logger = logging.getLogger(__name__)

REQUIRED_ROLE_FIELDS: dict[Role, tuple[str, ...]] = {
    Role.STUDENT: ("semester", "admission_year"),
    Role.TEACHER: ("designation", "qualification", "joining_date"),
}


def ensure_email_unclaimed(ctx: LifecycleContext, email: str) -> None:
    """Reject an email already held by an account or a waitlist entry.

    Raises:
        ConflictError: ``DUPLICATE_ACTIVE``, ``ALREADY_PENDING`` or
            ``PREVIOUSLY_DENIED``.
    """
    if ctx.repository.find_account_by_email(email) is not None:
        raise ConflictError("User with this email already exists", reason=Reason.DUPLICATE_ACTIVE)

    existing = ctx.repository.find_waitlist_by_email(email)
    if existing is None:
        return
    if existing.status is WaitlistStatus.DENIED:
        raise ConflictError(
            "Your previous application was denied. Please contact administrator.",
            reason=Reason.PREVIOUSLY_DENIED,
        )
    raise ConflictError(
        "Your application is already submitted and pending approval.",
        reason=Reason.ALREADY_PENDING,
    )


def resolve_applicant_role(raw_role: str) -> Role:
    """Alias-resolve and restrict to the self-service roles."""
    try:
        role = Role.parse(raw_role)
    except ValueError:
        role = None
    if role not in SELF_SERVICE_ROLES:
        raise ValidationFailedError(
            "Invalid role. Only students and teachers can register through signup.",
            reason=Reason.INVALID_ROLE,
            role=str(raw_role),
        )
    return role


def missing_role_fields(application: Application, role: Role) -> list[str]:
    return [name for name in REQUIRED_ROLE_FIELDS.get(role, ()) if getattr(application, name) in (None, "")]


def submit(ctx: LifecycleContext, application: Application) -> WaitlistEntry:
    """Accept a registration and create a ``pending`` waitlist entry.

    Checks, in order: duplicate account, existing waitlist entry, role,
    role-specific fields, department, password length. The credential is
    hashed here and nowhere else.
    """
    email = application.email
    ensure_email_unclaimed(ctx, email)

    role = resolve_applicant_role(application.role)

    missing = missing_role_fields(application, role)
    if missing:
        raise ValidationFailedError(
            f"Missing required fields for {role.value}: {', '.join(missing)}",
            reason=Reason.MISSING_ROLE_FIELDS,
            fields=missing,
        )

    if not application.department_id or ctx.repository.find_department(application.department_id) is None:
        raise ValidationFailedError(
            "Department not found.",
            reason=Reason.DEPARTMENT_NOT_FOUND,
            department_id=application.department_id,
        )

    if len(application.password) < ctx.config.min_password_length:
        raise ValidationFailedError(
            f"Password must be at least {ctx.config.min_password_length} characters long.",
            reason=Reason.INVALID_FIELD,
            field="password",
        )

    fields = application.model_dump(exclude={"email", "password", "role"})
    if role is Role.STUDENT:
        for name in REQUIRED_ROLE_FIELDS[Role.TEACHER]:
            fields[name] = None
    else:
        for name in REQUIRED_ROLE_FIELDS[Role.STUDENT]:
            fields[name] = None

    entry = WaitlistEntry(
        email=email,
        password_hash=ctx.hasher.hash(application.password),
        role=role,
        status=WaitlistStatus.PENDING,
        submitted_at=ctx.clock(),
        **fields,
    )
    # The store's unique constraint closes the window since the first check.
    created = ctx.repository.create_waitlist_entry(entry)

    logger.info(
        "New applicant waitlisted: %s (%s)",
        created.email,
        created.role.value,
        extra={"waitlist_id": created.id},
    )
    return created


__all__ = [
    "REQUIRED_ROLE_FIELDS",
    "ensure_email_unclaimed",
    "missing_role_fields",
    "resolve_applicant_role",
    "submit",
]
