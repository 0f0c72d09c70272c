"""AccessService: the exposed surface of campusgate.

Wraps the lifecycle operations so that every call returns an ``Outcome``
instead of raising. ``CampusGateError`` subclasses become failure
outcomes carrying the precise reason plus the public message; anything
else is logged with its traceback and reported as ``internal``.

Usage:
    from campusgate import AccessService, Actor, InMemoryRepository

    service = AccessService(InMemoryRepository())
    outcome = service.submit({"email": "a@uni.edu", "password": "s3cret!", ...})
    if not outcome.ok:
        return outcome.message
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from . import lifecycle
from .config import GateConfig
from .exceptions import CampusGateError, ConfigurationError, Reason, ValidationFailedError
from .interfaces import (
    CredentialHasher,
    IdentifierGenerator,
    Notifier,
    Repository,
    RequestStore,
    SessionIssuer,
    iter_protocol_violations,
)
from .lifecycle.context import LifecycleContext
from .logging import safe_log_value
from .models import AdminRegistration, Application, Outcome, WaitlistAck
from .permissions.access import Actor
from .permissions.constants import Action, Resource, Role
from .permissions.hierarchy import can_manage
from .permissions.table import PermissionTable

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)

INTERNAL_MESSAGE = "An internal error occurred"


def _coerce(model: type[_M], data: _M | Mapping[str, Any]) -> _M:
    """Accept a model instance or a plain mapping; field errors become VALIDATION_FAILED."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ValidationFailedError(
            f"Invalid {model.__name__}: {', '.join(fields)}",
            reason=Reason.INVALID_FIELD,
            fields=fields,
        ) from e


class AccessService:
    """Permission engine and account lifecycle behind one facade.

    Args:
        repository: Account / waitlist / department store.
        table: Permission table (default: the university profile).
        notifier: Approval / denial notices (default: log only).
        identifiers: Enrollment number / employee id source.
        hasher: Credential hashing primitive (default: PBKDF2).
        sessions: Issues the session artifact on login.
        requests: Store for certificate / grade records. Defaults to
            ``repository`` when it also satisfies ``RequestStore``.
        config: Engine settings.
        clock: Returns the current UTC time.

    Raises:
        ConfigurationError: A collaborator does not satisfy its protocol.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        table: Optional[PermissionTable] = None,
        notifier: Optional[Notifier] = None,
        identifiers: Optional[IdentifierGenerator] = None,
        hasher: Optional[CredentialHasher] = None,
        sessions: Optional[SessionIssuer] = None,
        requests: Optional[RequestStore] = None,
        config: Optional[GateConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        collaborators: list[tuple[str, Any, tuple[type, ...]]] = [
            ("repository", repository, (Repository,)),
            ("notifier", notifier, (Notifier,)),
            ("identifiers", identifiers, (IdentifierGenerator,)),
            ("hasher", hasher, (CredentialHasher,)),
            ("sessions", sessions, (SessionIssuer,)),
            ("requests", requests, (RequestStore,)),
        ]
        for name, obj, protocols in collaborators:
            if obj is None:
                continue
            missing = iter_protocol_violations(obj, protocols)
            if missing:
                raise ConfigurationError(f"{name} does not implement {', '.join(missing)}")

        overrides = {
            key: value
            for key, value in {
                "table": table,
                "notifier": notifier,
                "identifiers": identifiers,
                "hasher": hasher,
                "sessions": sessions,
                "config": config,
                "clock": clock,
            }.items()
            if value is not None
        }
        self._ctx = LifecycleContext(repository=repository, **overrides)

        if requests is None and isinstance(repository, RequestStore):
            requests = repository
        self._certificates = (
            lifecycle.certificate_workflow(requests, self._ctx.table, clock=self._ctx.clock) if requests else None
        )
        self._grades = lifecycle.grade_workflow(requests, self._ctx.table, clock=self._ctx.clock) if requests else None

    @property
    def context(self) -> LifecycleContext:
        return self._ctx

    # ── Dispatch ────────────────────────────────────────

    def _run(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
        try:
            return Outcome.success(fn(*args, **kwargs))
        except CampusGateError as e:
            logger.info(
                "%s failed: %s (%s)",
                operation,
                e.reason.value,
                safe_log_value(e.message, limit=160),
                extra={"operation": operation, "error_code": e.code},
            )
            return Outcome.failure(e)
        except Exception:
            logger.exception("Unexpected error in %s", operation)
            return Outcome(
                ok=False,
                error_kind="internal",
                reason=Reason.INTERNAL.value,
                message=INTERNAL_MESSAGE,
            )

    def _workflow(self, kind: str) -> lifecycle.RequestWorkflow:
        workflow = self._certificates if kind == "certificate" else self._grades
        if workflow is None:
            raise ConfigurationError("No request store configured")
        return workflow

    # ── Decisions ───────────────────────────────────────

    def authorize(self, role: Role | str, action: Action | str, resource: Resource | str) -> Outcome:
        return self._run("authorize", self._ctx.table.authorize, role, action, resource)

    def can_manage(self, actor_role: Role | str, target_role: Role | str) -> Outcome:
        return self._run("can_manage", can_manage, actor_role, target_role)

    # ── Intake and waitlist ─────────────────────────────

    def submit(self, application: Application | Mapping[str, Any]) -> Outcome:
        """Public registration; the success value is a ``WaitlistAck``."""

        def _submit() -> WaitlistAck:
            entry = lifecycle.submit(self._ctx, _coerce(Application, application))
            return WaitlistAck(id=entry.id, email=entry.email, role=entry.role, status=entry.status)

        return self._run("submit", _submit)

    def approve(self, actor: Actor, waitlist_id: str) -> Outcome:
        return self._run("approve", lifecycle.approve, self._ctx, actor, waitlist_id)

    def deny(self, actor: Actor, waitlist_id: str, reason: Optional[str] = None) -> Outcome:
        return self._run("deny", lifecycle.deny, self._ctx, actor, waitlist_id, reason)

    def remove_waitlist_entry(self, actor: Actor, waitlist_id: str) -> Outcome:
        return self._run("remove_waitlist_entry", lifecycle.remove_waitlist_entry, self._ctx, actor, waitlist_id)

    def list_waitlist(self, actor: Actor, *, status: Optional[str] = None, role: Optional[str] = None) -> Outcome:
        return self._run("list_waitlist", lifecycle.list_waitlist, self._ctx, actor, status=status, role=role)

    def waitlist_stats(self, actor: Actor) -> Outcome:
        return self._run("waitlist_stats", lifecycle.waitlist_stats, self._ctx, actor)

    # ── Authentication ──────────────────────────────────

    def login(self, email: str, password: str) -> Outcome:
        return self._run("login", lifecycle.login, self._ctx, email, password)

    # ── Administrators ──────────────────────────────────

    def register_admin(self, registration: AdminRegistration | Mapping[str, Any]) -> Outcome:
        return self._run(
            "register_admin",
            lambda: lifecycle.register_admin(self._ctx, _coerce(AdminRegistration, registration)),
        )

    def approve_admin_registration(self, actor: Actor, account_id: str) -> Outcome:
        return self._run(
            "approve_admin_registration", lifecycle.approve_admin_registration, self._ctx, actor, account_id
        )

    def reject_admin_registration(self, actor: Actor, account_id: str) -> Outcome:
        return self._run(
            "reject_admin_registration", lifecycle.reject_admin_registration, self._ctx, actor, account_id
        )

    def create_admin(self, actor: Actor, registration: AdminRegistration | Mapping[str, Any]) -> Outcome:
        return self._run(
            "create_admin",
            lambda: lifecycle.create_admin(self._ctx, actor, _coerce(AdminRegistration, registration)),
        )

    def waitlist_admin(self, actor: Actor, registration: AdminRegistration | Mapping[str, Any]) -> Outcome:
        return self._run(
            "waitlist_admin",
            lambda: lifecycle.waitlist_admin(self._ctx, actor, _coerce(AdminRegistration, registration)),
        )

    def deactivate_admin(self, actor: Actor, account_id: str) -> Outcome:
        return self._run("deactivate_admin", lifecycle.deactivate_admin, self._ctx, actor, account_id)

    def reactivate_admin(self, actor: Actor, account_id: str) -> Outcome:
        return self._run("reactivate_admin", lifecycle.reactivate_admin, self._ctx, actor, account_id)

    # ── Account management ──────────────────────────────

    def delete_account(self, actor: Actor, account_id: str) -> Outcome:
        return self._run("delete_account", lifecycle.delete_account, self._ctx, actor, account_id)

    def deactivate_account(self, actor: Actor, account_id: str) -> Outcome:
        return self._run("deactivate_account", lifecycle.deactivate_account, self._ctx, actor, account_id)

    def change_role(self, actor: Actor, account_id: str, new_role: Role | str) -> Outcome:
        return self._run("change_role", lifecycle.change_role, self._ctx, actor, account_id, new_role)

    # ── Certificates and grades ─────────────────────────

    def request_certificate(self, actor: Actor, subject_id: str, payload: Optional[dict[str, Any]] = None) -> Outcome:
        return self._run(
            "request_certificate",
            lambda: self._workflow("certificate").open(actor, subject_id, payload=payload),
        )

    def approve_certificate(self, actor: Actor, request_id: str, remarks: Optional[str] = None) -> Outcome:
        return self._run(
            "approve_certificate",
            lambda: self._workflow("certificate").approve(actor, request_id, remarks),
        )

    def reject_certificate(self, actor: Actor, request_id: str, reason: Optional[str] = None) -> Outcome:
        return self._run(
            "reject_certificate",
            lambda: self._workflow("certificate").reject(actor, request_id, reason),
        )

    def submit_grade(self, actor: Actor, subject_id: str, payload: Optional[dict[str, Any]] = None) -> Outcome:
        return self._run(
            "submit_grade",
            lambda: self._workflow("grade").open(actor, subject_id, payload=payload),
        )

    def publish_grade(self, actor: Actor, request_id: str, remarks: Optional[str] = None) -> Outcome:
        return self._run(
            "publish_grade",
            lambda: self._workflow("grade").approve(actor, request_id, remarks),
        )

    def reject_grade(self, actor: Actor, request_id: str, reason: Optional[str] = None) -> Outcome:
        return self._run(
            "reject_grade",
            lambda: self._workflow("grade").reject(actor, request_id, reason),
        )


__all__ = [
    "AccessService",
    "INTERNAL_MESSAGE",
]
