"""Secondary approval workflows (certificate requests, grade publication).

Both are the same small state machine, ``pending → approved | rejected``,
parameterized by the resource gating it and by whether a record is bound
to the account that owns it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..exceptions import ConflictError, NotFoundError, Reason
from ..interfaces import RequestStore
from ..logging import get_actor_logger
from ..models import ApprovalRequest, RequestKind, RequestStatus
from ..permissions.access import Actor, require_ownership, require_permission
from ..permissions.constants import Action, Resource
from ..permissions.table import PermissionTable


class RequestWorkflow:
    """Generic pending → approved | rejected machine.

    Args:
        store: Where the request records live.
        table: Permission table consulted for every transition.
        kind: Record kind this workflow handles.
        resource: Resource the opening and deciding actions are checked on.
        bind_owner: When true, only ``record.owner_id`` (or a super_admin)
            may decide a record.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        store: RequestStore,
        table: PermissionTable,
        *,
        kind: RequestKind,
        resource: Resource,
        bind_owner: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._table = table
        self.kind = kind
        self.resource = resource
        self.bind_owner = bind_owner
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def open(
        self,
        actor: Actor,
        subject_id: str,
        *,
        payload: Optional[dict[str, Any]] = None,
    ) -> ApprovalRequest:
        """Create a pending record. Bound workflows record ``actor`` as owner."""
        require_permission(self._table, actor, Action.CREATE, self.resource)
        request = ApprovalRequest(
            kind=self.kind,
            subject_id=subject_id,
            owner_id=actor.id if self.bind_owner else None,
            payload=dict(payload or {}),
            created_at=self._clock(),
        )
        saved = self._store.save_request(request)
        get_actor_logger(__name__, actor).info(
            "Opened %s request %s for %s",
            self.kind.value,
            saved.id,
            subject_id,
        )
        return saved

    def approve(self, actor: Actor, request_id: str, remarks: Optional[str] = None) -> ApprovalRequest:
        return self._decide(actor, request_id, RequestStatus.APPROVED, remarks=remarks)

    def reject(self, actor: Actor, request_id: str, reason: Optional[str] = None) -> ApprovalRequest:
        return self._decide(actor, request_id, RequestStatus.REJECTED, rejection_reason=reason)

    def _load_pending(self, request_id: str) -> ApprovalRequest:
        request = self._store.find_request(request_id)
        if request is None or request.kind is not self.kind:
            raise NotFoundError(
                f"{self.kind.value.capitalize()} request not found",
                reason=Reason.REQUEST_NOT_FOUND,
                request_id=request_id,
            )
        if request.status is not RequestStatus.PENDING:
            raise ConflictError(
                f"{self.kind.value.capitalize()} request is already {request.status.value}",
                reason=Reason.NOT_PENDING,
                request_id=request_id,
            )
        return request

    def _decide(self, actor: Actor, request_id: str, status: RequestStatus, **notes: Optional[str]) -> ApprovalRequest:
        request = self._load_pending(request_id)
        require_permission(self._table, actor, Action.UPDATE, self.resource)
        if self.bind_owner:
            require_ownership(actor, request.owner_id, resource=self.resource)

        with self._store.transaction():
            current = self._load_pending(request_id)
            decided = self._store.save_request(
                current.model_copy(
                    update={
                        "status": status,
                        "decided_by": actor.id,
                        "decided_at": self._clock(),
                        **notes,
                    }
                )
            )

        get_actor_logger(__name__, actor).info(
            "%s request %s %s",
            self.kind.value.capitalize(),
            request_id,
            status.value,
        )
        return decided


def certificate_workflow(store: RequestStore, table: PermissionTable, **kwargs: Any) -> RequestWorkflow:
    """Students open certificate requests; anyone with ``update`` decides."""
    return RequestWorkflow(store, table, kind=RequestKind.CERTIFICATE, resource=Resource.CERTIFICATES, **kwargs)


def grade_workflow(store: RequestStore, table: PermissionTable, **kwargs: Any) -> RequestWorkflow:
    """Only the uploading teacher (or a super_admin) may publish a grade."""
    return RequestWorkflow(store, table, kind=RequestKind.GRADE, resource=Resource.GRADES, bind_owner=True, **kwargs)


__all__ = [
    "RequestWorkflow",
    "certificate_workflow",
    "grade_workflow",
]
