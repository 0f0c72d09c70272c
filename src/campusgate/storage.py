"""In-memory reference store.

Satisfies :class:`campusgate.interfaces.Repository` and
:class:`campusgate.interfaces.RequestStore` for tests, seeding scripts and
single-process deployments. A database-backed store must keep the same
guarantees: email unique across accounts *and* waitlist, identifier
uniqueness, and all-or-nothing ``transaction()`` blocks.

Records are copied on the way in and on the way out, so callers can never
mutate stored state without going through a write method.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from .exceptions import ConflictError, NotFoundError, Reason
from .models import (
    Account,
    ApprovalRequest,
    Department,
    WaitlistEntry,
    WaitlistStatus,
)
from .permissions.constants import Role

logger = logging.getLogger(__name__)

# Fields update_account_status may touch. Role changes go through
# change_account_role; credentials are never rewritten here.
ACCOUNT_STATUS_FIELDS = frozenset(
    {
        "is_active",
        "is_verified",
        "admin_status",
        "verified_by",
        "verified_at",
        "approved_by",
        "approved_at",
        "last_login",
    }
)


class InMemoryRepository:
    """Thread-safe dictionary store with snapshot-rollback transactions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._accounts: dict[str, Account] = {}
        self._waitlist: dict[str, WaitlistEntry] = {}
        self._departments: dict[str, Department] = {}
        self._requests: dict[str, ApprovalRequest] = {}

    # ── Transactions ────────────────────────────────────

    @contextmanager
    def transaction(self) -> Iterator[InMemoryRepository]:
        """Serialize the block against every other store access.

        On any exception the store is restored to its state at entry and the
        exception propagates.
        """
        with self._lock:
            snapshot = (
                dict(self._accounts),
                dict(self._waitlist),
                dict(self._departments),
                dict(self._requests),
            )
            try:
                yield self
            except BaseException:
                self._accounts, self._waitlist, self._departments, self._requests = snapshot
                logger.debug("Transaction rolled back")
                raise

    # ── Accounts ────────────────────────────────────────

    def find_account_by_email(self, email: str) -> Optional[Account]:
        key = email.strip().lower()
        with self._lock:
            for account in self._accounts.values():
                if account.email == key:
                    return account.model_copy(deep=True)
        return None

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.model_copy(deep=True) if account else None

    def list_accounts(self, *, role: Role | str | None = None) -> list[Account]:
        wanted = Role.parse(role) if role else None
        with self._lock:
            return [
                a.model_copy(deep=True)
                for a in self._accounts.values()
                if wanted is None or a.role is wanted
            ]

    def create_account(self, account: Account) -> Account:
        with self._lock:
            self._check_email_free(account.email)
            for identifier in (account.enrollment_number, account.employee_id):
                if identifier and self.identifier_in_use(identifier):
                    raise ConflictError(
                        "Identifier already assigned",
                        reason=Reason.DUPLICATE_IDENTIFIER,
                        identifier=identifier,
                    )
            if account.id in self._accounts:
                raise ConflictError("Account id already exists", reason=Reason.DUPLICATE_ACTIVE)
            self._accounts[account.id] = account.model_copy(deep=True)
            return account.model_copy(deep=True)

    def update_account_status(self, account_id: str, **changes: Any) -> Account:
        unknown = set(changes) - ACCOUNT_STATUS_FIELDS
        if unknown:
            raise ValueError(f"Not status fields: {sorted(unknown)}")
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise NotFoundError("Account not found", reason=Reason.ACCOUNT_NOT_FOUND)
            updated = current.model_copy(update=copy.deepcopy(changes), deep=True)
            self._accounts[account_id] = updated
            return updated.model_copy(deep=True)

    def change_account_role(self, account_id: str, role: Role | str) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise NotFoundError("Account not found", reason=Reason.ACCOUNT_NOT_FOUND)
            updated = current.model_copy(update={"role": Role.parse(role)}, deep=True)
            self._accounts[account_id] = updated
            return updated.model_copy(deep=True)

    def delete_account(self, account_id: str) -> bool:
        with self._lock:
            return self._accounts.pop(account_id, None) is not None

    def identifier_in_use(self, identifier: str) -> bool:
        with self._lock:
            return any(
                identifier in (a.enrollment_number, a.employee_id) for a in self._accounts.values()
            )

    # ── Waitlist ────────────────────────────────────────

    def find_waitlist_by_email(self, email: str) -> Optional[WaitlistEntry]:
        key = email.strip().lower()
        with self._lock:
            for entry in self._waitlist.values():
                if entry.email == key:
                    return entry.model_copy(deep=True)
        return None

    def find_waitlist_by_id(self, entry_id: str) -> Optional[WaitlistEntry]:
        with self._lock:
            entry = self._waitlist.get(entry_id)
            return entry.model_copy(deep=True) if entry else None

    def list_waitlist(
        self,
        *,
        status: WaitlistStatus | str | None = None,
        role: Role | str | None = None,
    ) -> list[WaitlistEntry]:
        wanted_status = WaitlistStatus(status) if status else None
        wanted_role = Role.parse(role) if role else None
        with self._lock:
            entries = [
                e.model_copy(deep=True)
                for e in self._waitlist.values()
                if (wanted_status is None or e.status is wanted_status)
                and (wanted_role is None or e.role is wanted_role)
            ]
        return sorted(entries, key=lambda e: e.submitted_at, reverse=True)

    def create_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry:
        with self._lock:
            self._check_email_free(entry.email)
            self._waitlist[entry.id] = entry.model_copy(deep=True)
            return entry.model_copy(deep=True)

    def update_waitlist_status(
        self,
        entry_id: str,
        status: WaitlistStatus | str,
        *,
        reason: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> WaitlistEntry:
        new_status = WaitlistStatus(status)
        with self._lock:
            current = self._waitlist.get(entry_id)
            if current is None:
                raise NotFoundError("Waitlist entry not found", reason=Reason.WAITLIST_NOT_FOUND)
            changes: dict[str, Any] = {"status": new_status}
            if new_status is WaitlistStatus.DENIED:
                changes["denied_reason"] = reason
                changes["denied_at"] = decided_at or datetime.now(timezone.utc)
            updated = current.model_copy(update=changes, deep=True)
            self._waitlist[entry_id] = updated
            return updated.model_copy(deep=True)

    def delete_waitlist_entry(self, entry_id: str) -> bool:
        with self._lock:
            return self._waitlist.pop(entry_id, None) is not None

    # ── Departments ─────────────────────────────────────

    def add_department(self, department: Department) -> Department:
        with self._lock:
            if any(d.code == department.code for d in self._departments.values()):
                raise ConflictError("Department code already exists", reason=Reason.DUPLICATE_IDENTIFIER)
            self._departments[department.id] = department.model_copy(deep=True)
            return department.model_copy(deep=True)

    def find_department(self, department_id: str) -> Optional[Department]:
        with self._lock:
            department = self._departments.get(department_id)
            return department.model_copy(deep=True) if department else None

    # ── Approval requests ───────────────────────────────

    def find_request(self, request_id: str) -> Optional[ApprovalRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            return request.model_copy(deep=True) if request else None

    def save_request(self, request: ApprovalRequest) -> ApprovalRequest:
        with self._lock:
            self._requests[request.id] = request.model_copy(deep=True)
            return request.model_copy(deep=True)

    # ── Internals ───────────────────────────────────────

    def _check_email_free(self, email: str) -> None:
        """Unique constraint spanning both account and waitlist tables."""
        for account in self._accounts.values():
            if account.email == email:
                raise ConflictError(
                    "User with this email already exists",
                    reason=Reason.DUPLICATE_ACTIVE,
                )
        for entry in self._waitlist.values():
            if entry.email == email:
                reason = Reason.PREVIOUSLY_DENIED if entry.status is WaitlistStatus.DENIED else Reason.ALREADY_PENDING
                raise ConflictError(
                    "User with this email is already in waitlist",
                    reason=reason,
                )


__all__ = [
    "ACCOUNT_STATUS_FIELDS",
    "InMemoryRepository",
]
