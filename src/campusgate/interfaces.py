"""Collaborator interfaces consumed by the lifecycle core.

The core never talks to a database, mail server or token service
directly. It depends on these protocols; ``campusgate.storage``,
``campusgate.hashing``, ``campusgate.identifiers`` and
``campusgate.notifications`` ship reference implementations.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from .models import Account, ApprovalRequest, Department, WaitlistEntry


@runtime_checkable
class Repository(Protocol):
    """Persistent store for accounts, waitlist entries and departments.

    Implementations must:
    - enforce email uniqueness across accounts *and* waitlist entries inside
      ``create_account`` / ``create_waitlist_entry`` (raise ``ConflictError``),
      not only via a preceding read;
    - make ``transaction()`` atomic: every write inside the block commits
      together or not at all, and concurrent transactions are serialized
      (or use compare-and-swap on the waitlist status).
    """

    def transaction(self) -> AbstractContextManager[Any]: ...

    # accounts
    def find_account_by_email(self, email: str) -> Optional[Account]: ...
    def find_account_by_id(self, account_id: str) -> Optional[Account]: ...
    def create_account(self, account: Account) -> Account: ...
    def update_account_status(self, account_id: str, **changes: Any) -> Account: ...
    def change_account_role(self, account_id: str, role: Any) -> Account: ...
    def delete_account(self, account_id: str) -> bool: ...
    def identifier_in_use(self, identifier: str) -> bool: ...

    # waitlist
    def find_waitlist_by_email(self, email: str) -> Optional[WaitlistEntry]: ...
    def find_waitlist_by_id(self, entry_id: str) -> Optional[WaitlistEntry]: ...
    def list_waitlist(self, *, status: Any = None, role: Any = None) -> list[WaitlistEntry]: ...
    def create_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry: ...
    def update_waitlist_status(
        self,
        entry_id: str,
        status: Any,
        *,
        reason: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> WaitlistEntry: ...
    def delete_waitlist_entry(self, entry_id: str) -> bool: ...

    # departments
    def find_department(self, department_id: str) -> Optional[Department]: ...


@runtime_checkable
class RequestStore(Protocol):
    """Store for secondary approval records (certificates, grades)."""

    def transaction(self) -> AbstractContextManager[Any]: ...
    def find_request(self, request_id: str) -> Optional[ApprovalRequest]: ...
    def save_request(self, request: ApprovalRequest) -> ApprovalRequest: ...


@runtime_checkable
class Notifier(Protocol):
    """Outbound notification delivery (fire-and-forget from the core's view)."""

    def notify_approval(self, account: Account) -> None: ...
    def notify_denial(self, entry: WaitlistEntry, reason: str) -> None: ...


@runtime_checkable
class IdentifierGenerator(Protocol):
    """Globally unique role identifiers."""

    def generate_enrollment_number(self, department_code: str, year: int) -> str: ...
    def generate_employee_id(self, department_code: str) -> str: ...


@runtime_checkable
class CredentialHasher(Protocol):
    """Password hashing primitive."""

    def hash(self, password: str) -> str: ...
    def verify(self, password: str, password_hash: str) -> bool: ...


@runtime_checkable
class SessionIssuer(Protocol):
    """Issues session artifacts (tokens) after a successful login."""

    def issue(self, account: Account) -> Any: ...


class NullSessionIssuer:
    """Issues nothing; for hosts that mint tokens themselves."""

    def issue(self, account: Account) -> Any:
        return None


def iter_protocol_violations(obj: Any, protocols: Iterable[type]) -> list[str]:
    """Names of the protocols ``obj`` does not satisfy (runtime check only)."""
    return [p.__name__ for p in protocols if not isinstance(obj, p)]


__all__ = [
    "CredentialHasher",
    "IdentifierGenerator",
    "Notifier",
    "NullSessionIssuer",
    "Repository",
    "RequestStore",
    "SessionIssuer",
    "iter_protocol_violations",
]
