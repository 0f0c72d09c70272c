"""Core data models for campusgate.

These are Pydantic models for the durable entities (Account, WaitlistEntry,
Department, ApprovalRequest), the inbound submissions (Application,
AdminRegistration) and the discriminated ``Outcome`` returned by the
exposed surface.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from .permissions.constants import WAITLIST_ROLES, Role

if TYPE_CHECKING:
    from .exceptions import CampusGateError
    from .interfaces import CredentialHasher

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


def normalize_email(value: str) -> str:
    """Lowercase + strip, as stored. Raises ValueError on malformed input."""
    if not isinstance(value, str):
        raise ValueError("Email must be a string")
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Please provide a valid email")
    return email


class AdminStatus(str, Enum):
    """Admin-only approval state layered on top of is_active / is_verified."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"


class WaitlistStatus(str, Enum):
    PENDING = "pending"
    DENIED = "denied"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestKind(str, Enum):
    CERTIFICATE = "certificate"
    GRADE = "grade"


class Department(BaseModel):
    """Academic department; its code feeds generated identifiers."""

    id: str = Field(default_factory=_new_id)
    code: str
    name: str = ""

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code:
            raise ValueError("Department code must not be empty")
        return code


class _RoleFields(BaseModel):
    """Role-conditional attributes shared by applications, entries and accounts."""

    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    department_id: Optional[str] = None

    # student
    semester: Optional[int] = Field(default=None, ge=1, le=8)
    admission_year: Optional[int] = Field(default=None, ge=1900, le=2200)

    # teacher
    designation: Optional[str] = None
    qualification: Optional[str] = None
    joining_date: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class _EmailKeyed(BaseModel):
    """Models keyed by a normalized email."""

    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class Application(_RoleFields, _EmailKeyed):
    """Public registration submission (plaintext credential, raw role)."""

    password: str = Field(repr=False)
    role: str


class AdminRegistration(_EmailKeyed):
    """Admin sign-up / super-admin admin creation payload."""

    password: str = Field(repr=False)
    confirm_password: Optional[str] = Field(default=None, repr=False)
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    department_id: Optional[str] = None

    @classmethod
    def from_full_name(cls, name: str, **kwargs: Any) -> AdminRegistration:
        """Split ``name`` into first/last the way the admin sign-up form does."""
        parts = name.strip().split(" ")
        first = parts[0]
        last = " ".join(parts[1:]) or parts[0]
        return cls(first_name=first, last_name=last, **kwargs)


class WaitlistEntry(_RoleFields, _EmailKeyed):
    """A provisional, unauthenticated account application."""

    id: str = Field(default_factory=_new_id)
    password_hash: str = Field(repr=False, exclude=True)
    role: Role
    status: WaitlistStatus = WaitlistStatus.PENDING
    denied_reason: Optional[str] = None
    denied_at: Optional[datetime] = None
    submitted_at: datetime = Field(default_factory=_utcnow)

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> Role:
        role = Role.parse(v)
        if role not in WAITLIST_ROLES:
            raise ValueError(f"Role {role.value!r} cannot be waitlisted")
        return role


class Account(_RoleFields, _EmailKeyed):
    """The durable, authenticated identity.

    Build with :meth:`with_plaintext_credential` when holding a raw password
    and :meth:`with_hashed_credential` when carrying over an existing digest
    (waitlist promotion). The digest is never serialized.
    """

    id: str = Field(default_factory=_new_id)
    password_hash: str = Field(repr=False, exclude=True)
    role: Role

    enrollment_number: Optional[str] = None
    batch: Optional[str] = None
    employee_id: Optional[str] = None

    is_active: bool = True
    is_verified: bool = False
    admin_status: Optional[AdminStatus] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> Role:
        return Role.parse(v)

    @model_validator(mode="before")
    @classmethod
    def default_admin_status(cls, data: Any) -> Any:
        """Unverified admins start ``pending``; everyone else ``approved``.

        An explicit ``admin_status=None`` is kept as-is.
        """
        if isinstance(data, dict) and "admin_status" not in data:
            role = data.get("role")
            try:
                is_admin = role is not None and Role.parse(role) is Role.ADMIN
            except ValueError:
                is_admin = False
            pending = is_admin and not data.get("is_verified", False)
            data = {**data, "admin_status": AdminStatus.PENDING if pending else AdminStatus.APPROVED}
        return data

    @classmethod
    def with_plaintext_credential(cls, hasher: CredentialHasher, password: str, **fields: Any) -> Account:
        """Hash ``password`` and build the account."""
        return cls(password_hash=hasher.hash(password), **fields)

    @classmethod
    def with_hashed_credential(cls, password_hash: str, **fields: Any) -> Account:
        """Store an already-hashed credential verbatim."""
        return cls(password_hash=password_hash, **fields)


class ApprovalRequest(BaseModel):
    """A lower-stakes artifact moving pending → approved | rejected.

    ``owner_id`` binds the record to the account allowed to decide it
    (the uploading teacher for grades); ``None`` means unbound.
    """

    id: str = Field(default_factory=_new_id)
    kind: RequestKind
    subject_id: str
    owner_id: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    payload: dict[str, Any] = Field(default_factory=dict)
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class WaitlistAck(BaseModel):
    """Acknowledgement returned by intake; never carries the credential."""

    id: str
    email: str
    role: Role
    status: WaitlistStatus


class LoginResult(BaseModel):
    account: Account
    session: Any = None


class Outcome(BaseModel):
    """Discriminated result returned by the exposed surface.

    ``reason`` is precise (for audit); ``message`` is what a caller may show.
    """

    ok: bool
    value: Any = None
    error_kind: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> Outcome:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: CampusGateError) -> Outcome:
        return cls(
            ok=False,
            error_kind=error.code.lower(),
            reason=error.reason.value,
            message=error.public_message,
        )


__all__ = [
    "Account",
    "AdminRegistration",
    "AdminStatus",
    "Application",
    "ApprovalRequest",
    "Department",
    "LoginResult",
    "Outcome",
    "RequestKind",
    "RequestStatus",
    "WaitlistAck",
    "WaitlistEntry",
    "WaitlistStatus",
    "normalize_email",
]
