"""Unified exception hierarchy for campusgate.

Every failure raised by the permission engine and the account lifecycle
derives from CampusGateError. This module provides:
- Base exception hierarchy with stable error codes
- ``Reason``: precise, audit-grade reason codes
- ErrorRegistry for protocol mapping
- gRPC status mapping for services that expose the engine over gRPC

Usage:
    from campusgate.exceptions import ConflictError, Reason

    raise ConflictError(reason=Reason.ALREADY_PENDING, email=email)

Error *codes* name the taxonomy bucket (``FORBIDDEN``, ``CONFLICT``...).
*Reasons* are precise and meant for logs; ``public_message`` is what
callers outside the core may show.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, TypeVar, cast

__all__ = [
    "Reason",
    # Base hierarchy
    "CampusGateError",
    "ConfigurationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ValidationFailedError",
    "AuthenticationRejectedError",
    "DownstreamUnavailableError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
]

logger = logging.getLogger(__name__)


class Reason(str, Enum):
    """Precise reason codes attached to every CampusGateError."""

    # Forbidden
    PERMISSION_DENIED = "permission_denied"
    MANAGEMENT_DENIED = "management_denied"
    SELF_TARGET = "self_target"
    PROTECTED_ACCOUNT = "protected_account"
    NOT_OWNER = "not_owner"

    # Not found
    ACCOUNT_NOT_FOUND = "account_not_found"
    WAITLIST_NOT_FOUND = "waitlist_not_found"
    DEPARTMENT_NOT_FOUND = "department_not_found"
    REQUEST_NOT_FOUND = "request_not_found"

    # Conflict
    DUPLICATE_ACTIVE = "duplicate_active"
    ALREADY_PENDING = "already_pending"
    PREVIOUSLY_DENIED = "previously_denied"
    NOT_PENDING = "not_pending"
    INVALID_STATE = "invalid_state"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"

    # Validation
    INVALID_ROLE = "invalid_role"
    MISSING_ROLE_FIELDS = "missing_role_fields"
    INVALID_FIELD = "invalid_field"

    # Authentication gate
    AWAITING_APPROVAL = "awaiting_approval"
    APPLICATION_DENIED = "application_denied"
    NOT_VERIFIED = "not_verified"
    AWAITING_SUPER_ADMIN_APPROVAL = "awaiting_super_admin_approval"
    REGISTRATION_REJECTED = "registration_rejected"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    INVALID_CREDENTIALS = "invalid_credentials"

    # Downstream
    IDENTIFIER_EXHAUSTED = "identifier_exhausted"

    INTERNAL = "internal"


# ---- Exception Hierarchy ----------------------------------------------------


class CampusGateError(Exception):
    """Base exception for all campusgate failures.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "FORBIDDEN").
        message: Human-readable error description (internal, may be precise).
        reason: Precise ``Reason`` for logging and audit.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"
    reason: Reason = Reason.INTERNAL

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        *,
        reason: Reason | None = None,
        **kwargs: Any,
    ) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.reason = reason or self.reason
        self.details = kwargs
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        """Message safe to show outside the core."""
        return self.message


class ConfigurationError(CampusGateError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class ForbiddenError(CampusGateError):
    """Permission table or management-edge failure."""

    code: str = "FORBIDDEN"
    message: str = "You do not have permission to perform this action"
    reason: Reason = Reason.PERMISSION_DENIED

    @property
    def public_message(self) -> str:
        return ForbiddenError.message


class NotFoundError(CampusGateError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"
    message: str = "Resource not found"
    reason: Reason = Reason.ACCOUNT_NOT_FOUND


class ConflictError(CampusGateError):
    """Duplicate email or a transition from the wrong state."""

    code: str = "CONFLICT"
    message: str = "The request conflicts with the current state"
    reason: Reason = Reason.DUPLICATE_ACTIVE


class ValidationFailedError(CampusGateError):
    """Missing or invalid role-specific fields."""

    code: str = "VALIDATION_FAILED"
    message: str = "Validation failed"
    reason: Reason = Reason.INVALID_FIELD


_AUTH_PUBLIC_MESSAGES: dict[Reason, str] = {
    Reason.AWAITING_APPROVAL: "Your account is not approved yet. Please wait for admin verification.",
    Reason.APPLICATION_DENIED: "Your account application was denied. Please contact administrator.",
    Reason.NOT_VERIFIED: "Your account is not verified. Please wait for admin approval.",
    Reason.AWAITING_SUPER_ADMIN_APPROVAL: "Your admin account is awaiting Super Admin approval.",
    Reason.REGISTRATION_REJECTED: "Your admin registration request was rejected.",
    Reason.ACCOUNT_DEACTIVATED: "Your account has been deactivated. Please contact administrator.",
    Reason.INVALID_CREDENTIALS: "Invalid credentials.",
}


class AuthenticationRejectedError(CampusGateError):
    """One of the login-gate rejections."""

    code: str = "AUTHENTICATION_REJECTED"
    message: str = "Invalid credentials."
    reason: Reason = Reason.INVALID_CREDENTIALS

    @property
    def public_message(self) -> str:
        return _AUTH_PUBLIC_MESSAGES.get(self.reason, AuthenticationRejectedError.message)


class DownstreamUnavailableError(CampusGateError):
    """A collaborator (identifier generation) could not complete."""

    code: str = "DOWNSTREAM_UNAVAILABLE"
    message: str = "A downstream collaborator is unavailable"
    reason: Reason = Reason.IDENTIFIER_EXHAUSTED


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[CampusGateError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[CampusGateError]] = {}

    def register(self, code: str, error_cls: type[CampusGateError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[CampusGateError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[CampusGateError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("ENROLLMENT_CLOSED")
        class EnrollmentClosedError(CampusGateError):
            code = "ENROLLMENT_CLOSED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", CampusGateError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("FORBIDDEN", ForbiddenError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("CONFLICT", ConflictError)
error_registry.register("VALIDATION_FAILED", ValidationFailedError)
error_registry.register("AUTHENTICATION_REJECTED", AuthenticationRejectedError)
error_registry.register("DOWNSTREAM_UNAVAILABLE", DownstreamUnavailableError)


# ---- gRPC Status Mapping ----------------------------------------------------


def get_grpc_status_code(error: CampusGateError) -> Any:
    """Map CampusGateError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "FORBIDDEN": grpc.StatusCode.PERMISSION_DENIED,
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "CONFLICT": grpc.StatusCode.FAILED_PRECONDITION,
        "VALIDATION_FAILED": grpc.StatusCode.INVALID_ARGUMENT,
        "AUTHENTICATION_REJECTED": grpc.StatusCode.UNAUTHENTICATED,
        "DOWNSTREAM_UNAVAILABLE": grpc.StatusCode.UNAVAILABLE,
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
    }
    if error.code == "CONFLICT" and error.reason in (
        Reason.DUPLICATE_ACTIVE,
        Reason.ALREADY_PENDING,
        Reason.PREVIOUSLY_DENIED,
        Reason.DUPLICATE_IDENTIFIER,
    ):
        return grpc.StatusCode.ALREADY_EXISTS
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)
