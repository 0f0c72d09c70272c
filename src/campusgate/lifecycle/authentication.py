"""Authentication gate.

The gate checks state before it checks the credential, in a fixed order,
so a waitlisted or suspended user learns why they cannot log in while an
unknown email and a wrong password stay indistinguishable. Nothing is
written and the hasher is not consulted until every state check passes.
"""

from __future__ import annotations

import logging

from ..exceptions import AuthenticationRejectedError, Reason
from ..models import Account, AdminStatus, LoginResult, WaitlistStatus
from ..permissions.constants import Role
from .context import LifecycleContext

logger = logging.getLogger(__name__)

_ADMIN_STATUS_REASONS: dict[AdminStatus, Reason] = {
    AdminStatus.PENDING: Reason.AWAITING_SUPER_ADMIN_APPROVAL,
    AdminStatus.REJECTED: Reason.REGISTRATION_REJECTED,
    AdminStatus.DEACTIVATED: Reason.ACCOUNT_DEACTIVATED,
}


def _reject(reason: Reason, email: str) -> AuthenticationRejectedError:
    logger.warning("Login rejected for %s: %s", email, reason.value, extra={"event": "login_rejected"})
    return AuthenticationRejectedError(reason=reason)


def gate_state(ctx: LifecycleContext, email: str) -> Account:
    """Steps 1-4: resolve the account and refuse any non-loginable state."""
    account = ctx.repository.find_account_by_email(email)
    if account is None:
        entry = ctx.repository.find_waitlist_by_email(email)
        if entry is not None and entry.status is WaitlistStatus.PENDING:
            raise _reject(Reason.AWAITING_APPROVAL, email)
        if entry is not None and entry.status is WaitlistStatus.DENIED:
            raise _reject(Reason.APPLICATION_DENIED, email)
        raise _reject(Reason.INVALID_CREDENTIALS, email)

    if not account.is_verified and account.role is not Role.SUPER_ADMIN:
        raise _reject(Reason.NOT_VERIFIED, email)

    if account.role is Role.ADMIN and account.admin_status in _ADMIN_STATUS_REASONS:
        raise _reject(_ADMIN_STATUS_REASONS[account.admin_status], email)

    if not account.is_active:
        raise _reject(Reason.ACCOUNT_DEACTIVATED, email)

    return account


def login(ctx: LifecycleContext, email: str, password: str) -> LoginResult:
    """Authenticate and open a session.

    Raises:
        AuthenticationRejectedError: with the precise reason; its
            ``public_message`` is safe to return to the caller.
    """
    key = (email or "").strip().lower()
    account = gate_state(ctx, key)

    if not password or not ctx.hasher.verify(password, account.password_hash):
        raise _reject(Reason.INVALID_CREDENTIALS, key)

    account = ctx.repository.update_account_status(account.id, last_login=ctx.clock())
    session = ctx.sessions.issue(account)
    logger.info(
        "User logged in: %s",
        account.email,
        extra={"actor_id": account.id, "actor_role": account.role.value},
    )
    return LoginResult(account=account, session=session)


__all__ = [
    "gate_state",
    "login",
]
