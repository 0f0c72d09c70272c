"""Best-effort notification delivery.

The lifecycle change is the source of truth; delivery is not. Every
notifier call made by the core goes through :func:`notify_safely`, which
logs and swallows failures instead of undoing a committed transition.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .logging import safe_log_value
from .models import Account, WaitlistEntry

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Default :class:`campusgate.interfaces.Notifier`: records intent in the log."""

    def notify_approval(self, account: Account) -> None:
        logger.info(
            "Approval notice queued for %s (%s)",
            account.email,
            account.role.value,
            extra={"event": "notify_approval"},
        )

    def notify_denial(self, entry: WaitlistEntry, reason: str) -> None:
        logger.info(
            "Denial notice queued for %s: %s",
            entry.email,
            safe_log_value(reason, limit=120),
            extra={"event": "notify_denial"},
        )


def notify_safely(send: Callable[..., Any], *args: Any) -> bool:
    """Invoke a notifier method; return False instead of raising on failure."""
    name = getattr(send, "__name__", repr(send))
    try:
        send(*args)
        return True
    except Exception as e:
        logger.error(
            "Notification %s failed after committed transition: %s",
            name,
            safe_log_value(e),
            extra={"event": "notification_failed"},
        )
        return False


__all__ = [
    "LoggingNotifier",
    "notify_safely",
]
