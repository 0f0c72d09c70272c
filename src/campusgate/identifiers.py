"""Role identifier generation.

Enrollment numbers: ``{admission_year}{DEPT}{NNNN}`` (e.g. ``2021CSE0417``).
Employee ids:       ``FAC{current_year}{DEPT}{NNNN}``.

The numeric suffix is drawn from ``secrets`` and every candidate is
checked against identifiers already issued by this process *and* against
the store (``is_taken``), under a lock, so concurrent approvals never hand
out the same id. The store's own unique constraint remains the final
guard.
"""

from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .exceptions import DownstreamUnavailableError, Reason

logger = logging.getLogger(__name__)


class RandomIdentifierGenerator:
    """Default :class:`campusgate.interfaces.IdentifierGenerator`.

    Args:
        is_taken: Callback answering whether an identifier is already stored
            (typically ``repository.identifier_in_use``).
        suffix_digits: Width of the random numeric suffix.
        max_attempts: Collision retries before giving up.
        clock: Returns "now"; injectable for tests.
    """

    def __init__(
        self,
        *,
        is_taken: Optional[Callable[[str], bool]] = None,
        suffix_digits: int = 4,
        max_attempts: int = 50,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._is_taken = is_taken or (lambda _identifier: False)
        self._suffix_digits = suffix_digits
        self._max_attempts = max_attempts
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._issued: set[str] = set()
        self._lock = threading.Lock()

    def generate_enrollment_number(self, department_code: str, year: int) -> str:
        return self._unique(f"{int(year)}{department_code.strip().upper()}")

    def generate_employee_id(self, department_code: str) -> str:
        year = self._clock().year
        return self._unique(f"FAC{year}{department_code.strip().upper()}")

    def _unique(self, prefix: str) -> str:
        with self._lock:
            for _ in range(self._max_attempts):
                suffix = str(secrets.randbelow(10**self._suffix_digits)).zfill(self._suffix_digits)
                candidate = f"{prefix}{suffix}"
                if candidate in self._issued or self._is_taken(candidate):
                    continue
                self._issued.add(candidate)
                return candidate

        logger.error("Identifier space exhausted for prefix %s", prefix)
        raise DownstreamUnavailableError(
            f"Could not allocate a unique identifier for {prefix}",
            reason=Reason.IDENTIFIER_EXHAUSTED,
            prefix=prefix,
        )


__all__ = ["RandomIdentifierGenerator"]
