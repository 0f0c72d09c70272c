"""Collaborator bundle shared by the lifecycle operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from ..config import GateConfig
from ..hashing import Pbkdf2Hasher
from ..identifiers import RandomIdentifierGenerator
from ..interfaces import CredentialHasher, IdentifierGenerator, Notifier, NullSessionIssuer, Repository, SessionIssuer
from ..notifications import LoggingNotifier
from ..permissions.table import PermissionTable


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LifecycleContext:
    """Everything a lifecycle operation may consult.

    Attributes:
        repository: Account / waitlist / department store.
        table: Permission table consulted before every mutation.
        notifier: Best-effort outbound notices.
        identifiers: Enrollment number / employee id source.
        hasher: Credential hashing primitive.
        sessions: Session artifact issuer used on successful login.
        config: Engine settings.
        clock: Returns the current UTC time.
    """

    repository: Repository
    table: PermissionTable = field(default_factory=PermissionTable.default)
    notifier: Notifier = field(default_factory=LoggingNotifier)
    identifiers: IdentifierGenerator | None = None
    hasher: CredentialHasher | None = None
    sessions: SessionIssuer = field(default_factory=NullSessionIssuer)
    config: GateConfig = field(default_factory=GateConfig)
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        if self.hasher is None:
            object.__setattr__(self, "hasher", Pbkdf2Hasher(self.config.hash_iterations))
        if self.identifiers is None:
            object.__setattr__(
                self,
                "identifiers",
                RandomIdentifierGenerator(
                    is_taken=self.repository.identifier_in_use,
                    suffix_digits=self.config.id_suffix_digits,
                    max_attempts=self.config.id_max_attempts,
                    clock=self.clock,
                ),
            )


__all__ = ["LifecycleContext"]
