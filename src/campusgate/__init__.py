from .config import GateConfig, LogLevel, load_config_from_env
from .exceptions import (
    AuthenticationRejectedError,
    CampusGateError,
    ConfigurationError,
    ConflictError,
    DownstreamUnavailableError,
    ForbiddenError,
    NotFoundError,
    Reason,
    ValidationFailedError,
)
from .hashing import Pbkdf2Hasher
from .identifiers import RandomIdentifierGenerator
from .logging import (
    ActorLoggerAdapter,
    AuditFormatter,
    get_actor_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .models import (
    Account,
    AdminRegistration,
    AdminStatus,
    Application,
    ApprovalRequest,
    Department,
    LoginResult,
    Outcome,
    WaitlistAck,
    WaitlistEntry,
    WaitlistStatus,
)
from .notifications import LoggingNotifier
from .permissions import Action, Actor, PermissionTable, Resource, Role, authorize, can_manage
from .service import AccessService
from .storage import InMemoryRepository

__all__ = [
    'AccessService',
    'Account',
    'Action',
    'Actor',
    'ActorLoggerAdapter',
    'AdminRegistration',
    'AdminStatus',
    'Application',
    'ApprovalRequest',
    'AuditFormatter',
    'AuthenticationRejectedError',
    'CampusGateError',
    'ConfigurationError',
    'ConflictError',
    'Department',
    'DownstreamUnavailableError',
    'ForbiddenError',
    'GateConfig',
    'InMemoryRepository',
    'LogLevel',
    'LoggingNotifier',
    'LoginResult',
    'NotFoundError',
    'Outcome',
    'PermissionTable',
    'Pbkdf2Hasher',
    'RandomIdentifierGenerator',
    'Reason',
    'Resource',
    'Role',
    'ValidationFailedError',
    'WaitlistAck',
    'WaitlistEntry',
    'WaitlistStatus',
    'authorize',
    'can_manage',
    'get_actor_logger',
    'load_config_from_env',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
]
