"""Permission engine for campusgate.

Defines:
- Role / Action / Resource: canonical values (``faculty`` → ``teacher``)
- PermissionTable: immutable role → resource → actions grants
- can_manage(): role hierarchy for administering specific accounts
- Actor + require_*(): enforcement raising ForbiddenError
"""

from .access import (
    Actor,
    require_management,
    require_ownership,
    require_permission,
)
from .constants import (
    CRUD,
    ROLE_ALIASES,
    SELF_SERVICE_ROLES,
    WAITLIST_ROLES,
    Action,
    Resource,
    Role,
)
from .hierarchy import MANAGEABLE_ROLES, SELF_PROTECTED_OPERATIONS, can_manage
from .table import DEFAULT_ROLE_PERMISSIONS, PermissionTable, authorize

__all__ = [
    "CRUD",
    "DEFAULT_ROLE_PERMISSIONS",
    "MANAGEABLE_ROLES",
    "ROLE_ALIASES",
    "SELF_PROTECTED_OPERATIONS",
    "SELF_SERVICE_ROLES",
    "WAITLIST_ROLES",
    "Action",
    "Actor",
    "PermissionTable",
    "Resource",
    "Role",
    "authorize",
    "can_manage",
    "require_management",
    "require_ownership",
    "require_permission",
]
