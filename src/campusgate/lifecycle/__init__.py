"""Account lifecycle for campusgate.

Defines:
- submit(): public intake into the waitlist
- approve() / deny(): waitlist decisions, promotion to Account
- escalation: admin self-registration and super_admin-only admin flows
- management: delete / deactivate / re-role existing accounts
- login(): the ordered authentication gate
- RequestWorkflow: certificate and grade approval
"""

from .approval import approve, deny, list_waitlist, remove_waitlist_entry, waitlist_stats
from .authentication import login
from .context import LifecycleContext
from .escalation import (
    approve_admin_registration,
    create_admin,
    deactivate_admin,
    reactivate_admin,
    register_admin,
    reject_admin_registration,
    waitlist_admin,
)
from .intake import submit
from .management import change_role, deactivate_account, delete_account
from .requests import RequestWorkflow, certificate_workflow, grade_workflow

__all__ = [
    "LifecycleContext",
    "RequestWorkflow",
    "approve",
    "approve_admin_registration",
    "certificate_workflow",
    "change_role",
    "create_admin",
    "deactivate_account",
    "deactivate_admin",
    "delete_account",
    "deny",
    "grade_workflow",
    "list_waitlist",
    "login",
    "reactivate_admin",
    "register_admin",
    "reject_admin_registration",
    "remove_waitlist_entry",
    "submit",
    "waitlist_admin",
    "waitlist_stats",
]
