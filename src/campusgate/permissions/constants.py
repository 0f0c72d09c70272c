"""Role, action and resource constants.

Provides:
- ``Role``: the four canonical roles, with alias resolution.
- ``Action``: operations a grant can cover.
- ``Resource``: categories of manageable entities.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Canonical actor roles.

    ``faculty`` is accepted as an input alias of ``teacher`` and resolved once
    by :meth:`parse`; it never exists as a member, so downstream code compares
    against ``Role.TEACHER`` only.
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """Resolve a raw role value, including aliases.

        Raises:
            ValueError: for anything that is not a known role or alias.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Role must be a string, got {type(value)}")
        normalized = value.strip().lower().replace("-", "_")
        normalized = ROLE_ALIASES.get(normalized, normalized)
        return cls(normalized)


ROLE_ALIASES: dict[str, str] = {
    "faculty": Role.TEACHER.value,
    "superadmin": Role.SUPER_ADMIN.value,
}

# Roles an applicant may request through the public intake path.
SELF_SERVICE_ROLES = frozenset({Role.STUDENT, Role.TEACHER})

# Roles that may appear on a WaitlistEntry.
WAITLIST_ROLES = frozenset({Role.STUDENT, Role.TEACHER, Role.ADMIN})


class Action(str, Enum):
    """Operations covered by a permission grant."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"  # system-level operations only


CRUD = frozenset({Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE})


class Resource(str, Enum):
    """Named categories of manageable entities."""

    STUDENTS = "students"
    TEACHERS = "teachers"
    ADMINS = "admins"
    DEPARTMENTS = "departments"
    COURSES = "courses"
    USERS = "users"
    SETTINGS = "settings"
    SYSTEM = "system"
    GRADES = "grades"
    ATTENDANCE = "attendance"
    MATERIALS = "materials"
    PROFILE = "profile"
    CERTIFICATES = "certificates"

    @classmethod
    def for_role(cls, role: Role) -> Resource:
        """Resource class that owns accounts of ``role``."""
        return _ROLE_RESOURCES[Role.parse(role)]


_ROLE_RESOURCES: dict[Role, Resource] = {
    Role.STUDENT: Resource.STUDENTS,
    Role.TEACHER: Resource.TEACHERS,
    Role.ADMIN: Resource.ADMINS,
    Role.SUPER_ADMIN: Resource.ADMINS,
}


__all__ = [
    "Action",
    "CRUD",
    "ROLE_ALIASES",
    "Resource",
    "Role",
    "SELF_SERVICE_ROLES",
    "WAITLIST_ROLES",
]
