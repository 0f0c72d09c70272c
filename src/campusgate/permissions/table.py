"""Static permission table: role → resource → allowed actions.

Provides:
- ``PermissionTable``: immutable table object with the ``authorize`` lookup.
- ``DEFAULT_ROLE_PERMISSIONS``: the university's grant profile per role.
- ``authorize()``: functional form taking the table explicitly.

The table is built once at process start and injected wherever a check is
needed; nothing here is module-level mutable state.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .constants import CRUD, Action, Resource, Role

_R = Action.READ
_U = Action.UPDATE
_C = Action.CREATE
_D = Action.DELETE

# ── Role → Permission Profiles ──────────────────────────
# super_admin is absent: it satisfies every grant implicitly.
# An empty action set is an explicit wall, not an omission.

DEFAULT_ROLE_PERMISSIONS: dict[Role, dict[Resource, frozenset[Action]]] = {
    Role.ADMIN: {
        Resource.STUDENTS: CRUD,
        Resource.TEACHERS: CRUD,
        Resource.ADMINS: frozenset(),
        Resource.DEPARTMENTS: frozenset({_R}),
        Resource.COURSES: CRUD,
        Resource.USERS: frozenset({_R}),
        Resource.SETTINGS: frozenset(),
        Resource.SYSTEM: frozenset(),
        Resource.CERTIFICATES: frozenset({_R, _U}),
    },
    Role.TEACHER: {
        Resource.STUDENTS: frozenset({_R}),
        Resource.TEACHERS: frozenset({_R}),
        Resource.COURSES: frozenset({_R, _U}),
        Resource.GRADES: frozenset({_C, _R, _U}),
        Resource.ATTENDANCE: frozenset({_C, _R, _U}),
        Resource.MATERIALS: CRUD,
    },
    Role.STUDENT: {
        Resource.COURSES: frozenset({_R}),
        Resource.GRADES: frozenset({_R}),
        Resource.ATTENDANCE: frozenset({_R}),
        Resource.MATERIALS: frozenset({_R}),
        Resource.PROFILE: frozenset({_R, _U}),
        Resource.CERTIFICATES: frozenset({_C, _R}),
    },
}


def _coerce(kind: type, value: object) -> object:
    try:
        return kind(value)
    except ValueError:
        return None


class PermissionTable:
    """Immutable mapping ``role → resource → frozenset(actions)``.

    Args:
        grants: Mapping in the shape of :data:`DEFAULT_ROLE_PERMISSIONS`.
            Keys and actions may be enum members or their string values.

    Example::

        table = PermissionTable.default()
        table.authorize(Role.ADMIN, Action.UPDATE, Resource.STUDENTS)  # True
        table.authorize(Role.ADMIN, Action.READ, Resource.ADMINS)      # False
        table.authorize(Role.SUPER_ADMIN, "delete", "anything")        # True
    """

    __slots__ = ("_grants",)

    def __init__(self, grants: Mapping[Role | str, Mapping[Resource | str, Iterable[Action | str]]]) -> None:
        frozen: dict[Role, Mapping[Resource, frozenset[Action]]] = {}
        for role, resources in grants.items():
            per_resource = {
                Resource(resource): frozenset(Action(action) for action in actions)
                for resource, actions in resources.items()
            }
            frozen[Role.parse(role)] = MappingProxyType(per_resource)
        self._grants: Mapping[Role, Mapping[Resource, frozenset[Action]]] = MappingProxyType(frozen)

    @classmethod
    def default(cls) -> PermissionTable:
        """Table built from :data:`DEFAULT_ROLE_PERMISSIONS`."""
        return cls(DEFAULT_ROLE_PERMISSIONS)

    @classmethod
    def from_mapping(cls, grants: Mapping[Role | str, Mapping[Resource | str, Iterable[Action | str]]]) -> PermissionTable:
        """Build a table from plain strings, e.g. loaded from a settings file."""
        return cls(grants)

    def authorize(self, role: Role | str | None, action: Action | str | None, resource: Resource | str | None) -> bool:
        """Decide whether ``role`` may perform ``action`` on ``resource``.

        Checks in order:
        1. falsy input → deny
        2. ``super_admin`` → allow
        3. unknown role, resource or action → deny
        4. resource absent from the role's profile → deny (default-deny)
        5. ``action`` in the configured set (empty set always denies)
        """
        if not role or not action or not resource:
            return False

        try:
            parsed_role = Role.parse(role)
        except ValueError:
            return False

        if parsed_role is Role.SUPER_ADMIN:
            return True

        parsed_resource = _coerce(Resource, resource)
        parsed_action = _coerce(Action, action)
        if parsed_resource is None or parsed_action is None:
            return False

        profile = self._grants.get(parsed_role)
        if profile is None:
            return False

        allowed = profile.get(parsed_resource)  # type: ignore[arg-type]
        if allowed is None:
            return False

        return parsed_action in allowed

    def role_permissions(self, role: Role | str) -> Mapping[Resource, frozenset[Action]]:
        """All grants configured for ``role`` (empty for unknown roles)."""
        try:
            return self._grants.get(Role.parse(role), MappingProxyType({}))
        except ValueError:
            return MappingProxyType({})

    def can_access_section(self, role: Role | str, resource: Resource | str) -> bool:
        """Whether ``role`` holds any action at all on ``resource``."""
        try:
            if Role.parse(role) is Role.SUPER_ADMIN:
                return True
        except ValueError:
            return False
        parsed_resource = _coerce(Resource, resource)
        if parsed_resource is None:
            return False
        return bool(self.role_permissions(role).get(parsed_resource))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"PermissionTable(roles={[r.value for r in self._grants]!r})"


def authorize(
    table: PermissionTable,
    role: Role | str | None,
    action: Action | str | None,
    resource: Resource | str | None,
) -> bool:
    """Functional form of :meth:`PermissionTable.authorize`."""
    return table.authorize(role, action, resource)


__all__ = [
    "DEFAULT_ROLE_PERMISSIONS",
    "PermissionTable",
    "authorize",
]
