"""Role hierarchy for cross-user management rights.

A permission grant answers "may this role touch *students* at all?".
The management edge answers "may this role administer *this* account?".
Operations naming a specific target must pass both.
"""

from __future__ import annotations

from .constants import Role

# Actor role → target roles it may administer. super_admin is handled
# separately (everything), every other role administers nobody.
MANAGEABLE_ROLES: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset({Role.STUDENT, Role.TEACHER}),
}

# Administrative operations that are never allowed on one's own account.
SELF_PROTECTED_OPERATIONS = frozenset({"delete", "deactivate"})


def can_manage(actor_role: Role | str | None, target_role: Role | str | None) -> bool:
    """Decide whether ``actor_role`` may delete, suspend or re-role ``target_role``.

    - ``super_admin`` → any target
    - ``admin`` → ``student`` / ``teacher`` (``faculty`` resolves to teacher)
    - anything else → nobody

    Example::

        can_manage(Role.ADMIN, "faculty")          # True
        can_manage(Role.ADMIN, Role.ADMIN)         # False
        can_manage(Role.SUPER_ADMIN, Role.ADMIN)   # True
    """
    if not actor_role:
        return False
    try:
        actor = Role.parse(actor_role)
    except ValueError:
        return False

    if actor is Role.SUPER_ADMIN:
        return True

    if not target_role:
        return False
    try:
        target = Role.parse(target_role)
    except ValueError:
        return False

    return target in MANAGEABLE_ROLES.get(actor, frozenset())


__all__ = [
    "MANAGEABLE_ROLES",
    "SELF_PROTECTED_OPERATIONS",
    "can_manage",
]
