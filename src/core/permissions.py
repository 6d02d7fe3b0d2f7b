"""Role predicates shared by every manager.

Roles are totally ordered by privilege: owner > admin > member >= viewer.
These functions are pure; the store-backed checks live in ProjectManager.
"""

from typing import Optional

OWNER = "owner"
ADMIN = "admin"
MEMBER = "member"
VIEWER = "viewer"

PROJECT_ROLES = (OWNER, ADMIN, MEMBER, VIEWER)

# Roles that can be granted by invitation, invite code or role change
ASSIGNABLE_ROLES = (ADMIN, MEMBER, VIEWER)

_ROLE_RANK = {OWNER: 3, ADMIN: 2, MEMBER: 1, VIEWER: 1}


def role_rank(role: Optional[str]) -> int:
    """Return the privilege rank of a role; unknown or missing roles rank 0."""
    return _ROLE_RANK.get(role, 0)


def is_admin_role(role: Optional[str]) -> bool:
    return role_rank(role) >= _ROLE_RANK[ADMIN]


def is_assignable_role(role: str) -> bool:
    return role in ASSIGNABLE_ROLES


def can_manage_member(actor_role: Optional[str], target_role: str) -> bool:
    """Whether an actor may change the role of, or remove, a target member.

    The owner manages everyone except an owner. An admin manages members and
    viewers only. Nobody else manages anyone.
    """
    if target_role == OWNER:
        return False
    if actor_role == OWNER:
        return True
    if actor_role == ADMIN:
        return target_role in (MEMBER, VIEWER)
    return False


def can_assign_role(actor_role: Optional[str], new_role: str) -> bool:
    """Whether an actor may grant ``new_role`` to someone else."""
    if not is_assignable_role(new_role):
        return False
    if actor_role == OWNER:
        return True
    if actor_role == ADMIN:
        return new_role in (MEMBER, VIEWER, ADMIN)
    return False
