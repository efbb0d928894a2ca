"""
Role and status vocabulary shared by the resolver, the stores and the API.
"""

from enum import StrEnum


class Role(StrEnum):
    """Organization-scoped roles, listed from most to least senior."""

    SUPER_ADMIN = "super_admin"
    PASTOR_ADMIN = "pastor_admin"
    BRANCH_ADMIN = "branch_admin"
    EVANGELIST = "evangelist"

    @property
    def precedence(self) -> int:
        """Higher wins when a user holds several roles in one organization."""
        return ROLE_PRECEDENCE[self]


class MembershipStatus(StrEnum):
    ACTIVE = "active"
    PENDING = "pending"
    DISABLED = "disabled"


ROLE_PRECEDENCE: dict[Role, int] = {
    Role.SUPER_ADMIN: 40,
    Role.PASTOR_ADMIN: 30,
    Role.BRANCH_ADMIN: 20,
    Role.EVANGELIST: 10,
}

ORGANIZATION_ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.PASTOR_ADMIN})


def highest_role(roles) -> Role | None:
    """Pick the most senior role, or None for an empty collection."""
    return max(roles, key=ROLE_PRECEDENCE.__getitem__, default=None)
