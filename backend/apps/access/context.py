"""
AuthContext - the resolved, immutable permission snapshot for one user.
"""

from dataclasses import dataclass, field

from apps.access.roles import Role, highest_role


@dataclass(frozen=True)
class Grant:
    """One active membership, reduced to what permission checks need."""

    organization_id: int
    branch_id: int | None
    role: Role


@dataclass(frozen=True)
class AuthContext:
    """
    Effective roles and scope for a user at one point in time.

    Built by apps.access.resolver.resolve(); never mutated afterwards.
    A degraded context means the store could not be read: every predicate
    treats it as "deny" and require_permission reports it as unavailable.
    """

    user_id: int | None
    is_platform_admin: bool = False
    grants: frozenset[Grant] = field(default_factory=frozenset)
    is_approved: bool = False
    degraded: bool = False
    timed_out: bool = False

    @classmethod
    def unavailable(cls, user_id: int | None, timed_out: bool = False) -> "AuthContext":
        """Fail-closed context for a resolution that could not complete."""
        return cls(user_id=user_id, degraded=True, timed_out=timed_out)

    @property
    def organization_roles(self) -> frozenset[tuple[int, Role]]:
        return frozenset((g.organization_id, g.role) for g in self.grants)

    @property
    def organization_ids(self) -> frozenset[int]:
        return frozenset(g.organization_id for g in self.grants)

    def highest_org_role(self, organization_id: int) -> Role | None:
        """Most senior active role held in the organization, or None."""
        return highest_role(role for org_id, role in self.organization_roles if org_id == organization_id)

    def grants_for(self, organization_id: int, role: Role | None = None) -> list[Grant]:
        """Grants in one organization, optionally narrowed to a role."""
        return [
            g
            for g in self.grants
            if g.organization_id == organization_id and (role is None or g.role == role)
        ]

    def organizations_with_role(self, *roles: Role) -> frozenset[int]:
        """Organizations where the user's most senior role is one of the given roles."""
        return frozenset(
            org_id for org_id in self.organization_ids if self.highest_org_role(org_id) in roles
        )
