"""
Access models - organization memberships and platform administrators.
"""

from django.conf import settings
from django.db import models

from apps.access.roles import MembershipStatus, Role
from apps.core.models import TimestampedModel


class Membership(TimestampedModel):
    """
    Scoped grant linking a User to a church (and optionally a branch).

    A user may hold several memberships. Upserts are keyed on
    (user, organization, role); only active rows count for permissions.
    """

    class RoleChoices(models.TextChoices):
        SUPER_ADMIN = Role.SUPER_ADMIN.value, "Super admin"
        PASTOR_ADMIN = Role.PASTOR_ADMIN.value, "Pastor admin"
        BRANCH_ADMIN = Role.BRANCH_ADMIN.value, "Branch admin"
        EVANGELIST = Role.EVANGELIST.value, "Evangelist"

    class StatusChoices(models.TextChoices):
        ACTIVE = MembershipStatus.ACTIVE.value, "Active"
        PENDING = MembershipStatus.PENDING.value, "Pending"
        DISABLED = MembershipStatus.DISABLED.value, "Disabled"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    branch = models.ForeignKey(
        "organizations.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="memberships",
    )
    role = models.CharField(max_length=32, choices=RoleChoices.choices)
    status = models.CharField(
        max_length=16,
        choices=StatusChoices.choices,
        default=StatusChoices.PENDING,
        db_index=True,
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "organization", "role"],
                name="unique_membership_role_per_organization",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "status"], name="membership_user_status_idx"),
            models.Index(fields=["organization", "role"], name="membership_org_role_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.organization} ({self.role}, {self.status})"


class PlatformAdmin(models.Model):
    """
    Cross-church administrator.

    Independent of and senior to any membership: grants approvals, reports,
    leaderboard and audit access across every organization.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="platform_admin",
    )
    granted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Platform admin: {self.user}"
