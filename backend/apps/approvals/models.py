"""
Approvals models - church access requests and the approval audit trail.
"""

from django.conf import settings
from django.db import models


class AccessRequest(models.Model):
    """
    A user's request to join a church (optionally a specific branch).

    Leaves PENDING exactly once, to APPROVED or REJECTED. A rejected user
    may submit again; that creates a new row.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="access_requests",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="access_requests",
    )
    branch = models.ForeignKey(
        "organizations.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="access_requests",
    )
    note = models.TextField(blank=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    handled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="handled_access_requests",
    )
    handled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization", "status"], name="access_request_org_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} -> {self.organization} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING


class ApprovalLogEntry(models.Model):
    """
    Append-only record of one evangelist approval-state change.

    approved is the value the flag was set to; action_by is the admin.
    """

    evangelist = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="approval_log",
    )
    approved = models.BooleanField()
    action_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )
    action_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-action_at", "-id"]
        verbose_name_plural = "approval log entries"

    def __str__(self) -> str:
        action = "APPROVED" if self.approved else "UNAPPROVED"
        return f"{self.evangelist} {action} by {self.action_by}"
