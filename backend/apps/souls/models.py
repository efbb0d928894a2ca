"""
Souls models - the records evangelists log.
"""

from django.conf import settings
from django.db import models


class Soul(models.Model):
    """
    One soul won, recorded by an evangelist for a church.

    Append-only. Whether the evangelist may record for the church is checked
    by the caller at insert time, not here.
    """

    evangelist = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="souls",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="souls",
    )
    branch = models.ForeignKey(
        "organizations.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="souls",
    )

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    residence = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    won_on = models.DateField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-won_on", "-created_at"]
        indexes = [
            models.Index(fields=["organization", "won_on"], name="soul_org_won_on_idx"),
            models.Index(fields=["evangelist", "won_on"], name="soul_evangelist_won_on_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.won_on})"
