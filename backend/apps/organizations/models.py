"""
Organizations models - churches (tenants) and their branches.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Organization(TimestampedModel):
    """
    A church - the top-level tenant.

    Memberships, access requests and souls are all scoped to one.
    """

    name = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        help_text="URL-safe identifier, e.g. 'grace-chapel'",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Branch(TimestampedModel):
    """A branch of exactly one church. Slugs are unique within the church."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="branches",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "branches"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "slug"],
                name="unique_branch_slug_per_organization",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.organization.name})"
