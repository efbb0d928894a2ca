"""Approvals app configuration."""

from django.apps import AppConfig


class ApprovalsConfig(AppConfig):
    """Configuration for approvals app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.approvals"
