"""Access app configuration."""

from django.apps import AppConfig


class AccessConfig(AppConfig):
    """Configuration for access app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.access"
