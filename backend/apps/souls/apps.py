"""Souls app configuration."""

from django.apps import AppConfig


class SoulsConfig(AppConfig):
    """Configuration for souls app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.souls"
