"""Admin configuration for souls app."""

from django.contrib import admin

from apps.souls.models import Soul


@admin.register(Soul)
class SoulAdmin(admin.ModelAdmin):
    """Admin for Soul model."""

    list_display = ["name", "evangelist", "organization", "branch", "won_on", "created_at"]
    list_filter = ["organization", "won_on"]
    search_fields = ["name", "phone", "email", "evangelist__email", "evangelist__name"]
    readonly_fields = ["created_at"]
    date_hierarchy = "won_on"
    ordering = ["-won_on", "-created_at"]
