"""Admin configuration for access app."""

from django.contrib import admin

from apps.access.models import Membership, PlatformAdmin


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    """Admin for Membership model."""

    list_display = ["user", "organization", "branch", "role", "status", "created_at"]
    list_filter = ["role", "status", "organization"]
    search_fields = ["user__email", "user__name", "organization__name"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["-created_at"]


@admin.register(PlatformAdmin)
class PlatformAdminAdmin(admin.ModelAdmin):
    """Admin for PlatformAdmin model."""

    list_display = ["user", "granted_by", "created_at"]
    search_fields = ["user__email"]
    readonly_fields = ["created_at"]
