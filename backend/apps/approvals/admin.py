"""Admin configuration for approvals app."""

from django.contrib import admin

from apps.approvals.models import AccessRequest, ApprovalLogEntry


@admin.register(AccessRequest)
class AccessRequestAdmin(admin.ModelAdmin):
    """Admin for AccessRequest model. Status changes go through the API."""

    list_display = ["user", "organization", "branch", "status", "created_at", "handled_by"]
    list_filter = ["status", "organization"]
    search_fields = ["user__email", "user__name", "organization__name"]
    readonly_fields = ["status", "created_at", "handled_by", "handled_at"]
    ordering = ["-created_at"]


@admin.register(ApprovalLogEntry)
class ApprovalLogEntryAdmin(admin.ModelAdmin):
    """Read-only admin for the approval audit trail."""

    list_display = ["evangelist", "action", "action_by", "action_at"]
    list_filter = ["approved"]
    search_fields = ["evangelist__email", "evangelist__name", "action_by__email"]
    ordering = ["-action_at"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    @admin.display(description="Action")
    def action(self, obj: ApprovalLogEntry) -> str:
        return "APPROVED" if obj.approved else "UNAPPROVED"
