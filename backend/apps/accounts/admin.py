"""Admin configuration for accounts app."""

from django.contrib import admin

from apps.accounts.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for User model. Credentials live with Stytch, so no password fields."""

    list_display = ["email", "name", "phone", "is_approved", "is_staff", "created_at"]
    list_filter = ["is_approved", "is_staff", "is_active"]
    search_fields = ["email", "name", "phone", "stytch_user_id"]
    readonly_fields = ["stytch_user_id", "is_approved", "created_at", "updated_at", "last_login"]
    fields = [
        "email",
        "name",
        "phone",
        "stytch_user_id",
        "is_approved",
        "is_active",
        "is_staff",
        "is_superuser",
        "last_login",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]
