"""Admin configuration for organizations app."""

from django.contrib import admin

from apps.organizations.models import Branch, Organization


class BranchInline(admin.TabularInline):
    model = Branch
    extra = 0
    fields = ["name", "slug"]


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin for churches."""

    list_display = ["name", "slug", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at", "updated_at"]
    inlines = [BranchInline]


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    """Admin for branches."""

    list_display = ["name", "organization", "slug", "created_at"]
    list_filter = ["organization"]
    search_fields = ["name", "slug", "organization__name"]
    readonly_fields = ["created_at", "updated_at"]
