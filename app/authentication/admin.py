"""
Django admin configuration for users.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import CreatorStatus, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-keyed user admin with creator approval actions."""

    list_display = ("email", "display_name", "role", "creator_status", "is_active", "date_joined")
    list_filter = ("role", "creator_status", "is_active", "is_staff", "is_superuser")
    search_fields = ("email", "display_name")
    ordering = ("-date_joined",)
    actions = ["approve_creators", "reject_creators"]

    fieldsets = (
        (None, {"fields": ("email", "password", "display_name")}),
        ("Creator", {"fields": ("role", "creator_status", "subscription_price_cents")}),
        ("Status", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Permissions", {"fields": ("groups", "user_permissions")}),
        ("Important dates", {"fields": ("date_joined", "last_login")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role"),
            },
        ),
    )
    readonly_fields = ("date_joined", "last_login")

    @admin.action(description="Approve selected creators")
    def approve_creators(self, request, queryset):
        updated = queryset.filter(role="creator").update(creator_status=CreatorStatus.APPROVED)
        self.message_user(request, f"{updated} creator(s) approved.")

    @admin.action(description="Reject selected creators")
    def reject_creators(self, request, queryset):
        updated = queryset.filter(role="creator").update(creator_status=CreatorStatus.REJECTED)
        self.message_user(request, f"{updated} creator(s) rejected.")
