"""
Admin configuration for accounts app.
"""

from django.contrib import admin

from apps.accounts.models import User, UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for member identities."""

    list_display = ["id", "mobile_number_masked", "status", "is_active", "created_at"]
    list_filter = ["status", "is_active", "is_staff"]
    search_fields = ["mobile_number", "profile__full_name"]
    readonly_fields = ["created_at", "updated_at", "last_login"]
    exclude = ["password"]
    inlines = [UserProfileInline]

    def mobile_number_masked(self, obj: User) -> str:
        """Show only last 4 digits of the mobile number for privacy."""
        return f"***{obj.mobile_number[-4:]}"

    mobile_number_masked.short_description = "Mobile"  # type: ignore[attr-defined]
