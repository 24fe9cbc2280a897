from django.contrib import admin

from apps.memberships.models import Membership, MembershipPayment, SeatBucketLock


class MembershipPaymentInline(admin.TabularInline):
    model = MembershipPayment
    extra = 0
    readonly_fields = ["amount", "status", "provider_ref", "created_at"]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "user",
        "cell",
        "designation",
        "level",
        "scope_key",
        "seat_sequence",
        "status",
        "payment_status",
        "expires_at",
    ]
    list_filter = ["status", "payment_status", "level", "cell"]
    search_fields = ["user__mobile_number", "bucket_key"]
    raw_id_fields = ["user", "country", "state", "district", "mandal"]
    readonly_fields = ["bucket_key", "scope_key", "locked_at", "activated_at", "revoked_at", "created_at"]
    inlines = [MembershipPaymentInline]


@admin.register(SeatBucketLock)
class SeatBucketLockAdmin(admin.ModelAdmin):
    list_display = ["bucket_key", "created_at"]
    search_fields = ["bucket_key"]
