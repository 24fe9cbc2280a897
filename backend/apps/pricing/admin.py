from django.contrib import admin

from apps.pricing.models import Discount, FeeOverride


@admin.register(FeeOverride)
class FeeOverrideAdmin(admin.ModelAdmin):
    list_display = ["purpose", "amount", "currency", "scope_label", "is_active", "created_at"]
    list_filter = ["purpose", "is_active"]
    raw_id_fields = ["team", "mandal", "district", "state"]


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ["mobile_number", "percent_off", "status", "redeemed_count", "max_redemptions", "created_at"]
    list_filter = ["status"]
    search_fields = ["mobile_number", "reason"]
    readonly_fields = ["redeemed_count", "applied_to_intent", "created_at", "updated_at"]
