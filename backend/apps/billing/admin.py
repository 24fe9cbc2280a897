from django.contrib import admin

from apps.billing.models import PaymentIntent


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    list_display = [
        "order_id",
        "mobile_number",
        "designation",
        "level",
        "amount",
        "currency",
        "status",
        "membership",
        "created_at",
    ]
    list_filter = ["status", "purpose", "level"]
    search_fields = ["order_id", "mobile_number", "provider_order_id", "provider_payment_ref"]
    raw_id_fields = ["country", "state", "district", "mandal", "discount", "membership"]
    readonly_fields = ["order_id", "provider_order_id", "confirmed_at", "created_at", "updated_at"]
