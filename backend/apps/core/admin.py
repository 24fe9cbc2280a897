from django.contrib import admin

from apps.core.models import WebhookEvent


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ["source", "event_type", "provider_event_id", "status", "created_at", "processed_at"]
    list_filter = ["source", "status", "event_type"]
    search_fields = ["provider_event_id", "payload_hash"]
    readonly_fields = [
        "source",
        "payload_hash",
        "provider_event_id",
        "event_type",
        "signature",
        "payload",
        "error_message",
        "processed_at",
        "created_at",
    ]
