"""
Core models - shared base classes and the webhook dedup ledger.
"""

from django.db import models


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class WebhookEvent(TimestampedModel):
    """
    Dedup ledger for inbound provider webhooks.

    Keyed by a content fingerprint of the raw payload so that at-least-once
    delivery (including replays with a different provider event id) is
    processed at most once.
    """

    class Status(models.TextChoices):
        RECEIVED = "RECEIVED", "Received"
        PROCESSED = "PROCESSED", "Processed"
        IGNORED = "IGNORED", "Ignored"
        FAILED = "FAILED", "Failed"

    source = models.CharField(max_length=50, help_text="Webhook provider, e.g. 'stripe'")
    payload_hash = models.CharField(
        max_length=64,
        unique=True,
        help_text="SHA-256 hex digest of the raw payload",
    )
    provider_event_id = models.CharField(max_length=255, blank=True, db_index=True)
    event_type = models.CharField(max_length=100, blank=True)
    signature = models.TextField(blank=True)
    payload = models.JSONField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.RECEIVED,
        db_index=True,
    )
    error_message = models.TextField(blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.source}:{self.event_type or 'unknown'} ({self.status})"

    @property
    def is_done(self) -> bool:
        """Processed or deliberately ignored; replays must not reprocess."""
        return self.status in (self.Status.PROCESSED, self.Status.IGNORED)
