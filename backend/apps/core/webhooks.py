"""
Webhook utilities for idempotent processing.
"""

import hashlib
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.logging import get_logger
from apps.core.models import WebhookEvent

logger = get_logger(__name__)


def payload_fingerprint(payload: bytes) -> str:
    """SHA-256 hex digest of the raw webhook body."""
    return hashlib.sha256(payload).hexdigest()


def record_webhook_event(
    source: str,
    payload: bytes,
    *,
    signature: str = "",
    event_type: str = "",
    provider_event_id: str = "",
    data: Any = None,
) -> WebhookEvent:
    """
    Record a webhook delivery, reusing the existing row for a replay.

    Uses INSERT with unique constraint on the payload hash to handle
    concurrent deliveries of the same body.

    Returns:
        The (possibly pre-existing) WebhookEvent row. Callers check
        ``event.is_done`` before processing.
    """
    payload_hash = payload_fingerprint(payload)
    try:
        with transaction.atomic():
            return WebhookEvent.objects.create(
                source=source,
                payload_hash=payload_hash,
                signature=signature,
                event_type=event_type,
                provider_event_id=provider_event_id,
                payload=data,
            )
    except IntegrityError:
        logger.debug(
            "webhook_event_replayed",
            source=source,
            payload_hash=payload_hash,
        )
        return WebhookEvent.objects.get(payload_hash=payload_hash)


def mark_webhook_event(
    event: WebhookEvent,
    status: str,
    error_message: str = "",
) -> None:
    """Move a webhook event to a final status."""
    event.status = status
    event.error_message = error_message[:2000]
    event.processed_at = timezone.now()
    event.save(update_fields=["status", "error_message", "processed_at", "updated_at"])
