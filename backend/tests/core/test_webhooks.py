"""Tests for webhook dedup utilities."""

import pytest

from apps.core.models import WebhookEvent
from apps.core.webhooks import mark_webhook_event, payload_fingerprint, record_webhook_event


@pytest.mark.django_db
class TestRecordWebhookEvent:
    """Tests for record_webhook_event."""

    def test_creates_received_event(self) -> None:
        event = record_webhook_event(
            "stripe",
            b'{"id": "evt_1"}',
            event_type="payment_intent.succeeded",
            provider_event_id="evt_1",
            data={"id": "evt_1"},
        )

        assert event.status == WebhookEvent.Status.RECEIVED
        assert event.payload_hash == payload_fingerprint(b'{"id": "evt_1"}')
        assert event.is_done is False

    def test_same_body_reuses_row(self) -> None:
        first = record_webhook_event("stripe", b"body", provider_event_id="evt_1")
        second = record_webhook_event("stripe", b"body", provider_event_id="evt_2")

        assert first.id == second.id
        assert WebhookEvent.objects.count() == 1

    def test_different_body_new_row(self) -> None:
        record_webhook_event("stripe", b"body-1")
        record_webhook_event("stripe", b"body-2")

        assert WebhookEvent.objects.count() == 2


@pytest.mark.django_db
class TestMarkWebhookEvent:
    """Tests for mark_webhook_event and WebhookEvent.is_done."""

    @pytest.mark.parametrize(
        ("status", "done"),
        [
            (WebhookEvent.Status.PROCESSED, True),
            (WebhookEvent.Status.IGNORED, True),
            (WebhookEvent.Status.FAILED, False),
        ],
    )
    def test_final_status(self, status: str, done: bool) -> None:
        event = record_webhook_event("stripe", b"body")

        mark_webhook_event(event, status)

        event.refresh_from_db()
        assert event.status == status
        assert event.processed_at is not None
        assert event.is_done is done

    def test_error_message_truncated(self) -> None:
        event = record_webhook_event("stripe", b"body")

        mark_webhook_event(event, WebhookEvent.Status.FAILED, error_message="x" * 5000)

        event.refresh_from_db()
        assert len(event.error_message) == 2000

    def test_str(self) -> None:
        event = record_webhook_event("stripe", b"body", event_type="payment_intent.succeeded")

        assert str(event) == "stripe:payment_intent.succeeded (RECEIVED)"
