"""
Stripe webhook handler.

Reconciles payment-first orders with Stripe PaymentIntent events. This is
a separate view (not Django Ninja) for raw request handling needed to
verify Stripe signatures.

Deliveries are deduplicated on a hash of the raw body. Once the signature
verifies the response is always 200, including when processing fails:
the failure is recorded on the WebhookEvent row instead of asking Stripe
to retry.
"""

import json
from typing import Any

import stripe
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.billing.exceptions import SoldOutError
from apps.billing.models import PaymentIntent
from apps.billing.services import finalize_payment_intent, mark_intent_failed
from apps.billing.stripe_client import get_stripe
from apps.core.logging import get_logger
from apps.core.models import WebhookEvent
from apps.core.webhooks import mark_webhook_event, record_webhook_event
from config.settings.base import settings

logger = get_logger(__name__)

WEBHOOK_SOURCE = "stripe"


def _find_intent(stripe_intent: dict[str, Any]) -> PaymentIntent | None:
    """Match a Stripe PaymentIntent to our order by id, then by metadata."""
    provider_order_id = stripe_intent.get("id")
    if provider_order_id:
        intent = PaymentIntent.objects.filter(provider_order_id=provider_order_id).first()
        if intent is not None:
            return intent
    order_id = (stripe_intent.get("metadata") or {}).get("order_id")
    if order_id:
        return PaymentIntent.objects.filter(order_id=order_id).first()
    return None


def handle_payment_succeeded(stripe_intent: dict[str, Any]) -> str:
    """Finalize the matching order. Returns the WebhookEvent status to record."""
    intent = _find_intent(stripe_intent)
    if intent is None:
        logger.warning("stripe_webhook_order_not_found", provider_order_id=stripe_intent.get("id"))
        return WebhookEvent.Status.IGNORED

    try:
        finalize_payment_intent(intent.order_id, provider_payment_ref=stripe_intent.get("latest_charge"))
    except SoldOutError:
        # Intent is now REFUND_REQUIRED; the delivery itself was handled
        pass
    return WebhookEvent.Status.PROCESSED


def handle_payment_failed(stripe_intent: dict[str, Any]) -> str:
    """Fail the matching order if it is still pending."""
    intent = _find_intent(stripe_intent)
    if intent is None:
        logger.warning("stripe_webhook_order_not_found", provider_order_id=stripe_intent.get("id"))
        return WebhookEvent.Status.IGNORED
    if intent.status != PaymentIntent.Status.PENDING:
        return WebhookEvent.Status.IGNORED

    error = stripe_intent.get("last_payment_error") or {}
    mark_intent_failed(intent.order_id, reason=error.get("code") or "payment_failed")
    return WebhookEvent.Status.PROCESSED


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle Stripe webhook events.

    Verifies signature, records the delivery and dispatches to a handler.
    """
    payload = request.body
    sig_header = request.headers.get("Stripe-Signature")

    if not sig_header:
        logger.warning("stripe_webhook_missing_signature")
        return HttpResponse(status=400)

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("stripe_webhook_secret_not_configured")
        return HttpResponse(status=500)

    # Verify signature
    get_stripe()  # Ensure Stripe is configured
    try:
        stripe.Webhook.construct_event(
            payload,
            sig_header,
            settings.STRIPE_WEBHOOK_SECRET,
        )
    except ValueError as e:
        logger.warning("stripe_webhook_invalid_payload", error=str(e))
        return HttpResponse(status=400)
    except stripe.SignatureVerificationError as e:
        logger.warning("stripe_webhook_invalid_signature", error=str(e))
        return HttpResponse(status=400)

    # The verified body as plain dicts
    data = json.loads(payload)
    event_type = data.get("type") or ""
    event_id = data.get("id") or ""
    logger.info("stripe_webhook_received", event_type=event_type, event_id=event_id)

    record = record_webhook_event(
        WEBHOOK_SOURCE,
        payload,
        signature=sig_header,
        event_type=event_type,
        provider_event_id=event_id,
        data=data,
    )
    if record.is_done:
        logger.info("stripe_webhook_duplicate", event_type=event_type, webhook_event_id=record.id)
        return HttpResponse(status=200)

    try:
        match event_type:
            case "payment_intent.succeeded":
                status = handle_payment_succeeded(data["data"]["object"])

            case "payment_intent.payment_failed":
                status = handle_payment_failed(data["data"]["object"])

            case _:
                logger.debug("stripe_webhook_unhandled_event", event_type=event_type)
                status = WebhookEvent.Status.IGNORED

    except Exception as e:
        logger.exception("stripe_webhook_handler_error", event_type=event_type)
        mark_webhook_event(record, WebhookEvent.Status.FAILED, error_message=str(e))
        return HttpResponse(status=200)

    mark_webhook_event(record, status)
    return HttpResponse(status=200)
