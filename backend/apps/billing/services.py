"""
Payment-first registration services.

Flow: create a priced PaymentIntent (and its Stripe PaymentIntent), wait
for the payment to succeed (client confirm or Stripe webhook), then
finalize: re-check capacity, reserve and activate the seat and link it to
the intent, all in one transaction.

Stripe calls are isolated here for testability and never run inside a
database transaction.
"""

import secrets
import uuid
from dataclasses import dataclass
from typing import Any

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.accounts.services import find_or_create_user, has_profile_photo, normalize_mobile_number
from apps.billing.exceptions import (
    InvalidSignatureError,
    InvalidTransitionError,
    MissingSignatureError,
    PaymentIntentNotFoundError,
    PaymentValidationError,
    ProviderError,
    SoldOutError,
)
from apps.billing.models import PaymentIntent
from apps.billing.stripe_client import get_stripe, stripe_enabled
from apps.core.logging import get_logger
from apps.memberships.capacity import get_availability
from apps.memberships.exceptions import CapacityError
from apps.memberships.models import Membership
from apps.memberships.scope import SeatSpec, spec_from_row
from apps.memberships.services import (
    NO_SEATS_LEVEL_AGGREGATE,
    activate_paid_membership,
    reserve_seat,
)
from apps.organizations.services import get_active_settings
from apps.pricing.models import Discount, FeePurpose
from apps.pricing.services import (
    apply_discount,
    quote_seat,
    redeem_discount,
    release_discount,
    reserve_discount,
    resolve_discount,
)

logger = get_logger(__name__)

PROFILE_PHOTO_REQUIRED = "PROFILE_PHOTO_REQUIRED"
SUPERSEDED = "superseded"


@dataclass
class CreatedOrder:
    """A new payment intent plus what the client needs to pay it."""

    intent: PaymentIntent
    client_secret: str | None = None


@dataclass
class RegistrationResult:
    """Outcome of confirming/finalizing a payment intent."""

    status: str
    order_id: str
    membership_id: int | None = None
    seat_sequence: int | None = None
    already_registered: bool = False
    id_card_eligible: bool | None = None
    id_card_reason: str | None = None


def get_intent(order_id: str | uuid.UUID) -> PaymentIntent:
    """
    Fetch a payment intent by its public order id.

    Raises:
        PaymentIntentNotFoundError: Unknown or malformed order id
    """
    try:
        return PaymentIntent.objects.get(order_id=uuid.UUID(str(order_id)))
    except (ValueError, PaymentIntent.DoesNotExist):
        raise PaymentIntentNotFoundError(f"Order {order_id} not found.") from None


def _supersede_discounted_intents(mobile_number: str) -> None:
    """
    Fail the contact's PENDING intents that hold a reserved discount.

    Opening a new order abandons the earlier ones, so their discount goes
    back to ACTIVE for the new order to reserve. A late payment on a
    superseded intent still registers through finalize_payment_intent.
    """
    stale = PaymentIntent.objects.filter(
        mobile_number=mobile_number,
        status=PaymentIntent.Status.PENDING,
        discount__status=Discount.Status.RESERVED,
        discount__applied_to_intent=F("pk"),
    ).values_list("order_id", flat=True)
    for order_id in list(stale):
        mark_intent_failed(order_id, reason=SUPERSEDED)
        logger.info("payment_intent_superseded", order_id=str(order_id))


def create_payment_intent(
    spec: SeatSpec,
    purpose: str,
    mobile_number: str,
    full_name: str = "",
    team_id: int | None = None,
) -> CreatedOrder:
    """
    Price a seat and open a payment intent for it.

    The contact's active discount is reserved for this intent, first taking
    it back from any earlier PENDING intent still holding it. When the
    amount is positive and Stripe is configured a Stripe PaymentIntent is
    created after the local transaction commits; its client secret is
    returned for the client to complete the payment.

    Raises:
        PaymentValidationError: Missing mobile number or unknown purpose
        CapacityError: The bucket is already full
        ProviderError: Stripe rejected the payment intent
    """
    normalized = normalize_mobile_number(mobile_number)
    if not normalized:
        raise PaymentValidationError("mobile_number is required.")
    purpose = str(purpose or "").upper()
    if purpose not in FeePurpose.values:
        raise PaymentValidationError(f"Unknown purpose '{purpose}'.")

    availability = get_availability(spec)
    if not availability.has_capacity:
        if availability.designation.remaining <= 0:
            raise CapacityError("No seats left for this designation.")
        raise CapacityError("No seats left at this level.", code=NO_SEATS_LEVEL_AGGREGATE)

    fee = quote_seat(purpose, spec, team_id=team_id)

    with transaction.atomic():
        _supersede_discounted_intents(normalized)
        discount = resolve_discount(normalized)
        intent = PaymentIntent.objects.create(
            **spec.row_fields(),
            purpose=purpose,
            mobile_number=normalized,
            full_name=full_name,
            base_amount=fee.amount,
            amount=fee.amount,
            currency=fee.currency,
            fee_source=fee.source,
            fee_override_id=fee.override_id,
        )
        if discount is not None and reserve_discount(discount.id, intent):
            breakdown = apply_discount(fee.amount, discount)
            intent.discount = discount
            intent.discount_amount = breakdown.discount_amount
            intent.amount = breakdown.final_amount
            intent.save(update_fields=["discount", "discount_amount", "amount", "updated_at"])

    logger.info(
        "payment_intent_created",
        order_id=str(intent.order_id),
        bucket=spec.bucket_key,
        amount=intent.amount,
        discount_amount=intent.discount_amount,
        fee_source=intent.fee_source,
    )

    if intent.amount <= 0 or not stripe_enabled():
        return CreatedOrder(intent=intent)

    stripe = get_stripe()
    try:
        stripe_intent = stripe.PaymentIntent.create(
            amount=intent.amount,
            currency=intent.currency.lower(),
            metadata={
                "order_id": str(intent.order_id),
                "purpose": intent.purpose,
                "mobile_number": intent.mobile_number,
            },
            idempotency_key=f"order-{intent.order_id}",
        )
    except stripe.StripeError as e:
        logger.error("stripe_payment_intent_create_failed", order_id=str(intent.order_id), error=str(e))
        mark_intent_failed(intent.order_id, reason="provider_error")
        raise ProviderError("Payment provider rejected the order.") from e

    intent.provider_order_id = stripe_intent.id
    intent.save(update_fields=["provider_order_id", "updated_at"])
    return CreatedOrder(intent=intent, client_secret=stripe_intent.client_secret)


def verify_provider_signature(intent: PaymentIntent, signature: str) -> None:
    """
    Verify a client-supplied payment proof against Stripe.

    The proof is the Stripe PaymentIntent client secret. It verifies when
    the Stripe PaymentIntent behind the order matches it in constant time
    and has succeeded.

    Raises:
        InvalidSignatureError: Proof does not match or payment not succeeded
        ProviderError: Stripe could not be reached
    """
    if not intent.provider_order_id:
        raise InvalidSignatureError("Order has no provider payment to verify against.")

    stripe = get_stripe()
    try:
        stripe_intent = stripe.PaymentIntent.retrieve(intent.provider_order_id)
    except stripe.StripeError as e:
        logger.error("stripe_payment_intent_retrieve_failed", order_id=str(intent.order_id), error=str(e))
        raise ProviderError("Could not verify payment with the provider.") from e

    if stripe_intent.id != intent.provider_order_id or not secrets.compare_digest(
        str(stripe_intent.client_secret or ""), str(signature)
    ):
        logger.warning("payment_signature_invalid", order_id=str(intent.order_id))
        raise InvalidSignatureError("Payment signature does not match.")
    if stripe_intent.status != "succeeded":
        logger.warning(
            "payment_not_succeeded",
            order_id=str(intent.order_id),
            provider_status=stripe_intent.status,
        )
        raise InvalidSignatureError(f"Payment is {stripe_intent.status}, not succeeded.")


def mark_intent_failed(order_id: str | uuid.UUID, reason: str = "") -> PaymentIntent:
    """
    Move a PENDING intent to FAILED and release its discount.

    Repeating the call on a FAILED intent is a no-op.

    Raises:
        InvalidTransitionError: Intent already succeeded or needs a refund
    """
    with transaction.atomic():
        intent = _lock_intent(order_id)
        if intent.status == PaymentIntent.Status.FAILED:
            return intent
        if intent.status != PaymentIntent.Status.PENDING:
            raise InvalidTransitionError(f"Cannot fail a {intent.status} order.")
        intent.status = PaymentIntent.Status.FAILED
        intent.failure_reason = reason[:255]
        intent.save(update_fields=["status", "failure_reason", "updated_at"])
        if intent.discount_id:
            release_discount(intent.discount_id)

    logger.info("payment_intent_failed", order_id=str(intent.order_id), reason=reason)
    return intent


def confirm_payment(
    order_id: str | uuid.UUID,
    status: str,
    provider_payment_ref: str = "",
    provider_signature: str | None = None,
) -> RegistrationResult:
    """
    Client-side payment confirmation.

    FAILED marks the intent failed. SUCCESS verifies the payment proof
    when one is given (it is required when Stripe is enabled and the order
    has a Stripe PaymentIntent) and then finalizes registration.
    Confirming an already registered order returns the same result.

    Raises:
        PaymentIntentNotFoundError: Unknown order
        PaymentValidationError: Status is not SUCCESS or FAILED
        InvalidSignatureError: Payment proof did not verify
        MissingSignatureError: Payment proof required but absent
        SoldOutError: Paid, but the seat is gone (refund required)
    """
    intent = get_intent(order_id)
    status = str(status or "").upper()

    if status == PaymentIntent.Status.FAILED:
        intent = mark_intent_failed(intent.order_id, reason=provider_payment_ref or "client_reported_failure")
        return RegistrationResult(status=intent.status, order_id=str(intent.order_id))

    if status != PaymentIntent.Status.SUCCESS:
        raise PaymentValidationError("status must be SUCCESS or FAILED.")

    if provider_signature:
        verify_provider_signature(intent, provider_signature)
    elif stripe_enabled() and intent.provider_order_id:
        raise MissingSignatureError("provider_signature is required to confirm this order.")

    return finalize_payment_intent(intent.order_id, provider_payment_ref=provider_payment_ref or None)


def _lock_intent(order_id: str | uuid.UUID) -> PaymentIntent:
    try:
        return PaymentIntent.objects.select_for_update().get(order_id=uuid.UUID(str(order_id)))
    except (ValueError, PaymentIntent.DoesNotExist):
        raise PaymentIntentNotFoundError(f"Order {order_id} not found.") from None


def _registered_result(intent: PaymentIntent, already_registered: bool) -> RegistrationResult:
    membership = intent.membership
    return RegistrationResult(
        status=intent.status,
        order_id=str(intent.order_id),
        membership_id=membership.id,
        seat_sequence=membership.seat_sequence,
        already_registered=already_registered,
    )


def finalize_payment_intent(
    order_id: str | uuid.UUID,
    provider_payment_ref: str | None = None,
) -> RegistrationResult:
    """
    Register the seat a paid intent was priced for. Idempotent.

    Runs in one transaction holding the intent row lock, so concurrent
    confirm and webhook deliveries register at most one seat. The seat is
    reserved with the intent's frozen amount and activated immediately.

    Raises:
        PaymentIntentNotFoundError: Unknown order
        SoldOutError: The bucket filled up while the payment was in flight;
            the intent is left REFUND_REQUIRED
    """
    sold_out_reason: str | None = None

    with transaction.atomic():
        intent = _lock_intent(order_id)

        if intent.membership_id is not None:
            result = _registered_result(intent, already_registered=True)
        elif intent.status == PaymentIntent.Status.REFUND_REQUIRED:
            sold_out_reason = intent.failure_reason or "SOLD_OUT"
        else:
            spec = spec_from_row(intent)
            reservation = reserve_seat(spec, fee=intent.amount)

            if not reservation.accepted:
                sold_out_reason = reservation.reason
                intent.status = PaymentIntent.Status.REFUND_REQUIRED
                intent.failure_reason = reservation.reason or "SOLD_OUT"
                if provider_payment_ref:
                    intent.provider_payment_ref = provider_payment_ref
                intent.confirmed_at = timezone.now()
                intent.save(
                    update_fields=[
                        "status",
                        "failure_reason",
                        "provider_payment_ref",
                        "confirmed_at",
                        "updated_at",
                    ]
                )
                if intent.discount_id:
                    release_discount(intent.discount_id)
            else:
                user = find_or_create_user(intent.mobile_number, intent.full_name)
                membership = Membership.objects.select_related("designation").get(
                    pk=reservation.membership_id
                )
                membership.user = user
                membership.save(update_fields=["user", "updated_at"])
                activate_paid_membership(
                    membership,
                    provider_ref=provider_payment_ref or intent.provider_order_id,
                    meta={"order_id": str(intent.order_id)},
                )
                if intent.discount_id:
                    redeem_discount(intent.discount_id, intent.id)

                intent.status = PaymentIntent.Status.SUCCESS
                intent.membership = membership
                intent.failure_reason = ""
                if provider_payment_ref:
                    intent.provider_payment_ref = provider_payment_ref
                intent.confirmed_at = timezone.now()
                intent.save()
                result = _registered_result(intent, already_registered=False)

    if sold_out_reason is not None:
        logger.warning(
            "payment_intent_refund_required",
            order_id=str(intent.order_id),
            reason=sold_out_reason,
        )
        raise SoldOutError("Payment received but no seat is left; a refund is required.", reason=sold_out_reason)

    if not result.already_registered:
        logger.info(
            "payment_intent_registered",
            order_id=result.order_id,
            membership_id=result.membership_id,
            seat_sequence=result.seat_sequence,
        )
    result.id_card_eligible, result.id_card_reason = check_id_card_eligibility(intent.membership)
    return result


def check_id_card_eligibility(membership: Membership) -> tuple[bool, str | None]:
    """
    Whether an ID card may be issued for a seat.

    Only reports eligibility; rendering the card is someone else's job.
    """
    if not get_active_settings().require_photo_for_id_card:
        return True, None
    if membership.user is None or not has_profile_photo(membership.user):
        return False, PROFILE_PHOTO_REQUIRED
    return True, None


def get_payment_status(order_id: str | uuid.UUID) -> dict[str, Any]:
    """Public status of an order; ``can_register`` means paid but not yet registered."""
    intent = get_intent(order_id)
    return {
        "order_id": str(intent.order_id),
        "status": intent.status,
        "amount": intent.amount,
        "currency": intent.currency,
        "can_register": intent.can_register,
        "membership_id": intent.membership_id,
    }
