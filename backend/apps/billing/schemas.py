"""
Billing API schemas - request/response types for payment-first registration.
"""

from ninja import Schema

from apps.memberships.schemas import SeatSpecRequest


class CreateOrderRequest(SeatSpecRequest):
    """Seat spec plus the payer's identity."""

    purpose: str = "ID_CARD_ISSUE"
    mobile_number: str
    full_name: str = ""
    team_id: int | None = None


class CreateOrderResponse(Schema):
    """New order; ``client_secret`` completes payment with Stripe Elements."""

    order_id: str
    amount: int
    base_amount: int
    discount_amount: int
    currency: str
    provider_order_id: str | None = None
    client_secret: str | None = None


class ConfirmRequest(Schema):
    order_id: str
    status: str  # SUCCESS or FAILED
    provider_payment_ref: str | None = None
    provider_signature: str | None = None  # Stripe PaymentIntent client secret


class ConfirmResponse(Schema):
    status: str
    order_id: str
    membership_id: int | None = None
    seat_sequence: int | None = None
    already_registered: bool = False
    id_card_eligible: bool | None = None
    id_card_reason: str | None = None


class PaymentStatusResponse(Schema):
    order_id: str
    status: str
    amount: int
    currency: str
    can_register: bool
    membership_id: int | None = None
