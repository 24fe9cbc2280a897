"""
Billing API endpoints.

Payment-first registration: create an order, confirm the payment, poll
its status. Stripe webhooks are handled in ``apps.billing.webhooks``.
"""

from dataclasses import asdict

from django.http import HttpRequest
from ninja import Router

from apps.billing.schemas import (
    ConfirmRequest,
    ConfirmResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    PaymentStatusResponse,
)
from apps.billing.services import confirm_payment, create_payment_intent, get_payment_status
from apps.core.schemas import ErrorResponse

router = Router(tags=["payfirst"])


@router.post(
    "/payfirst/orders",
    response={
        200: CreateOrderResponse,
        400: ErrorResponse,
        404: ErrorResponse,
        409: ErrorResponse,
        502: ErrorResponse,
    },
    operation_id="createPayFirstOrder",
    summary="Create a payment-first order for a seat",
)
def create_order(request: HttpRequest, payload: CreateOrderRequest) -> CreateOrderResponse:
    """
    Price the seat, apply the contact's discount and open a payment intent.

    Fails with 409 when the bucket is already full.
    """
    created = create_payment_intent(
        payload.to_spec(),
        payload.purpose,
        payload.mobile_number,
        full_name=payload.full_name,
        team_id=payload.team_id,
    )
    intent = created.intent
    return CreateOrderResponse(
        order_id=str(intent.order_id),
        amount=intent.amount,
        base_amount=intent.base_amount,
        discount_amount=intent.discount_amount,
        currency=intent.currency,
        provider_order_id=intent.provider_order_id or None,
        client_secret=created.client_secret,
    )


@router.post(
    "/payfirst/confirm",
    response={
        200: ConfirmResponse,
        400: ErrorResponse,
        404: ErrorResponse,
        409: ErrorResponse,
        502: ErrorResponse,
    },
    operation_id="confirmPayFirstOrder",
    summary="Confirm payment and register the seat",
)
def confirm(request: HttpRequest, payload: ConfirmRequest) -> ConfirmResponse:
    """
    Confirm an order's payment outcome.

    SUCCESS registers the seat (idempotently). 409 SOLD_OUT with
    ``refund_required`` means the payment went through but the seat is gone.
    """
    result = confirm_payment(
        payload.order_id,
        payload.status,
        provider_payment_ref=payload.provider_payment_ref or "",
        provider_signature=payload.provider_signature,
    )
    return ConfirmResponse(**asdict(result))


@router.get(
    "/payfirst/status/{order_id}",
    response={200: PaymentStatusResponse, 404: ErrorResponse},
    operation_id="getPayFirstStatus",
    summary="Order payment status",
)
def status(request: HttpRequest, order_id: str) -> PaymentStatusResponse:
    return PaymentStatusResponse(**get_payment_status(order_id))
