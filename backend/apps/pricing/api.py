"""
Pricing API endpoints.

Discount administration for staff holding the admin API token.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.schemas import ErrorResponse
from apps.core.security import AdminTokenAuth
from apps.pricing.schemas import (
    DiscountCreateRequest,
    DiscountPreviewRequest,
    DiscountPreviewResponse,
    DiscountResponse,
    DiscountUpdateRequest,
)
from apps.pricing.services import (
    cancel_discount,
    create_discount,
    get_discount,
    preview_discount,
    update_discount,
)

router = Router(tags=["pricing"], auth=AdminTokenAuth())


def _discount_response(discount) -> DiscountResponse:
    return DiscountResponse(
        id=discount.id,
        mobile_number=discount.mobile_number,
        percent_off=discount.percent_off,
        status=discount.status,
        active_from=discount.active_from,
        active_to=discount.active_to,
        max_redemptions=discount.max_redemptions,
        redeemed_count=discount.redeemed_count,
        applied_to_intent_id=discount.applied_to_intent_id,
        reason=discount.reason,
        created_by=discount.created_by,
        created_at=discount.created_at,
    )


@router.post(
    "/admin/discounts",
    response={201: DiscountResponse, 400: ErrorResponse, 401: ErrorResponse, 409: ErrorResponse},
    operation_id="createDiscount",
    summary="Grant a discount to a mobile number",
)
def create(request: HttpRequest, payload: DiscountCreateRequest) -> tuple[int, DiscountResponse]:
    """
    Create a percent-off discount.

    Fails with 409 CONFLICT when the contact already has an ACTIVE or
    RESERVED discount.
    """
    discount = create_discount(
        payload.mobile_number,
        payload.percent_off,
        active_from=payload.active_from,
        active_to=payload.active_to,
        max_redemptions=payload.max_redemptions,
        reason=payload.reason,
        created_by=payload.created_by,
    )
    return 201, _discount_response(discount)


@router.post(
    "/admin/discounts/preview",
    response={200: DiscountPreviewResponse, 400: ErrorResponse, 401: ErrorResponse, 404: ErrorResponse},
    operation_id="previewDiscount",
    summary="Preview what a contact would pay for a seat",
)
def preview(request: HttpRequest, payload: DiscountPreviewRequest) -> DiscountPreviewResponse:
    result = preview_discount(
        payload.to_spec(),
        payload.mobile_number,
        purpose=payload.purpose,
        team_id=payload.team_id,
    )
    return DiscountPreviewResponse(**result)


@router.get(
    "/admin/discounts/{int:discount_id}",
    response={200: DiscountResponse, 401: ErrorResponse, 404: ErrorResponse},
    operation_id="getDiscount",
    summary="Get a discount",
)
def retrieve(request: HttpRequest, discount_id: int) -> DiscountResponse:
    return _discount_response(get_discount(discount_id))


@router.patch(
    "/admin/discounts/{int:discount_id}",
    response={
        200: DiscountResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        404: ErrorResponse,
        409: ErrorResponse,
    },
    operation_id="updateDiscount",
    summary="Update or release a discount",
)
def update(request: HttpRequest, discount_id: int, payload: DiscountUpdateRequest) -> DiscountResponse:
    changes = payload.model_dump(exclude_unset=True)
    discount = update_discount(discount_id, **changes)
    return _discount_response(discount)


@router.post(
    "/admin/discounts/{int:discount_id}/cancel",
    response={200: DiscountResponse, 400: ErrorResponse, 401: ErrorResponse, 404: ErrorResponse},
    operation_id="cancelDiscount",
    summary="Cancel a discount",
)
def cancel(request: HttpRequest, discount_id: int) -> DiscountResponse:
    """Cancel a discount. Redeemed discounts cannot be cancelled."""
    return _discount_response(cancel_discount(discount_id))
