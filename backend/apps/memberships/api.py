"""
Membership API endpoints.

Public availability and quotes, plus seat administration behind the admin
API token. Payment-first registration lives in ``apps.billing.api``.
"""

from django.http import HttpRequest
from ninja import Query, Router

from apps.core.schemas import ErrorResponse
from apps.core.security import AdminTokenAuth
from apps.memberships.capacity import get_availability
from apps.memberships.models import Membership
from apps.memberships.schemas import (
    AvailabilityResponse,
    MembershipResponse,
    QuoteRequest,
    QuoteResponse,
    ReassignRequest,
    ReassignResponse,
    SeatSpecRequest,
)
from apps.memberships.services import activate_seat, reassign_seat, revoke_seat
from apps.pricing.services import apply_discount, quote_seat, resolve_discount

router = Router(tags=["memberships"])
admin_auth = AdminTokenAuth()


def _membership_response(membership: Membership) -> MembershipResponse:
    return MembershipResponse(
        id=membership.id,
        user_id=membership.user_id,
        cell_id=membership.cell_id,
        designation_id=membership.designation_id,
        level=membership.level,
        bucket_key=membership.bucket_key,
        seat_sequence=membership.seat_sequence,
        status=membership.status,
        payment_status=membership.payment_status,
        activated_at=membership.activated_at,
        expires_at=membership.expires_at,
        revoked_at=membership.revoked_at,
    )


@router.get(
    "/availability",
    response={200: AvailabilityResponse, 400: ErrorResponse, 404: ErrorResponse},
    operation_id="getSeatAvailability",
    summary="Seats left for a designation bucket",
)
def availability(request: HttpRequest, filters: Query[SeatSpecRequest]) -> AvailabilityResponse:
    """
    Report designation and aggregate seat availability.

    400 MISSING_LOCATION when the level's geo reference is absent,
    404 when the cell, designation or geo reference is unknown.
    """
    result = get_availability(filters.to_spec())
    return AvailabilityResponse(**result.to_dict())


@router.post(
    "/quote",
    response={200: QuoteResponse, 400: ErrorResponse, 404: ErrorResponse},
    operation_id="quoteSeat",
    summary="Price a seat",
)
def quote(request: HttpRequest, payload: QuoteRequest) -> QuoteResponse:
    """
    Resolve the fee for a seat and, given a mobile number, apply the
    contact's active discount.
    """
    spec = payload.to_spec()
    fee = quote_seat(payload.purpose, spec, team_id=payload.team_id)
    discount = resolve_discount(payload.mobile_number) if payload.mobile_number else None
    breakdown = apply_discount(fee.amount, discount)
    return QuoteResponse(
        amount=breakdown.final_amount,
        currency=fee.currency,
        renewal_interval_months=fee.renewal_interval_months,
        source=fee.source,
        base_amount=breakdown.base_amount,
        discount_amount=breakdown.discount_amount,
    )


@router.post(
    "/admin/{membership_id}/assign",
    response={
        200: ReassignResponse,
        400: ErrorResponse,
        401: ErrorResponse,
        404: ErrorResponse,
        409: ReassignResponse,
    },
    auth=admin_auth,
    operation_id="reassignSeat",
    summary="Move a seat to another bucket",
)
def assign(request: HttpRequest, membership_id: int, payload: ReassignRequest):
    """
    Reassign a seat, re-validating capacity and recomputing the amount due.

    With ``dry_run`` the computed outcome is returned and nothing changes.
    Returns 409 with the rejection reason when the target bucket is full.
    """
    result = reassign_seat(membership_id, payload.to_spec(), dry_run=payload.dry_run)
    response = ReassignResponse(**vars(result))
    if not result.accepted:
        return 409, response
    return 200, response


@router.post(
    "/admin/{membership_id}/revoke",
    response={200: MembershipResponse, 401: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
    auth=admin_auth,
    operation_id="revokeSeat",
    summary="Revoke a seat",
)
def revoke(request: HttpRequest, membership_id: int) -> MembershipResponse:
    return _membership_response(revoke_seat(membership_id))


@router.post(
    "/admin/{membership_id}/activate",
    response={200: MembershipResponse, 401: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
    auth=admin_auth,
    operation_id="activateSeat",
    summary="Activate a seat awaiting approval",
)
def activate(request: HttpRequest, membership_id: int) -> MembershipResponse:
    return _membership_response(activate_seat(membership_id))
