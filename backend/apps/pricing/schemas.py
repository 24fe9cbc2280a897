"""
Pricing API schemas - request/response types for discount administration.
"""

from datetime import datetime

from ninja import Field, Schema

from apps.memberships.schemas import SeatSpecRequest


class DiscountCreateRequest(Schema):
    """Grant a discount to a contact."""

    mobile_number: str
    percent_off: int = Field(..., ge=1, le=100)
    active_from: datetime | None = None
    active_to: datetime | None = None
    max_redemptions: int = Field(1, ge=1)
    reason: str = ""
    created_by: str = ""


class DiscountUpdateRequest(Schema):
    """Partial update of a discount; omitted fields are left unchanged."""

    status: str | None = None
    mobile_number: str | None = None
    percent_off: int | None = Field(None, ge=1, le=100)
    active_from: datetime | None = None
    active_to: datetime | None = None
    max_redemptions: int | None = Field(None, ge=1)
    reason: str | None = None


class DiscountResponse(Schema):
    id: int
    mobile_number: str
    percent_off: int | None
    status: str
    active_from: datetime | None
    active_to: datetime | None
    max_redemptions: int
    redeemed_count: int
    applied_to_intent_id: int | None
    reason: str
    created_by: str
    created_at: datetime


class DiscountPreviewRequest(SeatSpecRequest):
    """Seat spec plus the contact to preview a discount for."""

    mobile_number: str
    purpose: str = "ID_CARD_ISSUE"
    team_id: int | None = None


class DiscountPreviewResponse(Schema):
    currency: str
    source: str
    discount_id: int | None
    base_amount: int
    discount_amount: int
    discount_percent: int | None
    final_amount: int
