"""
Membership API schemas - request/response types for seat endpoints.
"""

from datetime import datetime

from ninja import Schema

from apps.memberships.scope import SeatSpec, build_scope, resolve_seat_spec


class SeatSpecRequest(Schema):
    """
    Loosely typed seat spec as received from clients.

    Only the geo reference the level needs is kept; the rest is dropped.
    """

    cell: str
    designation: str
    level: str
    zone: str | None = None
    country_id: int | None = None
    state_id: int | None = None
    district_id: int | None = None
    mandal_id: int | None = None

    def to_spec(self) -> SeatSpec:
        scope = build_scope(
            self.level,
            zone=self.zone,
            country_id=self.country_id,
            state_id=self.state_id,
            district_id=self.district_id,
            mandal_id=self.mandal_id,
        )
        return resolve_seat_spec(self.cell, self.designation, scope)


class DesignationAvailabilityResponse(Schema):
    capacity: int
    used: int
    remaining: int
    fee: int
    validity_days: int


class AggregateAvailabilityResponse(Schema):
    capacity: int
    used: int
    remaining: int


class AvailabilityResponse(Schema):
    designation: DesignationAvailabilityResponse
    aggregate: AggregateAvailabilityResponse | None


class QuoteRequest(SeatSpecRequest):
    """Seat spec plus what the fee is for and, optionally, who pays it."""

    purpose: str | None = None
    team_id: int | None = None
    mobile_number: str | None = None


class QuoteResponse(Schema):
    amount: int
    currency: str
    renewal_interval_months: int | None
    source: str
    base_amount: int
    discount_amount: int


class ReassignRequest(SeatSpecRequest):
    dry_run: bool = False


class ReassignResponse(Schema):
    accepted: bool
    membership_id: int
    dry_run: bool
    reason: str | None
    seat_sequence: int | None
    fee: int
    paid: int
    delta_due: int
    status_from: dict[str, str]
    status_to: dict[str, str]


class MembershipResponse(Schema):
    id: int
    user_id: int | None
    cell_id: int
    designation_id: int
    level: str
    bucket_key: str
    seat_sequence: int
    status: str
    payment_status: str
    activated_at: datetime | None
    expires_at: datetime | None
    revoked_at: datetime | None
