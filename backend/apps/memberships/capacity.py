"""
Capacity resolver.

Reports how many seats a bucket has left, both for the designation itself
and for the optional cell+level+geo aggregate cap. Everything here is read
only; reservation re-counts under row locks in ``services.reserve_seat``.
"""

from dataclasses import asdict, dataclass
from typing import Any

from django.db.models import QuerySet

from apps.memberships.models import Membership
from apps.memberships.scope import SeatSpec, build_scope, level_wide_key, resolve_seat_spec
from apps.organizations.models import AggregateCapacity


@dataclass
class DesignationAvailability:
    capacity: int
    used: int
    remaining: int
    fee: int
    validity_days: int


@dataclass
class AggregateAvailability:
    capacity: int
    used: int
    remaining: int


@dataclass
class Availability:
    """Seat availability for one bucket."""

    designation: DesignationAvailability
    aggregate: AggregateAvailability | None

    @property
    def has_capacity(self) -> bool:
        if self.designation.remaining <= 0:
            return False
        return self.aggregate is None or self.aggregate.remaining > 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def live_memberships() -> QuerySet[Membership]:
    return Membership.objects.filter(status__in=Membership.LIVE_STATUSES)


def count_live_in_bucket(spec: SeatSpec, exclude_membership_id: int | None = None) -> int:
    """Count live seats of the seat spec's exact (cell, designation, level, geo) bucket."""
    qs = live_memberships().filter(bucket_key=spec.bucket_key)
    if exclude_membership_id is not None:
        qs = qs.exclude(pk=exclude_membership_id)
    return qs.count()


def count_live_in_scope(spec: SeatSpec, exclude_membership_id: int | None = None) -> int:
    """Count live seats of every designation in the seat spec's cell+level+geo bucket."""
    qs = live_memberships().filter(cell=spec.cell, scope_key=spec.scope.key)
    if exclude_membership_id is not None:
        qs = qs.exclude(pk=exclude_membership_id)
    return qs.count()


def find_aggregate_capacity(spec: SeatSpec, *, for_update: bool = False) -> AggregateCapacity | None:
    """
    Find the aggregate cap governing the seat spec's bucket.

    An exact geo row wins over the level-wide row. With ``for_update`` the
    returned row is locked and the caller must be inside a transaction.
    """
    qs = AggregateCapacity.objects.filter(cell=spec.cell)
    if for_update:
        qs = qs.select_for_update()
    for key in (spec.scope.key, level_wide_key(spec.scope)):
        row = qs.filter(scope_key=key).first()
        if row is not None:
            return row
    return None


def get_availability(spec: SeatSpec, exclude_membership_id: int | None = None) -> Availability:
    """
    Compute seat availability for a resolved spec.

    ``exclude_membership_id`` leaves one seat out of the counts, which is
    how reassignment previews check a seat against its own target bucket.
    """
    designation = spec.designation
    used = count_live_in_bucket(spec, exclude_membership_id)
    designation_availability = DesignationAvailability(
        capacity=designation.capacity,
        used=used,
        remaining=max(0, designation.capacity - used),
        fee=designation.fee,
        validity_days=designation.validity_days,
    )

    aggregate_availability = None
    aggregate = find_aggregate_capacity(spec)
    if aggregate is not None:
        aggregate_used = count_live_in_scope(spec, exclude_membership_id)
        aggregate_availability = AggregateAvailability(
            capacity=aggregate.capacity,
            used=aggregate_used,
            remaining=max(0, aggregate.capacity - aggregate_used),
        )

    return Availability(designation=designation_availability, aggregate=aggregate_availability)


def check_availability(
    cell_ref: str | int,
    designation_ref: str | int,
    level: str,
    *,
    zone: str | None = None,
    country_id: int | None = None,
    state_id: int | None = None,
    district_id: int | None = None,
    mandal_id: int | None = None,
) -> Availability:
    """
    Build, resolve and check a spec from loose references.

    The level's geo reference is validated before any query runs.

    Raises:
        MissingLocationError: Required geo reference missing
        NotFoundError: Unknown cell, designation or geo reference
    """
    scope = build_scope(
        level,
        zone=zone,
        country_id=country_id,
        state_id=state_id,
        district_id=district_id,
        mandal_id=mandal_id,
    )
    return get_availability(resolve_seat_spec(cell_ref, designation_ref, scope))
