"""Tests for the capacity resolver."""

import pytest

from apps.memberships.capacity import check_availability, get_availability
from apps.memberships.exceptions import MissingLocationError
from apps.memberships.models import Membership
from apps.memberships.scope import DistrictScope, SeatSpec
from tests.geo.factories import DistrictFactory
from tests.memberships.factories import create_membership
from tests.organizations.factories import AggregateCapacityFactory, DesignationFactory


@pytest.mark.django_db
class TestGetAvailability:
    """Tests for get_availability."""

    def test_empty_bucket(self, district_spec: SeatSpec) -> None:
        availability = get_availability(district_spec)

        assert availability.designation.capacity == 1
        assert availability.designation.used == 0
        assert availability.designation.remaining == 1
        assert availability.designation.fee == 50000
        assert availability.designation.validity_days == 365
        assert availability.aggregate is None
        assert availability.has_capacity

    def test_counts_only_live_seats(self, cell, district) -> None:
        designation = DesignationFactory.create(capacity=3)
        spec = SeatSpec(cell=cell, designation=designation, scope=DistrictScope(district_id=district.id))
        create_membership(spec, seat_sequence=1, status=Membership.Status.ACTIVE)
        create_membership(spec, seat_sequence=2, status=Membership.Status.PENDING_PAYMENT)
        create_membership(spec, seat_sequence=3, status=Membership.Status.REVOKED)
        create_membership(spec, seat_sequence=3, status=Membership.Status.EXPIRED)

        availability = get_availability(spec)

        assert availability.designation.used == 2
        assert availability.designation.remaining == 1

    def test_other_geo_buckets_are_separate(self, district_spec: SeatSpec) -> None:
        other = SeatSpec(
            cell=district_spec.cell,
            designation=district_spec.designation,
            scope=DistrictScope(district_id=DistrictFactory.create().id),
        )
        create_membership(other)

        assert get_availability(district_spec).designation.used == 0

    def test_remaining_never_negative(self, district_spec: SeatSpec) -> None:
        create_membership(district_spec, seat_sequence=1)
        create_membership(district_spec, seat_sequence=2)

        availability = get_availability(district_spec)

        assert availability.designation.used == 2
        assert availability.designation.remaining == 0
        assert not availability.has_capacity

    def test_level_wide_aggregate_counts_all_designations(self, cell, district) -> None:
        AggregateCapacityFactory.create(cell=cell, capacity=2)
        first = SeatSpec(cell=cell, designation=DesignationFactory.create(), scope=DistrictScope(district.id))
        second = SeatSpec(cell=cell, designation=DesignationFactory.create(), scope=DistrictScope(district.id))
        create_membership(first)

        availability = get_availability(second)

        assert availability.designation.used == 0
        assert availability.aggregate is not None
        assert availability.aggregate.capacity == 2
        assert availability.aggregate.used == 1
        assert availability.aggregate.remaining == 1

    def test_exact_geo_aggregate_wins_over_level_wide(self, cell, district) -> None:
        AggregateCapacityFactory.create(cell=cell, capacity=10)
        AggregateCapacityFactory.create(cell=cell, district=district, capacity=1)
        spec = SeatSpec(cell=cell, designation=DesignationFactory.create(), scope=DistrictScope(district.id))

        assert get_availability(spec).aggregate.capacity == 1

    def test_exclude_membership(self, district_spec: SeatSpec) -> None:
        seat = create_membership(district_spec)

        availability = get_availability(district_spec, exclude_membership_id=seat.id)

        assert availability.designation.used == 0


@pytest.mark.django_db
class TestCheckAvailability:
    """Tests for check_availability."""

    def test_resolves_references(self, cell, designation, district) -> None:
        availability = check_availability(cell.code, designation.code, "DISTRICT", district_id=district.id)

        assert availability.designation.remaining == 1

    def test_missing_location_raised_before_lookup(self) -> None:
        with pytest.raises(MissingLocationError):
            check_availability("ANY", "ANY", "DISTRICT")
