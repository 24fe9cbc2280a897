"""Tests for seat scopes and spec resolution."""

import pytest

from apps.core.exceptions import NotFoundError
from apps.memberships.exceptions import MissingLocationError, SeatValidationError
from apps.memberships.scope import (
    DistrictScope,
    MandalScope,
    NationalScope,
    StateScope,
    ZoneScope,
    aggregate_scope_key,
    build_scope,
    resolve_seat_spec,
)


class TestBuildScope:
    """Tests for build_scope."""

    def test_drops_fields_the_level_does_not_use(self) -> None:
        """A DISTRICT scope keeps only the district, whatever else was sent."""
        scope = build_scope("DISTRICT", state_id=4, district_id=7, mandal_id=9, zone="NORTH")

        assert scope == DistrictScope(district_id=7)
        assert scope.geo_fields() == {
            "zone": "",
            "country_id": None,
            "state_id": None,
            "district_id": 7,
            "mandal_id": None,
        }

    @pytest.mark.parametrize(
        ("level", "kwargs"),
        [
            ("ZONE", {}),
            ("STATE", {"district_id": 1}),
            ("DISTRICT", {"state_id": 1}),
            ("MANDAL", {"district_id": 1}),
        ],
    )
    def test_missing_required_geo_raises(self, level: str, kwargs: dict) -> None:
        with pytest.raises(MissingLocationError) as exc_info:
            build_scope(level, **kwargs)

        assert exc_info.value.code == "MISSING_LOCATION"

    def test_national_needs_no_geo(self) -> None:
        assert build_scope("national") == NationalScope()
        assert build_scope("NATIONAL", country_id=1) == NationalScope(country_id=1)

    def test_zone_is_normalized_and_validated(self) -> None:
        assert build_scope("ZONE", zone="south") == ZoneScope(zone="SOUTH")

        with pytest.raises(SeatValidationError) as exc_info:
            build_scope("ZONE", zone="NOWHERE")
        assert exc_info.value.code == "INVALID_ZONE"

    def test_unknown_level_raises(self) -> None:
        with pytest.raises(SeatValidationError) as exc_info:
            build_scope("GALAXY")

        assert exc_info.value.code == "INVALID_LEVEL"

    def test_keys(self) -> None:
        assert StateScope(state_id=3).key == "STATE:3"
        assert MandalScope(mandal_id=5).key == "MANDAL:5"
        assert NationalScope().key == "NATIONAL:-"


class TestAggregateScopeKey:
    """Tests for aggregate_scope_key."""

    def test_exact_geo_row(self) -> None:
        assert aggregate_scope_key("DISTRICT", district_id=7) == "DISTRICT:7"

    def test_row_without_geo_is_level_wide(self) -> None:
        assert aggregate_scope_key("DISTRICT") == "DISTRICT:*"
        assert aggregate_scope_key("ZONE") == "ZONE:*"


@pytest.mark.django_db
class TestResolveSeatSpec:
    """Tests for resolve_seat_spec."""

    def test_resolves_by_code(self, cell, designation, district) -> None:
        spec = resolve_seat_spec(cell.code, designation.code, DistrictScope(district_id=district.id))

        assert spec.cell == cell
        assert spec.designation == designation
        assert spec.level == "DISTRICT"
        assert spec.bucket_key == f"{cell.id}:{designation.id}:DISTRICT:{district.id}"

    def test_resolves_cell_by_name_and_designation_by_id(self, cell, designation, district) -> None:
        spec = resolve_seat_spec(cell.name, str(designation.id), DistrictScope(district_id=district.id))

        assert spec.cell == cell
        assert spec.designation == designation

    def test_unknown_cell(self, designation, district) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            resolve_seat_spec("NO_SUCH_CELL", designation.code, DistrictScope(district_id=district.id))

        assert exc_info.value.code == "CELL_NOT_FOUND"
        assert exc_info.value.status_code == 404

    def test_unknown_designation(self, cell, district) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            resolve_seat_spec(cell.code, "NO_SUCH_ROLE", DistrictScope(district_id=district.id))

        assert exc_info.value.code == "DESIGNATION_NOT_FOUND"

    def test_unknown_geo(self, cell, designation) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            resolve_seat_spec(cell.code, designation.code, DistrictScope(district_id=999999))

        assert exc_info.value.code == "DISTRICT_NOT_FOUND"
