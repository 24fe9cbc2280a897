"""
Seat specs: the bucket coordinates a seat is priced and reserved in.

Each organizational level has its own scope type carrying exactly the geo
reference that level requires, so a DISTRICT seat can never be compared on
a stray state or mandal field. ``build_scope`` is the only way in from
loosely typed input and drops every field the level does not use.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from apps.core.exceptions import NotFoundError
from apps.geo.models import Country, District, Mandal, State, Zone
from apps.memberships.exceptions import MissingLocationError, SeatValidationError
from apps.organizations.models import Cell, Designation, OrgLevel

LEVEL_WIDE = "*"


@dataclass(frozen=True)
class NationalScope:
    country_id: int | None = None

    level: ClassVar[str] = OrgLevel.NATIONAL.value

    @property
    def key(self) -> str:
        return f"{self.level}:{self.country_id or '-'}"

    def geo_fields(self) -> dict[str, Any]:
        return _geo_fields(country_id=self.country_id)


@dataclass(frozen=True)
class ZoneScope:
    zone: str

    level: ClassVar[str] = OrgLevel.ZONE.value

    @property
    def key(self) -> str:
        return f"{self.level}:{self.zone}"

    def geo_fields(self) -> dict[str, Any]:
        return _geo_fields(zone=self.zone)


@dataclass(frozen=True)
class StateScope:
    state_id: int

    level: ClassVar[str] = OrgLevel.STATE.value

    @property
    def key(self) -> str:
        return f"{self.level}:{self.state_id}"

    def geo_fields(self) -> dict[str, Any]:
        return _geo_fields(state_id=self.state_id)


@dataclass(frozen=True)
class DistrictScope:
    district_id: int

    level: ClassVar[str] = OrgLevel.DISTRICT.value

    @property
    def key(self) -> str:
        return f"{self.level}:{self.district_id}"

    def geo_fields(self) -> dict[str, Any]:
        return _geo_fields(district_id=self.district_id)


@dataclass(frozen=True)
class MandalScope:
    mandal_id: int

    level: ClassVar[str] = OrgLevel.MANDAL.value

    @property
    def key(self) -> str:
        return f"{self.level}:{self.mandal_id}"

    def geo_fields(self) -> dict[str, Any]:
        return _geo_fields(mandal_id=self.mandal_id)


SeatScope = Union[NationalScope, ZoneScope, StateScope, DistrictScope, MandalScope]


def _geo_fields(
    zone: str = "",
    country_id: int | None = None,
    state_id: int | None = None,
    district_id: int | None = None,
    mandal_id: int | None = None,
) -> dict[str, Any]:
    """Model column values for a scope; unused geo columns are blank/None."""
    return {
        "zone": zone,
        "country_id": country_id,
        "state_id": state_id,
        "district_id": district_id,
        "mandal_id": mandal_id,
    }


def build_scope(
    level: str,
    *,
    zone: str | None = None,
    country_id: int | None = None,
    state_id: int | None = None,
    district_id: int | None = None,
    mandal_id: int | None = None,
) -> SeatScope:
    """
    Build the scope for a level from loosely typed input.

    Raises:
        SeatValidationError: Unknown level or zone
        MissingLocationError: The level's required geo reference is missing
    """
    level = str(level or "").upper()
    if level == OrgLevel.NATIONAL:
        return NationalScope(country_id=country_id or None)
    if level == OrgLevel.ZONE:
        if not zone:
            raise MissingLocationError("zone is required for level ZONE")
        zone = str(zone).upper()
        if zone not in Zone.values:
            raise SeatValidationError(f"Unknown zone '{zone}'.", code="INVALID_ZONE")
        return ZoneScope(zone=zone)
    if level == OrgLevel.STATE:
        if not state_id:
            raise MissingLocationError("state_id is required for level STATE")
        return StateScope(state_id=int(state_id))
    if level == OrgLevel.DISTRICT:
        if not district_id:
            raise MissingLocationError("district_id is required for level DISTRICT")
        return DistrictScope(district_id=int(district_id))
    if level == OrgLevel.MANDAL:
        if not mandal_id:
            raise MissingLocationError("mandal_id is required for level MANDAL")
        return MandalScope(mandal_id=int(mandal_id))
    raise SeatValidationError(f"Unsupported level '{level}'.", code="INVALID_LEVEL")


def scope_from_row(row: Any) -> SeatScope:
    """Rebuild the scope stored on a model row (membership, payment intent, ...)."""
    return build_scope(
        row.level,
        zone=row.zone or None,
        country_id=row.country_id,
        state_id=row.state_id,
        district_id=row.district_id,
        mandal_id=row.mandal_id,
    )


def aggregate_scope_key(
    level: str,
    *,
    zone: str | None = None,
    country_id: int | None = None,
    state_id: int | None = None,
    district_id: int | None = None,
    mandal_id: int | None = None,
) -> str:
    """
    Scope key for an aggregate capacity row.

    Rows that omit the level's geo reference get the level-wide key. A
    NATIONAL row without a country is level-wide too.
    """
    if str(level).upper() == OrgLevel.NATIONAL and not country_id:
        return f"{OrgLevel.NATIONAL.value}:{LEVEL_WIDE}"
    try:
        return build_scope(
            level,
            zone=zone,
            country_id=country_id,
            state_id=state_id,
            district_id=district_id,
            mandal_id=mandal_id,
        ).key
    except MissingLocationError:
        return f"{str(level).upper()}:{LEVEL_WIDE}"


def level_wide_key(scope: SeatScope) -> str:
    return f"{scope.level}:{LEVEL_WIDE}"


@dataclass(frozen=True)
class SeatSpec:
    """A fully resolved seat spec: cell, designation and level scope."""

    cell: Cell
    designation: Designation
    scope: SeatScope

    @property
    def level(self) -> str:
        return self.scope.level

    @property
    def bucket_key(self) -> str:
        """Unique key of the (cell, designation, level, geo) bucket."""
        return f"{self.cell.pk}:{self.designation.pk}:{self.scope.key}"

    def row_fields(self) -> dict[str, Any]:
        """Column values to persist this spec on a membership or intent row."""
        return {
            "cell": self.cell,
            "designation": self.designation,
            "level": self.scope.level,
            **self.scope.geo_fields(),
        }


_GEO_MODELS = {
    "country_id": Country,
    "state_id": State,
    "district_id": District,
    "mandal_id": Mandal,
}


def _ensure_geo_exists(scope: SeatScope) -> None:
    for field, value in scope.geo_fields().items():
        model = _GEO_MODELS.get(field)
        if model is None or value is None:
            continue
        if not model.objects.filter(pk=value).exists():
            raise NotFoundError(
                f"{model._meta.verbose_name.title()} {value} not found.",
                code=f"{model.__name__.upper()}_NOT_FOUND",
            )


def resolve_seat_spec(cell_ref: str | int, designation_ref: str | int, scope: SeatScope) -> SeatSpec:
    """
    Resolve references into a SeatSpec.

    Raises:
        NotFoundError: Cell, designation or geo reference does not exist
    """
    from apps.organizations.services import resolve_cell, resolve_designation

    cell = resolve_cell(cell_ref)
    designation = resolve_designation(designation_ref)
    _ensure_geo_exists(scope)
    return SeatSpec(cell=cell, designation=designation, scope=scope)


def spec_from_row(row: Any) -> SeatSpec:
    """Rebuild the resolved SeatSpec stored on a membership or intent row."""
    return SeatSpec(cell=row.cell, designation=row.designation, scope=scope_from_row(row))
