"""
Organizations models - the seat catalogue.

Cells and designations define the buckets seats are allocated in;
AggregateCapacity optionally caps all designations of a cell+level+geo
bucket; RegistrationSettings holds the active registration configuration.
"""

from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import TimestampedModel
from apps.geo.models import Country, District, Mandal, State, Zone


class OrgLevel(models.TextChoices):
    """Organizational level a seat is held at."""

    NATIONAL = "NATIONAL", "National"
    ZONE = "ZONE", "Zone"
    STATE = "STATE", "State"
    DISTRICT = "DISTRICT", "District"
    MANDAL = "MANDAL", "Mandal"


class Cell(TimestampedModel):
    """An organizational cell (wing) seats are allocated within."""

    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=64, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Designation(TimestampedModel):
    """
    A role within a cell.

    ``capacity`` is the maximum number of live seat-holders per bucket,
    ``fee`` the base fee in minor currency units and ``validity_days`` the
    seat lifetime once activated.
    """

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=64, unique=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
    )
    capacity = models.PositiveIntegerField(default=0)
    fee = models.PositiveIntegerField(default=0, help_text="Base fee in minor units (e.g. paise)")
    validity_days = models.PositiveIntegerField(default=365)
    order_rank = models.IntegerField(default=0)

    class Meta:
        ordering = ["order_rank", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Team(TimestampedModel):
    """A sub-unit of a cell; the most specific scope a fee override can target."""

    name = models.CharField(max_length=255)
    cell = models.ForeignKey(Cell, on_delete=models.CASCADE, related_name="teams")
    state = models.ForeignKey(State, on_delete=models.SET_NULL, null=True, blank=True)
    district = models.ForeignKey(District, on_delete=models.SET_NULL, null=True, blank=True)
    mandal = models.ForeignKey(Mandal, on_delete=models.SET_NULL, null=True, blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class AggregateCapacity(TimestampedModel):
    """
    Cap on the sum of live seats across all designations of a bucket.

    A row without the level's geo reference is the level-wide default and
    applies to every geo bucket of that level that has no row of its own.
    ``scope_key`` is derived on save and is what lookups match on.
    """

    cell = models.ForeignKey(Cell, on_delete=models.CASCADE, related_name="aggregate_capacities")
    level = models.CharField(max_length=16, choices=OrgLevel.choices)
    zone = models.CharField(max_length=16, choices=Zone.choices, blank=True)
    country = models.ForeignKey(Country, on_delete=models.CASCADE, null=True, blank=True)
    state = models.ForeignKey(State, on_delete=models.CASCADE, null=True, blank=True)
    district = models.ForeignKey(District, on_delete=models.CASCADE, null=True, blank=True)
    mandal = models.ForeignKey(Mandal, on_delete=models.CASCADE, null=True, blank=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(0)])
    scope_key = models.CharField(max_length=64, editable=False)

    class Meta:
        verbose_name_plural = "aggregate capacities"
        constraints = [
            models.UniqueConstraint(fields=["cell", "scope_key"], name="org_aggcap_cell_scope_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.cell} {self.scope_key} <= {self.capacity}"

    def save(self, *args, **kwargs) -> None:
        from apps.memberships.scope import aggregate_scope_key

        self.scope_key = aggregate_scope_key(
            self.level,
            zone=self.zone or None,
            country_id=self.country_id,
            state_id=self.state_id,
            district_id=self.district_id,
            mandal_id=self.mandal_id,
        )
        super().save(*args, **kwargs)


class RegistrationSettings(TimestampedModel):
    """
    Active registration configuration.

    Read through ``get_active_settings()``; the most recently created row
    wins, so changing settings means inserting a new row.
    """

    currency = models.CharField(max_length=3, default="INR")
    require_photo_for_id_card = models.BooleanField(default=True)
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "registration settings"

    def __str__(self) -> str:
        return f"Registration settings #{self.pk} ({self.currency})"
