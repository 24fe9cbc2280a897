"""
Geo models - the country > state > district > mandal hierarchy seats are scoped to.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Zone(models.TextChoices):
    """Zones a ZONE-level seat can be scoped to."""

    NORTH = "NORTH", "North"
    SOUTH = "SOUTH", "South"
    EAST = "EAST", "East"
    WEST = "WEST", "West"
    CENTRAL = "CENTRAL", "Central"


class Country(TimestampedModel):
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=8, unique=True, help_text="ISO code, e.g. 'IN'")

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "countries"

    def __str__(self) -> str:
        return self.name


class State(TimestampedModel):
    country = models.ForeignKey(Country, on_delete=models.PROTECT, related_name="states")
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=16, blank=True)
    zone = models.CharField(max_length=16, choices=Zone.choices, blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["country", "name"], name="geo_state_country_name_uniq"),
        ]

    def __str__(self) -> str:
        return self.name


class District(TimestampedModel):
    state = models.ForeignKey(State, on_delete=models.PROTECT, related_name="districts")
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["state", "name"], name="geo_district_state_name_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.name}, {self.state.name}"


class Mandal(TimestampedModel):
    district = models.ForeignKey(District, on_delete=models.PROTECT, related_name="mandals")
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["district", "name"], name="geo_mandal_district_name_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.name}, {self.district.name}"
