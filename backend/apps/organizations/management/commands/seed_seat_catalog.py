"""
Seed a small seat catalogue for local development.

Creates one country/state/district/mandal chain, two cells, a handful of
designations, a level-wide aggregate cap and the active registration
settings. Safe to run repeatedly.

Usage: python manage.py seed_seat_catalog
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.geo.models import Country, District, Mandal, State, Zone
from apps.organizations.models import AggregateCapacity, Cell, Designation, OrgLevel, RegistrationSettings

CELLS = [
    ("GENERAL_BODY", "General Body"),
    ("WOMEN_WING", "Women Wing"),
]

# code, name, capacity per bucket, fee (paise), validity days
DESIGNATIONS = [
    ("PRESIDENT", "President", 1, 500000, 365),
    ("VICE_PRESIDENT", "Vice President", 2, 300000, 365),
    ("SECRETARY", "Secretary", 2, 200000, 365),
    ("EXECUTIVE_MEMBER", "Executive Member", 25, 50000, 365),
]


class Command(BaseCommand):
    help = "Seed geo, cells, designations and capacity caps for local development"

    def add_arguments(self, parser):
        parser.add_argument(
            "--aggregate-capacity",
            type=int,
            default=30,
            help="Level-wide cap per cell for DISTRICT seats (default: 30)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        country, _ = Country.objects.get_or_create(code="IN", defaults={"name": "India"})
        state, _ = State.objects.get_or_create(
            country=country,
            name="Telangana",
            defaults={"code": "TG", "zone": Zone.SOUTH},
        )
        district, _ = District.objects.get_or_create(state=state, name="Hyderabad")
        Mandal.objects.get_or_create(district=district, name="Secunderabad")

        for rank, (code, name, capacity, fee, validity_days) in enumerate(DESIGNATIONS):
            Designation.objects.update_or_create(
                code=code,
                defaults={
                    "name": name,
                    "capacity": capacity,
                    "fee": fee,
                    "validity_days": validity_days,
                    "order_rank": rank,
                },
            )

        for code, name in CELLS:
            cell, _ = Cell.objects.get_or_create(code=code, defaults={"name": name})
            aggregate = AggregateCapacity.objects.filter(cell=cell, level=OrgLevel.DISTRICT, district=None).first()
            if aggregate is None:
                aggregate = AggregateCapacity(cell=cell, level=OrgLevel.DISTRICT)
            aggregate.capacity = options["aggregate_capacity"]
            aggregate.save()

        if not RegistrationSettings.objects.exists():
            RegistrationSettings.objects.create(currency="INR", notes="Seeded for local development")

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {len(CELLS)} cells and {len(DESIGNATIONS)} designations "
                f"(country {country.code}, district {district.name})"
            )
        )
