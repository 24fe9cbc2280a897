import uuid

import django.db.models.deletion
from django.db import migrations, models

LEVEL_CHOICES = [
    ("NATIONAL", "National"),
    ("ZONE", "Zone"),
    ("STATE", "State"),
    ("DISTRICT", "District"),
    ("MANDAL", "Mandal"),
]

ZONE_CHOICES = [
    ("NORTH", "North"),
    ("SOUTH", "South"),
    ("EAST", "East"),
    ("WEST", "West"),
    ("CENTRAL", "Central"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("geo", "0001_initial"),
        ("memberships", "0001_initial"),
        ("organizations", "0001_initial"),
        ("pricing", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentIntent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("level", models.CharField(choices=LEVEL_CHOICES, max_length=16)),
                ("zone", models.CharField(blank=True, choices=ZONE_CHOICES, max_length=16)),
                ("purpose", models.CharField(max_length=20)),
                ("mobile_number", models.CharField(db_index=True, max_length=20)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("base_amount", models.PositiveIntegerField(default=0, help_text="Minor units")),
                ("discount_amount", models.PositiveIntegerField(default=0, help_text="Minor units")),
                ("amount", models.PositiveIntegerField(default=0, help_text="Amount charged, minor units")),
                ("currency", models.CharField(default="INR", max_length=3)),
                ("fee_source", models.CharField(blank=True, max_length=20)),
                ("fee_override_id", models.BigIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("SUCCESS", "Success"),
                            ("FAILED", "Failed"),
                            ("REFUND_REQUIRED", "Refund required"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "provider_order_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Stripe PaymentIntent ID, e.g. 'pi_xxx'",
                        max_length=255,
                    ),
                ),
                ("provider_payment_ref", models.CharField(blank=True, max_length=255)),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cell",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="organizations.cell"
                    ),
                ),
                (
                    "country",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="geo.country",
                    ),
                ),
                (
                    "designation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="organizations.designation",
                    ),
                ),
                (
                    "discount",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="pricing.discount",
                    ),
                ),
                (
                    "district",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="geo.district",
                    ),
                ),
                (
                    "mandal",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="geo.mandal",
                    ),
                ),
                (
                    "membership",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_intent",
                        to="memberships.membership",
                    ),
                ),
                (
                    "state",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="geo.state",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
