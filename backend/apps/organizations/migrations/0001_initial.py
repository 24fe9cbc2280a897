import django.core.validators
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
    ]

    operations = [
        migrations.CreateModel(
            name="Cell",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("code", models.CharField(max_length=64, unique=True)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Designation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=64, unique=True)),
                ("capacity", models.PositiveIntegerField(default=0)),
                ("fee", models.PositiveIntegerField(default=0, help_text="Base fee in minor units (e.g. paise)")),
                ("validity_days", models.PositiveIntegerField(default=365)),
                ("order_rank", models.IntegerField(default=0)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to="organizations.designation",
                    ),
                ),
            ],
            options={
                "ordering": ["order_rank", "name"],
            },
        ),
        migrations.CreateModel(
            name="RegistrationSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("currency", models.CharField(default="INR", max_length=3)),
                ("require_photo_for_id_card", models.BooleanField(default=True)),
                ("notes", models.CharField(blank=True, max_length=255)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "verbose_name_plural": "registration settings",
            },
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                (
                    "cell",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="teams",
                        to="organizations.cell",
                    ),
                ),
                (
                    "district",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="geo.district"
                    ),
                ),
                (
                    "mandal",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="geo.mandal"
                    ),
                ),
                (
                    "state",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="geo.state"
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="AggregateCapacity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("level", models.CharField(choices=LEVEL_CHOICES, max_length=16)),
                ("zone", models.CharField(blank=True, choices=ZONE_CHOICES, max_length=16)),
                (
                    "capacity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(0)]),
                ),
                ("scope_key", models.CharField(editable=False, max_length=64)),
                (
                    "cell",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="aggregate_capacities",
                        to="organizations.cell",
                    ),
                ),
                (
                    "country",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="geo.country"
                    ),
                ),
                (
                    "district",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="geo.district"
                    ),
                ),
                (
                    "mandal",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="geo.mandal"
                    ),
                ),
                (
                    "state",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="geo.state"
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "aggregate capacities",
                "constraints": [
                    models.UniqueConstraint(fields=("cell", "scope_key"), name="org_aggcap_cell_scope_uniq"),
                ],
            },
        ),
    ]
