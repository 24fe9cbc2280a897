"""Memberships app configuration."""

from django.apps import AppConfig


class MembershipsConfig(AppConfig):
    """Configuration for memberships (seat allocation) app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.memberships"
