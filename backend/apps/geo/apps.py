"""Geo app configuration."""

from django.apps import AppConfig


class GeoConfig(AppConfig):
    """Configuration for geo app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.geo"
