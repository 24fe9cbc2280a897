"""Pricing app configuration."""

from django.apps import AppConfig


class PricingConfig(AppConfig):
    """Configuration for pricing (fees and discounts) app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.pricing"
