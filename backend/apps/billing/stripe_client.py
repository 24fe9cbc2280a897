"""
Stripe client configuration.

Provides a configured Stripe client for payment-first registration.
"""

from types import ModuleType

import stripe

from config.settings.base import settings

STRIPE_API_VERSION = "2025-06-30.basil"

# Network configuration
# Stripe SDK has 80s default timeout which is reasonable for payment APIs.
# Retries are safe because every create call carries an idempotency key.
STRIPE_MAX_NETWORK_RETRIES = 2


def stripe_enabled() -> bool:
    """Payments go through Stripe only when a secret key is configured."""
    return bool(settings.STRIPE_SECRET_KEY)


def configure_stripe() -> None:
    """Configure Stripe API with settings."""
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.api_version = STRIPE_API_VERSION
    stripe.max_network_retries = STRIPE_MAX_NETWORK_RETRIES


def get_stripe() -> ModuleType:
    """
    Get configured Stripe module.

    Ensures Stripe is configured before use.
    """
    configure_stripe()
    return stripe
