"""
Factories for pricing app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.pricing.models import Discount, FeeOverride, FeePurpose


class FeeOverrideFactory(DjangoModelFactory):
    """Global ID card fee unless a scope is passed."""

    class Meta:
        model = FeeOverride

    purpose = FeePurpose.ID_CARD_ISSUE
    amount = 20000
    currency = "INR"
    is_active = True


class DiscountFactory(DjangoModelFactory):
    class Meta:
        model = Discount

    mobile_number = factory.Sequence(lambda n: f"97{n:08d}")
    percent_off = 50
    status = Discount.Status.ACTIVE
    max_redemptions = 1
