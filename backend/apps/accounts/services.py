"""
Identity services - user lookup by mobile number and profile eligibility.
"""

import re

from django.db import IntegrityError, transaction

from apps.accounts.models import User, UserProfile
from apps.core.logging import get_logger

logger = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D+")


def normalize_mobile_number(value: str) -> str:
    """
    Normalize a mobile number to its national 10-digit form.

    Strips formatting and any country/trunk prefix (e.g. '+91 98765-43210',
    '09876543210' and '9876543210' all map to '9876543210').
    """
    digits = _NON_DIGITS.sub("", value or "")
    if len(digits) > 10:
        return digits[-10:]
    return digits


def find_user_by_mobile(mobile_number: str) -> User | None:
    """Find a user by (normalized) mobile number."""
    normalized = normalize_mobile_number(mobile_number)
    if not normalized:
        return None
    return User.objects.filter(mobile_number=normalized).first()


def find_or_create_user(mobile_number: str, full_name: str = "") -> User:
    """
    Get or create a User for a mobile number and upsert the profile name.

    Called by the registration finalizer after payment succeeds.
    Uses select_for_update for explicit row locking under concurrent requests.
    """
    normalized = normalize_mobile_number(mobile_number)
    if not normalized:
        raise ValueError("Mobile number is required")

    with transaction.atomic():
        try:
            user = User.objects.select_for_update().get(mobile_number=normalized)
        except User.DoesNotExist:
            try:
                with transaction.atomic():
                    user = User.objects.create_user(mobile_number=normalized)
                logger.info("user_created", user_id=user.id)
            except IntegrityError:
                # Concurrent insert won the race, fetch the winner
                user = User.objects.get(mobile_number=normalized)

        if full_name:
            UserProfile.objects.update_or_create(user=user, defaults={"full_name": full_name})

    return user


def has_profile_photo(user: User) -> bool:
    """Check the profile store for a photo (required before issuing an ID card)."""
    try:
        return user.profile.has_photo
    except UserProfile.DoesNotExist:
        return False
