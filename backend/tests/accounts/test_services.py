"""
Tests for accounts services.
"""

import pytest

from apps.accounts.models import User, UserProfile
from apps.accounts.services import (
    find_or_create_user,
    find_user_by_mobile,
    has_profile_photo,
    normalize_mobile_number,
)

from .factories import UserFactory, UserProfileFactory


class TestNormalizeMobileNumber:
    """Tests for normalize_mobile_number."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("9876543210", "9876543210"),
            ("+91 98765 43210", "9876543210"),
            ("+91-98765-43210", "9876543210"),
            ("09876543210", "9876543210"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalizes(self, raw, expected) -> None:
        assert normalize_mobile_number(raw) == expected


@pytest.mark.django_db
class TestFindOrCreateUser:
    """Tests for find_or_create_user service."""

    def test_creates_new_user(self) -> None:
        """Should create a new user and profile when none exists."""
        user = find_or_create_user("+91 98765 43210", full_name="Asha Rao")

        assert user.mobile_number == "9876543210"
        assert user.profile.full_name == "Asha Rao"
        assert User.objects.count() == 1

    def test_returns_existing_user(self) -> None:
        existing = UserFactory.create(mobile_number="9876543210")

        user = find_or_create_user("09876543210")

        assert user.pk == existing.pk
        assert User.objects.count() == 1

    def test_updates_profile_name(self) -> None:
        profile = UserProfileFactory.create(full_name="Old Name")

        find_or_create_user(profile.user.mobile_number, full_name="New Name")

        profile.refresh_from_db()
        assert profile.full_name == "New Name"

    def test_blank_name_leaves_profile_alone(self) -> None:
        user = find_or_create_user("9876543210")

        assert not UserProfile.objects.filter(user=user).exists()

    def test_requires_mobile(self) -> None:
        with pytest.raises(ValueError):
            find_or_create_user("")


@pytest.mark.django_db
class TestLookups:
    """Tests for find_user_by_mobile and has_profile_photo."""

    def test_find_user_by_mobile(self) -> None:
        user = UserFactory.create(mobile_number="9876543210")

        assert find_user_by_mobile("+91 98765 43210") == user
        assert find_user_by_mobile("9000000000") is None
        assert find_user_by_mobile("") is None

    def test_has_profile_photo_without_profile(self) -> None:
        assert has_profile_photo(UserFactory.create()) is False

    def test_has_profile_photo(self) -> None:
        profile = UserProfileFactory.create(photo_url="https://cdn.example.com/a.jpg")

        assert has_profile_photo(profile.user) is True
