"""
Tests for accounts models.
"""

import pytest
from django.db import IntegrityError

from apps.accounts.models import User
from tests.accounts.factories import UserFactory, UserProfileFactory


@pytest.mark.django_db
class TestUserModel:
    """Tests for User model."""

    def test_create_user(self) -> None:
        """Should create a user without a usable password."""
        user = User.objects.create_user(mobile_number="9876543210")

        assert user.pk is not None
        assert user.is_active is True
        assert user.is_staff is False
        assert user.has_usable_password() is False

    def test_create_user_requires_mobile(self) -> None:
        with pytest.raises(ValueError):
            User.objects.create_user(mobile_number="")

    def test_create_superuser(self) -> None:
        user = User.objects.create_superuser(mobile_number="9876543210", password="s3cret-pass")

        assert user.is_staff is True
        assert user.is_superuser is True
        assert user.check_password("s3cret-pass")

    def test_user_str(self) -> None:
        """String representation should be the mobile number."""
        user = UserFactory.create(mobile_number="9876543210")

        assert str(user) == "9876543210"

    def test_mobile_unique(self) -> None:
        UserFactory.create(mobile_number="9876543210")

        with pytest.raises(IntegrityError):
            UserFactory.create(mobile_number="9876543210")


@pytest.mark.django_db
class TestUserProfileModel:
    """Tests for UserProfile model."""

    def test_has_photo_from_url(self) -> None:
        profile = UserProfileFactory.create(photo_url="https://cdn.example.com/a.jpg")

        assert profile.has_photo is True

    def test_has_photo_from_media_id(self) -> None:
        profile = UserProfileFactory.create(photo_media_id="media_123")

        assert profile.has_photo is True

    def test_no_photo(self) -> None:
        assert UserProfileFactory.create().has_photo is False
