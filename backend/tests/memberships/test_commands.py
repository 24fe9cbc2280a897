"""Tests for membership management commands."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.memberships.models import Membership
from apps.memberships.scope import SeatSpec
from tests.memberships.factories import create_membership


@pytest.mark.django_db
class TestExpireMembershipsCommand:
    """Tests for the expire_memberships command."""

    def test_expires_past_seats(self, district_spec: SeatSpec) -> None:
        seat = create_membership(district_spec, expires_at=timezone.now() - timedelta(hours=1))
        out = StringIO()

        call_command("expire_memberships", stdout=out)

        seat.refresh_from_db()
        assert seat.status == Membership.Status.EXPIRED
        assert "Expired 1 membership(s)" in out.getvalue()

    def test_dry_run(self, district_spec: SeatSpec) -> None:
        seat = create_membership(district_spec, expires_at=timezone.now() - timedelta(hours=1))
        out = StringIO()

        call_command("expire_memberships", "--dry-run", stdout=out)

        seat.refresh_from_db()
        assert seat.status == Membership.Status.ACTIVE
        assert "Would expire 1 membership(s)" in out.getvalue()
