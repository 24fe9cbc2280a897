"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.geo.factories import DistrictFactory, MandalFactory
    from tests.organizations.factories import CellFactory, DesignationFactory
    from tests.memberships.factories import create_membership
    from tests.pricing.factories import DiscountFactory, FeeOverrideFactory
    from tests.billing.factories import create_intent

Example usage:

    @pytest.mark.django_db
    def test_something(district_spec):
        result = reserve_seat(district_spec)
        assert result.accepted
"""

import pytest
from django.test import Client

from apps.memberships.scope import DistrictScope, SeatSpec
from config.settings.base import settings

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def admin_headers(monkeypatch) -> dict[str, str]:
    """
    Configure ADMIN_API_TOKEN and return the matching Authorization header.

    Example:
        def test_admin_endpoint(api_client, admin_headers):
            api_client.post("/api/v1/...", headers=admin_headers)
    """
    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", ADMIN_TOKEN)
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def stripe_disabled(monkeypatch) -> None:
    """Run without a Stripe secret key (no provider calls, no signature required)."""
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")


@pytest.fixture
def stripe_enabled(monkeypatch) -> None:
    """Run with a Stripe secret key configured; tests must mock get_stripe."""
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")


@pytest.fixture
def district(db):
    from tests.geo.factories import DistrictFactory

    return DistrictFactory.create()


@pytest.fixture
def cell(db):
    from tests.organizations.factories import CellFactory

    return CellFactory.create()


@pytest.fixture
def designation(db):
    """A designation with a single seat per bucket and a 500.00 fee."""
    from tests.organizations.factories import DesignationFactory

    return DesignationFactory.create(capacity=1, fee=50000)


@pytest.fixture
def district_spec(cell, designation, district) -> SeatSpec:
    """Resolved DISTRICT-level spec for the single-seat designation."""
    return SeatSpec(cell=cell, designation=designation, scope=DistrictScope(district_id=district.id))
