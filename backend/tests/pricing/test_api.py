"""Tests for discount administration endpoints."""

import pytest
from django.test import Client

from apps.pricing.models import Discount
from tests.pricing.factories import DiscountFactory

BASE = "/api/v1/pricing/admin/discounts"


@pytest.mark.django_db
class TestDiscountAdminApi:
    """Tests for /api/v1/pricing/admin/discounts."""

    def test_requires_token(self, api_client: Client, admin_headers) -> None:
        response = api_client.post(BASE, {"mobile_number": "9876543210", "percent_off": 10}, content_type="application/json")

        assert response.status_code == 401

    def test_create(self, api_client: Client, admin_headers) -> None:
        response = api_client.post(
            BASE,
            {"mobile_number": "9876543210", "percent_off": 10},
            content_type="application/json",
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "ACTIVE"

    def test_create_conflict(self, api_client: Client, admin_headers) -> None:
        DiscountFactory.create(mobile_number="9876543210")

        response = api_client.post(
            BASE,
            {"mobile_number": "9876543210", "percent_off": 10},
            content_type="application/json",
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_update_and_cancel(self, api_client: Client, admin_headers) -> None:
        discount = DiscountFactory.create(percent_off=10)

        response = api_client.patch(
            f"{BASE}/{discount.id}",
            {"percent_off": 15},
            content_type="application/json",
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["percent_off"] == 15

        response = api_client.post(f"{BASE}/{discount.id}/cancel", headers=admin_headers)
        assert response.status_code == 200
        assert Discount.objects.get(pk=discount.id).status == Discount.Status.CANCELLED

    def test_cancel_redeemed_is_400(self, api_client: Client, admin_headers) -> None:
        discount = DiscountFactory.create(status=Discount.Status.REDEEMED)

        response = api_client.post(f"{BASE}/{discount.id}/cancel", headers=admin_headers)

        assert response.status_code == 400

    def test_get_unknown_is_404(self, api_client: Client, admin_headers) -> None:
        response = api_client.get(f"{BASE}/999999", headers=admin_headers)

        assert response.status_code == 404

    def test_preview(self, api_client: Client, admin_headers, cell, designation, district) -> None:
        DiscountFactory.create(mobile_number="9876543210", percent_off=50)

        response = api_client.post(
            f"{BASE}/preview",
            {
                "cell": cell.code,
                "designation": designation.code,
                "level": "DISTRICT",
                "district_id": district.id,
                "mobile_number": "9876543210",
            },
            content_type="application/json",
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["final_amount"] == 25000

    def test_patch_status_releases_reserved(self, api_client: Client, admin_headers) -> None:
        discount = DiscountFactory.create(status=Discount.Status.RESERVED)

        response = api_client.patch(
            f"{BASE}/{discount.id}",
            {"status": "ACTIVE"},
            content_type="application/json",
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "ACTIVE"
        assert response.json()["applied_to_intent_id"] is None
