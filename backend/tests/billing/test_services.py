"""
Tests for payment-first registration services.

Stripe calls are mocked; no network access.
"""

from unittest.mock import MagicMock, patch

import pytest
import stripe

from apps.accounts.models import User
from apps.billing.exceptions import (
    InvalidSignatureError,
    InvalidTransitionError,
    MissingSignatureError,
    PaymentIntentNotFoundError,
    PaymentValidationError,
    ProviderError,
    SoldOutError,
)
from apps.billing.models import PaymentIntent
from apps.billing.services import (
    PROFILE_PHOTO_REQUIRED,
    check_id_card_eligibility,
    confirm_payment,
    create_payment_intent,
    finalize_payment_intent,
    get_payment_status,
    mark_intent_failed,
)
from apps.memberships.exceptions import CapacityError
from apps.memberships.models import Membership
from apps.pricing.models import Discount
from tests.accounts.factories import UserProfileFactory
from tests.billing.factories import create_intent
from tests.memberships.factories import create_membership
from tests.organizations.factories import RegistrationSettingsFactory
from tests.pricing.factories import DiscountFactory, FeeOverrideFactory

MOBILE = "9876543210"


def _mock_stripe(client_secret: str = "pi_123_secret_abc", status: str = "succeeded") -> MagicMock:
    mock_stripe = MagicMock()
    mock_stripe.StripeError = stripe.StripeError
    mock_stripe.PaymentIntent.create.return_value = MagicMock(id="pi_123", client_secret=client_secret)
    mock_stripe.PaymentIntent.retrieve.return_value = MagicMock(
        id="pi_123", client_secret=client_secret, status=status
    )
    return mock_stripe


@pytest.mark.django_db
class TestCreatePaymentIntent:
    """Tests for create_payment_intent."""

    def test_prices_at_designation_fee(self, district_spec, stripe_disabled) -> None:
        created = create_payment_intent(district_spec, "ID_CARD_ISSUE", "+91 98765 43210", full_name="Asha")

        intent = created.intent
        assert intent.status == PaymentIntent.Status.PENDING
        assert intent.mobile_number == MOBILE
        assert intent.base_amount == 50000
        assert intent.amount == 50000
        assert intent.fee_source == "DESIGNATION"
        assert intent.district_id == district_spec.scope.district_id
        assert created.client_secret is None

    def test_uses_fee_override(self, district_spec, stripe_disabled) -> None:
        override = FeeOverrideFactory.create(amount=30000)

        intent = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        assert intent.amount == 30000
        assert intent.fee_source == "GLOBAL"
        assert intent.fee_override_id == override.id

    def test_reserves_discount(self, district_spec, stripe_disabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE, percent_off=25)

        intent = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        assert intent.discount_id == discount.id
        assert intent.discount_amount == 12500
        assert intent.amount == 37500
        discount.refresh_from_db()
        assert discount.status == Discount.Status.RESERVED
        assert discount.applied_to_intent_id == intent.id

    def test_new_order_takes_over_abandoned_discount(self, district_spec, stripe_disabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE, percent_off=50)
        first = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        second = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        assert second.discount_id == discount.id
        assert second.amount == 25000
        first.refresh_from_db()
        assert first.status == PaymentIntent.Status.FAILED
        assert first.failure_reason == "superseded"
        discount.refresh_from_db()
        assert discount.status == Discount.Status.RESERVED
        assert discount.applied_to_intent_id == second.id

    def test_undiscounted_pending_orders_left_alone(self, district_spec, stripe_disabled) -> None:
        first = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE)

        first.refresh_from_db()
        assert first.status == PaymentIntent.Status.PENDING

    def test_late_payment_on_superseded_order_keeps_new_reservation(self, district_spec, stripe_disabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE, percent_off=50)
        first = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent
        second = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        result = finalize_payment_intent(first.order_id)

        assert result.status == PaymentIntent.Status.SUCCESS
        discount.refresh_from_db()
        assert discount.status == Discount.Status.RESERVED
        assert discount.applied_to_intent_id == second.id

    def test_rejects_full_bucket(self, district_spec, stripe_disabled) -> None:
        create_membership(district_spec)

        with pytest.raises(CapacityError):
            create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE)

        assert not PaymentIntent.objects.exists()

    def test_rejects_missing_mobile(self, district_spec, stripe_disabled) -> None:
        with pytest.raises(PaymentValidationError):
            create_payment_intent(district_spec, "ID_CARD_ISSUE", "")

    def test_rejects_unknown_purpose(self, district_spec, stripe_disabled) -> None:
        with pytest.raises(PaymentValidationError):
            create_payment_intent(district_spec, "RAFFLE", MOBILE)

    @patch("apps.billing.services.get_stripe")
    def test_creates_stripe_payment_intent(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        mock_stripe = _mock_stripe()
        mock_get_stripe.return_value = mock_stripe

        created = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE)

        call_kwargs = mock_stripe.PaymentIntent.create.call_args.kwargs
        assert call_kwargs["amount"] == 50000
        assert call_kwargs["currency"] == "inr"
        assert call_kwargs["metadata"]["order_id"] == str(created.intent.order_id)
        assert call_kwargs["idempotency_key"] == f"order-{created.intent.order_id}"
        assert created.client_secret == "pi_123_secret_abc"
        assert created.intent.provider_order_id == "pi_123"

    @patch("apps.billing.services.get_stripe")
    def test_zero_amount_skips_stripe(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        DiscountFactory.create(mobile_number=MOBILE, percent_off=100)

        created = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE)

        assert created.intent.amount == 0
        mock_get_stripe.assert_not_called()

    @patch("apps.billing.services.get_stripe")
    def test_stripe_error_fails_intent(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE, percent_off=10)
        mock_stripe = _mock_stripe()
        mock_stripe.PaymentIntent.create.side_effect = stripe.StripeError("card declined")
        mock_get_stripe.return_value = mock_stripe

        with pytest.raises(ProviderError):
            create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE)

        intent = PaymentIntent.objects.get()
        assert intent.status == PaymentIntent.Status.FAILED
        discount.refresh_from_db()
        assert discount.status == Discount.Status.ACTIVE


@pytest.mark.django_db
class TestFinalizePaymentIntent:
    """Tests for finalize_payment_intent."""

    def test_registers_seat(self, district_spec) -> None:
        intent = create_intent(district_spec, full_name="Asha")

        result = finalize_payment_intent(intent.order_id, provider_payment_ref="ch_1")

        intent.refresh_from_db()
        membership = Membership.objects.get(pk=result.membership_id)
        assert intent.status == PaymentIntent.Status.SUCCESS
        assert intent.membership_id == membership.id
        assert intent.provider_payment_ref == "ch_1"
        assert membership.status == Membership.Status.ACTIVE
        assert membership.payment_status == Membership.PaymentStatus.SUCCESS
        assert membership.user.mobile_number == "9876543210"
        assert membership.user.profile.full_name == "Asha"
        assert membership.payments.get().status == Membership.PaymentStatus.SUCCESS
        assert result.seat_sequence == 1
        assert result.already_registered is False

    def test_idempotent(self, district_spec) -> None:
        intent = create_intent(district_spec)

        first = finalize_payment_intent(intent.order_id)
        second = finalize_payment_intent(intent.order_id)

        assert second.already_registered is True
        assert second.membership_id == first.membership_id
        assert Membership.objects.count() == 1
        assert User.objects.count() == 1

    def test_sold_out_requires_refund(self, district_spec) -> None:
        discount = DiscountFactory.create(mobile_number="9000000002", status=Discount.Status.RESERVED)
        winner = create_intent(district_spec, mobile_number="9000000001")
        loser = create_intent(district_spec, mobile_number="9000000002", discount=discount)
        discount.applied_to_intent = loser
        discount.save()

        finalize_payment_intent(winner.order_id)
        with pytest.raises(SoldOutError) as exc_info:
            finalize_payment_intent(loser.order_id)

        assert exc_info.value.refund_required is True
        assert exc_info.value.code == "SOLD_OUT"
        loser.refresh_from_db()
        assert loser.status == PaymentIntent.Status.REFUND_REQUIRED
        assert loser.membership_id is None
        discount.refresh_from_db()
        assert discount.status == Discount.Status.ACTIVE
        assert Membership.objects.count() == 1

    def test_sold_out_repeats(self, district_spec) -> None:
        create_membership(district_spec)
        intent = create_intent(district_spec)

        with pytest.raises(SoldOutError):
            finalize_payment_intent(intent.order_id)
        with pytest.raises(SoldOutError):
            finalize_payment_intent(intent.order_id)

    def test_redeems_discount(self, district_spec, stripe_disabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE, percent_off=50)
        intent = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        finalize_payment_intent(intent.order_id)

        discount.refresh_from_db()
        assert discount.status == Discount.Status.REDEEMED
        assert discount.redeemed_count == 1
        assert discount.applied_to_intent_id == intent.id

    def test_failed_intent_can_still_register(self, district_spec) -> None:
        intent = create_intent(district_spec, status=PaymentIntent.Status.FAILED)

        result = finalize_payment_intent(intent.order_id)

        assert result.status == PaymentIntent.Status.SUCCESS

    def test_zero_amount_activates(self, district_spec) -> None:
        intent = create_intent(district_spec, amount=0)

        result = finalize_payment_intent(intent.order_id)

        membership = Membership.objects.get(pk=result.membership_id)
        assert membership.status == Membership.Status.ACTIVE
        assert membership.payment_status == Membership.PaymentStatus.NOT_REQUIRED

    def test_unknown_order(self) -> None:
        with pytest.raises(PaymentIntentNotFoundError):
            finalize_payment_intent("00000000-0000-0000-0000-000000000000")


@pytest.mark.django_db
class TestConfirmPayment:
    """Tests for confirm_payment."""

    def test_success_without_stripe(self, district_spec, stripe_disabled) -> None:
        intent = create_intent(district_spec)

        result = confirm_payment(str(intent.order_id), "success")

        assert result.status == PaymentIntent.Status.SUCCESS
        assert result.membership_id is not None

    def test_failed_marks_intent(self, district_spec, stripe_disabled) -> None:
        intent = create_intent(district_spec)

        result = confirm_payment(str(intent.order_id), "FAILED")

        assert result.status == PaymentIntent.Status.FAILED
        assert Membership.objects.count() == 0

    def test_rejects_unknown_status(self, district_spec, stripe_disabled) -> None:
        intent = create_intent(district_spec)

        with pytest.raises(PaymentValidationError):
            confirm_payment(str(intent.order_id), "MAYBE")

    def test_signature_required_with_stripe(self, district_spec, stripe_enabled) -> None:
        intent = create_intent(district_spec, provider_order_id="pi_123")

        with pytest.raises(MissingSignatureError):
            confirm_payment(str(intent.order_id), "SUCCESS")

    @patch("apps.billing.services.get_stripe")
    def test_valid_signature(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        mock_get_stripe.return_value = _mock_stripe()
        intent = create_intent(district_spec, provider_order_id="pi_123")

        result = confirm_payment(str(intent.order_id), "SUCCESS", provider_signature="pi_123_secret_abc")

        assert result.status == PaymentIntent.Status.SUCCESS

    @patch("apps.billing.services.get_stripe")
    def test_wrong_signature(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        mock_get_stripe.return_value = _mock_stripe()
        intent = create_intent(district_spec, provider_order_id="pi_123")

        with pytest.raises(InvalidSignatureError):
            confirm_payment(str(intent.order_id), "SUCCESS", provider_signature="forged")

        intent.refresh_from_db()
        assert intent.status == PaymentIntent.Status.PENDING

    @patch("apps.billing.services.get_stripe")
    def test_unpaid_provider_intent(self, mock_get_stripe, district_spec, stripe_enabled) -> None:
        mock_get_stripe.return_value = _mock_stripe(status="requires_payment_method")
        intent = create_intent(district_spec, provider_order_id="pi_123")

        with pytest.raises(InvalidSignatureError):
            confirm_payment(str(intent.order_id), "SUCCESS", provider_signature="pi_123_secret_abc")

    def test_unknown_order(self) -> None:
        with pytest.raises(PaymentIntentNotFoundError):
            confirm_payment("not-a-uuid", "SUCCESS")


@pytest.mark.django_db
class TestMarkIntentFailed:
    """Tests for mark_intent_failed."""

    def test_releases_discount(self, district_spec, stripe_disabled) -> None:
        discount = DiscountFactory.create(mobile_number=MOBILE)
        intent = create_payment_intent(district_spec, "ID_CARD_ISSUE", MOBILE).intent

        mark_intent_failed(intent.order_id, reason="card_declined")

        intent.refresh_from_db()
        discount.refresh_from_db()
        assert intent.status == PaymentIntent.Status.FAILED
        assert intent.failure_reason == "card_declined"
        assert discount.status == Discount.Status.ACTIVE
        assert discount.applied_to_intent_id is None

    def test_repeat_is_noop(self, district_spec) -> None:
        intent = create_intent(district_spec)

        mark_intent_failed(intent.order_id)
        assert mark_intent_failed(intent.order_id).status == PaymentIntent.Status.FAILED

    def test_cannot_fail_success(self, district_spec) -> None:
        intent = create_intent(district_spec)
        finalize_payment_intent(intent.order_id)

        with pytest.raises(InvalidTransitionError):
            mark_intent_failed(intent.order_id)


@pytest.mark.django_db
class TestPaymentStatusAndEligibility:
    """Tests for get_payment_status and check_id_card_eligibility."""

    def test_status_of_pending(self, district_spec) -> None:
        intent = create_intent(district_spec)

        status = get_payment_status(str(intent.order_id))

        assert status["status"] == PaymentIntent.Status.PENDING
        assert status["can_register"] is False
        assert status["membership_id"] is None

    def test_status_after_registration(self, district_spec) -> None:
        intent = create_intent(district_spec)
        result = finalize_payment_intent(intent.order_id)

        status = get_payment_status(str(intent.order_id))

        assert status["status"] == PaymentIntent.Status.SUCCESS
        assert status["membership_id"] == result.membership_id

    def test_photo_required(self, district_spec) -> None:
        intent = create_intent(district_spec)

        result = finalize_payment_intent(intent.order_id)

        assert result.id_card_eligible is False
        assert result.id_card_reason == PROFILE_PHOTO_REQUIRED

    def test_photo_present(self, district_spec) -> None:
        profile = UserProfileFactory.create(photo_url="https://cdn.example.com/p.jpg")
        membership = create_membership(district_spec, user=profile.user)

        assert check_id_card_eligibility(membership) == (True, None)

    def test_photo_not_required(self, district_spec) -> None:
        RegistrationSettingsFactory.create(require_photo_for_id_card=False)
        membership = create_membership(district_spec)

        assert check_id_card_eligibility(membership) == (True, None)
