"""
Billing models - payment-first registration intents.
"""

import uuid

from django.db import models

from apps.core.models import TimestampedModel
from apps.geo.models import Country, District, Mandal, State, Zone
from apps.organizations.models import Cell, Designation, OrgLevel


class PaymentIntent(TimestampedModel):
    """
    A priced seat request awaiting payment.

    The seat spec is frozen on the row when the order is created, so the
    finalizer registers exactly what was paid for. Stripe is the payment
    provider: ``provider_order_id`` holds the Stripe PaymentIntent id
    ('pi_xxx'). ``membership`` is set once, by the finalizer, and is the
    idempotency marker for registration.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        SUCCESS = "SUCCESS", "Success"
        FAILED = "FAILED", "Failed"
        REFUND_REQUIRED = "REFUND_REQUIRED", "Refund required"

    order_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)

    cell = models.ForeignKey(Cell, on_delete=models.PROTECT, related_name="+")
    designation = models.ForeignKey(Designation, on_delete=models.PROTECT, related_name="+")
    level = models.CharField(max_length=16, choices=OrgLevel.choices)
    zone = models.CharField(max_length=16, choices=Zone.choices, blank=True)
    country = models.ForeignKey(Country, on_delete=models.PROTECT, null=True, blank=True, related_name="+")
    state = models.ForeignKey(State, on_delete=models.PROTECT, null=True, blank=True, related_name="+")
    district = models.ForeignKey(District, on_delete=models.PROTECT, null=True, blank=True, related_name="+")
    mandal = models.ForeignKey(Mandal, on_delete=models.PROTECT, null=True, blank=True, related_name="+")

    purpose = models.CharField(max_length=20)
    mobile_number = models.CharField(max_length=20, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)

    base_amount = models.PositiveIntegerField(default=0, help_text="Minor units")
    discount_amount = models.PositiveIntegerField(default=0, help_text="Minor units")
    amount = models.PositiveIntegerField(default=0, help_text="Amount charged, minor units")
    currency = models.CharField(max_length=3, default="INR")
    fee_source = models.CharField(max_length=20, blank=True)
    fee_override_id = models.BigIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    provider_order_id = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text="Stripe PaymentIntent ID, e.g. 'pi_xxx'",
    )
    provider_payment_ref = models.CharField(max_length=255, blank=True)

    discount = models.ForeignKey(
        "pricing.Discount",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    membership = models.OneToOneField(
        "memberships.Membership",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_intent",
    )
    failure_reason = models.CharField(max_length=255, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.order_id} {self.amount} {self.currency} ({self.status})"

    @property
    def can_register(self) -> bool:
        """Paid but no seat registered yet."""
        return self.status == self.Status.SUCCESS and self.membership_id is None
