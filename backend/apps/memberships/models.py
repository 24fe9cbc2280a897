"""
Membership models - seats, their payment bookkeeping and bucket locks.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.models import TimestampedModel
from apps.geo.models import Country, District, Mandal, State, Zone
from apps.organizations.models import Cell, Designation, OrgLevel


class Membership(TimestampedModel):
    """
    A seat: one identity holding one designation in one bucket.

    ``bucket_key`` (cell:designation:level:geo) and ``scope_key``
    (level:geo) are denormalized from the seat spec columns so capacity counts
    and the per-bucket sequence constraint work on a single column.
    """

    class Status(models.TextChoices):
        PENDING_PAYMENT = "PENDING_PAYMENT", "Pending payment"
        PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
        ACTIVE = "ACTIVE", "Active"
        EXPIRED = "EXPIRED", "Expired"
        REVOKED = "REVOKED", "Revoked"

    class PaymentStatus(models.TextChoices):
        NOT_REQUIRED = "NOT_REQUIRED", "Not required"
        PENDING = "PENDING", "Pending"
        SUCCESS = "SUCCESS", "Success"
        FAILED = "FAILED", "Failed"
        REFUNDED = "REFUNDED", "Refunded"

    # Statuses that occupy a seat; only EXPIRED/REVOKED free the slot
    LIVE_STATUSES = (Status.PENDING_PAYMENT, Status.PENDING_APPROVAL, Status.ACTIVE)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="memberships",
    )
    cell = models.ForeignKey(Cell, on_delete=models.PROTECT, related_name="memberships")
    designation = models.ForeignKey(Designation, on_delete=models.PROTECT, related_name="memberships")
    level = models.CharField(max_length=16, choices=OrgLevel.choices)
    zone = models.CharField(max_length=16, choices=Zone.choices, blank=True)
    country = models.ForeignKey(Country, on_delete=models.PROTECT, null=True, blank=True)
    state = models.ForeignKey(State, on_delete=models.PROTECT, null=True, blank=True)
    district = models.ForeignKey(District, on_delete=models.PROTECT, null=True, blank=True)
    mandal = models.ForeignKey(Mandal, on_delete=models.PROTECT, null=True, blank=True)

    bucket_key = models.CharField(max_length=128, db_index=True, editable=False)
    scope_key = models.CharField(max_length=64, editable=False)
    seat_sequence = models.PositiveIntegerField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING_PAYMENT,
        db_index=True,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.NOT_REQUIRED,
    )

    locked_at = models.DateTimeField(null=True, blank=True)
    activated_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["cell", "scope_key", "status"], name="membership_aggregate_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["bucket_key", "seat_sequence"],
                condition=Q(status__in=["PENDING_PAYMENT", "PENDING_APPROVAL", "ACTIVE"]),
                name="membership_live_seat_sequence_uniq",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.designation.code} #{self.seat_sequence} ({self.status})"

    @property
    def is_live(self) -> bool:
        return self.status in self.LIVE_STATUSES

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()


class MembershipPayment(TimestampedModel):
    """Payment bookkeeping for a seat: one row per amount due."""

    membership = models.ForeignKey(Membership, on_delete=models.PROTECT, related_name="payments")
    amount = models.PositiveIntegerField(default=0, help_text="Minor units")
    status = models.CharField(
        max_length=20,
        choices=Membership.PaymentStatus.choices,
        default=Membership.PaymentStatus.PENDING,
    )
    provider_ref = models.CharField(max_length=255, blank=True)
    meta = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.membership_id}: {self.amount} ({self.status})"


class SeatBucketLock(models.Model):
    """
    One row per seat bucket, locked with SELECT ... FOR UPDATE.

    Reservations in the same bucket serialize on this row, which is what
    makes the count-then-insert sequence safe under concurrency.
    """

    bucket_key = models.CharField(max_length=128, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.bucket_key
