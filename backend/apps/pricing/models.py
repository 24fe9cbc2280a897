"""
Pricing models - fee overrides and per-contact discounts.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from apps.core.models import TimestampedModel
from apps.geo.models import District, Mandal, State
from apps.organizations.models import Team


class FeePurpose(models.TextChoices):
    ID_CARD_ISSUE = "ID_CARD_ISSUE", "ID card issue"
    ID_CARD_RENEW = "ID_CARD_RENEW", "ID card renewal"
    DONATION = "DONATION", "Donation"
    OTHER = "OTHER", "Other"


class FeeOverride(TimestampedModel):
    """
    Fee for a purpose, optionally scoped to one team or geo unit.

    At most one of team/mandal/district/state may be set; none means the
    override is global. Resolution prefers the most specific scope.
    """

    purpose = models.CharField(max_length=20, choices=FeePurpose.choices)
    amount = models.PositiveIntegerField(help_text="Minor units")
    currency = models.CharField(max_length=3, default="INR")
    renewal_interval_months = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    team = models.ForeignKey(Team, on_delete=models.CASCADE, null=True, blank=True)
    mandal = models.ForeignKey(Mandal, on_delete=models.CASCADE, null=True, blank=True)
    district = models.ForeignKey(District, on_delete=models.CASCADE, null=True, blank=True)
    state = models.ForeignKey(State, on_delete=models.CASCADE, null=True, blank=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["purpose", "is_active"], name="fee_override_purpose_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(team__isnull=True, mandal__isnull=True, district__isnull=True)
                    | Q(team__isnull=True, mandal__isnull=True, state__isnull=True)
                    | Q(team__isnull=True, district__isnull=True, state__isnull=True)
                    | Q(mandal__isnull=True, district__isnull=True, state__isnull=True)
                ),
                name="fee_override_single_scope",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.purpose} {self.amount} {self.currency} ({self.scope_label})"

    @property
    def scope_label(self) -> str:
        for name in ("team", "mandal", "district", "state"):
            if getattr(self, f"{name}_id") is not None:
                return name.upper()
        return "GLOBAL"


class Discount(TimestampedModel):
    """
    Percent-off discount bound to a contact's mobile number.

    Lifecycle: ACTIVE -> RESERVED (held by a pending payment intent) ->
    REDEEMED, with RESERVED going back to ACTIVE when the intent fails.
    A contact has at most one ACTIVE or RESERVED discount at a time.
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        RESERVED = "RESERVED", "Reserved"
        REDEEMED = "REDEEMED", "Redeemed"
        CANCELLED = "CANCELLED", "Cancelled"

    LIVE_STATUSES = (Status.ACTIVE, Status.RESERVED)

    mobile_number = models.CharField(max_length=20, db_index=True)
    percent_off = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    active_from = models.DateTimeField(null=True, blank=True)
    active_to = models.DateTimeField(null=True, blank=True)
    max_redemptions = models.PositiveIntegerField(default=1)
    redeemed_count = models.PositiveIntegerField(default=0)
    applied_to_intent = models.ForeignKey(
        "billing.PaymentIntent",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    reason = models.CharField(max_length=255, blank=True)
    created_by = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["mobile_number"],
                condition=Q(status__in=["ACTIVE", "RESERVED"]),
                name="discount_one_live_per_mobile",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.mobile_number}: {self.percent_off}% ({self.status})"

    @property
    def is_live(self) -> bool:
        return self.status in self.LIVE_STATUSES

    def in_window(self, now) -> bool:
        if self.active_from is not None and now < self.active_from:
            return False
        if self.active_to is not None and now > self.active_to:
            return False
        return True
