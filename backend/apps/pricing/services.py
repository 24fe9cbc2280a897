"""
Fee and discount resolution.

Fees resolve from the most specific active override (team, then mandal,
district, state, then global) and fall back to the designation's base fee.
Discounts are percent-off grants bound to a mobile number; their write
paths lock the contact's live rows so at most one is ever live.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.accounts.services import normalize_mobile_number
from apps.core.logging import get_logger
from apps.geo.models import District, Mandal
from apps.memberships.scope import DistrictScope, MandalScope, SeatSpec, StateScope
from apps.organizations.services import get_active_settings
from apps.pricing.exceptions import (
    DiscountConflictError,
    DiscountNotFoundError,
    DiscountStateError,
    DiscountValidationError,
    FeeValidationError,
)
from apps.pricing.models import Discount, FeeOverride, FeePurpose

logger = get_logger(__name__)

SOURCE_DESIGNATION = "DESIGNATION"

EDITABLE_DISCOUNT_FIELDS = frozenset(
    {"mobile_number", "percent_off", "active_from", "active_to", "max_redemptions", "reason", "status"}
)

# Statuses an admin may set directly; REDEEMED is only reached by payment
ASSIGNABLE_DISCOUNT_STATUSES = frozenset({Discount.Status.ACTIVE, Discount.Status.CANCELLED})


@dataclass
class ResolvedFee:
    """A fee and where it came from (override tier or designation)."""

    amount: int
    currency: str
    renewal_interval_months: int | None
    source: str
    override_id: int | None = None


@dataclass
class DiscountBreakdown:
    base_amount: int
    discount_amount: int
    discount_percent: int | None
    final_amount: int


def resolve_fee(
    purpose: str,
    team_id: int | None = None,
    mandal_id: int | None = None,
    district_id: int | None = None,
    state_id: int | None = None,
) -> ResolvedFee | None:
    """
    Resolve the most specific active fee override for a purpose.

    Tiers are tried in order team, mandal, district, state, global; within
    a tier the earliest created override wins.

    Returns:
        ResolvedFee, or None when no override matches at any tier
    """
    base = FeeOverride.objects.filter(purpose=purpose, is_active=True).order_by("created_at", "id")
    tiers: list[tuple[str, dict[str, Any]]] = []
    if team_id:
        tiers.append(("TEAM", {"team_id": team_id}))
    if mandal_id:
        tiers.append(("MANDAL", {"mandal_id": mandal_id}))
    if district_id:
        tiers.append(("DISTRICT", {"district_id": district_id}))
    if state_id:
        tiers.append(("STATE", {"state_id": state_id}))
    tiers.append(
        (
            "GLOBAL",
            {
                "team__isnull": True,
                "mandal__isnull": True,
                "district__isnull": True,
                "state__isnull": True,
            },
        )
    )

    for source, lookup in tiers:
        override = base.filter(**lookup).first()
        if override is not None:
            return ResolvedFee(
                amount=override.amount,
                currency=override.currency,
                renewal_interval_months=override.renewal_interval_months,
                source=source,
                override_id=override.id,
            )
    return None


def _geo_chain(spec: SeatSpec) -> dict[str, int | None]:
    """Walk the scope's parent chain: mandal -> district -> state."""
    chain: dict[str, int | None] = {"mandal_id": None, "district_id": None, "state_id": None}
    scope = spec.scope
    if isinstance(scope, MandalScope):
        chain["mandal_id"] = scope.mandal_id
        mandal = Mandal.objects.select_related("district").get(pk=scope.mandal_id)
        chain["district_id"] = mandal.district_id
        chain["state_id"] = mandal.district.state_id
    elif isinstance(scope, DistrictScope):
        chain["district_id"] = scope.district_id
        chain["state_id"] = District.objects.values_list("state_id", flat=True).get(pk=scope.district_id)
    elif isinstance(scope, StateScope):
        chain["state_id"] = scope.state_id
    return chain


def validate_purpose(purpose: str | None) -> str:
    """
    Check a fee purpose against FeePurpose.

    Raises:
        FeeValidationError: Purpose is missing or unknown
    """
    if not purpose:
        raise FeeValidationError("purpose is required.")
    if purpose not in FeePurpose.values:
        raise FeeValidationError(f"Unknown purpose: {purpose}.")
    return purpose


def quote_seat(purpose: str | None, spec: SeatSpec, team_id: int | None = None) -> ResolvedFee:
    """
    Price a seat: the best fee override for the seat spec's geo chain, or the
    designation's base fee when none applies.

    Raises:
        FeeValidationError: Purpose is missing or unknown
    """
    purpose = validate_purpose(purpose)
    resolved = resolve_fee(purpose, team_id=team_id, **_geo_chain(spec))
    if resolved is not None:
        return resolved
    return ResolvedFee(
        amount=spec.designation.fee,
        currency=get_active_settings().currency,
        renewal_interval_months=None,
        source=SOURCE_DESIGNATION,
    )


def resolve_discount(mobile_number: str, now: datetime | None = None) -> Discount | None:
    """Most recently created ACTIVE discount for the contact whose window contains now."""
    normalized = normalize_mobile_number(mobile_number)
    if not normalized:
        return None
    now = now or timezone.now()
    candidates = Discount.objects.filter(
        mobile_number=normalized,
        status=Discount.Status.ACTIVE,
    ).order_by("-created_at", "-id")
    for discount in candidates:
        if discount.in_window(now) and discount.redeemed_count < discount.max_redemptions:
            return discount
    return None


def apply_discount(base_amount: int, discount: Discount | None) -> DiscountBreakdown:
    """
    Apply a discount to an amount in minor units.

    The discount amount is floored and the final amount never goes below
    zero. Discounts without a percent are ignored.
    """
    percent = discount.percent_off if discount is not None else None
    if not percent:
        return DiscountBreakdown(
            base_amount=base_amount,
            discount_amount=0,
            discount_percent=None,
            final_amount=base_amount,
        )
    discount_amount = min(base_amount, base_amount * percent // 100)
    return DiscountBreakdown(
        base_amount=base_amount,
        discount_amount=discount_amount,
        discount_percent=percent,
        final_amount=max(0, base_amount - discount_amount),
    )


def _validate_discount_fields(fields: dict[str, Any]) -> None:
    percent = fields.get("percent_off")
    if percent is not None and not 1 <= percent <= 100:
        raise DiscountValidationError("percent_off must be between 1 and 100.")
    if "max_redemptions" in fields and fields["max_redemptions"] < 1:
        raise DiscountValidationError("max_redemptions must be at least 1.")
    active_from = fields.get("active_from")
    active_to = fields.get("active_to")
    if active_from and active_to and active_from > active_to:
        raise DiscountValidationError("active_from must be before active_to.")


def _ensure_no_live_discount(mobile_number: str, exclude_id: int | None = None) -> None:
    """Lock the contact's live discounts and refuse if any remain."""
    live = Discount.objects.select_for_update().filter(
        mobile_number=mobile_number,
        status__in=Discount.LIVE_STATUSES,
    )
    if exclude_id is not None:
        live = live.exclude(pk=exclude_id)
    if list(live):
        raise DiscountConflictError(f"An active discount already exists for {mobile_number}.")


def get_discount(discount_id: int, *, for_update: bool = False) -> Discount:
    qs = Discount.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=discount_id)
    except Discount.DoesNotExist:
        raise DiscountNotFoundError(f"Discount {discount_id} not found.") from None


def create_discount(
    mobile_number: str,
    percent_off: int,
    *,
    active_from: datetime | None = None,
    active_to: datetime | None = None,
    max_redemptions: int = 1,
    reason: str = "",
    created_by: str = "",
) -> Discount:
    """
    Grant a discount to a contact.

    Raises:
        DiscountValidationError: Bad percent, window or redemption count
        DiscountConflictError: The contact already has a live discount
    """
    normalized = normalize_mobile_number(mobile_number)
    if not normalized:
        raise DiscountValidationError("mobile_number is required.")
    _validate_discount_fields(
        {
            "percent_off": percent_off,
            "active_from": active_from,
            "active_to": active_to,
            "max_redemptions": max_redemptions,
        }
    )

    try:
        with transaction.atomic():
            _ensure_no_live_discount(normalized)
            discount = Discount.objects.create(
                mobile_number=normalized,
                percent_off=percent_off,
                active_from=active_from,
                active_to=active_to,
                max_redemptions=max_redemptions,
                reason=reason,
                created_by=created_by,
            )
    except IntegrityError:
        raise DiscountConflictError(
            f"An active discount already exists for {normalized}."
        ) from None

    logger.info("discount_created", discount_id=discount.id, percent_off=percent_off)
    return discount


def update_discount(discount_id: int, **changes: Any) -> Discount:
    """
    Edit a discount.

    Field edits need the discount to be ACTIVE, or to be made ACTIVE by the
    same update. ``status`` may be set to ACTIVE or CANCELLED: setting a
    RESERVED discount to ACTIVE releases it from the intent holding it, and
    reactivating a CANCELLED one is refused while the contact has another
    live discount.

    Raises:
        DiscountNotFoundError: Unknown discount
        DiscountStateError: Discount is REDEEMED, or not ACTIVE for a field edit
        DiscountValidationError: Unknown field or invalid value
        DiscountConflictError: Contact already has another live discount
    """
    unknown = set(changes) - EDITABLE_DISCOUNT_FIELDS
    if unknown:
        raise DiscountValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}.")
    if "mobile_number" in changes:
        changes["mobile_number"] = normalize_mobile_number(changes["mobile_number"])
        if not changes["mobile_number"]:
            raise DiscountValidationError("mobile_number is required.")
    if "status" in changes and changes["status"] not in ASSIGNABLE_DISCOUNT_STATUSES:
        raise DiscountValidationError(f"status must be one of: {', '.join(sorted(ASSIGNABLE_DISCOUNT_STATUSES))}.")

    try:
        with transaction.atomic():
            discount = get_discount(discount_id, for_update=True)
            if discount.status == Discount.Status.REDEEMED:
                raise DiscountStateError("A redeemed discount cannot be edited.")

            new_status = changes.get("status", discount.status)
            field_edits = set(changes) - {"status"}
            if field_edits and new_status != Discount.Status.ACTIVE:
                raise DiscountStateError(f"Only ACTIVE discounts can be edited (discount is {new_status}).")
            if field_edits and discount.status == Discount.Status.RESERVED:
                raise DiscountStateError("Release a RESERVED discount before editing it.")

            merged = {name: getattr(discount, name) for name in EDITABLE_DISCOUNT_FIELDS}
            merged.update(changes)
            _validate_discount_fields(merged)

            becomes_live = new_status in Discount.LIVE_STATUSES and discount.status not in Discount.LIVE_STATUSES
            if becomes_live or merged["mobile_number"] != discount.mobile_number:
                _ensure_no_live_discount(merged["mobile_number"], exclude_id=discount.id)

            if discount.status == Discount.Status.RESERVED and new_status != Discount.Status.RESERVED:
                logger.info(
                    "discount_reservation_cleared",
                    discount_id=discount.id,
                    intent_id=discount.applied_to_intent_id,
                )
                discount.applied_to_intent = None

            for name, value in changes.items():
                setattr(discount, name, value)
            discount.save()
    except IntegrityError:
        raise DiscountConflictError("An active discount already exists for this mobile number.") from None

    logger.info("discount_updated", discount_id=discount.id, fields=sorted(changes))
    return discount


def cancel_discount(discount_id: int) -> Discount:
    """
    Cancel a discount. Cancelling twice is a no-op.

    Raises:
        DiscountNotFoundError: Unknown discount
        DiscountStateError: Discount was already redeemed
    """
    with transaction.atomic():
        discount = get_discount(discount_id, for_update=True)
        if discount.status == Discount.Status.REDEEMED:
            raise DiscountStateError("A redeemed discount cannot be cancelled.")
        if discount.status == Discount.Status.CANCELLED:
            return discount
        discount.status = Discount.Status.CANCELLED
        discount.save(update_fields=["status", "updated_at"])

    logger.info("discount_cancelled", discount_id=discount.id)
    return discount


def preview_discount(
    spec: SeatSpec,
    mobile_number: str,
    purpose: str = "ID_CARD_ISSUE",
    team_id: int | None = None,
) -> dict[str, Any]:
    """What a contact would pay for a seat right now (admin preview, no writes)."""
    fee = quote_seat(purpose, spec, team_id=team_id)
    discount = resolve_discount(mobile_number)
    breakdown = apply_discount(fee.amount, discount)
    return {
        "currency": fee.currency,
        "source": fee.source,
        "discount_id": discount.id if discount is not None else None,
        "base_amount": breakdown.base_amount,
        "discount_amount": breakdown.discount_amount,
        "discount_percent": breakdown.discount_percent,
        "final_amount": breakdown.final_amount,
    }


def reserve_discount(discount_id: int, intent) -> bool:
    """
    Hold an ACTIVE discount for a pending payment intent.

    Must run inside the transaction that creates the intent. Returns False
    when the discount stopped being ACTIVE since it was resolved.
    """
    discount = get_discount(discount_id, for_update=True)
    if discount.status != Discount.Status.ACTIVE:
        return False
    discount.status = Discount.Status.RESERVED
    discount.applied_to_intent = intent
    discount.save(update_fields=["status", "applied_to_intent", "updated_at"])
    return True


def release_discount(discount_id: int) -> None:
    """Return a RESERVED discount to ACTIVE after its intent failed."""
    discount = get_discount(discount_id, for_update=True)
    if discount.status != Discount.Status.RESERVED:
        return
    discount.status = Discount.Status.ACTIVE
    discount.applied_to_intent = None
    discount.save(update_fields=["status", "applied_to_intent", "updated_at"])
    logger.info("discount_released", discount_id=discount.id)


def redeem_discount(discount_id: int, intent_id: int) -> None:
    """
    Mark a discount REDEEMED once the intent it priced registered a seat.

    A discount released after a failed attempt (back to ACTIVE) is still
    redeemed when that intent later succeeds; one held by another intent
    is left alone.
    """
    discount = get_discount(discount_id, for_update=True)
    if discount.status == Discount.Status.RESERVED and discount.applied_to_intent_id != intent_id:
        return
    if discount.status not in Discount.LIVE_STATUSES:
        return
    discount.applied_to_intent_id = intent_id
    discount.redeemed_count += 1
    discount.status = Discount.Status.REDEEMED
    discount.save(update_fields=["status", "redeemed_count", "applied_to_intent", "updated_at"])
    logger.info("discount_redeemed", discount_id=discount.id)
