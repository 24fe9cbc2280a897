"""
Seat reservation services.

Every mutation of a bucket runs inside ``transaction.atomic()`` and first
locks the bucket's rows with ``select_for_update()``, in a fixed order:
the aggregate capacity row (when one governs the bucket), then the
``SeatBucketLock`` row. Counts taken after both locks are held cannot be
invalidated by a concurrent reservation in the same bucket.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from apps.core.logging import get_logger
from apps.memberships.capacity import (
    count_live_in_bucket,
    count_live_in_scope,
    find_aggregate_capacity,
    live_memberships,
)
from apps.memberships.exceptions import SeatNotFoundError, SeatStateError
from apps.memberships.models import Membership, MembershipPayment, SeatBucketLock
from apps.memberships.scope import SeatSpec
from apps.pricing.models import FeePurpose
from apps.pricing.services import quote_seat

logger = get_logger(__name__)

NO_SEATS_DESIGNATION = "NO_SEATS_DESIGNATION"
NO_SEATS_LEVEL_AGGREGATE = "NO_SEATS_LEVEL_AGGREGATE"


@dataclass
class ReservationResult:
    """Outcome of a seat reservation attempt."""

    accepted: bool
    membership_id: int | None = None
    seat_sequence: int | None = None
    requires_payment: bool = False
    fee: int = 0
    reason: str | None = None


@dataclass
class ReassignmentResult:
    """Outcome (or dry-run preview) of moving a seat to another bucket."""

    accepted: bool
    membership_id: int
    dry_run: bool
    reason: str | None = None
    seat_sequence: int | None = None
    fee: int = 0
    paid: int = 0
    delta_due: int = 0
    status_from: dict[str, str] = field(default_factory=dict)
    status_to: dict[str, str] = field(default_factory=dict)


def _lock_bucket(bucket_key: str) -> SeatBucketLock:
    """
    Lock (creating on first use) the bucket's lock row.

    Must be called inside a transaction.
    """
    try:
        return SeatBucketLock.objects.select_for_update().get(bucket_key=bucket_key)
    except SeatBucketLock.DoesNotExist:
        try:
            with transaction.atomic():
                SeatBucketLock.objects.create(bucket_key=bucket_key)
        except IntegrityError:
            # Concurrent insert won the race; fall through and wait on its lock
            pass
        return SeatBucketLock.objects.select_for_update().get(bucket_key=bucket_key)


def _lock_spec(spec: SeatSpec):
    """Take the aggregate and bucket locks for a spec, aggregate first."""
    aggregate = find_aggregate_capacity(spec, for_update=True)
    _lock_bucket(spec.bucket_key)
    return aggregate


def _capacity_reason(spec: SeatSpec, aggregate, exclude_membership_id: int | None = None) -> str | None:
    """Return the reason the bucket is full, or None when a seat is free."""
    if count_live_in_bucket(spec, exclude_membership_id) >= spec.designation.capacity:
        return NO_SEATS_DESIGNATION
    if aggregate is not None and count_live_in_scope(spec, exclude_membership_id) >= aggregate.capacity:
        return NO_SEATS_LEVEL_AGGREGATE
    return None


def next_seat_sequence(spec: SeatSpec, exclude_membership_id: int | None = None) -> int:
    """
    Smallest sequence in [1, capacity] not held by a live seat of the bucket.

    The live count has already admitted the reservation, so when every slot
    in range is taken (stale rows from a capacity decrease) the smallest
    free number above capacity is used instead.
    """
    qs = live_memberships().filter(bucket_key=spec.bucket_key)
    if exclude_membership_id is not None:
        qs = qs.exclude(pk=exclude_membership_id)
    taken = set(qs.values_list("seat_sequence", flat=True))

    capacity = spec.designation.capacity
    for sequence in range(1, capacity + 1):
        if sequence not in taken:
            return sequence

    sequence = capacity + 1
    while sequence in taken:
        sequence += 1
    logger.warning(
        "seat_sequence_drift",
        bucket=spec.bucket_key,
        capacity=capacity,
        seat_sequence=sequence,
    )
    return sequence


def reserve_seat(spec: SeatSpec, user=None, fee: int | None = None) -> ReservationResult:
    """
    Atomically reserve one seat in the seat spec's bucket.

    Args:
        spec: Resolved seat spec
        user: Seat holder, if already known
        fee: Amount due; defaults to the designation's base fee

    Returns:
        ReservationResult; ``accepted`` is False with a reason when the
        designation or the aggregate cap is exhausted.
    """
    amount = spec.designation.fee if fee is None else fee
    requires_payment = amount > 0

    with transaction.atomic():
        aggregate = _lock_spec(spec)
        reason = _capacity_reason(spec, aggregate)
        if reason is not None:
            logger.info("seat_reservation_rejected", bucket=spec.bucket_key, reason=reason)
            return ReservationResult(accepted=False, fee=amount, reason=reason)

        sequence = next_seat_sequence(spec)
        membership = Membership.objects.create(
            user=user,
            **spec.row_fields(),
            bucket_key=spec.bucket_key,
            scope_key=spec.scope.key,
            seat_sequence=sequence,
            status=(
                Membership.Status.PENDING_PAYMENT
                if requires_payment
                else Membership.Status.PENDING_APPROVAL
            ),
            payment_status=(
                Membership.PaymentStatus.PENDING
                if requires_payment
                else Membership.PaymentStatus.NOT_REQUIRED
            ),
            locked_at=timezone.now(),
        )
        if requires_payment:
            MembershipPayment.objects.create(
                membership=membership,
                amount=amount,
                status=Membership.PaymentStatus.PENDING,
            )

    logger.info(
        "seat_reserved",
        membership_id=membership.id,
        bucket=spec.bucket_key,
        seat_sequence=sequence,
        fee=amount,
    )
    return ReservationResult(
        accepted=True,
        membership_id=membership.id,
        seat_sequence=sequence,
        requires_payment=requires_payment,
        fee=amount,
    )


def _get_membership(membership_id: int, *, for_update: bool = False) -> Membership:
    qs = Membership.objects.select_related("cell", "designation")
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=membership_id)
    except Membership.DoesNotExist:
        raise SeatNotFoundError(f"Membership {membership_id} not found.") from None


def _activate(membership: Membership, now: datetime) -> None:
    membership.status = Membership.Status.ACTIVE
    membership.activated_at = now
    membership.expires_at = now + timedelta(days=membership.designation.validity_days)


def activate_paid_membership(
    membership: Membership,
    provider_ref: str = "",
    meta: dict[str, Any] | None = None,
) -> Membership:
    """
    Activate a freshly paid seat and settle its pending payment rows.

    Called by the registration finalizer inside its transaction.
    """
    now = timezone.now()
    _activate(membership, now)
    if membership.payment_status == Membership.PaymentStatus.PENDING:
        membership.payment_status = Membership.PaymentStatus.SUCCESS
    membership.save(
        update_fields=["status", "payment_status", "activated_at", "expires_at", "updated_at"]
    )
    membership.payments.filter(status=Membership.PaymentStatus.PENDING).update(
        status=Membership.PaymentStatus.SUCCESS,
        provider_ref=provider_ref,
        meta=meta,
        updated_at=now,
    )
    logger.info(
        "seat_activated",
        membership_id=membership.id,
        expires_at=membership.expires_at.isoformat(),
    )
    return membership


def activate_seat(membership_id: int) -> Membership:
    """
    Admin override: activate a seat that is awaiting approval.

    Raises:
        SeatNotFoundError: Unknown membership
        SeatStateError: Seat is not PENDING_APPROVAL
    """
    with transaction.atomic():
        membership = _get_membership(membership_id, for_update=True)
        if membership.status != Membership.Status.PENDING_APPROVAL:
            raise SeatStateError(
                f"Only PENDING_APPROVAL seats can be activated (seat is {membership.status})."
            )
        _activate(membership, timezone.now())
        membership.save(update_fields=["status", "activated_at", "expires_at", "updated_at"])

    logger.info("seat_activated_by_admin", membership_id=membership.id)
    return membership


def revoke_seat(membership_id: int) -> Membership:
    """
    Revoke a live seat, freeing its slot (and sequence number) for reuse.

    Raises:
        SeatNotFoundError: Unknown membership
        SeatStateError: Seat is already EXPIRED or REVOKED
    """
    with transaction.atomic():
        membership = _get_membership(membership_id, for_update=True)
        if not membership.is_live:
            raise SeatStateError(f"Seat is already {membership.status}.")
        membership.status = Membership.Status.REVOKED
        membership.revoked_at = timezone.now()
        membership.save(update_fields=["status", "revoked_at", "updated_at"])

    logger.info(
        "seat_revoked",
        membership_id=membership.id,
        bucket=membership.bucket_key,
        seat_sequence=membership.seat_sequence,
    )
    return membership


def _paid_total(membership: Membership) -> int:
    total = membership.payments.filter(status=Membership.PaymentStatus.SUCCESS).aggregate(
        total=Sum("amount")
    )["total"]
    return total or 0


def reassign_seat(membership_id: int, new_spec: SeatSpec, dry_run: bool = False) -> ReassignmentResult:
    """
    Move a seat to another bucket.

    Capacity is checked with the seat itself left out of the target counts.
    The new fee is priced like a new seat (fee overrides apply) and the
    amount still due is ``max(0, new fee - paid so far)``. PENDING payment
    rows left from the old bucket are closed as FAILED; when the amount due
    is positive the seat goes back to PENDING_PAYMENT with a new PENDING
    row for it, otherwise non-active seats move to PENDING_APPROVAL.
    With ``dry_run`` the outcome is computed and nothing is written.

    Raises:
        SeatNotFoundError: Unknown membership
        SeatStateError: Seat is not live
    """
    with transaction.atomic():
        membership = _get_membership(membership_id, for_update=True)
        if not membership.is_live:
            raise SeatStateError(f"Cannot reassign a {membership.status} seat.")

        aggregate = _lock_spec(new_spec)
        reason = _capacity_reason(new_spec, aggregate, exclude_membership_id=membership.id)
        if reason is not None:
            return ReassignmentResult(
                accepted=False,
                membership_id=membership.id,
                dry_run=dry_run,
                reason=reason,
            )

        sequence = next_seat_sequence(new_spec, exclude_membership_id=membership.id)
        fee = quote_seat(FeePurpose.ID_CARD_ISSUE, new_spec).amount
        paid = _paid_total(membership)
        delta_due = max(0, fee - paid)

        if delta_due > 0:
            target_status = Membership.Status.PENDING_PAYMENT
            target_payment_status = Membership.PaymentStatus.PENDING
        else:
            target_status = (
                membership.status
                if membership.status == Membership.Status.ACTIVE
                else Membership.Status.PENDING_APPROVAL
            )
            target_payment_status = (
                Membership.PaymentStatus.SUCCESS if paid > 0 else Membership.PaymentStatus.NOT_REQUIRED
            )

        result = ReassignmentResult(
            accepted=True,
            membership_id=membership.id,
            dry_run=dry_run,
            seat_sequence=sequence,
            fee=fee,
            paid=paid,
            delta_due=delta_due,
            status_from={"status": membership.status, "payment_status": membership.payment_status},
            status_to={"status": str(target_status), "payment_status": str(target_payment_status)},
        )
        if dry_run:
            return result

        for name, value in new_spec.row_fields().items():
            setattr(membership, name, value)
        membership.bucket_key = new_spec.bucket_key
        membership.scope_key = new_spec.scope.key
        membership.seat_sequence = sequence
        membership.status = target_status
        membership.payment_status = target_payment_status
        membership.locked_at = timezone.now()
        membership.save()

        # Amounts due for the old bucket no longer apply
        membership.payments.filter(status=Membership.PaymentStatus.PENDING).update(
            status=Membership.PaymentStatus.FAILED,
            meta={"reason": "superseded"},
            updated_at=timezone.now(),
        )
        if delta_due > 0:
            MembershipPayment.objects.create(
                membership=membership,
                amount=delta_due,
                status=Membership.PaymentStatus.PENDING,
            )

    logger.info(
        "seat_reassigned",
        membership_id=membership.id,
        bucket=new_spec.bucket_key,
        seat_sequence=sequence,
        delta_due=delta_due,
    )
    return result


def expire_memberships(now: datetime | None = None, dry_run: bool = False) -> int:
    """
    Mark ACTIVE seats whose ``expires_at`` has passed as EXPIRED.

    Returns:
        Number of seats expired (or that would be, with ``dry_run``)
    """
    now = now or timezone.now()
    qs = Membership.objects.filter(status=Membership.Status.ACTIVE, expires_at__lte=now)
    if dry_run:
        return qs.count()
    count = qs.update(status=Membership.Status.EXPIRED, updated_at=now)
    logger.info("memberships_expired", count=count)
    return count
