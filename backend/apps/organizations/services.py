"""
Catalogue lookups and the active registration settings accessor.
"""

from django.db.models import Q

from apps.core.exceptions import NotFoundError
from apps.organizations.models import Cell, Designation, RegistrationSettings


def _id_or_none(ref: str | int) -> int | None:
    text = str(ref).strip()
    return int(text) if text.isdigit() else None


def resolve_cell(ref: str | int) -> Cell:
    """
    Resolve a cell by id, code or name.

    Raises:
        NotFoundError: No cell matches the reference
    """
    query = Q(code=str(ref)) | Q(name=str(ref))
    pk = _id_or_none(ref)
    if pk is not None:
        query |= Q(pk=pk)
    cell = Cell.objects.filter(query).order_by("id").first()
    if cell is None:
        raise NotFoundError(f"Cell '{ref}' not found.", code="CELL_NOT_FOUND")
    return cell


def resolve_designation(ref: str | int) -> Designation:
    """
    Resolve a designation by id or code.

    Raises:
        NotFoundError: No designation matches the reference
    """
    query = Q(code=str(ref))
    pk = _id_or_none(ref)
    if pk is not None:
        query |= Q(pk=pk)
    designation = Designation.objects.filter(query).order_by("id").first()
    if designation is None:
        raise NotFoundError(f"Designation '{ref}' not found.", code="DESIGNATION_NOT_FOUND")
    return designation


def get_active_settings() -> RegistrationSettings:
    """
    Return the active registration settings.

    The most recently created row wins. When none exists an unsaved row
    with model defaults is returned, so callers never need a None check.
    """
    active = RegistrationSettings.objects.order_by("-created_at", "-id").first()
    if active is None:
        from config.settings.base import settings

        return RegistrationSettings(currency=settings.PAYMENTS_CURRENCY)
    return active
