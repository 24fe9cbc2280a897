"""
Admin configuration for organizations app.
"""

from django.contrib import admin

from apps.organizations.models import (
    AggregateCapacity,
    Cell,
    Designation,
    RegistrationSettings,
    Team,
)


@admin.register(Cell)
class CellAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "code", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "code"]


@admin.register(Designation)
class DesignationAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "code", "capacity", "fee", "validity_days", "order_rank"]
    search_fields = ["name", "code"]
    ordering = ["order_rank", "name"]


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "cell", "state", "district", "mandal"]
    list_filter = ["cell"]
    raw_id_fields = ["state", "district", "mandal"]


@admin.register(AggregateCapacity)
class AggregateCapacityAdmin(admin.ModelAdmin):
    """Level-wide caps; rows without geo apply to every geo bucket of the level."""

    list_display = ["id", "cell", "level", "scope_key", "capacity"]
    list_filter = ["cell", "level"]
    readonly_fields = ["scope_key"]
    raw_id_fields = ["state", "district", "mandal"]


@admin.register(RegistrationSettings)
class RegistrationSettingsAdmin(admin.ModelAdmin):
    list_display = ["id", "currency", "require_photo_for_id_card", "created_at"]
    readonly_fields = ["created_at", "updated_at"]
