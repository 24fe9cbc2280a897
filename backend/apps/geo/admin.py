"""
Admin configuration for geo app.
"""

from django.contrib import admin

from apps.geo.models import Country, District, Mandal, State


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "code"]
    search_fields = ["name", "code"]


@admin.register(State)
class StateAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "code", "zone", "country"]
    list_filter = ["zone", "country"]
    search_fields = ["name", "code"]


@admin.register(District)
class DistrictAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "state"]
    list_filter = ["state"]
    search_fields = ["name"]


@admin.register(Mandal)
class MandalAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "district"]
    search_fields = ["name", "district__name"]
    raw_id_fields = ["district"]
