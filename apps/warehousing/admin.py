# apps/warehousing/admin.py
"""
Django admin configuration for Warehousing models.

Documents are read-mostly here; transitions go through the API so that
stock and the movement ledger stay in step.
"""
from django.contrib import admin

from .models import Location, Transfer, TransferLine, CycleCount, CycleCountLine


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'location_type', 'parent', 'active', 'tenant']
    list_filter = ['tenant', 'location_type', 'active']
    search_fields = ['name']


class TransferLineInline(admin.TabularInline):
    model = TransferLine
    extra = 0
    fields = ['product', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
    readonly_fields = fields


@admin.register(Transfer)
class TransferAdmin(admin.ModelAdmin):
    list_display = ['number', 'from_location', 'to_location', 'status', 'sent_at', 'received_at', 'tenant']
    list_filter = ['tenant', 'status']
    search_fields = ['number']
    readonly_fields = ['number', 'status', 'sent_at', 'received_at', 'created_at', 'updated_at']
    inlines = [TransferLineInline]


class CycleCountLineInline(admin.TabularInline):
    model = CycleCountLine
    extra = 0
    fields = ['product', 'lot_number', 'expiry_date', 'system_qty', 'counted_qty']
    readonly_fields = fields


@admin.register(CycleCount)
class CycleCountAdmin(admin.ModelAdmin):
    list_display = ['number', 'location', 'count_date', 'status', 'posted_at', 'tenant']
    list_filter = ['tenant', 'status']
    search_fields = ['number']
    readonly_fields = ['number', 'status', 'posted_at', 'created_at', 'updated_at']
    inlines = [CycleCountLineInline]
