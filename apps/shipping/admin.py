# apps/shipping/admin.py
"""
Django admin configuration for Shipping models.
"""
from django.contrib import admin
from .models import Shipment, ShipmentLine


class ShipmentLineInline(admin.TabularInline):
    """Inline editor for shipment lines."""
    model = ShipmentLine
    extra = 0
    fields = ['product', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
    readonly_fields = ['unit_cost']
    raw_id_fields = ['product']


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    """Admin interface for Shipment."""
    list_display = ['number', 'customer', 'location', 'ship_date', 'status', 'created_at']
    list_filter = ['tenant', 'status', 'ship_date']
    search_fields = ['number', 'customer__name']
    readonly_fields = ['number', 'status', 'shipped_at', 'created_at', 'updated_at']
    inlines = [ShipmentLineInline]
