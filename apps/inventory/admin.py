# apps/inventory/admin.py
"""
Django admin configuration for Inventory models.

Balances and movements are read-only: quantities change only through the
services, which keep the ledger and the balances in step.
"""
from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from .models import InventoryBalance, StockMovement, Adjustment, AdjustmentLine


@admin.register(InventoryBalance)
class InventoryBalanceAdmin(SimpleHistoryAdmin):
    """Admin interface for InventoryBalance, with change history."""
    list_display = [
        'product', 'location', 'lot_number', 'expiry_date',
        'qty_on_hand', 'avg_cost', 'inventory_value_display', 'updated_at'
    ]
    list_filter = ['tenant', 'location']
    search_fields = ['product__sku', 'product__name', 'lot_number']
    readonly_fields = [
        'tenant', 'product', 'location', 'lot_number', 'expiry_date',
        'qty_on_hand', 'avg_cost', 'created_at', 'updated_at',
    ]

    def inventory_value_display(self, obj):
        return f"{obj.inventory_value:,.2f}"
    inventory_value_display.short_description = 'Value'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """Admin interface for the movement ledger (view only)."""
    list_display = [
        'created_at', 'movement_type', 'product', 'location',
        'quantity', 'unit_cost', 'reference_number', 'created_by'
    ]
    list_filter = ['tenant', 'movement_type', 'location', 'created_at']
    search_fields = ['product__sku', 'reference_number', 'lot_number']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class AdjustmentLineInline(admin.TabularInline):
    model = AdjustmentLine
    extra = 0
    fields = ['product', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
    readonly_fields = fields


@admin.register(Adjustment)
class AdjustmentAdmin(admin.ModelAdmin):
    list_display = ['number', 'location', 'reason', 'status', 'posted_at', 'tenant']
    list_filter = ['tenant', 'status', 'reason']
    search_fields = ['number', 'notes']
    readonly_fields = ['number', 'status', 'posted_at', 'posted_by', 'created_at', 'updated_at']
    inlines = [AdjustmentLineInline]
