# apps/orders/admin.py
from django.contrib import admin

from .models import PurchaseOrder, PurchaseOrderLine


class PurchaseOrderLineInline(admin.TabularInline):
    model = PurchaseOrderLine
    extra = 0
    fields = ['product', 'quantity_ordered', 'unit_cost', 'quantity_received']
    readonly_fields = ['quantity_received']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['number', 'supplier', 'location', 'order_date', 'status', 'tenant']
    list_filter = ['tenant', 'status']
    search_fields = ['number', 'supplier__name', 'notes']
    readonly_fields = ['number', 'status', 'created_at', 'updated_at']
    inlines = [PurchaseOrderLineInline]
