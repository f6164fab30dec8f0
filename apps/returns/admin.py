from django.contrib import admin

from .models import Return, ReturnLine


class ReturnLineInline(admin.TabularInline):
    model = ReturnLine
    extra = 0
    fields = ['product', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']


@admin.register(Return)
class ReturnAdmin(admin.ModelAdmin):
    list_display = ['number', 'return_type', 'partner_name', 'location', 'status', 'created_at']
    list_filter = ['tenant', 'return_type', 'status']
    search_fields = ['number', 'partner_name', 'customer__name', 'supplier__name']
    readonly_fields = ['number', 'status', 'processed_at', 'created_at', 'updated_at']
    inlines = [ReturnLineInline]
