# apps/parties/admin.py
from django.contrib import admin

from .models import Supplier, Customer


class PartyAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'contact_name', 'email', 'phone', 'active', 'tenant']
    list_filter = ['tenant', 'active']
    search_fields = ['name', 'code', 'contact_name', 'email']


@admin.register(Supplier)
class SupplierAdmin(PartyAdmin):
    list_display = PartyAdmin.list_display + ['lead_time_days']


@admin.register(Customer)
class CustomerAdmin(PartyAdmin):
    pass
