# apps/tenants/admin.py
"""
Django admin configuration for tenant models.
"""
from django.contrib import admin

from .models import Tenant, TenantSettings, TenantSequence


class TenantSettingsInline(admin.StackedInline):
    model = TenantSettings
    can_delete = False
    verbose_name_plural = 'Settings'
    fields = [
        ('company_name', 'currency'),
        'expiry_warning_days',
    ]


class TenantSequenceInline(admin.TabularInline):
    model = TenantSequence
    extra = 0
    fields = ['sequence_type', 'prefix', 'next_value', 'padding']
    readonly_fields = ['sequence_type']


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'subdomain', 'is_active', 'is_default', 'created_at']
    list_filter = ['is_active', 'is_default']
    search_fields = ['name', 'subdomain']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [TenantSettingsInline, TenantSequenceInline]

    def save_model(self, request, obj, form, change):
        """Ensure only one tenant can be default."""
        if obj.is_default:
            Tenant.objects.filter(is_default=True).exclude(pk=obj.pk).update(is_default=False)
        super().save_model(request, obj, form, change)


@admin.register(TenantSequence)
class TenantSequenceAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'sequence_type', 'prefix', 'next_value', 'padding']
    list_filter = ['sequence_type', 'tenant']

    def has_add_permission(self, request):
        """Sequences are created by signals."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False
