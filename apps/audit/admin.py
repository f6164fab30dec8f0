from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'tenant', 'user', 'action', 'resource_type', 'resource_name']
    list_filter = ['action', 'resource_type', 'tenant']
    search_fields = ['resource_name', 'resource_id', 'notes']
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
