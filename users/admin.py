from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'name', 'email', 'tenant', 'role', 'is_active']
    list_filter = ['tenant', 'role', 'is_active', 'is_superuser']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Tenant', {'fields': ['name', 'tenant', 'role']}),
    )
