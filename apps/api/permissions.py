# apps/api/permissions.py
"""
Tenant-aware permissions for the REST API.

IsTenantUser is applied globally and ensures users only reach data of the
tenant resolved for the request. The role permissions are added per view.
"""
from rest_framework import permissions


class IsTenantUser(permissions.BasePermission):
    """
    Permission that checks if the user belongs to the request's tenant.

    ``request.tenant`` is set by TenantModelViewSet after authentication
    (and by TenantMiddleware for session requests).
    """
    message = "You do not have permission to access this tenant's data."

    def has_permission(self, request, view):
        # Must be authenticated
        if not request.user or not request.user.is_authenticated:
            return False

        # Must have a tenant
        tenant = getattr(request, 'tenant', None)
        if tenant is None:
            return False

        # Superusers can access any tenant
        if request.user.is_superuser:
            return True

        return request.user.tenant_id == tenant.pk

    def has_object_permission(self, request, view, obj):
        # Object must belong to the current tenant
        if hasattr(obj, 'tenant_id'):
            return obj.tenant_id == request.tenant.pk
        return True


class HasWriteRole(permissions.BasePermission):
    """
    Read-only access for every tenant user; writes (including document
    transitions) need a role other than readonly.
    """
    message = "Your role only allows read access."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.can_write


class IsManagerOrAdmin(permissions.BasePermission):
    """User must be a manager, an admin or a superuser."""
    message = "Only managers and admins can do this."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_manager
