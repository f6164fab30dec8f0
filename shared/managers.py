# shared/managers.py
"""
Tenant-scoped querysets.

Every tenant-owned model exposes ``for_tenant(tenant)``. There is no ambient
current-tenant: callers pass the tenant they act for, and services never
query a tenant-owned table without it.
"""
from django.db import models


class TenantQuerySet(models.QuerySet):
    """QuerySet with an explicit tenant filter."""

    def for_tenant(self, tenant):
        """
        Restrict to one tenant's rows.

        A missing tenant yields an empty queryset rather than every tenant's
        data, so a view that failed to resolve its tenant leaks nothing.
        """
        if tenant is None:
            return self.none()
        return self.filter(tenant=tenant)


class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    """
    Default manager for tenant-owned models.

    Usage:
        Product.objects.for_tenant(request.tenant).filter(active=True)
    """
    pass
