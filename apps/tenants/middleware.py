# apps/tenants/middleware.py
"""
TenantMiddleware - Resolves the tenant a request acts for.

The resolved tenant is stored on ``request.tenant`` and nowhere else.
Views and services receive it explicitly.

Resolution order:
1. HTTP_X_TENANT_ID header (superusers, or a user naming their own tenant)
2. The authenticated user's own tenant
3. Subdomain (e.g., acme.example.com -> acme)
4. Default tenant (for development)
"""
from .models import Tenant

NON_TENANT_SUBDOMAINS = ('www', 'api', 'admin', 'localhost', '127')


def resolve_tenant(request):
    """
    Resolve the tenant for ``request`` (a Django or DRF request).

    Returns:
        Tenant instance or None
    """
    user = getattr(request, 'user', None)
    active = Tenant.objects.filter(is_active=True)

    tenant_id = request.META.get('HTTP_X_TENANT_ID')
    if tenant_id and user is not None and user.is_authenticated:
        try:
            tenant_id_int = int(tenant_id)
        except (ValueError, TypeError):
            tenant_id_int = None
        if tenant_id_int is not None:
            # Regular users may only name their own tenant
            if user.is_superuser or getattr(user, 'tenant_id', None) == tenant_id_int:
                tenant = active.filter(id=tenant_id_int).first()
                if tenant:
                    return tenant

    if user is not None and user.is_authenticated and getattr(user, 'tenant_id', None):
        return active.filter(id=user.tenant_id).first()

    host = request.get_host().split(':')[0]
    parts = host.split('.')
    if len(parts) >= 2 and parts[0] not in NON_TENANT_SUBDOMAINS:
        tenant = active.filter(subdomain=parts[0]).first()
        if tenant:
            return tenant

    return active.filter(is_default=True).first()


class TenantMiddleware:
    """
    Middleware to resolve the tenant from the request.

    Unresolved requests get ``request.tenant = None``. API permissions reject
    them, and tenant querysets return nothing for a None tenant.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.tenant = resolve_tenant(request)
        return self.get_response(request)
