# apps/api/v1/views/audit.py
from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.audit.models import AuditLog
from apps.api.permissions import IsTenantUser, IsManagerOrAdmin
from apps.api.v1.serializers.audit import AuditLogSerializer
from .base import TenantRequestMixin


@extend_schema_view(
    list=extend_schema(tags=['audit'], summary='List audit log entries'),
    retrieve=extend_schema(tags=['audit'], summary='Get an audit log entry'),
)
class AuditLogViewSet(TenantRequestMixin, viewsets.ReadOnlyModelViewSet):
    """Audit trail, newest first. Managers and admins only."""
    serializer_class = AuditLogSerializer
    permission_classes = [IsTenantUser, IsManagerOrAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['action', 'resource_type', 'resource_id', 'user']
    search_fields = ['resource_name', 'notes']

    def get_queryset(self):
        return AuditLog.objects.for_tenant(getattr(self.request, 'tenant', None)).select_related('user')
