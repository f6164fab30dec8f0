# apps/api/v1/views/returns.py
"""
ViewSet for customer and supplier returns.
"""
from rest_framework import filters
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.returns.models import Return
from apps.returns.services import ReturnService
from apps.api.v1.serializers.returns import ReturnSerializer, ReturnWriteSerializer
from .base import DocumentViewSet


@extend_schema_view(
    list=extend_schema(tags=['returns'], summary='List returns'),
    retrieve=extend_schema(tags=['returns'], summary='Get return details'),
    create=extend_schema(tags=['returns'], summary='Create a draft return'),
    update=extend_schema(tags=['returns'], summary='Update a draft return'),
    partial_update=extend_schema(tags=['returns'], summary='Partially update a draft return'),
    destroy=extend_schema(tags=['returns'], summary='Delete a draft return'),
    cancel=extend_schema(tags=['returns'], summary='Cancel a draft return', request=None),
)
class ReturnViewSet(DocumentViewSet):
    model = Return
    service_class = ReturnService
    serializer_class = ReturnSerializer
    write_serializer_class = ReturnWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'return_type', 'location', 'customer', 'supplier']
    search_fields = ['number', 'partner_name', 'reason']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('location', 'customer', 'supplier')

    @extend_schema(tags=['returns'], summary='Process a draft return into stock', request=None)
    @action(detail=True, methods=['post'])
    def process(self, request, pk=None):
        return self.run_service(self.get_service().process, self.get_object())
