# apps/api/v1/views/shipping.py
"""
ViewSet for Shipment with confirm, ship and cancel actions.
"""
from rest_framework import filters
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.shipping.models import Shipment
from apps.shipping.services import ShippingService
from apps.api.v1.serializers.shipping import ShipmentSerializer, ShipmentWriteSerializer, ShipSerializer
from .base import DocumentViewSet


@extend_schema_view(
    list=extend_schema(tags=['shipping'], summary='List shipments'),
    retrieve=extend_schema(tags=['shipping'], summary='Get shipment details'),
    create=extend_schema(tags=['shipping'], summary='Create a draft shipment'),
    update=extend_schema(tags=['shipping'], summary='Update a draft shipment'),
    partial_update=extend_schema(tags=['shipping'], summary='Partially update a draft shipment'),
    destroy=extend_schema(tags=['shipping'], summary='Delete a draft shipment'),
    cancel=extend_schema(tags=['shipping'], summary='Cancel a shipment that has not shipped', request=None),
)
class ShipmentViewSet(DocumentViewSet):
    model = Shipment
    service_class = ShippingService
    serializer_class = ShipmentSerializer
    write_serializer_class = ShipmentWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'customer', 'location', 'ship_date']
    search_fields = ['number', 'customer__name', 'notes']
    ordering_fields = ['number', 'ship_date', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('customer', 'location')

    @extend_schema(tags=['shipping'], summary='Confirm a draft shipment (checks stock)', request=None)
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        return self.run_service(self.get_service().confirm, self.get_object())

    @extend_schema(tags=['shipping'], summary='Ship a confirmed shipment', request=ShipSerializer)
    @action(detail=True, methods=['post'])
    def ship(self, request, pk=None):
        shipment = self.get_object()
        serializer = ShipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self.run_service(
            self.get_service().ship, shipment, ship_date=serializer.validated_data.get('ship_date'),
        )
