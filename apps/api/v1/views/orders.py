# apps/api/v1/views/orders.py
"""
ViewSet for PurchaseOrder with confirm, receive and cancel actions.
"""
from rest_framework import filters
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.orders.models import PurchaseOrder
from apps.orders.services import PurchaseOrderService
from apps.api.v1.serializers.orders import (
    PurchaseOrderSerializer, PurchaseOrderListSerializer,
    PurchaseOrderWriteSerializer, ReceiveSerializer,
)
from .base import DocumentViewSet


@extend_schema_view(
    list=extend_schema(tags=['orders'], summary='List all purchase orders'),
    retrieve=extend_schema(tags=['orders'], summary='Get purchase order details'),
    create=extend_schema(tags=['orders'], summary='Create a new purchase order'),
    update=extend_schema(tags=['orders'], summary='Update a draft purchase order'),
    partial_update=extend_schema(tags=['orders'], summary='Partially update a draft purchase order'),
    destroy=extend_schema(tags=['orders'], summary='Delete a draft purchase order'),
    cancel=extend_schema(tags=['orders'], summary='Cancel a purchase order', request=None),
)
class PurchaseOrderViewSet(DocumentViewSet):
    """
    ViewSet for PurchaseOrder model.

    Goods are received into the order's location, in as many receipts as
    needed; the order is partial until every line is fully received.
    """
    model = PurchaseOrder
    service_class = PurchaseOrderService
    serializer_class = PurchaseOrderSerializer
    write_serializer_class = PurchaseOrderWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'supplier', 'location', 'order_date']
    search_fields = ['number', 'supplier__name', 'notes']
    ordering_fields = ['number', 'order_date', 'expected_date', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('supplier', 'location')

    def get_serializer_class(self):
        if self.action == 'list':
            return PurchaseOrderListSerializer
        return super().get_serializer_class()

    @extend_schema(tags=['orders'], summary='Confirm a draft purchase order', request=None)
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """Confirm a draft purchase order."""
        return self.run_service(self.get_service().confirm, self.get_object())

    @extend_schema(tags=['orders'], summary='Receive goods against a purchase order', request=ReceiveSerializer)
    @action(detail=True, methods=['post'])
    def receive(self, request, pk=None):
        """
        Receive goods.

        Body: {"receipts": [{"line_id": 1, "quantity": "60", "lot_number": "L-1",
                             "expiry_date": "2026-12-31"}]}
        """
        po = self.get_object()
        serializer = ReceiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receipts = [dict(entry) for entry in serializer.validated_data['receipts']]
        return self.run_service(self.get_service().receive, po, receipts)
