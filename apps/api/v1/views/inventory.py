# apps/api/v1/views/inventory.py
"""
ViewSets for inventory balances, the movement ledger and adjustments.

Balances and movements are read-only; quantities change only through the
document transitions.
"""
import django_filters
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.inventory.models import InventoryBalance, StockMovement, Adjustment
from apps.inventory.services import AdjustmentService
from apps.api.permissions import IsTenantUser
from apps.api.v1.serializers.inventory import (
    InventoryBalanceSerializer, BalanceHistorySerializer, StockMovementSerializer,
    AdjustmentSerializer, AdjustmentWriteSerializer,
)
from .base import TenantRequestMixin, DocumentViewSet


class InventoryBalanceFilter(django_filters.FilterSet):
    in_stock = django_filters.BooleanFilter(method='filter_in_stock')
    expires_before = django_filters.DateFilter(field_name='expiry_date', lookup_expr='lte')

    class Meta:
        model = InventoryBalance
        fields = ['product', 'location', 'lot_number']

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(qty_on_hand__gt=0)
        return queryset.filter(qty_on_hand=0)


@extend_schema_view(
    list=extend_schema(tags=['inventory'], summary='List inventory balances'),
    retrieve=extend_schema(tags=['inventory'], summary='Get an inventory balance'),
)
class InventoryBalanceViewSet(TenantRequestMixin, viewsets.ReadOnlyModelViewSet):
    """
    Read-only balances per product/location/lot/expiry.

    Depleted balances stay listed at zero; filter ``in_stock=true`` to hide them.
    """
    serializer_class = InventoryBalanceSerializer
    permission_classes = [IsTenantUser]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = InventoryBalanceFilter
    search_fields = ['product__sku', 'product__name', 'lot_number']
    ordering_fields = ['qty_on_hand', 'avg_cost', 'expiry_date', 'updated_at']
    ordering = ['product__sku', 'location__name']

    def get_queryset(self):
        return InventoryBalance.objects.for_tenant(
            getattr(self.request, 'tenant', None)
        ).select_related('product', 'location')

    @extend_schema(
        tags=['inventory'],
        summary='Change history of a balance',
        responses={200: BalanceHistorySerializer(many=True)},
    )
    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        balance = self.get_object()
        records = balance.history.select_related('history_user').order_by('-history_date')[:100]
        return Response(BalanceHistorySerializer(records, many=True).data)


class StockMovementFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = StockMovement
        fields = ['product', 'location', 'movement_type', 'reference_type', 'reference_id', 'lot_number']


@extend_schema_view(
    list=extend_schema(tags=['inventory'], summary='List stock movements'),
    retrieve=extend_schema(tags=['inventory'], summary='Get a stock movement'),
)
class StockMovementViewSet(TenantRequestMixin, viewsets.ReadOnlyModelViewSet):
    """The append-only movement ledger, newest first."""
    serializer_class = StockMovementSerializer
    permission_classes = [IsTenantUser]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = StockMovementFilter
    search_fields = ['product__sku', 'reference_number', 'lot_number', 'notes']

    def get_queryset(self):
        return StockMovement.objects.for_tenant(
            getattr(self.request, 'tenant', None)
        ).select_related('product', 'location', 'created_by')


@extend_schema_view(
    list=extend_schema(tags=['inventory'], summary='List adjustments'),
    retrieve=extend_schema(tags=['inventory'], summary='Get adjustment details'),
    create=extend_schema(tags=['inventory'], summary='Create a draft adjustment'),
    update=extend_schema(tags=['inventory'], summary='Update a draft adjustment'),
    partial_update=extend_schema(tags=['inventory'], summary='Partially update a draft adjustment'),
    destroy=extend_schema(tags=['inventory'], summary='Delete a draft adjustment'),
    cancel=extend_schema(tags=['inventory'], summary='Cancel a draft adjustment', request=None),
)
class AdjustmentViewSet(DocumentViewSet):
    """Manual stock corrections. Negative lines remove stock, positive lines add it."""
    model = Adjustment
    service_class = AdjustmentService
    serializer_class = AdjustmentSerializer
    write_serializer_class = AdjustmentWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'location', 'reason']
    search_fields = ['number', 'notes']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('location')

    @extend_schema(tags=['inventory'], summary='Post a draft adjustment to stock', request=None)
    @action(detail=True, methods=['post'], url_path='post', url_name='post')
    def post_adjustment(self, request, pk=None):
        return self.run_service(self.get_service().post, self.get_object())
