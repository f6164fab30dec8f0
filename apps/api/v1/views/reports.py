# apps/api/v1/views/reports.py
"""
Stock report endpoints.

GET /api/v1/reports/stock/            balances holding stock
GET /api/v1/reports/depleted/         balances at zero
GET /api/v1/reports/low-stock/        products at or below their reorder point
GET /api/v1/reports/expiring/         lots expiring within the warning window
GET /api/v1/reports/valuation/        value per location and grand total
GET /api/v1/reports/movements/        latest movements
GET /api/v1/reports/reconciliation/   balances that disagree with the ledger
"""
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.inventory.reports import ReportService
from apps.inventory.services import InventoryService
from apps.api.permissions import IsTenantUser, IsManagerOrAdmin
from apps.api.v1.serializers.reports import (
    BalanceReportParamsSerializer,
    ExpiringReportParamsSerializer,
    MovementReportParamsSerializer,
)
from .base import TenantRequestMixin

BALANCE_FILTERS = [
    OpenApiParameter('location', int, description='Location id'),
    OpenApiParameter('product', int, description='Product id'),
    OpenApiParameter('category', int, description='Category id'),
]


class ReportView(TenantRequestMixin, APIView):
    permission_classes = [IsAuthenticated, IsTenantUser]
    params_serializer_class = BalanceReportParamsSerializer

    def get_params(self):
        """Validated query parameters; a bad value is a 400 ``{'error', 'fields'}``."""
        serializer = self.params_serializer_class(data=self.request.query_params)
        if not serializer.is_valid():
            raise ValidationError({
                'error': f"Invalid report parameters: {', '.join(serializer.errors)}.",
                'fields': serializer.errors,
            })
        return serializer

    def get_filters(self):
        return self.get_params().to_filters()

    def get_service(self):
        return ReportService(self.request.tenant, self.request.user)


class StockSummaryView(ReportView):
    @extend_schema(tags=['reports'], summary='Stock on hand', parameters=BALANCE_FILTERS)
    def get(self, request):
        return Response(self.get_service().stock_summary(self.get_filters()))


class DepletedStockView(ReportView):
    @extend_schema(tags=['reports'], summary='Depleted balances', parameters=BALANCE_FILTERS)
    def get(self, request):
        return Response(self.get_service().depleted_stock(self.get_filters()))


class LowStockView(ReportView):
    @extend_schema(tags=['reports'], summary='Products at or below their reorder point')
    def get(self, request):
        return Response(self.get_service().low_stock())


class ExpiringStockView(ReportView):
    """GET /api/v1/reports/expiring/?days=30"""
    params_serializer_class = ExpiringReportParamsSerializer

    @extend_schema(
        tags=['reports'],
        summary='Stock expiring soon',
        parameters=[OpenApiParameter('days', int, description='Window in days (defaults to the tenant setting)')],
    )
    def get(self, request):
        days = self.get_params().validated_data.get('days')
        return Response(self.get_service().expiring_soon(days=days))


class ValuationView(ReportView):
    @extend_schema(tags=['reports'], summary='Inventory valuation per location', parameters=BALANCE_FILTERS)
    def get(self, request):
        return Response(self.get_service().valuation(self.get_filters()))


class MovementHistoryView(ReportView):
    """GET /api/v1/reports/movements/?product=&location=&type=&start=YYYY-MM-DD&end=YYYY-MM-DD"""
    params_serializer_class = MovementReportParamsSerializer

    @extend_schema(
        tags=['reports'],
        summary='Movement history',
        parameters=[
            OpenApiParameter('product', int),
            OpenApiParameter('location', int),
            OpenApiParameter('type', str, description='Movement type'),
            OpenApiParameter('start', str, description='YYYY-MM-DD'),
            OpenApiParameter('end', str, description='YYYY-MM-DD'),
        ],
    )
    def get(self, request):
        return Response(self.get_service().movement_history(self.get_filters()))


class ReconciliationView(ReportView):
    """Balances whose quantity differs from the sum of their movements. Empty when consistent."""
    permission_classes = [IsAuthenticated, IsTenantUser, IsManagerOrAdmin]

    @extend_schema(tags=['reports'], summary='Reconcile balances against the movement ledger')
    def get(self, request):
        mismatches = InventoryService(request.tenant, request.user).reconcile()
        return Response({'consistent': not mismatches, 'mismatches': mismatches})
