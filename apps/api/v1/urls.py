# apps/api/v1/urls.py
"""
URL routing for API v1.

All API endpoints are mounted under /api/v1/
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from .views.products import CategoryViewSet, ProductViewSet
from .views.parties import SupplierViewSet, CustomerViewSet
from .views.warehousing import LocationViewSet, TransferViewSet, CycleCountViewSet
from .views.inventory import InventoryBalanceViewSet, StockMovementViewSet, AdjustmentViewSet
from .views.orders import PurchaseOrderViewSet
from .views.shipping import ShipmentViewSet
from .views.returns import ReturnViewSet
from .views.audit import AuditLogViewSet
from .views.users import UserViewSet, CurrentUserView
from .views.reports import (
    StockSummaryView, DepletedStockView, LowStockView, ExpiringStockView,
    ValuationView, MovementHistoryView, ReconciliationView,
)
from .views.health import health_check

router = DefaultRouter()

# Master data
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'products', ProductViewSet, basename='product')
router.register(r'suppliers', SupplierViewSet, basename='supplier')
router.register(r'customers', CustomerViewSet, basename='customer')
router.register(r'locations', LocationViewSet, basename='location')
router.register(r'users', UserViewSet, basename='user')

# Inventory
router.register(r'balances', InventoryBalanceViewSet, basename='balance')
router.register(r'movements', StockMovementViewSet, basename='movement')
router.register(r'adjustments', AdjustmentViewSet, basename='adjustment')

# Documents
router.register(r'purchase-orders', PurchaseOrderViewSet, basename='purchaseorder')
router.register(r'shipments', ShipmentViewSet, basename='shipment')
router.register(r'transfers', TransferViewSet, basename='transfer')
router.register(r'cycle-counts', CycleCountViewSet, basename='cyclecount')
router.register(r'returns', ReturnViewSet, basename='return')

# Audit
router.register(r'audit-logs', AuditLogViewSet, basename='auditlog')

urlpatterns = [
    # Health check (no auth)
    path('health/', health_check, name='health-check'),

    # JWT Authentication
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Current user (before the router so 'me' is not taken as a pk)
    path('users/me/', CurrentUserView.as_view(), name='current-user'),

    # Reports
    path('reports/stock/', StockSummaryView.as_view(), name='report-stock'),
    path('reports/depleted/', DepletedStockView.as_view(), name='report-depleted'),
    path('reports/low-stock/', LowStockView.as_view(), name='report-low-stock'),
    path('reports/expiring/', ExpiringStockView.as_view(), name='report-expiring'),
    path('reports/valuation/', ValuationView.as_view(), name='report-valuation'),
    path('reports/movements/', MovementHistoryView.as_view(), name='report-movements'),
    path('reports/reconciliation/', ReconciliationView.as_view(), name='report-reconciliation'),

    # Router URLs
    path('', include(router.urls)),
]
