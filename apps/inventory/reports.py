# apps/inventory/reports.py
"""
Read-only stock reports.

ReportService builds plain lists/dicts from balances and movements; the API
returns them as they are. No report writes anything.
"""
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Sum, F, DecimalField, ExpressionWrapper
from django.db.models.functions import Coalesce
from django.utils import timezone

from .costing import ZERO, quantize
from .models import InventoryBalance, StockMovement

VALUE_EXPRESSION = ExpressionWrapper(
    F('qty_on_hand') * F('avg_cost'),
    output_field=DecimalField(max_digits=24, decimal_places=8),
)

MOVEMENT_HISTORY_LIMIT = 500


class ReportService:
    """
    Stock reports for one tenant.

    Usage:
        service = ReportService(tenant)
        rows = service.stock_summary(filters={'location_id': 3})
        data = service.valuation()
        data['grand_total']
    """

    def __init__(self, tenant, user=None):
        self.tenant = tenant
        self.user = user

    def _balances(self, filters=None):
        filters = filters or {}
        qs = InventoryBalance.objects.for_tenant(self.tenant).select_related(
            'product', 'product__category', 'location',
        )
        if filters.get('location_id'):
            qs = qs.filter(location_id=filters['location_id'])
        if filters.get('product_id'):
            qs = qs.filter(product_id=filters['product_id'])
        if filters.get('category_id'):
            qs = qs.filter(product__category_id=filters['category_id'])
        return qs

    @staticmethod
    def _balance_row(balance):
        return {
            'balance_id': balance.pk,
            'product_id': balance.product_id,
            'sku': balance.product.sku,
            'product_name': balance.product.name,
            'category': balance.product.category.name if balance.product.category else '',
            'location_id': balance.location_id,
            'location': balance.location.name,
            'lot_number': balance.lot_number,
            'expiry_date': balance.expiry_date,
            'qty_on_hand': balance.qty_on_hand,
            'avg_cost': balance.avg_cost,
            'inventory_value': quantize(balance.inventory_value),
        }

    # ===== BALANCES =====

    def stock_summary(self, filters=None):
        """Balances currently holding stock."""
        qs = self._balances(filters).filter(qty_on_hand__gt=0)
        qs = qs.order_by('product__sku', 'location__name', 'lot_number', 'expiry_date')
        return [self._balance_row(balance) for balance in qs]

    def depleted_stock(self, filters=None):
        """Balances at zero. Rows are kept after depletion as history."""
        qs = self._balances(filters).filter(qty_on_hand=0)
        qs = qs.order_by('-updated_at')
        return [
            dict(self._balance_row(balance), depleted_at=balance.updated_at)
            for balance in qs
        ]

    def low_stock(self):
        """
        Active products whose total on hand across all locations is at or
        below their reorder point. Products with reorder_point 0 are ignored.
        """
        from apps.products.models import Product

        products = (
            Product.objects.for_tenant(self.tenant)
            .filter(active=True, reorder_point__gt=0)
            .annotate(total_on_hand=Coalesce(
                Sum('balances__qty_on_hand'), Decimal('0'),
                output_field=DecimalField(max_digits=12, decimal_places=4),
            ))
            .filter(total_on_hand__lte=F('reorder_point'))
            .order_by('sku')
        )
        return [
            {
                'product_id': product.pk,
                'sku': product.sku,
                'product_name': product.name,
                'total_on_hand': product.total_on_hand,
                'reorder_point': product.reorder_point,
                'reorder_qty': product.reorder_qty,
                'shortfall': product.reorder_point - product.total_on_hand,
            }
            for product in products
        ]

    def expiring_soon(self, days=None, as_of=None):
        """
        Balances with stock expiring within ``days`` of ``as_of`` (today).

        ``days`` defaults to the tenant's expiry_warning_days setting.
        Already-expired stock is included.
        """
        if days is None:
            days = self._warning_days()
        as_of = as_of or timezone.localdate()
        cutoff = as_of + timedelta(days=int(days))

        qs = self._balances().filter(
            qty_on_hand__gt=0,
            expiry_date__isnull=False,
            expiry_date__lte=cutoff,
        ).order_by('expiry_date', 'product__sku')

        return [
            dict(
                self._balance_row(balance),
                days_until_expiry=(balance.expiry_date - as_of).days,
                expired=balance.expiry_date < as_of,
            )
            for balance in qs
        ]

    def valuation(self, filters=None):
        """
        Inventory value (qty_on_hand * avg_cost) per location and in total.

        Returns:
        {
            'locations': [
                {'location_id': int, 'location': str, 'total_qty': Decimal,
                 'total_value': Decimal},
                ...
            ],
            'grand_total': Decimal,
            'currency': str,
        }
        """
        rows = (
            self._balances(filters)
            .filter(qty_on_hand__gt=0)
            .values('location_id', 'location__name')
            .annotate(total_qty=Sum('qty_on_hand'), total_value=Sum(VALUE_EXPRESSION))
            .order_by('location__name')
        )
        locations = [
            {
                'location_id': row['location_id'],
                'location': row['location__name'],
                'total_qty': quantize(row['total_qty']),
                'total_value': quantize(row['total_value']),
            }
            for row in rows
        ]
        return {
            'locations': locations,
            'grand_total': quantize(sum((row['total_value'] for row in locations), ZERO)),
            'currency': self._currency(),
        }

    # ===== MOVEMENTS =====

    def movement_history(self, filters=None):
        """Latest movements, newest first, capped at MOVEMENT_HISTORY_LIMIT rows."""
        filters = filters or {}
        qs = StockMovement.objects.for_tenant(self.tenant)

        if filters.get('product_id'):
            qs = qs.filter(product_id=filters['product_id'])
        if filters.get('location_id'):
            qs = qs.filter(location_id=filters['location_id'])
        if filters.get('movement_type'):
            qs = qs.filter(movement_type=filters['movement_type'])
        if filters.get('start_date'):
            qs = qs.filter(created_at__date__gte=filters['start_date'])
        if filters.get('end_date'):
            qs = qs.filter(created_at__date__lte=filters['end_date'])

        qs = qs.select_related('product', 'location', 'created_by')[:MOVEMENT_HISTORY_LIMIT]

        return [
            {
                'id': movement.pk,
                'created_at': movement.created_at,
                'movement_type': movement.movement_type,
                'sku': movement.product.sku,
                'location': movement.location.name,
                'quantity': movement.quantity,
                'lot_number': movement.lot_number,
                'expiry_date': movement.expiry_date,
                'unit_cost': movement.unit_cost,
                'extended_cost': movement.extended_cost,
                'reference': movement.reference_number,
                'reason': movement.reason,
                'user': movement.created_by.username if movement.created_by else '',
                'balance_after': movement.balance_after,
            }
            for movement in qs
        ]

    def _currency(self):
        tenant_settings = getattr(self.tenant, 'settings', None)
        return tenant_settings.currency if tenant_settings is not None else 'USD'

    def _warning_days(self):
        tenant_settings = getattr(self.tenant, 'settings', None)
        if tenant_settings is not None:
            return tenant_settings.expiry_warning_days
        return settings.STOCKROOM_EXPIRY_WARNING_DAYS
