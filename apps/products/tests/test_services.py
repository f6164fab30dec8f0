# apps/products/tests/test_services.py
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.testing import StockTestCase
from apps.audit.models import AuditLog, AuditAction
from apps.inventory.services import InventoryService
from apps.orders.services import PurchaseOrderService
from apps.products.models import Product
from apps.products.services import ProductService


class ProductServiceTest(StockTestCase):

    def setUp(self):
        self.svc = ProductService(self.tenant, self.user)

    def test_delete_unused_product(self):
        spare = Product.objects.create(tenant=self.tenant, sku='SPARE', name='Spare')
        self.svc.delete_product(spare)
        self.assertFalse(Product.objects.filter(sku='SPARE').exists())
        self.assertTrue(AuditLog.objects.filter(
            action=AuditAction.DELETE, resource_type='product', resource_name__startswith='SPARE',
        ).exists())

    def test_product_with_stock_cannot_be_deleted(self):
        InventoryService(self.tenant, self.user).receive_stock(self.widget, self.main, 1, Decimal('1'))
        with self.assertRaises(ValidationError):
            self.svc.delete_product(self.widget)

    def test_product_on_purchase_order_cannot_be_deleted(self):
        PurchaseOrderService(self.tenant, self.user).create(
            supplier=self.supplier, location=self.main,
            lines=[{'product': self.milk, 'quantity_ordered': Decimal('1'), 'unit_cost': Decimal('1')}],
        )
        with self.assertRaises(ValidationError):
            self.svc.delete_product(self.milk)

    def test_deactivate(self):
        product = self.svc.set_active(self.widget, False)
        self.assertFalse(product.active)
        entry = AuditLog.objects.get(action=AuditAction.UPDATE, resource_type='product')
        self.assertEqual(entry.old_values, {'active': True})

    def test_pack_fields_must_be_set_together(self):
        product = Product(tenant=self.tenant, sku='CASE', name='Case Item', pack_uom_name='Case')
        with self.assertRaises(ValidationError):
            product.full_clean()
