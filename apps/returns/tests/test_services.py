# apps/returns/tests/test_services.py
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.exceptions import InsufficientStockError, InvalidTransitionError
from shared.models import DocumentStatus
from shared.testing import StockTestCase
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import InventoryService
from apps.returns.services import ReturnService


class ReturnServiceTest(StockTestCase):

    def setUp(self):
        self.svc = ReturnService(self.tenant, self.user)
        self.inventory = InventoryService(self.tenant, self.user)

    def test_customer_return_adds_stock(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('4'))
        ret = self.svc.create(
            return_type='customer', customer=self.customer, location=self.main,
            reason='Damaged box, product fine', lines=[
                {'product': self.widget, 'quantity': Decimal('2')},
            ],
        )
        self.assertTrue(ret.number.startswith('RET-'))
        self.assertEqual(ret.partner_name, 'Corner Deli')

        ret = self.svc.process(ret)

        self.assertEqual(ret.status, DocumentStatus.COMPLETED)
        self.assertIsNotNone(ret.processed_at)
        self.assertIsNotNone(ret.return_date)
        balance = InventoryBalance.objects.get(product=self.widget, location=self.main)
        self.assertEqual(balance.qty_on_hand, Decimal('12'))
        self.assertEqual(balance.avg_cost, Decimal('4.0000'))

        movement = StockMovement.objects.get(reference_type='return')
        self.assertEqual(movement.movement_type, MovementType.RETURN_IN)
        self.assertEqual(movement.quantity, Decimal('2'))
        self.assertEqual(movement.notes, 'Damaged box, product fine')

    def test_customer_return_without_balance_uses_product_cost(self):
        ret = self.svc.create(return_type='customer', customer=self.customer, location=self.store, lines=[
            {'product': self.widget, 'quantity': Decimal('1')},
        ])
        self.svc.process(ret)
        self.assertEqual(ret.lines.get().unit_cost, Decimal('2.0000'))

    def test_supplier_return_removes_stock(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        ret = self.svc.create(return_type='supplier', supplier=self.supplier, location=self.main, lines=[
            {'product': self.widget, 'quantity': Decimal('3')},
        ])
        ret = self.svc.process(ret)

        self.assertEqual(self.inventory.on_hand(self.widget, self.main), Decimal('7'))
        movement = StockMovement.objects.get(reference_type='return')
        self.assertEqual(movement.movement_type, MovementType.RETURN_OUT)
        self.assertEqual(movement.quantity, Decimal('-3'))
        self.assertEqual(ret.lines.get().unit_cost, Decimal('2.0000'))

    def test_supplier_return_beyond_stock_is_rejected(self):
        self.inventory.receive_stock(self.widget, self.main, 1, Decimal('2'))
        ret = self.svc.create(return_type='supplier', supplier=self.supplier, location=self.main, lines=[
            {'product': self.widget, 'quantity': Decimal('3')},
        ])
        with self.assertRaises(InsufficientStockError):
            self.svc.process(ret)
        ret.refresh_from_db()
        self.assertEqual(ret.status, DocumentStatus.DRAFT)

    def test_partner_not_matching_type_is_dropped(self):
        ret = self.svc.create(
            return_type='supplier', supplier=self.supplier, customer=self.customer,
            location=self.main, lines=[{'product': self.widget, 'quantity': Decimal('1')}],
        )
        self.assertIsNone(ret.customer)
        self.assertEqual(ret.partner, self.supplier)
        self.assertFalse(ret.is_inbound)

    def test_invalid_type_rejected(self):
        with self.assertRaises(ValidationError):
            self.svc.create(return_type='warranty', location=self.main, lines=[
                {'product': self.widget, 'quantity': Decimal('1')},
            ])

    def test_processed_return_is_final(self):
        ret = self.svc.create(return_type='customer', customer=self.customer, location=self.main, lines=[
            {'product': self.widget, 'quantity': Decimal('1')},
        ])
        self.svc.process(ret)
        with self.assertRaises(InvalidTransitionError):
            self.svc.process(ret)
        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(ret)
