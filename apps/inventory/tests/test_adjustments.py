# apps/inventory/tests/test_adjustments.py
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.exceptions import InsufficientStockError, InvalidTransitionError
from shared.models import DocumentStatus
from shared.testing import StockTestCase
from apps.audit.models import AuditLog, AuditAction
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import AdjustmentService, InventoryService


class AdjustmentServiceTest(StockTestCase):

    def setUp(self):
        self.svc = AdjustmentService(self.tenant, self.user)
        self.inventory = InventoryService(self.tenant, self.user)

    def test_create_numbers_draft_and_audits(self):
        adj = self.svc.create(location=self.main, reason='damage', lines=[
            {'product': self.widget, 'quantity': Decimal('5')},
        ])
        self.assertTrue(adj.number.startswith('ADJ-'))
        self.assertEqual(adj.status, DocumentStatus.DRAFT)
        self.assertEqual(adj.lines.count(), 1)
        self.assertTrue(AuditLog.objects.filter(
            tenant=self.tenant, action=AuditAction.CREATE, resource_type='adjustment', resource_id=str(adj.pk),
        ).exists())

    def test_rejects_zero_line_and_bad_reason(self):
        with self.assertRaises(ValidationError):
            self.svc.create(location=self.main, reason='damage', lines=[
                {'product': self.widget, 'quantity': Decimal('0')},
            ])
        with self.assertRaises(ValidationError):
            self.svc.create(location=self.main, reason='bogus', lines=[
                {'product': self.widget, 'quantity': Decimal('1')},
            ])
        with self.assertRaises(ValidationError):
            self.svc.create(location=self.main, reason='damage', lines=[])

    def test_post_applies_positive_and_negative_lines(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        adj = self.svc.create(location=self.main, reason='correction', lines=[
            {'product': self.widget, 'quantity': Decimal('-3')},
            {'product': self.milk, 'quantity': Decimal('4'), 'unit_cost': Decimal('0.5'),
             'lot_number': 'L-7', 'expiry_date': '2026-12-31'},
        ])

        adj = self.svc.post(adj)

        self.assertEqual(adj.status, DocumentStatus.COMPLETED)
        self.assertIsNotNone(adj.posted_at)
        self.assertEqual(
            InventoryBalance.objects.get(product=self.widget).qty_on_hand, Decimal('7'),
        )
        milk = InventoryBalance.objects.get(product=self.milk)
        self.assertEqual(milk.lot_number, 'L-7')
        self.assertEqual(milk.avg_cost, Decimal('0.5000'))

        movements = StockMovement.objects.filter(reference_type='adjustment', reference_id=adj.pk)
        self.assertEqual(movements.count(), 2)
        self.assertTrue(all(m.movement_type == MovementType.ADJUSTMENT for m in movements))
        self.assertTrue(all(m.reason == 'correction' for m in movements))
        self.assertEqual(self.inventory.reconcile(), [])

    def test_positive_line_without_cost_uses_balance_then_product_cost(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('3'))
        adj = self.svc.create(location=self.main, reason='correction', lines=[
            {'product': self.widget, 'quantity': Decimal('2')},
        ])
        self.svc.post(adj)
        self.assertEqual(adj.lines.get().unit_cost, Decimal('3.0000'))

        adj = self.svc.create(location=self.store, reason='correction', lines=[
            {'product': self.widget, 'quantity': Decimal('2')},
        ])
        self.svc.post(adj)
        self.assertEqual(adj.lines.get().unit_cost, Decimal('2.0000'))

    def test_negative_line_beyond_stock_rolls_back_everything(self):
        self.inventory.receive_stock(self.widget, self.main, 2, Decimal('2'))
        adj = self.svc.create(location=self.main, reason='shrinkage', lines=[
            {'product': self.milk, 'quantity': Decimal('5'), 'unit_cost': Decimal('1')},
            {'product': self.widget, 'quantity': Decimal('-3')},
        ])

        with self.assertRaises(InsufficientStockError):
            self.svc.post(adj)

        adj.refresh_from_db()
        self.assertEqual(adj.status, DocumentStatus.DRAFT)
        self.assertFalse(InventoryBalance.objects.filter(product=self.milk).exists())
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_posted_adjustment_is_frozen(self):
        adj = self.svc.create(location=self.main, reason='other', lines=[
            {'product': self.widget, 'quantity': Decimal('1')},
        ])
        self.svc.post(adj)

        with self.assertRaises(InvalidTransitionError):
            self.svc.post(adj)
        with self.assertRaises(InvalidTransitionError):
            self.svc.update(adj, notes='late edit')
        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(adj)
        with self.assertRaises(InvalidTransitionError):
            self.svc.delete(adj)

    def test_draft_can_be_cancelled_or_deleted(self):
        adj = self.svc.create(location=self.main, reason='other', lines=[
            {'product': self.widget, 'quantity': Decimal('1')},
        ])
        adj = self.svc.cancel(adj)
        self.assertEqual(adj.status, DocumentStatus.CANCELLED)

        other = self.svc.create(location=self.main, reason='other', lines=[
            {'product': self.widget, 'quantity': Decimal('1')},
        ])
        self.svc.delete(other)
        self.assertFalse(type(other).objects.filter(pk=other.pk).exists())
        self.assertFalse(StockMovement.objects.exists())
