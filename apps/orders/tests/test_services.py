# apps/orders/tests/test_services.py
"""
Tests for PurchaseOrderService: draft editing, confirm, partial and full
receipts, over-receipt and lot tracking.
"""
import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.exceptions import InvalidTransitionError, OverReceiptError
from shared.models import DocumentStatus
from shared.testing import StockTestCase
from apps.audit.models import AuditLog, AuditAction
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import InventoryService
from apps.orders.services import PurchaseOrderService


class PurchaseOrderServiceTest(StockTestCase):

    def setUp(self):
        self.svc = PurchaseOrderService(self.tenant, self.user)

    def _create(self, **kwargs):
        lines = kwargs.pop('lines', None) or [
            {'product': self.widget, 'quantity_ordered': Decimal('100'), 'unit_cost': Decimal('2.50')},
        ]
        kwargs.setdefault('supplier', self.supplier)
        kwargs.setdefault('location', self.main)
        return self.svc.create(lines=lines, **kwargs)

    def _confirmed(self, **kwargs):
        return self.svc.confirm(self._create(**kwargs))

    # ----- draft -----

    def test_create_assigns_sequential_numbers(self):
        first = self._create()
        second = self._create()
        self.assertEqual(first.number, 'PO-000001')
        self.assertEqual(second.number, 'PO-000002')
        self.assertEqual(first.status, DocumentStatus.DRAFT)
        self.assertEqual(first.created_by, self.user)

    def test_create_validates_header_and_lines(self):
        with self.assertRaises(ValidationError):
            self._create(supplier=None)
        with self.assertRaises(ValidationError):
            self._create(lines=[{'product': self.widget, 'quantity_ordered': Decimal('0')}])
        with self.assertRaises(ValidationError):
            self._create(order_date=datetime.date(2026, 5, 2), expected_date=datetime.date(2026, 5, 1))

    def test_create_rejects_other_tenants_location(self):
        from apps.tenants.models import Tenant
        from apps.warehousing.models import Location
        other = Tenant.objects.create(name='Other', subdomain='other')
        foreign = Location.objects.create(tenant=other, name='Elsewhere')
        with self.assertRaises(ValidationError):
            self._create(location=foreign)

    def test_update_replaces_lines_in_draft(self):
        po = self._create()
        po = self.svc.update(po, notes='rush', lines=[
            {'product': self.milk, 'quantity_ordered': Decimal('12'), 'unit_cost': Decimal('0.9')},
        ])
        self.assertEqual(po.notes, 'rush')
        self.assertEqual([line.product for line in po.lines.all()], [self.milk])

    def test_confirmed_po_cannot_be_edited_or_deleted(self):
        po = self._confirmed()
        with self.assertRaises(InvalidTransitionError):
            self.svc.update(po, notes='too late')
        with self.assertRaises(InvalidTransitionError):
            self.svc.delete(po)

    def test_confirmed_po_can_be_cancelled(self):
        po = self.svc.cancel(self._confirmed())
        self.assertEqual(po.status, DocumentStatus.CANCELLED)
        with self.assertRaises(InvalidTransitionError):
            self.svc.receive(po, [{'line_id': po.lines.get().pk, 'quantity': 1}])

    # ----- receiving -----

    def test_partial_then_full_receipt(self):
        po = self._confirmed()
        line = po.lines.get()

        po = self.svc.receive(po, [{'line_id': line.pk, 'quantity': Decimal('60')}])
        self.assertEqual(po.status, DocumentStatus.PARTIAL)
        self.assertEqual(InventoryBalance.objects.get(product=self.widget).qty_on_hand, Decimal('60'))

        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(po)

        po = self.svc.receive(po, [{'line_id': line.pk, 'quantity': Decimal('40')}])
        self.assertEqual(po.status, DocumentStatus.COMPLETED)

        line.refresh_from_db()
        self.assertEqual(line.quantity_received, Decimal('100'))
        balance = InventoryBalance.objects.get(product=self.widget, location=self.main)
        self.assertEqual(balance.qty_on_hand, Decimal('100'))
        self.assertEqual(balance.avg_cost, Decimal('2.5000'))

        movements = StockMovement.objects.filter(reference_type='purchaseorder', reference_id=po.pk)
        self.assertEqual(movements.count(), 2)
        self.assertTrue(all(m.movement_type == MovementType.RECEIVE for m in movements))
        self.assertEqual(
            AuditLog.objects.filter(action=AuditAction.RECEIVE, resource_id=str(po.pk)).count(), 2,
        )

    def test_receipt_updates_product_current_cost(self):
        po = self._confirmed()
        self.svc.receive(po, [{'line_id': po.lines.get().pk, 'quantity': 10, 'unit_cost': Decimal('2.75')}])
        self.widget.refresh_from_db()
        self.assertEqual(self.widget.current_cost, Decimal('2.7500'))

    def test_over_receipt_is_rejected(self):
        po = self._confirmed()
        line = po.lines.get()
        self.svc.receive(po, [{'line_id': line.pk, 'quantity': Decimal('60')}])

        with self.assertRaises(OverReceiptError):
            self.svc.receive(po, [{'line_id': line.pk, 'quantity': Decimal('41')}])

        line.refresh_from_db()
        self.assertEqual(line.quantity_received, Decimal('60'))
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_over_receipt_across_entries_rolls_back(self):
        po = self._confirmed()
        line = po.lines.get()
        with self.assertRaises(OverReceiptError):
            self.svc.receive(po, [
                {'line_id': line.pk, 'quantity': Decimal('70')},
                {'line_id': line.pk, 'quantity': Decimal('31')},
            ])
        self.assertFalse(StockMovement.objects.exists())
        self.assertFalse(InventoryBalance.objects.exists())
        po.refresh_from_db()
        self.assertEqual(po.status, DocumentStatus.CONFIRMED)

    def test_draft_po_cannot_be_received(self):
        po = self._create()
        with self.assertRaises(InvalidTransitionError):
            self.svc.receive(po, [{'line_id': po.lines.get().pk, 'quantity': 1}])

    def test_empty_receipt_is_rejected(self):
        po = self._confirmed()
        with self.assertRaises(ValidationError):
            self.svc.receive(po, [{'line_id': po.lines.get().pk, 'quantity': 0}])

    def test_unknown_line_is_rejected(self):
        po = self._confirmed()
        with self.assertRaises(ValidationError):
            self.svc.receive(po, [{'line_id': 999999, 'quantity': 1}])

    def test_lot_tracked_product_needs_lot_and_expiry(self):
        po = self._confirmed(lines=[
            {'product': self.milk, 'quantity_ordered': Decimal('24'), 'unit_cost': Decimal('0.80')},
        ])
        line = po.lines.get()
        with self.assertRaises(ValidationError):
            self.svc.receive(po, [{'line_id': line.pk, 'quantity': 12}])
        with self.assertRaises(ValidationError):
            self.svc.receive(po, [{'line_id': line.pk, 'quantity': 12, 'lot_number': 'L-1'}])

        po = self.svc.receive(po, [
            {'line_id': line.pk, 'quantity': 12, 'lot_number': 'L-1', 'expiry_date': '2026-08-01'},
            {'line_id': line.pk, 'quantity': 12, 'lot_number': 'L-2', 'expiry_date': '2026-08-15'},
        ])

        self.assertEqual(po.status, DocumentStatus.COMPLETED)
        self.assertEqual(InventoryBalance.objects.filter(product=self.milk).count(), 2)
        self.assertEqual(InventoryService(self.tenant).reconcile(), [])
