# apps/warehousing/tests/test_services.py
"""
Tests for warehousing services.

Test coverage:
- LocationService: delete rules
- TransferService: cost snapshot, send/receive, conservation of stock
- CycleCountService: snapshot, record counts, post variances
"""
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.exceptions import InsufficientStockError, InvalidTransitionError
from shared.models import DocumentStatus
from shared.testing import StockTestCase
from apps.audit.models import AuditLog, AuditAction
from apps.inventory.lots import LotKey
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import InventoryService
from apps.warehousing.models import Location
from apps.warehousing.services import LocationService, TransferService, CycleCountService


# =============================================================================
# LOCATIONS
# =============================================================================

class LocationServiceTest(StockTestCase):

    def test_delete_unused_location(self):
        spare = Location.objects.create(tenant=self.tenant, name='Spare Room')
        LocationService(self.tenant, self.user).delete_location(spare)
        self.assertFalse(Location.objects.filter(pk=spare.pk).exists())
        self.assertTrue(AuditLog.objects.filter(
            action=AuditAction.DELETE, resource_type='location', resource_name='Spare Room',
        ).exists())

    def test_location_with_stock_history_cannot_be_deleted(self):
        inventory = InventoryService(self.tenant, self.user)
        inventory.receive_stock(self.widget, self.store, 1, Decimal('2'))
        inventory.issue_stock(self.widget, self.store, 1)

        with self.assertRaises(ValidationError):
            LocationService(self.tenant, self.user).delete_location(self.store)
        self.assertTrue(Location.objects.filter(pk=self.store.pk).exists())


# =============================================================================
# TRANSFERS
# =============================================================================

class TransferServiceTest(StockTestCase):

    def setUp(self):
        self.svc = TransferService(self.tenant, self.user)
        self.inventory = InventoryService(self.tenant, self.user)
        self.inventory.receive_stock(self.widget, self.main, 100, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.main, 50, Decimal('3'))

    def _create(self, quantity=Decimal('30'), **line):
        return self.svc.create(from_location=self.main, to_location=self.store, lines=[
            dict({'product': self.widget, 'quantity': quantity}, **line),
        ])

    def test_create_snapshots_source_cost(self):
        transfer = self._create()
        self.assertTrue(transfer.number.startswith('TRF-'))
        self.assertEqual(transfer.lines.get().unit_cost, Decimal('2.3333'))

    def test_same_location_rejected(self):
        with self.assertRaises(ValidationError):
            self.svc.create(from_location=self.main, to_location=self.main, lines=[
                {'product': self.widget, 'quantity': Decimal('1')},
            ])

    def test_send_then_receive_conserves_stock(self):
        total_before = self.inventory.on_hand(self.widget, self.main)

        transfer = self.svc.send(self._create())
        self.assertEqual(transfer.status, DocumentStatus.CONFIRMED)
        self.assertTrue(transfer.in_transit)
        self.assertEqual(self.inventory.on_hand(self.widget, self.main), Decimal('120'))
        self.assertEqual(self.inventory.on_hand(self.widget, self.store), Decimal('0'))

        transfer = self.svc.receive(transfer)
        self.assertEqual(transfer.status, DocumentStatus.COMPLETED)

        main = self.inventory.on_hand(self.widget, self.main)
        store = self.inventory.on_hand(self.widget, self.store)
        self.assertEqual(main + store, total_before)
        self.assertEqual(
            InventoryBalance.objects.get(product=self.widget, location=self.store).avg_cost,
            Decimal('2.3333'),
        )

        types = set(StockMovement.objects.filter(reference_type='transfer').values_list('movement_type', flat=True))
        self.assertEqual(types, {MovementType.TRANSFER_OUT, MovementType.TRANSFER_IN})
        self.assertEqual(self.inventory.reconcile(), [])

    def test_send_short_stock_changes_nothing(self):
        transfer = self._create(quantity=Decimal('151'))
        with self.assertRaises(InsufficientStockError):
            self.svc.send(transfer)
        transfer.refresh_from_db()
        self.assertEqual(transfer.status, DocumentStatus.DRAFT)
        self.assertEqual(self.inventory.on_hand(self.widget, self.main), Decimal('150'))

    def test_lot_moves_with_the_stock(self):
        key = LotKey.normalize('L-3', '2026-10-01')
        self.inventory.receive_stock(self.milk, self.main, 10, Decimal('0.9'), key=key)
        transfer = self.svc.create(from_location=self.main, to_location=self.store, lines=[
            {'product': self.milk, 'quantity': Decimal('4'), 'lot_number': 'L-3', 'expiry_date': '2026-10-01'},
        ])
        self.svc.receive(self.svc.send(transfer))
        self.assertEqual(self.inventory.on_hand(self.milk, self.store, key), Decimal('4'))
        self.assertEqual(self.inventory.on_hand(self.milk, self.store), Decimal('0'))

    def test_in_transit_transfer_cannot_be_cancelled(self):
        transfer = self.svc.send(self._create())
        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(transfer)
        with self.assertRaises(InvalidTransitionError):
            self.svc.send(transfer)

    def test_draft_cannot_be_received(self):
        with self.assertRaises(InvalidTransitionError):
            self.svc.receive(self._create())


# =============================================================================
# CYCLE COUNTS
# =============================================================================

class CycleCountServiceTest(StockTestCase):

    def setUp(self):
        self.svc = CycleCountService(self.tenant, self.user)
        self.inventory = InventoryService(self.tenant, self.user)
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.inventory.receive_stock(self.milk, self.main, 6, Decimal('1'), key=LotKey.normalize('L-1', '2026-09-09'))

    def test_create_without_lines_snapshots_location(self):
        count = self.svc.create(location=self.main)
        self.assertTrue(count.number.startswith('CNT-'))
        lines = {line.product.sku: line for line in count.lines.all()}
        self.assertEqual(set(lines), {'WID-1', 'MILK-1L'})
        self.assertEqual(lines['WID-1'].system_qty, Decimal('10'))
        self.assertEqual(lines['MILK-1L'].lot_number, 'L-1')

    def test_empty_location_needs_explicit_lines(self):
        with self.assertRaises(ValidationError):
            self.svc.create(location=self.store)

    def test_duplicate_lines_rejected(self):
        with self.assertRaises(ValidationError):
            self.svc.create(location=self.main, lines=[
                {'product': self.widget}, {'product': self.widget},
            ])

    def test_post_requires_every_line_counted(self):
        count = self.svc.create(location=self.main)
        widget_line = count.lines.get(product=self.widget)
        self.svc.record_counts(count, [{'line_id': widget_line.pk, 'counted_qty': Decimal('8')}])

        with self.assertRaises(ValidationError):
            self.svc.post(count)
        self.assertEqual(self.inventory.on_hand(self.widget, self.main), Decimal('10'))

    def test_post_applies_only_variances(self):
        count = self.svc.create(location=self.main)
        widget_line = count.lines.get(product=self.widget)
        milk_line = count.lines.get(product=self.milk)
        self.svc.record_counts(count, [
            {'line_id': widget_line.pk, 'counted_qty': Decimal('8')},
            {'line_id': milk_line.pk, 'counted_qty': Decimal('6')},
        ])

        count = self.svc.post(count)

        self.assertEqual(count.status, DocumentStatus.COMPLETED)
        self.assertIsNotNone(count.posted_at)
        self.assertEqual(self.inventory.on_hand(self.widget, self.main), Decimal('8'))
        movements = StockMovement.objects.filter(reference_type='cyclecount', reference_id=count.pk)
        self.assertEqual(movements.count(), 1)
        self.assertEqual(movements.get().quantity, Decimal('-2'))
        self.assertEqual(self.inventory.reconcile(), [])

    def test_post_with_no_variance_leaves_stock_untouched(self):
        before = {
            (b.product_id, b.lot_number): (b.qty_on_hand, b.avg_cost)
            for b in InventoryBalance.objects.filter(location=self.main)
        }
        count = self.svc.create(location=self.main)
        self.svc.record_counts(count, [
            {'line_id': line.pk, 'counted_qty': line.system_qty} for line in count.lines.all()
        ])

        count = self.svc.post(count)

        self.assertEqual(count.status, DocumentStatus.COMPLETED)
        self.assertFalse(StockMovement.objects.filter(movement_type=MovementType.COUNT_VARIANCE).exists())
        after = {
            (b.product_id, b.lot_number): (b.qty_on_hand, b.avg_cost)
            for b in InventoryBalance.objects.filter(location=self.main)
        }
        self.assertEqual(after, before)
        self.assertEqual(len(after), 2)

    def test_count_for_product_never_stocked_creates_balance(self):
        count = self.svc.create(location=self.store, lines=[{'product': self.widget}])
        line = count.lines.get()
        self.assertEqual(line.system_qty, Decimal('0'))
        self.svc.record_counts(count, [{'line_id': line.pk, 'counted_qty': 5}])
        self.svc.post(count)

        balance = InventoryBalance.objects.get(product=self.widget, location=self.store)
        self.assertEqual(balance.qty_on_hand, Decimal('5'))
        self.assertEqual(balance.avg_cost, Decimal('0'))

    def test_record_counts_validation(self):
        count = self.svc.create(location=self.main)
        with self.assertRaises(ValidationError):
            self.svc.record_counts(count, [{'line_id': 999999, 'counted_qty': 1}])
        line = count.lines.first()
        with self.assertRaises(ValidationError):
            self.svc.record_counts(count, [{'line_id': line.pk, 'counted_qty': -1}])

    def test_posted_count_is_frozen(self):
        count = self.svc.create(location=self.main)
        self.svc.record_counts(count, [
            {'line_id': line.pk, 'counted_qty': line.system_qty} for line in count.lines.all()
        ])
        self.svc.post(count)
        with self.assertRaises(InvalidTransitionError):
            self.svc.record_counts(count, [{'line_id': count.lines.first().pk, 'counted_qty': 1}])
        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(count)
        self.assertFalse(StockMovement.objects.filter(reference_type='cyclecount').exists())
