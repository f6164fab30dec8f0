# apps/inventory/tests/test_services.py
"""
Tests for BalanceLocator, MovementRecorder and InventoryService:
receive, issue, counted quantities, immutability and reconciliation.
"""
import datetime
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError

from shared.exceptions import InsufficientStockError, ImmutableRecordError
from shared.testing import StockTestCase
from apps.inventory.lots import LotKey, NO_LOT
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import BalanceLocator, InventoryService, MovementRecorder


class InventoryServiceTestCase(StockTestCase):

    def setUp(self):
        self.svc = InventoryService(self.tenant, self.user)


class BalanceLocatorTest(InventoryServiceTestCase):

    def test_find_missing_returns_none_without_side_effects(self):
        locator = BalanceLocator(self.tenant)
        self.assertIsNone(locator.find(self.widget, self.main))
        self.assertIsNone(locator.find(self.widget, self.main))
        self.assertFalse(InventoryBalance.objects.exists())

    def test_find_is_idempotent(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        locator = BalanceLocator(self.tenant)
        first = locator.find(self.widget, self.main, LotKey.normalize(None, None))
        second = locator.find(self.widget, self.main, LotKey.normalize('', ''))
        self.assertEqual(first.pk, second.pk)

    def test_no_lot_never_matches_a_lot_balance(self):
        self.svc.receive_stock(self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('L-1'))
        locator = BalanceLocator(self.tenant)
        self.assertIsNone(locator.find(self.milk, self.main, NO_LOT))
        self.assertIsNotNone(locator.find(self.milk, self.main, LotKey.normalize('L-1')))

    def test_expiry_is_part_of_the_key(self):
        key_a = LotKey.normalize('L-1', '2026-01-31')
        key_b = LotKey.normalize('L-1', '2026-02-28')
        self.svc.receive_stock(self.milk, self.main, 5, Decimal('1'), key=key_a)
        self.svc.receive_stock(self.milk, self.main, 7, Decimal('1'), key=key_b)
        locator = BalanceLocator(self.tenant)
        self.assertEqual(locator.on_hand(self.milk, self.main, key_a), Decimal('5'))
        self.assertEqual(locator.on_hand(self.milk, self.main, key_b), Decimal('7'))
        self.assertEqual(locator.on_hand(self.milk, self.main, LotKey.normalize('L-1')), Decimal('0'))

    def test_other_tenant_is_invisible(self):
        from apps.tenants.models import Tenant
        other = Tenant.objects.create(name='Other', subdomain='other')
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.assertIsNone(BalanceLocator(other).find(self.widget, self.main))


class ReceiveStockTest(InventoryServiceTestCase):

    def test_first_receipt_creates_balance_and_movement(self):
        movement = self.svc.receive_stock(self.widget, self.main, 100, Decimal('2.00'))

        balance = InventoryBalance.objects.get(product=self.widget, location=self.main)
        self.assertEqual(balance.qty_on_hand, Decimal('100'))
        self.assertEqual(balance.avg_cost, Decimal('2.0000'))
        self.assertEqual(movement.quantity, Decimal('100'))
        self.assertEqual(movement.movement_type, MovementType.RECEIVE)
        self.assertEqual(movement.balance_after, Decimal('100'))
        self.assertEqual(movement.created_by, self.user)

    def test_weighted_average_sequence(self):
        self.svc.receive_stock(self.widget, self.main, 100, Decimal('2.00'))
        self.svc.receive_stock(self.widget, self.main, 50, Decimal('3.00'))
        balance = InventoryBalance.objects.get(product=self.widget, location=self.main)
        self.assertEqual(balance.qty_on_hand, Decimal('150'))
        self.assertEqual(balance.avg_cost, Decimal('2.3333'))

        movement = self.svc.issue_stock(self.widget, self.main, 30)
        balance.refresh_from_db()
        self.assertEqual(balance.qty_on_hand, Decimal('120'))
        self.assertEqual(balance.avg_cost, Decimal('2.3333'))
        self.assertEqual(movement.unit_cost, Decimal('2.3333'))

    def test_receipt_into_depleted_balance_takes_incoming_cost(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('5.00'))
        self.svc.issue_stock(self.widget, self.main, 10)
        self.svc.receive_stock(self.widget, self.main, 4, Decimal('1.25'))
        balance = InventoryBalance.objects.get(product=self.widget, location=self.main)
        self.assertEqual(balance.qty_on_hand, Decimal('4'))
        self.assertEqual(balance.avg_cost, Decimal('1.2500'))
        self.assertEqual(InventoryBalance.objects.count(), 1)

    def test_lot_and_expiry_stored(self):
        key = LotKey.normalize(' L-9 ', '2026-03-01')
        movement = self.svc.receive_stock(self.milk, self.main, 12, Decimal('0.75'), key=key)
        balance = InventoryBalance.objects.get(product=self.milk)
        self.assertEqual(balance.lot_number, 'L-9')
        self.assertEqual(balance.expiry_date, datetime.date(2026, 3, 1))
        self.assertEqual(movement.lot_number, 'L-9')
        self.assertEqual(movement.expiry_date, datetime.date(2026, 3, 1))

    def test_rejects_non_positive_quantity_and_negative_cost(self):
        with self.assertRaises(ValidationError):
            self.svc.receive_stock(self.widget, self.main, 0, Decimal('1'))
        with self.assertRaises(ValidationError):
            self.svc.receive_stock(self.widget, self.main, 1, Decimal('-1'))
        self.assertFalse(StockMovement.objects.exists())


class IssueStockTest(InventoryServiceTestCase):

    def test_insufficient_stock_changes_nothing(self):
        self.svc.receive_stock(self.widget, self.main, 5, Decimal('2'))

        with self.assertRaises(InsufficientStockError) as ctx:
            self.svc.issue_stock(self.widget, self.main, 10)

        self.assertIn('Insufficient stock for', ctx.exception.messages[0])
        self.assertEqual(ctx.exception.requested, Decimal('10'))
        balance = InventoryBalance.objects.get(product=self.widget)
        self.assertEqual(balance.qty_on_hand, Decimal('5'))
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_missing_balance_is_insufficient(self):
        with self.assertRaises(InsufficientStockError):
            self.svc.issue_stock(self.widget, self.main, 1)
        self.assertFalse(InventoryBalance.objects.exists())

    def test_issue_to_zero_keeps_row(self):
        self.svc.receive_stock(self.widget, self.main, 5, Decimal('2'))
        movement = self.svc.issue_stock(self.widget, self.main, 5, movement_type=MovementType.SHIP)
        balance = InventoryBalance.objects.get(product=self.widget)
        self.assertEqual(balance.qty_on_hand, Decimal('0'))
        self.assertEqual(balance.avg_cost, Decimal('2.0000'))
        self.assertEqual(movement.quantity, Decimal('-5'))
        self.assertEqual(movement.extended_cost, Decimal('10'))

    def test_issue_from_other_lot_is_insufficient(self):
        self.svc.receive_stock(self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('L-1'))
        with self.assertRaises(InsufficientStockError):
            self.svc.issue_stock(self.milk, self.main, 1, key=LotKey.normalize('L-2'))

    def test_check_availability(self):
        self.svc.receive_stock(self.widget, self.main, 5, Decimal('2'))
        self.svc.check_availability(self.widget, self.main, 5)
        with self.assertRaises(InsufficientStockError):
            self.svc.check_availability(self.widget, self.main, Decimal('5.0001'))


class SetCountedQuantityTest(InventoryServiceTestCase):

    def test_sets_balance_and_records_difference(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        movement = self.svc.set_counted_quantity(self.widget, self.main, 8)
        balance = InventoryBalance.objects.get(product=self.widget)
        self.assertEqual(balance.qty_on_hand, Decimal('8'))
        self.assertEqual(movement.quantity, Decimal('-2'))
        self.assertEqual(movement.movement_type, MovementType.COUNT_VARIANCE)
        self.assertEqual(movement.reason, 'count_variance')

    def test_unchanged_count_records_nothing(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.assertIsNone(self.svc.set_counted_quantity(self.widget, self.main, 10))
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_count_creates_missing_balance_at_zero_cost(self):
        movement = self.svc.set_counted_quantity(self.widget, self.store, 3)
        balance = InventoryBalance.objects.get(product=self.widget, location=self.store)
        self.assertEqual(balance.qty_on_hand, Decimal('3'))
        self.assertEqual(balance.avg_cost, Decimal('0'))
        self.assertEqual(movement.quantity, Decimal('3'))


class MovementLedgerTest(InventoryServiceTestCase):

    def test_movements_cannot_be_changed(self):
        movement = self.svc.receive_stock(self.widget, self.main, 1, Decimal('1'))
        movement.notes = 'edited'
        with self.assertRaises(ImmutableRecordError):
            movement.save()
        with self.assertRaises(ImmutableRecordError):
            movement.delete()
        with self.assertRaises(ImmutableRecordError):
            StockMovement.objects.filter(pk=movement.pk).update(notes='edited')
        with self.assertRaises(ImmutableRecordError):
            StockMovement.objects.all().delete()

    def test_zero_quantity_is_not_a_movement(self):
        with self.assertRaises(ValueError):
            MovementRecorder(self.tenant, self.user).record(self.widget, self.main, 0, MovementType.ADJUSTMENT)

    def test_reference_is_recorded(self):
        from apps.inventory.models import Adjustment
        adjustment = Adjustment.objects.create(tenant=self.tenant, number='ADJ-TEST', location=self.main)
        movement = self.svc.receive_stock(self.widget, self.main, 1, Decimal('1'), reference=adjustment)
        self.assertEqual(movement.reference_type, 'adjustment')
        self.assertEqual(movement.reference_id, adjustment.pk)
        self.assertEqual(movement.reference_number, 'ADJ-TEST')


class ReconcileTest(InventoryServiceTestCase):

    def test_services_keep_ledger_and_balances_in_step(self):
        key = LotKey.normalize('L-1', '2026-06-30')
        self.svc.receive_stock(self.widget, self.main, 100, Decimal('2'))
        self.svc.issue_stock(self.widget, self.main, 40)
        self.svc.receive_stock(self.milk, self.main, 10, Decimal('1'), key=key)
        self.svc.set_counted_quantity(self.milk, self.main, 7, key=key)
        self.assertEqual(self.svc.reconcile(), [])

    def test_detects_tampered_balance(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        InventoryBalance.objects.filter(product=self.widget).update(qty_on_hand=Decimal('12'))

        mismatches = self.svc.reconcile()

        self.assertEqual(len(mismatches), 1)
        self.assertEqual(mismatches[0]['qty_on_hand'], Decimal('12'))
        self.assertEqual(mismatches[0]['movement_total'], Decimal('10'))
        self.assertEqual(mismatches[0]['difference'], Decimal('2'))

    def test_reconcile_command(self):
        self.svc.receive_stock(self.widget, self.main, 10, Decimal('2'))
        out = StringIO()
        call_command('reconcile_stock', tenant='stock-test', stdout=out)
        self.assertIn('balances match the ledger', out.getvalue())

        InventoryBalance.objects.filter(product=self.widget).update(qty_on_hand=Decimal('1'))
        with self.assertRaises(CommandError):
            call_command('reconcile_stock', stdout=StringIO())

    def test_reconcile_command_unknown_tenant(self):
        with self.assertRaises(CommandError):
            call_command('reconcile_stock', tenant='nope', stdout=StringIO())
