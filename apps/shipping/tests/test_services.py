# apps/shipping/tests/test_services.py
import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError

from shared.exceptions import InsufficientStockError, InvalidTransitionError
from shared.models import DocumentStatus
from shared.testing import StockTestCase
from apps.inventory.lots import LotKey
from apps.inventory.models import InventoryBalance, StockMovement, MovementType
from apps.inventory.services import InventoryService
from apps.shipping.services import ShippingService


class ShippingServiceTest(StockTestCase):

    def setUp(self):
        self.svc = ShippingService(self.tenant, self.user)
        self.inventory = InventoryService(self.tenant, self.user)

    def _create(self, *lines):
        lines = list(lines) or [{'product': self.widget, 'quantity': Decimal('10')}]
        return self.svc.create(customer=self.customer, location=self.main, lines=lines)

    def test_confirm_rejects_short_stock(self):
        self.inventory.receive_stock(self.widget, self.main, 5, Decimal('2'))
        shipment = self._create()

        with self.assertRaises(InsufficientStockError):
            self.svc.confirm(shipment)

        shipment.refresh_from_db()
        self.assertEqual(shipment.status, DocumentStatus.DRAFT)
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_confirm_checks_combined_quantity_per_lot(self):
        self.inventory.receive_stock(self.widget, self.main, 8, Decimal('2'))
        shipment = self._create(
            {'product': self.widget, 'quantity': Decimal('5')},
            {'product': self.widget, 'quantity': Decimal('5')},
        )
        with self.assertRaises(InsufficientStockError):
            self.svc.confirm(shipment)

    def test_ship_issues_every_line_at_average_cost(self):
        key = LotKey.normalize('L-1', '2026-07-01')
        self.inventory.receive_stock(self.widget, self.main, 100, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.main, 50, Decimal('3'))
        self.inventory.receive_stock(self.milk, self.main, 20, Decimal('0.8'), key=key)

        shipment = self._create(
            {'product': self.widget, 'quantity': Decimal('30')},
            {'product': self.milk, 'quantity': Decimal('6'), 'lot_number': 'L-1', 'expiry_date': '2026-07-01'},
        )
        self.svc.confirm(shipment)
        shipment = self.svc.ship(shipment, ship_date=datetime.date(2026, 5, 4))

        self.assertEqual(shipment.status, DocumentStatus.COMPLETED)
        self.assertEqual(shipment.ship_date, datetime.date(2026, 5, 4))
        self.assertIsNotNone(shipment.shipped_at)

        widget_line = shipment.lines.get(product=self.widget)
        self.assertEqual(widget_line.unit_cost, Decimal('2.3333'))
        self.assertEqual(
            InventoryBalance.objects.get(product=self.widget).qty_on_hand, Decimal('120'),
        )
        self.assertEqual(self.inventory.on_hand(self.milk, self.main, key), Decimal('14'))

        movements = StockMovement.objects.filter(reference_type='shipment', reference_id=shipment.pk)
        self.assertEqual(movements.count(), 2)
        self.assertTrue(all(m.movement_type == MovementType.SHIP and m.quantity < 0 for m in movements))
        self.assertEqual(self.inventory.reconcile(), [])

    def test_ship_rolls_back_when_stock_disappears(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        shipment = self.svc.confirm(self._create())
        self.inventory.issue_stock(self.widget, self.main, 6)

        with self.assertRaises(InsufficientStockError):
            self.svc.ship(shipment)

        shipment.refresh_from_db()
        self.assertEqual(shipment.status, DocumentStatus.CONFIRMED)
        self.assertEqual(InventoryBalance.objects.get(product=self.widget).qty_on_hand, Decimal('4'))

    def test_draft_cannot_ship(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        with self.assertRaises(InvalidTransitionError):
            self.svc.ship(self._create())

    def test_cancel_before_shipping_only(self):
        self.inventory.receive_stock(self.widget, self.main, 20, Decimal('2'))
        draft = self.svc.cancel(self._create())
        self.assertEqual(draft.status, DocumentStatus.CANCELLED)

        confirmed = self.svc.cancel(self.svc.confirm(self._create()))
        self.assertEqual(confirmed.status, DocumentStatus.CANCELLED)

        shipped = self.svc.ship(self.svc.confirm(self._create()))
        with self.assertRaises(InvalidTransitionError):
            self.svc.cancel(shipped)

        # Only the shipped one moved stock
        self.assertEqual(StockMovement.objects.filter(movement_type=MovementType.SHIP).count(), 1)

    def test_line_validation(self):
        with self.assertRaises(ValidationError):
            self._create({'product': self.widget, 'quantity': Decimal('-1')})
        with self.assertRaises(ValidationError):
            self.svc.create(customer=None, location=self.main, lines=[
                {'product': self.widget, 'quantity': Decimal('1')},
            ])
