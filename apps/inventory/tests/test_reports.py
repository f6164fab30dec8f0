# apps/inventory/tests/test_reports.py
import datetime
from decimal import Decimal

from shared.testing import StockTestCase
from apps.inventory.lots import LotKey
from apps.inventory.reports import ReportService
from apps.inventory.services import InventoryService


class ReportServiceTest(StockTestCase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.widget.reorder_point = Decimal('50')
        cls.widget.reorder_qty = Decimal('100')
        cls.widget.save()

    def setUp(self):
        self.inventory = InventoryService(self.tenant, self.user)
        self.reports = ReportService(self.tenant, self.user)
        self.today = datetime.date(2026, 5, 1)

    def test_stock_summary_skips_depleted_rows(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.store, 3, Decimal('2'))
        self.inventory.issue_stock(self.widget, self.store, 3)

        rows = self.reports.stock_summary()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['location'], 'Main Warehouse')
        self.assertEqual(rows[0]['inventory_value'], Decimal('20.0000'))

        depleted = self.reports.depleted_stock()
        self.assertEqual(len(depleted), 1)
        self.assertEqual(depleted[0]['location'], 'Corner Store')
        self.assertIn('depleted_at', depleted[0])

    def test_stock_summary_filters_by_location(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.store, 4, Decimal('2'))
        rows = self.reports.stock_summary(filters={'location_id': self.store.pk})
        self.assertEqual([r['qty_on_hand'] for r in rows], [Decimal('4')])

    def test_low_stock_sums_all_locations(self):
        self.inventory.receive_stock(self.widget, self.main, 30, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.store, 15, Decimal('2'))

        rows = self.reports.low_stock()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['sku'], 'WID-1')
        self.assertEqual(rows[0]['total_on_hand'], Decimal('45'))
        self.assertEqual(rows[0]['shortfall'], Decimal('5'))

        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.assertEqual(self.reports.low_stock(), [])

    def test_low_stock_includes_products_never_received(self):
        rows = self.reports.low_stock()
        self.assertEqual([r['sku'] for r in rows], ['WID-1'])
        self.assertEqual(rows[0]['total_on_hand'], Decimal('0'))

    def test_expiring_soon_uses_window(self):
        self.inventory.receive_stock(
            self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('OLD', '2026-04-28'),
        )
        self.inventory.receive_stock(
            self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('SOON', '2026-05-10'),
        )
        self.inventory.receive_stock(
            self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('LATER', '2026-09-01'),
        )

        rows = self.reports.expiring_soon(days=14, as_of=self.today)

        self.assertEqual([r['lot_number'] for r in rows], ['OLD', 'SOON'])
        self.assertTrue(rows[0]['expired'])
        self.assertEqual(rows[0]['days_until_expiry'], -3)
        self.assertFalse(rows[1]['expired'])
        self.assertEqual(rows[1]['days_until_expiry'], 9)

    def test_expiring_soon_defaults_to_tenant_setting(self):
        self.tenant.settings.expiry_warning_days = 200
        self.tenant.settings.save()
        self.inventory.receive_stock(
            self.milk, self.main, 5, Decimal('1'), key=LotKey.normalize('LATER', '2026-09-01'),
        )
        rows = self.reports.expiring_soon(as_of=self.today)
        self.assertEqual(len(rows), 1)

    def test_valuation_per_location(self):
        self.inventory.receive_stock(self.widget, self.main, 100, Decimal('2'))
        self.inventory.receive_stock(self.widget, self.main, 50, Decimal('3'))
        self.inventory.receive_stock(self.milk, self.store, 10, Decimal('0.8'))

        data = self.reports.valuation()

        by_name = {row['location']: row for row in data['locations']}
        self.assertEqual(by_name['Main Warehouse']['total_qty'], Decimal('150'))
        self.assertEqual(by_name['Corner Store']['total_value'], Decimal('8.0000'))
        self.assertEqual(
            data['grand_total'],
            by_name['Main Warehouse']['total_value'] + by_name['Corner Store']['total_value'],
        )
        self.assertEqual(data['currency'], 'USD')

    def test_movement_history_newest_first_and_filtered(self):
        self.inventory.receive_stock(self.widget, self.main, 10, Decimal('2'))
        self.inventory.issue_stock(self.widget, self.main, 4)
        self.inventory.receive_stock(self.milk, self.main, 1, Decimal('1'))

        rows = self.reports.movement_history()
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0]['sku'], 'MILK-1L')

        rows = self.reports.movement_history(filters={'movement_type': 'ship'})
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['quantity'], Decimal('-4'))
        self.assertEqual(rows[0]['user'], 'stocker')
