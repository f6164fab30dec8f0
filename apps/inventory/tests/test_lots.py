# apps/inventory/tests/test_lots.py
import datetime

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from apps.inventory.lots import LotKey, NO_LOT


class LotKeyTest(SimpleTestCase):

    def test_blank_lot_numbers_are_no_lot(self):
        self.assertEqual(LotKey.normalize(None), NO_LOT)
        self.assertEqual(LotKey.normalize(''), NO_LOT)
        self.assertEqual(LotKey.normalize('   '), NO_LOT)
        self.assertFalse(LotKey.normalize(''))

    def test_lot_number_is_stripped(self):
        key = LotKey.normalize('  L-7 ')
        self.assertEqual(key.lot_number, 'L-7')
        self.assertTrue(key)

    def test_expiry_parsing(self):
        self.assertEqual(LotKey.normalize(None, '2026-12-31').expiry_date, datetime.date(2026, 12, 31))
        self.assertEqual(
            LotKey.normalize(None, datetime.datetime(2026, 1, 2, 15, 30)).expiry_date,
            datetime.date(2026, 1, 2),
        )
        self.assertIsNone(LotKey.normalize(None, '').expiry_date)

    def test_invalid_expiry_rejected(self):
        with self.assertRaises(ValidationError):
            LotKey.normalize('L-1', '31/12/2026')

    def test_lookup_uses_stored_representation(self):
        self.assertEqual(NO_LOT.as_lookup(), {'lot_number': '', 'expiry_date': None})
        key = LotKey.normalize('A', '2026-05-01')
        self.assertEqual(key.as_lookup(), {'lot_number': 'A', 'expiry_date': datetime.date(2026, 5, 1)})

    def test_of_reads_objects_and_dicts(self):
        class Line:
            lot_number = ''
            expiry_date = None

        self.assertEqual(LotKey.of(Line()), NO_LOT)
        self.assertEqual(LotKey.of_dict({'lot_number': 'B'}), LotKey('B', None))

    def test_str(self):
        self.assertEqual(str(NO_LOT), 'no lot')
        self.assertEqual(str(LotKey.normalize('A', '2026-05-01')), 'lot A, exp 2026-05-01')
