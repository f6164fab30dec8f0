# apps/inventory/tests/test_costing.py
"""
Tests for weighted-average cost arithmetic.
"""
from decimal import Decimal

from django.test import SimpleTestCase

from apps.inventory.costing import quantize, to_decimal, weighted_average


class WeightedAverageTest(SimpleTestCase):

    def test_first_receipt_takes_incoming_cost(self):
        qty, cost = weighted_average(Decimal('0'), Decimal('0'), Decimal('100'), Decimal('2.00'))
        self.assertEqual(qty, Decimal('100'))
        self.assertEqual(cost, Decimal('2.0000'))

    def test_merges_existing_and_incoming(self):
        qty, cost = weighted_average(Decimal('100'), Decimal('2.00'), Decimal('50'), Decimal('3.00'))
        self.assertEqual(qty, Decimal('150'))
        self.assertEqual(cost, Decimal('2.3333'))

    def test_empty_balance_ignores_old_cost(self):
        qty, cost = weighted_average(Decimal('0'), Decimal('9.99'), Decimal('10'), Decimal('1.50'))
        self.assertEqual(qty, Decimal('10'))
        self.assertEqual(cost, Decimal('1.5000'))

    def test_negative_balance_takes_incoming_cost(self):
        qty, cost = weighted_average(Decimal('-5'), Decimal('4.00'), Decimal('10'), Decimal('1.00'))
        self.assertEqual(qty, Decimal('5'))
        self.assertEqual(cost, Decimal('1.0000'))

    def test_rounds_half_up_to_four_places(self):
        # (0.0001 + 0) / 2 = 0.00005
        _, cost = weighted_average(Decimal('1'), Decimal('0.0001'), Decimal('1'), Decimal('0'))
        self.assertEqual(cost, Decimal('0.0001'))

    def test_non_positive_incoming_quantity_rejected(self):
        with self.assertRaises(ValueError):
            weighted_average(Decimal('10'), Decimal('1'), Decimal('0'), Decimal('1'))
        with self.assertRaises(ValueError):
            weighted_average(Decimal('10'), Decimal('1'), Decimal('-1'), Decimal('1'))

    def test_accepts_ints_and_strings(self):
        qty, cost = weighted_average(10, '1.5', 10, 2)
        self.assertEqual(qty, Decimal('20'))
        self.assertEqual(cost, Decimal('1.7500'))


class DecimalHelpersTest(SimpleTestCase):

    def test_to_decimal(self):
        self.assertEqual(to_decimal(None), Decimal('0'))
        self.assertEqual(to_decimal(0.1), Decimal('0.1'))
        self.assertEqual(to_decimal('2.50'), Decimal('2.50'))

    def test_quantize(self):
        self.assertEqual(str(quantize('1.23455')), '1.2346')
        self.assertEqual(str(quantize(3)), '3.0000')
