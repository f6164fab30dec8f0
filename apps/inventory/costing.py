# apps/inventory/costing.py
"""
Weighted-average cost arithmetic.

Quantities and costs are NUMERIC(12,4); results are rounded half-up to four
decimal places before they are stored.
"""
from decimal import Decimal, ROUND_HALF_UP

FOUR_PLACES = Decimal('0.0001')
ZERO = Decimal('0')


def to_decimal(value):
    """Coerce ints, floats and strings to Decimal without float artefacts."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value):
    return to_decimal(value).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def weighted_average(on_hand, avg_cost, incoming_qty, incoming_cost):
    """
    Merge an incoming quantity into an existing balance.

    Returns (new_qty, new_avg_cost) where
        new_avg_cost = (on_hand * avg_cost + incoming_qty * incoming_cost) / new_qty

    A balance that holds nothing (zero, or negative after an old correction)
    contributes no cost: the result takes the incoming cost.

    Raises:
        ValueError: incoming_qty is not positive
    """
    on_hand = to_decimal(on_hand)
    avg_cost = to_decimal(avg_cost)
    incoming_qty = to_decimal(incoming_qty)
    incoming_cost = to_decimal(incoming_cost)

    if incoming_qty <= 0:
        raise ValueError(f"Incoming quantity must be positive, got {incoming_qty}")

    new_qty = on_hand + incoming_qty
    if on_hand <= 0:
        return quantize(new_qty), quantize(incoming_cost)

    new_cost = (on_hand * avg_cost + incoming_qty * incoming_cost) / new_qty
    return quantize(new_qty), quantize(new_cost)
