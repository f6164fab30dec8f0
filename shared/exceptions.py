# shared/exceptions.py
"""
Domain errors raised by the services.

All of them are Django ValidationErrors, so API views and the admin report
them the same way as any other rejected input. A subclass only says which
precondition failed.
"""
from django.core.exceptions import ValidationError


class InvalidTransitionError(ValidationError):
    """Document is not in a status that allows the requested action."""


class InsufficientStockError(ValidationError):
    """A deduction asked for more than the balance holds."""

    def __init__(self, product, on_hand, requested, location=None):
        self.product = product
        self.on_hand = on_hand
        self.requested = requested
        where = f" at {location}" if location is not None else ""
        super().__init__(
            f"Insufficient stock for {product}{where}. "
            f"On hand: {on_hand}, Requested: {requested}"
        )


class OverReceiptError(ValidationError):
    """A receipt would exceed the quantity still outstanding on a PO line."""


class ImmutableRecordError(ValidationError):
    """Attempt to change or remove an append-only ledger row."""
