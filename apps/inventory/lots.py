# apps/inventory/lots.py
"""
LotKey - the optional lot/expiry part of a balance's identity.

Input arrives as None, '', '  ', a date or an ISO string depending on the
caller. It is normalised once, here, so the rest of the code compares a
single representation. In the database "no lot" is stored as '' and
"no expiry" as NULL.
"""
import datetime
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError


def _parse_expiry(value):
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError({'expiry_date': f"Invalid expiry date '{value}'. Use YYYY-MM-DD."})


@dataclass(frozen=True)
class LotKey:
    lot_number: Optional[str] = None
    expiry_date: Optional[datetime.date] = None

    @classmethod
    def normalize(cls, lot_number=None, expiry_date=None):
        """Build a key from raw input. Blank lot numbers become None."""
        if lot_number is not None and not isinstance(lot_number, str):
            lot_number = str(lot_number)
        lot = (lot_number or '').strip()
        return cls(lot_number=lot or None, expiry_date=_parse_expiry(expiry_date))

    @classmethod
    def of(cls, obj):
        """Key of any object carrying ``lot_number`` and ``expiry_date`` (lines, balances)."""
        return cls.normalize(getattr(obj, 'lot_number', None), getattr(obj, 'expiry_date', None))

    @classmethod
    def of_dict(cls, data):
        return cls.normalize(data.get('lot_number'), data.get('expiry_date'))

    @property
    def stored_lot_number(self):
        return self.lot_number or ''

    def as_lookup(self):
        """ORM filter kwargs. ``expiry_date=None`` becomes IS NULL."""
        return {'lot_number': self.stored_lot_number, 'expiry_date': self.expiry_date}

    def __bool__(self):
        return bool(self.lot_number or self.expiry_date)

    def __str__(self):
        parts = []
        if self.lot_number:
            parts.append(f"lot {self.lot_number}")
        if self.expiry_date:
            parts.append(f"exp {self.expiry_date.isoformat()}")
        return ', '.join(parts) or 'no lot'


NO_LOT = LotKey()
