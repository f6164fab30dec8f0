# apps/inventory/services.py
"""
Inventory services: balance lookup, weighted-average costing and the
movement ledger.

BalanceLocator   - find the balance row for (product, location, LotKey)
MovementRecorder - append one immutable StockMovement
InventoryService - every quantity change goes through here:
                   receive_stock, issue_stock, set_counted_quantity
AdjustmentService - manual stock corrections (ADJ- documents)

Every mutating call runs inside transaction.atomic() and locks the balance
row it touches, so a document transition that calls it several times
commits or rolls back as one unit and two concurrent deductions cannot both
pass the availability check.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from shared.exceptions import InsufficientStockError
from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from .costing import ZERO, quantize, to_decimal, weighted_average
from .documents import DocumentService
from .lots import LotKey, NO_LOT
from .models import (
    InventoryBalance, StockMovement, MovementType, AdjustmentReason,
    Adjustment, AdjustmentLine,
)

logger = logging.getLogger(__name__)


class BalanceLocator:
    """
    Finds the balance for a product at a location.

    ``key`` is a LotKey; "no lot" matches only balances without a lot, and
    never a balance of some other lot.
    """

    def __init__(self, tenant):
        self.tenant = tenant

    def _queryset(self, product, location, key):
        return InventoryBalance.objects.for_tenant(self.tenant).filter(
            product=product,
            location=location,
            **(key or NO_LOT).as_lookup()
        )

    def find(self, product, location, key=NO_LOT):
        """Return the matching balance or None. No side effects."""
        return self._queryset(product, location, key).first()

    def find_for_update(self, product, location, key=NO_LOT):
        """Same as find() but locks the row until the transaction ends."""
        return self._queryset(product, location, key).select_for_update().first()

    def on_hand(self, product, location, key=NO_LOT):
        balance = self.find(product, location, key)
        return balance.qty_on_hand if balance else ZERO


class MovementRecorder:
    """
    Appends StockMovement rows.

    Called right after the balance change it describes, inside the same
    transaction. A zero quantity is a programming error, not a movement.
    """

    def __init__(self, tenant, user=None):
        self.tenant = tenant
        self.user = user

    def record(
        self,
        product,
        location,
        quantity,
        movement_type,
        unit_cost=ZERO,
        key=NO_LOT,
        reference=None,
        reason='',
        notes='',
        balance_after=None,
    ):
        quantity = quantize(quantity)
        if quantity == 0:
            raise ValueError("A stock movement must change the quantity.")
        key = key or NO_LOT

        return StockMovement.objects.create(
            tenant=self.tenant,
            product=product,
            location=location,
            quantity=quantity,
            movement_type=movement_type,
            reference_type=reference._meta.model_name if reference is not None else '',
            reference_id=reference.pk if reference is not None else None,
            reference_number=getattr(reference, 'number', '') if reference is not None else '',
            lot_number=key.stored_lot_number,
            expiry_date=key.expiry_date,
            unit_cost=quantize(unit_cost),
            reason=reason,
            notes=notes,
            balance_after=balance_after,
            created_by=self.user if self.user is not None and self.user.is_authenticated else None,
        )


class InventoryService:
    """
    Service for every on-hand quantity change.

    Usage:
        service = InventoryService(tenant, user)

        # Receive 100 @ 2.50 into a lot
        service.receive_stock(product, location, 100, Decimal('2.50'),
                              key=LotKey.normalize('L-1', '2026-12-31'), reference=po)

        # Ship 40; cost basis carried forward from the balance
        movement = service.issue_stock(product, location, 40, reference=shipment)
        movement.unit_cost  # avg cost used
    """

    def __init__(self, tenant, user=None):
        """
        Args:
            tenant: Tenant instance to scope operations
            user: User performing operations (for the movement ledger)
        """
        self.tenant = tenant
        self.user = user
        self.locator = BalanceLocator(tenant)
        self.recorder = MovementRecorder(tenant, user)

    # ===== READS =====

    def on_hand(self, product, location, key=NO_LOT):
        return self.locator.on_hand(product, location, key)

    def check_availability(self, product, location, quantity, key=NO_LOT):
        """Raise InsufficientStockError if ``quantity`` is not on hand. Does not lock."""
        quantity = to_decimal(quantity)
        on_hand = self.locator.on_hand(product, location, key)
        if on_hand < quantity:
            raise InsufficientStockError(product, on_hand, quantity, location)

    # ===== MUTATIONS =====

    def receive_stock(
        self,
        product,
        location,
        quantity,
        unit_cost,
        key=NO_LOT,
        movement_type=MovementType.RECEIVE,
        reference=None,
        reason='',
        notes='',
    ):
        """
        Add stock at ``unit_cost`` using the weighted-average method.

        Creates the balance on first receipt. Returns the StockMovement.
        """
        quantity = to_decimal(quantity)
        unit_cost = to_decimal(unit_cost)
        if quantity <= 0:
            raise ValidationError(f"Quantity to receive must be positive, got {quantity}.")
        if unit_cost < 0:
            raise ValidationError(f"Unit cost cannot be negative, got {unit_cost}.")

        with transaction.atomic():
            balance = self._get_or_create_locked_balance(product, location, key, unit_cost)
            balance.qty_on_hand, balance.avg_cost = weighted_average(
                balance.qty_on_hand, balance.avg_cost, quantity, unit_cost
            )
            balance.save()

            return self.recorder.record(
                product, location, quantity, movement_type,
                unit_cost=unit_cost, key=key, reference=reference,
                reason=reason, notes=notes, balance_after=balance.qty_on_hand,
            )

    def issue_stock(
        self,
        product,
        location,
        quantity,
        key=NO_LOT,
        movement_type=MovementType.SHIP,
        reference=None,
        reason='',
        notes='',
    ):
        """
        Remove stock, carrying the cost basis forward unchanged.

        Raises InsufficientStockError (and changes nothing) when the balance
        holds less than ``quantity``. Returns the StockMovement, whose
        ``unit_cost`` is the average cost the stock left at.
        """
        quantity = to_decimal(quantity)
        if quantity <= 0:
            raise ValidationError(f"Quantity to issue must be positive, got {quantity}.")

        with transaction.atomic():
            balance = self.locator.find_for_update(product, location, key)
            on_hand = balance.qty_on_hand if balance else ZERO
            if on_hand < quantity:
                logger.warning(
                    "Insufficient stock: tenant=%s product=%s location=%s %s on_hand=%s requested=%s",
                    self.tenant.pk, getattr(product, 'pk', product), getattr(location, 'pk', location),
                    key or NO_LOT, on_hand, quantity,
                )
                raise InsufficientStockError(product, on_hand, quantity, location)

            balance.qty_on_hand = quantize(on_hand - quantity)
            balance.save(update_fields=['qty_on_hand', 'updated_at'])

            return self.recorder.record(
                product, location, -quantity, movement_type,
                unit_cost=balance.avg_cost, key=key, reference=reference,
                reason=reason, notes=notes, balance_after=balance.qty_on_hand,
            )

    def set_counted_quantity(self, product, location, counted_qty, key=NO_LOT, reference=None, notes=''):
        """
        Set a balance to a physically counted quantity.

        The movement records the difference from the current balance, so the
        ledger still sums to qty_on_hand. A new balance starts at cost 0.
        Returns the movement, or None when nothing changed.
        """
        counted_qty = quantize(counted_qty)
        if counted_qty < 0:
            raise ValidationError(f"Counted quantity cannot be negative, got {counted_qty}.")

        with transaction.atomic():
            balance = self.locator.find_for_update(product, location, key)
            current = balance.qty_on_hand if balance else ZERO
            difference = counted_qty - current
            if difference == 0:
                return None

            if balance is None:
                balance = self._create_balance(product, location, key, ZERO)
            balance.qty_on_hand = counted_qty
            balance.save(update_fields=['qty_on_hand', 'updated_at'])

            return self.recorder.record(
                product, location, difference, MovementType.COUNT_VARIANCE,
                unit_cost=balance.avg_cost, key=key, reference=reference,
                reason=AdjustmentReason.COUNT_VARIANCE, notes=notes,
                balance_after=balance.qty_on_hand,
            )

    # ===== RECONCILIATION =====

    def reconcile(self, product=None, location=None):
        """
        Compare every balance with the sum of its movements.

        Returns a list of dicts, one per key where they disagree (including
        movement keys that have no balance row at all). An empty list means
        the ledger and the balances agree.
        """
        balances = InventoryBalance.objects.for_tenant(self.tenant)
        movements = StockMovement.objects.for_tenant(self.tenant)
        if product is not None:
            balances = balances.filter(product=product)
            movements = movements.filter(product=product)
        if location is not None:
            balances = balances.filter(location=location)
            movements = movements.filter(location=location)

        key_fields = ('product_id', 'location_id', 'lot_number', 'expiry_date')
        totals = {
            tuple(row[f] for f in key_fields): row['total']
            for row in movements.values(*key_fields).annotate(total=Sum('quantity')).order_by()
        }

        mismatches = []
        for balance in balances.values('id', 'qty_on_hand', *key_fields):
            key = tuple(balance[f] for f in key_fields)
            total = to_decimal(totals.pop(key, ZERO))
            if total != balance['qty_on_hand']:
                mismatches.append(self._mismatch(key, balance['id'], balance['qty_on_hand'], total))

        for key, total in totals.items():
            if to_decimal(total) != 0:
                mismatches.append(self._mismatch(key, None, ZERO, to_decimal(total)))

        if mismatches:
            logger.warning("Reconciliation found %d mismatches for tenant %s", len(mismatches), self.tenant.pk)
        return mismatches

    # ===== HELPERS =====

    @staticmethod
    def _mismatch(key, balance_id, qty_on_hand, movement_total):
        product_id, location_id, lot_number, expiry_date = key
        return {
            'balance_id': balance_id,
            'product_id': product_id,
            'location_id': location_id,
            'lot_number': lot_number,
            'expiry_date': expiry_date,
            'qty_on_hand': qty_on_hand,
            'movement_total': movement_total,
            'difference': qty_on_hand - movement_total,
        }

    def _create_balance(self, product, location, key, avg_cost):
        key = key or NO_LOT
        return InventoryBalance.objects.create(
            tenant=self.tenant,
            product=product,
            location=location,
            lot_number=key.stored_lot_number,
            expiry_date=key.expiry_date,
            qty_on_hand=ZERO,
            avg_cost=quantize(avg_cost),
        )

    def _get_or_create_locked_balance(self, product, location, key, avg_cost):
        """
        Locked balance for the key, creating an empty one if needed.

        Two transactions may race to create the same key; the loser hits the
        unique constraint inside its savepoint and re-reads the winner's row.
        """
        balance = self.locator.find_for_update(product, location, key)
        if balance is not None:
            return balance
        try:
            with transaction.atomic():
                return self._create_balance(product, location, key, avg_cost)
        except IntegrityError:
            return self.locator.find_for_update(product, location, key)


class AdjustmentService(DocumentService):
    """
    Manual stock corrections.

    Usage:
        service = AdjustmentService(tenant, user)
        adj = service.create(location=loc, reason='damage', lines=[
            {'product': p, 'quantity': Decimal('-2')},
        ])
        service.post(adj)
    """
    model = Adjustment
    line_model = AdjustmentLine
    line_parent_field = 'adjustment'
    header_fields = ('location', 'reason', 'notes')

    def clean_header(self, header):
        if header.get('location') is None:
            raise ValidationError({'location': "Location is required."})
        self.check_tenant('location', header['location'])
        if header.get('reason') not in AdjustmentReason.values:
            raise ValidationError({'reason': f"Invalid reason '{header.get('reason')}'."})
        return header

    def clean_line(self, index, data):
        quantity = to_decimal(data.get('quantity'))
        if quantity == 0:
            raise ValidationError({'lines': f"Line {index + 1}: quantity cannot be zero."})
        unit_cost = data.get('unit_cost')
        if unit_cost is not None and to_decimal(unit_cost) < 0:
            raise ValidationError({'lines': f"Line {index + 1}: unit cost cannot be negative."})
        key = LotKey.normalize(data.get('lot_number'), data.get('expiry_date'))
        return {
            'product': data['product'],
            'quantity': quantize(quantity),
            'unit_cost': quantize(unit_cost) if unit_cost is not None else None,
            'lot_number': key.stored_lot_number,
            'expiry_date': key.expiry_date,
        }

    def post(self, adjustment):
        """
        Apply every line to stock (draft -> completed).

        Positive lines are costed at the line cost, else the balance's
        current average, else the product's current cost.
        """
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            adjustment = adjustment.lock()
            adjustment.ensure_status(DocumentStatus.DRAFT, action='post')

            for line in adjustment.lines.select_related('product'):
                key = LotKey.of(line)
                if line.quantity > 0:
                    unit_cost = line.unit_cost
                    if unit_cost is None:
                        balance = inventory.locator.find(line.product, adjustment.location, key)
                        unit_cost = balance.avg_cost if balance else line.product.current_cost
                    movement = inventory.receive_stock(
                        line.product, adjustment.location, line.quantity, unit_cost,
                        key=key, movement_type=MovementType.ADJUSTMENT,
                        reference=adjustment, reason=adjustment.reason,
                    )
                else:
                    movement = inventory.issue_stock(
                        line.product, adjustment.location, -line.quantity,
                        key=key, movement_type=MovementType.ADJUSTMENT,
                        reference=adjustment, reason=adjustment.reason,
                    )
                line.unit_cost = movement.unit_cost
                line.save(update_fields=['unit_cost'])

            adjustment.posted_at = timezone.now()
            adjustment.posted_by = self.acting_user
            self.transition(adjustment, DocumentStatus.COMPLETED, AuditAction.POST)

        logger.info("Posted adjustment %s for tenant %s", adjustment.number, self.tenant.pk)
        return adjustment
