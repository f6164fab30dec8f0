# apps/inventory/models.py
"""
Inventory models.

Models:
- InventoryBalance: On-hand quantity and weighted-average cost per
  product/location/lot/expiry
- StockMovement: Append-only ledger, one row per quantity change
- Adjustment / AdjustmentLine: Manual stock corrections (damage, shrinkage, ...)

Every balance change is paired with exactly one StockMovement, so the sum of
movements for a balance key always equals the balance's qty_on_hand.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from simple_history.models import HistoricalRecords

from shared.exceptions import ImmutableRecordError
from shared.managers import TenantQuerySet
from shared.models import TenantMixin, TimestampMixin, DocumentMixin, DocumentStatus
from .lots import LotKey

QTY_FIELD = dict(max_digits=12, decimal_places=4)


class MovementType(models.TextChoices):
    RECEIVE = 'receive', 'Receive'
    SHIP = 'ship', 'Ship'
    TRANSFER_OUT = 'transfer_out', 'Transfer Out'
    TRANSFER_IN = 'transfer_in', 'Transfer In'
    ADJUSTMENT = 'adjustment', 'Adjustment'
    COUNT_VARIANCE = 'count_variance', 'Count Variance'
    RETURN_IN = 'return_in', 'Return In'
    RETURN_OUT = 'return_out', 'Return Out'
    VOID = 'void', 'Void'


class AdjustmentReason(models.TextChoices):
    DAMAGE = 'damage', 'Damage'
    SHRINKAGE = 'shrinkage', 'Shrinkage'
    EXPIRY = 'expiry', 'Expiry'
    CORRECTION = 'correction', 'Correction'
    SAMPLE = 'sample', 'Sample'
    COUNT_VARIANCE = 'count_variance', 'Count Variance'
    OTHER = 'other', 'Other'


class InventoryBalance(TenantMixin, TimestampMixin):
    """
    Real-time balance per product/location/lot/expiry.

    Exactly one row exists per key. Rows are never deleted; a depleted
    balance stays at zero as history. The cost basis survives depletion, so
    a later receipt into an empty row simply takes the incoming cost.
    """
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='balances',
    )
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='balances',
    )
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    qty_on_hand = models.DecimalField(default=Decimal('0'), **QTY_FIELD)
    avg_cost = models.DecimalField(default=Decimal('0'), **QTY_FIELD)

    history = HistoricalRecords()

    class Meta:
        verbose_name = "Inventory Balance"
        verbose_name_plural = "Inventory Balances"
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'product', 'location', 'lot_number', 'expiry_date'],
                condition=Q(expiry_date__isnull=False),
                name='inventory_balance_unique_dated_key',
            ),
            models.UniqueConstraint(
                fields=['tenant', 'product', 'location', 'lot_number'],
                condition=Q(expiry_date__isnull=True),
                name='inventory_balance_unique_undated_key',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'product', 'location'], name='inv_balance_product_idx'),
            models.Index(fields=['tenant', 'location'], name='inv_balance_location_idx'),
            models.Index(fields=['tenant', 'expiry_date'], name='inv_balance_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.product.sku} @ {self.location.name} ({self.lot_key}): {self.qty_on_hand}"

    @property
    def lot_key(self):
        return LotKey.of(self)

    @property
    def inventory_value(self):
        return self.qty_on_hand * self.avg_cost


class StockMovementQuerySet(TenantQuerySet):
    """Bulk update/delete are refused the same way as single-row changes."""

    def update(self, **kwargs):
        raise ImmutableRecordError("Stock movements cannot be modified.")

    def delete(self):
        raise ImmutableRecordError("Stock movements cannot be deleted.")


class StockMovement(TenantMixin):
    """
    Immutable ledger entry for one quantity change.

    ``quantity`` is signed: positive adds stock, negative removes it.
    ``reference_type``/``reference_id`` point at the originating document.
    """
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='movements',
    )
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='movements',
    )
    quantity = models.DecimalField(**QTY_FIELD)
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    reference_type = models.CharField(max_length=30, blank=True)
    reference_id = models.PositiveBigIntegerField(null=True, blank=True)
    reference_number = models.CharField(max_length=30, blank=True)
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    unit_cost = models.DecimalField(default=Decimal('0'), **QTY_FIELD)
    reason = models.CharField(max_length=20, choices=AdjustmentReason.choices, blank=True)
    notes = models.TextField(blank=True)
    balance_after = models.DecimalField(
        null=True,
        blank=True,
        help_text="Balance qty_on_hand right after this movement",
        **QTY_FIELD
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['tenant', 'product', 'location'], name='inv_movement_product_idx'),
            models.Index(fields=['tenant', 'reference_type', 'reference_id'], name='inv_movement_reference_idx'),
            models.Index(fields=['tenant', 'movement_type'], name='inv_movement_type_idx'),
            models.Index(fields=['tenant', 'created_at'], name='inv_movement_created_idx'),
        ]

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.quantity:+} {self.product.sku}"

    @property
    def extended_cost(self):
        return abs(self.quantity) * self.unit_cost

    @property
    def lot_key(self):
        return LotKey.of(self)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError("Stock movements cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Stock movements cannot be deleted.")


class Adjustment(DocumentMixin):
    """
    Manual stock correction at one location.

    Posting applies every line: positive quantities add stock, negative
    quantities remove it (never below zero). Each line produces an
    ``adjustment`` movement carrying the header reason.
    """
    SEQUENCE_TYPE = 'ADJ'
    LABEL = 'Adjustment'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.COMPLETED, DocumentStatus.CANCELLED},
    }

    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='adjustments',
    )
    reason = models.CharField(max_length=20, choices=AdjustmentReason.choices)
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']


class AdjustmentLine(models.Model):
    adjustment = models.ForeignKey(Adjustment, on_delete=models.CASCADE, related_name='lines')
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='+')
    quantity = models.DecimalField(help_text="Signed: positive adds, negative removes", **QTY_FIELD)
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    unit_cost = models.DecimalField(
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Cost for positive lines; defaults to the balance cost. Set on posting.",
        **QTY_FIELD
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.adjustment.number}: {self.product.sku} {self.quantity:+}"
