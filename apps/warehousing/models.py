# apps/warehousing/models.py
"""
Warehousing models.

Models:
- Location: Where stock is held (warehouse, store or outlet)
- Transfer / TransferLine: Stock moved between two locations
- CycleCount / CycleCountLine: Physical count of a location

Transfer workflow:
1. DRAFT: lines are editable; unit cost is snapshotted from the source balance
2. CONFIRMED (sent): stock has left the source location
3. COMPLETED (received): stock has arrived at the destination
4. CANCELLED: only before sending

CycleCount workflow:
1. DRAFT: system quantities snapshotted, counted quantities are entered
2. COMPLETED (posted): variances applied to balances
3. CANCELLED: count abandoned
"""
from decimal import Decimal

from django.conf import settings
from django.db import models

from shared.models import TenantMixin, TimestampMixin, DocumentMixin, DocumentStatus

QTY_FIELD = dict(max_digits=12, decimal_places=4)


class LocationType(models.TextChoices):
    WAREHOUSE = 'warehouse', 'Warehouse'
    STORE = 'store', 'Store'
    OUTLET = 'outlet', 'Outlet'


class Location(TenantMixin, TimestampMixin):
    """A place that holds stock. Locations may be grouped under a parent."""
    name = models.CharField(max_length=100)
    location_type = models.CharField(
        max_length=20,
        choices=LocationType.choices,
        default=LocationType.WAREHOUSE,
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
    )
    address = models.TextField(blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='warehousing_location_unique_name'),
        ]

    def __str__(self):
        return self.name


class Transfer(DocumentMixin):
    SEQUENCE_TYPE = 'TRF'
    LABEL = 'Transfer'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.CONFIRMED, DocumentStatus.CANCELLED},
        DocumentStatus.CONFIRMED: {DocumentStatus.COMPLETED},
    }

    from_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='transfers_out',
    )
    to_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='transfers_in',
    )
    transfer_date = models.DateField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+',
    )
    received_at = models.DateTimeField(null=True, blank=True)
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+',
    )

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']

    @property
    def in_transit(self):
        return self.status == DocumentStatus.CONFIRMED


class TransferLine(models.Model):
    transfer = models.ForeignKey(Transfer, on_delete=models.CASCADE, related_name='lines')
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='+')
    quantity = models.DecimalField(**QTY_FIELD)
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    unit_cost = models.DecimalField(
        default=Decimal('0'),
        help_text="Source average cost; snapshotted at creation, fixed when sent",
        **QTY_FIELD
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.transfer.number}: {self.product.sku} x {self.quantity}"


class CycleCount(DocumentMixin):
    SEQUENCE_TYPE = 'CNT'
    LABEL = 'Cycle count'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.COMPLETED, DocumentStatus.CANCELLED},
    }

    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='cycle_counts',
    )
    count_date = models.DateField(null=True, blank=True)
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+',
    )

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']


class CycleCountLine(models.Model):
    """
    One product/lot to count.

    ``system_qty`` is what the balance held when the count was created;
    ``counted_qty`` stays NULL until someone counts it.
    """
    cycle_count = models.ForeignKey(CycleCount, on_delete=models.CASCADE, related_name='lines')
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='+')
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    system_qty = models.DecimalField(default=Decimal('0'), **QTY_FIELD)
    counted_qty = models.DecimalField(null=True, blank=True, **QTY_FIELD)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.cycle_count.number}: {self.product.sku}"

    @property
    def is_counted(self):
        return self.counted_qty is not None

    @property
    def variance(self):
        if self.counted_qty is None:
            return None
        return self.counted_qty - self.system_qty
