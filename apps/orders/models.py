# apps/orders/models.py
"""
Purchase order models.

- PurchaseOrder: Goods ordered from a supplier into one receiving location
- PurchaseOrderLine: Quantity and cost of one product on the order

Status flow:
    draft -> confirmed -> (partial ->)* completed
    draft | confirmed -> cancelled
"""
from decimal import Decimal

from django.db import models

from shared.models import DocumentMixin, DocumentStatus

QTY_FIELD = dict(max_digits=12, decimal_places=4)


class PurchaseOrder(DocumentMixin):
    SEQUENCE_TYPE = 'PO'
    LABEL = 'PO'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.CONFIRMED, DocumentStatus.CANCELLED},
        DocumentStatus.CONFIRMED: {
            DocumentStatus.PARTIAL, DocumentStatus.COMPLETED, DocumentStatus.CANCELLED,
        },
        DocumentStatus.PARTIAL: {DocumentStatus.PARTIAL, DocumentStatus.COMPLETED},
    }

    supplier = models.ForeignKey(
        'parties.Supplier',
        on_delete=models.PROTECT,
        related_name='purchase_orders',
    )
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        help_text="Location goods are received into"
    )
    order_date = models.DateField(null=True, blank=True)
    expected_date = models.DateField(null=True, blank=True)

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'status'], name='orders_po_status_idx'),
        ]

    @property
    def total_cost(self):
        return sum((line.line_total for line in self.lines.all()), Decimal('0'))

    @property
    def is_receivable(self):
        return self.status in (DocumentStatus.CONFIRMED, DocumentStatus.PARTIAL)


class PurchaseOrderLine(models.Model):
    """
    Line items on a purchase order.

    ``quantity_received`` accumulates across receipts and never exceeds
    ``quantity_ordered``.
    """
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name='lines',
    )
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='purchase_order_lines',
    )
    quantity_ordered = models.DecimalField(**QTY_FIELD)
    unit_cost = models.DecimalField(default=Decimal('0'), **QTY_FIELD)
    quantity_received = models.DecimalField(default=Decimal('0'), **QTY_FIELD)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.purchase_order.number}: {self.product.sku}"

    @property
    def line_total(self):
        return self.quantity_ordered * self.unit_cost

    @property
    def is_fully_received(self):
        return self.quantity_received >= self.quantity_ordered

    @property
    def quantity_remaining(self):
        """Quantity still to be received."""
        return max(self.quantity_ordered - self.quantity_received, Decimal('0'))
