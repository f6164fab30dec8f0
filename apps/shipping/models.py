# apps/shipping/models.py
"""
Shipping models.

Models:
- Shipment: Goods sent to a customer from one location
- ShipmentLine: Product, quantity and lot leaving on the shipment

Status flow:
    draft -> confirmed (stock checked) -> completed (shipped)
    draft | confirmed -> cancelled

Shipping is all-or-nothing: every line leaves in the same transition.
"""
from django.db import models

from shared.models import DocumentMixin, DocumentStatus

QTY_FIELD = dict(max_digits=12, decimal_places=4)


class Shipment(DocumentMixin):
    """
    Outbound delivery to a customer.

    Example:
        Shipment: SHP-000042
        Customer: Corner Deli
        Lines: 10 x MILK-1L (lot L-7), 4 x EGG-12
    """
    SEQUENCE_TYPE = 'SHP'
    LABEL = 'Shipment'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.CONFIRMED, DocumentStatus.CANCELLED},
        DocumentStatus.CONFIRMED: {DocumentStatus.COMPLETED, DocumentStatus.CANCELLED},
    }

    customer = models.ForeignKey(
        'parties.Customer',
        on_delete=models.PROTECT,
        related_name='shipments',
    )
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='shipments',
        help_text="Location the goods leave from"
    )
    ship_date = models.DateField(
        null=True,
        blank=True,
        help_text="Set when the shipment is shipped"
    )
    shipped_at = models.DateTimeField(null=True, blank=True)

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'status'], name='shipping_status_idx'),
        ]

    @property
    def total_quantity(self):
        return sum((line.quantity for line in self.lines.all()), 0)


class ShipmentLine(models.Model):
    shipment = models.ForeignKey(Shipment, on_delete=models.CASCADE, related_name='lines')
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='shipment_lines',
    )
    quantity = models.DecimalField(**QTY_FIELD)
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    unit_cost = models.DecimalField(
        null=True,
        blank=True,
        help_text="Average cost the stock left at; set when shipped",
        **QTY_FIELD
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.shipment.number}: {self.product.sku} x {self.quantity}"

    @property
    def extended_cost(self):
        if self.unit_cost is None:
            return None
        return self.quantity * self.unit_cost
