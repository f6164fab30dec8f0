# apps/returns/models.py
"""
Return models.

A customer return brings goods back into a location; a supplier return
sends goods back to the supplier. Both are processed in one step:

    draft -> completed (processed)
    draft -> cancelled
"""
from django.db import models

from shared.models import DocumentMixin, DocumentStatus

QTY_FIELD = dict(max_digits=12, decimal_places=4)


class ReturnType(models.TextChoices):
    CUSTOMER = 'customer', 'Customer Return'
    SUPPLIER = 'supplier', 'Supplier Return'


class Return(DocumentMixin):
    SEQUENCE_TYPE = 'RET'
    LABEL = 'Return'
    TRANSITIONS = {
        DocumentStatus.DRAFT: {DocumentStatus.COMPLETED, DocumentStatus.CANCELLED},
    }

    return_type = models.CharField(max_length=20, choices=ReturnType.choices)
    customer = models.ForeignKey(
        'parties.Customer',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='returns',
    )
    supplier = models.ForeignKey(
        'parties.Supplier',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='returns',
    )
    partner_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Free-text partner when no customer/supplier record exists"
    )
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='returns',
    )
    return_date = models.DateField(null=True, blank=True)
    reason = models.TextField(blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta(DocumentMixin.Meta):
        ordering = ['-created_at']

    @property
    def partner(self):
        if self.return_type == ReturnType.CUSTOMER:
            return self.customer or self.partner_name
        return self.supplier or self.partner_name

    @property
    def is_inbound(self):
        return self.return_type == ReturnType.CUSTOMER


class ReturnLine(models.Model):
    return_document = models.ForeignKey(Return, on_delete=models.CASCADE, related_name='lines')
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='+')
    quantity = models.DecimalField(**QTY_FIELD)
    lot_number = models.CharField(max_length=100, blank=True, default='')
    expiry_date = models.DateField(null=True, blank=True)
    unit_cost = models.DecimalField(null=True, blank=True, **QTY_FIELD)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.return_document.number}: {self.product.sku} x {self.quantity}"
