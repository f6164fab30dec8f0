# apps/parties/models.py
"""
Trading partners.

- Supplier: who purchase orders are placed with and supplier returns go back to
- Customer: who shipments go to and customer returns come from

Both share the contact fields of PartyBase.
"""
from django.db import models

from shared.models import TenantMixin, TimestampMixin


class PartyBase(TenantMixin, TimestampMixin):
    """Common contact details for any business we trade with."""
    code = models.CharField(max_length=20, blank=True, help_text="Short reference code")
    name = models.CharField(max_length=200)
    contact_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return self.name


class Supplier(PartyBase):
    payment_terms = models.CharField(max_length=50, blank=True)
    lead_time_days = models.PositiveIntegerField(null=True, blank=True)

    class Meta(PartyBase.Meta):
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='parties_supplier_unique_name'),
        ]


class Customer(PartyBase):

    class Meta(PartyBase.Meta):
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='parties_customer_unique_name'),
        ]
