# apps/products/models.py
"""
Product catalog.

Models:
- Category: Optional grouping of products (may nest one level under a parent)
- Product: Anything stocked, bought or shipped
"""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from shared.models import TenantMixin, TimestampMixin


class BaseUOM(models.TextChoices):
    EACH = 'EA', 'Each'
    KILOGRAM = 'KG', 'Kilogram'
    GRAM = 'G', 'Gram'
    LITRE = 'L', 'Litre'
    MILLILITRE = 'ML', 'Millilitre'
    METRE = 'M', 'Metre'
    CENTIMETRE = 'CM', 'Centimetre'
    BOX = 'BOX', 'Box'
    PACK = 'PACK', 'Pack'


class Category(TenantMixin, TimestampMixin):
    name = models.CharField(max_length=100)
    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
    )

    class Meta:
        verbose_name_plural = 'categories'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='products_category_unique_name'),
        ]

    def __str__(self):
        return self.name


class Product(TenantMixin, TimestampMixin):
    """
    A stocked product.

    Quantities of a product are always held in its base unit of measure.
    ``current_cost`` is the last purchase cost and is refreshed on every PO
    receipt; the per-location cost basis lives on InventoryBalance.
    """
    sku = models.CharField(
        max_length=50,
        help_text="Stock Keeping Unit (unique per tenant)"
    )
    name = models.CharField(max_length=200)
    barcode = models.CharField(max_length=50, blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
    )
    base_uom = models.CharField(max_length=10, choices=BaseUOM.choices, default=BaseUOM.EACH)
    pack_uom_name = models.CharField(
        max_length=20,
        blank=True,
        help_text="Name of the pack unit (e.g., 'Case'); requires pack_qty_in_base"
    )
    pack_qty_in_base = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.0001'))],
        help_text="Base units per pack"
    )
    current_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
    )
    track_lot = models.BooleanField(default=False)
    track_expiry = models.BooleanField(default=False)
    reorder_point = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Low-stock threshold across all locations (0 disables the alert)"
    )
    reorder_qty = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
    )
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ['sku']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'sku'], name='products_product_unique_sku'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'active'], name='products_tenant_active_idx'),
        ]

    def __str__(self):
        return f"{self.sku} - {self.name}"

    def clean(self):
        super().clean()
        if bool(self.pack_uom_name) != (self.pack_qty_in_base is not None):
            raise ValidationError(
                "Pack unit name and pack quantity must be set together."
            )
