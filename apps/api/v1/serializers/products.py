# apps/api/v1/serializers/products.py
"""
Serializers for the product catalog: Category and Product.
"""
from rest_framework import serializers

from apps.products.models import Category, Product
from .base import TenantModelSerializer


class CategorySerializer(TenantModelSerializer):
    parent_name = serializers.CharField(source='parent.name', read_only=True, default=None)

    class Meta:
        model = Category
        fields = ['id', 'name', 'parent', 'parent_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_parent(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A category cannot be its own parent.")
        return value


class ProductSerializer(TenantModelSerializer):
    """Serializer for Product model."""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            'id', 'sku', 'name', 'barcode', 'category', 'category_name',
            'base_uom', 'pack_uom_name', 'pack_qty_in_base',
            'current_cost', 'track_lot', 'track_expiry',
            'reorder_point', 'reorder_qty', 'active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_sku(self, value):
        value = value.strip()
        request = self.context.get('request')
        qs = Product.objects.for_tenant(getattr(request, 'tenant', None)).filter(sku__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(f"A product with SKU '{value}' already exists.")
        return value

    def validate(self, attrs):
        pack_name = attrs.get('pack_uom_name', getattr(self.instance, 'pack_uom_name', ''))
        pack_qty = attrs.get('pack_qty_in_base', getattr(self.instance, 'pack_qty_in_base', None))
        if bool(pack_name) != (pack_qty is not None):
            raise serializers.ValidationError({
                'pack_qty_in_base': "Pack unit name and pack quantity must be set together."
            })
        return super().validate(attrs)
