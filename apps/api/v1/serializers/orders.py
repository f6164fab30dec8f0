# apps/api/v1/serializers/orders.py
"""
Serializers for PurchaseOrder and its lines.
"""
from decimal import Decimal

from rest_framework import serializers

from apps.orders.models import PurchaseOrder, PurchaseOrderLine
from .base import TenantModelSerializer, DocumentSerializer, DocumentWriteSerializer


class PurchaseOrderLineSerializer(TenantModelSerializer):
    """Serializer for PurchaseOrderLine model."""
    sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    line_total = serializers.DecimalField(max_digits=24, decimal_places=4, read_only=True)
    quantity_remaining = serializers.DecimalField(max_digits=12, decimal_places=4, read_only=True)

    class Meta:
        model = PurchaseOrderLine
        fields = [
            'id', 'product', 'sku', 'product_name',
            'quantity_ordered', 'unit_cost', 'quantity_received', 'quantity_remaining',
            'line_total', 'notes',
        ]
        read_only_fields = ['id', 'quantity_received']

    def validate_quantity_ordered(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be positive.")
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Cost cannot be negative.")
        return value


class PurchaseOrderListSerializer(DocumentSerializer):
    """Lightweight serializer for PurchaseOrder list views."""
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    total_cost = serializers.DecimalField(max_digits=24, decimal_places=4, read_only=True)
    is_receivable = serializers.BooleanField(read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'supplier', 'supplier_name', 'location', 'location_name',
            'order_date', 'expected_date', 'total_cost', 'is_receivable',
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(PurchaseOrderListSerializer):
    """Detailed serializer for PurchaseOrder with nested lines."""
    lines = PurchaseOrderLineSerializer(many=True, read_only=True)

    class Meta(PurchaseOrderListSerializer.Meta):
        fields = PurchaseOrderListSerializer.Meta.fields + ['lines']
        read_only_fields = fields


class PurchaseOrderWriteSerializer(DocumentWriteSerializer):
    """Serializer for creating/updating PurchaseOrder with nested lines."""
    lines = PurchaseOrderLineSerializer(many=True, required=False)

    class Meta:
        model = PurchaseOrder
        fields = ['supplier', 'location', 'order_date', 'expected_date', 'notes', 'lines']


class ReceiptEntrySerializer(serializers.Serializer):
    line_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=4)
    lot_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=4, required=False, min_value=Decimal('0'),
    )


class ReceiveSerializer(serializers.Serializer):
    receipts = ReceiptEntrySerializer(many=True, allow_empty=False)
