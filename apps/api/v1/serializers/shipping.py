# apps/api/v1/serializers/shipping.py
"""
Serializers for Shipment and its lines.
"""
from rest_framework import serializers

from apps.shipping.models import Shipment, ShipmentLine
from .base import (
    TenantModelSerializer, DocumentSerializer, DocumentWriteSerializer, LotFieldsMixin,
)


class ShipmentLineSerializer(LotFieldsMixin, TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = ShipmentLine
        fields = ['id', 'product', 'sku', 'product_name', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
        read_only_fields = ['id', 'unit_cost']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be positive.")
        return value


class ShipmentSerializer(DocumentSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    lines = ShipmentLineSerializer(many=True, read_only=True)

    class Meta:
        model = Shipment
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'customer', 'customer_name', 'location', 'location_name',
            'ship_date', 'shipped_at', 'lines',
        ]
        read_only_fields = fields


class ShipmentWriteSerializer(DocumentWriteSerializer):
    lines = ShipmentLineSerializer(many=True, required=False)

    class Meta:
        model = Shipment
        fields = ['customer', 'location', 'notes', 'lines']


class ShipSerializer(serializers.Serializer):
    ship_date = serializers.DateField(required=False, allow_null=True)
