# apps/api/v1/serializers/returns.py
"""
Serializers for customer and supplier returns.
"""
from rest_framework import serializers

from apps.returns.models import Return, ReturnLine, ReturnType
from .base import (
    TenantModelSerializer, DocumentSerializer, DocumentWriteSerializer, LotFieldsMixin,
)


class ReturnLineSerializer(LotFieldsMixin, TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = ReturnLine
        fields = ['id', 'product', 'sku', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
        read_only_fields = ['id']
        extra_kwargs = {'unit_cost': {'required': False}}

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be positive.")
        return value


class ReturnSerializer(DocumentSerializer):
    location_name = serializers.CharField(source='location.name', read_only=True)
    lines = ReturnLineSerializer(many=True, read_only=True)

    class Meta:
        model = Return
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'return_type', 'customer', 'supplier', 'partner_name',
            'location', 'location_name', 'return_date', 'reason', 'processed_at', 'lines',
        ]
        read_only_fields = fields


class ReturnWriteSerializer(DocumentWriteSerializer):
    return_type = serializers.ChoiceField(choices=ReturnType.choices)
    lines = ReturnLineSerializer(many=True, required=False)

    class Meta:
        model = Return
        fields = [
            'return_type', 'customer', 'supplier', 'partner_name',
            'location', 'return_date', 'reason', 'notes', 'lines',
        ]
