# apps/api/v1/serializers/warehousing.py
"""
Serializers for locations, transfers and cycle counts.
"""
from decimal import Decimal

from rest_framework import serializers

from apps.warehousing.models import Location, Transfer, TransferLine, CycleCount, CycleCountLine
from .base import (
    TenantModelSerializer, DocumentSerializer, DocumentWriteSerializer, LotFieldsMixin,
)


class LocationSerializer(TenantModelSerializer):
    parent_name = serializers.CharField(source='parent.name', read_only=True, default=None)

    class Meta:
        model = Location
        fields = [
            'id', 'name', 'location_type', 'parent', 'parent_name',
            'address', 'active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_parent(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A location cannot be its own parent.")
        return value


# ==================== Transfers ====================

class TransferLineSerializer(LotFieldsMixin, TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = TransferLine
        fields = ['id', 'product', 'sku', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
        read_only_fields = ['id', 'unit_cost']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be positive.")
        return value


class TransferSerializer(DocumentSerializer):
    from_location_name = serializers.CharField(source='from_location.name', read_only=True)
    to_location_name = serializers.CharField(source='to_location.name', read_only=True)
    in_transit = serializers.BooleanField(read_only=True)
    lines = TransferLineSerializer(many=True, read_only=True)

    class Meta:
        model = Transfer
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'from_location', 'from_location_name', 'to_location', 'to_location_name',
            'transfer_date', 'in_transit', 'sent_at', 'sent_by', 'received_at', 'received_by',
            'lines',
        ]
        read_only_fields = fields


class TransferWriteSerializer(DocumentWriteSerializer):
    lines = TransferLineSerializer(many=True, required=False)

    class Meta:
        model = Transfer
        fields = ['from_location', 'to_location', 'transfer_date', 'notes', 'lines']

    def validate(self, attrs):
        from_location = attrs.get('from_location', getattr(self.instance, 'from_location', None))
        to_location = attrs.get('to_location', getattr(self.instance, 'to_location', None))
        if from_location is not None and from_location == to_location:
            raise serializers.ValidationError({
                'to_location': "Source and destination locations must be different."
            })
        return super().validate(attrs)


# ==================== Cycle counts ====================

class CycleCountLineSerializer(LotFieldsMixin, TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)
    variance = serializers.DecimalField(max_digits=12, decimal_places=4, read_only=True)

    class Meta:
        model = CycleCountLine
        fields = [
            'id', 'product', 'sku', 'lot_number', 'expiry_date',
            'system_qty', 'counted_qty', 'variance',
        ]
        read_only_fields = ['id', 'system_qty']


class CycleCountSerializer(DocumentSerializer):
    location_name = serializers.CharField(source='location.name', read_only=True)
    lines = CycleCountLineSerializer(many=True, read_only=True)

    class Meta:
        model = CycleCount
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'location', 'location_name', 'count_date', 'posted_at', 'posted_by', 'lines',
        ]
        read_only_fields = fields


class CycleCountWriteSerializer(DocumentWriteSerializer):
    """Lines are optional: without them every stocked balance at the location is counted."""
    lines = CycleCountLineSerializer(many=True, required=False)

    class Meta:
        model = CycleCount
        fields = ['location', 'count_date', 'notes', 'lines']


class CountEntrySerializer(serializers.Serializer):
    line_id = serializers.IntegerField()
    counted_qty = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal('0'))


class RecordCountsSerializer(serializers.Serializer):
    counts = CountEntrySerializer(many=True, allow_empty=False)
