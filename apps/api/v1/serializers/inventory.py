# apps/api/v1/serializers/inventory.py
"""
Serializers for balances, the movement ledger and adjustments.
"""
from rest_framework import serializers

from apps.inventory.models import InventoryBalance, StockMovement, Adjustment, AdjustmentLine, AdjustmentReason
from .base import (
    TenantModelSerializer, DocumentSerializer, DocumentWriteSerializer, LotFieldsMixin,
)

MONEY = dict(max_digits=24, decimal_places=4, read_only=True)


class InventoryBalanceSerializer(TenantModelSerializer):
    """Read-only balance row with product and location labels."""
    sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    inventory_value = serializers.DecimalField(**MONEY)

    class Meta:
        model = InventoryBalance
        fields = [
            'id', 'product', 'sku', 'product_name', 'location', 'location_name',
            'lot_number', 'expiry_date', 'qty_on_hand', 'avg_cost', 'inventory_value',
            'updated_at',
        ]
        read_only_fields = fields


class BalanceHistorySerializer(serializers.Serializer):
    """One entry of a balance's change history (django-simple-history)."""
    history_id = serializers.IntegerField()
    history_date = serializers.DateTimeField()
    history_type = serializers.CharField()
    history_user = serializers.CharField(source='history_user.username', default=None)
    qty_on_hand = serializers.DecimalField(max_digits=12, decimal_places=4)
    avg_cost = serializers.DecimalField(max_digits=12, decimal_places=4)


class StockMovementSerializer(TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    extended_cost = serializers.DecimalField(**MONEY)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default='')

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'sku', 'location', 'location_name', 'quantity',
            'movement_type', 'reference_type', 'reference_id', 'reference_number',
            'lot_number', 'expiry_date', 'unit_cost', 'extended_cost',
            'reason', 'notes', 'balance_after', 'created_by', 'created_by_name', 'created_at',
        ]
        read_only_fields = fields


# ==================== Adjustments ====================

class AdjustmentLineSerializer(LotFieldsMixin, TenantModelSerializer):
    sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = AdjustmentLine
        fields = ['id', 'product', 'sku', 'quantity', 'lot_number', 'expiry_date', 'unit_cost']
        read_only_fields = ['id']
        extra_kwargs = {'unit_cost': {'required': False}}

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("Quantity cannot be zero.")
        return value


class AdjustmentSerializer(DocumentSerializer):
    location_name = serializers.CharField(source='location.name', read_only=True)
    lines = AdjustmentLineSerializer(many=True, read_only=True)

    class Meta:
        model = Adjustment
        fields = DocumentSerializer.DOCUMENT_FIELDS + [
            'location', 'location_name', 'reason', 'posted_at', 'posted_by', 'lines',
        ]
        read_only_fields = fields


class AdjustmentWriteSerializer(DocumentWriteSerializer):
    reason = serializers.ChoiceField(choices=AdjustmentReason.choices)
    lines = AdjustmentLineSerializer(many=True, required=False)

    class Meta:
        model = Adjustment
        fields = ['location', 'reason', 'notes', 'lines']
