# apps/api/v1/serializers/reports.py
"""
Query parameter validation for the report endpoints.

Reports take their filters from the query string, so ids and dates arrive
as text and are checked here before they reach the ORM.
"""
from rest_framework import serializers

from apps.inventory.models import MovementType


class BalanceReportParamsSerializer(serializers.Serializer):
    location = serializers.IntegerField(required=False, min_value=1)
    product = serializers.IntegerField(required=False, min_value=1)
    category = serializers.IntegerField(required=False, min_value=1)

    def to_filters(self):
        data = self.validated_data
        return {
            'location_id': data.get('location'),
            'product_id': data.get('product'),
            'category_id': data.get('category'),
        }


class ExpiringReportParamsSerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=0)


class MovementReportParamsSerializer(serializers.Serializer):
    product = serializers.IntegerField(required=False, min_value=1)
    location = serializers.IntegerField(required=False, min_value=1)
    type = serializers.ChoiceField(choices=MovementType.choices, required=False)
    start = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    end = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])

    def validate(self, attrs):
        start, end = attrs.get('start'), attrs.get('end')
        if start and end and start > end:
            raise serializers.ValidationError({'end': 'end must not be before start.'})
        return attrs

    def to_filters(self):
        data = self.validated_data
        return {
            'product_id': data.get('product'),
            'location_id': data.get('location'),
            'movement_type': data.get('type'),
            'start_date': data.get('start'),
            'end_date': data.get('end'),
        }
