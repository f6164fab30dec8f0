# apps/api/v1/serializers/parties.py
"""
Serializers for trading partners: Supplier and Customer.
"""
from apps.parties.models import Supplier, Customer
from .base import TenantModelSerializer

PARTY_FIELDS = [
    'id', 'code', 'name', 'contact_name', 'email', 'phone', 'address',
    'notes', 'active', 'created_at', 'updated_at',
]


class SupplierSerializer(TenantModelSerializer):
    class Meta:
        model = Supplier
        fields = PARTY_FIELDS + ['payment_terms', 'lead_time_days']
        read_only_fields = ['created_at', 'updated_at']


class CustomerSerializer(TenantModelSerializer):
    class Meta:
        model = Customer
        fields = PARTY_FIELDS
        read_only_fields = ['created_at', 'updated_at']
