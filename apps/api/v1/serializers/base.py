# apps/api/v1/serializers/base.py
"""
Base serializers with automatic tenant handling.

All tenant-scoped serializers should inherit from TenantModelSerializer
to ensure proper tenant assignment on create and tenant-scoped choices for
every foreign key.
"""
from rest_framework import serializers


class TenantPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """
    PrimaryKeyRelatedField limited to the request tenant's rows.

    A pk from another tenant is reported as "does not exist", the same as a
    pk that was never created.
    """

    def get_queryset(self):
        queryset = super().get_queryset()
        if queryset is None or not hasattr(queryset.model, 'tenant'):
            return queryset
        request = self.context.get('request')
        tenant = getattr(request, 'tenant', None)
        if tenant is None:
            return queryset.none()
        return queryset.filter(tenant=tenant)


class TenantSerializerMixin:
    """
    Mixin that automatically handles tenant field on create.

    - Excludes 'tenant' from required input (auto-set from request)
    - Auto-assigns tenant on create
    """

    def get_fields(self):
        fields = super().get_fields()
        # Make tenant read-only (set automatically)
        if 'tenant' in fields:
            fields['tenant'].read_only = True
        return fields

    def create(self, validated_data):
        """Auto-assign tenant from request context."""
        request = self.context.get('request')
        if request and getattr(request, 'tenant', None) is not None:
            validated_data['tenant'] = request.tenant
        return super().create(validated_data)


class TenantModelSerializer(TenantSerializerMixin, serializers.ModelSerializer):
    """
    Base ModelSerializer with automatic tenant handling.

    Usage:
        class CustomerSerializer(TenantModelSerializer):
            class Meta:
                model = Customer
                fields = '__all__'
    """
    serializer_related_field = TenantPrimaryKeyRelatedField


class DocumentSerializer(TenantModelSerializer):
    """Read-only document header fields shared by every stock document."""
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default='')
    is_editable = serializers.BooleanField(read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)

    DOCUMENT_FIELDS = [
        'id', 'number', 'status', 'notes', 'is_editable', 'is_terminal',
        'created_by', 'created_by_name', 'created_at', 'updated_at',
    ]


class DocumentWriteSerializer(TenantModelSerializer):
    """
    Validates document input only. Saving goes through the document
    service, so create()/update() are never called on this serializer.
    """

    def create(self, validated_data):
        raise NotImplementedError('Documents are created by their service.')

    def update(self, instance, validated_data):
        raise NotImplementedError('Documents are updated by their service.')


class LotFieldsMixin(serializers.Serializer):
    """Optional lot number and expiry date on a document line."""
    lot_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)
