# apps/api/v1/serializers/audit.py
from rest_framework import serializers

from apps.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True, default='')

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user', 'user_name', 'action', 'resource_type', 'resource_id',
            'resource_name', 'old_values', 'new_values', 'notes', 'created_at',
        ]
        read_only_fields = fields
