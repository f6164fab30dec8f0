# apps/audit/models.py
"""
Audit trail of user actions.

One row per create/update/delete of master data and per document
transition. Rows are written inside the same transaction as the change
they describe.
"""
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from shared.models import TenantMixin


class AuditAction(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'
    CONFIRM = 'confirm', 'Confirm'
    RECEIVE = 'receive', 'Receive'
    SHIP = 'ship', 'Ship'
    SEND = 'send', 'Send'
    RECORD_COUNT = 'record_count', 'Record Count'
    POST = 'post', 'Post'
    PROCESS = 'process', 'Process'
    CANCEL = 'cancel', 'Cancel'


class AuditLog(TenantMixin):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    action = models.CharField(max_length=20, choices=AuditAction.choices)
    resource_type = models.CharField(max_length=50)
    resource_id = models.CharField(max_length=50, blank=True)
    resource_name = models.CharField(max_length=255, blank=True)
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['tenant', 'resource_type', 'resource_id'], name='audit_resource_idx'),
            models.Index(fields=['tenant', 'created_at'], name='audit_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.resource_type} {self.resource_name or self.resource_id}"
