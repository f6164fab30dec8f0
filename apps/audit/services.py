# apps/audit/services.py
"""
Audit emission.

Usage:
    log_audit(tenant, user, AuditAction.CONFIRM, po,
              old_values={'status': 'draft'}, new_values={'status': 'confirmed'})
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.forms.models import model_to_dict

from .models import AuditLog

logger = logging.getLogger(__name__)


def snapshot(instance, exclude=('tenant',)):
    """JSON-safe dict of a model instance's concrete fields."""
    data = model_to_dict(instance, exclude=exclude)
    data['id'] = instance.pk
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def log_audit(tenant, user, action, instance, old_values=None, new_values=None, notes=''):
    """
    Record one audit entry for ``instance``.

    ``user`` may be None for system actions (management commands).
    """
    entry = AuditLog.objects.create(
        tenant=tenant,
        user=user if user is not None and user.is_authenticated else None,
        action=action,
        resource_type=instance._meta.model_name,
        resource_id=str(instance.pk or ''),
        resource_name=str(instance)[:255],
        old_values=old_values,
        new_values=new_values,
        notes=notes,
    )
    logger.debug(
        "Audit %s %s %s tenant=%s", action, entry.resource_type, entry.resource_id, tenant.pk
    )
    return entry
