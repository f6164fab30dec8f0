# apps/tenants/signals.py
"""
Signals for automatic tenant setup.

When a Tenant is created:
1. Create TenantSettings (one-to-one)
2. Create TenantSequence records for every document type
"""
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Tenant, TenantSettings, TenantSequence

SEQUENCE_CONFIGS = [
    ('PO', 'PO-'),    # Purchase Orders: PO-000001
    ('SHP', 'SHP-'),  # Shipments: SHP-000001
    ('TRF', 'TRF-'),  # Transfers: TRF-000001
    ('CNT', 'CNT-'),  # Cycle Counts: CNT-000001
    ('RET', 'RET-'),  # Returns: RET-000001
    ('ADJ', 'ADJ-'),  # Adjustments: ADJ-000001
]


@receiver(post_save, sender=Tenant)
def create_tenant_settings(sender, instance, created, **kwargs):
    """Automatically create TenantSettings when a Tenant is created."""
    if created:
        TenantSettings.objects.create(
            tenant=instance,
            company_name=instance.name
        )


@receiver(post_save, sender=Tenant)
def create_tenant_sequences(sender, instance, created, **kwargs):
    """Create one sequence per document type for a new tenant."""
    if created:
        TenantSequence.objects.bulk_create([
            TenantSequence(tenant=instance, sequence_type=seq_type, prefix=prefix)
            for seq_type, prefix in SEQUENCE_CONFIGS
        ])
