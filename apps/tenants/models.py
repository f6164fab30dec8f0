# apps/tenants/models.py
"""
Tenant models for multi-tenant inventory.

Models:
- Tenant: Represents a single customer organization
- TenantSettings: Configuration and preferences for each tenant
- TenantSequence: Sequential document numbers (PO-000001, SHP-000001, ...)
"""
from django.db import models, transaction


class Tenant(models.Model):
    """
    Represents a single tenant (customer organization).

    Each tenant has isolated data - no tenant can see another tenant's data.
    """
    name = models.CharField(max_length=255, help_text="Organization name")
    subdomain = models.CharField(
        max_length=63,
        unique=True,
        help_text="Subdomain used to resolve the tenant (e.g., 'acme' for acme.example.com)"
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive tenants cannot use the API"
    )
    is_default = models.BooleanField(
        default=False,
        help_text="Default tenant for development (only one should be default)"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['subdomain'], name='tenants_subdomain_idx'),
            models.Index(fields=['is_active'], name='tenants_active_idx'),
        ]

    def __str__(self):
        return self.name


class TenantSettings(models.Model):
    """
    Configuration and preferences for each tenant.

    Created automatically when a Tenant is created (via signals).
    """
    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name='settings'
    )

    company_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Full legal company name"
    )

    currency = models.CharField(
        max_length=3,
        default='USD',
        help_text="ISO 4217 code that inventory values are reported in"
    )

    # Reporting
    expiry_warning_days = models.PositiveIntegerField(
        default=30,
        help_text="Lots expiring within this many days appear on the expiring-soon report"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Settings for {self.tenant.name}"


class TenantSequence(models.Model):
    """
    Sequential document numbers per tenant.

    Each tenant has independent sequences to avoid number conflicts.

    Usage:
        number = get_next_sequence_number(tenant, 'PO')  # Returns 'PO-000001'
    """
    SEQUENCE_TYPES = [
        ('PO', 'Purchase Order'),
        ('SHP', 'Shipment'),
        ('TRF', 'Transfer'),
        ('CNT', 'Cycle Count'),
        ('RET', 'Return'),
        ('ADJ', 'Adjustment'),
    ]

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name='sequences'
    )
    sequence_type = models.CharField(
        max_length=20,
        choices=SEQUENCE_TYPES,
        help_text="Type of sequence (PO, SHP, TRF, ...)"
    )
    prefix = models.CharField(
        max_length=10,
        help_text="Prefix for the number (e.g., 'PO-', 'SHP-')"
    )
    next_value = models.PositiveIntegerField(
        default=1,
        help_text="Next number to use"
    )
    padding = models.PositiveIntegerField(
        default=6,
        help_text="Zero-pad to this width (e.g., 6 = '000001')"
    )

    class Meta:
        unique_together = [('tenant', 'sequence_type')]

    def __str__(self):
        return f"{self.tenant.name} - {self.sequence_type}"


def get_next_sequence_number(tenant, sequence_type):
    """
    Get the next sequential number for a tenant and sequence type.

    The sequence row is locked for the rest of the surrounding transaction,
    so two documents created concurrently never share a number. A missing
    row (tenant created before the type existed) is created on demand.

    Example:
        po_number = get_next_sequence_number(tenant, 'PO')
        # po_number = 'PO-000001'
    """
    with transaction.atomic():
        seq, _ = TenantSequence.objects.select_for_update().get_or_create(
            tenant=tenant,
            sequence_type=sequence_type,
            defaults={'prefix': f"{sequence_type}-"},
        )
        number = f"{seq.prefix}{str(seq.next_value).zfill(seq.padding)}"
        seq.next_value += 1
        seq.save(update_fields=['next_value'])
        return number
