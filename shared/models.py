# shared/models.py
"""
Abstract base models for the entire application.

TenantMixin: Tenant foreign key plus the explicit tenant manager
TimestampMixin: Adds created_at and updated_at timestamps
DocumentMixin: Number, status lifecycle and audit fields shared by
               purchase orders, shipments, transfers, cycle counts,
               returns and adjustments
"""
from django.conf import settings
from django.db import models

from .exceptions import InvalidTransitionError
from .managers import TenantManager


class TenantMixin(models.Model):
    """
    Abstract base model for tenant-scoped models.

    Queries are NOT filtered implicitly. Use
    ``Model.objects.for_tenant(tenant)`` or filter on ``tenant=`` yourself.

    Example:
        class Supplier(TenantMixin, TimestampMixin):
            name = models.CharField(max_length=255)

        Supplier.objects.for_tenant(tenant).filter(active=True)
    """
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='%(class)s_set'
    )

    objects = TenantManager()

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    """
    Abstract base model that adds timestamp tracking.

    Provides:
    - created_at: Set once when record is created
    - updated_at: Updated every time record is saved
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class DocumentStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    CONFIRMED = 'confirmed', 'Confirmed'
    PARTIAL = 'partial', 'Partially Received'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


TERMINAL_STATUSES = (DocumentStatus.COMPLETED, DocumentStatus.CANCELLED)


class DocumentMixin(TenantMixin, TimestampMixin):
    """
    Header fields and status lifecycle for stock documents.

    Subclasses declare:
        SEQUENCE_TYPE: TenantSequence type used for ``number``
        LABEL: short name used in error messages ('PO', 'Shipment', ...)
        TRANSITIONS: {from_status: {allowed target statuses}}

    Documents are created in draft. Header and lines may only change while
    in draft; completed and cancelled are terminal.
    """
    SEQUENCE_TYPE = None
    LABEL = 'Document'
    TRANSITIONS = {}

    number = models.CharField(max_length=30, help_text="Tenant-unique document number")
    status = models.CharField(
        max_length=20,
        choices=DocumentStatus.choices,
        default=DocumentStatus.DRAFT,
    )
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        abstract = True
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'number'],
                name='%(app_label)s_%(class)s_unique_number',
            ),
        ]

    def __str__(self):
        return self.number

    @property
    def is_editable(self):
        return self.status == DocumentStatus.DRAFT

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def can_transition(self, target):
        return target in self.TRANSITIONS.get(self.status, ())

    def ensure_status(self, *allowed, action):
        """Raise InvalidTransitionError unless status is one of ``allowed``."""
        if self.status in allowed:
            return
        expected = ' or '.join(f"'{s}'" for s in allowed)
        raise InvalidTransitionError(
            f"Cannot {action} {self.LABEL} {self.number} with status '{self.status}'. "
            f"Must be {expected}."
        )

    def ensure_editable(self, action='modify'):
        self.ensure_status(DocumentStatus.DRAFT, action=action)

    def transition_to(self, target):
        """Move to ``target`` if the transition table allows it. Does not save."""
        if not self.can_transition(target):
            raise InvalidTransitionError(
                f"{self.LABEL} {self.number} cannot move from '{self.status}' to '{target}'."
            )
        self.status = target

    def lock(self):
        """Re-read this document with a row lock. Call inside transaction.atomic()."""
        return type(self).objects.select_for_update().get(pk=self.pk, tenant_id=self.tenant_id)
