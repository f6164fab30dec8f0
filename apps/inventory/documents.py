# apps/inventory/documents.py
"""
Shared lifecycle for stock documents (PO, shipment, transfer, cycle count,
return, adjustment).

DocumentService handles what every document type does the same way:
numbering, header + line validation, draft-only edits, cancel, delete,
audit entries and logging. Subclasses add the stock-moving transitions.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from shared.exceptions import InvalidTransitionError
from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from apps.audit.services import log_audit, snapshot
from apps.tenants.models import get_next_sequence_number

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Base class for document services.

    Subclasses set:
        model: the DocumentMixin model
        line_model: its line model
        line_parent_field: name of the line's FK to the header
        header_fields: fields accepted by create()/update()

    and implement clean_header() and clean_line().

    Usage:
        service = SomeDocumentService(tenant, user)
        doc = service.create(lines=[...], **header)
        doc = service.update(doc, lines=[...], notes='...')
        doc = service.cancel(doc)
        service.delete(doc)
    """
    model = None
    line_model = None
    line_parent_field = None
    header_fields = ()

    def __init__(self, tenant, user=None):
        """
        Args:
            tenant: Tenant instance to scope operations
            user: User performing operations (for audit trail)
        """
        self.tenant = tenant
        self.user = user

    @property
    def acting_user(self):
        if self.user is not None and self.user.is_authenticated:
            return self.user
        return None

    # ===== VALIDATION HOOKS =====

    def clean_header(self, header):
        return header

    def clean_line(self, index, data):
        raise NotImplementedError

    def check_tenant(self, field, obj):
        """Reject references to another tenant's rows."""
        if obj is not None and getattr(obj, 'tenant_id', self.tenant.pk) != self.tenant.pk:
            raise ValidationError({field: f"This {field} does not belong to your organization."})

    def clean_lines(self, lines):
        if not lines:
            raise ValidationError({'lines': "At least one line is required."})
        cleaned = []
        for index, data in enumerate(lines):
            product = data.get('product')
            if product is None:
                raise ValidationError({'lines': f"Line {index + 1}: product is required."})
            self.check_tenant('product', product)
            cleaned.append(self.clean_line(index, data))
        return cleaned

    # ===== LIFECYCLE =====

    def create(self, lines, **header):
        """Create a draft document with its lines."""
        header = self.clean_header({k: v for k, v in header.items() if k in self.header_fields})
        lines = self.clean_lines(lines)

        with transaction.atomic():
            document = self.model(
                tenant=self.tenant,
                number=get_next_sequence_number(self.tenant, self.model.SEQUENCE_TYPE),
                created_by=self.acting_user,
                **header
            )
            self.before_save(document, lines)
            document.save()
            self.save_lines(document, lines)
            log_audit(self.tenant, self.user, AuditAction.CREATE, document, new_values=snapshot(document))

        logger.info("Created %s %s for tenant %s", self.model.LABEL, document.number, self.tenant.pk)
        return document

    def update(self, document, lines=None, **header):
        """Edit a draft document. ``lines``, when given, replace all lines."""
        with transaction.atomic():
            document = document.lock()
            document.ensure_editable(action='edit')
            old_values = snapshot(document)

            changes = {k: v for k, v in header.items() if k in self.header_fields}
            merged = {f: getattr(document, f) for f in self.header_fields}
            merged.update(changes)
            merged = self.clean_header(merged)
            for field, value in merged.items():
                setattr(document, field, value)

            if lines is not None:
                lines = self.clean_lines(lines)
                self.before_save(document, lines)
                document.save()
                document.lines.all().delete()
                self.save_lines(document, lines)
            else:
                document.save()

            log_audit(
                self.tenant, self.user, AuditAction.UPDATE, document,
                old_values=old_values, new_values=snapshot(document),
            )
        return document

    def cancel(self, document):
        with transaction.atomic():
            document = document.lock()
            if not document.can_transition(DocumentStatus.CANCELLED):
                raise InvalidTransitionError(
                    f"Cannot cancel {document.LABEL} {document.number} with status '{document.status}'."
                )
            self.transition(document, DocumentStatus.CANCELLED, AuditAction.CANCEL)

        logger.info("Cancelled %s %s for tenant %s", document.LABEL, document.number, self.tenant.pk)
        return document

    def delete(self, document):
        with transaction.atomic():
            document = document.lock()
            document.ensure_editable(action='delete')
            log_audit(self.tenant, self.user, AuditAction.DELETE, document, old_values=snapshot(document))
            document.delete()

        logger.info("Deleted %s %s for tenant %s", document.LABEL, document.number, self.tenant.pk)

    # ===== HELPERS =====

    def before_save(self, document, lines):
        """Hook for header checks that need the lines (e.g. snapshots)."""

    def save_lines(self, document, lines):
        self.line_model.objects.bulk_create([
            self.line_model(**{self.line_parent_field: document}, **data)
            for data in lines
        ])

    def transition(self, document, target, action, notes=''):
        """Move to ``target``, save and audit. Call inside the transition's atomic block."""
        old_status = document.status
        document.transition_to(target)
        document.save()
        log_audit(
            self.tenant, self.user, action, document,
            old_values={'status': old_status},
            new_values={'status': document.status},
            notes=notes,
        )
