# apps/returns/services.py
"""
Return service.

Customer returns put stock back at the return location (weighted average,
``return_in``). Supplier returns take stock out (availability checked,
``return_out``). Processing is all or nothing.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from apps.inventory.costing import quantize, to_decimal
from apps.inventory.documents import DocumentService
from apps.inventory.lots import LotKey
from apps.inventory.models import MovementType
from apps.inventory.services import InventoryService
from .models import Return, ReturnLine, ReturnType

logger = logging.getLogger(__name__)


class ReturnService(DocumentService):
    """
    Usage:
        service = ReturnService(tenant, user)
        ret = service.create(return_type='customer', customer=c, location=loc, lines=[
            {'product': p, 'quantity': Decimal('2'), 'lot_number': 'L-7'},
        ])
        service.process(ret)
    """
    model = Return
    line_model = ReturnLine
    line_parent_field = 'return_document'
    header_fields = (
        'return_type', 'customer', 'supplier', 'partner_name',
        'location', 'return_date', 'reason', 'notes',
    )

    def clean_header(self, header):
        return_type = header.get('return_type')
        if return_type not in ReturnType.values:
            raise ValidationError({'return_type': f"Invalid return type '{return_type}'."})
        if header.get('location') is None:
            raise ValidationError({'location': "Location is required."})
        for field in ('location', 'customer', 'supplier'):
            self.check_tenant(field, header.get(field))

        # Only the partner matching the return type is kept.
        if return_type == ReturnType.CUSTOMER:
            header['supplier'] = None
        else:
            header['customer'] = None
        partner = header.get('customer') or header.get('supplier')
        if partner is not None and not header.get('partner_name'):
            header['partner_name'] = partner.name
        return header

    def clean_line(self, index, data):
        quantity = to_decimal(data.get('quantity'))
        if quantity <= 0:
            raise ValidationError({'lines': f"Line {index + 1}: quantity must be positive."})
        unit_cost = data.get('unit_cost')
        if unit_cost is not None and to_decimal(unit_cost) < 0:
            raise ValidationError({'lines': f"Line {index + 1}: unit cost cannot be negative."})
        key = LotKey.normalize(data.get('lot_number'), data.get('expiry_date'))
        return {
            'product': data['product'],
            'quantity': quantize(quantity),
            'unit_cost': quantize(unit_cost) if unit_cost is not None else None,
            'lot_number': key.stored_lot_number,
            'expiry_date': key.expiry_date,
        }

    def process(self, return_document):
        """
        Apply the return to stock (draft -> completed).

        Customer returns are costed at the line cost, else the balance's
        average, else the product's current cost. Supplier returns leave at
        the balance's average cost.
        """
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            return_document = return_document.lock()
            return_document.ensure_status(DocumentStatus.DRAFT, action='process')

            returned = []
            for line in return_document.lines.select_related('product'):
                key = LotKey.of(line)
                if return_document.is_inbound:
                    unit_cost = line.unit_cost
                    if unit_cost is None:
                        balance = inventory.locator.find(line.product, return_document.location, key)
                        unit_cost = balance.avg_cost if balance else line.product.current_cost
                    movement = inventory.receive_stock(
                        line.product, return_document.location, line.quantity, unit_cost,
                        key=key, movement_type=MovementType.RETURN_IN,
                        reference=return_document, notes=return_document.reason,
                    )
                else:
                    movement = inventory.issue_stock(
                        line.product, return_document.location, line.quantity,
                        key=key, movement_type=MovementType.RETURN_OUT,
                        reference=return_document, notes=return_document.reason,
                    )
                line.unit_cost = movement.unit_cost
                line.save(update_fields=['unit_cost'])
                returned.append(f"{line.product.sku} x {line.quantity}")

            return_document.processed_at = timezone.now()
            if return_document.return_date is None:
                return_document.return_date = timezone.localdate()
            self.transition(
                return_document, DocumentStatus.COMPLETED, AuditAction.PROCESS,
                notes=f"Processed {return_document.return_type} return: {'; '.join(returned)}",
            )

        logger.info("Processed return %s for tenant %s", return_document.number, self.tenant.pk)
        return return_document
