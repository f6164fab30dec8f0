# apps/orders/services.py
"""
Purchase order service.

PurchaseOrderService handles:
- Create / edit / delete while in draft
- Confirm and cancel
- Receiving goods (partial or full) into the PO's location

Receiving merges each receipt into the location balance at the line cost
(weighted average), refreshes the product's current cost and records a
``receive`` movement. The whole receipt is one transaction.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from shared.exceptions import OverReceiptError
from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from apps.inventory.costing import quantize, to_decimal
from apps.inventory.documents import DocumentService
from apps.inventory.lots import LotKey
from apps.inventory.models import MovementType
from apps.inventory.services import InventoryService
from .models import PurchaseOrder, PurchaseOrderLine

logger = logging.getLogger(__name__)


class PurchaseOrderService(DocumentService):
    """
    Usage:
        service = PurchaseOrderService(tenant, user)
        po = service.create(supplier=s, location=loc, lines=[
            {'product': p, 'quantity_ordered': Decimal('100'), 'unit_cost': Decimal('2.50')},
        ])
        po = service.confirm(po)
        po = service.receive(po, [{'line_id': line.pk, 'quantity': Decimal('60')}])
    """
    model = PurchaseOrder
    line_model = PurchaseOrderLine
    line_parent_field = 'purchase_order'
    header_fields = ('supplier', 'location', 'order_date', 'expected_date', 'notes')

    def clean_header(self, header):
        for field in ('supplier', 'location'):
            if header.get(field) is None:
                raise ValidationError({field: "This field is required."})
            self.check_tenant(field, header[field])
        order_date, expected_date = header.get('order_date'), header.get('expected_date')
        if order_date and expected_date and expected_date < order_date:
            raise ValidationError({'expected_date': "Expected date cannot be before the order date."})
        return header

    def clean_line(self, index, data):
        quantity = to_decimal(data.get('quantity_ordered'))
        unit_cost = to_decimal(data.get('unit_cost'))
        if quantity <= 0:
            raise ValidationError({'lines': f"Line {index + 1}: quantity must be positive."})
        if unit_cost < 0:
            raise ValidationError({'lines': f"Line {index + 1}: cost cannot be negative."})
        return {
            'product': data['product'],
            'quantity_ordered': quantize(quantity),
            'unit_cost': quantize(unit_cost),
            'notes': data.get('notes') or '',
        }

    def confirm(self, purchase_order):
        """Confirm a draft purchase order."""
        with transaction.atomic():
            purchase_order = purchase_order.lock()
            purchase_order.ensure_status(DocumentStatus.DRAFT, action='confirm')
            if not purchase_order.lines.exists():
                raise ValidationError("Cannot confirm a PO without lines.")
            self.transition(purchase_order, DocumentStatus.CONFIRMED, AuditAction.CONFIRM)

        logger.info("Confirmed PO %s for tenant %s", purchase_order.number, self.tenant.pk)
        return purchase_order

    def receive(self, purchase_order, receipts):
        """
        Receive goods against a confirmed or partially received PO.

        Args:
            purchase_order: PurchaseOrder instance
            receipts: [{'line_id': int, 'quantity': Decimal,
                        'lot_number': str|None, 'expiry_date': date|str|None,
                        'unit_cost': Decimal (optional, defaults to the line cost)}, ...]
                      Entries with quantity <= 0 are skipped. The same line
                      may appear more than once (one entry per lot).

        Returns:
            The updated PurchaseOrder (completed when every line is fully
            received, otherwise partial).
        """
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            purchase_order = purchase_order.lock()
            purchase_order.ensure_status(DocumentStatus.CONFIRMED, DocumentStatus.PARTIAL, action='receive')

            lines = {line.pk: line for line in purchase_order.lines.select_related('product')}
            received = []

            for entry in receipts or []:
                quantity = to_decimal(entry.get('quantity'))
                if quantity <= 0:
                    continue

                line = self._get_line(lines, entry.get('line_id'))
                if line.quantity_received + quantity > line.quantity_ordered:
                    logger.warning(
                        "Over-receipt rejected on %s line %s: remaining=%s requested=%s",
                        purchase_order.number, line.pk, line.quantity_remaining, quantity,
                    )
                    raise OverReceiptError(
                        f"Cannot receive {quantity} of {line.product}: "
                        f"only {line.quantity_remaining} remaining on {purchase_order.number}."
                    )

                key = LotKey.normalize(entry.get('lot_number'), entry.get('expiry_date'))
                self._check_tracking(line.product, key)
                unit_cost = entry.get('unit_cost')
                unit_cost = line.unit_cost if unit_cost is None else quantize(unit_cost)

                inventory.receive_stock(
                    line.product, purchase_order.location, quantity, unit_cost,
                    key=key, movement_type=MovementType.RECEIVE, reference=purchase_order,
                )

                line.quantity_received = quantize(line.quantity_received + quantity)
                line.save(update_fields=['quantity_received'])

                line.product.current_cost = unit_cost
                line.product.save(update_fields=['current_cost', 'updated_at'])
                received.append(f"{line.product.sku} x {quantity}")

            if not received:
                raise ValidationError("Enter a quantity to receive for at least one line.")

            if all(line.is_fully_received for line in lines.values()):
                target = DocumentStatus.COMPLETED
            else:
                target = DocumentStatus.PARTIAL
            self.transition(purchase_order, target, AuditAction.RECEIVE, notes='; '.join(received))

        logger.info(
            "Received %d line(s) on PO %s for tenant %s, status %s",
            len(received), purchase_order.number, self.tenant.pk, purchase_order.status,
        )
        return purchase_order

    @staticmethod
    def _get_line(lines, line_id):
        try:
            return lines[int(line_id)]
        except (KeyError, TypeError, ValueError):
            raise ValidationError({'lines': f"Line {line_id} is not on this purchase order."})

    @staticmethod
    def _check_tracking(product, key):
        if product.track_lot and not key.lot_number:
            raise ValidationError({'lines': f"{product} is lot-tracked: a lot number is required."})
        if product.track_expiry and not key.expiry_date:
            raise ValidationError({'lines': f"{product} tracks expiry: an expiry date is required."})
