# apps/warehousing/services.py
"""
Warehousing services.

LocationService   - location maintenance rules
TransferService   - move stock between locations (send, then receive)
CycleCountService - snapshot, count and post physical counts
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from apps.audit.services import log_audit, snapshot
from apps.inventory.costing import ZERO, quantize, to_decimal
from apps.inventory.documents import DocumentService
from apps.inventory.lots import LotKey
from apps.inventory.models import InventoryBalance, MovementType
from apps.inventory.services import BalanceLocator, InventoryService
from .models import Transfer, TransferLine, CycleCount, CycleCountLine

logger = logging.getLogger(__name__)


class LocationService:
    """Usage: LocationService(tenant, user).delete_location(location)"""

    def __init__(self, tenant, user=None):
        self.tenant = tenant
        self.user = user

    def delete_location(self, location):
        """Delete a location that has never held stock."""
        if InventoryBalance.objects.for_tenant(self.tenant).filter(location=location).exists():
            raise ValidationError("Cannot delete location with existing inventory.")

        with transaction.atomic():
            log_audit(self.tenant, self.user, AuditAction.DELETE, location, old_values=snapshot(location))
            location.delete()
        logger.info("Deleted location %s for tenant %s", location.name, self.tenant.pk)


class TransferService(DocumentService):
    """
    Stock transfers between two locations.

    Sending deducts from the source at its average cost; receiving merges
    that cost into the destination. Send then receive leaves the total on
    hand across both locations unchanged.

    Usage:
        service = TransferService(tenant, user)
        transfer = service.create(from_location=a, to_location=b, lines=[
            {'product': p, 'quantity': Decimal('10')},
        ])
        transfer = service.send(transfer)
        transfer = service.receive(transfer)
    """
    model = Transfer
    line_model = TransferLine
    line_parent_field = 'transfer'
    header_fields = ('from_location', 'to_location', 'transfer_date', 'notes')

    def clean_header(self, header):
        for field in ('from_location', 'to_location'):
            if header.get(field) is None:
                raise ValidationError({field: "This field is required."})
            self.check_tenant(field, header[field])
        if header['from_location'].pk == header['to_location'].pk:
            raise ValidationError({'to_location': "Source and destination locations must be different."})
        return header

    def clean_line(self, index, data):
        quantity = to_decimal(data.get('quantity'))
        if quantity <= 0:
            raise ValidationError({'lines': f"Line {index + 1}: quantity must be positive."})
        key = LotKey.normalize(data.get('lot_number'), data.get('expiry_date'))
        return {
            'product': data['product'],
            'quantity': quantize(quantity),
            'lot_number': key.stored_lot_number,
            'expiry_date': key.expiry_date,
        }

    def before_save(self, document, lines):
        """Snapshot each line's cost from the source balance."""
        locator = BalanceLocator(self.tenant)
        for data in lines:
            balance = locator.find(data['product'], document.from_location, LotKey.of_dict(data))
            data['unit_cost'] = balance.avg_cost if balance else ZERO

    def send(self, transfer):
        """Deduct every line from the source (draft -> confirmed)."""
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            transfer = transfer.lock()
            transfer.ensure_status(DocumentStatus.DRAFT, action='send')

            for line in transfer.lines.select_related('product'):
                movement = inventory.issue_stock(
                    line.product, transfer.from_location, line.quantity,
                    key=LotKey.of(line), movement_type=MovementType.TRANSFER_OUT,
                    reference=transfer,
                )
                line.unit_cost = movement.unit_cost
                line.save(update_fields=['unit_cost'])

            transfer.sent_at = timezone.now()
            transfer.sent_by = self.acting_user
            self.transition(transfer, DocumentStatus.CONFIRMED, AuditAction.SEND)

        logger.info("Sent transfer %s for tenant %s", transfer.number, self.tenant.pk)
        return transfer

    def receive(self, transfer):
        """Add every line at the destination (confirmed -> completed)."""
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            transfer = transfer.lock()
            transfer.ensure_status(DocumentStatus.CONFIRMED, action='receive')

            for line in transfer.lines.select_related('product'):
                inventory.receive_stock(
                    line.product, transfer.to_location, line.quantity, line.unit_cost,
                    key=LotKey.of(line), movement_type=MovementType.TRANSFER_IN,
                    reference=transfer,
                )

            transfer.received_at = timezone.now()
            transfer.received_by = self.acting_user
            self.transition(transfer, DocumentStatus.COMPLETED, AuditAction.RECEIVE)

        logger.info("Received transfer %s for tenant %s", transfer.number, self.tenant.pk)
        return transfer


class CycleCountService(DocumentService):
    """
    Physical inventory counts.

    Usage:
        service = CycleCountService(tenant, user)
        count = service.create(location=loc)              # every balance at loc
        service.record_counts(count, [{'line_id': 1, 'counted_qty': 9}])
        service.post(count)
    """
    model = CycleCount
    line_model = CycleCountLine
    line_parent_field = 'cycle_count'
    header_fields = ('location', 'count_date', 'notes')

    def clean_header(self, header):
        if header.get('location') is None:
            raise ValidationError({'location': "Location is required."})
        self.check_tenant('location', header['location'])
        return header

    def clean_line(self, index, data):
        counted = data.get('counted_qty')
        if counted is not None and to_decimal(counted) < 0:
            raise ValidationError({'lines': f"Line {index + 1}: counted quantity cannot be negative."})
        key = LotKey.normalize(data.get('lot_number'), data.get('expiry_date'))
        return {
            'product': data['product'],
            'lot_number': key.stored_lot_number,
            'expiry_date': key.expiry_date,
            'counted_qty': quantize(counted) if counted is not None else None,
        }

    def clean_lines(self, lines):
        cleaned = super().clean_lines(lines)
        seen = set()
        for data in cleaned:
            ident = (data['product'].pk, data['lot_number'], data['expiry_date'])
            if ident in seen:
                raise ValidationError({'lines': f"{data['product']} ({LotKey.of_dict(data)}) is listed twice."})
            seen.add(ident)
        return cleaned

    def create(self, lines=None, **header):
        """
        Create a count. Without ``lines`` every balance holding stock at the
        location is included.
        """
        if not lines and header.get('location') is not None:
            self.check_tenant('location', header['location'])
            lines = [
                {'product': balance.product, 'lot_number': balance.lot_number, 'expiry_date': balance.expiry_date}
                for balance in InventoryBalance.objects.for_tenant(self.tenant).filter(
                    location=header['location'], qty_on_hand__gt=0,
                ).select_related('product').order_by('product__sku', 'lot_number', 'expiry_date')
            ]
            if not lines:
                raise ValidationError({'lines': "The location holds no stock to count. Add lines explicitly."})
        return super().create(lines, **header)

    def before_save(self, document, lines):
        """Snapshot the system quantity of every line."""
        locator = BalanceLocator(self.tenant)
        for data in lines:
            data['system_qty'] = locator.on_hand(data['product'], document.location, LotKey.of_dict(data))

    def record_counts(self, cycle_count, counts):
        """
        Enter counted quantities.

        Args:
            counts: [{'line_id': int, 'counted_qty': Decimal}, ...]
        """
        with transaction.atomic():
            cycle_count = cycle_count.lock()
            cycle_count.ensure_status(DocumentStatus.DRAFT, action='record counts for')

            recorded = {}
            for entry in counts:
                try:
                    line = cycle_count.lines.get(pk=entry['line_id'])
                except (CycleCountLine.DoesNotExist, KeyError, ValueError, TypeError):
                    raise ValidationError({'lines': f"Line {entry.get('line_id')} is not on this count."})
                counted = entry.get('counted_qty')
                if counted is None or to_decimal(counted) < 0:
                    raise ValidationError({'lines': f"Line {line.pk}: counted quantity must be zero or more."})
                line.counted_qty = quantize(counted)
                line.save(update_fields=['counted_qty'])
                recorded[str(line.pk)] = line.counted_qty

            log_audit(
                self.tenant, self.user, AuditAction.RECORD_COUNT, cycle_count,
                new_values={'counted': recorded},
            )
        return cycle_count

    def post(self, cycle_count):
        """
        Apply variances (draft -> completed).

        Every line must be counted. A line whose count matches its system
        quantity leaves stock untouched; any other line sets the balance to
        the counted quantity and records a count_variance movement.
        """
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            cycle_count = cycle_count.lock()
            cycle_count.ensure_status(DocumentStatus.DRAFT, action='post')

            uncounted = cycle_count.lines.filter(counted_qty__isnull=True).count()
            if uncounted:
                raise ValidationError(f"{uncounted} lines have not been counted yet.")

            for line in cycle_count.lines.select_related('product'):
                if line.variance == 0:
                    continue
                inventory.set_counted_quantity(
                    line.product, cycle_count.location, line.counted_qty,
                    key=LotKey.of(line), reference=cycle_count,
                    notes=f"Counted {line.counted_qty}, system {line.system_qty}",
                )

            cycle_count.posted_at = timezone.now()
            cycle_count.posted_by = self.acting_user
            self.transition(cycle_count, DocumentStatus.COMPLETED, AuditAction.POST)

        logger.info("Posted cycle count %s for tenant %s", cycle_count.number, self.tenant.pk)
        return cycle_count
