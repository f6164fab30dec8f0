# apps/shipping/services.py
"""
Shipping service for outbound shipments.

ShippingService handles:
- Creating and editing draft shipments
- Confirming (checks stock for every line, reserves nothing)
- Shipping (deducts every line at average cost, all or nothing)
- Cancelling before the goods leave
"""
import logging
from collections import defaultdict

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from shared.exceptions import InsufficientStockError
from shared.models import DocumentStatus
from apps.audit.models import AuditAction
from apps.inventory.costing import quantize, to_decimal
from apps.inventory.documents import DocumentService
from apps.inventory.lots import LotKey
from apps.inventory.models import MovementType
from apps.inventory.services import InventoryService
from .models import Shipment, ShipmentLine

logger = logging.getLogger(__name__)


class ShippingService(DocumentService):
    """
    Service for managing shipments.

    Usage:
        service = ShippingService(tenant, user)

        shipment = service.create(customer=c, location=loc, lines=[
            {'product': p, 'quantity': Decimal('10'), 'lot_number': 'L-7'},
        ])
        service.confirm(shipment)   # raises InsufficientStockError if short
        service.ship(shipment)
    """
    model = Shipment
    line_model = ShipmentLine
    line_parent_field = 'shipment'
    header_fields = ('customer', 'location', 'notes')

    def clean_header(self, header):
        for field in ('customer', 'location'):
            if header.get(field) is None:
                raise ValidationError({field: "This field is required."})
            self.check_tenant(field, header[field])
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

    # ===== TRANSITIONS =====

    def confirm(self, shipment):
        """
        Confirm a draft shipment.

        Every line must be available at the shipment's location. Lines for
        the same product and lot are checked against their combined quantity.
        Nothing is reserved; ship() checks again under lock.
        """
        inventory = InventoryService(self.tenant, self.user)

        with transaction.atomic():
            shipment = shipment.lock()
            shipment.ensure_status(DocumentStatus.DRAFT, action='confirm')

            needed = defaultdict(lambda: quantize(0))
            products = {}
            for line in shipment.lines.select_related('product'):
                ident = (line.product_id, LotKey.of(line))
                needed[ident] += line.quantity
                products[line.product_id] = line.product
            if not needed:
                raise ValidationError("Cannot confirm a shipment without lines.")

            for (product_id, key), quantity in needed.items():
                inventory.check_availability(products[product_id], shipment.location, quantity, key)

            self.transition(shipment, DocumentStatus.CONFIRMED, AuditAction.CONFIRM)

        logger.info("Confirmed shipment %s for tenant %s", shipment.number, self.tenant.pk)
        return shipment

    def ship(self, shipment, ship_date=None):
        """
        Ship a confirmed shipment (confirmed -> completed).

        Each line is issued from the shipment's location and keeps the
        average cost it left at. If any line is short the whole shipment
        is rolled back and stays confirmed.

        Args:
            shipment: Shipment instance
            ship_date: Optional date (defaults to today)
        """
        inventory = InventoryService(self.tenant, self.user)

        try:
            with transaction.atomic():
                shipment = shipment.lock()
                shipment.ensure_status(DocumentStatus.CONFIRMED, action='ship')

                for line in shipment.lines.select_related('product'):
                    movement = inventory.issue_stock(
                        line.product, shipment.location, line.quantity,
                        key=LotKey.of(line), movement_type=MovementType.SHIP,
                        reference=shipment,
                    )
                    line.unit_cost = movement.unit_cost
                    line.save(update_fields=['unit_cost'])

                shipment.ship_date = ship_date or timezone.localdate()
                shipment.shipped_at = timezone.now()
                self.transition(shipment, DocumentStatus.COMPLETED, AuditAction.SHIP)
        except InsufficientStockError:
            logger.warning("Shipment %s not shipped: insufficient stock", shipment.number)
            raise

        logger.info("Shipped %s for tenant %s", shipment.number, self.tenant.pk)
        return shipment
