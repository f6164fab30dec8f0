# apps/products/services.py
"""
Catalog maintenance rules that need more than a model constraint.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.audit.models import AuditAction
from apps.audit.services import log_audit, snapshot
from apps.inventory.models import InventoryBalance
from apps.orders.models import PurchaseOrderLine

logger = logging.getLogger(__name__)


class ProductService:
    """
    Usage:
        service = ProductService(tenant, user)
        service.delete_product(product)
    """

    def __init__(self, tenant, user=None):
        self.tenant = tenant
        self.user = user

    def delete_product(self, product):
        """
        Delete a product that never held stock and is on no purchase order.

        Products with history must be deactivated instead so that balances,
        movements and documents keep their product.
        """
        if InventoryBalance.objects.for_tenant(self.tenant).filter(product=product).exists():
            raise ValidationError(
                "Cannot delete product with existing inventory. Deactivate it instead."
            )
        if PurchaseOrderLine.objects.filter(
            purchase_order__tenant=self.tenant, product=product
        ).exists():
            raise ValidationError(
                "Cannot delete product used in purchase orders. Deactivate it instead."
            )

        with transaction.atomic():
            log_audit(self.tenant, self.user, AuditAction.DELETE, product, old_values=snapshot(product))
            product.delete()
        logger.info("Deleted product %s for tenant %s", product.sku, self.tenant.pk)

    def set_active(self, product, active):
        with transaction.atomic():
            old = product.active
            product.active = active
            product.save(update_fields=['active', 'updated_at'])
            log_audit(
                self.tenant, self.user, AuditAction.UPDATE, product,
                old_values={'active': old}, new_values={'active': active},
            )
        return product
