# apps/inventory/management/commands/reconcile_stock.py
"""
Check that every balance equals the sum of its stock movements.

Usage:
    python manage.py reconcile_stock
    python manage.py reconcile_stock --tenant acme

Exits with an error when any tenant has mismatches.
"""
from django.core.management.base import BaseCommand, CommandError

from apps.inventory.services import InventoryService
from apps.tenants.models import Tenant


class Command(BaseCommand):
    help = 'Compare inventory balances with the movement ledger'

    def add_arguments(self, parser):
        parser.add_argument('--tenant', help='Subdomain of a single tenant to check')

    def handle(self, *args, **options):
        tenants = Tenant.objects.filter(is_active=True).order_by('name')
        if options['tenant']:
            tenants = tenants.filter(subdomain=options['tenant'])
            if not tenants.exists():
                raise CommandError(f"No active tenant with subdomain '{options['tenant']}'.")

        total = 0
        for tenant in tenants:
            mismatches = InventoryService(tenant).reconcile()
            if not mismatches:
                self.stdout.write(self.style.SUCCESS(f'{tenant.name}: balances match the ledger'))
                continue

            total += len(mismatches)
            self.stdout.write(self.style.ERROR(f'{tenant.name}: {len(mismatches)} mismatch(es)'))
            for row in mismatches:
                self.stdout.write(
                    f"  - product {row['product_id']} @ location {row['location_id']} "
                    f"lot '{row['lot_number']}' exp {row['expiry_date'] or '-'}: "
                    f"balance {row['qty_on_hand']}, movements {row['movement_total']}"
                )

        if total:
            raise CommandError(f'{total} balance(s) disagree with the movement ledger.')
