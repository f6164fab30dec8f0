# apps/tenants/tests.py
"""
Tests for Tenant, TenantSettings, TenantSequence, tenant resolution and the
provision_tenant command.
"""
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, connection
from django.test import TestCase, RequestFactory

from apps.parties.models import Customer
from apps.tenants.middleware import resolve_tenant
from apps.tenants.models import Tenant, TenantSettings, TenantSequence, get_next_sequence_number
from users.models import User, UserRole


class TenantModelTestCase(TestCase):
    """Tests for the Tenant model and multi-tenant isolation."""

    # ── Create a Tenant ──────────────────────────────────────────────────

    def test_create_tenant(self):
        tenant = Tenant.objects.create(name='Acme Industries', subdomain='acme-industries')
        self.assertEqual(tenant.subdomain, 'acme-industries')
        self.assertTrue(tenant.is_active)
        self.assertEqual(str(tenant), 'Acme Industries')

    def test_duplicate_subdomain(self):
        """Duplicate subdomain globally raises IntegrityError."""
        Tenant.objects.create(name='First', subdomain='unique-sub')
        with self.assertRaises(IntegrityError):
            Tenant.objects.create(name='Second', subdomain='unique-sub')

    # ── Signals ──────────────────────────────────────────────────────────

    def test_settings_created_by_signal(self):
        tenant = Tenant.objects.create(name='Settings Co', subdomain='test-settings')
        settings = TenantSettings.objects.get(tenant=tenant)
        self.assertEqual(settings.company_name, 'Settings Co')
        self.assertEqual(settings.expiry_warning_days, 30)

    def test_sequences_created_by_signal(self):
        tenant = Tenant.objects.create(name='Seq Co', subdomain='test-seq')
        types = set(tenant.sequences.values_list('sequence_type', flat=True))
        self.assertEqual(types, {'PO', 'SHP', 'TRF', 'CNT', 'RET', 'ADJ'})

    # ── Sequence numbers ─────────────────────────────────────────────────

    def test_sequence_numbers_are_per_tenant(self):
        tenant_a = Tenant.objects.create(name='Tenant A', subdomain='seq-a')
        tenant_b = Tenant.objects.create(name='Tenant B', subdomain='seq-b')

        self.assertEqual(get_next_sequence_number(tenant_a, 'PO'), 'PO-000001')
        self.assertEqual(get_next_sequence_number(tenant_a, 'PO'), 'PO-000002')
        self.assertEqual(get_next_sequence_number(tenant_b, 'PO'), 'PO-000001')
        self.assertEqual(get_next_sequence_number(tenant_a, 'SHP'), 'SHP-000001')

    def test_missing_sequence_is_created_on_demand(self):
        tenant = Tenant.objects.create(name='Old Co', subdomain='old-co')
        TenantSequence.objects.filter(tenant=tenant, sequence_type='RET').delete()
        self.assertEqual(get_next_sequence_number(tenant, 'RET'), 'RET-000001')

    # ── Isolation ────────────────────────────────────────────────────────

    def test_for_tenant_isolation(self):
        tenant_a = Tenant.objects.create(name='Tenant A', subdomain='test-iso-a')
        tenant_b = Tenant.objects.create(name='Tenant B', subdomain='test-iso-b')
        Customer.objects.create(tenant=tenant_a, name='Isolated Customer')

        self.assertTrue(Customer.objects.for_tenant(tenant_a).filter(name='Isolated Customer').exists())
        self.assertFalse(Customer.objects.for_tenant(tenant_b).filter(name='Isolated Customer').exists())
        self.assertFalse(Customer.objects.for_tenant(None).exists())


class ResolveTenantTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.default = Tenant.objects.create(name='Default', subdomain='default', is_default=True)
        cls.acme = Tenant.objects.create(name='Acme', subdomain='acme')
        cls.other = Tenant.objects.create(name='Other', subdomain='other')
        cls.acme_user = User.objects.create_user(username='acme-user', password='pass', tenant=cls.acme)
        cls.root = User.objects.create_superuser(username='root', password='pass')

    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, user=None, host='testserver', **headers):
        request = self.factory.get('/', HTTP_HOST=host, **headers)
        if user is not None:
            request.user = user
        return request

    def test_user_tenant_wins_over_subdomain(self):
        request = self._request(self.acme_user, host='other.localhost')
        self.assertEqual(resolve_tenant(request), self.acme)

    def test_user_cannot_name_another_tenant(self):
        request = self._request(self.acme_user, HTTP_X_TENANT_ID=str(self.other.pk))
        self.assertEqual(resolve_tenant(request), self.acme)

    def test_superuser_can_name_any_tenant(self):
        request = self._request(self.root, HTTP_X_TENANT_ID=str(self.other.pk))
        self.assertEqual(resolve_tenant(request), self.other)

    def test_subdomain_then_default(self):
        self.assertEqual(resolve_tenant(self._request(host='acme.localhost')), self.acme)
        self.assertEqual(resolve_tenant(self._request(host='www.localhost')), self.default)
        self.assertEqual(resolve_tenant(self._request()), self.default)

    def test_inactive_tenant_is_not_resolved(self):
        self.acme.is_active = False
        self.acme.save()
        request = self._request(self.acme_user)
        self.assertIsNone(resolve_tenant(request))


class ProvisionTenantCommandTestCase(TestCase):

    def test_creates_tenant_and_admin(self):
        out = StringIO()
        call_command(
            'provision_tenant', 'Acme Foods', 'ACME',
            admin_username='alice', admin_password='s3cret', stdout=out,
        )
        tenant = Tenant.objects.get(subdomain='acme')
        admin = User.objects.get(username='alice')
        self.assertEqual(admin.tenant, tenant)
        self.assertEqual(admin.role, UserRole.ADMIN)
        self.assertIn('Created tenant: Acme Foods', out.getvalue())
        self.assertEqual(tenant.sequences.count(), 6)

    def test_default_flag_moves_default(self):
        Tenant.objects.create(name='Old Default', subdomain='old', is_default=True)
        call_command('provision_tenant', 'New Default', 'new', default=True, stdout=StringIO())
        self.assertEqual(list(Tenant.objects.filter(is_default=True).values_list('subdomain', flat=True)), ['new'])

    def test_duplicate_subdomain_rejected(self):
        Tenant.objects.create(name='Taken', subdomain='taken')
        with self.assertRaises(CommandError):
            call_command('provision_tenant', 'Again', 'taken', stdout=StringIO())

    def test_admin_needs_password(self):
        with self.assertRaises(CommandError):
            call_command('provision_tenant', 'No Pass', 'nopass', admin_username='bob', stdout=StringIO())


class MigrationsTestCase(TestCase):
    """The shipped migrations build the same schema the models describe."""

    def test_models_have_no_unmigrated_changes(self):
        out = StringIO()
        try:
            call_command('makemigrations', '--check', '--dry-run', stdout=out)
        except SystemExit:
            self.fail(f"Models are out of sync with migrations:\n{out.getvalue()}")

    def test_migrate_creates_project_tables(self):
        tables = set(connection.introspection.table_names())
        for table in [
            'tenants_tenant', 'users_user', 'products_product', 'parties_supplier',
            'warehousing_location', 'inventory_inventorybalance',
            'inventory_historicalinventorybalance', 'inventory_stockmovement',
            'orders_purchaseorder', 'shipping_shipment', 'returns_return', 'audit_auditlog',
        ]:
            self.assertIn(table, tables)

    def test_balance_key_constraints_exist(self):
        with connection.cursor() as cursor:
            constraints = connection.introspection.get_constraints(cursor, 'inventory_inventorybalance')
        self.assertIn('inventory_balance_unique_dated_key', constraints)
        self.assertIn('inventory_balance_unique_undated_key', constraints)
