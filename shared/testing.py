# shared/testing.py
"""
Shared fixtures for service and API tests.

StockTestCase creates one tenant with a user, two locations, a supplier, a
customer and two products. Subclasses add what they need in their own
setUpTestData (call super() first).
"""
from decimal import Decimal

from django.test import TestCase

from apps.tenants.models import Tenant
from apps.parties.models import Supplier, Customer
from apps.products.models import Product
from apps.warehousing.models import Location
from users.models import User, UserRole


class StockTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(name='Stock Test Co', subdomain='stock-test')
        cls.user = User.objects.create_user(
            username='stocker', password='pass', tenant=cls.tenant, role=UserRole.MANAGER,
        )
        cls.main = Location.objects.create(tenant=cls.tenant, name='Main Warehouse')
        cls.store = Location.objects.create(tenant=cls.tenant, name='Corner Store', location_type='store')
        cls.supplier = Supplier.objects.create(tenant=cls.tenant, name='Acme Supply')
        cls.customer = Customer.objects.create(tenant=cls.tenant, name='Corner Deli')
        cls.widget = Product.objects.create(
            tenant=cls.tenant, sku='WID-1', name='Widget', current_cost=Decimal('2.0000'),
        )
        cls.milk = Product.objects.create(
            tenant=cls.tenant, sku='MILK-1L', name='Milk 1L', base_uom='L',
            track_lot=True, track_expiry=True, current_cost=Decimal('0.8000'),
        )
