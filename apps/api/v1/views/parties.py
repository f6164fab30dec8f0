# apps/api/v1/views/parties.py
"""
ViewSets for Supplier and Customer.
"""
from rest_framework import filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.parties.models import Supplier, Customer
from apps.api.v1.serializers.parties import SupplierSerializer, CustomerSerializer
from .base import TenantModelViewSet


class PartyViewSetMixin:
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['active']
    search_fields = ['code', 'name', 'contact_name', 'email']
    ordering_fields = ['name', 'code', 'created_at']
    ordering = ['name']


@extend_schema_view(
    list=extend_schema(tags=['parties'], summary='List suppliers'),
    retrieve=extend_schema(tags=['parties'], summary='Get supplier details'),
    create=extend_schema(tags=['parties'], summary='Create a supplier'),
    update=extend_schema(tags=['parties'], summary='Update a supplier'),
    partial_update=extend_schema(tags=['parties'], summary='Partially update a supplier'),
    destroy=extend_schema(tags=['parties'], summary='Delete a supplier'),
)
class SupplierViewSet(PartyViewSetMixin, TenantModelViewSet):
    model = Supplier
    serializer_class = SupplierSerializer


@extend_schema_view(
    list=extend_schema(tags=['parties'], summary='List customers'),
    retrieve=extend_schema(tags=['parties'], summary='Get customer details'),
    create=extend_schema(tags=['parties'], summary='Create a customer'),
    update=extend_schema(tags=['parties'], summary='Update a customer'),
    partial_update=extend_schema(tags=['parties'], summary='Partially update a customer'),
    destroy=extend_schema(tags=['parties'], summary='Delete a customer'),
)
class CustomerViewSet(PartyViewSetMixin, TenantModelViewSet):
    model = Customer
    serializer_class = CustomerSerializer
