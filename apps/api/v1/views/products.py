# apps/api/v1/views/products.py
"""
ViewSets for the product catalog: Category and Product.
"""
from rest_framework import filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.products.models import Category, Product
from apps.products.services import ProductService
from apps.api.v1.serializers.products import CategorySerializer, ProductSerializer
from .base import TenantModelViewSet


@extend_schema_view(
    list=extend_schema(tags=['products'], summary='List categories'),
    retrieve=extend_schema(tags=['products'], summary='Get category details'),
    create=extend_schema(tags=['products'], summary='Create a category'),
    update=extend_schema(tags=['products'], summary='Update a category'),
    partial_update=extend_schema(tags=['products'], summary='Partially update a category'),
    destroy=extend_schema(tags=['products'], summary='Delete a category'),
)
class CategoryViewSet(TenantModelViewSet):
    model = Category
    serializer_class = CategorySerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering = ['name']


@extend_schema_view(
    list=extend_schema(tags=['products'], summary='List products'),
    retrieve=extend_schema(tags=['products'], summary='Get product details'),
    create=extend_schema(tags=['products'], summary='Create a product'),
    update=extend_schema(tags=['products'], summary='Update a product'),
    partial_update=extend_schema(tags=['products'], summary='Partially update a product'),
    destroy=extend_schema(tags=['products'], summary='Delete a product with no stock history'),
)
class ProductViewSet(TenantModelViewSet):
    """
    ViewSet for Product model.

    Products that ever held stock or appear on a purchase order cannot be
    deleted; deactivate them instead.
    """
    model = Product
    serializer_class = ProductSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'active', 'track_lot', 'track_expiry', 'base_uom']
    search_fields = ['sku', 'name', 'barcode']
    ordering_fields = ['sku', 'name', 'current_cost', 'created_at']
    ordering = ['sku']

    def get_queryset(self):
        return super().get_queryset().select_related('category')

    def perform_destroy(self, instance):
        ProductService(self.request.tenant, self.request.user).delete_product(instance)

    def _set_active(self, active):
        product = ProductService(self.request.tenant, self.request.user).set_active(self.get_object(), active)
        return Response(self.get_serializer(product).data)

    @extend_schema(tags=['products'], summary='Deactivate a product', request=None)
    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        return self._set_active(False)

    @extend_schema(tags=['products'], summary='Reactivate a product', request=None)
    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        return self._set_active(True)
