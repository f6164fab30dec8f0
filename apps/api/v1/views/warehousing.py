# apps/api/v1/views/warehousing.py
"""
ViewSets for locations, transfers and cycle counts.
"""
from rest_framework import filters
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.warehousing.models import Location, Transfer, CycleCount
from apps.warehousing.services import LocationService, TransferService, CycleCountService
from apps.api.v1.serializers.warehousing import (
    LocationSerializer,
    TransferSerializer, TransferWriteSerializer,
    CycleCountSerializer, CycleCountWriteSerializer, RecordCountsSerializer,
)
from .base import TenantModelViewSet, DocumentViewSet


@extend_schema_view(
    list=extend_schema(tags=['warehousing'], summary='List locations'),
    retrieve=extend_schema(tags=['warehousing'], summary='Get location details'),
    create=extend_schema(tags=['warehousing'], summary='Create a location'),
    update=extend_schema(tags=['warehousing'], summary='Update a location'),
    partial_update=extend_schema(tags=['warehousing'], summary='Partially update a location'),
    destroy=extend_schema(tags=['warehousing'], summary='Delete a location that never held stock'),
)
class LocationViewSet(TenantModelViewSet):
    model = Location
    serializer_class = LocationSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['location_type', 'parent', 'active']
    search_fields = ['name', 'address']
    ordering = ['name']

    def get_queryset(self):
        return super().get_queryset().select_related('parent')

    def perform_destroy(self, instance):
        LocationService(self.request.tenant, self.request.user).delete_location(instance)


@extend_schema_view(
    list=extend_schema(tags=['warehousing'], summary='List transfers'),
    retrieve=extend_schema(tags=['warehousing'], summary='Get transfer details'),
    create=extend_schema(tags=['warehousing'], summary='Create a draft transfer'),
    update=extend_schema(tags=['warehousing'], summary='Update a draft transfer'),
    partial_update=extend_schema(tags=['warehousing'], summary='Partially update a draft transfer'),
    destroy=extend_schema(tags=['warehousing'], summary='Delete a draft transfer'),
    cancel=extend_schema(tags=['warehousing'], summary='Cancel a draft transfer', request=None),
)
class TransferViewSet(DocumentViewSet):
    """
    Stock transfers between locations.

    draft -> send -> confirmed (in transit) -> receive -> completed
    """
    model = Transfer
    service_class = TransferService
    serializer_class = TransferSerializer
    write_serializer_class = TransferWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'from_location', 'to_location']
    search_fields = ['number', 'notes']
    ordering_fields = ['number', 'transfer_date', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('from_location', 'to_location')

    @extend_schema(tags=['warehousing'], summary='Send a draft transfer (deducts at the source)', request=None)
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        return self.run_service(self.get_service().send, self.get_object())

    @extend_schema(tags=['warehousing'], summary='Receive a sent transfer at the destination', request=None)
    @action(detail=True, methods=['post'])
    def receive(self, request, pk=None):
        return self.run_service(self.get_service().receive, self.get_object())


@extend_schema_view(
    list=extend_schema(tags=['warehousing'], summary='List cycle counts'),
    retrieve=extend_schema(tags=['warehousing'], summary='Get cycle count details'),
    create=extend_schema(tags=['warehousing'], summary='Create a cycle count'),
    update=extend_schema(tags=['warehousing'], summary='Update a draft cycle count'),
    partial_update=extend_schema(tags=['warehousing'], summary='Partially update a draft cycle count'),
    destroy=extend_schema(tags=['warehousing'], summary='Delete a draft cycle count'),
    cancel=extend_schema(tags=['warehousing'], summary='Cancel a draft cycle count', request=None),
)
class CycleCountViewSet(DocumentViewSet):
    """
    Physical counts of one location.

    Create (system quantities are snapshotted), record counted quantities,
    then post to apply the variances.
    """
    model = CycleCount
    service_class = CycleCountService
    serializer_class = CycleCountSerializer
    write_serializer_class = CycleCountWriteSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'location']
    search_fields = ['number', 'notes']
    ordering_fields = ['number', 'count_date', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('location')

    @extend_schema(tags=['warehousing'], summary='Record counted quantities', request=RecordCountsSerializer)
    @action(detail=True, methods=['post'])
    def record(self, request, pk=None):
        cycle_count = self.get_object()
        serializer = RecordCountsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        counts = [dict(entry) for entry in serializer.validated_data['counts']]
        return self.run_service(self.get_service().record_counts, cycle_count, counts)

    @extend_schema(tags=['warehousing'], summary='Post a fully counted cycle count', request=None)
    @action(detail=True, methods=['post'], url_path='post', url_name='post')
    def post_count(self, request, pk=None):
        return self.run_service(self.get_service().post, self.get_object())
