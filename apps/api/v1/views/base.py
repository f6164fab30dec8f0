# apps/api/v1/views/base.py
"""
Base ViewSet classes for tenant-aware API views.

TenantModelViewSet   - master data (products, locations, parties, ...)
DocumentViewSet      - stock documents whose writes go through a service
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import ProtectedError
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.api.permissions import IsTenantUser, HasWriteRole, IsManagerOrAdmin
from apps.audit.models import AuditAction
from apps.audit.services import log_audit, snapshot
from apps.tenants.middleware import resolve_tenant

logger = logging.getLogger(__name__)


def error_response(exc):
    """
    Translate a Django ValidationError into a 400 response.

    ``{'error': 'message'}``, plus ``fields`` when the error names fields.
    """
    payload = {'error': ' '.join(str(m) for m in exc.messages)}
    if hasattr(exc, 'error_dict'):
        payload['fields'] = exc.message_dict
    return Response(payload, status=status.HTTP_400_BAD_REQUEST)


def unavailable_response():
    return Response(
        {'error': 'The database is unavailable. Nothing was changed; please retry.'},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


class TenantRequestMixin:
    """
    Resolves ``request.tenant`` after DRF authentication, so JWT-authenticated
    requests are scoped exactly like session requests.
    """

    def perform_authentication(self, request):
        super().perform_authentication(request)
        request.tenant = resolve_tenant(request)


class TenantModelViewSet(TenantRequestMixin, viewsets.ModelViewSet):
    """
    Base ViewSet for tenant-scoped models.

    The queryset is built per request with ``for_tenant``; a class-level
    queryset would leak rows across tenants.

    Create, update and delete are recorded in the audit log.

    Usage:
        class SupplierViewSet(TenantModelViewSet):
            model = Supplier
            serializer_class = SupplierSerializer
    """
    model = None  # Subclasses must set this
    permission_classes = [IsAuthenticated, IsTenantUser, HasWriteRole]

    def get_queryset(self):
        if self.model is None:
            raise NotImplementedError(
                f"{self.__class__.__name__} must define 'model' attribute"
            )
        return self.model.objects.for_tenant(getattr(self.request, 'tenant', None))

    def perform_create(self, serializer):
        instance = serializer.save(tenant=self.request.tenant)
        log_audit(self.request.tenant, self.request.user, AuditAction.CREATE, instance,
                  new_values=snapshot(instance))

    def perform_update(self, serializer):
        old_values = snapshot(serializer.instance)
        instance = serializer.save()
        log_audit(self.request.tenant, self.request.user, AuditAction.UPDATE, instance,
                  old_values=old_values, new_values=snapshot(instance))

    def perform_destroy(self, instance):
        with transaction.atomic():
            log_audit(self.request.tenant, self.request.user, AuditAction.DELETE, instance,
                      old_values=snapshot(instance))
            instance.delete()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except ProtectedError:
            return Response(
                {'error': f"Cannot delete {instance}: it is referenced by other records. Deactivate it instead."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DjangoValidationError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DocumentViewSet(TenantModelViewSet):
    """
    Base ViewSet for stock documents.

    Reads use ``serializer_class``; create/update validate with
    ``write_serializer_class`` and then call the document service, which
    numbers the document, enforces draft-only edits and writes the audit
    log. Transitions are POST actions on the detail route.

    Subclasses set ``model``, ``service_class``, ``serializer_class`` and
    ``write_serializer_class``.
    """
    service_class = None
    write_serializer_class = None
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        permissions = super().get_permissions()
        if self.action in ('cancel', 'destroy'):
            permissions.append(IsManagerOrAdmin())
        return permissions

    def get_queryset(self):
        return super().get_queryset().select_related('created_by').prefetch_related('lines__product')

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return self.write_serializer_class
        return self.serializer_class

    def get_service(self):
        return self.service_class(self.request.tenant, self.request.user)

    def run_service(self, func, *args, success_status=status.HTTP_200_OK, **kwargs):
        """
        Call a service method and render the resulting document.

        ValidationError (including InvalidTransitionError and
        InsufficientStockError) becomes 400; DatabaseError becomes 503.
        """
        try:
            document = func(*args, **kwargs)
        except DjangoValidationError as e:
            logger.warning(
                "%s %s rejected for tenant %s: %s",
                self.model.__name__, self.action, self.request.tenant.pk, '; '.join(e.messages),
            )
            return error_response(e)
        except DatabaseError:
            logger.exception("%s %s failed for tenant %s", self.model.__name__, self.action, self.request.tenant.pk)
            return unavailable_response()

        document = self.get_queryset().get(pk=document.pk)
        serializer = self.serializer_class(document, context=self.get_serializer_context())
        return Response(serializer.data, status=success_status)

    def _split_lines(self, serializer):
        data = dict(serializer.validated_data)
        lines = data.pop('lines', None)
        if lines is not None:
            lines = [dict(line) for line in lines]
        return lines, data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lines, header = self._split_lines(serializer)
        return self.run_service(
            self.get_service().create, lines, success_status=status.HTTP_201_CREATED, **header
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        document = self.get_object()
        serializer = self.get_serializer(document, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        lines, header = self._split_lines(serializer)
        return self.run_service(self.get_service().update, document, lines=lines, **header)

    def destroy(self, request, *args, **kwargs):
        document = self.get_object()
        try:
            self.get_service().delete(document)
        except DjangoValidationError as e:
            return error_response(e)
        except DatabaseError:
            logger.exception("Deleting %s failed for tenant %s", document.number, request.tenant.pk)
            return unavailable_response()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel the document."""
        return self.run_service(self.get_service().cancel, self.get_object())
