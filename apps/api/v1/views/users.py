# apps/api/v1/views/users.py
"""User administration and the current user's profile."""
from rest_framework import viewsets, filters, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, extend_schema_view

from users.models import User
from apps.api.permissions import IsTenantUser, IsManagerOrAdmin
from apps.api.v1.serializers.users import UserSerializer, CurrentUserSerializer
from apps.audit.models import AuditAction
from apps.audit.services import log_audit, snapshot
from .base import TenantRequestMixin

USER_AUDIT_EXCLUDE = ('tenant', 'password', 'groups', 'user_permissions')


@extend_schema(
    description="Get current user profile with role and tenant",
    tags=["users"]
)
class CurrentUserView(TenantRequestMixin, APIView):
    """
    GET /api/v1/users/me/

    Returns the authenticated user's profile.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(CurrentUserSerializer(request.user).data)


@extend_schema_view(
    list=extend_schema(tags=['users'], summary='List users of the tenant'),
    retrieve=extend_schema(tags=['users'], summary='Get a user'),
    create=extend_schema(tags=['users'], summary='Create a user'),
    update=extend_schema(tags=['users'], summary='Update a user'),
    partial_update=extend_schema(tags=['users'], summary='Partially update a user'),
    destroy=extend_schema(tags=['users'], summary='Deactivate a user'),
)
class UserViewSet(TenantRequestMixin, viewsets.ModelViewSet):
    """
    Tenant user administration for managers and admins.

    Managers can only manage staff and readonly users. Deleting a user
    deactivates it so that audit entries keep their author.
    """
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsTenantUser, IsManagerOrAdmin]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['username', 'email', 'name']
    ordering = ['username']

    def get_queryset(self):
        tenant = getattr(self.request, 'tenant', None)
        if tenant is None:
            return User.objects.none()
        return User.objects.filter(tenant=tenant)

    def perform_create(self, serializer):
        user = serializer.save()
        log_audit(self.request.tenant, self.request.user, AuditAction.CREATE, user,
                  new_values=snapshot(user, exclude=USER_AUDIT_EXCLUDE))

    def perform_update(self, serializer):
        old_values = snapshot(serializer.instance, exclude=USER_AUDIT_EXCLUDE)
        user = serializer.save()
        log_audit(self.request.tenant, self.request.user, AuditAction.UPDATE, user,
                  old_values=old_values, new_values=snapshot(user, exclude=USER_AUDIT_EXCLUDE))

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot deactivate yourself.'}, status=status.HTTP_400_BAD_REQUEST)
        if not request.user.can_manage_role(user.role):
            return Response({'error': f"You cannot manage users with the '{user.role}' role."}, status=status.HTTP_403_FORBIDDEN)
        user.is_active = False
        user.save(update_fields=['is_active'])
        log_audit(request.tenant, request.user, AuditAction.UPDATE, user,
                  old_values={'is_active': True}, new_values={'is_active': False})
        return Response(status=status.HTTP_204_NO_CONTENT)
