from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MANAGER = 'manager', 'Manager'
    STAFF = 'staff', 'Staff'
    READONLY = 'readonly', 'Read Only'


# Roles a manager may create, edit or deactivate
MANAGER_MANAGEABLE_ROLES = (UserRole.STAFF, UserRole.READONLY)


class User(AbstractUser):
    """
    Custom User Model inheriting from AbstractUser.

    Every non-platform user belongs to exactly one tenant. Superusers may have
    no tenant and select one per request with the X-Tenant-ID header.
    """

    name = models.CharField(max_length=255, blank=True)
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='users',
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.STAFF,
    )

    @property
    def can_write(self):
        return self.is_superuser or self.role != UserRole.READONLY

    @property
    def is_manager(self):
        """Managers and admins may cancel and delete documents and manage users."""
        return self.is_superuser or self.role in (UserRole.ADMIN, UserRole.MANAGER)

    def can_manage_role(self, role):
        if self.is_superuser or self.role == UserRole.ADMIN:
            return True
        return self.role == UserRole.MANAGER and role in MANAGER_MANAGEABLE_ROLES
