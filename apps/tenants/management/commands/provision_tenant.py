# apps/tenants/management/commands/provision_tenant.py
"""
Management command to provision a tenant, optionally with its first admin.

Usage:
    python manage.py provision_tenant "Acme Foods" acme
    python manage.py provision_tenant "Acme Foods" acme --admin-username alice --admin-password s3cret
    python manage.py provision_tenant "Local Dev" localhost --default
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.tenants.models import Tenant
from users.models import User, UserRole


class Command(BaseCommand):
    help = 'Create a tenant (settings and document sequences are created automatically)'

    def add_arguments(self, parser):
        parser.add_argument('name', help='Organization name')
        parser.add_argument('subdomain', help='Unique subdomain')
        parser.add_argument('--default', action='store_true', help='Mark as the default tenant')
        parser.add_argument('--admin-username', help='Create an admin user for the tenant')
        parser.add_argument('--admin-password', help='Password for the admin user')
        parser.add_argument('--admin-email', default='', help='Email for the admin user')

    def handle(self, *args, **options):
        subdomain = options['subdomain'].strip().lower()
        if Tenant.objects.filter(subdomain=subdomain).exists():
            raise CommandError(f"Tenant with subdomain '{subdomain}' already exists.")
        if options['admin_username'] and not options['admin_password']:
            raise CommandError('--admin-password is required with --admin-username.')

        with transaction.atomic():
            if options['default']:
                Tenant.objects.filter(is_default=True).update(is_default=False)
            tenant = Tenant.objects.create(
                name=options['name'],
                subdomain=subdomain,
                is_default=options['default'],
            )

            admin_user = None
            if options['admin_username']:
                admin_user = User.objects.create_user(
                    username=options['admin_username'],
                    password=options['admin_password'],
                    email=options['admin_email'],
                    tenant=tenant,
                    role=UserRole.ADMIN,
                )

        self.stdout.write(self.style.SUCCESS(f'Created tenant: {tenant.name} (id {tenant.id})'))
        self.stdout.write(f'  - Subdomain: {tenant.subdomain}')
        for seq in tenant.sequences.order_by('sequence_type'):
            self.stdout.write(f'  - Sequence {seq.sequence_type}: {seq.prefix}{"#" * seq.padding}')
        if admin_user:
            self.stdout.write(self.style.SUCCESS(f'Created admin user: {admin_user.username}'))
