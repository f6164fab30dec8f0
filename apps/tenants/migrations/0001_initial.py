# apps/tenants/migrations/0001_initial.py
"""Initial schema: Tenant, TenantSettings and TenantSequence."""
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Organization name', max_length=255)),
                ('subdomain', models.CharField(help_text="Subdomain used to resolve the tenant (e.g., 'acme' for acme.example.com)", max_length=63, unique=True)),
                ('is_active', models.BooleanField(default=True, help_text='Inactive tenants cannot use the API')),
                ('is_default', models.BooleanField(default=False, help_text='Default tenant for development (only one should be default)')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['subdomain'], name='tenants_subdomain_idx'),
                    models.Index(fields=['is_active'], name='tenants_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TenantSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(blank=True, help_text='Full legal company name', max_length=255)),
                ('currency', models.CharField(default='USD', help_text='ISO 4217 code that inventory values are reported in', max_length=3)),
                ('expiry_warning_days', models.PositiveIntegerField(default=30, help_text='Lots expiring within this many days appear on the expiring-soon report')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='settings', to='tenants.tenant')),
            ],
        ),
        migrations.CreateModel(
            name='TenantSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sequence_type', models.CharField(choices=[('PO', 'Purchase Order'), ('SHP', 'Shipment'), ('TRF', 'Transfer'), ('CNT', 'Cycle Count'), ('RET', 'Return'), ('ADJ', 'Adjustment')], help_text='Type of sequence (PO, SHP, TRF, ...)', max_length=20)),
                ('prefix', models.CharField(help_text="Prefix for the number (e.g., 'PO-', 'SHP-')", max_length=10)),
                ('next_value', models.PositiveIntegerField(default=1, help_text='Next number to use')),
                ('padding', models.PositiveIntegerField(default=6, help_text="Zero-pad to this width (e.g., 6 = '000001')")),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sequences', to='tenants.tenant')),
            ],
            options={
                'unique_together': {('tenant', 'sequence_type')},
            },
        ),
    ]
