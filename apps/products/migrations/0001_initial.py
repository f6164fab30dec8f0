# apps/products/migrations/0001_initial.py
"""Initial schema: Category and Product."""
from decimal import Decimal

import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='products.category')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='%(class)s_set', to='tenants.tenant')),
            ],
            options={
                'verbose_name_plural': 'categories',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'name'), name='products_category_unique_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('sku', models.CharField(help_text='Stock Keeping Unit (unique per tenant)', max_length=50)),
                ('name', models.CharField(max_length=200)),
                ('barcode', models.CharField(blank=True, max_length=50)),
                ('base_uom', models.CharField(choices=[('EA', 'Each'), ('KG', 'Kilogram'), ('G', 'Gram'), ('L', 'Litre'), ('ML', 'Millilitre'), ('M', 'Metre'), ('CM', 'Centimetre'), ('BOX', 'Box'), ('PACK', 'Pack')], default='EA', max_length=10)),
                ('pack_uom_name', models.CharField(blank=True, help_text="Name of the pack unit (e.g., 'Case'); requires pack_qty_in_base", max_length=20)),
                ('pack_qty_in_base', models.DecimalField(blank=True, decimal_places=4, help_text='Base units per pack', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.0001'))])),
                ('current_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('track_lot', models.BooleanField(default=False)),
                ('track_expiry', models.BooleanField(default=False)),
                ('reorder_point', models.DecimalField(decimal_places=4, default=Decimal('0'), help_text='Low-stock threshold across all locations (0 disables the alert)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('reorder_qty', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('active', models.BooleanField(default=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='products.category')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='%(class)s_set', to='tenants.tenant')),
            ],
            options={
                'ordering': ['sku'],
                'indexes': [
                    models.Index(fields=['tenant', 'active'], name='products_tenant_active_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'sku'), name='products_product_unique_sku'),
                ],
            },
        ),
    ]
