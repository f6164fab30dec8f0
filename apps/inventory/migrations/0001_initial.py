# apps/inventory/migrations/0001_initial.py
"""
Initial schema: InventoryBalance (with its simple-history table),
StockMovement and Adjustment/AdjustmentLine.

A balance key is unique through two partial constraints, one for dated
lots and one for undated lots, since NULL expiry dates never collide in a
plain unique index.
"""
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import simple_history.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        ('products', '0001_initial'),
        ('warehousing', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryBalance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lot_number', models.CharField(blank=True, default='', max_length=100)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('qty_on_hand', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12)),
                ('avg_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='balances', to='warehousing.location')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='balances', to='products.product')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='%(class)s_set', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'Inventory Balance',
                'verbose_name_plural': 'Inventory Balances',
                'indexes': [
                    models.Index(fields=['tenant', 'product', 'location'], name='inv_balance_product_idx'),
                    models.Index(fields=['tenant', 'location'], name='inv_balance_location_idx'),
                    models.Index(fields=['tenant', 'expiry_date'], name='inv_balance_expiry_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('expiry_date__isnull', False)), fields=('tenant', 'product', 'location', 'lot_number', 'expiry_date'), name='inventory_balance_unique_dated_key'),
                    models.UniqueConstraint(condition=models.Q(('expiry_date__isnull', True)), fields=('tenant', 'product', 'location', 'lot_number'), name='inventory_balance_unique_undated_key'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HistoricalInventoryBalance',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(blank=True, editable=False)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('lot_number', models.CharField(blank=True, default='', max_length=100)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('qty_on_hand', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12)),
                ('avg_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12)),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='warehousing.location')),
                ('product', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='products.product')),
                ('tenant', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'historical Inventory Balance',
                'verbose_name_plural': 'historical Inventory Balances',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=4, max_digits=12)),
                ('movement_type', models.CharField(choices=[('receive', 'Receive'), ('ship', 'Ship'), ('transfer_out', 'Transfer Out'), ('transfer_in', 'Transfer In'), ('adjustment', 'Adjustment'), ('count_variance', 'Count Variance'), ('return_in', 'Return In'), ('return_out', 'Return Out'), ('void', 'Void')], max_length=20)),
                ('reference_type', models.CharField(blank=True, max_length=30)),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('reference_number', models.CharField(blank=True, max_length=30)),
                ('lot_number', models.CharField(blank=True, default='', max_length=100)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('unit_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=12)),
                ('reason', models.CharField(blank=True, choices=[('damage', 'Damage'), ('shrinkage', 'Shrinkage'), ('expiry', 'Expiry'), ('correction', 'Correction'), ('sample', 'Sample'), ('count_variance', 'Count Variance'), ('other', 'Other')], max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('balance_after', models.DecimalField(blank=True, decimal_places=4, help_text='Balance qty_on_hand right after this movement', max_digits=12, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='warehousing.location')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='products.product')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='%(class)s_set', to='tenants.tenant')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['tenant', 'product', 'location'], name='inv_movement_product_idx'),
                    models.Index(fields=['tenant', 'reference_type', 'reference_id'], name='inv_movement_reference_idx'),
                    models.Index(fields=['tenant', 'movement_type'], name='inv_movement_type_idx'),
                    models.Index(fields=['tenant', 'created_at'], name='inv_movement_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Adjustment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('number', models.CharField(help_text='Tenant-unique document number', max_length=30)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('confirmed', 'Confirmed'), ('partial', 'Partially Received'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('reason', models.CharField(choices=[('damage', 'Damage'), ('shrinkage', 'Shrinkage'), ('expiry', 'Expiry'), ('correction', 'Correction'), ('sample', 'Sample'), ('count_variance', 'Count Variance'), ('other', 'Other')], max_length=20)),
                ('posted_at', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='adjustments', to='warehousing.location')),
                ('posted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='%(class)s_set', to='tenants.tenant')),
            ],
            options={
                'ordering': ['-created_at'],
                'abstract': False,
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'number'), name='inventory_adjustment_unique_number'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AdjustmentLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=4, help_text='Signed: positive adds, negative removes', max_digits=12)),
                ('lot_number', models.CharField(blank=True, default='', max_length=100)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=4, help_text='Cost for positive lines; defaults to the balance cost. Set on posting.', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('adjustment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='inventory.adjustment')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='products.product')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
    ]
