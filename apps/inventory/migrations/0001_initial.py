from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('code', models.CharField(help_text='Product code printed on the label', max_length=50, verbose_name='Code')),
                ('photo', models.CharField(blank=True, default='', help_text='Absolute image URL or Cloudinary public id', max_length=500, verbose_name='Photo')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'db_table': 'inventory_product',
                'ordering': ['name', 'id'],
                'indexes': [
                    models.Index(fields=['name'], name='product_name_idx'),
                    models.Index(fields=['code'], name='product_code_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('initial_quantity', models.IntegerField(help_text='Quantity set or added by this movement', verbose_name='Initial quantity')),
                ('current_quantity', models.IntegerField(help_text='Stock on hand after this movement', verbose_name='Current quantity')),
                ('minimum_stock', models.IntegerField(verbose_name='Minimum stock')),
                ('maximum_stock', models.IntegerField(verbose_name='Maximum stock')),
                ('kind', models.CharField(blank=True, choices=[('Inicial', 'Initial'), ('Reabastecimiento', 'Restock')], default='', max_length=20, verbose_name='Movement kind')),
                ('moved_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Movement timestamp')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_movements', to=settings.AUTH_USER_MODEL, verbose_name='Performed by')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_movements', to='inventory.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Stock Movement',
                'verbose_name_plural': 'Stock Movements',
                'db_table': 'inventory_stock_movement',
                'ordering': ['-moved_at', '-id'],
                'indexes': [
                    models.Index(fields=['product', '-moved_at', '-id'], name='movement_latest_idx'),
                    models.Index(fields=['kind'], name='movement_kind_idx'),
                ],
            },
        ),
    ]
