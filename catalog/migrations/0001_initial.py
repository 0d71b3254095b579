import catalog.models
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stores', '0001_initial'),
        ('suppliers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(default=catalog.models.generate_product_key, help_text='Opaque identifier, unique within the store', max_length=64)),
                ('code', models.CharField(blank=True, default='', help_text='Internal product code', max_length=100)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('sale_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('legacy_price', models.DecimalField(blank=True, decimal_places=2, help_text='Price stored under the old "price" field', max_digits=12, null=True)),
                ('stock', models.PositiveIntegerField(default=0)),
                ('minimum_stock', models.PositiveIntegerField(blank=True, help_text='Alert when stock falls to this level', null=True)),
                ('category', models.CharField(blank=True, default='', max_length=100)),
                ('legacy_type', models.CharField(blank=True, default='', help_text='Category stored under the old "type" field', max_length=100)),
                ('images', models.JSONField(blank=True, default=list, help_text='Public image URLs, first one is the cover')),
                ('legacy_image', models.URLField(blank=True, default='', help_text='Single image URL stored under the old "image" field', max_length=500)),
                ('featured', models.BooleanField(default=False)),
                ('active', models.BooleanField(blank=True, default=True, help_text='Null means the flag was never set; only False hides the product', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='stores.store')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='suppliers.supplier')),
            ],
            options={
                'db_table': 'products',
                'ordering': ['id'],
                'indexes': [
                    models.Index(fields=['store'], name='products_store_i_4b2d9e_idx'),
                    models.Index(fields=['category'], name='products_categor_8e61c0_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('store', 'key'), name='unique_product_key_per_store'),
                ],
            },
        ),
    ]
