import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('stores', '0001_initial'),
        ('users', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transaction_type', models.CharField(choices=[('IN', 'Restock')], max_length=20)),
                ('quantity', models.IntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('quantity_before', models.IntegerField()),
                ('quantity_after', models.IntegerField()),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('merchant', models.ForeignKey(help_text='Merchant this stock transaction belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='stock_transactions', to='users.merchant')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_transactions', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_transactions', to='catalog.product')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_transactions', to='stores.store')),
            ],
            options={
                'db_table': 'stock_transactions',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['product'], name='stock_trans_product_1a3c5e_idx'),
                    models.Index(fields=['-created_at'], name='stock_trans_created_7b9d2f_idx'),
                    models.Index(fields=['merchant'], name='stock_trans_merchan_4e8a6c_idx'),
                ],
            },
        ),
    ]
