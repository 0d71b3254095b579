import django.db.models.deletion
import suppliers.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(default=suppliers.models.generate_supplier_key, help_text='Opaque identifier referenced by products', max_length=64)),
                ('name', models.CharField(max_length=255)),
                ('contact_person', models.CharField(blank=True, default='', max_length=100)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('address', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('merchant', models.ForeignKey(help_text='Merchant this supplier belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='suppliers', to='users.merchant')),
            ],
            options={
                'db_table': 'suppliers',
                'ordering': ['id'],
                'constraints': [
                    models.UniqueConstraint(fields=('merchant', 'key'), name='unique_supplier_key_per_merchant'),
                ],
            },
        ),
    ]
