import django.db.models.deletion
import stores.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Store',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slug', models.SlugField(help_text='Public identifier used in catalog URLs', max_length=80, unique=True)),
                ('name', models.CharField(default=stores.models.default_store_name, max_length=255)),
                ('description', models.TextField(blank=True, default=stores.models.default_store_description)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('whatsapp', models.CharField(blank=True, default='', help_text='WhatsApp number used for checkout links', max_length=30)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('address', models.TextField(blank=True, default='')),
                ('hours', models.CharField(blank=True, default='', help_text='Opening hours, free text', max_length=255)),
                ('logo', models.URLField(blank=True, default='', max_length=500)),
                ('social_links', models.JSONField(blank=True, default=dict, help_text='Platform name to handle or URL, e.g. {"instagram": "@shop"}')),
                ('is_active', models.BooleanField(default=True)),
                ('is_default', models.BooleanField(default=False)),
                ('catalog_version', models.PositiveIntegerField(default=0, help_text='Bumped on every product change; used to reject stale bulk writes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('merchant', models.ForeignKey(help_text='Merchant that owns this store', on_delete=django.db.models.deletion.PROTECT, related_name='stores', to='users.merchant')),
            ],
            options={
                'db_table': 'stores',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['merchant'], name='stores_merchan_6f1c2a_idx'),
                    models.Index(fields=['is_active'], name='stores_is_acti_9d7e41_idx'),
                ],
            },
        ),
    ]
