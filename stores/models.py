from django.conf import settings
from django.db import models


def default_store_name():
    return settings.DEFAULT_STORE_NAME


def default_store_description():
    return settings.DEFAULT_STORE_DESCRIPTION


class Store(models.Model):
    """Storefront configuration. The public catalog is served by slug."""

    merchant = models.ForeignKey(
        'users.Merchant',
        on_delete=models.PROTECT,
        related_name='stores',
        help_text='Merchant that owns this store'
    )
    slug = models.SlugField(max_length=80, unique=True, help_text='Public identifier used in catalog URLs')
    name = models.CharField(max_length=255, default=default_store_name)
    description = models.TextField(blank=True, default=default_store_description)
    phone = models.CharField(max_length=30, blank=True, default='')
    whatsapp = models.CharField(
        max_length=30,
        blank=True,
        default='',
        help_text='WhatsApp number used for checkout links'
    )
    email = models.EmailField(blank=True, default='')
    address = models.TextField(blank=True, default='')
    hours = models.CharField(max_length=255, blank=True, default='', help_text='Opening hours, free text')
    logo = models.URLField(max_length=500, blank=True, default='')
    social_links = models.JSONField(
        default=dict,
        blank=True,
        help_text='Platform name to handle or URL, e.g. {"instagram": "@shop"}'
    )
    is_active = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)
    catalog_version = models.PositiveIntegerField(
        default=0,
        help_text='Bumped on every product change; used to reject stale bulk writes'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        ordering = ['name']
        indexes = [
            models.Index(fields=['merchant'], name='stores_merchan_6f1c2a_idx'),
            models.Index(fields=['is_active'], name='stores_is_acti_9d7e41_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"

    @property
    def contact_number(self):
        """WhatsApp number, falling back to the plain phone"""
        return self.whatsapp or self.phone
