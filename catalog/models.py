from django.core.validators import MinValueValidator
from django.db import models
from django.utils.crypto import get_random_string
from decimal import Decimal
from .records import normalize_product, resolve_category, resolve_price

KEY_ALPHABET = 'abcdefghijklmnopqrstuvwxyz0123456789'


def generate_product_key():
    return f"prod_{get_random_string(9, KEY_ALPHABET)}"


class Product(models.Model):
    """
    Catalog product of a store.

    legacy_price, legacy_type and legacy_image hold values written by older
    clients under aliased names. They are kept as stored and resolved by
    catalog.records when products are read.
    """

    store = models.ForeignKey('stores.Store', on_delete=models.CASCADE, related_name='products')
    key = models.CharField(
        max_length=64,
        default=generate_product_key,
        help_text='Opaque identifier, unique within the store'
    )
    code = models.CharField(max_length=100, blank=True, default='', help_text='Internal product code')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    sale_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    legacy_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text='Price stored under the old "price" field'
    )
    stock = models.PositiveIntegerField(default=0)
    minimum_stock = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text='Alert when stock falls to this level'
    )
    category = models.CharField(max_length=100, blank=True, default='')
    legacy_type = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text='Category stored under the old "type" field'
    )
    supplier = models.ForeignKey(
        'suppliers.Supplier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )
    images = models.JSONField(default=list, blank=True, help_text='Public image URLs, first one is the cover')
    legacy_image = models.URLField(
        max_length=500,
        blank=True,
        default='',
        help_text='Single image URL stored under the old "image" field'
    )
    featured = models.BooleanField(default=False)
    active = models.BooleanField(
        null=True,
        blank=True,
        default=True,
        help_text='Null means the flag was never set; only False hides the product'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['id']
        indexes = [
            models.Index(fields=['store'], name='products_store_i_4b2d9e_idx'),
            models.Index(fields=['category'], name='products_categor_8e61c0_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['store', 'key'],
                name='unique_product_key_per_store'
            )
        ]

    def __str__(self):
        return f"{self.key} - {self.name}"

    def to_record(self):
        """Stored fields under their document names, aliases included"""
        return {
            'name': self.name,
            'description': self.description,
            'code': self.code,
            'sale_price': self.sale_price,
            'price': self.legacy_price,
            'stock': self.stock,
            'minimum_stock': self.minimum_stock,
            'category': self.category,
            'type': self.legacy_type,
            'supplier': self.supplier.key if self.supplier_id else None,
            'images': list(self.images or []),
            'image': self.legacy_image,
            'featured': self.featured,
            'active': self.active,
        }

    def as_catalog_product(self):
        return normalize_product(self.key, self.to_record())

    @property
    def is_low_stock(self):
        return self.stock <= (self.minimum_stock or 0)

    @property
    def effective_price(self):
        return resolve_price({'sale_price': self.sale_price, 'price': self.legacy_price})

    @property
    def effective_category(self):
        return resolve_category({'category': self.category, 'type': self.legacy_type})
