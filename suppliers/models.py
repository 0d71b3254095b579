from django.db import models
from django.utils.crypto import get_random_string

KEY_ALPHABET = 'abcdefghijklmnopqrstuvwxyz0123456789'


def generate_supplier_key():
    return f"sup_{get_random_string(9, KEY_ALPHABET)}"


class Supplier(models.Model):
    """Supplier information, shared by every store of a merchant"""

    merchant = models.ForeignKey(
        'users.Merchant',
        on_delete=models.CASCADE,
        related_name='suppliers',
        help_text='Merchant this supplier belongs to'
    )
    key = models.CharField(
        max_length=64,
        default=generate_supplier_key,
        help_text='Opaque identifier referenced by products'
    )
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    address = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'suppliers'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['merchant', 'key'],
                name='unique_supplier_key_per_merchant'
            )
        ]

    def __str__(self):
        return self.name
