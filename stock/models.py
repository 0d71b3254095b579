from django.core.validators import MinValueValidator
from django.db import models


class StockTransaction(models.Model):
    """Stock movement history"""

    TRANSACTION_TYPE_CHOICES = [
        ('IN', 'Restock'),
    ]

    merchant = models.ForeignKey(
        'users.Merchant',
        on_delete=models.CASCADE,
        related_name='stock_transactions',
        help_text='Merchant this stock transaction belongs to'
    )
    store = models.ForeignKey('stores.Store', on_delete=models.CASCADE, related_name='stock_transactions')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='stock_transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    quantity = models.IntegerField(validators=[MinValueValidator(1)])
    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()
    notes = models.TextField(blank=True, default='')
    performed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['product'], name='stock_trans_product_1a3c5e_idx'),
            models.Index(fields=['-created_at'], name='stock_trans_created_7b9d2f_idx'),
            models.Index(fields=['merchant'], name='stock_trans_merchan_4e8a6c_idx'),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} - {self.product.name} ({self.quantity})"
