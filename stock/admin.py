from django.contrib import admin
from users.admin import MerchantScopedAdmin
from .models import StockTransaction


@admin.register(StockTransaction)
class StockTransactionAdmin(MerchantScopedAdmin):
    list_display = ['product', 'store', 'transaction_type', 'quantity',
                    'quantity_before', 'quantity_after', 'performed_by', 'created_at']
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['product__name', 'product__code', 'notes']
    readonly_fields = ['created_at']
    raw_id_fields = ['product', 'performed_by']
