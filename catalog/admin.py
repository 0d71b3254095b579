from django.contrib import admin
from users.admin import MerchantScopedAdmin
from .models import Product


@admin.register(Product)
class ProductAdmin(MerchantScopedAdmin):
    merchant_lookup = 'store__merchant'
    list_display = ['key', 'name', 'store', 'category', 'sale_price', 'stock', 'active', 'featured']
    list_filter = ['active', 'featured', 'store']
    search_fields = ['key', 'code', 'name', 'description']
    readonly_fields = ['legacy_price', 'legacy_type', 'legacy_image', 'created_at', 'updated_at']
