from django.contrib import admin
from users.admin import MerchantScopedAdmin
from .models import Store


@admin.register(Store)
class StoreAdmin(MerchantScopedAdmin):
    list_display = ['name', 'slug', 'merchant', 'whatsapp', 'is_default', 'is_active', 'catalog_version']
    list_filter = ['is_active', 'is_default']
    search_fields = ['name', 'slug', 'phone', 'whatsapp', 'email']
    readonly_fields = ['catalog_version', 'created_at', 'updated_at']
