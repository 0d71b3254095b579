from django.contrib import admin
from users.admin import MerchantScopedAdmin
from .models import Supplier


@admin.register(Supplier)
class SupplierAdmin(MerchantScopedAdmin):
    list_display = ['name', 'key', 'merchant', 'contact_person', 'email', 'phone']
    list_filter = ['merchant']
    search_fields = ['name', 'key', 'email', 'phone']
    readonly_fields = ['created_at', 'updated_at']
