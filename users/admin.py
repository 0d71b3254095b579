from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import Merchant, User


class MerchantScopedAdmin(admin.ModelAdmin):
    """Restrict queryset to the request user's merchant unless superuser."""

    merchant_lookup = 'merchant'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        merchant = getattr(request.user, 'merchant', None)
        if merchant:
            return qs.filter(**{self.merchant_lookup: merchant})
        return qs.none()


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'contact_email', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code', 'contact_email', 'contact_phone']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'role', 'merchant', 'is_staff']
    list_filter = ['role', 'merchant', 'is_staff', 'is_superuser']
    search_fields = ['username', 'email', 'first_name', 'last_name']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Store access', {'fields': ('role', 'phone', 'merchant')}),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Store access', {'fields': ('role', 'phone', 'merchant')}),
    )
