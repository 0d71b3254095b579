"""
Merchant scoping for multi-tenant data isolation.
"""
from rest_framework.exceptions import NotAuthenticated, PermissionDenied


NO_MERCHANT_MESSAGE = "User is not associated with any merchant."


def get_merchant_from_request(request):
    """Return the merchant of the signed-in user, or None."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return user.merchant


def require_merchant_for_request(request):
    """
    Return the request's merchant or fail before any query runs.

    Anonymous requests raise NotAuthenticated (401); signed-in users
    without a merchant raise PermissionDenied (403).
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        raise NotAuthenticated()

    merchant = get_merchant_from_request(request)
    if merchant is None:
        raise PermissionDenied(NO_MERCHANT_MESSAGE)
    return merchant


class MerchantScopedMixin:
    """
    Mixin for views whose queryset belongs to a merchant.

    Usage:
        class SupplierViewSet(MerchantScopedMixin, viewsets.ModelViewSet):
            queryset = Supplier.objects.all()

    GET requests only see rows of the request merchant and creates are
    stamped with it.
    """

    merchant_field = 'merchant'  # Override when the FK lives elsewhere (e.g. 'store__merchant')

    def get_merchant(self):
        return require_merchant_for_request(self.request)

    def get_queryset(self):
        queryset = super().get_queryset()
        return queryset.filter(**{self.merchant_field: self.get_merchant()})

    def perform_create(self, serializer):
        if self.merchant_field == 'merchant':
            serializer.save(merchant=self.get_merchant())
        else:
            serializer.save()
