from typing import Optional
from django.db.models import F
from users.models import Merchant
from .models import Store


def get_default_store(merchant: Optional[Merchant]) -> Optional[Store]:
    if merchant is None:
        return None
    store = Store.objects.filter(merchant=merchant, is_default=True).first()
    if store is None:
        store = Store.objects.filter(merchant=merchant).order_by('id').first()
    return store


def bump_catalog_version(store_id: int) -> Optional[int]:
    """Increment a store's catalog version; returns the new value, None if the store is gone."""
    Store.objects.filter(pk=store_id).update(catalog_version=F('catalog_version') + 1)
    return Store.objects.filter(pk=store_id).values_list('catalog_version', flat=True).first()
