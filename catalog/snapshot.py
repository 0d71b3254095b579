"""
Point-in-time view of a store's products.

A snapshot is built from one read of the product table, normalized once
and never mutated; callers that need fresher data load a new one.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from stores.models import Store
from .models import Product
from .records import CatalogProduct, normalize_products


@dataclass(frozen=True)
class CatalogSnapshot:
    store_id: int
    version: int
    products: Tuple[CatalogProduct, ...]

    def as_mapping(self) -> Dict[str, CatalogProduct]:
        return {product.key: product for product in self.products}

    def get(self, key: str) -> Optional[CatalogProduct]:
        for product in self.products:
            if product.key == key:
                return product
        return None


def product_records(store) -> Dict[str, dict]:
    """Raw {key: record} mapping of a store, in insertion order"""
    products = Product.objects.filter(store=store).select_related('supplier').order_by('id')
    return {product.key: product.to_record() for product in products}


def load_snapshot(store) -> CatalogSnapshot:
    version = Store.objects.values_list('catalog_version', flat=True).get(pk=store.pk)
    return CatalogSnapshot(
        store_id=store.pk,
        version=version,
        products=normalize_products(product_records(store)),
    )
