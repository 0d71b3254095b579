"""
Bulk price adjustment.

A batch is computed from one catalog snapshot and written in a single
transaction: every product in scope gets its new price or none does.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from django.db import transaction
from catalog.models import Product
from catalog.records import CatalogProduct
from catalog.snapshot import load_snapshot
from stores.models import Store

logger = logging.getLogger(__name__)

ALL_SUPPLIERS = 'all'
INCREASE = 'increase'
DECREASE = 'decrease'
DIRECTIONS = (INCREASE, DECREASE)

CENT = Decimal('0.01')
HUNDRED = Decimal('100')


class PriceAdjustmentError(Exception):
    """The adjustment request cannot be applied"""


class StaleCatalogError(PriceAdjustmentError):
    """The catalog changed after the caller computed its preview"""

    def __init__(self, expected_version, current_version):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f'Catalog changed since version {expected_version} (now {current_version}); reload and try again'
        )


@dataclass(frozen=True)
class PriceChange:
    key: str
    old_price: Decimal
    new_price: Decimal


@dataclass(frozen=True)
class AdjustmentResult:
    updated: int
    factor: Decimal
    version: int
    changes: List[PriceChange]


def compute_factor(percentage, direction) -> Decimal:
    percentage = Decimal(str(percentage))
    if percentage < 0:
        raise PriceAdjustmentError('Percentage cannot be negative')
    if direction == INCREASE:
        return 1 + percentage / HUNDRED
    if direction == DECREASE:
        if percentage >= HUNDRED:
            raise PriceAdjustmentError('A decrease must be less than 100%')
        return 1 - percentage / HUNDRED
    raise PriceAdjustmentError(f'Unknown direction: {direction}')


def round_price(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def is_all_suppliers(scope: Optional[str]) -> bool:
    return not scope or scope == ALL_SUPPLIERS


def in_scope(product: CatalogProduct, scope: Optional[str]) -> bool:
    # Visibility plays no part here: hidden products are repriced too
    return is_all_suppliers(scope) or product.supplier == scope


def resolve_scope(products: Sequence[CatalogProduct], scope: Optional[str]) -> List[CatalogProduct]:
    return [product for product in products if in_scope(product, scope)]


def count_affected(products: Sequence[CatalogProduct], scope: Optional[str]) -> int:
    return len(resolve_scope(products, scope))


def build_price_batch(products: Sequence[CatalogProduct], scope: Optional[str],
                      percentage, direction) -> List[PriceChange]:
    factor = compute_factor(percentage, direction)
    return [
        PriceChange(key=product.key, old_price=product.price, new_price=round_price(product.price * factor))
        for product in resolve_scope(products, scope)
    ]


def adjust_prices(store, scope, percentage, direction, expected_version=None) -> AdjustmentResult:
    """
    Apply a price batch to a store.

    The store row is locked for the whole batch. When expected_version is
    given and the catalog has moved on, StaleCatalogError is raised and
    nothing is written.
    """
    factor = compute_factor(percentage, direction)

    with transaction.atomic():
        locked = Store.objects.select_for_update().get(pk=store.pk)
        if expected_version is not None and locked.catalog_version != expected_version:
            raise StaleCatalogError(expected_version, locked.catalog_version)

        snapshot = load_snapshot(locked)
        changes = build_price_batch(snapshot.products, scope, percentage, direction)
        products = {
            product.key: product
            for product in Product.objects.select_for_update().filter(
                store=locked, key__in=[change.key for change in changes]
            )
        }

        for change in changes:
            product = products[change.key]
            product.sale_price = change.new_price
            product.save(update_fields=['sale_price', 'updated_at'])

        # Each save bumped the version already; read back the final value
        version = Store.objects.values_list('catalog_version', flat=True).get(pk=locked.pk)

    logger.info(
        f"Adjusted {len(changes)} prices in store {locked.slug}: "
        f"{direction} {percentage}% (scope {scope or ALL_SUPPLIERS}), version {version}"
    )
    return AdjustmentResult(updated=len(changes), factor=factor, version=version, changes=changes)
