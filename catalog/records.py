"""
Canonical product records.

Products written by older clients carry aliased fields: ``price`` instead
of ``sale_price``, ``type`` instead of ``category`` and a single ``image``
instead of ``images``. They are resolved here, once, when records are read;
nothing downstream looks at the aliases again.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Tuple

ZERO = Decimal('0')


@dataclass(frozen=True)
class CatalogProduct:
    key: str
    name: str = ''
    description: str = ''
    price: Decimal = ZERO
    stock: int = 0
    minimum_stock: Optional[int] = None
    category: str = ''
    supplier: Optional[str] = None
    images: Tuple[str, ...] = field(default_factory=tuple)
    featured: bool = False
    active: bool = True
    code: str = ''

    @property
    def is_visible(self) -> bool:
        """Shown in the public catalog: active and in stock"""
        return self.active and self.stock > 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= (self.minimum_stock or 0)


def _first_present(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None


def _first_non_empty(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = raw.get(name)
        if value:
            return value
    return None


def to_decimal(value: Any) -> Decimal:
    if value is None or value == '':
        return ZERO
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return ZERO


def to_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def resolve_price(raw: Mapping[str, Any]) -> Decimal:
    """sale_price, else the legacy price, else zero"""
    return to_decimal(_first_present(raw, 'sale_price', 'price'))


def resolve_category(raw: Mapping[str, Any]) -> str:
    """category, else the legacy type; empty strings count as missing"""
    return str(_first_non_empty(raw, 'category', 'type') or '')


def resolve_images(raw: Mapping[str, Any]) -> Tuple[str, ...]:
    images = raw.get('images')
    if images:
        return tuple(url for url in images if url)
    image = raw.get('image')
    return (image,) if image else ()


def normalize_product(key: str, raw: Mapping[str, Any]) -> CatalogProduct:
    supplier = raw.get('supplier')
    return CatalogProduct(
        key=str(key),
        name=str(raw.get('name') or ''),
        description=str(raw.get('description') or ''),
        price=resolve_price(raw),
        stock=to_int(raw.get('stock')),
        minimum_stock=to_int(raw.get('minimum_stock'), default=None),
        category=resolve_category(raw),
        supplier=str(supplier) if supplier else None,
        images=resolve_images(raw),
        featured=bool(raw.get('featured')),
        # Only an explicit False hides a product; a missing flag means active
        active=raw.get('active') is not False,
        code=str(raw.get('code') or ''),
    )


def normalize_products(raw_mapping: Mapping[str, Dict[str, Any]]) -> Tuple[CatalogProduct, ...]:
    """Normalize a {key: raw record} mapping, keeping its iteration order"""
    return tuple(normalize_product(key, raw) for key, raw in (raw_mapping or {}).items())
