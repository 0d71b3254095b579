"""
Public catalog filtering and pagination.

Operates on normalized products in their stored order; nothing here sorts.
"""
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from .records import CatalogProduct

ALL_CATEGORIES = 'all'


@dataclass(frozen=True)
class CatalogQuery:
    """
    View state of a catalog listing.

    Use update() to change it: touching search or category always
    sends the listing back to page 1.
    """
    search: str = ''
    category: str = ALL_CATEGORIES
    page: int = 1

    def update(self, search: Optional[str] = None, category: Optional[str] = None,
               page: Optional[int] = None) -> 'CatalogQuery':
        changes = {}
        if search is not None:
            changes['search'] = search
        if category is not None:
            changes['category'] = category
        if changes:
            changes['page'] = 1
        elif page is not None:
            changes['page'] = page
        return replace(self, **changes)

    def clear_filters(self) -> 'CatalogQuery':
        return self.update(search='', category=ALL_CATEGORIES)

    def as_params(self) -> dict:
        params = {}
        if self.search.strip():
            params['search'] = self.search
        if not is_all_categories(self.category):
            params['category'] = self.category
        params['page'] = self.page
        return params


@dataclass(frozen=True)
class CatalogPage:
    results: List[CatalogProduct]
    count: int
    page: int
    page_size: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def is_all_categories(category: Optional[str]) -> bool:
    return not category or category == ALL_CATEGORIES


def matches_search(product: CatalogProduct, search: Optional[str]) -> bool:
    if not search or not search.strip():
        return True
    needle = search.lower()
    return needle in product.name.lower() or needle in product.description.lower()


def matches_category(product: CatalogProduct, category: Optional[str]) -> bool:
    # Exact and case-sensitive: categories are curated values, search is free text
    if is_all_categories(category):
        return True
    return product.category == category


def filter_products(products: Sequence[CatalogProduct], search: Optional[str] = '',
                    category: Optional[str] = ALL_CATEGORIES) -> List[CatalogProduct]:
    return [
        product for product in products
        if product.is_visible
        and matches_search(product, search)
        and matches_category(product, category)
    ]


def count_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError('page_size must be at least 1')
    return math.ceil(count / page_size)


def paginate(items: Sequence, page: int, page_size: int) -> CatalogPage:
    """Slice a 1-based page; pages past the end are empty"""
    if page < 1:
        raise ValueError('page must be at least 1')
    total_pages = count_pages(len(items), page_size)
    start = (page - 1) * page_size
    return CatalogPage(
        results=list(items[start:start + page_size]),
        count=len(items),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


def category_facets(products: Sequence[CatalogProduct]) -> List[str]:
    """Distinct non-empty categories of the unfiltered products, first occurrence first"""
    seen = {}
    for product in products:
        if product.category and product.category not in seen:
            seen[product.category] = True
    return list(seen)


def build_catalog_page(products: Sequence[CatalogProduct], query: CatalogQuery,
                       page_size: int) -> CatalogPage:
    filtered = filter_products(products, query.search, query.category)
    return paginate(filtered, query.page, page_size)
