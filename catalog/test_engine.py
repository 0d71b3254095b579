"""
Tests for product normalization, catalog filtering, pagination and links.
These run without a database.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace
from urllib.parse import unquote
from catalog.engine import (
    ALL_CATEGORIES, CatalogQuery, build_catalog_page, category_facets,
    count_pages, filter_products, paginate
)
from catalog.records import CatalogProduct, normalize_product, normalize_products
from catalog.whatsapp import build_checkout_url, build_share_url, phone_digits


def make_products(count, **overrides):
    return [
        CatalogProduct(key=f'p{i}', name=f'Product {i}', stock=1, **overrides)
        for i in range(count)
    ]


# ============== Normalization Tests ==============

class TestNormalizeProduct:
    """Legacy aliases are resolved once when records are read"""

    def test_sale_price_wins_over_legacy_price(self):
        product = normalize_product('a', {'sale_price': 50, 'price': 30})
        assert product.price == Decimal('50')

    def test_legacy_price_used_when_sale_price_missing(self):
        product = normalize_product('b', {'price': 30})
        assert product.price == Decimal('30')

    def test_missing_price_is_zero(self):
        assert normalize_product('c', {}).price == Decimal('0')

    def test_zero_sale_price_is_kept(self):
        product = normalize_product('d', {'sale_price': 0, 'price': 30})
        assert product.price == Decimal('0')

    def test_category_falls_back_to_type(self):
        assert normalize_product('e', {'type': 'Pantry'}).category == 'Pantry'

    def test_empty_category_counts_as_missing(self):
        assert normalize_product('f', {'category': '', 'type': 'Pantry'}).category == 'Pantry'

    def test_category_wins_over_type(self):
        assert normalize_product('g', {'category': 'Kitchen', 'type': 'Pantry'}).category == 'Kitchen'

    def test_missing_active_means_active(self):
        assert normalize_product('h', {}).active is True
        assert normalize_product('h', {'active': None}).active is True

    def test_only_explicit_false_deactivates(self):
        assert normalize_product('i', {'active': False}).active is False

    def test_single_image_alias_becomes_list(self):
        product = normalize_product('j', {'image': 'https://cdn.test/a.jpg'})
        assert product.images == ('https://cdn.test/a.jpg',)

    def test_images_win_over_single_image(self):
        product = normalize_product('k', {'images': ['x', 'y'], 'image': 'z'})
        assert product.images == ('x', 'y')

    def test_normalize_products_keeps_order(self):
        raw = {'z': {'name': 'Z'}, 'a': {'name': 'A'}, 'm': {'name': 'M'}}
        assert [p.key for p in normalize_products(raw)] == ['z', 'a', 'm']


# ============== Filter Tests ==============

class TestFilterProducts:

    def test_reference_scenario_shows_only_active_in_stock(self):
        raw = {
            'A': {'sale_price': 50, 'stock': 3, 'active': True},
            'B': {'price': 30, 'stock': 0},
            'C': {'sale_price': 10, 'stock': 5, 'active': False},
        }
        visible = filter_products(normalize_products(raw))
        assert [p.key for p in visible] == ['A']

    def test_search_is_case_insensitive_on_name_and_description(self):
        products = [
            CatalogProduct(key='1', name='Coffee Mug', stock=1),
            CatalogProduct(key='2', name='Plate', description='Goes with any MUG', stock=1),
            CatalogProduct(key='3', name='Spoon', stock=1),
        ]
        assert [p.key for p in filter_products(products, search='mug')] == ['1', '2']

    def test_whitespace_search_matches_everything(self):
        products = make_products(3)
        assert len(filter_products(products, search='   ')) == 3

    def test_category_is_exact_and_case_sensitive(self):
        products = [
            CatalogProduct(key='1', name='A', stock=1, category='Kitchen'),
            CatalogProduct(key='2', name='B', stock=1, category='kitchen'),
        ]
        assert [p.key for p in filter_products(products, category='Kitchen')] == ['1']

    @pytest.mark.parametrize('category', [ALL_CATEGORIES, '', None])
    def test_category_sentinels_match_everything(self, category):
        products = make_products(2, category='Kitchen')
        assert len(filter_products(products, category=category)) == 2

    def test_filters_combine(self):
        products = [
            CatalogProduct(key='1', name='Red mug', stock=1, category='Kitchen'),
            CatalogProduct(key='2', name='Red shirt', stock=1, category='Clothes'),
            CatalogProduct(key='3', name='Red mug', stock=0, category='Kitchen'),
        ]
        result = filter_products(products, search='red', category='Kitchen')
        assert [p.key for p in result] == ['1']


# ============== Pagination Tests ==============

class TestPaginate:

    def test_page_count_rounds_up(self):
        assert count_pages(25, 12) == 3
        assert count_pages(24, 12) == 2
        assert count_pages(0, 12) == 0

    def test_last_page_holds_remainder(self):
        page = paginate(list(range(25)), 3, 12)
        assert page.results == [24]
        assert page.total_pages == 3
        assert page.count == 25
        assert page.has_next is False
        assert page.has_previous is True

    def test_page_past_end_is_empty(self):
        page = paginate(list(range(5)), 4, 12)
        assert page.results == []
        assert page.total_pages == 1

    def test_page_below_one_is_rejected(self):
        with pytest.raises(ValueError):
            paginate([1, 2], 0, 12)

    def test_build_catalog_page_filters_then_slices(self):
        products = make_products(15) + [CatalogProduct(key='hidden', name='Hidden', stock=0)]
        page = build_catalog_page(products, CatalogQuery(page=2), 12)
        assert page.count == 15
        assert [p.key for p in page.results] == ['p12', 'p13', 'p14']


# ============== Facet Tests ==============

def test_category_facets_use_unfiltered_products_in_first_seen_order():
    products = [
        CatalogProduct(key='1', category='Pantry', stock=0),
        CatalogProduct(key='2', category='Kitchen', stock=1, active=False),
        CatalogProduct(key='3', category='', stock=1),
        CatalogProduct(key='4', category='Pantry', stock=1),
    ]
    assert category_facets(products) == ['Pantry', 'Kitchen']


# ============== Query State Tests ==============

class TestCatalogQuery:

    def test_changing_search_resets_page(self):
        query = CatalogQuery(page=3).update(search='mug')
        assert query.page == 1
        assert query.search == 'mug'

    def test_changing_category_resets_page(self):
        assert CatalogQuery(page=3).update(category='Kitchen').page == 1

    def test_page_change_keeps_filters(self):
        query = CatalogQuery(search='mug', category='Kitchen').update(page=2)
        assert query == CatalogQuery(search='mug', category='Kitchen', page=2)

    def test_clear_filters(self):
        query = CatalogQuery(search='mug', category='Kitchen', page=4).clear_filters()
        assert query == CatalogQuery()

    def test_params_skip_empty_filters(self):
        assert CatalogQuery(page=2).as_params() == {'page': 2}
        assert CatalogQuery(search='mug', category='Kitchen').as_params() == {
            'search': 'mug', 'category': 'Kitchen', 'page': 1
        }


# ============== WhatsApp Link Tests ==============

class TestWhatsAppLinks:

    def test_phone_reduced_to_digits(self):
        assert phone_digits('+54 9 (11) 5555-0101') == '5491155550101'

    def test_checkout_url(self):
        product = CatalogProduct(key='a', name='Coffee Mug', description='Ceramic', price=Decimal('50'), stock=3)
        url = build_checkout_url('+54 911', product)
        assert url.startswith('https://wa.me/54911?text=')
        message = unquote(url.split('?text=', 1)[1])
        assert '*Coffee Mug*' in message
        assert 'Price: $50.00' in message
        assert 'Available stock: 3 units' in message

    def test_checkout_url_without_number(self):
        product = CatalogProduct(key='a', name='Mug', stock=1)
        assert build_checkout_url('', product) is None
        assert build_checkout_url(None, product) is None

    def test_message_encoding_keeps_unreserved_marks(self):
        product = CatalogProduct(key='a', name="Hi! (mug)", stock=1)
        url = build_checkout_url('1', product)
        assert '%20' in url
        assert '(mug)' in url

    def test_share_url_has_no_recipient(self):
        store = SimpleNamespace(name='Corner Shop', description='Fresh', contact_number='555')
        url = build_share_url(store, 'https://shop.test/corner')
        assert url.startswith('https://wa.me/?text=')
        message = unquote(url.split('?text=', 1)[1])
        assert 'Corner Shop' in message
        assert 'https://shop.test/corner' in message
        assert 'Contact: 555' in message
