"""
Tests for bulk price adjustment: factor, scope, rounding and the all-or-nothing write.
"""
import pytest
from decimal import Decimal
from unittest import mock
from catalog.models import Product
from catalog.records import CatalogProduct, normalize_products
from stores.models import Store
from suppliers.pricing import (
    ALL_SUPPLIERS, DECREASE, INCREASE, PriceAdjustmentError, StaleCatalogError,
    adjust_prices, build_price_batch, compute_factor, count_affected, round_price
)


# ============== Pure Computation Tests ==============

class TestComputeFactor:

    def test_increase(self):
        assert compute_factor(20, INCREASE) == Decimal('1.2')

    def test_decrease(self):
        assert compute_factor(Decimal('12.5'), DECREASE) == Decimal('0.875')

    def test_zero_percent_is_identity(self):
        assert compute_factor(0, INCREASE) == 1
        assert compute_factor(0, DECREASE) == 1

    @pytest.mark.parametrize('percentage', [100, 150])
    def test_decrease_of_hundred_or_more_rejected(self, percentage):
        with pytest.raises(PriceAdjustmentError):
            compute_factor(percentage, DECREASE)

    def test_large_increase_allowed(self):
        assert compute_factor(150, INCREASE) == Decimal('2.5')

    def test_negative_percentage_rejected(self):
        with pytest.raises(PriceAdjustmentError):
            compute_factor(-5, INCREASE)

    def test_unknown_direction_rejected(self):
        with pytest.raises(PriceAdjustmentError):
            compute_factor(5, 'sideways')


class TestPriceBatch:

    def reference_products(self):
        return normalize_products({
            'A': {'sale_price': 50, 'stock': 3, 'active': True, 'supplier': 'sup_1'},
            'B': {'price': 30, 'stock': 0, 'supplier': 'sup_2'},
            'C': {'sale_price': 10, 'stock': 5, 'active': False, 'supplier': 'sup_1'},
        })

    def test_all_scope_ignores_visibility(self):
        batch = build_price_batch(self.reference_products(), ALL_SUPPLIERS, 10, INCREASE)
        assert {change.key: change.new_price for change in batch} == {
            'A': Decimal('55.00'), 'B': Decimal('33.00'), 'C': Decimal('11.00')
        }

    def test_supplier_scope(self):
        batch = build_price_batch(self.reference_products(), 'sup_1', 10, DECREASE)
        assert [(change.key, change.new_price) for change in batch] == [
            ('A', Decimal('45.00')), ('C', Decimal('9.00'))
        ]

    def test_count_matches_batch(self):
        products = self.reference_products()
        assert count_affected(products, ALL_SUPPLIERS) == 3
        assert count_affected(products, 'sup_2') == 1
        assert count_affected(products, 'sup_none') == 0

    def test_missing_price_stays_zero(self):
        batch = build_price_batch([CatalogProduct(key='x')], ALL_SUPPLIERS, 50, INCREASE)
        assert batch[0].new_price == Decimal('0.00')

    def test_rounding_is_half_up(self):
        assert round_price(Decimal('10.005')) == Decimal('10.01')
        assert round_price(Decimal('10.004')) == Decimal('10.00')
        batch = build_price_batch([CatalogProduct(key='x', price=Decimal('0.15'))], ALL_SUPPLIERS, 10, INCREASE)
        assert batch[0].new_price == Decimal('0.17')


# ============== Persistence Tests ==============

@pytest.mark.django_db
class TestAdjustPrices:

    def test_applies_batch_as_sale_price(self, products):
        store = products[0].store
        result = adjust_prices(store, ALL_SUPPLIERS, 10, INCREASE)
        assert result.updated == 3
        prices = dict(Product.objects.filter(store=store).values_list('key', 'sale_price'))
        assert prices == {
            'prod_mug': Decimal('55.00'),
            'prod_tea': Decimal('33.00'),
            'prod_pan': Decimal('11.00'),
        }

    def test_legacy_price_left_in_place(self, out_of_stock_product):
        adjust_prices(out_of_stock_product.store, ALL_SUPPLIERS, 10, INCREASE)
        out_of_stock_product.refresh_from_db()
        assert out_of_stock_product.legacy_price == Decimal('30.00')
        assert out_of_stock_product.effective_price == Decimal('33.00')

    def test_supplier_scope_only_touches_its_products(self, products):
        store = products[0].store
        result = adjust_prices(store, 'sup_globex', 50, DECREASE)
        assert result.updated == 1
        prices = dict(Product.objects.filter(store=store).values_list('key', 'sale_price'))
        assert prices['prod_tea'] == Decimal('15.00')
        assert prices['prod_mug'] == Decimal('50.00')

    def test_returns_new_version(self, products):
        store = products[0].store
        result = adjust_prices(store, ALL_SUPPLIERS, 5, INCREASE)
        assert result.version == Store.objects.get(pk=store.pk).catalog_version

    def test_failure_mid_batch_rolls_back_everything(self, products):
        store = products[0].store
        original_save = Product.save
        calls = {'count': 0}

        def failing_save(self, *args, **kwargs):
            calls['count'] += 1
            if calls['count'] == 2:
                raise RuntimeError('write failed')
            return original_save(self, *args, **kwargs)

        with mock.patch.object(Product, 'save', failing_save):
            with pytest.raises(RuntimeError):
                adjust_prices(store, ALL_SUPPLIERS, 10, INCREASE)

        prices = dict(Product.objects.filter(store=store).values_list('key', 'sale_price'))
        assert prices == {
            'prod_mug': Decimal('50.00'),
            'prod_tea': None,
            'prod_pan': Decimal('10.00'),
        }

    def test_stale_version_rejected_without_writes(self, products):
        store = Store.objects.get(pk=products[0].store_id)
        stale = store.catalog_version - 1
        with pytest.raises(StaleCatalogError) as excinfo:
            adjust_prices(store, ALL_SUPPLIERS, 10, INCREASE, expected_version=stale)
        assert excinfo.value.current_version == store.catalog_version
        assert Product.objects.get(key='prod_mug').sale_price == Decimal('50.00')

    def test_matching_version_applies(self, products):
        store = Store.objects.get(pk=products[0].store_id)
        result = adjust_prices(store, ALL_SUPPLIERS, 10, INCREASE, expected_version=store.catalog_version)
        assert result.updated == 3

    def test_other_store_untouched(self, products, merchant2_product):
        adjust_prices(products[0].store, ALL_SUPPLIERS, 10, INCREASE)
        merchant2_product.refresh_from_db()
        assert merchant2_product.sale_price == Decimal('99.00')
