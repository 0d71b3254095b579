"""
Tests for the stock module.
Tests for: stock listing filters, low stock report, restocking, transaction history and the low stock alert task.
"""
import pytest
from unittest import mock
from django.core import mail
from rest_framework import status
from catalog.models import Product
from stock.models import StockTransaction
from stock.tasks import check_low_stock
from stock.utils import stock_level
from users.models import Merchant


STOCK_URL = '/api/stock/'
LOW_STOCK_URL = '/api/stock/low-stock/'
RESTOCK_URL = '/api/stock/restock/'
TRANSACTIONS_URL = '/api/stock/transactions/'


def keys(response):
    return [item['key'] for item in response.data['results']]


@pytest.fixture
def stocked_products(store):
    """Stock 0, 3 and 12 against minimums of 2, 5 and 4"""
    return [
        Product.objects.create(store=store, key='k_out', name='Out', stock=0, minimum_stock=2),
        Product.objects.create(store=store, key='k_low', name='Low', stock=3, minimum_stock=5),
        Product.objects.create(store=store, key='k_ok', name='Plenty', stock=12, minimum_stock=4),
    ]


# ============== Stock Level Tests ==============

@pytest.mark.parametrize('stock, level', [(0, 'out'), (1, 'low'), (5, 'low'), (6, 'normal')])
def test_stock_level(stock, level):
    assert stock_level(stock) == level


# ============== Stock List Tests ==============

@pytest.mark.django_db
class TestStockList:

    def test_requires_authentication(self, api_client):
        response = api_client.get(STOCK_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_all(self, viewer_client, stocked_products, merchant2_product):
        response = viewer_client.get(STOCK_URL)
        assert response.status_code == status.HTTP_200_OK
        assert keys(response) == ['k_out', 'k_low', 'k_ok']
        assert response.data['results'][0]['stock_level'] == 'out'

    def test_status_available(self, owner_client, stocked_products):
        response = owner_client.get(STOCK_URL, {'status': 'available'})
        assert keys(response) == ['k_ok']

    def test_status_low(self, owner_client, stocked_products):
        response = owner_client.get(STOCK_URL, {'status': 'low'})
        assert keys(response) == ['k_out', 'k_low']

    def test_missing_minimum_counts_as_zero(self, owner_client, store):
        Product.objects.create(store=store, key='k_nomin', name='No minimum', stock=0)
        response = owner_client.get(STOCK_URL, {'status': 'low'})
        assert keys(response) == ['k_nomin']

    @pytest.mark.parametrize('level, expected', [
        ('out', ['k_out']),
        ('low', ['k_low']),
        ('normal', ['k_ok']),
    ])
    def test_level_filter(self, owner_client, stocked_products, level, expected):
        response = owner_client.get(STOCK_URL, {'level': level})
        assert keys(response) == expected

    def test_filters_combine(self, owner_client, stocked_products):
        response = owner_client.get(STOCK_URL, {'status': 'low', 'level': 'low'})
        assert keys(response) == ['k_low']

    def test_page_size_is_ten(self, owner_client, store):
        for i in range(11):
            Product.objects.create(store=store, name=f'Item {i}', stock=i)
        response = owner_client.get(STOCK_URL)
        assert response.data['count'] == 11
        assert len(response.data['results']) == 10


# ============== Low Stock Tests ==============

@pytest.mark.django_db
class TestLowStock:

    def test_low_stock_products(self, owner_client, stocked_products):
        response = owner_client.get(LOW_STOCK_URL)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert [item['key'] for item in response.data['products']] == ['k_out', 'k_low']

    def test_inactive_products_excluded(self, owner_client, stocked_products):
        Product.objects.filter(key='k_out').update(active=False)
        response = owner_client.get(LOW_STOCK_URL)
        assert [item['key'] for item in response.data['products']] == ['k_low']

    def test_user_without_merchant_is_refused(self, no_merchant_client):
        response = no_merchant_client.get(LOW_STOCK_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN


# ============== Restock Tests ==============

@pytest.mark.django_db
class TestRestock:

    def test_restock_adds_units_and_records_transaction(self, staff_client, staff_user, product):
        response = staff_client.post(RESTOCK_URL, {
            'product_id': product.id, 'quantity': 7, 'notes': 'Weekly delivery'
        }, format='json')
        assert response.status_code == status.HTTP_200_OK
        product.refresh_from_db()
        assert product.stock == 10

        movement = StockTransaction.objects.get(product=product)
        assert movement.transaction_type == 'IN'
        assert movement.quantity_before == 3
        assert movement.quantity_after == 10
        assert movement.performed_by == staff_user
        assert movement.merchant == product.store.merchant
        assert response.data['product']['stock'] == 10

    def test_restock_bumps_catalog_version(self, owner_client, product):
        store = product.store
        store.refresh_from_db()
        version = store.catalog_version
        owner_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': 1}, format='json')
        store.refresh_from_db()
        assert store.catalog_version == version + 1

    @pytest.mark.parametrize('quantity', [0, -3])
    def test_quantity_must_be_positive(self, owner_client, product, quantity):
        response = owner_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': quantity}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        product.refresh_from_db()
        assert product.stock == 3

    def test_viewer_cannot_restock(self, viewer_client, product):
        response = viewer_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': 1}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_other_merchant_product_not_found(self, owner_client, merchant2_product):
        response = owner_client.post(RESTOCK_URL, {
            'product_id': merchant2_product.id, 'quantity': 1
        }, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND
        merchant2_product.refresh_from_db()
        assert merchant2_product.stock == 10

    def test_failed_transaction_record_rolls_back_stock(self, owner_client, product):
        with mock.patch('stock.views.StockTransaction.objects.create', side_effect=RuntimeError('db down')):
            with pytest.raises(RuntimeError):
                owner_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': 5}, format='json')
        product.refresh_from_db()
        assert product.stock == 3


# ============== Transaction History Tests ==============

@pytest.mark.django_db
class TestTransactionHistory:

    def test_lists_own_transactions_newest_first(self, owner_client, product):
        owner_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': 1}, format='json')
        owner_client.post(RESTOCK_URL, {'product_id': product.id, 'quantity': 2}, format='json')

        response = owner_client.get(TRANSACTIONS_URL)
        assert response.status_code == status.HTTP_200_OK
        assert [item['quantity'] for item in response.data['results']] == [2, 1]
        assert response.data['results'][0]['product_key'] == 'prod_mug'

    def test_other_merchant_sees_nothing(self, merchant2_client, product, staff_user):
        StockTransaction.objects.create(
            merchant=product.store.merchant,
            store=product.store,
            product=product,
            transaction_type='IN',
            quantity=1,
            quantity_before=3,
            quantity_after=4,
            performed_by=staff_user
        )
        response = merchant2_client.get(TRANSACTIONS_URL)
        assert response.data['count'] == 0


# ============== Low Stock Task Tests ==============

@pytest.mark.django_db
class TestCheckLowStockTask:

    def test_emails_merchant_contact(self, stocked_products, merchant):
        summary = check_low_stock()

        assert summary['alerts_sent'] == 1
        assert summary['low_stock'][stocked_products[0].store.slug] == ['k_out', 'k_low']
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['merchant@test.com']
        assert 'Out' in mail.outbox[0].body
        assert 'Plenty' not in mail.outbox[0].body

    def test_no_alert_without_low_stock(self, product):
        summary = check_low_stock()
        assert summary['alerts_sent'] == 0
        assert len(mail.outbox) == 0

    def test_falls_back_to_store_email(self, store):
        Merchant.objects.filter(pk=store.merchant_id).update(contact_email='')
        store.email = 'shop@test.com'
        store.save()
        Product.objects.create(store=store, name='Empty', stock=0, minimum_stock=1)
        check_low_stock()
        assert mail.outbox[0].to == ['shop@test.com']

    def test_skips_inactive_stores(self, store):
        Product.objects.create(store=store, name='Empty', stock=0, minimum_stock=1)
        store.is_active = False
        store.save()
        summary = check_low_stock()
        assert summary['stores_checked'] == 0

    def test_mail_failure_is_logged_not_raised(self, stocked_products):
        with mock.patch('stock.tasks.send_mail', side_effect=ConnectionError('smtp down')):
            summary = check_low_stock()
        assert summary['alerts_sent'] == 0
