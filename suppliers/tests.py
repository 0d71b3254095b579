"""
Tests for the suppliers module.
Tests for: Supplier model, supplier CRUD, product counts, price adjustment preview and apply.
"""
import pytest
from decimal import Decimal
from rest_framework import status
from catalog.models import Product
from stores.models import Store
from suppliers.models import Supplier


SUPPLIERS_URL = '/api/suppliers/'
PREVIEW_URL = '/api/suppliers/price-adjustment/preview/'
ADJUST_URL = '/api/suppliers/price-adjustment/'


# ============== Supplier Model Tests ==============

@pytest.mark.django_db
class TestSupplierModel:

    def test_generated_key(self, merchant):
        supplier = Supplier.objects.create(merchant=merchant, name='Fresh Farms')
        assert supplier.key.startswith('sup_')
        assert str(supplier) == 'Fresh Farms'

    def test_same_key_allowed_for_different_merchants(self, supplier, merchant2):
        other = Supplier.objects.create(merchant=merchant2, key=supplier.key, name='Copy')
        assert other.pk != supplier.pk


# ============== Supplier API Tests ==============

@pytest.mark.django_db
class TestSupplierAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(SUPPLIERS_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_without_merchant_is_refused(self, no_merchant_client):
        response = no_merchant_client.get(SUPPLIERS_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_with_product_counts(self, owner_client, products, merchant2_supplier):
        response = owner_client.get(SUPPLIERS_URL)
        assert response.status_code == status.HTTP_200_OK
        counts = {item['key']: item['product_count'] for item in response.data['results']}
        assert counts == {'sup_acme': 2, 'sup_globex': 1}

    def test_page_size_is_ten(self, owner_client, merchant):
        for i in range(11):
            Supplier.objects.create(merchant=merchant, name=f'Supplier {i}')
        response = owner_client.get(SUPPLIERS_URL)
        assert response.data['count'] == 11
        assert len(response.data['results']) == 10

    def test_create(self, staff_client, merchant):
        response = staff_client.post(SUPPLIERS_URL, {
            'name': 'Fresh Farms',
            'contact_person': 'Luis',
            'phone': '555-0199',
            'email': 'luis@farms.test',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['key'].startswith('sup_')
        assert Supplier.objects.get(key=response.data['key']).merchant == merchant

    def test_duplicate_key_rejected(self, owner_client, supplier):
        response = owner_client.post(SUPPLIERS_URL, {'name': 'Again', 'key': 'sup_acme'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'key' in response.data

    def test_viewer_cannot_create(self, viewer_client, merchant):
        response = viewer_client.post(SUPPLIERS_URL, {'name': 'Nope'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_update(self, owner_client, supplier):
        response = owner_client.patch(f'{SUPPLIERS_URL}{supplier.id}/', {'phone': '555-0000'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        supplier.refresh_from_db()
        assert supplier.phone == '555-0000'

    def test_cannot_see_other_merchant_supplier(self, owner_client, merchant2_supplier):
        response = owner_client.get(f'{SUPPLIERS_URL}{merchant2_supplier.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_staff_cannot_delete(self, staff_client, supplier):
        response = staff_client.delete(f'{SUPPLIERS_URL}{supplier.id}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_keeps_products(self, owner_client, product, supplier):
        response = owner_client.delete(f'{SUPPLIERS_URL}{supplier.id}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        product.refresh_from_db()
        assert product.supplier is None


# ============== Price Adjustment API Tests ==============

@pytest.mark.django_db
class TestPriceAdjustmentAPI:

    def test_preview_counts_all(self, viewer_client, products):
        response = viewer_client.get(PREVIEW_URL)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['affected'] == 3
        assert response.data['scope'] == 'all'
        store = Store.objects.get(pk=products[0].store_id)
        assert response.data['version'] == store.catalog_version

    def test_preview_by_supplier(self, owner_client, products):
        response = owner_client.get(PREVIEW_URL, {'scope': 'sup_acme'})
        assert response.data['affected'] == 2

    def test_preview_unknown_supplier(self, owner_client, products, merchant2_supplier):
        response = owner_client.get(PREVIEW_URL, {'scope': 'sup_other'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_apply_increase(self, owner_client, products):
        response = owner_client.post(ADJUST_URL, {
            'scope': 'all', 'percentage': '10', 'direction': 'increase'
        }, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['updated'] == 3
        assert Decimal(response.data['factor']) == Decimal('1.1')
        prices = dict(Product.objects.values_list('key', 'sale_price'))
        assert prices == {
            'prod_mug': Decimal('55.00'),
            'prod_tea': Decimal('33.00'),
            'prod_pan': Decimal('11.00'),
        }
        store = Store.objects.get(pk=products[0].store_id)
        assert response.data['version'] == store.catalog_version

    def test_apply_to_supplier(self, staff_client, products):
        response = staff_client.post(ADJUST_URL, {
            'scope': 'sup_acme', 'percentage': '20', 'direction': 'decrease'
        }, format='json')
        assert response.data['updated'] == 2
        prices = dict(Product.objects.values_list('key', 'sale_price'))
        assert prices['prod_mug'] == Decimal('40.00')
        assert prices['prod_pan'] == Decimal('8.00')
        assert prices['prod_tea'] is None

    def test_decrease_of_hundred_rejected(self, owner_client, products):
        response = owner_client.post(ADJUST_URL, {
            'percentage': '100', 'direction': 'decrease'
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'percentage' in response.data
        assert Product.objects.get(key='prod_mug').sale_price == Decimal('50.00')

    def test_negative_percentage_rejected(self, owner_client, products):
        response = owner_client.post(ADJUST_URL, {
            'percentage': '-5', 'direction': 'increase'
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invalid_direction_rejected(self, owner_client, products):
        response = owner_client.post(ADJUST_URL, {
            'percentage': '5', 'direction': 'up'
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_viewer_cannot_apply(self, viewer_client, products):
        response = viewer_client.post(ADJUST_URL, {
            'percentage': '5', 'direction': 'increase'
        }, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_stale_preview_is_conflict(self, owner_client, products):
        version = owner_client.get(PREVIEW_URL).data['version']
        Product.objects.filter(key='prod_mug').get().save()

        response = owner_client.post(ADJUST_URL, {
            'percentage': '10', 'direction': 'increase', 'expected_version': version
        }, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['version'] == version + 1
        assert Product.objects.get(key='prod_mug').sale_price == Decimal('50.00')

    def test_fresh_preview_applies(self, owner_client, products):
        version = owner_client.get(PREVIEW_URL).data['version']
        response = owner_client.post(ADJUST_URL, {
            'percentage': '10', 'direction': 'increase', 'expected_version': version
        }, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['version'] == version + 3

    def test_other_merchant_untouched(self, merchant2_client, products, merchant2_product):
        response = merchant2_client.post(ADJUST_URL, {
            'percentage': '10', 'direction': 'increase'
        }, format='json')
        assert response.data['updated'] == 1
        assert Product.objects.get(key='prod_mug').sale_price == Decimal('50.00')
