"""
Tests for the catalog module.
Tests for: Product model, admin product API, image uploads, public storefront API and export import.
"""
import json
import pytest
from decimal import Decimal
from unittest import mock
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework import status
from catalog.models import Product
from catalog.snapshot import load_snapshot
from stores.models import Store
from suppliers.models import Supplier


PRODUCTS_URL = '/api/catalog/products/'


def storefront_url(store, path=''):
    return f'/api/storefront/{store.slug}/{path}'


def product_payload(**overrides):
    payload = {
        'name': 'Teapot',
        'code': 'POT-01',
        'description': 'Glass teapot',
        'category': 'Kitchen',
        'sale_price': '25.00',
        'stock': 4,
        'minimum_stock': 1,
    }
    payload.update(overrides)
    return payload


def image_file(name='photo.png', content_type='image/png', size=100):
    return SimpleUploadedFile(name, b'\x89PNG' + b'0' * size, content_type=content_type)


# ============== Product Model Tests ==============

@pytest.mark.django_db
class TestProductModel:

    def test_generated_key(self, store):
        product = Product.objects.create(store=store, name='Plain', stock=1)
        assert product.key.startswith('prod_')
        assert len(product.key) == len('prod_') + 9

    def test_effective_values_resolve_legacy_fields(self, legacy_product):
        assert legacy_product.effective_price == Decimal('12.50')
        assert legacy_product.effective_category == 'Textiles'

    def test_as_catalog_product(self, legacy_product):
        record = legacy_product.as_catalog_product()
        assert record.key == 'prod_old'
        assert record.images == ('https://cdn.test/towel.jpg',)
        assert record.active is True
        assert record.is_visible

    def test_supplier_reference_is_key(self, product):
        assert product.to_record()['supplier'] == 'sup_acme'

    def test_is_low_stock(self, product, out_of_stock_product):
        assert product.is_low_stock is False
        assert out_of_stock_product.is_low_stock is True

    def test_deleting_supplier_keeps_products(self, product, supplier):
        supplier.delete()
        product.refresh_from_db()
        assert product.supplier is None


# ============== Catalog Version Tests ==============

@pytest.mark.django_db
class TestCatalogVersion:

    def test_product_save_bumps_version(self, store):
        before = store.catalog_version
        Product.objects.create(store=store, name='Plain', stock=1)
        store.refresh_from_db()
        assert store.catalog_version == before + 1

    def test_product_delete_bumps_version(self, product):
        store = product.store
        store.refresh_from_db()
        before = store.catalog_version
        product.delete()
        store.refresh_from_db()
        assert store.catalog_version == before + 1

    def test_snapshot_reports_version_and_order(self, products):
        store = products[0].store
        store.refresh_from_db()
        snapshot = load_snapshot(store)
        assert snapshot.version == store.catalog_version
        assert [p.key for p in snapshot.products] == ['prod_mug', 'prod_tea', 'prod_pan']
        assert snapshot.get('prod_tea').price == Decimal('30.00')
        assert snapshot.get('missing') is None
        assert list(snapshot.as_mapping()) == ['prod_mug', 'prod_tea', 'prod_pan']


# ============== Admin Product API Tests ==============

@pytest.mark.django_db
class TestProductAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(PRODUCTS_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_without_merchant_is_refused(self, no_merchant_client):
        response = no_merchant_client.get(PRODUCTS_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_is_paginated_and_scoped(self, owner_client, products, merchant2_product):
        response = owner_client.get(PRODUCTS_URL)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        keys = [item['key'] for item in response.data['results']]
        assert keys == ['prod_mug', 'prod_tea', 'prod_pan']
        assert 'prod_secret' not in keys

    def test_page_size_is_ten(self, owner_client, store):
        for i in range(12):
            Product.objects.create(store=store, name=f'Item {i}', stock=1)
        response = owner_client.get(PRODUCTS_URL)
        assert len(response.data['results']) == 10
        assert response.data['count'] == 12

    def test_search_matches_name_or_code(self, owner_client, products):
        response = owner_client.get(PRODUCTS_URL, {'search': 'tea-0'})
        assert [item['key'] for item in response.data['results']] == ['prod_tea']
        response = owner_client.get(PRODUCTS_URL, {'search': 'MUG'})
        assert [item['key'] for item in response.data['results']] == ['prod_mug']

    def test_filter_by_supplier_key(self, owner_client, products):
        response = owner_client.get(PRODUCTS_URL, {'supplier': 'sup_acme'})
        assert [item['key'] for item in response.data['results']] == ['prod_mug', 'prod_pan']

    def test_filter_by_effective_category(self, owner_client, products):
        response = owner_client.get(PRODUCTS_URL, {'category': 'Pantry'})
        assert [item['key'] for item in response.data['results']] == ['prod_tea']

    @pytest.mark.parametrize('params', [{'category': 'all'}, {'supplier': 'all'}, {'category': 'all', 'supplier': 'all'}])
    def test_all_means_no_filter(self, owner_client, products, params):
        response = owner_client.get(PRODUCTS_URL, params)
        assert response.data['count'] == 3

    def test_filter_by_active_flag(self, owner_client, products):
        response = owner_client.get(PRODUCTS_URL, {'is_active': 'true'})
        assert [item['key'] for item in response.data['results']] == ['prod_mug', 'prod_tea']
        response = owner_client.get(PRODUCTS_URL, {'is_active': 'false'})
        assert [item['key'] for item in response.data['results']] == ['prod_pan']

    def test_effective_fields_in_response(self, owner_client, out_of_stock_product):
        response = owner_client.get(f'{PRODUCTS_URL}{out_of_stock_product.id}/')
        assert response.data['effective_price'] == '30.00'
        assert response.data['effective_category'] == 'Pantry'
        assert response.data['supplier'] == 'sup_globex'

    def test_create_uses_default_store(self, owner_client, store, supplier):
        store.refresh_from_db()
        version = store.catalog_version
        response = owner_client.post(PRODUCTS_URL, product_payload(supplier='sup_acme'), format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['store'] == store.id
        assert response.data['key'].startswith('prod_')
        assert response.data['supplier'] == 'sup_acme'
        store.refresh_from_db()
        assert store.catalog_version == version + 1

    def test_staff_can_create(self, staff_client, store):
        response = staff_client.post(PRODUCTS_URL, product_payload(), format='json')
        assert response.status_code == status.HTTP_201_CREATED

    def test_viewer_cannot_create(self, viewer_client, store):
        response = viewer_client.post(PRODUCTS_URL, product_payload(), format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.parametrize('field', ['name', 'code', 'category', 'sale_price', 'stock', 'minimum_stock'])
    def test_required_fields(self, owner_client, store, field):
        payload = product_payload()
        del payload[field]
        response = owner_client.post(PRODUCTS_URL, payload, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    @pytest.mark.parametrize('field', ['sale_price', 'stock', 'minimum_stock'])
    def test_negative_numbers_rejected(self, owner_client, store, field):
        response = owner_client.post(PRODUCTS_URL, product_payload(**{field: -1}), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    def test_duplicate_key_rejected(self, owner_client, product):
        response = owner_client.post(PRODUCTS_URL, product_payload(key='prod_mug'), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'key' in response.data

    def test_duplicate_key_rejected_in_explicit_store(self, owner_client, product):
        response = owner_client.post(
            PRODUCTS_URL, product_payload(key='prod_mug', store=product.store_id), format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'key' in response.data

    def test_move_to_store_with_same_key_rejected(self, owner_client, product, merchant):
        outlet = Store.objects.create(merchant=merchant, slug='corner-outlet', name='Outlet')
        Product.objects.create(store=outlet, key='prod_mug', name='Outlet mug', stock=1)

        response = owner_client.patch(f'{PRODUCTS_URL}{product.id}/', {'store': outlet.id}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'store' in response.data
        product.refresh_from_db()
        assert product.store_id != outlet.id

    def test_move_to_another_store(self, owner_client, product, merchant):
        outlet = Store.objects.create(merchant=merchant, slug='corner-outlet', name='Outlet')
        response = owner_client.patch(f'{PRODUCTS_URL}{product.id}/', {'store': outlet.id}, format='json')
        assert response.status_code == status.HTTP_200_OK
        product.refresh_from_db()
        assert product.store_id == outlet.id

    def test_other_merchant_supplier_rejected(self, owner_client, store, merchant2_supplier):
        response = owner_client.post(PRODUCTS_URL, product_payload(supplier='sup_other'), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'supplier' in response.data

    def test_other_merchant_store_rejected(self, owner_client, store, merchant2_store):
        response = owner_client.post(PRODUCTS_URL, product_payload(store=merchant2_store.id), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'store' in response.data

    def test_partial_update(self, owner_client, product):
        response = owner_client.patch(f'{PRODUCTS_URL}{product.id}/', {'stock': 9}, format='json')
        assert response.status_code == status.HTTP_200_OK
        product.refresh_from_db()
        assert product.stock == 9

    def test_key_cannot_change(self, owner_client, product):
        response = owner_client.patch(f'{PRODUCTS_URL}{product.id}/', {'key': 'prod_new'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cannot_read_other_merchant_product(self, owner_client, merchant2_product):
        response = owner_client.get(f'{PRODUCTS_URL}{merchant2_product.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_only_owner_deletes(self, staff_client, product):
        response = staff_client.delete(f'{PRODUCTS_URL}{product.id}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Product.objects.filter(id=product.id).exists()

    def test_owner_deletes(self, owner_client, product):
        response = owner_client.delete(f'{PRODUCTS_URL}{product.id}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Product.objects.filter(id=product.id).exists()


# ============== Image Upload Tests ==============

@pytest.mark.django_db
class TestProductImageUpload:

    def test_upload_appends_urls(self, owner_client, product, media_root):
        response = owner_client.post(
            f'{PRODUCTS_URL}{product.id}/images/',
            {'files': [image_file('front.png'), image_file('back.png')]},
            format='multipart'
        )
        assert response.status_code == status.HTTP_200_OK
        images = response.data['images']
        assert images[0] == 'https://cdn.test/mug.jpg'
        assert len(images) == 3
        assert f'/media/products/{product.store_id}/' in images[1]
        assert images[1].endswith('_front.png')
        assert images[1].startswith('http://testserver/')

    def test_non_image_rejected(self, owner_client, product, media_root):
        response = owner_client.post(
            f'{PRODUCTS_URL}{product.id}/images/',
            {'files': [image_file('notes.txt', content_type='text/plain')]},
            format='multipart'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        product.refresh_from_db()
        assert product.images == ['https://cdn.test/mug.jpg']

    def test_oversized_image_rejected(self, owner_client, product, media_root, settings):
        settings.MAX_UPLOAD_SIZE = 50
        response = owner_client.post(
            f'{PRODUCTS_URL}{product.id}/images/',
            {'files': [image_file(size=100)]},
            format='multipart'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_storage_failure_is_bad_gateway(self, owner_client, product):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = OSError('bucket unavailable')
            response = owner_client.post(
                f'{PRODUCTS_URL}{product.id}/images/',
                {'files': [image_file()]},
                format='multipart'
            )
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert 'error' in response.data
        product.refresh_from_db()
        assert product.images == ['https://cdn.test/mug.jpg']

    def test_failed_batch_removes_saved_files(self, owner_client, product):
        saved_name = f'products/{product.store_id}/1_front.png'
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = [saved_name, OSError('bucket unavailable')]
            response = owner_client.post(
                f'{PRODUCTS_URL}{product.id}/images/',
                {'files': [image_file('front.png'), image_file('back.png')]},
                format='multipart'
            )
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        storage.delete.assert_called_once_with(saved_name)
        product.refresh_from_db()
        assert product.images == ['https://cdn.test/mug.jpg']

    def test_viewer_cannot_upload(self, viewer_client, product):
        response = viewer_client.post(
            f'{PRODUCTS_URL}{product.id}/images/',
            {'files': [image_file()]},
            format='multipart'
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


# ============== Public Storefront Tests ==============

@pytest.mark.django_db
class TestStorefrontAPI:

    def test_store_config(self, api_client, store):
        response = api_client.get(storefront_url(store))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Corner Shop'
        assert response.data['whatsapp'] == '+54 9 11 5555-0101'
        assert 'catalog_version' not in response.data

    def test_unknown_store(self, api_client, db):
        response = api_client.get('/api/storefront/nope/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_inactive_store(self, api_client, store):
        store.is_active = False
        store.save()
        response = api_client.get(storefront_url(store, 'catalog/'))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_catalog_shows_visible_products_only(self, api_client, products):
        store = products[0].store
        response = api_client.get(storefront_url(store, 'catalog/'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert [item['key'] for item in response.data['results']] == ['prod_mug']
        item = response.data['results'][0]
        assert item['price'] == '50.00'
        assert item['images'] == ['https://cdn.test/mug.jpg']
        assert item['whatsapp_url'].startswith('https://wa.me/5491155550101?text=')

    def test_catalog_reports_version(self, api_client, products):
        store = Store.objects.get(pk=products[0].store_id)
        response = api_client.get(storefront_url(store, 'catalog/'))
        assert response.data['version'] == store.catalog_version

    def test_categories_come_from_all_products(self, api_client, products):
        store = products[0].store
        response = api_client.get(storefront_url(store, 'catalog/'))
        assert response.data['categories'] == ['Kitchen', 'Pantry']

    def test_legacy_product_is_listed(self, api_client, legacy_product):
        response = api_client.get(storefront_url(legacy_product.store, 'catalog/'))
        item = response.data['results'][0]
        assert item['price'] == '12.50'
        assert item['category'] == 'Textiles'
        assert item['images'] == ['https://cdn.test/towel.jpg']

    def test_search_and_category(self, api_client, products, legacy_product):
        store = legacy_product.store
        response = api_client.get(storefront_url(store, 'catalog/'), {'search': 'COTTON'})
        assert [item['key'] for item in response.data['results']] == ['prod_old']
        response = api_client.get(storefront_url(store, 'catalog/'), {'category': 'kitchen'})
        assert response.data['results'] == []
        response = api_client.get(storefront_url(store, 'catalog/'), {'category': 'Kitchen'})
        assert [item['key'] for item in response.data['results']] == ['prod_mug']

    def test_pagination_of_twelve(self, api_client, store):
        for i in range(13):
            Product.objects.create(store=store, name=f'Item {i}', sale_price=Decimal('1.00'), stock=1, category='Misc')
        response = api_client.get(storefront_url(store, 'catalog/'), {'category': 'Misc'})
        assert len(response.data['results']) == 12
        assert response.data['total_pages'] == 2
        assert response.data['next'] == '?category=Misc&page=2'
        assert response.data['previous'] is None

        response = api_client.get(storefront_url(store, 'catalog/'), {'category': 'Misc', 'page': 2})
        assert [item['name'] for item in response.data['results']] == ['Item 12']
        assert response.data['next'] is None
        assert response.data['previous'] == '?category=Misc&page=1'

    def test_page_past_end_is_empty(self, api_client, products):
        response = api_client.get(storefront_url(products[0].store, 'catalog/'), {'page': 5})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'] == []
        assert response.data['count'] == 1

    def test_invalid_page(self, api_client, store):
        response = api_client.get(storefront_url(store, 'catalog/'), {'page': 0})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_no_whatsapp_link_without_number(self, api_client, product):
        Store.objects.filter(pk=product.store_id).update(whatsapp='')
        response = api_client.get(storefront_url(product.store, 'catalog/'))
        assert response.data['results'][0]['whatsapp_url'] is None

    def test_ignores_invalid_credentials(self, api_client, product):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = api_client.get(storefront_url(product.store, 'catalog/'))
        assert response.status_code == status.HTTP_200_OK

    def test_product_detail(self, api_client, product):
        response = api_client.get(storefront_url(product.store, 'products/prod_mug/'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Coffee Mug'

    @pytest.mark.parametrize('key', ['prod_tea', 'prod_pan', 'prod_missing'])
    def test_hidden_or_missing_product_detail(self, api_client, products, key):
        response = api_client.get(storefront_url(products[0].store, f'products/{key}/'))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_share_link(self, api_client, store):
        response = api_client.get(storefront_url(store, 'share/'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['catalog_url'] == f'http://testserver/api/storefront/{store.slug}/'
        assert response.data['whatsapp_url'].startswith('https://wa.me/?text=')

    def test_share_link_uses_storefront_template(self, api_client, store, settings):
        settings.STOREFRONT_URL_TEMPLATE = 'https://shop.test/{slug}'
        response = api_client.get(storefront_url(store, 'share/'))
        assert response.data['catalog_url'] == f'https://shop.test/{store.slug}'


# ============== Export Import Tests ==============

@pytest.mark.django_db
class TestImportStoreExport:

    def write_export(self, tmp_path, data):
        path = tmp_path / 'export.json'
        path.write_text(json.dumps(data), encoding='utf-8')
        return str(path)

    def test_imports_spanish_export(self, tmp_path, store, merchant):
        path = self.write_export(tmp_path, {
            'tiendas': {
                'uid1': {
                    'config': {'nombre': 'Tienda Sol', 'whatsapp': '5491100000000', 'horarios': '9 a 18'},
                    'productos': {
                        '-Nabc': {
                            'nombre': 'Yerba', 'precio': 30, 'stock': 4, 'tipo': 'Almacen',
                            'proveedor': '-Psup', 'imagen': 'https://cdn.test/yerba.jpg'
                        },
                        '-Ndef': {'nombre': 'Mate', 'precioVenta': 50, 'stock': 0, 'activo': False},
                    },
                },
            },
            'usuarios': {'uid1': {'proveedores': {'-Psup': {'nombre': 'Distribuidora', 'telefono': '555'}}}},
        })
        call_command('import_store_export', path, merchant='SHOP001')

        store.refresh_from_db()
        assert store.name == 'Tienda Sol'
        assert store.hours == '9 a 18'

        supplier = Supplier.objects.get(merchant=merchant, key='-Psup')
        assert supplier.phone == '555'

        yerba = Product.objects.get(store=store, key='-Nabc')
        assert yerba.legacy_price == Decimal('30')
        assert yerba.sale_price is None
        assert yerba.legacy_type == 'Almacen'
        assert yerba.supplier == supplier
        assert yerba.active is None

        record = yerba.as_catalog_product()
        assert record.price == Decimal('30')
        assert record.category == 'Almacen'
        assert record.images == ('https://cdn.test/yerba.jpg',)

        assert Product.objects.get(store=store, key='-Ndef').active is False

    def test_import_is_repeatable(self, tmp_path, store):
        path = self.write_export(tmp_path, {
            'stores': {'s1': {'products': {'k1': {'name': 'Mug', 'sale_price': 5, 'stock': 1}}}},
        })
        call_command('import_store_export', path, merchant='SHOP001')
        call_command('import_store_export', path, merchant='SHOP001')
        assert Product.objects.filter(store=store, key='k1').count() == 1

    def test_unknown_merchant(self, tmp_path, db):
        path = self.write_export(tmp_path, {})
        with pytest.raises(CommandError):
            call_command('import_store_export', path, merchant='NOPE')

    def test_ambiguous_export_requires_source_id(self, tmp_path, store):
        path = self.write_export(tmp_path, {'tiendas': {'a': {}, 'b': {}}})
        with pytest.raises(CommandError):
            call_command('import_store_export', path, merchant='SHOP001')
