"""
Tests for the stores module.
Tests for: store configuration API, logo upload, upload validation and store helpers.
"""
import pytest
from unittest import mock
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import serializers, status
from stores.models import Store
from stores.uploads import UploadError, store_upload, store_uploads, validate_image_upload
from stores.utils import bump_catalog_version, get_default_store


STORES_URL = '/api/stores/'


def logo_file(name='logo.png', content_type='image/png'):
    return SimpleUploadedFile(name, b'\x89PNG' + b'0' * 64, content_type=content_type)


# ============== Helper Tests ==============

@pytest.mark.django_db
class TestStoreUtils:

    def test_get_default_store(self, store, merchant):
        assert get_default_store(merchant) == store

    def test_falls_back_to_first_store(self, store, merchant):
        Store.objects.filter(pk=store.pk).update(is_default=False)
        assert get_default_store(merchant) == store

    def test_no_merchant(self):
        assert get_default_store(None) is None

    def test_bump_catalog_version(self, store):
        assert bump_catalog_version(store.pk) == store.catalog_version + 1

    def test_bump_missing_store(self, db):
        assert bump_catalog_version(987654) is None

    def test_contact_number_falls_back_to_phone(self, store):
        store.whatsapp = ''
        store.phone = '555-0101'
        assert store.contact_number == '555-0101'


# ============== Upload Tests ==============

class TestUploads:

    def test_accepts_image(self, settings):
        upload = logo_file()
        assert validate_image_upload(upload) is upload

    def test_rejects_non_image(self):
        with pytest.raises(serializers.ValidationError):
            validate_image_upload(logo_file('doc.pdf', 'application/pdf'))

    def test_rejects_oversized(self, settings):
        settings.MAX_UPLOAD_SIZE = 10
        with pytest.raises(serializers.ValidationError):
            validate_image_upload(logo_file())

    def test_storage_error_becomes_upload_error(self):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = OSError('unavailable')
            with pytest.raises(UploadError):
                store_upload(logo_file(), 'stores/1/logo')

    def test_timestamped_path(self):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = lambda path, upload: path
            storage.url.side_effect = lambda name: f'/media/{name}'
            url = store_upload(logo_file('my logo.png'), 'stores/7/logo')
        path = storage.save.call_args[0][0]
        assert path.startswith('stores/7/logo/')
        assert path.endswith('_my_logo.png')
        assert url == f'/media/{path}'

    def test_failed_batch_discards_saved_files(self):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = ['products/1/a.png', 'products/1/b.png', OSError('unavailable')]
            with pytest.raises(UploadError):
                store_uploads([logo_file('a.png'), logo_file('b.png'), logo_file('c.png')], 'products/1')
        deleted = [call.args[0] for call in storage.delete.call_args_list]
        assert deleted == ['products/1/a.png', 'products/1/b.png']

    def test_batch_returns_urls_in_order(self):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = lambda path, upload: path
            storage.url.side_effect = lambda name: f'/media/{name}'
            urls = store_uploads([logo_file('a.png'), logo_file('b.png')], 'products/1')
        assert [url.rsplit('_', 1)[1] for url in urls] == ['a.png', 'b.png']
        storage.delete.assert_not_called()


# ============== Store API Tests ==============

@pytest.mark.django_db
class TestStoreAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(STORES_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_without_merchant_is_refused(self, no_merchant_client):
        response = no_merchant_client.get(STORES_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_only_own_stores(self, owner_client, store, merchant2_store):
        response = owner_client.get(STORES_URL)
        assert response.status_code == status.HTTP_200_OK
        slugs = [item['slug'] for item in response.data['results']]
        assert slugs == [store.slug]

    def test_update_config(self, staff_client, store):
        response = staff_client.patch(f'{STORES_URL}{store.id}/', {
            'hours': 'Mon-Fri 9-18',
            'social_links': {'instagram': '@corner'},
        }, format='json')
        assert response.status_code == status.HTTP_200_OK
        store.refresh_from_db()
        assert store.hours == 'Mon-Fri 9-18'
        assert store.social_links == {'instagram': '@corner'}

    def test_catalog_version_is_read_only(self, owner_client, store):
        owner_client.patch(f'{STORES_URL}{store.id}/', {'catalog_version': 99}, format='json')
        store.refresh_from_db()
        assert store.catalog_version != 99

    def test_invalid_social_links(self, owner_client, store):
        response = owner_client.patch(f'{STORES_URL}{store.id}/', {
            'social_links': {'instagram': 42}
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invalid_whatsapp(self, owner_client, store):
        response = owner_client.patch(f'{STORES_URL}{store.id}/', {'whatsapp': 'call me'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_viewer_cannot_update(self, viewer_client, store):
        response = viewer_client.patch(f'{STORES_URL}{store.id}/', {'name': 'Nope'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_second_store(self, owner_client, merchant):
        response = owner_client.post(STORES_URL, {'slug': 'corner-outlet', 'name': 'Outlet'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert Store.objects.get(slug='corner-outlet').merchant == merchant

    def test_cannot_reach_other_merchant_store(self, owner_client, merchant2_store):
        response = owner_client.get(f'{STORES_URL}{merchant2_store.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_logo_upload(self, owner_client, store, media_root):
        response = owner_client.post(
            f'{STORES_URL}{store.id}/logo/',
            {'file': logo_file()},
            format='multipart'
        )
        assert response.status_code == status.HTTP_200_OK
        assert f'/media/stores/{store.id}/logo/' in response.data['logo']
        store.refresh_from_db()
        assert store.logo == response.data['logo']

    def test_logo_must_be_image(self, owner_client, store, media_root):
        response = owner_client.post(
            f'{STORES_URL}{store.id}/logo/',
            {'file': logo_file('logo.txt', 'text/plain')},
            format='multipart'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logo_storage_failure(self, owner_client, store):
        with mock.patch('stores.uploads.default_storage') as storage:
            storage.save.side_effect = OSError('unavailable')
            response = owner_client.post(
                f'{STORES_URL}{store.id}/logo/',
                {'file': logo_file()},
                format='multipart'
            )
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert 'error' in response.data
