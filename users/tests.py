"""
Tests for the users module.
Tests for: User and Merchant models, permissions, merchant scoping and authentication.
"""
import pytest
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from django.contrib.auth.models import AnonymousUser
from oauth2_provider.models import AccessToken
from stores.models import Store
from users.mixins import get_merchant_from_request, require_merchant_for_request
from users.models import User, Merchant
from users.permissions import CanEditCatalog, CanDeleteRecords
from users.serializers import UserSerializer


class MockRequest:
    def __init__(self, user, method='GET'):
        self.user = user
        self.method = method


# ============== Model Tests ==============

@pytest.mark.django_db
class TestUserModel:
    """Test cases for User model"""

    def test_create_user(self, merchant):
        user = User.objects.create_user(
            username='testuser',
            email='test@example.com',
            password='testpass123',
            role=User.Role.STAFF,
            merchant=merchant
        )

        assert user.role == User.Role.STAFF
        assert user.merchant == merchant
        assert user.check_password('testpass123')

    def test_default_role_is_viewer(self, merchant):
        user = User.objects.create_user(username='plain', password='testpass123', merchant=merchant)
        assert user.role == User.Role.VIEWER
        assert not user.can_edit

    def test_role_properties(self, owner_user, staff_user, viewer_user):
        assert owner_user.is_owner and owner_user.can_edit
        assert not staff_user.is_owner and staff_user.can_edit
        assert not viewer_user.is_owner and not viewer_user.can_edit

    def test_user_str_representation(self, owner_user):
        assert str(owner_user) == 'owner (Owner)'


@pytest.mark.django_db
class TestMerchantModel:

    def test_default_store_created(self, merchant):
        stores = Store.objects.filter(merchant=merchant)
        assert stores.count() == 1
        store = stores.get()
        assert store.is_default
        assert store.slug == 'shop001'
        assert store.name == 'Test Merchant'
        assert store.email == 'merchant@test.com'

    def test_slug_collision_gets_suffix(self, merchant):
        Store.objects.filter(merchant=merchant).update(slug='shop-x')
        other = Merchant.objects.create(name='Shop X', code='SHOP-X')
        assert Store.objects.get(merchant=other).slug == f'shop-x-{other.pk}'

    def test_saving_again_does_not_add_stores(self, merchant):
        merchant.name = 'Renamed'
        merchant.save()
        assert Store.objects.filter(merchant=merchant).count() == 1

    def test_str_representation(self, merchant):
        assert str(merchant) == 'Test Merchant (SHOP001)'


# ============== Serializer Tests ==============

@pytest.mark.django_db
def test_user_serializer_nests_merchant(owner_user, merchant):
    data = UserSerializer(owner_user).data
    assert data['role'] == 'OWNER'
    assert data['merchant'] == {'id': merchant.id, 'name': 'Test Merchant', 'code': 'SHOP001'}
    assert 'password' not in data


# ============== Permission Tests ==============

@pytest.mark.django_db
class TestPermissions:
    """Test cases for custom permissions"""

    def test_can_edit_catalog(self, owner_user, staff_user, viewer_user):
        permission = CanEditCatalog()
        assert permission.has_permission(MockRequest(owner_user, 'POST'), None)
        assert permission.has_permission(MockRequest(staff_user, 'PATCH'), None)
        assert not permission.has_permission(MockRequest(viewer_user, 'POST'), None)
        assert permission.has_permission(MockRequest(viewer_user, 'GET'), None)
        assert not permission.has_permission(MockRequest(AnonymousUser(), 'GET'), None)

    def test_can_delete_records(self, owner_user, staff_user, viewer_user):
        permission = CanDeleteRecords()
        assert permission.has_permission(MockRequest(owner_user, 'DELETE'), None)
        assert not permission.has_permission(MockRequest(staff_user, 'DELETE'), None)
        assert not permission.has_permission(MockRequest(viewer_user, 'DELETE'), None)
        assert permission.has_permission(MockRequest(viewer_user, 'GET'), None)


# ============== Merchant Scoping Tests ==============

@pytest.mark.django_db
class TestMerchantScoping:

    def test_merchant_from_request(self, owner_user, merchant):
        assert get_merchant_from_request(MockRequest(owner_user)) == merchant
        assert get_merchant_from_request(MockRequest(AnonymousUser())) is None

    def test_anonymous_is_not_authenticated(self):
        with pytest.raises(NotAuthenticated):
            require_merchant_for_request(MockRequest(AnonymousUser()))

    def test_user_without_merchant_is_denied(self, no_merchant_user):
        with pytest.raises(PermissionDenied):
            require_merchant_for_request(MockRequest(no_merchant_user))


# ============== Authentication API Tests ==============

@pytest.mark.django_db
class TestAuthenticationAPI:
    """Test authentication endpoints"""

    def test_login_success(self, api_client, owner_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'owner',
            'password': 'testpass123'
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access_token' in response.data
        assert 'refresh_token' in response.data
        assert response.data['token_type'] == 'Bearer'
        assert response.data['user']['username'] == 'owner'

    def test_login_creates_application_when_missing(self, api_client, merchant):
        User.objects.create_user(username='fresh', password='testpass123', merchant=merchant)
        response = api_client.post('/api/auth/login/', {'username': 'fresh', 'password': 'testpass123'})
        assert response.status_code == status.HTTP_200_OK
        token = AccessToken.objects.get(token=response.data['access_token'])
        assert token.application.name == 'storefront-admin'

    def test_login_invalid_credentials(self, api_client, owner_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'owner',
            'password': 'wrongpassword'
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_credentials(self, api_client):
        response = api_client.post('/api/auth/login/', {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_login_disabled_merchant(self, api_client, inactive_merchant, oauth_application):
        User.objects.create_user(
            username='disabled',
            password='testpass123',
            merchant=inactive_merchant
        )

        response = api_client.post('/api/auth/login/', {
            'username': 'disabled',
            'password': 'testpass123'
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_token_works_on_admin_api(self, api_client, owner_user):
        token = api_client.post('/api/auth/login/', {
            'username': 'owner',
            'password': 'testpass123'
        }).data['access_token']
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get('/api/auth/me/')
        assert response.status_code == status.HTTP_200_OK

    def test_logout_revokes_token(self, owner_client, owner_token):
        response = owner_client.post('/api/auth/logout/')
        assert response.status_code == status.HTTP_200_OK
        assert not AccessToken.objects.filter(pk=owner_token.pk).exists()

        response = owner_client.get('/api/auth/me/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_current_user(self, owner_client, owner_user):
        response = owner_client.get('/api/auth/me/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['username'] == owner_user.username
        assert response.data['merchant']['code'] == 'SHOP001'

    def test_current_user_requires_token(self, api_client):
        response = api_client.get('/api/auth/me/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
