"""
Pytest fixtures for storefront API tests.
Provides common test data and utilities for all test modules.
"""
import pytest
from decimal import Decimal
from datetime import timedelta
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from oauth2_provider.models import Application, AccessToken
from oauthlib.common import generate_token
from django.utils import timezone

User = get_user_model()


# ============== OAuth2 Application Fixture ==============

@pytest.fixture
def oauth_application(db):
    """Create OAuth2 application for testing - must match the name used in login_view"""
    return Application.objects.create(
        name='storefront-admin',
        client_type=Application.CLIENT_PUBLIC,
        authorization_grant_type=Application.GRANT_PASSWORD,
    )


# ============== Merchant Fixtures ==============

@pytest.fixture
def merchant(db):
    """Create a test merchant (its default store is created by signal)"""
    from users.models import Merchant
    return Merchant.objects.create(
        name='Test Merchant',
        code='SHOP001',
        contact_email='merchant@test.com',
        contact_phone='1234567890',
        is_active=True
    )


@pytest.fixture
def merchant2(db):
    """Create a second test merchant for isolation tests"""
    from users.models import Merchant
    return Merchant.objects.create(
        name='Second Merchant',
        code='SHOP002',
        contact_email='merchant2@test.com',
        is_active=True
    )


@pytest.fixture
def inactive_merchant(db):
    """Create an inactive merchant"""
    from users.models import Merchant
    return Merchant.objects.create(
        name='Inactive Merchant',
        code='INACTIVE001',
        is_active=False
    )


# ============== User Fixtures ==============

@pytest.fixture
def owner_user(db, merchant, oauth_application):
    """Create an owner belonging to a merchant"""
    return User.objects.create_user(
        username='owner',
        email='owner@test.com',
        password='testpass123',
        role=User.Role.OWNER,
        merchant=merchant
    )


@pytest.fixture
def staff_user(db, merchant, oauth_application):
    """Create a staff user"""
    return User.objects.create_user(
        username='staff',
        email='staff@test.com',
        password='testpass123',
        role=User.Role.STAFF,
        merchant=merchant
    )


@pytest.fixture
def viewer_user(db, merchant, oauth_application):
    """Create a viewer user"""
    return User.objects.create_user(
        username='viewer',
        email='viewer@test.com',
        password='testpass123',
        role=User.Role.VIEWER,
        merchant=merchant
    )


@pytest.fixture
def no_merchant_user(db, oauth_application):
    """Create a signed-in user without any merchant"""
    return User.objects.create_user(
        username='orphan',
        email='orphan@test.com',
        password='testpass123',
        role=User.Role.OWNER,
        merchant=None
    )


@pytest.fixture
def merchant2_owner(db, merchant2, oauth_application):
    """Create an owner for merchant2"""
    return User.objects.create_user(
        username='merchant2_owner',
        email='owner2@test.com',
        password='testpass123',
        role=User.Role.OWNER,
        merchant=merchant2
    )


# ============== Token Fixtures ==============

def create_access_token(user, application, scope='read write'):
    """Helper function to create access token"""
    expires = timezone.now() + timedelta(hours=1)
    return AccessToken.objects.create(
        user=user,
        application=application,
        token=generate_token(),
        expires=expires,
        scope=scope
    )


@pytest.fixture
def owner_token(owner_user, oauth_application):
    return create_access_token(owner_user, oauth_application)


@pytest.fixture
def staff_token(staff_user, oauth_application):
    return create_access_token(staff_user, oauth_application)


@pytest.fixture
def viewer_token(viewer_user, oauth_application):
    return create_access_token(viewer_user, oauth_application)


@pytest.fixture
def no_merchant_token(no_merchant_user, oauth_application):
    return create_access_token(no_merchant_user, oauth_application)


@pytest.fixture
def merchant2_owner_token(merchant2_owner, oauth_application):
    return create_access_token(merchant2_owner, oauth_application)


# ============== API Client Fixtures ==============

@pytest.fixture
def api_client():
    """Create API test client"""
    return APIClient()


@pytest.fixture
def owner_client(api_client, owner_token):
    """API client authenticated as owner"""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {owner_token.token}')
    return api_client


@pytest.fixture
def staff_client(api_client, staff_token):
    """API client authenticated as staff"""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {staff_token.token}')
    return api_client


@pytest.fixture
def viewer_client(api_client, viewer_token):
    """API client authenticated as viewer"""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {viewer_token.token}')
    return api_client


@pytest.fixture
def no_merchant_client(api_client, no_merchant_token):
    """API client authenticated as a user without merchant"""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {no_merchant_token.token}')
    return api_client


@pytest.fixture
def merchant2_client(api_client, merchant2_owner_token):
    """API client authenticated as merchant2 owner"""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {merchant2_owner_token.token}')
    return api_client


# ============== Store Fixtures ==============

@pytest.fixture
def store(db, merchant):
    """Default store of the test merchant, with a WhatsApp number"""
    from stores.models import Store
    store = Store.objects.get(merchant=merchant, is_default=True)
    store.name = 'Corner Shop'
    store.description = 'Fresh things every day'
    store.whatsapp = '+54 9 11 5555-0101'
    store.save()
    return store


@pytest.fixture
def merchant2_store(db, merchant2):
    from stores.models import Store
    return Store.objects.get(merchant=merchant2, is_default=True)


# ============== Supplier Fixtures ==============

@pytest.fixture
def supplier(db, merchant):
    from suppliers.models import Supplier
    return Supplier.objects.create(
        merchant=merchant,
        key='sup_acme',
        name='Acme Wholesale',
        contact_person='Ana',
        phone='555-0100',
        email='ana@acme.test'
    )


@pytest.fixture
def supplier2(db, merchant):
    from suppliers.models import Supplier
    return Supplier.objects.create(
        merchant=merchant,
        key='sup_globex',
        name='Globex Imports'
    )


@pytest.fixture
def merchant2_supplier(db, merchant2):
    from suppliers.models import Supplier
    return Supplier.objects.create(merchant=merchant2, key='sup_other', name='Other Supplier')


# ============== Product Fixtures ==============

@pytest.fixture
def product(db, store, supplier):
    """Visible product priced through sale_price"""
    from catalog.models import Product
    return Product.objects.create(
        store=store,
        key='prod_mug',
        code='MUG-01',
        name='Coffee Mug',
        description='Ceramic mug, 350ml',
        sale_price=Decimal('50.00'),
        stock=3,
        minimum_stock=1,
        category='Kitchen',
        supplier=supplier,
        images=['https://cdn.test/mug.jpg'],
        active=True
    )


@pytest.fixture
def out_of_stock_product(db, store, supplier2):
    """Legacy product priced through the old price field, no stock"""
    from catalog.models import Product
    return Product.objects.create(
        store=store,
        key='prod_tea',
        code='TEA-01',
        name='Green Tea',
        description='Loose leaf',
        legacy_price=Decimal('30.00'),
        stock=0,
        minimum_stock=2,
        legacy_type='Pantry',
        supplier=supplier2,
        active=None
    )


@pytest.fixture
def hidden_product(db, store, supplier):
    """Explicitly deactivated product"""
    from catalog.models import Product
    return Product.objects.create(
        store=store,
        key='prod_pan',
        code='PAN-01',
        name='Frying Pan',
        description='Cast iron',
        sale_price=Decimal('10.00'),
        stock=5,
        minimum_stock=1,
        category='Kitchen',
        supplier=supplier,
        active=False
    )


@pytest.fixture
def legacy_product(db, store):
    """Product written by an old client: type, price and image aliases only"""
    from catalog.models import Product
    return Product.objects.create(
        store=store,
        key='prod_old',
        name='Tea Towel',
        description='Cotton towel',
        legacy_price=Decimal('12.50'),
        stock=8,
        legacy_type='Textiles',
        legacy_image='https://cdn.test/towel.jpg',
        active=None
    )


@pytest.fixture
def products(product, out_of_stock_product, hidden_product):
    """Mug (visible), tea (no stock) and pan (inactive), in that order"""
    return [product, out_of_stock_product, hidden_product]


@pytest.fixture
def merchant2_product(db, merchant2_store):
    from catalog.models import Product
    return Product.objects.create(
        store=merchant2_store,
        key='prod_secret',
        code='SEC-01',
        name='Other Merchant Product',
        sale_price=Decimal('99.00'),
        stock=10,
        minimum_stock=1,
        category='Kitchen'
    )


# ============== Storage Fixtures ==============

@pytest.fixture
def media_root(settings, tmp_path):
    """Store uploads in a temporary directory"""
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path
