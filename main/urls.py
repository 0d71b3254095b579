"""
URL configuration for the storefront API.

Admin endpoints require an OAuth2 bearer token; everything under
api/storefront/ is public and read-only.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


# Simple health check view - no database required
def health_check(request):
    """Health check endpoint for container orchestration."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'storefront-api'
    })


urlpatterns = [
    path('api/health/', health_check, name='health-check'),

    path('admin/', admin.site.urls),

    # OAuth2
    path('o/', include('oauth2_provider.urls', namespace='oauth2_provider')),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # API endpoints
    path('api/auth/', include('users.urls')),
    path('api/catalog/', include('catalog.urls')),
    path('api/suppliers/', include('suppliers.urls')),
    path('api/stock/', include('stock.urls')),
    path('api/storefront/', include('catalog.storefront_urls')),
    path('api/', include('stores.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
