from django.urls import path
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'suppliers'

router = SimpleRouter()
router.register(r'', views.SupplierViewSet, basename='supplier')

urlpatterns = [
    path('price-adjustment/preview/', views.price_adjustment_preview, name='price-adjustment-preview'),
    path('price-adjustment/', views.price_adjustment, name='price-adjustment'),
] + router.urls
