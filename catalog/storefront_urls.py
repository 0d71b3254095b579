from django.urls import path
from . import views

app_name = 'storefront'

urlpatterns = [
    path('<slug:slug>/', views.storefront_detail, name='storefront-detail'),
    path('<slug:slug>/catalog/', views.storefront_catalog, name='storefront-catalog'),
    path('<slug:slug>/products/<str:key>/', views.storefront_product, name='storefront-product'),
    path('<slug:slug>/share/', views.storefront_share, name='storefront-share'),
]
