from django.urls import path
from . import views

urlpatterns = [
    path('', views.ProductStockListView.as_view(), name='stock-list'),
    path('low-stock/', views.low_stock_products, name='low-stock-products'),
    path('restock/', views.restock, name='stock-restock'),
    path('transactions/', views.StockTransactionListView.as_view(), name='stock-transaction-list'),
]
