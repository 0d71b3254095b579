import logging
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from catalog.models import Product
from users.mixins import MerchantScopedMixin, require_merchant_for_request
from users.pagination import AdminPagination
from users.permissions import CanEditCatalog
from .models import StockTransaction
from .serializers import StockTransactionSerializer, ProductStockSerializer, RestockSerializer
from .utils import filter_by_status, filter_by_level, low_stock_queryset

logger = logging.getLogger(__name__)


class ProductStockListView(MerchantScopedMixin, generics.ListAPIView):
    """Stock of every product, filterable by status and level"""
    queryset = Product.objects.select_related('store').all()
    serializer_class = ProductStockSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = AdminPagination
    merchant_field = 'store__merchant'

    def get_queryset(self):
        queryset = super().get_queryset()

        store = self.request.query_params.get('store', None)
        if store:
            queryset = queryset.filter(store_id=store)

        search = self.request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(code__icontains=search))

        # available: above minimum, low: at or below minimum
        queryset = filter_by_status(queryset, self.request.query_params.get('status', None))

        # out: 0, low: 1 to 5, normal: more than 5
        queryset = filter_by_level(queryset, self.request.query_params.get('level', None))

        return queryset.order_by('id')


class StockTransactionListView(MerchantScopedMixin, generics.ListAPIView):
    """List all stock transactions"""
    queryset = StockTransaction.objects.select_related('product', 'store', 'performed_by').all()
    serializer_class = StockTransactionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = AdminPagination

    def get_queryset(self):
        queryset = super().get_queryset()

        product_id = self.request.query_params.get('product', None)
        if product_id:
            queryset = queryset.filter(product_id=product_id)

        transaction_type = self.request.query_params.get('type', None)
        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type.upper())

        return queryset


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock_products(request):
    """Active products at or below their minimum stock"""
    merchant = require_merchant_for_request(request)
    products = low_stock_queryset(
        Product.objects.select_related('store').filter(store__merchant=merchant)
    ).order_by('id')

    serializer = ProductStockSerializer(products, many=True)
    return Response({
        'count': len(serializer.data),
        'products': serializer.data
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditCatalog])
def restock(request):
    """Add units to a product and record the movement"""
    merchant = require_merchant_for_request(request)
    serializer = RestockSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data

    with transaction.atomic():
        product = get_object_or_404(
            Product.objects.select_for_update().select_related('store'),
            id=data['product_id'],
            store__merchant=merchant
        )
        quantity_before = product.stock
        product.stock += data['quantity']
        product.save(update_fields=['stock', 'updated_at'])

        stock_transaction = StockTransaction.objects.create(
            merchant=merchant,
            store=product.store,
            product=product,
            transaction_type='IN',
            quantity=data['quantity'],
            quantity_before=quantity_before,
            quantity_after=product.stock,
            notes=data['notes'],
            performed_by=request.user
        )

    logger.info(f"Restocked {product.key}: {quantity_before} -> {product.stock}")
    return Response({
        'message': 'Stock updated successfully',
        'transaction': StockTransactionSerializer(stock_transaction).data,
        'product': ProductStockSerializer(product).data
    })
