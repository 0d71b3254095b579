from rest_framework import serializers
from catalog.models import Product
from .models import StockTransaction
from .utils import stock_level


class StockTransactionSerializer(serializers.ModelSerializer):
    product_key = serializers.CharField(source='product.key', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    performed_by_username = serializers.CharField(source='performed_by.username', read_only=True, default=None)
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = StockTransaction
        fields = [
            'id', 'product', 'product_key', 'product_name',
            'transaction_type', 'transaction_type_display', 'quantity',
            'quantity_before', 'quantity_after', 'notes',
            'performed_by', 'performed_by_username', 'store', 'store_name', 'created_at'
        ]
        read_only_fields = fields


class ProductStockSerializer(serializers.ModelSerializer):
    """Stock view of a product"""
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_level = serializers.SerializerMethodField()
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'key', 'code', 'name', 'store', 'store_name', 'stock',
            'minimum_stock', 'is_low_stock', 'stock_level', 'active'
        ]
        read_only_fields = fields

    def get_stock_level(self, obj):
        return stock_level(obj.stock)


class RestockSerializer(serializers.Serializer):
    """Add units to one product"""
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
