from rest_framework import serializers
from stores.models import Store
from stores.uploads import validate_image_upload
from stores.utils import get_default_store
from suppliers.models import Supplier
from users.mixins import get_merchant_from_request
from .engine import ALL_CATEGORIES
from .models import Product
from .whatsapp import build_checkout_url


class ProductSerializer(serializers.ModelSerializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)
    supplier = serializers.SlugRelatedField(
        slug_field='key',
        queryset=Supplier.objects.all(),
        required=False,
        allow_null=True
    )
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False)
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    effective_category = serializers.CharField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'key', 'store', 'code', 'name', 'description',
            'sale_price', 'legacy_price', 'effective_price',
            'stock', 'minimum_stock', 'is_low_stock',
            'category', 'legacy_type', 'effective_category',
            'supplier', 'supplier_name', 'images', 'legacy_image',
            'featured', 'active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'legacy_price', 'legacy_type', 'legacy_image', 'created_at', 'updated_at']
        # Key uniqueness is checked in validate() so store can fall back to the default store
        validators = []
        extra_kwargs = {
            'key': {'required': False},
            'code': {'required': True, 'allow_blank': False},
            'category': {'required': True, 'allow_blank': False},
            'sale_price': {'required': True, 'allow_null': False, 'min_value': 0},
            'stock': {'required': True, 'min_value': 0},
            'minimum_stock': {'required': True, 'allow_null': False, 'min_value': 0},
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        merchant = get_merchant_from_request(request) if request else None
        if merchant is not None:
            self.fields['store'].queryset = Store.objects.filter(merchant=merchant)
            self.fields['supplier'].queryset = Supplier.objects.filter(merchant=merchant)

    def validate_key(self, value):
        if self.instance is not None and value != self.instance.key:
            raise serializers.ValidationError('The product key cannot be changed.')
        return value

    def default_store(self):
        request = self.context.get('request')
        return get_default_store(get_merchant_from_request(request)) if request else None

    def validate(self, attrs):
        if self.instance is None:
            store = attrs.get('store') or self.default_store()
            key = attrs.get('key')
            field = 'key'
        else:
            store = attrs.get('store', self.instance.store)
            key = self.instance.key
            field = 'store'
        if store is not None and key:
            duplicates = Product.objects.filter(store=store, key=key)
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError({field: 'A product with this key already exists in the store.'})
        return attrs


class ProductImagesUploadSerializer(serializers.Serializer):
    files = serializers.ListField(child=serializers.FileField(), allow_empty=False)

    def validate_files(self, value):
        return [validate_image_upload(upload) for upload in value]


class CatalogQuerySerializer(serializers.Serializer):
    """Query string of the public catalog listing"""
    search = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default='')
    category = serializers.CharField(required=False, allow_blank=True, default=ALL_CATEGORIES)
    page = serializers.IntegerField(required=False, min_value=1, default=1)


class CatalogProductSerializer(serializers.Serializer):
    """Public view of a normalized product"""
    key = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    stock = serializers.IntegerField()
    category = serializers.CharField()
    images = serializers.ListField(child=serializers.CharField())
    featured = serializers.BooleanField()
    whatsapp_url = serializers.SerializerMethodField()

    def get_whatsapp_url(self, product):
        store = self.context.get('store')
        if store is None:
            return None
        return build_checkout_url(store.whatsapp, product)
