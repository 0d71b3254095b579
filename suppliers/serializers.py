from rest_framework import serializers
from stores.models import Store
from users.mixins import get_merchant_from_request
from .models import Supplier
from .pricing import ALL_SUPPLIERS, DECREASE, DIRECTIONS, HUNDRED, is_all_suppliers


def merchant_from_context(context):
    request = context.get('request')
    return get_merchant_from_request(request) if request else None


class SupplierSerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Supplier
        fields = [
            'id', 'key', 'name', 'contact_person', 'phone', 'email',
            'address', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        validators = []
        extra_kwargs = {
            'key': {'required': False},
        }

    def validate_key(self, value):
        if self.instance is not None:
            if value != self.instance.key:
                raise serializers.ValidationError('The supplier key cannot be changed.')
            return value
        merchant = merchant_from_context(self.context)
        if merchant is not None and Supplier.objects.filter(merchant=merchant, key=value).exists():
            raise serializers.ValidationError('A supplier with this key already exists.')
        return value


class PriceScopeSerializer(serializers.Serializer):
    """Which products of which store a price batch touches"""
    scope = serializers.CharField(required=False, default=ALL_SUPPLIERS)
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        merchant = merchant_from_context(self.context)
        if merchant is not None:
            self.fields['store'].queryset = Store.objects.filter(merchant=merchant)

    def validate_scope(self, value):
        if is_all_suppliers(value):
            return ALL_SUPPLIERS
        merchant = merchant_from_context(self.context)
        if not Supplier.objects.filter(merchant=merchant, key=value).exists():
            raise serializers.ValidationError(f'Supplier {value} does not exist.')
        return value


class PriceAdjustmentSerializer(PriceScopeSerializer):
    percentage = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=0)
    direction = serializers.ChoiceField(choices=DIRECTIONS)
    expected_version = serializers.IntegerField(required=False, min_value=0)

    def validate(self, attrs):
        if attrs['direction'] == DECREASE and attrs['percentage'] >= HUNDRED:
            raise serializers.ValidationError({'percentage': 'A decrease must be less than 100%.'})
        return attrs
