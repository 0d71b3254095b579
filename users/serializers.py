from rest_framework import serializers
from .models import User, Merchant


class MerchantSerializer(serializers.ModelSerializer):
    """Minimal merchant representation nested in user payloads"""

    class Meta:
        model = Merchant
        fields = ['id', 'name', 'code']


class UserSerializer(serializers.ModelSerializer):
    merchant = MerchantSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name',
            'role', 'phone', 'merchant', 'date_joined', 'last_login'
        ]
        read_only_fields = fields
