from rest_framework import serializers
from .models import Store
from .uploads import validate_image_upload


class StoreSerializer(serializers.ModelSerializer):
    merchant_name = serializers.CharField(source='merchant.name', read_only=True)

    class Meta:
        model = Store
        fields = [
            'id', 'merchant', 'merchant_name', 'slug', 'name', 'description',
            'phone', 'whatsapp', 'email', 'address', 'hours', 'logo',
            'social_links', 'is_active', 'is_default', 'catalog_version',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['merchant', 'is_default', 'catalog_version', 'created_at', 'updated_at']

    def validate_social_links(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Must be a mapping of platform name to handle or URL.')
        for platform, handle in value.items():
            if not isinstance(handle, str):
                raise serializers.ValidationError(f'Handle for {platform} must be a string.')
        return value

    def validate_whatsapp(self, value):
        if value and not any(ch.isdigit() for ch in value):
            raise serializers.ValidationError('WhatsApp number must contain digits.')
        return value


class StorefrontSerializer(serializers.ModelSerializer):
    """Public, read-only store configuration"""

    class Meta:
        model = Store
        fields = [
            'slug', 'name', 'description', 'phone', 'whatsapp', 'email',
            'address', 'hours', 'logo', 'social_links'
        ]
        read_only_fields = fields


class ImageUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        return validate_image_upload(value)
