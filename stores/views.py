import logging
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from users.permissions import CanEditCatalog, CanDeleteRecords
from users.mixins import MerchantScopedMixin
from users.pagination import AdminPagination
from .models import Store
from .serializers import StoreSerializer, ImageUploadSerializer
from .uploads import UploadError, store_upload, store_logo_folder

logger = logging.getLogger(__name__)


class StoreViewSet(MerchantScopedMixin, viewsets.ModelViewSet):
    """Store configuration of the request merchant"""
    queryset = Store.objects.select_related('merchant').all()
    serializer_class = StoreSerializer
    pagination_class = AdminPagination
    permission_classes = [IsAuthenticated, CanEditCatalog, CanDeleteRecords]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'slug', 'address', 'phone', 'whatsapp']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def perform_create(self, serializer):
        store = serializer.save(merchant=self.get_merchant())
        logger.info(f"Store {store.slug} created for merchant {store.merchant_id}")

    def perform_update(self, serializer):
        store = serializer.save()
        logger.info(f"Store {store.slug} configuration saved")

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def logo(self, request, pk=None):
        """Upload a new logo and store its public URL"""
        store = self.get_object()
        upload = ImageUploadSerializer(data=request.data)
        upload.is_valid(raise_exception=True)

        try:
            url = store_upload(upload.validated_data['file'], store_logo_folder(store), request)
        except UploadError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        store.logo = url
        store.save(update_fields=['logo', 'updated_at'])
        return Response(StoreSerializer(store).data)
