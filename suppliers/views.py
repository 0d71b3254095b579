import logging
from django.db.models import Count
from rest_framework import viewsets, filters, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from catalog.snapshot import load_snapshot
from stores.utils import get_default_store
from users.mixins import MerchantScopedMixin, require_merchant_for_request
from users.pagination import AdminPagination
from users.permissions import CanEditCatalog, CanDeleteRecords
from .models import Supplier
from .pricing import StaleCatalogError, PriceAdjustmentError, adjust_prices, count_affected
from .serializers import SupplierSerializer, PriceScopeSerializer, PriceAdjustmentSerializer

logger = logging.getLogger(__name__)


class SupplierViewSet(MerchantScopedMixin, viewsets.ModelViewSet):
    """Suppliers of the request merchant with their product counts"""
    queryset = Supplier.objects.annotate(product_count=Count('products')).order_by('id')
    serializer_class = SupplierSerializer
    permission_classes = [IsAuthenticated, CanEditCatalog, CanDeleteRecords]
    pagination_class = AdminPagination
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'contact_person', 'email', 'phone']
    ordering_fields = ['name', 'created_at', 'product_count']

    def perform_create(self, serializer):
        supplier = serializer.save(merchant=self.get_merchant())
        logger.info(f"Supplier {supplier.key} created for merchant {supplier.merchant_id}")

    def perform_destroy(self, instance):
        # Products keep existing without a supplier
        logger.info(f"Supplier {instance.key} deleted")
        instance.delete()


def resolve_target_store(merchant, validated_data):
    store = validated_data.get('store') or get_default_store(merchant)
    if store is None:
        raise ValidationError({'store': 'The merchant has no store.'})
    return store


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def price_adjustment_preview(request):
    """Number of products a bulk adjustment would touch, and the catalog version it was counted on"""
    merchant = require_merchant_for_request(request)
    serializer = PriceScopeSerializer(data=request.query_params, context={'request': request})
    serializer.is_valid(raise_exception=True)
    store = resolve_target_store(merchant, serializer.validated_data)

    snapshot = load_snapshot(store)
    scope = serializer.validated_data['scope']
    return Response({
        'store': store.pk,
        'scope': scope,
        'affected': count_affected(snapshot.products, scope),
        'version': snapshot.version,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditCatalog])
def price_adjustment(request):
    """Apply a percentage increase or decrease to every product in scope"""
    merchant = require_merchant_for_request(request)
    serializer = PriceAdjustmentSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    store = resolve_target_store(merchant, data)

    try:
        result = adjust_prices(
            store,
            scope=data['scope'],
            percentage=data['percentage'],
            direction=data['direction'],
            expected_version=data.get('expected_version'),
        )
    except StaleCatalogError as e:
        logger.info(f"Rejected stale price adjustment on store {store.slug}: {e}")
        return Response(
            {'error': str(e), 'version': e.current_version},
            status=status.HTTP_409_CONFLICT
        )
    except PriceAdjustmentError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': f'{result.updated} prices updated',
        'updated': result.updated,
        'factor': str(result.factor),
        'version': result.version,
    })
