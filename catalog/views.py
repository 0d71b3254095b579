import logging
from urllib.parse import urlencode
from django.conf import settings
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, authentication_classes, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from stores.models import Store
from stores.serializers import StorefrontSerializer
from stores.uploads import UploadError, store_uploads, product_image_folder
from stores.utils import get_default_store
from users.mixins import MerchantScopedMixin
from users.pagination import AdminPagination
from users.permissions import CanEditCatalog, CanDeleteRecords
from .engine import CatalogQuery, build_catalog_page, category_facets
from .filters import ProductFilter
from .models import Product
from .serializers import (
    ProductSerializer, ProductImagesUploadSerializer,
    CatalogQuerySerializer, CatalogProductSerializer
)
from .snapshot import load_snapshot
from .whatsapp import build_share_url

logger = logging.getLogger(__name__)


# Admin views
class ProductViewSet(MerchantScopedMixin, viewsets.ModelViewSet):
    """Products of every store of the request merchant"""
    queryset = Product.objects.select_related('store', 'supplier').all()
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, CanEditCatalog, CanDeleteRecords]
    pagination_class = AdminPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ProductFilter
    merchant_field = 'store__merchant'

    def perform_create(self, serializer):
        store = serializer.validated_data.get('store') or get_default_store(self.get_merchant())
        if store is None:
            raise ValidationError({'store': 'The merchant has no store to add products to.'})
        product = serializer.save(store=store)
        logger.info(f"Product {product.key} created in store {store.slug}")

    def perform_update(self, serializer):
        product = serializer.save()
        logger.info(f"Product {product.key} updated in store {product.store.slug}")

    def perform_destroy(self, instance):
        logger.info(f"Product {instance.key} deleted from store {instance.store.slug}")
        instance.delete()

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def images(self, request, pk=None):
        """Upload one or more images and append their URLs to the product"""
        product = self.get_object()
        upload = ProductImagesUploadSerializer(data=request.data)
        upload.is_valid(raise_exception=True)

        folder = product_image_folder(product.store)
        try:
            urls = store_uploads(upload.validated_data['files'], folder, request)
        except UploadError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        product.images = list(product.images or []) + urls
        product.save(update_fields=['images', 'updated_at'])
        return Response(ProductSerializer(product, context={'request': request}).data)


# Public storefront views
def get_public_store(slug):
    return get_object_or_404(Store, slug=slug, is_active=True)


def page_params(query, page):
    """Query string of a neighbouring page, or None"""
    if page is None:
        return None
    return f"?{urlencode(query.update(page=page).as_params())}"


def catalog_url_for(request, store):
    template = settings.STOREFRONT_URL_TEMPLATE
    if template:
        return template.format(slug=store.slug)
    return request.build_absolute_uri(reverse('storefront:storefront-detail', args=[store.slug]))


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def storefront_detail(request, slug):
    """Public configuration of a store"""
    store = get_public_store(slug)
    return Response(StorefrontSerializer(store).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def storefront_catalog(request, slug):
    """Visible products of a store, filtered and paginated"""
    store = get_public_store(slug)
    params = CatalogQuerySerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    query = CatalogQuery(**params.validated_data)

    snapshot = load_snapshot(store)
    page = build_catalog_page(snapshot.products, query, settings.CATALOG_PAGE_SIZE)

    return Response({
        'count': page.count,
        'total_pages': page.total_pages,
        'page': page.page,
        'version': snapshot.version,
        'categories': category_facets(snapshot.products),
        'next': page_params(query, page.page + 1 if page.has_next else None),
        'previous': page_params(query, page.page - 1 if page.has_previous else None),
        'results': CatalogProductSerializer(page.results, many=True, context={'store': store}).data,
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def storefront_product(request, slug, key):
    """One visible product of a store"""
    store = get_public_store(slug)
    product = load_snapshot(store).get(key)
    if product is None or not product.is_visible:
        return Response(
            {'error': 'Product not found'},
            status=status.HTTP_404_NOT_FOUND
        )
    return Response(CatalogProductSerializer(product, context={'store': store}).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def storefront_share(request, slug):
    """WhatsApp link for forwarding the store catalog"""
    store = get_public_store(slug)
    catalog_url = catalog_url_for(request, store)
    return Response({
        'catalog_url': catalog_url,
        'whatsapp_url': build_share_url(store, catalog_url),
    })
