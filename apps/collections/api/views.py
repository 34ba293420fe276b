import logging

from django.conf import settings
from django.utils.crypto import constant_time_compare
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.catalog.models import Product
from apps.collections.exceptions import CollectionNotFound
from apps.collections.models import Collection
from apps.collections.services import CollectionService
from .serializers import (
    CollectionSerializer,
    CollectionListSerializer,
    CollectionProductSerializer,
    MembershipProductSerializer,
    ReorderSerializer,
    StorefrontCollectionSerializer,
    StorefrontProductSerializer,
)
from .filters import CollectionFilter

logger = logging.getLogger(__name__)


def collection_not_found(exc):
    return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)


class CollectionViewSet(viewsets.ModelViewSet):
    """
    API endpoint for collections (back office).

    list: List collections with product counts
    retrieve: Get collection detail with rules
    create: Create a collection with rules and generate its products
    update: Update fields and rules, then regenerate
    delete: Delete a collection
    """
    queryset = Collection.objects.prefetch_related('rules')
    filterset_class = CollectionFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'created_at', 'product_count']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'list':
            return CollectionListSerializer
        return CollectionSerializer

    def get_queryset(self):
        return CollectionService.with_product_counts(super().get_queryset())

    def perform_destroy(self, instance):
        CollectionService.delete_collection(instance.pk)

    @action(detail=True, methods=['post'])
    def regenerate(self, request, pk=None):
        """Recompute the automatic products of a collection now."""
        try:
            result = CollectionService.regenerate(pk)
        except CollectionNotFound as e:
            return collection_not_found(e)
        return Response(result._asdict())

    @action(detail=True, methods=['get'])
    def products(self, request, pk=None):
        """List the collection's memberships ordered by position."""
        try:
            memberships = CollectionService.get_collection_products(pk)
        except CollectionNotFound as e:
            return collection_not_found(e)
        serializer = CollectionProductSerializer(memberships, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def add_product(self, request, pk=None):
        """
        Manually add a product to the end of the collection.

        Expected payload:
        {
            "product_id": 1
        }
        """
        serializer = MembershipProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership, created = CollectionService.add_product(
                pk, serializer.validated_data['product_id']
            )
        except CollectionNotFound as e:
            return collection_not_found(e)
        except Product.DoesNotExist:
            return Response(
                {'error': 'Product not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(
            CollectionProductSerializer(membership).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'])
    def remove_product(self, request, pk=None):
        """
        Remove a product from the collection, manual or automatic.

        Expected payload:
        {
            "product_id": 1
        }
        """
        serializer = MembershipProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            removed = CollectionService.remove_product(
                pk, serializer.validated_data['product_id']
            )
        except CollectionNotFound as e:
            return collection_not_found(e)

        return Response({'removed': removed})

    @action(detail=True, methods=['post'])
    def reorder(self, request, pk=None):
        """
        Set membership positions; the collection switches to manual sorting.

        Expected payload:
        {
            "positions": [
                {"id": 10, "position": 0},
                {"id": 7, "position": 1}
            ]
        }
        """
        serializer = ReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            updated = CollectionService.reorder_products(
                pk, serializer.validated_data['positions']
            )
        except CollectionNotFound as e:
            return collection_not_found(e)

        return Response({'updated': updated})


class StorefrontProductPagination(LimitOffsetPagination):
    default_limit = 24
    max_limit = 100


class StorefrontCollectionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public, read-only collections for the storefront.
    Only active collections are exposed, looked up by slug.
    """
    queryset = Collection.objects.filter(active=True).order_by('name')
    serializer_class = StorefrontCollectionSerializer
    permission_classes = [AllowAny]
    lookup_field = 'slug'

    @action(detail=True, methods=['get'])
    def products(self, request, slug=None):
        """Active products of the collection in its sort order (limit/offset)."""
        collection = self.get_object()
        queryset = CollectionService.storefront_products(collection)

        paginator = StorefrontProductPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = StorefrontProductSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)


class CronRegenerateCollectionsView(APIView):
    """
    Batch regeneration of flagged collections, called by a scheduler.

    Requires `Authorization: Bearer <CRON_SECRET>`.

    POST: process one batch, optional payload {"batchSize": 10}
    GET: health check with the number of pending collections
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def check_cron_secret(self, request):
        secret = settings.CRON_SECRET
        if not secret:
            logger.error("CRON_SECRET is not configured, refusing cron request")
            return Response(
                {'error': 'Cron secret not configured'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        header = request.headers.get('Authorization', '')
        if not constant_time_compare(header, f'Bearer {secret}'):
            logger.warning("Unauthorized cron request from %s", request.META.get('REMOTE_ADDR'))
            return Response(
                {'error': 'Unauthorized'},
                status=status.HTTP_401_UNAUTHORIZED
            )
        return None

    def get_batch_size(self, request):
        """
        Numeric, non-zero `batchSize` from a JSON body; anything else
        (missing, zero, strings, form data) means the configured default.
        """
        batch_size = request.data.get('batchSize') if isinstance(request.data, dict) else None
        if isinstance(batch_size, bool) or not isinstance(batch_size, (int, float)) or not batch_size:
            if batch_size is not None:
                logger.warning("Ignoring invalid cron batchSize %r", batch_size)
            return None
        return int(batch_size)

    def get(self, request):
        denied = self.check_cron_secret(request)
        if denied:
            return denied
        return Response({
            'status': 'ok',
            'pending': Collection.objects.filter(needs_regeneration=True).count(),
        })

    def post(self, request):
        denied = self.check_cron_secret(request)
        if denied:
            return denied

        batch_size = self.get_batch_size(request)
        result = CollectionService.process_pending_regenerations(batch_size)
        logger.info(
            "Cron regeneration: %s processed, %s failed, %s remaining",
            result['processed'], result['failed'], result['remaining'],
        )
        return Response({'success': True, **result})
