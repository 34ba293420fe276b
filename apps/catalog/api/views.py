from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from django.db.models import Prefetch

from apps.catalog.models import (
    Category,
    Vendor,
    ProductTag,
    Product,
    Variant,
    InventoryTracking,
)
from apps.catalog.services import InventoryService
from .serializers import (
    CategorySerializer,
    VendorSerializer,
    ProductTagSerializer,
    ProductSerializer,
    ProductListSerializer,
    ProductDetailSerializer,
    VariantSerializer,
    InventorySerializer,
    InventoryAdjustmentSerializer,
    InventoryTrackingSerializer,
)
from .filters import ProductFilter, VariantFilter, InventoryTrackingFilter


class ProductViewSet(viewsets.ModelViewSet):
    """
    API endpoint for products.

    list: List products (filter by status, category, vendor, tag, price)
    retrieve: Get product detail with variants and collections
    create: Create a new product
    update: Update a product
    delete: Delete a product
    """
    queryset = Product.objects.select_related('category', 'vendor')
    lookup_field = 'slug'
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductListSerializer
        elif self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related(
                'tags',
                'collections',
                Prefetch(
                    'variants',
                    queryset=Variant.objects.select_related('inventory')
                ),
            )
        return queryset


class CategoryViewSet(viewsets.ModelViewSet):
    """
    API endpoint for categories.
    """
    queryset = Category.objects.select_related('parent')
    serializer_class = CategorySerializer
    lookup_field = 'slug'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['parent', 'is_active']
    search_fields = ['name']
    ordering = ['display_order', 'name']


class VendorViewSet(viewsets.ModelViewSet):
    """
    API endpoint for vendors.
    """
    queryset = Vendor.objects.all()
    serializer_class = VendorSerializer
    lookup_field = 'slug'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['is_active']
    search_fields = ['name', 'email']


class ProductTagViewSet(viewsets.ModelViewSet):
    """
    API endpoint for product tags.
    """
    queryset = ProductTag.objects.all()
    serializer_class = ProductTagSerializer
    lookup_field = 'slug'
    filter_backends = [filters.SearchFilter]
    search_fields = ['name']


class VariantViewSet(viewsets.ModelViewSet):
    """
    API endpoint for variants.

    Supports filtering by product and stock status.
    """
    queryset = Variant.objects.select_related('product', 'inventory')
    serializer_class = VariantSerializer
    filterset_class = VariantFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['sku', 'name', 'product__name']
    ordering_fields = ['sku', 'price', 'position', 'created_at']
    ordering = ['product', 'position', 'sku']

    @action(detail=True, methods=['get'])
    def inventory_history(self, request, pk=None):
        """Get stock adjustment history for a variant."""
        variant = self.get_object()
        history = InventoryTracking.objects.filter(variant=variant).select_related('user')
        serializer = InventoryTrackingSerializer(history, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def adjust_inventory(self, request, pk=None):
        """
        Adjust a variant's stock.

        Expected payload:
        {
            "adjustment_type": "add" | "remove" | "set",
            "quantity": 10,
            "reason": "Recebimento de fornecedor"
        }
        """
        variant = self.get_object()
        serializer = InventoryAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            inventory = InventoryService.adjust(
                variant,
                serializer.validated_data['adjustment_type'],
                serializer.validated_data['quantity'],
                reason=serializer.validated_data['reason'],
                user=request.user,
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InventorySerializer(inventory).data)


class InventoryTrackingViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for inventory tracking records (read-only).
    """
    queryset = InventoryTracking.objects.select_related('variant', 'product', 'user')
    serializer_class = InventoryTrackingSerializer
    filterset_class = InventoryTrackingFilter
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    ordering = ['-created_at', '-id']
