from .serializers import (
    CategorySerializer,
    VendorSerializer,
    ProductTagSerializer,
    InventorySerializer,
    VariantSerializer,
    InventoryAdjustmentSerializer,
    InventoryTrackingSerializer,
    ProductSerializer,
    ProductListSerializer,
    ProductDetailSerializer,
)

__all__ = [
    'CategorySerializer',
    'VendorSerializer',
    'ProductTagSerializer',
    'InventorySerializer',
    'VariantSerializer',
    'InventoryAdjustmentSerializer',
    'InventoryTrackingSerializer',
    'ProductSerializer',
    'ProductListSerializer',
    'ProductDetailSerializer',
]
