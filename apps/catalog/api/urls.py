from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ProductViewSet,
    CategoryViewSet,
    VendorViewSet,
    ProductTagViewSet,
    VariantViewSet,
    InventoryTrackingViewSet,
)

router = DefaultRouter()
router.register(r'products', ProductViewSet, basename='product')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'vendors', VendorViewSet, basename='vendor')
router.register(r'tags', ProductTagViewSet, basename='tag')
router.register(r'variants', VariantViewSet, basename='variant')
router.register(r'inventory-tracking', InventoryTrackingViewSet, basename='inventory-tracking')

urlpatterns = [
    path('', include(router.urls)),
]
