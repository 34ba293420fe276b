from rest_framework import serializers
from apps.catalog.models import (
    Category,
    Vendor,
    ProductTag,
    Product,
    Variant,
    Inventory,
    InventoryTracking,
)
from apps.catalog.services import InventoryService


# =============================================================================
# Category / Vendor / Tag Serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):
    full_path = serializers.CharField(read_only=True)
    level = serializers.IntegerField(read_only=True)

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'parent', 'description', 'is_active',
            'display_order', 'full_path', 'level', 'created_at', 'updated_at'
        ]
        extra_kwargs = {'slug': {'required': False}}


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = [
            'id', 'name', 'slug', 'email', 'website', 'is_active',
            'created_at', 'updated_at'
        ]
        extra_kwargs = {'slug': {'required': False}}


class ProductTagSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductTag
        fields = ['id', 'name', 'slug']
        extra_kwargs = {'slug': {'required': False}}


# =============================================================================
# Variant / Inventory Serializers
# =============================================================================

class InventorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Inventory
        fields = ['on_hand', 'available', 'reserved', 'committed', 'updated_at']


class VariantSerializer(serializers.ModelSerializer):
    """Base variant serializer."""
    product_name = serializers.CharField(source='product.name', read_only=True)
    effective_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True
    )
    inventory = InventorySerializer(read_only=True)

    class Meta:
        model = Variant
        fields = [
            'id', 'product', 'product_name', 'sku', 'name', 'price',
            'effective_price', 'position', 'is_default', 'inventory',
            'created_at', 'updated_at'
        ]
        extra_kwargs = {'name': {'required': False}}


class InventoryAdjustmentSerializer(serializers.Serializer):
    """Payload of the variant adjust_inventory action."""
    adjustment_type = serializers.ChoiceField(choices=InventoryService.ADJUSTMENT_TYPES)
    quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class InventoryTrackingSerializer(serializers.ModelSerializer):
    variant_sku = serializers.CharField(source='variant.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True, default=None)
    available_difference = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryTracking
        fields = [
            'id', 'variant', 'variant_sku', 'product', 'product_name', 'type',
            'quantity', 'previous_available', 'new_available',
            'available_difference', 'previous_reserved', 'new_reserved',
            'reason', 'user', 'username', 'created_at'
        ]


# =============================================================================
# Product Serializers
# =============================================================================

class ProductSerializer(serializers.ModelSerializer):
    """Base product serializer, used for writes."""
    tags = serializers.PrimaryKeyRelatedField(
        queryset=ProductTag.objects.all(), many=True, required=False
    )

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'description', 'status', 'price',
            'compare_at_price', 'category', 'vendor', 'tags',
            'created_at', 'updated_at'
        ]
        extra_kwargs = {'slug': {'required': False}}


class ProductListSerializer(serializers.ModelSerializer):
    """Product list with category, vendor and stock."""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    vendor_name = serializers.CharField(source='vendor.name', read_only=True, default=None)
    is_on_sale = serializers.BooleanField(read_only=True)
    total_inventory = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'status', 'price', 'compare_at_price',
            'is_on_sale', 'category', 'category_name', 'vendor', 'vendor_name',
            'total_inventory'
        ]


class ProductDetailSerializer(serializers.ModelSerializer):
    """Full product detail with variants, tags and collections."""
    category = CategorySerializer(read_only=True)
    vendor = VendorSerializer(read_only=True)
    tags = ProductTagSerializer(many=True, read_only=True)
    variants = VariantSerializer(many=True, read_only=True)
    is_on_sale = serializers.BooleanField(read_only=True)
    total_inventory = serializers.IntegerField(read_only=True)
    collections = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'description', 'status', 'price',
            'compare_at_price', 'is_on_sale', 'category', 'vendor', 'tags',
            'variants', 'total_inventory', 'collections',
            'created_at', 'updated_at'
        ]

    def get_collections(self, obj):
        return [
            {'id': c.id, 'name': c.name, 'slug': c.slug}
            for c in obj.collections.all()
        ]
