from rest_framework import serializers
from apps.collections.models import Collection, CollectionRule, CollectionProduct
from apps.collections.services import CollectionService


# =============================================================================
# Rule Serializers
# =============================================================================

class CollectionRuleSerializer(serializers.ModelSerializer):
    rule_type_display = serializers.CharField(source='get_rule_type_display', read_only=True)
    operator_display = serializers.CharField(source='get_operator_display', read_only=True)

    class Meta:
        model = CollectionRule
        fields = [
            'id', 'rule_type', 'rule_type_display', 'operator',
            'operator_display', 'value', 'position'
        ]
        read_only_fields = ['position']


# =============================================================================
# Collection Serializers
# =============================================================================

class CollectionSerializer(serializers.ModelSerializer):
    """
    Collection with nested rules.

    Writes go through CollectionService so rules are replaced and
    memberships regenerated in the same transaction. Omitting `rules`
    on update keeps the current ones; an empty list removes them.
    """
    rules = CollectionRuleSerializer(many=True, required=False)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Collection
        fields = [
            'id', 'name', 'slug', 'description', 'image', 'rule_match',
            'sort_order', 'active', 'seo_title', 'seo_description',
            'rules', 'product_count', 'needs_regeneration',
            'last_regenerated_at', 'created_at', 'updated_at'
        ]
        read_only_fields = ['needs_regeneration', 'last_regenerated_at']
        extra_kwargs = {'slug': {'required': False}}

    def get_product_count(self, obj):
        count = getattr(obj, 'product_count', None)
        if count is None:
            count = obj.memberships.count()
        return count

    def create(self, validated_data):
        rules = validated_data.pop('rules', [])
        return CollectionService.create_collection(validated_data, rules)

    def update(self, instance, validated_data):
        rules = validated_data.pop('rules', None)
        return CollectionService.update_collection(instance.pk, validated_data, rules)


class CollectionListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for collection lists."""
    product_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Collection
        fields = [
            'id', 'name', 'slug', 'active', 'rule_match', 'sort_order',
            'product_count', 'needs_regeneration', 'last_regenerated_at',
            'created_at'
        ]


# =============================================================================
# Membership Serializers
# =============================================================================

class CollectionProductSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_slug = serializers.CharField(source='product.slug', read_only=True)
    product_status = serializers.CharField(source='product.status', read_only=True)
    product_price = serializers.DecimalField(
        source='product.price', max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = CollectionProduct
        fields = [
            'id', 'product', 'product_name', 'product_slug', 'product_status',
            'product_price', 'position', 'is_manual', 'created_at'
        ]


class MembershipProductSerializer(serializers.Serializer):
    """Payload of add_product / remove_product."""
    product_id = serializers.IntegerField()


class PositionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    position = serializers.IntegerField(min_value=0)


class ReorderSerializer(serializers.Serializer):
    positions = PositionSerializer(many=True, allow_empty=False)


# =============================================================================
# Storefront Serializers
# =============================================================================

class StorefrontCollectionSerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Collection
        fields = [
            'id', 'name', 'slug', 'description', 'image', 'sort_order',
            'seo_title', 'seo_description', 'product_count'
        ]

    def get_product_count(self, obj):
        return CollectionService.storefront_products(obj).count()


class StorefrontProductSerializer(serializers.ModelSerializer):
    """A collection membership rendered as a storefront product card."""
    id = serializers.IntegerField(source='product.id', read_only=True)
    name = serializers.CharField(source='product.name', read_only=True)
    slug = serializers.CharField(source='product.slug', read_only=True)
    price = serializers.DecimalField(
        source='product.price', max_digits=10, decimal_places=2, read_only=True
    )
    compare_at_price = serializers.DecimalField(
        source='product.compare_at_price', max_digits=10, decimal_places=2, read_only=True
    )
    is_on_sale = serializers.BooleanField(source='product.is_on_sale', read_only=True)
    category = serializers.CharField(source='product.category.name', read_only=True, default=None)
    vendor = serializers.CharField(source='product.vendor.name', read_only=True, default=None)

    class Meta:
        model = CollectionProduct
        fields = [
            'id', 'name', 'slug', 'price', 'compare_at_price', 'is_on_sale',
            'category', 'vendor', 'position'
        ]
