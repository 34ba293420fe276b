"""
Script to create sample catalog data and a few collections.
Run with: python manage.py shell < create_sample_data.py
"""
from apps.catalog.models import (
    Category,
    Vendor,
    ProductTag,
    Product,
    Variant,
    Inventory,
)
from apps.collections.models import Collection
from apps.collections.services import CollectionService
from decimal import Decimal

# Create Categories
print("Creating categories...")

vestuario, _ = Category.objects.get_or_create(
    slug='vestuario',
    defaults={'name': 'Vestuário', 'display_order': 1}
)
camisetas, _ = Category.objects.get_or_create(
    slug='camisetas',
    defaults={'name': 'Camisetas', 'parent': vestuario, 'display_order': 1}
)
calcas, _ = Category.objects.get_or_create(
    slug='calcas',
    defaults={'name': 'Calças', 'parent': vestuario, 'display_order': 2}
)
acessorios, _ = Category.objects.get_or_create(
    slug='acessorios',
    defaults={'name': 'Acessórios', 'display_order': 2}
)

# Create Vendors and Tags
print("Creating vendors and tags...")

algodao, _ = Vendor.objects.get_or_create(slug='algodao-brasil', defaults={'name': 'Algodão Brasil'})
denim, _ = Vendor.objects.get_or_create(slug='denim-co', defaults={'name': 'Denim & Co'})

verao, _ = ProductTag.objects.get_or_create(slug='verao', defaults={'name': 'Verão'})
basico, _ = ProductTag.objects.get_or_create(slug='basico', defaults={'name': 'Básico'})

# Create Products
print("Creating products...")

products = [
    ('camiseta-basica', 'Camiseta Básica', camisetas, algodao, '79.90', None, [basico, verao]),
    ('camiseta-estampada', 'Camiseta Estampada', camisetas, algodao, '99.90', '129.90', [verao]),
    ('calca-jeans', 'Calça Jeans', calcas, denim, '189.90', None, [basico]),
    ('bermuda-jeans', 'Bermuda Jeans', calcas, denim, '119.90', '149.90', [verao]),
    ('bone-aba-reta', 'Boné Aba Reta', acessorios, None, '59.90', None, []),
]

for slug, name, category, vendor, price, compare_at_price, tags in products:
    product, created = Product.objects.get_or_create(
        slug=slug,
        defaults={
            'name': name,
            'status': Product.STATUS_ACTIVE,
            'category': category,
            'vendor': vendor,
            'price': Decimal(price),
            'compare_at_price': Decimal(compare_at_price) if compare_at_price else None,
        }
    )
    if created:
        product.tags.set(tags)

# Create Variants with inventory
print("Creating variants...")

for product in Product.objects.filter(category__in=[camisetas, calcas]):
    for position, size in enumerate(['P', 'M', 'G']):
        sku = f'{product.slug[:3].upper()}-{product.pk}-{size}'
        variant, created = Variant.objects.get_or_create(
            sku=sku,
            defaults={'product': product, 'name': size, 'position': position}
        )
        if created:
            stock = 0 if product.slug == 'calca-jeans' else 5 * (position + 1)
            Inventory.objects.create(variant=variant, on_hand=stock, available=stock)

bone = Product.objects.get(slug='bone-aba-reta')
default_variant, created = Variant.objects.get_or_create(
    sku='BONE-UNICO',
    defaults={'product': bone, 'is_default': True}
)
if created:
    Inventory.objects.create(variant=default_variant, on_hand=12, available=12)

# Create Collections
print("Creating collections...")

if not Collection.objects.filter(slug='verao').exists():
    CollectionService.create_collection(
        {'name': 'Verão', 'slug': 'verao', 'sort_order': Collection.SORT_PRICE_ASC},
        [{'rule_type': 'tag', 'operator': 'equals', 'value': str(verao.pk)}],
    )

if not Collection.objects.filter(slug='em-promocao').exists():
    CollectionService.create_collection(
        {'name': 'Em Promoção', 'slug': 'em-promocao'},
        [{'rule_type': 'compare_at_price', 'operator': 'greater_than', 'value': '0'}],
    )

if not Collection.objects.filter(slug='pronta-entrega').exists():
    CollectionService.create_collection(
        {'name': 'Pronta Entrega', 'slug': 'pronta-entrega', 'rule_match': Collection.RULE_MATCH_ALL},
        [
            {'rule_type': 'inventory', 'operator': 'greater_than', 'value': '0'},
            {'rule_type': 'price', 'operator': 'less_than', 'value': '150'},
        ],
    )

if not Collection.objects.filter(slug='destaques').exists():
    destaques = CollectionService.create_collection({'name': 'Destaques', 'slug': 'destaques'})
    for slug in ['calca-jeans', 'bone-aba-reta']:
        CollectionService.add_product(destaques.pk, Product.objects.get(slug=slug).pk)

print("\n✅ Sample data created successfully!")
print(f"   - {Category.objects.count()} categories")
print(f"   - {Product.objects.count()} products")
print(f"   - {Variant.objects.count()} variants")
for collection in CollectionService.with_product_counts().order_by('name'):
    print(f"   - Collection '{collection.name}': {collection.product_count} products")
print("\nStorefront API: http://localhost:8000/api/storefront/collections/")
