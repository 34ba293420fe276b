# apps/collections/tests/test_api.py
import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.catalog.models import Product
from apps.catalog.tests.factories import CategoryFactory, ProductFactory
from apps.collections.models import Collection, CollectionRule
from .factories import CollectionFactory, CollectionProductFactory, CollectionRuleFactory


@pytest.mark.django_db
class TestCollectionAPI:
    """Test back-office collection endpoints."""

    def test_requires_staff(self, api_client):
        response = api_client.get(reverse('collection-list'))
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_list_includes_product_count(self, staff_client):
        collection = CollectionFactory()
        CollectionProductFactory.create_batch(2, collection=collection)

        response = staff_client.get(reverse('collection-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'][0]['product_count'] == 2

    def test_filter_automatic(self, staff_client):
        automatic = CollectionFactory()
        CollectionRuleFactory(collection=automatic)
        CollectionFactory()

        response = staff_client.get(reverse('collection-list'), {'automatic': 'true'})

        assert [item['id'] for item in response.data['results']] == [automatic.pk]

    def test_create_with_rules_generates_products(self, staff_client):
        category = CategoryFactory()
        in_category = ProductFactory(category=category)
        ProductFactory()

        response = staff_client.post(reverse('collection-list'), {
            'name': 'Camisetas',
            'rule_match': 'all',
            'rules': [
                {'rule_type': 'category', 'operator': 'equals', 'value': str(category.pk)},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['slug'] == 'camisetas'
        assert response.data['product_count'] == 1
        assert response.data['rules'][0]['rule_type_display'] == 'Categoria'
        collection = Collection.objects.get(slug='camisetas')
        assert list(collection.memberships.values_list('product_id', flat=True)) == [in_category.pk]

    def test_create_rejects_unknown_operator(self, staff_client):
        response = staff_client.post(reverse('collection-list'), {
            'name': 'Inválida',
            'rules': [{'rule_type': 'price', 'operator': 'between', 'value': '1'}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Collection.objects.exists()

    def test_patch_without_rules_keeps_them(self, staff_client):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection)

        response = staff_client.patch(
            reverse('collection-detail', args=[collection.pk]),
            {'description': 'Nova descrição'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['rules']) == 1
        assert response.data['description'] == 'Nova descrição'

    def test_put_replaces_rules(self, staff_client):
        collection = CollectionFactory(name='Preço')
        CollectionRuleFactory(collection=collection)
        ProductFactory(price=Decimal('500.00'))

        response = staff_client.put(
            reverse('collection-detail', args=[collection.pk]),
            {
                'name': 'Preço',
                'slug': collection.slug,
                'rules': [{'rule_type': 'price', 'operator': 'greater_than', 'value': '100'}],
            },
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert [r['rule_type'] for r in response.data['rules']] == [CollectionRule.TYPE_PRICE]
        assert response.data['product_count'] == 1

    def test_delete(self, staff_client):
        collection = CollectionFactory()

        response = staff_client.delete(reverse('collection-detail', args=[collection.pk]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Collection.objects.exists()


@pytest.mark.django_db
class TestCollectionActions:
    """Test regenerate / products / add / remove / reorder actions."""

    def test_regenerate(self, staff_client, category_scenario):
        collection = category_scenario['collection']

        response = staff_client.post(reverse('collection-regenerate', args=[collection.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['matched'] == 1
        assert response.data['added'] == 1
        assert response.data['collection_id'] == collection.pk

    def test_regenerate_missing_collection(self, staff_client):
        response = staff_client.post(reverse('collection-regenerate', args=[999999]))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_products_ordered_by_position(self, staff_client):
        collection = CollectionFactory()
        last = CollectionProductFactory(collection=collection, position=2)
        first = CollectionProductFactory(collection=collection, position=0, is_manual=False)

        response = staff_client.get(reverse('collection-products', args=[collection.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert [item['id'] for item in response.data] == [first.pk, last.pk]
        assert response.data[0]['is_manual'] is False

    def test_add_product(self, staff_client):
        collection = CollectionFactory()
        product = ProductFactory()
        url = reverse('collection-add-product', args=[collection.pk])

        response = staff_client.post(url, {'product_id': product.pk}, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['is_manual'] is True
        assert response.data['position'] == 0

        response = staff_client.post(url, {'product_id': product.pk}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert collection.memberships.count() == 1

    def test_add_missing_product(self, staff_client):
        collection = CollectionFactory()

        response = staff_client.post(
            reverse('collection-add-product', args=[collection.pk]),
            {'product_id': 999999},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Product not found'

    def test_add_product_requires_id(self, staff_client):
        collection = CollectionFactory()

        response = staff_client.post(
            reverse('collection-add-product', args=[collection.pk]), {}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_remove_product(self, staff_client):
        membership = CollectionProductFactory()
        url = reverse('collection-remove-product', args=[membership.collection_id])

        response = staff_client.post(url, {'product_id': membership.product_id}, format='json')
        assert response.data == {'removed': True}

        response = staff_client.post(url, {'product_id': membership.product_id}, format='json')
        assert response.data == {'removed': False}

    def test_reorder(self, staff_client):
        collection = CollectionFactory(sort_order=Collection.SORT_PRICE_DESC)
        first = CollectionProductFactory(collection=collection, position=0)
        second = CollectionProductFactory(collection=collection, position=1)

        response = staff_client.post(
            reverse('collection-reorder', args=[collection.pk]),
            {'positions': [{'id': first.pk, 'position': 1}, {'id': second.pk, 'position': 0}]},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'updated': 2}
        collection.refresh_from_db()
        assert collection.sort_order == Collection.SORT_MANUAL

    def test_reorder_rejects_empty_positions(self, staff_client):
        collection = CollectionFactory()

        response = staff_client.post(
            reverse('collection-reorder', args=[collection.pk]),
            {'positions': []},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestStorefrontAPI:
    """Test public storefront endpoints."""

    def test_lists_only_active_collections(self, api_client):
        CollectionFactory(name='Verão', active=True)
        CollectionFactory(name='Oculta', active=False)

        response = api_client.get(reverse('storefront-collection-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [item['name'] for item in response.data['results']] == ['Verão']

    def test_inactive_collection_is_not_found(self, api_client):
        collection = CollectionFactory(active=False)

        response = api_client.get(reverse('storefront-collection-detail', args=[collection.slug]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_products_hide_inactive_products(self, api_client):
        collection = CollectionFactory(slug='novidades')
        CollectionProductFactory(collection=collection, position=0, product=ProductFactory(name='Ativo'))
        CollectionProductFactory(
            collection=collection, position=1,
            product=ProductFactory(name='Rascunho', status=Product.STATUS_DRAFT),
        )

        response = api_client.get(reverse('storefront-collection-products', args=['novidades']))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert [item['name'] for item in response.data['results']] == ['Ativo']

    def test_products_limit_offset(self, api_client):
        collection = CollectionFactory(slug='promo')
        for position in range(5):
            CollectionProductFactory(
                collection=collection, position=position,
                product=ProductFactory(name=f'Item {position}'),
            )

        response = api_client.get(
            reverse('storefront-collection-products', args=['promo']),
            {'limit': 2, 'offset': 2}
        )

        assert response.data['count'] == 5
        assert [item['name'] for item in response.data['results']] == ['Item 2', 'Item 3']

    def test_products_follow_sort_order(self, api_client):
        collection = CollectionFactory(slug='precos', sort_order=Collection.SORT_PRICE_ASC)
        CollectionProductFactory(
            collection=collection, position=0,
            product=ProductFactory(name='Caro', price=Decimal('90.00')),
        )
        CollectionProductFactory(
            collection=collection, position=1,
            product=ProductFactory(name='Barato', price=Decimal('9.00')),
        )

        response = api_client.get(reverse('storefront-collection-products', args=['precos']))

        assert [item['name'] for item in response.data['results']] == ['Barato', 'Caro']
