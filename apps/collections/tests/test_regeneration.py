# apps/collections/tests/test_regeneration.py
import pytest
from decimal import Decimal

from apps.catalog.models import Product
from apps.catalog.tests.factories import (
    CategoryFactory,
    InventoryFactory,
    ProductFactory,
    ProductTagFactory,
    VariantFactory,
)
from apps.collections.exceptions import CollectionNotFound
from apps.collections.models import Collection, CollectionProduct
from apps.collections.services import CollectionService
from .factories import CollectionFactory, CollectionProductFactory, CollectionRuleFactory


def membership_rows(collection):
    return sorted(
        CollectionProduct.objects.filter(collection=collection).values_list(
            'product_id', 'is_manual', 'position'
        )
    )


@pytest.mark.django_db
class TestRegenerationScenarios:
    """Membership reconciliation against a category rule."""

    def test_only_matching_category_is_added(self, category_scenario):
        collection = category_scenario['collection']

        CollectionService.regenerate(collection.pk)

        assert membership_rows(collection) == [(category_scenario['p1'].pk, False, 1)]

    def test_manual_member_kept_alongside_automatic(self, category_scenario):
        collection = category_scenario['collection']
        p1, p2, p3 = category_scenario['p1'], category_scenario['p2'], category_scenario['p3']

        CollectionService.add_product(collection.pk, p2.pk)
        CollectionService.regenerate(collection.pk)

        memberships = {m.product_id: m for m in collection.memberships.all()}
        assert set(memberships) == {p1.pk, p2.pk}
        assert memberships[p2.pk].is_manual is True
        assert memberships[p1.pk].is_manual is False
        assert p3.pk not in memberships

    def test_regeneration_is_idempotent(self, category_scenario):
        collection = category_scenario['collection']
        CollectionService.add_product(collection.pk, category_scenario['p2'].pk)

        CollectionService.regenerate(collection.pk)
        first = membership_rows(collection)
        CollectionService.regenerate(collection.pk)

        assert membership_rows(collection) == first

    def test_manual_member_never_duplicated(self, category_scenario):
        collection = category_scenario['collection']
        p1 = category_scenario['p1']

        CollectionService.add_product(collection.pk, p1.pk)
        result = CollectionService.regenerate(collection.pk)

        rows = collection.memberships.filter(product=p1)
        assert rows.count() == 1
        assert rows.get().is_manual is True
        assert result.matched == 1
        assert result.added == 0
        assert result.manual == 1

    def test_product_leaving_the_rule_is_removed(self, category_scenario):
        collection = category_scenario['collection']
        p1 = category_scenario['p1']
        CollectionService.regenerate(collection.pk)

        p1.category = CategoryFactory()
        p1.save()
        result = CollectionService.regenerate(collection.pk)

        assert result.removed == 1
        assert not collection.memberships.exists()

    def test_inactive_products_are_not_candidates(self, category_scenario):
        collection = category_scenario['collection']
        p1 = category_scenario['p1']
        p1.status = Product.STATUS_DRAFT
        p1.save()

        CollectionService.regenerate(collection.pk)

        assert not collection.memberships.exists()


@pytest.mark.django_db
class TestEmptyRuleList:

    def test_keeps_only_manual_memberships(self):
        collection = CollectionFactory(rule_match=Collection.RULE_MATCH_ALL)
        manual = CollectionProductFactory(collection=collection, is_manual=True, position=0)
        CollectionProductFactory(collection=collection, is_manual=False, position=1)
        ProductFactory.create_batch(3)

        result = CollectionService.regenerate(collection.pk)

        assert membership_rows(collection) == [(manual.product_id, True, 0)]
        assert result.matched == 0
        assert result.added == 0
        assert result.removed == 1


@pytest.mark.django_db
class TestReconciliation:

    def test_automatic_positions_follow_last_manual_position(self):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection, rule_type='price', operator='greater_than', value='100')
        manual = CollectionProductFactory(
            collection=collection, is_manual=True, position=5,
            product=ProductFactory(price=Decimal('10.00')),
        )
        first = ProductFactory(price=Decimal('150.00'))
        second = ProductFactory(price=Decimal('200.00'))

        CollectionService.regenerate(collection.pk)

        assert membership_rows(collection) == sorted([
            (manual.product_id, True, 5),
            (first.pk, False, 6),
            (second.pk, False, 7),
        ])

    def test_inventory_rule_uses_variant_totals(self):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection, rule_type='inventory', operator='greater_than', value='0')
        in_stock = ProductFactory()
        InventoryFactory(variant=VariantFactory(product=in_stock), available=2)
        default_only = ProductFactory()
        InventoryFactory(variant=VariantFactory(product=default_only, is_default=True), available=1)
        sold_out = ProductFactory()
        InventoryFactory(variant=VariantFactory(product=sold_out), available=0)
        ProductFactory()

        CollectionService.regenerate(collection.pk)

        assert set(collection.memberships.values_list('product_id', flat=True)) == {
            in_stock.pk, default_only.pk
        }

    def test_inventory_rule_counts_default_variant_stock(self):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection, rule_type='inventory', operator='equals', value='8')
        product = ProductFactory()
        InventoryFactory(variant=VariantFactory(product=product, is_default=True), available=5)
        InventoryFactory(variant=VariantFactory(product=product), available=3)

        CollectionService.regenerate(collection.pk)

        assert list(collection.memberships.values_list('product_id', flat=True)) == [product.pk]

    def test_tag_rule(self):
        summer = ProductTagFactory()
        tagged = ProductFactory(tags=[summer])
        ProductFactory()
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection, rule_type='tag', operator='equals', value=str(summer.pk))

        CollectionService.regenerate(collection.pk)

        assert list(collection.memberships.values_list('product_id', flat=True)) == [tagged.pk]

    def test_any_match_combines_rules(self):
        collection = CollectionFactory(rule_match=Collection.RULE_MATCH_ANY)
        CollectionRuleFactory(collection=collection, rule_type='status', operator='equals', value='active')
        CollectionRuleFactory(collection=collection, rule_type='price', operator='greater_than', value='100')
        cheap = ProductFactory(price=Decimal('50.00'))

        CollectionService.regenerate(collection.pk)

        assert list(collection.memberships.values_list('product_id', flat=True)) == [cheap.pk]

    def test_invalid_numeric_value_matches_nothing(self):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection, rule_type='status', operator='equals', value='active')
        CollectionRuleFactory(collection=collection, rule_type='price', operator='greater_than', value='not-a-number')
        ProductFactory.create_batch(2)

        result = CollectionService.regenerate(collection.pk)

        assert result.matched == 0
        assert not collection.memberships.exists()

    def test_clears_regeneration_flag(self):
        collection = CollectionFactory(needs_regeneration=True)
        CollectionRuleFactory(collection=collection)

        CollectionService.regenerate(collection.pk)

        collection.refresh_from_db()
        assert collection.needs_regeneration is False
        assert collection.last_regenerated_at is not None

    def test_missing_collection(self):
        with pytest.raises(CollectionNotFound):
            CollectionService.regenerate(999999)


@pytest.mark.django_db
class TestLoaders:

    def test_load_rules_returns_match_mode_and_ordered_rules(self):
        collection = CollectionFactory(rule_match=Collection.RULE_MATCH_ANY)
        second = CollectionRuleFactory(collection=collection, position=2)
        first = CollectionRuleFactory(collection=collection, position=1)

        loaded, rule_match, rules = CollectionService.load_rules(collection.pk)

        assert loaded == collection
        assert rule_match == Collection.RULE_MATCH_ANY
        assert rules == [first, second]

    def test_regenerate_loads_rules_under_lock(self, monkeypatch):
        collection = CollectionFactory()
        CollectionRuleFactory(collection=collection)
        real_load_rules = CollectionService.load_rules
        calls = []

        def recording_load_rules(collection_id, lock=False):
            calls.append((collection_id, lock))
            return real_load_rules(collection_id, lock=lock)

        monkeypatch.setattr(CollectionService, 'load_rules', staticmethod(recording_load_rules))

        CollectionService.regenerate(collection.pk)

        assert calls == [(collection.pk, True)]

    def test_load_rules_missing_collection(self):
        with pytest.raises(CollectionNotFound):
            CollectionService.load_rules(424242)

    def test_load_candidates_snapshots_active_products(self):
        tag = ProductTagFactory()
        category = CategoryFactory()
        product = ProductFactory(category=category, tags=[tag], compare_at_price=Decimal('80.00'))
        InventoryFactory(variant=VariantFactory(product=product), available=4)
        ProductFactory(status=Product.STATUS_ARCHIVED)

        snapshots = CollectionService.load_candidates()

        assert len(snapshots) == 1
        snap = snapshots[0]
        assert snap.id == product.pk
        assert snap.category_id == category.pk
        assert snap.tag_ids == frozenset({str(tag.pk)})
        assert snap.total_inventory == 4
        assert snap.compare_at_price == Decimal('80.00')
        assert snap.status == 'active'
