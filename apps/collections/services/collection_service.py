"""
Service for collection lifecycle and membership regeneration.

Regeneration runs in three sequential steps:
1. Load the collection's rules and match mode
2. Evaluate every active product against them (RuleEngine)
3. Reconcile CollectionProduct rows: automatic memberships are replaced
   wholesale, manual memberships are never touched
"""

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Max, QuerySet
from django.utils import timezone

from apps.catalog.models import Product
from apps.catalog.services import InventoryService
from apps.collections.exceptions import CollectionNotFound, InvalidRule
from apps.collections.models import Collection, CollectionProduct, CollectionRule
from .rule_engine import ProductSnapshot, RuleEngine

logger = logging.getLogger(__name__)


class RegenerationResult(NamedTuple):
    collection_id: int
    matched: int
    added: int
    removed: int
    manual: int


class CollectionService:
    """
    Create, update and regenerate collections; manage manual memberships.
    """

    MIN_BATCH_SIZE = 1
    MAX_BATCH_SIZE = 50

    SORT_ORDERING = {
        Collection.SORT_MANUAL: ['position', 'pk'],
        # Order data is not tracked here, best sellers keep curated order
        Collection.SORT_BEST_SELLING: ['position', 'pk'],
        Collection.SORT_ALPHABETICAL_ASC: ['product__name', 'pk'],
        Collection.SORT_ALPHABETICAL_DESC: ['-product__name', 'pk'],
        Collection.SORT_PRICE_ASC: ['product__price', 'position'],
        Collection.SORT_PRICE_DESC: ['-product__price', 'position'],
        Collection.SORT_CREATED_ASC: ['product__created_at', 'pk'],
        Collection.SORT_CREATED_DESC: ['-product__created_at', 'pk'],
    }

    # =========================================================================
    # Loading
    # =========================================================================

    @staticmethod
    def get_collection(collection_id, lock: bool = False) -> Collection:
        queryset = Collection.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=collection_id)
        except Collection.DoesNotExist:
            raise CollectionNotFound(collection_id)

    @staticmethod
    def load_rules(collection_id, lock: bool = False) -> Tuple[Collection, str, List[CollectionRule]]:
        """
        Get a collection, its match mode and its rules ordered by position.

        With lock=True the collection row is locked until the surrounding
        transaction ends.

        Raises:
            CollectionNotFound: if the collection does not exist
        """
        collection = CollectionService.get_collection(collection_id, lock=lock)
        return collection, collection.rule_match, list(collection.rules.order_by('position', 'id'))

    @staticmethod
    def load_candidates() -> List[ProductSnapshot]:
        """
        Snapshot every active product with its tag ids and total inventory.
        Products are ordered by id so automatic positions are stable.
        """
        active = Product.objects.filter(status=Product.STATUS_ACTIVE)
        inventory = InventoryService.total_inventory_by_product(active.values('pk'))

        return [
            ProductSnapshot(
                id=product.pk,
                price=product.price,
                status=product.status,
                compare_at_price=product.compare_at_price,
                category_id=product.category_id,
                vendor_id=product.vendor_id,
                tag_ids=frozenset(str(tag.pk) for tag in product.tags.all()),
                total_inventory=inventory.get(product.pk, 0),
            )
            for product in active.order_by('pk').prefetch_related('tags')
        ]

    # =========================================================================
    # Regeneration
    # =========================================================================

    @staticmethod
    def regenerate(collection_id) -> RegenerationResult:
        """
        Recompute the automatic memberships of a collection.

        Manual memberships are kept and take precedence: a product that is
        a manual member is never added again as an automatic one. New
        automatic members are positioned after the last manual one.

        The collection row stays locked for the whole run so concurrent
        regenerations or manual edits of the same collection serialize.
        """
        with transaction.atomic():
            collection, rule_match, rules = CollectionService.load_rules(collection_id, lock=True)

            manual = list(
                collection.memberships.filter(is_manual=True).values_list('product_id', 'position')
            )
            manual_ids = {product_id for product_id, _ in manual}
            max_manual_position = max((position for _, position in manual), default=0)

            if not rules:
                removed, _ = collection.memberships.filter(is_manual=False).delete()
                matched = added = 0
            else:
                engine = RuleEngine(rules, rule_match)
                matching = engine.filter(CollectionService.load_candidates())
                matched = len(matching)

                removed, _ = collection.memberships.filter(is_manual=False).delete()

                new_ids = [product.id for product in matching if product.id not in manual_ids]
                CollectionProduct.objects.bulk_create([
                    CollectionProduct(
                        collection=collection,
                        product_id=product_id,
                        position=max_manual_position + 1 + index,
                        is_manual=False,
                    )
                    for index, product_id in enumerate(new_ids)
                ])
                added = len(new_ids)

            Collection.objects.filter(pk=collection.pk).update(
                needs_regeneration=False,
                last_regenerated_at=timezone.now(),
            )

        logger.info(
            "Regenerated collection %s (%s): %s rules, %s matched, %s added, %s removed, %s manual",
            collection.pk, collection.slug, len(rules), matched, added, removed, len(manual_ids),
        )
        return RegenerationResult(collection.pk, matched, added, removed, len(manual_ids))

    @staticmethod
    def mark_for_regeneration(queryset: Optional[QuerySet] = None) -> int:
        """
        Flag rule-based collections so the next batch run regenerates them.
        Collections already waiting keep their original request time.
        """
        if queryset is None:
            queryset = Collection.objects.all()
        return queryset.filter(
            pk__in=CollectionRule.objects.values('collection_id'),
            needs_regeneration=False,
        ).update(
            needs_regeneration=True,
            regeneration_requested_at=timezone.now(),
        )

    @staticmethod
    def clamp_batch_size(batch_size) -> int:
        if batch_size is None:
            batch_size = settings.COLLECTION_REGENERATION_BATCH_SIZE
        return min(max(int(batch_size), CollectionService.MIN_BATCH_SIZE), CollectionService.MAX_BATCH_SIZE)

    @staticmethod
    def process_pending_regenerations(batch_size: Optional[int] = None) -> Dict[str, Any]:
        """
        Regenerate up to `batch_size` flagged collections, oldest request first.

        A failing collection is logged and counted; it stays flagged and is
        moved to the back of the queue.

        Returns:
            Dict with processed, failed and remaining counts and per-collection errors
        """
        batch_size = CollectionService.clamp_batch_size(batch_size)
        pending_ids = list(
            Collection.objects.filter(needs_regeneration=True)
            .order_by('regeneration_requested_at', 'pk')
            .values_list('pk', flat=True)[:batch_size]
        )

        processed = 0
        errors = []
        for collection_id in pending_ids:
            try:
                CollectionService.regenerate(collection_id)
                processed += 1
            except Exception as e:
                logger.exception("Failed to regenerate collection %s", collection_id)
                errors.append({'collection_id': collection_id, 'error': str(e)})
                Collection.objects.filter(pk=collection_id).update(
                    regeneration_requested_at=timezone.now()
                )

        return {
            'processed': processed,
            'failed': len(errors),
            'remaining': Collection.objects.filter(needs_regeneration=True).count(),
            'errors': errors,
        }

    # =========================================================================
    # Collection CRUD
    # =========================================================================

    @staticmethod
    def _validate_rules(rules: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rule_types = {choice for choice, _ in CollectionRule.RULE_TYPE_CHOICES}
        operators = {choice for choice, _ in CollectionRule.OPERATOR_CHOICES}
        validated = []
        for rule in rules:
            if rule.get('rule_type') not in rule_types:
                raise InvalidRule(f"Unknown rule type: {rule.get('rule_type')}")
            if rule.get('operator') not in operators:
                raise InvalidRule(f"Unknown operator: {rule.get('operator')}")
            validated.append(rule)
        return validated

    @staticmethod
    def _replace_rules(collection: Collection, rules: Iterable[Dict[str, Any]]):
        collection.rules.all().delete()
        CollectionRule.objects.bulk_create([
            CollectionRule(
                collection=collection,
                rule_type=rule['rule_type'],
                operator=rule['operator'],
                value=str(rule.get('value', '')),
                position=index,
            )
            for index, rule in enumerate(rules)
        ])

    @staticmethod
    def create_collection(data: Dict[str, Any], rules: Optional[List[Dict[str, Any]]] = None) -> Collection:
        """
        Create a collection with its rules and generate its memberships.

        Args:
            data: Collection field values (name, slug, rule_match, ...)
            rules: List of {'rule_type', 'operator', 'value'} dicts
        """
        rules = CollectionService._validate_rules(rules or [])
        with transaction.atomic():
            collection = Collection.objects.create(**data)
            CollectionService._replace_rules(collection, rules)
            CollectionService.regenerate(collection.pk)
        collection.refresh_from_db()
        return collection

    @staticmethod
    def update_collection(
        collection_id,
        data: Dict[str, Any],
        rules: Optional[List[Dict[str, Any]]] = None,
    ) -> Collection:
        """
        Update fields, replace the rule set and regenerate memberships.

        Passing rules=None keeps the current rules; an empty list removes them.
        """
        if rules is not None:
            rules = CollectionService._validate_rules(rules)
        with transaction.atomic():
            collection = CollectionService.get_collection(collection_id, lock=True)
            for field_name, value in data.items():
                setattr(collection, field_name, value)
            collection.save()

            if rules is not None:
                CollectionService._replace_rules(collection, rules)
            CollectionService.regenerate(collection.pk)
        collection.refresh_from_db()
        return collection

    @staticmethod
    def delete_collection(collection_id):
        collection = CollectionService.get_collection(collection_id)
        logger.info("Deleting collection %s (%s)", collection.pk, collection.slug)
        collection.delete()

    # =========================================================================
    # Memberships
    # =========================================================================

    @staticmethod
    def get_collection_products(collection_id) -> QuerySet:
        collection = CollectionService.get_collection(collection_id)
        return collection.memberships.select_related('product').order_by('position', 'pk')

    @staticmethod
    def add_product(collection_id, product_id) -> Tuple[CollectionProduct, bool]:
        """
        Manually add a product at the end of the collection.

        Returns:
            Tuple of (membership, created). Adding a product that is
            already a member (manual or automatic) changes nothing.

        Raises:
            CollectionNotFound, Product.DoesNotExist
        """
        with transaction.atomic():
            collection = CollectionService.get_collection(collection_id, lock=True)
            existing = collection.memberships.filter(product_id=product_id).first()
            if existing:
                return existing, False

            product = Product.objects.get(pk=product_id)
            max_position = collection.memberships.aggregate(max_position=Max('position'))['max_position']
            membership = CollectionProduct.objects.create(
                collection=collection,
                product=product,
                position=max_position + 1 if max_position is not None else 0,
                is_manual=True,
            )
        return membership, True

    @staticmethod
    def remove_product(collection_id, product_id) -> bool:
        with transaction.atomic():
            collection = CollectionService.get_collection(collection_id, lock=True)
            deleted, _ = collection.memberships.filter(product_id=product_id).delete()
        return deleted > 0

    @staticmethod
    def reorder_products(collection_id, positions: Iterable[Dict[str, int]]) -> int:
        """
        Set membership positions and switch the collection to manual sorting.

        Args:
            positions: List of {'id': membership_id, 'position': n}

        Returns:
            Number of memberships updated
        """
        updated = 0
        with transaction.atomic():
            collection = CollectionService.get_collection(collection_id, lock=True)
            for item in positions:
                updated += collection.memberships.filter(pk=item['id']).update(
                    position=item['position'],
                    updated_at=timezone.now(),
                )
            Collection.objects.filter(pk=collection.pk).update(sort_order=Collection.SORT_MANUAL)
        return updated

    # =========================================================================
    # Storefront
    # =========================================================================

    @staticmethod
    def with_product_counts(queryset: Optional[QuerySet] = None) -> QuerySet:
        if queryset is None:
            queryset = Collection.objects.all()
        return queryset.annotate(product_count=Count('memberships', distinct=True))

    @staticmethod
    def storefront_products(collection: Collection) -> QuerySet:
        """Active products of a collection, ordered by its sort order."""
        ordering = CollectionService.SORT_ORDERING.get(
            collection.sort_order, CollectionService.SORT_ORDERING[Collection.SORT_MANUAL]
        )
        return collection.memberships.filter(
            product__status=Product.STATUS_ACTIVE
        ).select_related(
            'product', 'product__category', 'product__vendor'
        ).order_by(*ordering)
