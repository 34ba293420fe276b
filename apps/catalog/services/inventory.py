"""
Inventory service: stock totals per product and manual stock adjustments.
"""

import logging
from typing import Dict, Iterable, Union

from django.db import transaction
from django.db.models import QuerySet

from apps.catalog.models import Inventory, InventoryTracking, Product, Variant

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Service for reading and adjusting variant stock levels.
    """

    ADJUST_ADD = 'add'
    ADJUST_REMOVE = 'remove'
    ADJUST_SET = 'set'
    ADJUSTMENT_TYPES = (ADJUST_ADD, ADJUST_REMOVE, ADJUST_SET)

    @staticmethod
    def total_inventory_by_product(
        products: Union[QuerySet, Iterable[int]]
    ) -> Dict[int, int]:
        """
        Compute available units per product with a single query.

        The total is the sum of `available` across all of the product's
        variants, default variant included. Variants without an inventory
        record count as 0.

        Args:
            products: Product ids, or a queryset yielding product ids
                (used as a subquery, so large catalogs stay one query)

        Returns:
            Dict of {product_id: total}. Products with no variants at all
            are absent; callers should default them to 0.
        """
        rows = Variant.objects.filter(product_id__in=products).values_list(
            'product_id', 'inventory__available'
        )

        totals: Dict[int, int] = {}
        for product_id, available in rows:
            totals[product_id] = totals.get(product_id, 0) + (available or 0)
        return totals

    @staticmethod
    def total_inventory(product: Product) -> int:
        totals = InventoryService.total_inventory_by_product([product.pk])
        return totals.get(product.pk, 0)

    @staticmethod
    def adjust(
        variant: Variant,
        adjustment_type: str,
        quantity: int,
        reason: str = '',
        user=None,
    ) -> Inventory:
        """
        Manually adjust a variant's stock and record the change.

        Args:
            variant: Variant whose inventory is adjusted
            adjustment_type: 'add', 'remove' or 'set'
            quantity: Non-negative amount
            reason: Free text stored on the tracking record
            user: User performing the change (optional)

        Returns:
            The updated Inventory row
        """
        if adjustment_type not in InventoryService.ADJUSTMENT_TYPES:
            raise ValueError(f"Invalid adjustment type: {adjustment_type}")
        if quantity < 0:
            raise ValueError("Quantity must be zero or positive")

        with transaction.atomic():
            inventory, _ = Inventory.objects.select_for_update().get_or_create(
                variant=variant
            )

            previous_available = inventory.available
            previous_on_hand = inventory.on_hand
            previous_reserved = inventory.reserved

            if adjustment_type == InventoryService.ADJUST_ADD:
                new_on_hand = previous_on_hand + quantity
                new_available = previous_available + quantity
                change = quantity
                tracking_type = InventoryTracking.TYPE_RESTOCK
            elif adjustment_type == InventoryService.ADJUST_REMOVE:
                new_on_hand = max(0, previous_on_hand - quantity)
                new_available = max(0, previous_available - quantity)
                change = -quantity
                tracking_type = InventoryTracking.TYPE_ADJUSTMENT_DECREASE
            else:
                new_on_hand = quantity
                new_available = max(0, quantity - previous_reserved)
                change = quantity - previous_on_hand
                tracking_type = (
                    InventoryTracking.TYPE_RESTOCK if change >= 0
                    else InventoryTracking.TYPE_ADJUSTMENT_DECREASE
                )

            inventory.on_hand = new_on_hand
            inventory.available = new_available
            inventory.save()

            InventoryTracking.objects.create(
                variant=variant,
                product_id=variant.product_id,
                type=tracking_type,
                quantity=abs(change),
                previous_available=previous_available,
                new_available=new_available,
                previous_reserved=previous_reserved,
                new_reserved=previous_reserved,
                reason=reason or f"Manual {adjustment_type} adjustment",
                user=user,
            )

        logger.info(
            "Inventory for %s adjusted (%s %s): available %s -> %s",
            variant.sku, adjustment_type, quantity, previous_available, new_available,
        )
        return inventory
