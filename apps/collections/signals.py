"""
Django signals for the collections app.
Flags rule-based collections for regeneration when catalog data they
depend on changes. The actual regeneration runs in batches
(regenerate_collections command or the cron endpoint).
"""

import logging

from django.db.models.signals import m2m_changed, post_delete, post_save
from django.dispatch import receiver

from apps.catalog.models import Category, Inventory, Product, ProductTag, Vendor
from .services import CollectionService

logger = logging.getLogger(__name__)


def _flag_collections(reason):
    flagged = CollectionService.mark_for_regeneration()
    if flagged:
        logger.debug("Flagged %s collections for regeneration (%s)", flagged, reason)


@receiver(post_save, sender=Product)
@receiver(post_delete, sender=Product)
def product_changed(sender, instance, **kwargs):
    _flag_collections(f"product {instance.pk}")


@receiver(post_save, sender=Inventory)
def inventory_changed(sender, instance, **kwargs):
    _flag_collections(f"inventory of variant {instance.variant_id}")


@receiver(m2m_changed, sender=Product.tags.through)
def product_tags_changed(sender, instance, action, **kwargs):
    if action in ('post_add', 'post_remove', 'post_clear'):
        _flag_collections(f"tags of {instance}")


@receiver(post_delete, sender=Category)
@receiver(post_delete, sender=Vendor)
@receiver(post_delete, sender=ProductTag)
def catalog_reference_deleted(sender, instance, **kwargs):
    # Deleting these nulls or drops product references without saving products
    _flag_collections(f"{sender.__name__} {instance.pk} deleted")
