"""
Collection models.

- Collection: Named, sluggable grouping of products with a rule match mode
- CollectionRule: Typed predicate used to select products automatically
- CollectionProduct: Membership of a product (manual or automatic)
"""

from .collection import Collection, CollectionRule, CollectionProduct

__all__ = [
    'Collection',
    'CollectionRule',
    'CollectionProduct',
]
