"""
Catalog models consumed by the storefront and by automatic collections.

Model Hierarchy:
- Category: Hierarchical grouping (a product has at most one)
- Vendor: Supplier / brand of a product
- ProductTag: Free-form labels attached to products
- Product: Base product with price, status, category, vendor and tags
- Variant: Individual SKU (products without options own one default variant)
- Inventory: Stock levels per variant
- InventoryTracking: Audit trail of stock adjustments
"""

from .category import Category
from .vendor import Vendor
from .tag import ProductTag
from .product import Product
from .variant import Variant
from .inventory import Inventory, InventoryTracking

__all__ = [
    'Category',
    'Vendor',
    'ProductTag',
    'Product',
    'Variant',
    'Inventory',
    'InventoryTracking',
]
