from .collection_service import CollectionService, RegenerationResult
from .rule_engine import ProductSnapshot, RuleEngine

__all__ = [
    'CollectionService',
    'RegenerationResult',
    'ProductSnapshot',
    'RuleEngine',
]
