"""
Collection rule evaluation engine.

Evaluates CollectionRule predicates (price, compare-at price, inventory,
category, vendor, tag, status) against product snapshots and combines the
per-rule results with the collection's match mode (all / any).

Evaluation is pure: it works on ProductSnapshot values built by the caller
and never touches the database.
"""

import logging
import operator as op
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Union

from apps.collections.models import Collection, CollectionRule

logger = logging.getLogger(__name__)


class ParsedNumber(NamedTuple):
    """Result of parsing a numeric rule or product value.

    `value` is None when the input could not be parsed; such a number
    fails every comparison.
    """
    value: Optional[float]

    @property
    def is_valid(self) -> bool:
        return self.value is not None


INVALID = ParsedNumber(None)

NUMERIC_COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    CollectionRule.OP_EQUALS: op.eq,
    CollectionRule.OP_NOT_EQUALS: op.ne,
    CollectionRule.OP_GREATER_THAN: op.gt,
    CollectionRule.OP_LESS_THAN: op.lt,
    CollectionRule.OP_GREATER_THAN_OR_EQUALS: op.ge,
    CollectionRule.OP_LESS_THAN_OR_EQUALS: op.le,
}

NUMERIC_RULE_TYPES = frozenset([
    CollectionRule.TYPE_PRICE,
    CollectionRule.TYPE_COMPARE_AT_PRICE,
    CollectionRule.TYPE_INVENTORY,
])

# Only the numeric prefix counts; trailing text is ignored
FLOAT_PREFIX = re.compile(
    r'\s*([+-]?(?:Infinity|\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))'
)
INT_PREFIX = re.compile(r'\s*([+-]?\d+)')


def parse_float(raw: Union[str, Decimal, float, int, None]) -> ParsedNumber:
    """Read the leading decimal number of `raw` ("100abc" -> 100.0)."""
    if raw is None:
        return INVALID
    match = FLOAT_PREFIX.match(str(raw))
    if not match:
        return INVALID
    return ParsedNumber(float(match.group(1)))


def parse_int(raw: Union[str, int, None]) -> ParsedNumber:
    """Read the leading integer of `raw` ("10.5" -> 10.0)."""
    if raw is None:
        return INVALID
    match = INT_PREFIX.match(str(raw))
    if not match:
        return INVALID
    return ParsedNumber(float(int(match.group(1))))


def compare_numbers(actual: ParsedNumber, target: ParsedNumber, operator: str) -> bool:
    """Apply a numeric operator; invalid numbers and unknown operators never match."""
    if not actual.is_valid or not target.is_valid:
        return False
    comparator = NUMERIC_COMPARATORS.get(operator)
    if comparator is None:
        return False
    return comparator(actual.value, target.value)


@dataclass(frozen=True)
class ProductSnapshot:
    """The product fields rules can look at, captured once per regeneration."""
    id: int
    price: Decimal
    status: str
    compare_at_price: Optional[Decimal] = None
    category_id: Optional[int] = None
    vendor_id: Optional[int] = None
    tag_ids: FrozenSet[str] = field(default_factory=frozenset)
    total_inventory: int = 0


class CompiledRule(NamedTuple):
    rule_type: str
    operator: str
    value: str
    target: ParsedNumber


def _match_identifier(actual: Optional[int], operator: str, value: str) -> bool:
    if actual is None:
        return operator == CollectionRule.OP_NOT_EQUALS
    if operator == CollectionRule.OP_EQUALS:
        return str(actual) == value
    if operator == CollectionRule.OP_NOT_EQUALS:
        return str(actual) != value
    return False


class RuleEngine:
    """Evaluates a collection's rule set against product snapshots."""

    def __init__(self, rules: Iterable[CollectionRule], rule_match: str = Collection.RULE_MATCH_ALL):
        self.rule_match = rule_match
        self.rules = [self.compile(rule) for rule in rules]

    @staticmethod
    def compile(rule: CollectionRule) -> CompiledRule:
        """Parse the rule's target number once.

        Args:
            rule: Anything with rule_type, operator and value attributes.

        Returns:
            CompiledRule carrying the parsed target (INVALID for
            non-numeric rule types or unparseable values).
        """
        target = INVALID
        if rule.rule_type == CollectionRule.TYPE_INVENTORY:
            target = parse_int(rule.value)
        elif rule.rule_type in NUMERIC_RULE_TYPES:
            target = parse_float(rule.value)

        if rule.rule_type in NUMERIC_RULE_TYPES and not target.is_valid:
            logger.debug(
                "Rule %s %s %r has a non-numeric value, it will match nothing",
                rule.rule_type, rule.operator, rule.value,
            )
        return CompiledRule(rule.rule_type, rule.operator, rule.value, target)

    @staticmethod
    def evaluate_rule(rule: CompiledRule, product: ProductSnapshot) -> bool:
        rule_type, operator, value, target = rule

        if rule_type == CollectionRule.TYPE_PRICE:
            return compare_numbers(parse_float(product.price), target, operator)

        if rule_type == CollectionRule.TYPE_COMPARE_AT_PRICE:
            if product.compare_at_price is None:
                return False
            return compare_numbers(parse_float(product.compare_at_price), target, operator)

        if rule_type == CollectionRule.TYPE_INVENTORY:
            return compare_numbers(ParsedNumber(float(product.total_inventory)), target, operator)

        if rule_type == CollectionRule.TYPE_CATEGORY:
            return _match_identifier(product.category_id, operator, value)

        if rule_type == CollectionRule.TYPE_VENDOR:
            return _match_identifier(product.vendor_id, operator, value)

        if rule_type == CollectionRule.TYPE_TAG:
            if operator == CollectionRule.OP_EQUALS:
                return value in product.tag_ids
            if operator == CollectionRule.OP_NOT_EQUALS:
                return value not in product.tag_ids
            return False

        if rule_type == CollectionRule.TYPE_STATUS:
            if operator == CollectionRule.OP_EQUALS:
                return product.status == value
            if operator == CollectionRule.OP_NOT_EQUALS:
                return product.status != value
            return False

        return False

    def matches(self, product: ProductSnapshot) -> bool:
        results = [self.evaluate_rule(rule, product) for rule in self.rules]
        if self.rule_match == Collection.RULE_MATCH_ALL:
            return all(results)
        return any(results)

    def filter(self, products: Iterable[ProductSnapshot]) -> List[ProductSnapshot]:
        """Return the matching products, keeping the input order."""
        return [product for product in products if self.matches(product)]
