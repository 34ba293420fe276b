# apps/collections/tests/test_rule_engine.py
import pytest
from decimal import Decimal

from apps.collections.models import Collection, CollectionRule
from apps.collections.services.rule_engine import (
    INVALID,
    ParsedNumber,
    ProductSnapshot,
    RuleEngine,
    compare_numbers,
    parse_float,
    parse_int,
)


def rule(rule_type, operator, value):
    return CollectionRule(rule_type=rule_type, operator=operator, value=value)


def snapshot(**kwargs):
    values = {'id': 1, 'price': Decimal('50.00'), 'status': 'active'}
    values.update(kwargs)
    return ProductSnapshot(**values)


def evaluate(rule_type, operator, value, product):
    return RuleEngine.evaluate_rule(RuleEngine.compile(rule(rule_type, operator, value)), product)


class TestNumberParsing:
    """Test fail-closed numeric parsing."""

    @pytest.mark.parametrize('raw, expected', [
        ('10', 10.0),
        (' 10.5 ', 10.5),
        ('-3', -3.0),
        (Decimal('49.90'), 49.9),
        (7, 7.0),
    ])
    def test_parse_float_valid(self, raw, expected):
        assert parse_float(raw) == ParsedNumber(expected)

    @pytest.mark.parametrize('raw', ['not-a-number', '', 'nan', 'inf', 'abc100', '.', None])
    def test_parse_float_invalid(self, raw):
        assert parse_float(raw) == INVALID
        assert not parse_float(raw).is_valid

    @pytest.mark.parametrize('raw, expected', [
        ('100abc', 100.0),
        ('12.5%', 12.5),
        ('1e3', 1000.0),
        ('.5', 0.5),
        ('-Infinity', float('-inf')),
    ])
    def test_parse_float_reads_numeric_prefix(self, raw, expected):
        assert parse_float(raw) == ParsedNumber(expected)

    def test_parse_int(self):
        assert parse_int('12') == ParsedNumber(12.0)
        assert parse_int(' 3 ') == ParsedNumber(3.0)
        assert parse_int('10.5') == ParsedNumber(10.0)
        assert parse_int('-4 unidades') == ParsedNumber(-4.0)
        assert not parse_int('dez').is_valid
        assert not parse_int('.5').is_valid

    def test_invalid_fails_every_comparator(self):
        for operator in ['equals', 'not_equals', 'greater_than', 'less_than',
                         'greater_than_or_equals', 'less_than_or_equals']:
            assert compare_numbers(INVALID, ParsedNumber(1.0), operator) is False
            assert compare_numbers(ParsedNumber(1.0), INVALID, operator) is False

    def test_unknown_operator_is_false(self):
        assert compare_numbers(ParsedNumber(1.0), ParsedNumber(1.0), 'contains') is False


class TestPricePredicates:
    """Test price and compare-at price rules."""

    @pytest.mark.parametrize('operator, value, expected', [
        ('equals', '50', True),
        ('equals', '50.00', True),
        ('not_equals', '50', False),
        ('greater_than', '49.99', True),
        ('greater_than', '50', False),
        ('less_than', '50.01', True),
        ('greater_than_or_equals', '50', True),
        ('less_than_or_equals', '49', False),
    ])
    def test_price(self, operator, value, expected):
        product = snapshot(price=Decimal('50.00'))
        assert evaluate('price', operator, value, product) is expected

    def test_compare_at_price_absent_is_always_false(self):
        product = snapshot(compare_at_price=None)

        assert evaluate('compare_at_price', 'not_equals', '10', product) is False
        assert evaluate('compare_at_price', 'greater_than', '0', product) is False

    def test_compare_at_price_present(self):
        product = snapshot(compare_at_price=Decimal('120.00'))

        assert evaluate('compare_at_price', 'greater_than', '100', product) is True
        assert evaluate('compare_at_price', 'equals', '120', product) is True

    def test_non_numeric_value_fails_closed(self):
        product = snapshot(price=Decimal('50.00'))

        assert evaluate('price', 'not_equals', 'not-a-number', product) is False
        assert evaluate('price', 'less_than', 'not-a-number', product) is False


class TestInventoryPredicate:
    """Test inventory rules against precomputed totals."""

    def test_compares_total_inventory(self):
        product = snapshot(total_inventory=5)

        assert evaluate('inventory', 'greater_than', '0', product) is True
        assert evaluate('inventory', 'less_than_or_equals', '4', product) is False
        assert evaluate('inventory', 'equals', '5', product) is True

    def test_zero_inventory(self):
        product = snapshot(total_inventory=0)

        assert evaluate('inventory', 'equals', '0', product) is True
        assert evaluate('inventory', 'greater_than', '0', product) is False

    def test_decimal_value_is_truncated(self):
        product = snapshot(total_inventory=10)

        assert evaluate('inventory', 'equals', '10.5', product) is True
        assert evaluate('inventory', 'less_than', '10.5', product) is False

    def test_non_numeric_value_fails_closed(self):
        product = snapshot(total_inventory=10)
        assert evaluate('inventory', 'not_equals', 'muitos', product) is False


class TestIdentifierPredicates:
    """Test category and vendor rules, including null handling."""

    @pytest.mark.parametrize('rule_type', ['category', 'vendor'])
    def test_unassigned(self, rule_type):
        product = snapshot(category_id=None, vendor_id=None)

        assert evaluate(rule_type, 'equals', '1', product) is False
        assert evaluate(rule_type, 'not_equals', '1', product) is True
        assert evaluate(rule_type, 'greater_than', '1', product) is False

    def test_category_assigned(self):
        product = snapshot(category_id=7)

        assert evaluate('category', 'equals', '7', product) is True
        assert evaluate('category', 'equals', '8', product) is False
        assert evaluate('category', 'not_equals', '8', product) is True
        assert evaluate('category', 'less_than', '8', product) is False

    def test_vendor_assigned(self):
        product = snapshot(vendor_id=3)

        assert evaluate('vendor', 'equals', '3', product) is True
        assert evaluate('vendor', 'not_equals', '3', product) is False


class TestTagAndStatusPredicates:

    def test_tag_membership(self):
        product = snapshot(tag_ids=frozenset({'4', '9'}))

        assert evaluate('tag', 'equals', '9', product) is True
        assert evaluate('tag', 'equals', '5', product) is False
        assert evaluate('tag', 'not_equals', '5', product) is True
        assert evaluate('tag', 'not_equals', '4', product) is False
        assert evaluate('tag', 'greater_than', '1', product) is False

    def test_tag_without_tags(self):
        product = snapshot()

        assert evaluate('tag', 'equals', '1', product) is False
        assert evaluate('tag', 'not_equals', '1', product) is True

    def test_status(self):
        product = snapshot(status='active')

        assert evaluate('status', 'equals', 'active', product) is True
        assert evaluate('status', 'not_equals', 'active', product) is False
        assert evaluate('status', 'not_equals', 'draft', product) is True
        assert evaluate('status', 'contains', 'act', product) is False

    @pytest.mark.parametrize('rule_type', [
        'price', 'compare_at_price', 'inventory', 'category', 'vendor', 'tag', 'status',
    ])
    def test_contains_operators_never_match(self, rule_type):
        product = snapshot(
            compare_at_price=Decimal('1'), category_id=1, vendor_id=1,
            tag_ids=frozenset({'1'}), total_inventory=1,
        )

        assert evaluate(rule_type, 'contains', '1', product) is False
        assert evaluate(rule_type, 'not_contains', '1', product) is False

    def test_unknown_rule_type(self):
        assert evaluate('weight', 'equals', '1', snapshot()) is False


class TestRuleCombination:
    """Test all / any match modes."""

    def setup_method(self):
        self.rules = [
            rule('status', 'equals', 'active'),
            rule('price', 'greater_than', '100'),
        ]

    def test_all_requires_every_rule(self):
        engine = RuleEngine(self.rules, Collection.RULE_MATCH_ALL)

        assert engine.matches(snapshot(status='active', price=Decimal('50'))) is False
        assert engine.matches(snapshot(status='active', price=Decimal('150'))) is True

    def test_any_requires_one_rule(self):
        engine = RuleEngine(self.rules, Collection.RULE_MATCH_ANY)

        assert engine.matches(snapshot(status='active', price=Decimal('50'))) is True
        assert engine.matches(snapshot(status='draft', price=Decimal('50'))) is False

    def test_bad_value_under_all_excludes_everything(self):
        engine = RuleEngine(
            [rule('status', 'equals', 'active'), rule('price', 'greater_than', 'not-a-number')],
            Collection.RULE_MATCH_ALL,
        )
        products = [snapshot(id=i, price=Decimal(i * 100)) for i in range(1, 4)]

        assert engine.filter(products) == []

    def test_bad_value_under_any_contributes_nothing(self):
        engine = RuleEngine(
            [rule('price', 'greater_than', 'not-a-number'), rule('status', 'equals', 'active')],
            Collection.RULE_MATCH_ANY,
        )
        active = snapshot(id=1, status='active')
        draft = snapshot(id=2, status='draft')

        assert engine.filter([active, draft]) == [active]

    def test_filter_keeps_input_order(self):
        engine = RuleEngine([rule('price', 'greater_than', '10')], Collection.RULE_MATCH_ALL)
        products = [snapshot(id=i, price=Decimal('20')) for i in (5, 2, 9)]

        assert [p.id for p in engine.filter(products)] == [5, 2, 9]
