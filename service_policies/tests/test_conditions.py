"""
Unit tests for rule condition evaluation.
"""

import pytest

from service_policies.app.rules.conditions import AnswerLookup, MISSING, evaluate_condition, strict_equals
from service_policies.app.rules.models import RuleCondition, RuleConditionOperator


class TestAnswerLookup:
    """Test cases for AnswerLookup."""

    def test_answers_take_precedence(self):
        """Test answers shadow attributes."""
        lookup = AnswerLookup({"firm_size": "large"}, {"firm_size": "small"})
        assert lookup.resolve("firm_size") == "large"

    def test_falls_back_to_attributes(self):
        """Test attribute fallback."""
        lookup = AnswerLookup({}, {"firm_size": "small"})
        assert lookup.resolve("firm_size") == "small"

    def test_explicit_none_answer_is_present(self):
        """Test an explicit None answer does not fall through."""
        lookup = AnswerLookup({"firm_size": None}, {"firm_size": "small"})
        assert lookup.resolve("firm_size") is None

    def test_missing_key(self):
        """Test absent keys resolve to MISSING."""
        lookup = AnswerLookup({"a": 1}, None)
        assert lookup.resolve("b") is MISSING
        assert lookup.resolve(None) is MISSING

    def test_non_mapping_bags_are_ignored(self):
        """Test wrong-typed bags behave as empty."""
        lookup = AnswerLookup(["not", "a", "dict"], "nope")
        assert lookup.resolve("not") is MISSING


class TestEvaluateCondition:
    """Test cases for evaluate_condition."""

    def test_eq_true(self):
        """Test boolean equality."""
        assert evaluate_condition({"q": "pep_domestic", "eq": True}, {"pep_domestic": True}) is True

    def test_eq_is_strict(self):
        """Test equality does not coerce types."""
        assert evaluate_condition({"q": "flag", "eq": True}, {"flag": 1}) is False
        assert evaluate_condition({"q": "count", "eq": "5"}, {"count": 5}) is False

    def test_gt_strict(self):
        """Test strict greater-than."""
        condition = {"q": "risk_score", "gt": 70}
        assert evaluate_condition(condition, {"risk_score": 75}) is True
        assert evaluate_condition(condition, {"risk_score": 70}) is False

    def test_lt(self):
        """Test strict less-than."""
        condition = {"q": "headcount", "lt": 50}
        assert evaluate_condition(condition, {"headcount": 10}) is True
        assert evaluate_condition(condition, {"headcount": 50}) is False

    def test_gte_lte(self):
        """Test inclusive comparators."""
        assert evaluate_condition({"q": "score", "gte": 70}, {"score": 70}) is True
        assert evaluate_condition({"q": "score", "lte": 70}, {"score": 71}) is False

    def test_numeric_comparators_fail_closed(self):
        """Test numeric comparators reject non-numbers."""
        assert evaluate_condition({"q": "risk_score", "gt": 70}, {"risk_score": "75"}) is False
        assert evaluate_condition({"q": "risk_score", "gt": 0}, {"risk_score": True}) is False
        assert evaluate_condition({"q": "risk_score", "gt": "70"}, {"risk_score": 75}) is False

    def test_includes(self):
        """Test includes on multiselect answers."""
        condition = {"q": "channels", "includes": "social"}
        assert evaluate_condition(condition, {"channels": ["web", "social"]}) is True
        assert evaluate_condition(condition, {"channels": ["web"]}) is False

    def test_includes_requires_list(self):
        """Test includes does not treat strings as sequences."""
        assert evaluate_condition({"q": "channels", "includes": "web"}, {"channels": "web, email"}) is False

    def test_in_and_nin(self):
        """Test membership comparators."""
        assert evaluate_condition({"q": "size", "in": ["small", "medium"]}, {"size": "small"}) is True
        assert evaluate_condition({"q": "size", "nin": ["small", "medium"]}, {"size": "small"}) is False
        assert evaluate_condition({"q": "size", "in": "small"}, {"size": "small"}) is False

    def test_neq(self):
        """Test inequality."""
        assert evaluate_condition({"q": "jurisdiction", "neq": "uk"}, {"jurisdiction": "uk-eea"}) is True

    def test_missing_key_is_false(self):
        """Test conditions on absent keys are not met, even neq."""
        assert evaluate_condition({"q": "unknown", "eq": True}, {}) is False
        assert evaluate_condition({"q": "unknown", "neq": True}, {}) is False

    def test_attribute_fallback(self):
        """Test firm attributes back missing answers."""
        assert evaluate_condition({"q": "firm_size", "eq": "small"}, {}, {"firm_size": "small"}) is True

    def test_missing_q(self):
        """Test a condition without q is not met."""
        assert evaluate_condition({"eq": True}, {"x": True}) is False

    def test_unknown_operator(self):
        """Test an unknown comparator is not met."""
        assert evaluate_condition({"q": "x", "matches": ".*"}, {"x": "abc"}) is False

    def test_composite_node_is_not_met(self):
        """Test all/any/not nodes are treated as unknown."""
        condition = {"all": [{"q": "x", "eq": True}]}
        assert evaluate_condition(condition, {"x": True}) is False

    def test_first_comparator_wins(self):
        """Test only the highest-priority comparator is applied."""
        condition = RuleCondition.from_dict({"q": "score", "gt": 100, "eq": 5})
        assert condition.operator is RuleConditionOperator.EQ
        assert evaluate_condition(condition, {"score": 5}) is True

    def test_does_not_mutate_inputs(self):
        """Test evaluation leaves inputs untouched."""
        answers = {"channels": ["web"]}
        condition = {"q": "channels", "includes": "web"}
        evaluate_condition(condition, answers)
        assert answers == {"channels": ["web"]}
        assert condition == {"q": "channels", "includes": "web"}

    @pytest.mark.parametrize("left,right,expected", [
        (True, True, True),
        (True, 1, False),
        (0, False, False),
        ([1, "a"], [1, "a"], True),
        ([True], [1], False),
        (1, 1.0, True),
    ])
    def test_strict_equals(self, left, right, expected):
        """Test strict equality table."""
        assert strict_equals(left, right) is expected
