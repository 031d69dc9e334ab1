"""
Unit tests for the rule firing engine.
"""

import pytest

from shared.test_helpers import TestDataFactory
from service_policies.app.rules.engine import evaluate_rules, order_rules
from service_policies.app.rules.models import Rule, RuleRunContext, RulesEngineResult


class TestRuleEngine:
    """Test cases for evaluate_rules."""

    @pytest.fixture
    def context(self):
        """Create a run context."""
        return RuleRunContext(
            policy_id="policy-1",
            answers={"pep_domestic": True, "risk_score": 75},
            firm_attributes={"firm_size": "small"},
        )

    @pytest.fixture
    def pep_rule(self):
        """Create the domestic PEP rule."""
        return TestDataFactory.create_rule(
            "rule-pep",
            {"q": "pep_domestic", "eq": True},
            {"include_clause_codes": ["aml_edd_domestic_pep"], "set_vars": {"approver_role": "SMF17"}},
            priority=10,
        )

    def test_included_clause_and_variable(self, pep_rule, context):
        """Test a fired rule includes its clause and sets its variable."""
        result = evaluate_rules([pep_rule], context)

        assert result.included_clauses == ("aml_edd_domestic_pep",)
        assert result.variables["approver_role"] == "SMF17"
        assert result.rules_fired[0].condition_met is True
        assert result.rules_fired[0].rule_id == "rule-pep"

    def test_unmet_condition_records_firing_only(self, context):
        """Test an unmet rule is audited but contributes nothing."""
        rule = TestDataFactory.create_rule(
            "rule-score", {"q": "risk_score", "gt": 80}, {"include_clause_codes": ["high_risk"]}
        )
        result = evaluate_rules([rule], context)

        assert result.included_clauses == ()
        assert len(result.rules_fired) == 1
        assert result.rules_fired[0].condition_met is False

    def test_rules_fired_counts_active_rules_for_policy(self, pep_rule, context):
        """Test only active rules of the policy are considered."""
        rules = [
            pep_rule,
            TestDataFactory.create_rule("inactive", {"q": "x", "eq": 1}, is_active=False),
            TestDataFactory.create_rule("other-policy", {"q": "x", "eq": 1}, policy_id="policy-2"),
            TestDataFactory.create_rule("unmet", {"q": "x", "eq": 1}),
        ]
        result = evaluate_rules(rules, context)

        assert [f.rule_id for f in result.rules_fired] == ["rule-pep", "unmet"]

    def test_none_policy_considers_all_active_rules(self, pep_rule):
        """Test a None policy id evaluates every active rule."""
        other = TestDataFactory.create_rule("other", {"q": "x", "eq": 1}, policy_id="policy-2")
        result = evaluate_rules([pep_rule, other], RuleRunContext(policy_id=None, answers={}))

        assert len(result.rules_fired) == 2

    def test_priority_wins_on_set_vars(self, context):
        """Test the highest-priority rule owns a variable regardless of list order."""
        low = TestDataFactory.create_rule(
            "low", {"q": "pep_domestic", "eq": True}, {"set_vars": {"approver_role": "SMF16"}}, priority=1
        )
        high = TestDataFactory.create_rule(
            "high", {"q": "pep_domestic", "eq": True}, {"set_vars": {"approver_role": "SMF17"}}, priority=50
        )

        assert evaluate_rules([low, high], context).variables["approver_role"] == "SMF17"
        assert evaluate_rules([high, low], context).variables["approver_role"] == "SMF17"

    def test_inclusion_is_idempotent(self, context):
        """Test the same clause included twice appears once."""
        rules = [
            TestDataFactory.create_rule("a", {"q": "pep_domestic", "eq": True},
                                        {"include_clause_codes": ["edd", "pep"]}),
            TestDataFactory.create_rule("b", {"q": "risk_score", "gt": 70},
                                        {"include_clause_codes": ["edd"], "exclude_clause_codes": ["sdd", "sdd"]}),
        ]
        result = evaluate_rules(rules, context)

        assert result.included_clauses == ("edd", "pep")
        assert result.excluded_clauses == ("sdd",)

    def test_engine_does_not_subtract_exclusions(self, context):
        """Test inclusions and exclusions are reported independently."""
        rules = [
            TestDataFactory.create_rule("inc", {"q": "pep_domestic", "eq": True},
                                        {"include_clause_codes": ["edd"]}, priority=2),
            TestDataFactory.create_rule("exc", {"q": "pep_domestic", "eq": True},
                                        {"exclude_clause_codes": ["edd"]}, priority=1),
        ]
        result = evaluate_rules(rules, context)

        assert result.included_clauses == ("edd",)
        assert result.excluded_clauses == ("edd",)

    def test_suggestions_unique_with_first_reason(self, context):
        """Test suggestions keep the first reason per code."""
        rules = [
            TestDataFactory.create_rule("first", {"q": "pep_domestic", "eq": True},
                                        {"suggest_clause_codes": ["training"], "reason": "PEP exposure"},
                                        priority=5, name="PEP"),
            TestDataFactory.create_rule("second", {"q": "risk_score", "gt": 70},
                                        {"suggest_clause_codes": ["training", "review"]},
                                        priority=1, name="High risk"),
        ]
        result = evaluate_rules(rules, context)

        assert [(s.code, s.reason) for s in result.suggested_clauses] == [
            ("training", "PEP exposure"),
            ("review", "Suggested by rule: High risk"),
        ]

    def test_deterministic(self, pep_rule, context):
        """Test identical inputs give identical results."""
        rules = [
            pep_rule,
            TestDataFactory.create_rule("b", {"q": "risk_score", "gt": 70},
                                        {"suggest_clause_codes": ["review"], "set_vars": {"tier": "high"}}),
        ]
        assert evaluate_rules(rules, context).to_dict() == evaluate_rules(rules, context).to_dict()

    def test_malformed_rules_do_not_fire(self, context):
        """Test malformed records are skipped or simply not met."""
        rules = [
            "not a rule",
            {"id": "no-condition", "policy_id": "policy-1", "action": {"include_clause_codes": ["x"]}},
            TestDataFactory.create_rule("bad-action", {"q": "pep_domestic", "eq": True}, action=None),
        ]
        rules[2]["action"] = "include everything"
        result = evaluate_rules(rules, context)

        assert result.included_clauses == ()
        assert [f.condition_met for f in result.rules_fired] == [False, True]

    def test_result_wire_shape(self, pep_rule, context):
        """Test the serialised result shape."""
        data = evaluate_rules([pep_rule], context).to_dict()

        assert set(data) == {"included_clauses", "excluded_clauses", "suggested_clauses", "variables", "rules_fired"}
        assert data["rules_fired"] == [
            {"rule_id": "rule-pep", "rule_name": "Rule rule-pep", "condition_met": True}
        ]
        assert RulesEngineResult.from_dict(data).to_dict() == data


class TestOrderRules:
    """Test cases for rule ordering."""

    def test_descending_priority_stable(self):
        """Test rules sort by priority descending, ties keep list order."""
        rules = [
            TestDataFactory.create_rule("a", {"q": "x", "eq": 1}, priority=1),
            TestDataFactory.create_rule("b", {"q": "x", "eq": 1}, priority=5),
            TestDataFactory.create_rule("c", {"q": "x", "eq": 1}, priority=1),
        ]
        assert [r.id for r in order_rules(rules, "policy-1")] == ["b", "a", "c"]

    def test_invalid_priority_sorts_last(self):
        """Test non-numeric priorities are evaluated last."""
        rules = [
            TestDataFactory.create_rule("bad", {"q": "x", "eq": 1}, priority="high"),
            TestDataFactory.create_rule("neg", {"q": "x", "eq": 1}, priority=-5),
            TestDataFactory.create_rule("bool", {"q": "x", "eq": 1}, priority=True),
        ]
        assert [r.id for r in order_rules(rules)] == ["neg", "bad", "bool"]

    def test_accepts_rule_objects(self):
        """Test parsed Rule objects are accepted."""
        rule = Rule.from_dict(TestDataFactory.create_rule("a", {"q": "x", "eq": 1}))
        assert order_rules([rule]) == [rule]
