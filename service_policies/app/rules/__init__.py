"""
Rules engine package.

Defines the rule model, the single-predicate condition evaluator and the
priority-ordered firing engine used to decide which clauses a firm's policy
includes, excludes or should consider, and which template variables it sets.

Modules of interest:
- models: Data classes for Rule, RuleCondition, RuleAction and results.
- conditions: AnswerLookup and the ordered comparator matchers.
- engine: Fold of fired rule actions into a RulesEngineResult.
"""

from .conditions import AnswerLookup, evaluate_condition
from .engine import evaluate_rules, order_rules
from .models import (
    Rule, RuleAction, RuleCondition, RuleConditionOperator, RuleFiring,
    RuleRunContext, RulesEngineResult, SuggestedClause,
)

__all__ = [
    "AnswerLookup",
    "evaluate_condition",
    "evaluate_rules",
    "order_rules",
    "Rule",
    "RuleAction",
    "RuleCondition",
    "RuleConditionOperator",
    "RuleFiring",
    "RuleRunContext",
    "RulesEngineResult",
    "SuggestedClause",
]
