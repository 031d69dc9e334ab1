"""
Rule firing engine for the Policy Assembly service.

The engine is a fold over the active rules of one policy, taken in
descending priority order. Each step records an audit entry and, when the
rule's condition is met, folds the rule's action into an immutable result:

- inclusions and exclusions accumulate as ordered-unique code lists;
- suggestions are unique by code, the first reason seen is kept;
- ``set_vars`` is first-write-wins, so the highest-priority rule owns a key.

Exclusions are not subtracted from inclusions here; that happens once, when
the assembler unions rule output with its own modules.
"""

import math
from dataclasses import replace
from functools import reduce
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from shared.logging import get_logger
from .conditions import AnswerLookup, evaluate_with_lookup
from .models import (
    Rule, RuleAction, RuleFiring, RuleRunContext, RulesEngineResult, SuggestedClause
)

logger = get_logger("policies.rules_engine")

RuleInput = Union[Rule, Mapping[str, Any]]


def _valid_priority(priority: Any) -> bool:
    if isinstance(priority, bool) or not isinstance(priority, (int, float)):
        return False
    return not (isinstance(priority, float) and math.isnan(priority))


def _priority_key(rule: Rule) -> Tuple[int, float]:
    # Invalid priorities sort after every valid one; sorted() keeps ties stable.
    if _valid_priority(rule.priority):
        return (0, -rule.priority)
    return (1, 0.0)


def coerce_rules(rules: Iterable[RuleInput]) -> List[Rule]:
    """Turn authored rule records into ``Rule`` objects, skipping non-records."""
    coerced: List[Rule] = []
    for item in rules or ():
        if isinstance(item, Rule):
            coerced.append(item)
        elif isinstance(item, Mapping):
            coerced.append(Rule.from_dict(item))
        else:
            logger.warning("Skipping malformed rule record", record_type=type(item).__name__)
    return coerced


def order_rules(rules: Iterable[RuleInput], policy_id: Optional[str] = None) -> List[Rule]:
    """Active rules for ``policy_id`` in evaluation order.

    When ``policy_id`` is ``None`` every active rule is considered.
    """
    candidates = [
        rule for rule in coerce_rules(rules)
        if rule.is_active and (policy_id is None or rule.policy_id == policy_id)
    ]

    for rule in candidates:
        if not _valid_priority(rule.priority):
            logger.warning("Rule has invalid priority, evaluating last",
                           rule_id=rule.id, priority=repr(rule.priority))

    return sorted(candidates, key=_priority_key)


def _append_unique(existing: Tuple[str, ...], codes: Iterable[str]) -> Tuple[str, ...]:
    merged = list(existing)
    for code in codes:
        if code not in merged:
            merged.append(code)
    return tuple(merged)


def apply_action(result: RulesEngineResult, action: Optional[RuleAction], rule_name: str) -> RulesEngineResult:
    """Fold one fired rule's action into ``result``, returning a new result."""
    if action is None:
        return result

    suggested = list(result.suggested_clauses)
    seen = {s.code for s in suggested}
    for code in action.suggest_clause_codes:
        if code not in seen:
            seen.add(code)
            suggested.append(SuggestedClause(
                code=code,
                reason=action.reason or f"Suggested by rule: {rule_name}",
            ))

    variables = dict(result.variables)
    for key, value in action.set_vars.items():
        variables.setdefault(key, value)

    return replace(
        result,
        included_clauses=_append_unique(result.included_clauses, action.include_clause_codes),
        excluded_clauses=_append_unique(result.excluded_clauses, action.exclude_clause_codes),
        suggested_clauses=tuple(suggested),
        variables=variables,
    )


def _fire(lookup: AnswerLookup):
    def step(result: RulesEngineResult, rule: Rule) -> RulesEngineResult:
        try:
            condition_met = evaluate_with_lookup(rule.condition, lookup)
        except Exception as e:
            logger.error("Error evaluating rule", rule_id=rule.id, rule_name=rule.name, error=str(e))
            condition_met = False

        logger.debug("Rule evaluated", rule_id=rule.id, rule_name=rule.name, condition_met=condition_met)

        result = replace(
            result,
            rules_fired=result.rules_fired + (
                RuleFiring(rule_id=rule.id, rule_name=rule.name, condition_met=condition_met),
            ),
        )
        if condition_met:
            result = apply_action(result, rule.action, rule.name)
        return result

    return step


def evaluate_rules(rules: Iterable[RuleInput], context: RuleRunContext) -> RulesEngineResult:
    """Evaluate a rule pack for one firm and policy.

    Deterministic for identical inputs; never raises for malformed rules,
    which simply do not fire.
    """
    ordered = order_rules(rules, context.policy_id)
    lookup = AnswerLookup(context.answers, context.firm_attributes)

    result = reduce(_fire(lookup), ordered, RulesEngineResult())

    logger.info(
        "Rules evaluated",
        policy_id=context.policy_id,
        considered=len(result.rules_fired),
        fired=sum(1 for f in result.rules_fired if f.condition_met),
        included=len(result.included_clauses),
        excluded=len(result.excluded_clauses),
    )
    return result
