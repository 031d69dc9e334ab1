"""
Condition evaluation for policy rules.

A condition is a single predicate over one key resolved from the firm's
wizard answers, falling back to its profile attributes. Evaluation is pure:
no I/O, no mutation of the inputs, and it never raises. Anything that cannot
be evaluated (absent key, wrong operand types, unknown comparator) is simply
"not met".
"""

import math
from typing import Any, Callable, Dict, Mapping, Optional, Union

from shared.logging import get_logger
from .models import RuleCondition, RuleConditionOperator

logger = get_logger("policies.conditions")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class AnswerLookup:
    """Key lookup over wizard answers, then firm attributes.

    Presence is decided by key membership, so an explicit ``None`` answer is a
    value and does not fall through to the attributes.
    """

    def __init__(self, answers: Optional[Mapping[str, Any]] = None,
                 attributes: Optional[Mapping[str, Any]] = None):
        self._sources = tuple(
            source for source in (answers, attributes) if isinstance(source, Mapping)
        )

    def resolve(self, key: Optional[str]) -> Any:
        """Return the bound value or ``MISSING``."""
        if not isinstance(key, str):
            return MISSING
        for source in self._sources:
            if key in source:
                return source[key]
        return MISSING


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without Python's bool/int crossover (``True != 1``)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if _is_sequence(left) and _is_sequence(right):
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )
    return left == right


def _contains(items: Any, needle: Any) -> bool:
    return any(strict_equals(item, needle) for item in items)


def _eq(value: Any, operand: Any) -> bool:
    return strict_equals(value, operand)


def _neq(value: Any, operand: Any) -> bool:
    return not strict_equals(value, operand)


def _in(value: Any, operand: Any) -> bool:
    return _is_sequence(operand) and _contains(operand, value)


def _nin(value: Any, operand: Any) -> bool:
    return _is_sequence(operand) and not _contains(operand, value)


def _includes(value: Any, operand: Any) -> bool:
    # Multiselect answers only; a string is not treated as a sequence.
    return _is_sequence(value) and _contains(value, operand)


def _numeric(compare: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def matcher(value: Any, operand: Any) -> bool:
        return is_number(value) and is_number(operand) and compare(value, operand)
    return matcher


MATCHERS: Dict[RuleConditionOperator, Callable[[Any, Any], bool]] = {
    RuleConditionOperator.EQ: _eq,
    RuleConditionOperator.NEQ: _neq,
    RuleConditionOperator.IN: _in,
    RuleConditionOperator.NIN: _nin,
    RuleConditionOperator.INCLUDES: _includes,
    RuleConditionOperator.GT: _numeric(lambda a, b: a > b),
    RuleConditionOperator.LT: _numeric(lambda a, b: a < b),
    RuleConditionOperator.GTE: _numeric(lambda a, b: a >= b),
    RuleConditionOperator.LTE: _numeric(lambda a, b: a <= b),
}


def evaluate_with_lookup(condition: RuleCondition, lookup: AnswerLookup) -> bool:
    """Evaluate a parsed condition against a prepared lookup."""
    if condition.q is None:
        logger.warning("Rule condition missing question code", condition=condition.to_dict())
        return False

    if condition.operator is None:
        logger.warning("Unknown rule operator in condition", condition=condition.to_dict())
        return False

    value = lookup.resolve(condition.q)
    if value is MISSING:
        return False

    return MATCHERS[condition.operator](value, condition.value)


def evaluate_condition(condition: Union[RuleCondition, Mapping[str, Any]],
                       answers: Optional[Mapping[str, Any]] = None,
                       attributes: Optional[Mapping[str, Any]] = None) -> bool:
    """Evaluate ``condition`` against answers, then firm attributes.

    Accepts a parsed ``RuleCondition`` or an authored ``{"q": ..., "eq": ...}``
    mapping. When a node carries several comparators, only the first in
    ``COMPARATOR_PRIORITY`` order is applied.
    """
    if not isinstance(condition, RuleCondition):
        condition = RuleCondition.from_dict(condition)
    return evaluate_with_lookup(condition, AnswerLookup(answers, attributes))
