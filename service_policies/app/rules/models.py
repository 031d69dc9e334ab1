"""
Rule data models for the Policy Assembly service.

Domain types are frozen dataclasses so a loaded rule pack cannot be mutated
during a run; request/response payloads are pydantic models.
"""

from typing import Dict, Any, Optional, List, Mapping, Tuple
from dataclasses import dataclass, field, asdict
from enum import Enum

from pydantic import BaseModel, Field


class RuleConditionOperator(str, Enum):
    """Rule condition operators."""
    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    NIN = "nin"
    INCLUDES = "includes"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"


# A condition node is expected to carry one comparator. When an authored node
# carries several, only the first present key in this order is honoured.
COMPARATOR_PRIORITY: Tuple[RuleConditionOperator, ...] = (
    RuleConditionOperator.EQ,
    RuleConditionOperator.NEQ,
    RuleConditionOperator.IN,
    RuleConditionOperator.NIN,
    RuleConditionOperator.INCLUDES,
    RuleConditionOperator.GT,
    RuleConditionOperator.LT,
    RuleConditionOperator.GTE,
    RuleConditionOperator.LTE,
)


@dataclass(frozen=True)
class RuleCondition:
    """Single-predicate gate over one answer/attribute key.

    ``operator`` is the tag of the union; ``None`` means the node had no
    recognised comparator and can never be met.
    """
    q: Optional[str]
    operator: Optional[RuleConditionOperator]
    value: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "RuleCondition":
        """Parse an authored ``{q, <op>: value}`` node without raising."""
        if not isinstance(data, Mapping):
            return cls(q=None, operator=None)

        q = data.get("q")
        if not isinstance(q, str) or not q:
            q = None

        for operator in COMPARATOR_PRIORITY:
            if operator.value in data:
                return cls(q=q, operator=operator, value=data[operator.value])

        return cls(q=q, operator=None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"q": self.q}
        if self.operator is not None:
            data[self.operator.value] = self.value
        return data


def _codes(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(code for code in value if isinstance(code, str) and code)


@dataclass(frozen=True)
class RuleAction:
    """Effects applied when a rule's condition is met."""
    include_clause_codes: Tuple[str, ...] = ()
    exclude_clause_codes: Tuple[str, ...] = ()
    suggest_clause_codes: Tuple[str, ...] = ()
    reason: Optional[str] = None
    set_vars: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RuleAction"]:
        """Parse an authored action; anything that is not a mapping is no action."""
        if not isinstance(data, Mapping):
            return None

        reason = data.get("reason")
        set_vars = data.get("set_vars")

        return cls(
            include_clause_codes=_codes(data.get("include_clause_codes")),
            exclude_clause_codes=_codes(data.get("exclude_clause_codes")),
            suggest_clause_codes=_codes(data.get("suggest_clause_codes")),
            reason=reason if isinstance(reason, str) and reason else None,
            set_vars=dict(set_vars) if isinstance(set_vars, Mapping) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "include_clause_codes": list(self.include_clause_codes),
            "exclude_clause_codes": list(self.exclude_clause_codes),
            "suggest_clause_codes": list(self.suggest_clause_codes),
            "reason": self.reason,
            "set_vars": dict(self.set_vars),
        }


@dataclass(frozen=True)
class Rule:
    """Priority-ordered condition -> action pair for one policy."""
    id: str
    policy_id: Optional[str]
    name: str
    condition: RuleCondition
    action: Optional[RuleAction] = None
    priority: Any = 0
    is_active: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        """Build a rule from a JSON-like record, tolerating missing fields."""
        rule_id = data.get("id")
        name = data.get("name")
        metadata = data.get("metadata")

        return cls(
            id=str(rule_id) if rule_id is not None else "",
            policy_id=data.get("policy_id"),
            name=name if isinstance(name, str) else str(rule_id or ""),
            condition=RuleCondition.from_dict(data.get("condition")),
            action=RuleAction.from_dict(data.get("action")),
            priority=data.get("priority", 0),
            is_active=data.get("is_active", True) is True,
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )


@dataclass(frozen=True)
class RuleRunContext:
    """Inputs of one rule engine run."""
    policy_id: Optional[str]
    answers: Mapping[str, Any] = field(default_factory=dict)
    firm_attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RuleFiring:
    """Audit entry for one considered rule."""
    rule_id: str
    rule_name: str
    condition_met: bool


@dataclass(frozen=True)
class SuggestedClause:
    """Advisory clause surfaced to a reviewer, never auto-inserted."""
    code: str
    reason: str


@dataclass(frozen=True)
class RulesEngineResult:
    """Accumulated output of one rule engine run."""
    included_clauses: Tuple[str, ...] = ()
    excluded_clauses: Tuple[str, ...] = ()
    suggested_clauses: Tuple[SuggestedClause, ...] = ()
    variables: Mapping[str, Any] = field(default_factory=dict)
    rules_fired: Tuple[RuleFiring, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape consumed by the authoring/test surface."""
        return {
            "included_clauses": list(self.included_clauses),
            "excluded_clauses": list(self.excluded_clauses),
            "suggested_clauses": [asdict(s) for s in self.suggested_clauses],
            "variables": dict(self.variables),
            "rules_fired": [asdict(f) for f in self.rules_fired],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RulesEngineResult":
        suggested = []
        for item in data.get("suggested_clauses") or []:
            if isinstance(item, Mapping) and isinstance(item.get("code"), str):
                suggested.append(SuggestedClause(code=item["code"], reason=str(item.get("reason") or "")))

        fired = []
        for item in data.get("rules_fired") or []:
            if isinstance(item, Mapping):
                fired.append(RuleFiring(
                    rule_id=str(item.get("rule_id") or ""),
                    rule_name=str(item.get("rule_name") or ""),
                    condition_met=bool(item.get("condition_met")),
                ))

        variables = data.get("variables")
        return cls(
            included_clauses=_codes(data.get("included_clauses")),
            excluded_clauses=_codes(data.get("excluded_clauses")),
            suggested_clauses=tuple(suggested),
            variables=dict(variables) if isinstance(variables, Mapping) else {},
            rules_fired=tuple(fired),
        )


class RulesEvaluateRequest(BaseModel):
    """Request model for a rule pack test run."""
    policy_id: Optional[str] = Field(None, description="Policy the rules belong to")
    rules: List[Dict[str, Any]] = Field(default_factory=list, description="Authored rules")
    answers: Dict[str, Any] = Field(default_factory=dict, description="Wizard answers")
    firm_attributes: Dict[str, Any] = Field(default_factory=dict, description="Firm profile attributes")


class SuggestedClauseResponse(BaseModel):
    code: str
    reason: str


class RuleFiringResponse(BaseModel):
    rule_id: str
    rule_name: str
    condition_met: bool


class RulesEngineResultResponse(BaseModel):
    """Response model mirroring RulesEngineResult field-for-field."""
    included_clauses: List[str] = Field(default_factory=list)
    excluded_clauses: List[str] = Field(default_factory=list)
    suggested_clauses: List[SuggestedClauseResponse] = Field(default_factory=list)
    variables: Dict[str, Any] = Field(default_factory=dict)
    rules_fired: List[RuleFiringResponse] = Field(default_factory=list)
