"""
Generated document and audit bundle models.
"""

from typing import Dict, Any, Optional, List, Mapping, Tuple
from dataclasses import dataclass

from pydantic import BaseModel, Field

from ..clauses.models import SectionType


@dataclass(frozen=True)
class PolicyInfo:
    id: str
    name: str
    version: str = "1.0.0"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolicyInfo":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or data.get("id") or ""),
            version=str(data.get("version") or "1.0.0"),
        )


@dataclass(frozen=True)
class RenderedClause:
    code: str
    title: str
    body: str
    unresolved: Tuple[str, ...] = ()
    is_mandatory: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "title": self.title,
            "body": self.body,
            "unresolved": list(self.unresolved),
            "is_mandatory": self.is_mandatory,
        }


@dataclass(frozen=True)
class DocumentSection:
    id: str
    title: str
    section_type: SectionType
    summary: str = ""
    clauses: Tuple[RenderedClause, ...] = ()

    @property
    def body(self) -> str:
        """Rendered clause bodies joined as paragraphs."""
        return "\n\n".join(clause.body for clause in self.clauses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "sectionType": self.section_type.value,
            "summary": self.summary,
            "clauses": [c.to_dict() for c in self.clauses],
            "body": self.body,
        }


class SuggestedClauseRecord(BaseModel):
    code: str
    reason: str


class RuleFiringRecord(BaseModel):
    rule_id: str
    rule_name: str
    condition_met: bool


class AuditBundle(BaseModel):
    """Provenance of one generated document, stored alongside it as JSON."""
    run_id: Optional[str] = None
    policy_id: str
    policy_name: str
    policy_version: str
    firm_id: Optional[str] = None
    firm_name: str = ""
    generated_at: str
    generated_by: Optional[str] = None
    answers: Dict[str, Any] = Field(default_factory=dict)
    visible_questions: List[str] = Field(default_factory=list)
    rules_fired: List[RuleFiringRecord] = Field(default_factory=list)
    included_clauses: List[str] = Field(default_factory=list)
    excluded_clauses: List[str] = Field(default_factory=list)
    suggested_clauses: List[SuggestedClauseRecord] = Field(default_factory=list)
    variables: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


@dataclass(frozen=True)
class PolicyDocument:
    """Assembled, rendered policy ready for export."""
    policy: PolicyInfo
    firm_name: str
    filename: str
    sections: Tuple[DocumentSection, ...]
    audit_bundle: AuditBundle
    modules: Tuple[Dict[str, Any], ...] = ()
    unresolved_tokens: Tuple[str, ...] = ()
    missing_clauses: Tuple[str, ...] = ()
    suggested_clauses: Tuple[Dict[str, str], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": {"id": self.policy.id, "name": self.policy.name, "version": self.policy.version},
            "firm_name": self.firm_name,
            "filename": self.filename,
            "sections": [s.to_dict() for s in self.sections],
            "modules": list(self.modules),
            "unresolved_tokens": list(self.unresolved_tokens),
            "missing_clauses": list(self.missing_clauses),
            "suggested_clauses": list(self.suggested_clauses),
            "audit_bundle": self.audit_bundle.model_dump(),
        }


class PolicyRef(BaseModel):
    id: str
    name: str
    version: str = "1.0.0"


class GenerateRequest(BaseModel):
    """Request model for full document generation."""
    policy: PolicyRef
    template: Dict[str, Any] = Field(..., description="Template with ordered sections")
    clauses: List[Dict[str, Any]] = Field(default_factory=list, description="Clause library records")
    rules: List[Dict[str, Any]] = Field(default_factory=list, description="Authored rules for the policy")
    answers: Dict[str, Any] = Field(default_factory=dict, description="Firm wizard answers")
    firm_profile: Dict[str, Any] = Field(default_factory=dict, description="Firm id, name and attributes")
    questions: List[Dict[str, Any]] = Field(default_factory=list, description="Wizard questions")
    run_id: Optional[str] = None
    generated_by: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
