"""
Assembly data models.
"""

from typing import Dict, Any, Optional, List, Mapping, Tuple
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..clauses.models import SectionType
from .tiering import uniq


class ModuleKind(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class PolicyModule:
    """A group of clauses placed into one section.

    ``reasons`` is human-readable provenance only.
    """
    id: str
    title: str
    summary: str
    section_id: str
    section_type: SectionType
    kind: ModuleKind
    clause_ids: Tuple[str, ...] = ()
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "sectionId": self.section_id,
            "sectionType": self.section_type.value,
            "kind": self.kind.value,
            "clauseIds": list(self.clause_ids),
            "reasons": list(self.reasons),
        }


def collect_section_clauses(modules: Tuple[PolicyModule, ...]) -> Dict[str, Tuple[str, ...]]:
    """Ordered-unique union of module clause ids per section, in module order."""
    collected: Dict[str, List[str]] = {}
    for module in modules:
        collected.setdefault(module.section_id, []).extend(module.clause_ids)
    return {section_id: tuple(uniq(ids)) for section_id, ids in collected.items()}


@dataclass(frozen=True)
class AssemblyResult:
    modules: Tuple[PolicyModule, ...] = ()
    section_clauses: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_modules(cls, modules: List[PolicyModule]) -> "AssemblyResult":
        modules = tuple(modules)
        return cls(modules=modules, section_clauses=collect_section_clauses(modules))

    @property
    def clause_ids(self) -> List[str]:
        """Every selected clause id, section order then clause order."""
        return uniq(c for ids in self.section_clauses.values() for c in ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modules": [m.to_dict() for m in self.modules],
            "sectionClauses": {k: list(v) for k, v in self.section_clauses.items()},
        }


class PolicyModuleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    summary: str
    section_id: str = Field(..., alias="sectionId")
    section_type: str = Field(..., alias="sectionType")
    kind: str
    clause_ids: List[str] = Field(default_factory=list, alias="clauseIds")
    reasons: List[str] = Field(default_factory=list)


class AssemblyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modules: List[PolicyModuleResponse] = Field(default_factory=list)
    section_clauses: Dict[str, List[str]] = Field(default_factory=dict, alias="sectionClauses")


class AssembleRequest(BaseModel):
    """Request model for policy assembly."""
    template: Dict[str, Any] = Field(..., description="Template with ordered sections")
    answers: Dict[str, Any] = Field(default_factory=dict, description="Firm wizard answers")
    rules_result: Optional[Dict[str, Any]] = Field(None, description="Output of /rules/evaluate")
