"""
Clause library data models: clauses, sections and policy templates.

Wire payloads use the authoring tool's camelCase keys for sections and
templates (``sectionType``, ``suggestedClauses``, ``mandatoryClauses``);
``from_dict`` also accepts snake_case.
"""

from typing import Dict, Any, Optional, List, Mapping, Tuple
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field


class SectionType(str, Enum):
    """Kind of document section."""
    POLICY = "policy"
    PROCEDURE = "procedure"
    APPENDIX = "appendix"

    @classmethod
    def parse(cls, value: Any) -> "SectionType":
        try:
            return cls(value)
        except ValueError:
            return cls.POLICY


@dataclass(frozen=True)
class ClauseVariable:
    """Template variable declared by a clause body."""
    name: str
    description: str
    type: str = "text"
    required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "required": self.required,
        }


@dataclass(frozen=True)
class Clause:
    """Reusable templated paragraph of policy text."""
    id: str
    policy_key: str
    title: str
    body_md: str
    tags: Mapping[str, Any] = field(default_factory=dict)
    variables: Tuple[ClauseVariable, ...] = ()
    version: str = "1.0.0"
    status: str = "active"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Clause":
        variables = []
        for item in data.get("variables") or []:
            if isinstance(item, Mapping) and item.get("name"):
                variables.append(ClauseVariable(
                    name=str(item["name"]),
                    description=str(item.get("description") or item["name"]),
                    type=str(item.get("type") or "text"),
                    required=bool(item.get("required", True)),
                ))
        tags = data.get("tags")
        return cls(
            id=str(data.get("id") or data.get("code") or ""),
            policy_key=str(data.get("policy_key") or ""),
            title=str(data.get("title") or ""),
            body_md=str(data.get("body_md") or ""),
            tags=dict(tags) if isinstance(tags, Mapping) else {},
            variables=tuple(variables),
            version=str(data.get("version") or "1.0.0"),
            status=str(data.get("status") or "active"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "policy_key": self.policy_key,
            "title": self.title,
            "body_md": self.body_md,
            "tags": dict(self.tags),
            "variables": [v.to_dict() for v in self.variables],
            "version": self.version,
            "status": self.status,
        }


@dataclass(frozen=True)
class Section:
    """Ordered grouping of clauses within a policy template."""
    id: str
    title: str
    summary: str = ""
    section_type: SectionType = SectionType.POLICY
    suggested_clauses: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Section":
        clause_ids = data.get("suggestedClauses", data.get("suggested_clauses")) or []
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or data.get("id") or ""),
            summary=str(data.get("summary") or ""),
            section_type=SectionType.parse(data.get("sectionType", data.get("section_type"))),
            suggested_clauses=tuple(str(c) for c in clause_ids if c),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "sectionType": self.section_type.value,
            "suggestedClauses": list(self.suggested_clauses),
        }


@dataclass(frozen=True)
class Template:
    """Ordered sections of one policy plus its mandatory clause contract."""
    code: str
    name: str
    sections: Tuple[Section, ...] = ()
    category: str = ""
    description: str = ""

    @property
    def mandatory_clauses(self) -> Tuple[str, ...]:
        """Union of every section's clause ids, first-seen order."""
        seen: List[str] = []
        for section in self.sections:
            for clause_id in section.suggested_clauses:
                if clause_id not in seen:
                    seen.append(clause_id)
        return tuple(seen)

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_for_clause(self, clause_id: str) -> Optional[Section]:
        """First section that lists ``clause_id``."""
        for section in self.sections:
            if clause_id in section.suggested_clauses:
                return section
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Template":
        sections = [
            Section.from_dict(item) for item in data.get("sections") or []
            if isinstance(item, Mapping)
        ]
        return cls(
            code=str(data.get("code") or ""),
            name=str(data.get("name") or data.get("code") or ""),
            sections=tuple(sections),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "sections": [s.to_dict() for s in self.sections],
            "mandatoryClauses": list(self.mandatory_clauses),
        }


class ClauseExtractRequest(BaseModel):
    """Request model for placeholder extraction."""
    body: str = Field(..., description="Raw clause body with [Bracketed placeholders]")


class ClauseVariableResponse(BaseModel):
    name: str
    description: str
    type: str = "text"
    required: bool = True


class ClauseExtractResponse(BaseModel):
    body_md: str
    variables: List[ClauseVariableResponse] = Field(default_factory=list)


class ClauseRenderRequest(BaseModel):
    """Request model for template rendering."""
    template: str = Field(..., description="Template containing {{variable}} tokens")
    variables: Dict[str, Any] = Field(default_factory=dict, description="Bound values")


class ClauseRenderResponse(BaseModel):
    rendered: str
    unresolved: List[str] = Field(default_factory=list)
