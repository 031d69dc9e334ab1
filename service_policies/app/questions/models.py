"""
Wizard question models.
"""

from typing import Dict, Any, Optional, List, Mapping, Tuple
from dataclasses import dataclass, field

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class QuestionDependency:
    """Show a question only when another answer satisfies ``operator``."""
    question_code: str
    value: Any = None
    operator: str = "eq"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuestionDependency":
        return cls(
            question_code=str(data.get("question_code") or ""),
            value=data.get("value"),
            operator=str(data.get("operator") or "eq"),
        )


@dataclass(frozen=True)
class QuestionValidation:
    required: bool = False
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuestionValidation":
        pattern = data.get("pattern")
        return cls(
            required=data.get("required") is True,
            min=data.get("min"),
            max=data.get("max"),
            pattern=pattern if isinstance(pattern, str) and pattern else None,
        )


@dataclass(frozen=True)
class Question:
    code: str
    text: str = ""
    type: str = "text"
    depends_on: Tuple[QuestionDependency, ...] = ()
    validation: Optional[QuestionValidation] = None
    options: Tuple[Any, ...] = ()
    default_value: Any = None
    display_order: int = 0
    section: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Question":
        """Build from a stored record; ``depends_on`` may be one dependency or a list."""
        depends_on = data.get("depends_on")
        if isinstance(depends_on, Mapping):
            depends_on = [depends_on]
        elif not isinstance(depends_on, (list, tuple)):
            depends_on = []
        dependencies = tuple(
            QuestionDependency.from_dict(dep) for dep in depends_on
            if isinstance(dep, Mapping)
        )
        validation = data.get("validation")
        options = data.get("options")
        display_order = data.get("display_order")
        metadata = data.get("metadata")
        section = data.get("section")
        return cls(
            code=str(data.get("code") or ""),
            text=str(data.get("text") or ""),
            type=str(data.get("type") or "text"),
            depends_on=dependencies,
            validation=QuestionValidation.from_dict(validation) if isinstance(validation, Mapping) else None,
            options=tuple(options) if isinstance(options, (list, tuple)) else (),
            default_value=data.get("default_value"),
            display_order=display_order if isinstance(display_order, int) and not isinstance(display_order, bool) else 0,
            section=section if isinstance(section, str) else None,
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )


@dataclass(frozen=True)
class AnswerError:
    field: str
    message: str
    code: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


class AnswerErrorResponse(BaseModel):
    field: str
    message: str
    code: str


class QuestionsValidateRequest(BaseModel):
    """Request model for wizard answer validation."""
    questions: List[Dict[str, Any]] = Field(default_factory=list)
    answers: Dict[str, Any] = Field(default_factory=dict)
    firm_attributes: Dict[str, Any] = Field(default_factory=dict)


class QuestionsValidateResponse(BaseModel):
    visible_questions: List[str] = Field(default_factory=list)
    errors: List[AnswerErrorResponse] = Field(default_factory=list)
    progress: int = 0
