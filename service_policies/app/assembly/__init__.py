"""
Tiered clause assembly package.

Modules of interest:
- tiering: DetailLevel and prefix caps.
- complaints: hand-written Complaints module table.
- generic: section-per-module assembler for every other template.
- merge: union of rule engine output with an assembled policy.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..clauses.models import Template
from ..rules.models import RulesEngineResult
from .complaints import DEFAULT_COMPLAINTS_ANSWERS, ComplaintsAnswers, assemble_complaints_policy
from .generic import assemble_generic_policy
from .merge import merge_rule_selections
from .models import AssemblyResult, ModuleKind, PolicyModule
from .tiering import DetailLevel, apply_tier, uniq

Assembler = Callable[[Template, Any], AssemblyResult]

# Hand-written assemblers keyed by upper-case template code.
ASSEMBLERS: Dict[str, Assembler] = {
    "COMPLAINTS": assemble_complaints_policy,
}

# Default answers exposed to the wizard per template code.
DEFAULT_ANSWERS: Dict[str, Mapping[str, Any]] = {
    "COMPLAINTS": DEFAULT_COMPLAINTS_ANSWERS.to_dict(),
}


def get_assembler(template_code: str) -> Optional[Assembler]:
    return ASSEMBLERS.get((template_code or "").upper())


def assemble_policy(template: Union[Template, Mapping[str, Any]],
                    answers: Optional[Mapping[str, Any]] = None,
                    rules_result: Optional[Union[RulesEngineResult, Mapping[str, Any]]] = None,
                    default_detail_level: DetailLevel = DetailLevel.STANDARD) -> AssemblyResult:
    """Assemble ``template`` for a firm and fold in any rule engine output."""
    if not isinstance(template, Template):
        template = Template.from_dict(template)

    assembler = get_assembler(template.code)
    if assembler is not None:
        result = assembler(template, answers)
    else:
        result = assemble_generic_policy(template, answers, default_detail_level)

    if rules_result is not None:
        if not isinstance(rules_result, RulesEngineResult):
            rules_result = RulesEngineResult.from_dict(rules_result)
        result = merge_rule_selections(template, result, rules_result)
    return result


__all__ = [
    "ASSEMBLERS",
    "DEFAULT_ANSWERS",
    "DEFAULT_COMPLAINTS_ANSWERS",
    "AssemblyResult",
    "ComplaintsAnswers",
    "DetailLevel",
    "ModuleKind",
    "PolicyModule",
    "apply_tier",
    "assemble_complaints_policy",
    "assemble_generic_policy",
    "assemble_policy",
    "get_assembler",
    "merge_rule_selections",
    "uniq",
]
