"""
Assembler for templates without a hand-written module table.

Every template section becomes one static module holding the section's
suggested clauses, tiered with the generic caps. Appendix sections are
added only when requested or at enterprise level.
"""

from typing import Any, Mapping, Optional

from shared.logging import get_logger
from ..clauses.models import SectionType, Template
from .models import AssemblyResult, ModuleKind, PolicyModule
from .tiering import (
    DetailLevel, GENERIC_APPENDIX_LIMITS, GENERIC_SECTION_LIMITS, apply_tier
)

logger = get_logger("policies.assembly.generic")


def assemble_generic_policy(template: Template, answers: Optional[Mapping[str, Any]] = None,
                            default_detail_level: DetailLevel = DetailLevel.STANDARD) -> AssemblyResult:
    answers = answers if isinstance(answers, Mapping) else {}
    level = DetailLevel.parse(answers.get("detailLevel", answers.get("detail_level")), default_detail_level)
    include_appendices = answers.get("includeAppendices", answers.get("include_appendices")) is True
    with_appendices = include_appendices or level is DetailLevel.ENTERPRISE

    modules = []
    for section in template.sections:
        is_appendix = section.section_type is SectionType.APPENDIX
        if is_appendix and not with_appendices:
            continue
        limits = GENERIC_APPENDIX_LIMITS if is_appendix else GENERIC_SECTION_LIMITS
        clause_ids = apply_tier(section.suggested_clauses, level, limits)
        if not clause_ids:
            continue
        modules.append(PolicyModule(
            id=f"{section.id}-core",
            title=section.title,
            summary=section.summary,
            section_id=section.id,
            section_type=section.section_type,
            kind=ModuleKind.STATIC,
            clause_ids=clause_ids,
            reasons=(f"Template section: {section.title}",),
        ))

    result = AssemblyResult.from_modules(modules)
    logger.info("Policy assembled", template=template.code, detail_level=level.value,
                modules=len(result.modules), clauses=len(result.clause_ids))
    return result
