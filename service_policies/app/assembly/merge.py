"""
Union of rule engine output with an assembled policy.

Rule inclusions not already placed by the assembler are added as dynamic
modules: in the first template section that lists the clause, otherwise in
an ``additional`` section. Exclusions are then removed from every module in
one pass, so an excluded clause never survives regardless of which rule or
module asked for it. Modules left empty by exclusion are dropped.
"""

from dataclasses import replace
from typing import Dict, List

from shared.logging import get_logger
from ..clauses.models import SectionType, Template
from ..rules.models import RulesEngineResult
from .models import AssemblyResult, ModuleKind, PolicyModule

logger = get_logger("policies.assembly.merge")

ADDITIONAL_SECTION_ID = "additional"
ADDITIONAL_SECTION_TITLE = "Additional provisions"


def merge_rule_selections(template: Template, assembled: AssemblyResult,
                          rules_result: RulesEngineResult) -> AssemblyResult:
    placed = set(assembled.clause_ids)
    additions: Dict[str, List[str]] = {}
    for code in rules_result.included_clauses:
        if code in placed:
            continue
        placed.add(code)
        section = template.section_for_clause(code)
        additions.setdefault(section.id if section else ADDITIONAL_SECTION_ID, []).append(code)

    modules = list(assembled.modules)
    for section_id, codes in additions.items():
        section = template.get_section(section_id)
        modules.append(PolicyModule(
            id=f"{section_id}-rules",
            title=section.title if section else ADDITIONAL_SECTION_TITLE,
            summary="Clauses included by policy rules.",
            section_id=section_id,
            section_type=section.section_type if section else SectionType.POLICY,
            kind=ModuleKind.DYNAMIC,
            clause_ids=tuple(codes),
            reasons=("Included by policy rules",),
        ))

    excluded = set(rules_result.excluded_clauses)
    if excluded:
        trimmed = [_without(module, excluded) for module in modules]
        modules = [m for m, original in zip(trimmed, modules) if m.clause_ids or not original.clause_ids]

    merged = AssemblyResult.from_modules(modules)
    logger.debug("Rule selections merged", added=sum(len(c) for c in additions.values()),
                 excluded=sorted(excluded))
    return merged


def _without(module: PolicyModule, excluded: set) -> PolicyModule:
    kept = tuple(c for c in module.clause_ids if c not in excluded)
    if len(kept) == len(module.clause_ids):
        return module
    return replace(module, clause_ids=kept,
                   reasons=module.reasons + ("Clauses excluded by policy rules",))
