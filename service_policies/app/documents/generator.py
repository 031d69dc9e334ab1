"""
Policy document generation.

Runs the full pipeline for one firm and policy:

1. evaluate the policy's rules against the firm's answers and attributes;
2. assemble the template's sections and fold in the rule selections;
3. merge variables (assembler defaults and answers, then rule ``set_vars``,
   then the firm profile under ``firm``);
4. render each selected clause, leaving unbound tokens visible.

The result is a ``PolicyDocument`` plus an ``AuditBundle`` recording every
input and decision needed to reproduce it.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from shared.logging import get_logger
from ..assembly import DEFAULT_ANSWERS, DetailLevel, assemble_policy
from ..assembly.merge import ADDITIONAL_SECTION_ID, ADDITIONAL_SECTION_TITLE
from ..clauses.binder import firm_variables, merge_variables, render_clause
from ..clauses.models import Clause, SectionType, Template
from ..questions import get_visible_question_codes, merge_answers_with_firm_profile
from ..rules import RuleRunContext, evaluate_rules
from .models import (
    AuditBundle, DocumentSection, PolicyDocument, PolicyInfo, RenderedClause,
    RuleFiringRecord, SuggestedClauseRecord,
)

logger = get_logger("policies.generator")


def document_filename(policy: PolicyInfo, generated_at: datetime) -> str:
    """``<policy_name>_v<version>_<YYYY-MM-DD>`` with the name made filesystem safe."""
    safe_name = re.sub(r"[^a-z0-9]", "_", policy.name, flags=re.IGNORECASE).lower()
    return f"{safe_name}_v{policy.version}_{generated_at.date().isoformat()}"


def _index_clauses(clauses: Iterable[Union[Clause, Mapping[str, Any]]]) -> Dict[str, Clause]:
    indexed: Dict[str, Clause] = {}
    for item in clauses or ():
        clause = item if isinstance(item, Clause) else Clause.from_dict(item)
        if clause.id and clause.id not in indexed:
            indexed[clause.id] = clause
    return indexed


def generate_document(policy: Union[PolicyInfo, Mapping[str, Any]],
                      template: Union[Template, Mapping[str, Any]],
                      clauses: Iterable[Union[Clause, Mapping[str, Any]]],
                      rules: Iterable[Any] = (),
                      answers: Optional[Mapping[str, Any]] = None,
                      firm_profile: Optional[Mapping[str, Any]] = None,
                      questions: Iterable[Any] = (),
                      run_id: Optional[str] = None,
                      generated_by: Optional[str] = None,
                      metadata: Optional[Mapping[str, Any]] = None,
                      default_detail_level: DetailLevel = DetailLevel.STANDARD,
                      generated_at: Optional[datetime] = None) -> PolicyDocument:
    """Generate one policy document and its audit bundle.

    ``firm_profile`` is ``{"id", "name", "attributes": {...}}``; its
    attributes back rule conditions when an answer is absent. Clause ids the
    assembly selects but ``clauses`` lacks are reported in
    ``missing_clauses`` and left out of the rendered sections.
    """
    if not isinstance(policy, PolicyInfo):
        policy = PolicyInfo.from_dict(policy)
    if not isinstance(template, Template):
        template = Template.from_dict(template)
    answers = dict(answers or {})
    firm_profile = dict(firm_profile or {})
    attributes = firm_profile.get("attributes")
    attributes = dict(attributes) if isinstance(attributes, Mapping) else {}
    generated_at = generated_at or datetime.now(timezone.utc)

    rules_result = evaluate_rules(rules, RuleRunContext(
        policy_id=policy.id, answers=answers, firm_attributes=attributes,
    ))
    assembly = assemble_policy(template, answers, rules_result, default_detail_level)

    defaults = DEFAULT_ANSWERS.get(template.code.upper(), {})
    variables = merge_variables(defaults, answers, rules_result.variables, firm_variables(firm_profile))

    library = _index_clauses(clauses)
    mandatory = set(template.mandatory_clauses)
    sections: List[DocumentSection] = []
    unresolved: List[str] = []
    missing: List[str] = []

    ordered_ids = [s.id for s in template.sections]
    ordered_ids += [sid for sid in assembly.section_clauses if sid not in ordered_ids]

    for section_id in ordered_ids:
        clause_ids = assembly.section_clauses.get(section_id)
        if not clause_ids:
            continue
        rendered: List[RenderedClause] = []
        for clause_id in clause_ids:
            clause = library.get(clause_id)
            if clause is None:
                if clause_id not in missing:
                    missing.append(clause_id)
                    logger.warning("Selected clause missing from library",
                                   policy_id=policy.id, clause_id=clause_id, section=section_id)
                continue
            result = render_clause(clause.body_md, variables)
            for name in result.unresolved:
                if name not in unresolved:
                    unresolved.append(name)
            rendered.append(RenderedClause(
                code=clause.id,
                title=clause.title,
                body=result.text,
                unresolved=result.unresolved,
                is_mandatory=clause.id in mandatory,
            ))
        if not rendered:
            continue

        section = template.get_section(section_id)
        if section is not None:
            title, summary, section_type = section.title, section.summary, section.section_type
        elif section_id == ADDITIONAL_SECTION_ID:
            title, summary, section_type = ADDITIONAL_SECTION_TITLE, "", SectionType.POLICY
        else:
            title, summary, section_type = section_id, "", SectionType.POLICY
        sections.append(DocumentSection(
            id=section_id, title=title, section_type=section_type,
            summary=summary, clauses=tuple(rendered),
        ))

    visible_questions = get_visible_question_codes(
        questions, merge_answers_with_firm_profile(answers, attributes)
    )

    audit_bundle = AuditBundle(
        run_id=run_id,
        policy_id=policy.id,
        policy_name=policy.name,
        policy_version=policy.version,
        firm_id=str(firm_profile["id"]) if firm_profile.get("id") is not None else None,
        firm_name=str(firm_profile.get("name") or ""),
        generated_at=generated_at.isoformat(),
        generated_by=generated_by,
        answers=answers,
        visible_questions=visible_questions,
        rules_fired=[
            RuleFiringRecord(rule_id=f.rule_id, rule_name=f.rule_name, condition_met=f.condition_met)
            for f in rules_result.rules_fired
        ],
        included_clauses=list(rules_result.included_clauses),
        excluded_clauses=list(rules_result.excluded_clauses),
        suggested_clauses=[
            SuggestedClauseRecord(code=s.code, reason=s.reason) for s in rules_result.suggested_clauses
        ],
        variables=variables,
        metadata=dict(metadata or {}),
    )

    logger.info(
        "Policy document generated",
        policy_id=policy.id,
        firm_id=audit_bundle.firm_id,
        sections=len(sections),
        clauses=sum(len(s.clauses) for s in sections),
        unresolved_tokens=len(unresolved),
        missing_clauses=len(missing),
    )

    return PolicyDocument(
        policy=policy,
        firm_name=audit_bundle.firm_name,
        filename=document_filename(policy, generated_at),
        sections=tuple(sections),
        audit_bundle=audit_bundle,
        modules=tuple(m.to_dict() for m in assembly.modules),
        unresolved_tokens=tuple(unresolved),
        missing_clauses=tuple(missing),
        suggested_clauses=tuple(
            {"code": s.code, "reason": s.reason} for s in rules_result.suggested_clauses
        ),
    )
