"""
Clause and template records for the authoring/ingestion path.

Source documents arrive as plain paragraph text already grouped into
sections; heading detection happens upstream.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from shared.logging import get_logger
from .binder import extract_variables
from .models import Clause, Section, SectionType, Template

logger = get_logger("policies.ingestion")

SUMMARY_LIMIT = 120


def summarise(text: str, limit: int = SUMMARY_LIMIT) -> str:
    """Whitespace-collapsed ``text``, truncated with an ellipsis past ``limit``."""
    collapsed = re.sub(r"\s+", " ", text or "").strip()
    if len(collapsed) > limit:
        return collapsed[:limit - 3] + "…"
    return collapsed


def ingest_clause(clause_id: str, policy_key: str, title: str, raw_body: str,
                  tags: Optional[Mapping[str, Any]] = None,
                  firm_aliases: Optional[Sequence[str]] = None) -> Clause:
    """Build a stored clause from raw source text.

    Variables are derived here once from the bracket placeholders; the
    resulting clause starts at version 1.0.0 and is active.
    """
    extraction = extract_variables(raw_body, firm_aliases)
    logger.debug("Clause ingested", clause_id=clause_id, variables=extraction.variable_names)
    return Clause(
        id=clause_id,
        policy_key=policy_key,
        title=title,
        body_md=extraction.body_md,
        tags=dict(tags or {}),
        variables=extraction.variables,
    )


def build_template(code: str, name: str, sections: Iterable[Mapping[str, Any]],
                   clauses: Iterable[Clause], category: str = "",
                   description: str = "") -> Template:
    """Assemble a template from section outlines and ingested clauses.

    Each outline is ``{"id", "title", "sectionType"?, "clauses": [ids]}``.
    A section's summary is taken from its first clause body when not given.
    """
    bodies: Dict[str, str] = {clause.id: clause.body_md for clause in clauses}
    built: List[Section] = []

    for outline in sections:
        clause_ids = [str(c) for c in outline.get("clauses", outline.get("suggestedClauses", [])) or []]
        summary = outline.get("summary")
        if summary is None:
            first = next((bodies[c] for c in clause_ids if c in bodies), "")
            summary = summarise(first)
        built.append(Section(
            id=str(outline["id"]),
            title=str(outline.get("title") or outline["id"]),
            summary=summary,
            section_type=SectionType.parse(outline.get("sectionType", outline.get("section_type"))),
            suggested_clauses=tuple(clause_ids),
        ))

    template = Template(code=code, name=name, sections=tuple(built),
                        category=category, description=description)
    logger.info("Template built", template=code, sections=len(built),
                mandatory_clauses=len(template.mandatory_clauses))
    return template
