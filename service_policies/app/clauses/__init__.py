"""
Clause library package.

- models: Clause, Section and Template records.
- tokenizer: bracket placeholder and template token grammars.
- binder: placeholder extraction, firm name normalisation and rendering.
- ingestion: clause and template records built from source text.
"""

from .binder import (
    extract_variables, find_unresolved_tokens, normalise_firm_name,
    render_clause, render_template,
)
from .ingestion import build_template, ingest_clause
from .models import Clause, ClauseVariable, Section, SectionType, Template
from .tokenizer import slugify

__all__ = [
    "extract_variables",
    "find_unresolved_tokens",
    "normalise_firm_name",
    "render_clause",
    "render_template",
    "build_template",
    "ingest_clause",
    "Clause",
    "ClauseVariable",
    "Section",
    "SectionType",
    "Template",
    "slugify",
]
