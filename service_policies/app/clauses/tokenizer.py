"""
Tokenizer for clause bodies.

Two token grammars share this module: ``[Free text placeholder]`` in source
documents, and ``{{snake_case_name}}`` (optionally dotted, e.g.
``{{firm.name}}``) in stored clause templates.
"""

import re
from dataclasses import dataclass
from typing import List, Union

PLACEHOLDER_PATTERN = re.compile(r"\[([^\]]+)\]")
TEMPLATE_TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\s*\}\}")


@dataclass(frozen=True)
class TextToken:
    text: str


@dataclass(frozen=True)
class PlaceholderToken:
    """A bracketed placeholder.

    ``raw`` is the exact source substring including brackets, ``label`` the
    trimmed inner text and ``name`` its variable slug (may be empty).
    """
    raw: str
    label: str
    name: str


Token = Union[TextToken, PlaceholderToken]


def slugify(value: str) -> str:
    """Variable name for a placeholder label: ``"Approver Role"`` -> ``approver_role``."""
    text = str(value).lower().replace("&", " and ")
    text = re.sub(r"[^a-z0-9]+", "_", text)
    return text.strip("_")


def tokenize_placeholders(body: str) -> List[Token]:
    """Split ``body`` into text and placeholder tokens, left to right."""
    tokens: List[Token] = []
    position = 0
    for match in PLACEHOLDER_PATTERN.finditer(body):
        if match.start() > position:
            tokens.append(TextToken(body[position:match.start()]))
        label = match.group(1).strip()
        tokens.append(PlaceholderToken(raw=match.group(0), label=label, name=slugify(label)))
        position = match.end()
    if position < len(body):
        tokens.append(TextToken(body[position:]))
    return tokens


def find_template_tokens(template: str) -> List[str]:
    """Distinct ``{{name}}`` token names in order of first appearance."""
    names: List[str] = []
    for match in TEMPLATE_TOKEN_PATTERN.finditer(template):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names
