"""
Clause template binder.

Turns source policy text with ``[Bracketed placeholders]`` into stored clause
templates with ``{{snake_case}}`` tokens, and renders stored templates with
a variable map. Both directions are pure string transforms.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from shared.logging import get_logger
from .models import ClauseVariable
from .tokenizer import (
    PlaceholderToken, TEMPLATE_TOKEN_PATTERN, find_template_tokens, tokenize_placeholders
)

logger = get_logger("policies.binder")

FIRM_NAME_TOKEN = "{{firm.name}}"
DEFAULT_FIRM_ALIASES: Tuple[str, ...] = ("MEMA Financial Services", "MFS")


class _Unbound:
    pass


_UNBOUND = _Unbound()


@dataclass(frozen=True)
class ExtractionResult:
    """Templated body plus the variables it declares, first-seen order."""
    body_md: str
    variables: Tuple[ClauseVariable, ...]

    @property
    def variable_names(self) -> List[str]:
        return [v.name for v in self.variables]


@dataclass(frozen=True)
class RenderResult:
    text: str
    unresolved: Tuple[str, ...]


def normalise_firm_name(body: str, aliases: Optional[Sequence[str]] = None) -> str:
    """Replace whole-word firm name aliases with ``{{firm.name}}``."""
    if aliases is None:
        aliases = DEFAULT_FIRM_ALIASES
    # Longest alias first so "MEMA Financial Services" wins over a shorter alias.
    for alias in sorted((a for a in aliases if a), key=len, reverse=True):
        body = re.sub(r"\b" + re.escape(alias) + r"\b", FIRM_NAME_TOKEN, body)
    return body


def extract_variables(body: str, firm_aliases: Optional[Sequence[str]] = None) -> ExtractionResult:
    """Rewrite bracket placeholders in ``body`` as template tokens.

    Every placeholder whose label slugifies to a non-empty name is replaced
    (all exact occurrences) by ``{{name}}``; the first occurrence of a name
    declares the variable with the trimmed label as its description.
    Placeholders with an empty slug are left in place. Firm name aliases are
    normalised afterwards.
    """
    rendered = body
    variables: List[ClauseVariable] = []
    declared = set()

    for token in tokenize_placeholders(body):
        if not isinstance(token, PlaceholderToken):
            continue
        if not token.name:
            logger.debug("Skipping placeholder with empty name", placeholder=token.raw)
            continue
        if token.name not in declared:
            declared.add(token.name)
            variables.append(ClauseVariable(name=token.name, description=token.label))
        rendered = rendered.replace(token.raw, "{{%s}}" % token.name)

    rendered = normalise_firm_name(rendered, firm_aliases)
    return ExtractionResult(body_md=rendered, variables=tuple(variables))


def _resolve(variables: Mapping[str, Any], name: str) -> Any:
    if name in variables:
        return variables[name]
    if "." not in name:
        return _UNBOUND
    value: Any = variables
    for part in name.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _UNBOUND
        value = value[part]
    return value


def stringify(value: Any) -> str:
    """Text form of a bound variable value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify(item) for item in value)
    return str(value)


def render_clause(template: str, variables: Optional[Mapping[str, Any]] = None) -> RenderResult:
    """Substitute ``{{name}}`` tokens and report the ones left unbound.

    Tokens whose variable is absent or ``None`` stay literally in the text.
    Dotted names resolve as a flat key first, then through nested mappings.
    """
    variables = variables or {}
    unresolved: List[str] = []

    def substitute(match: "re.Match") -> str:
        name = match.group(1)
        value = _resolve(variables, name)
        if value is _UNBOUND or value is None:
            if name not in unresolved:
                unresolved.append(name)
            return match.group(0)
        return stringify(value)

    text = TEMPLATE_TOKEN_PATTERN.sub(substitute, template)
    return RenderResult(text=text, unresolved=tuple(unresolved))


def render_template(template: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Render ``template`` with ``variables``, leaving unbound tokens literal."""
    return render_clause(template, variables).text


def find_unresolved_tokens(text: str) -> List[str]:
    """Token names still present in ``text``."""
    return find_template_tokens(text)


def merge_variables(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge variable maps; later layers override earlier ones."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


def firm_variables(firm_profile: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Expose a firm profile to templates under the ``firm`` namespace."""
    if not firm_profile:
        return {}
    return {"firm": dict(firm_profile)}
