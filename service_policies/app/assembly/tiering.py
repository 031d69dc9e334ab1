"""
Detail-level tiering for assembled sections.

Tiering is prefix truncation of a section's ordered clause list, so
``focused`` is always a prefix of ``standard``, which is a prefix of
``enterprise`` (uncapped). Applying a tier twice changes nothing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple


class DetailLevel(str, Enum):
    """Requested depth of the generated document."""
    FOCUSED = "focused"
    STANDARD = "standard"
    ENTERPRISE = "enterprise"

    @classmethod
    def parse(cls, value: Any, default: Optional["DetailLevel"] = None) -> "DetailLevel":
        """Parse a detail level, accepting the wizard's older level names."""
        if isinstance(value, cls):
            return value
        aliases = {"essential": cls.FOCUSED, "comprehensive": cls.ENTERPRISE}
        if isinstance(value, str):
            key = value.strip().lower()
            if key in aliases:
                return aliases[key]
            try:
                return cls(key)
            except ValueError:
                pass
        return default if default is not None else cls.STANDARD


@dataclass(frozen=True)
class TierLimits:
    """Per-section clause caps for the capped levels."""
    focused: int
    standard: int

    def cap(self, level: DetailLevel) -> Optional[int]:
        if level is DetailLevel.FOCUSED:
            return self.focused
        if level is DetailLevel.STANDARD:
            return self.standard
        return None


# Caps for templates without a hand-written assembler.
GENERIC_SECTION_LIMITS = TierLimits(focused=2, standard=4)
GENERIC_APPENDIX_LIMITS = TierLimits(focused=1, standard=2)


def apply_tier(clause_ids: Sequence[str], level: DetailLevel,
               limits: Optional[TierLimits]) -> Tuple[str, ...]:
    """Keep the leading clauses allowed at ``level``; no limits means uncapped."""
    if limits is None:
        return tuple(clause_ids)
    cap = limits.cap(level)
    if cap is None:
        return tuple(clause_ids)
    return tuple(clause_ids[:max(cap, 0)])


def uniq(items: Iterable[str]) -> List[str]:
    """Ordered-unique copy of ``items``."""
    seen: List[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen
