"""
Hand-written assembler for the Complaints policy.

The policy is built from a fixed, ordered table of modules. Static modules
always apply (the digital module only when a digital channel is selected);
dynamic modules apply to specific answer combinations and each carry one
fragment clause. Process, governance and digital sections are tiered by
detail level; appendices are added when requested or at enterprise level.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from shared.logging import get_logger
from ..clauses.models import SectionType, Template
from .models import AssemblyResult, ModuleKind, PolicyModule
from .tiering import DetailLevel, TierLimits, apply_tier

logger = get_logger("policies.assembly.complaints")

DIGITAL_CHANNELS = ("web", "email", "social")
APPENDIX_SECTIONS = ("appendix-1", "appendix-2", "appendix-3", "appendix-4", "appendix-5")

DYNAMIC_CLAUSES = {
    "eea_passporting": "complaints-fragment-eea-passporting",
    "stripe": "complaints-fragment-stripe-rail",
    "thunes": "complaints-fragment-thunes-rail",
    "swift": "complaints-fragment-swift-rail",
    "manual_id": "complaints-fragment-manual-id-triage",
    "ai_id": "complaints-fragment-ai-id-triage",
    "hybrid_id": "complaints-fragment-hybrid-id-triage",
    "enhanced_oversight": "complaints-fragment-enhanced-oversight",
    "vulnerability_champion": "complaints-fragment-vulnerability-champion",
    "vulnerability_high": "complaints-fragment-high-vulnerability-support",
}

SECTION_LIMITS: Dict[str, TierLimits] = {
    "process": TierLimits(focused=12, standard=22),
    "governance": TierLimits(focused=8, standard=12),
    "digital": TierLimits(focused=3, standard=5),
}


@dataclass(frozen=True)
class ComplaintsAnswers:
    """Wizard answers that drive the Complaints assembly."""
    detail_level: DetailLevel = DetailLevel.FOCUSED
    jurisdiction: str = "uk"
    payment_rails: Tuple[str, ...] = ("stripe",)
    id_method: str = "manual"
    oversight: str = "standard"
    vulnerability_focus: str = "standard"
    vulnerability_champion: bool = False
    channels: Tuple[str, ...] = ("web", "email")
    include_appendices: bool = False

    _KEYS = {
        "detail_level": "detailLevel",
        "jurisdiction": "jurisdiction",
        "payment_rails": "paymentRails",
        "id_method": "idMethod",
        "oversight": "oversight",
        "vulnerability_focus": "vulnerabilityFocus",
        "vulnerability_champion": "vulnerabilityChampion",
        "channels": "channels",
        "include_appendices": "includeAppendices",
    }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]],
                  base: Optional["ComplaintsAnswers"] = None) -> "ComplaintsAnswers":
        """Overlay camelCase (or snake_case) answers on ``base``.

        Values of the wrong shape are ignored and the base value is kept.
        """
        base = base or DEFAULT_COMPLAINTS_ANSWERS
        if not isinstance(data, Mapping):
            return base

        def pick(attr: str) -> Any:
            wire = cls._KEYS[attr]
            if wire in data:
                return data[wire]
            return data.get(attr)

        changes: Dict[str, Any] = {}
        level = pick("detail_level")
        if level is not None:
            changes["detail_level"] = DetailLevel.parse(level, base.detail_level)
        for attr in ("jurisdiction", "id_method", "oversight", "vulnerability_focus"):
            value = pick(attr)
            if isinstance(value, str):
                changes[attr] = value
        for attr in ("payment_rails", "channels"):
            value = pick(attr)
            if isinstance(value, (list, tuple)):
                changes[attr] = tuple(str(v) for v in value)
        for attr in ("vulnerability_champion", "include_appendices"):
            value = pick(attr)
            if isinstance(value, bool):
                changes[attr] = value
        return replace(base, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detailLevel": self.detail_level.value,
            "jurisdiction": self.jurisdiction,
            "paymentRails": list(self.payment_rails),
            "idMethod": self.id_method,
            "oversight": self.oversight,
            "vulnerabilityFocus": self.vulnerability_focus,
            "vulnerabilityChampion": self.vulnerability_champion,
            "channels": list(self.channels),
            "includeAppendices": self.include_appendices,
        }


DEFAULT_COMPLAINTS_ANSWERS = ComplaintsAnswers()


@dataclass(frozen=True)
class SectionMeta:
    title: str
    summary: str
    section_type: SectionType
    clause_ids: Tuple[str, ...]


def section_meta(template: Template, section_id: str) -> SectionMeta:
    """Section details, or empty placeholders when the template lacks it."""
    section = template.get_section(section_id)
    if section is None:
        return SectionMeta(title=section_id, summary="", section_type=SectionType.POLICY, clause_ids=())
    return SectionMeta(
        title=section.title,
        summary=section.summary,
        section_type=section.section_type,
        clause_ids=section.suggested_clauses,
    )


@dataclass(frozen=True)
class ModuleSpec:
    """One row of the module table.

    ``fragment`` names a DYNAMIC_CLAUSES entry; without one the module takes
    the section's own clauses, tiered when ``tiered`` is set.
    """
    id: str
    section_id: str
    title: str
    summary: str
    reason: str
    kind: ModuleKind = ModuleKind.STATIC
    applies: Callable[[ComplaintsAnswers], bool] = field(default=lambda answers: True)
    fragment: Optional[str] = None
    tiered: bool = False


MODULES: Tuple[ModuleSpec, ...] = (
    ModuleSpec(
        id="overview-core", section_id="overview",
        title="Regulatory scope & principles",
        summary="Core DISP/PSR scope, Consumer Duty alignment, and complaints principles.",
        reason="Baseline FCA DISP and PSR obligations",
    ),
    ModuleSpec(
        id="overview-eea", section_id="overview", kind=ModuleKind.DYNAMIC,
        title="EEA passporting overlay",
        summary="EBA-aligned handling, local ADR signposting, and cross-border reporting.",
        reason="Jurisdiction includes EEA passporting",
        applies=lambda a: a.jurisdiction == "uk-eea", fragment="eea_passporting",
    ),
    ModuleSpec(
        id="process-core", section_id="process", tiered=True,
        title="Complaints handling workflow",
        summary="Intake, investigation, SRC, and final response workflows with DISP/PSR timelines.",
        reason="Core complaints handling flow",
    ),
    ModuleSpec(
        id="process-stripe", section_id="process", kind=ModuleKind.DYNAMIC,
        title="Stripe rail reconciliation",
        summary="Monthly reconciliation, dispute handling, and settlement evidence for Stripe.",
        reason="Payment rail selected: Stripe",
        applies=lambda a: "stripe" in a.payment_rails, fragment="stripe",
    ),
    ModuleSpec(
        id="process-thunes", section_id="process", kind=ModuleKind.DYNAMIC,
        title="Thunes corridor handling",
        summary="Corridor triage, partner escalation, and payout tracking for Thunes corridors.",
        reason="Payment rail selected: Thunes",
        applies=lambda a: "thunes" in a.payment_rails, fragment="thunes",
    ),
    ModuleSpec(
        id="process-swift", section_id="process", kind=ModuleKind.DYNAMIC,
        title="SWIFT transfer investigations",
        summary="Trace, repair, and evidence workflows for SWIFT transfers.",
        reason="Payment rail selected: SWIFT",
        applies=lambda a: "swift" in a.payment_rails, fragment="swift",
    ),
    ModuleSpec(
        id="process-manual-id", section_id="process", kind=ModuleKind.DYNAMIC,
        title="Manual KYC triage",
        summary="Manual agent review checklist and documented overrides for onboarding complaints.",
        reason="ID method: Manual agent review",
        applies=lambda a: a.id_method == "manual", fragment="manual_id",
    ),
    ModuleSpec(
        id="process-ai-id", section_id="process", kind=ModuleKind.DYNAMIC,
        title="AI-assisted identity review",
        summary="Model output capture, explainability checks, and human override controls.",
        reason="ID method: AI-assisted review",
        applies=lambda a: a.id_method == "ai", fragment="ai_id",
    ),
    ModuleSpec(
        id="process-hybrid-id", section_id="process", kind=ModuleKind.DYNAMIC,
        title="Hybrid identity review",
        summary="Hybrid triage with automated triggers and manual escalation tracking.",
        reason="ID method: Hybrid review",
        applies=lambda a: a.id_method == "hybrid", fragment="hybrid_id",
    ),
    ModuleSpec(
        id="digital-core", section_id="digital", tiered=True,
        title="Digital complaints handling",
        summary="Digital channel handling, QA, and response expectations.",
        reason="Digital channels selected",
        applies=lambda a: any(c in DIGITAL_CHANNELS for c in a.channels),
    ),
    ModuleSpec(
        id="vulnerable-core", section_id="vulnerable",
        title="Vulnerable customer handling",
        summary="Identification, adjustments, and enhanced support for vulnerable customers.",
        reason="Consumer Duty vulnerability expectations",
    ),
    ModuleSpec(
        id="vulnerable-high", section_id="vulnerable", kind=ModuleKind.DYNAMIC,
        title="High vulnerability support",
        summary="Non-digital channels, carers, and enhanced communications.",
        reason="Target market includes high vulnerability segments",
        applies=lambda a: a.vulnerability_focus == "high", fragment="vulnerability_high",
    ),
    ModuleSpec(
        id="vulnerable-champion", section_id="vulnerable", kind=ModuleKind.DYNAMIC,
        title="Vulnerability champion governance",
        summary="Board-level oversight and accountability for vulnerable outcomes.",
        reason="Board-level vulnerability champion selected",
        applies=lambda a: a.vulnerability_champion, fragment="vulnerability_champion",
    ),
    ModuleSpec(
        id="fos-core", section_id="fos",
        title="FOS escalation",
        summary="FOS escalation routes, time limits, and co-operation requirements.",
        reason="Mandatory FOS escalation handling",
    ),
    ModuleSpec(
        id="governance-core", section_id="governance", tiered=True,
        title="Governance, MI & review",
        summary="RCA, MI reporting, training, and policy review governance.",
        reason="Governance and MI expectations",
    ),
    ModuleSpec(
        id="governance-enhanced", section_id="governance", kind=ModuleKind.DYNAMIC,
        title="Enhanced oversight",
        summary="Quarterly audit sampling, independent QA, and board reporting.",
        reason="Oversight level: Enhanced",
        applies=lambda a: a.oversight == "enhanced", fragment="enhanced_oversight",
    ),
)


def _build(entry: ModuleSpec, template: Template, answers: ComplaintsAnswers) -> PolicyModule:
    meta = section_meta(template, entry.section_id)
    if entry.fragment:
        clause_ids: Tuple[str, ...] = (DYNAMIC_CLAUSES[entry.fragment],)
    elif entry.tiered:
        clause_ids = apply_tier(meta.clause_ids, answers.detail_level, SECTION_LIMITS.get(entry.section_id))
    else:
        clause_ids = meta.clause_ids
    return PolicyModule(
        id=entry.id,
        title=entry.title,
        summary=entry.summary,
        section_id=entry.section_id,
        section_type=meta.section_type,
        kind=entry.kind,
        clause_ids=tuple(clause_ids),
        reasons=(entry.reason,),
    )


def _appendix_modules(template: Template) -> List[PolicyModule]:
    modules = []
    for section_id in APPENDIX_SECTIONS:
        meta = section_meta(template, section_id)
        if not meta.clause_ids:
            continue
        modules.append(PolicyModule(
            id=f"appendix-{section_id}",
            title=meta.title,
            summary=meta.summary,
            section_id=section_id,
            section_type=meta.section_type,
            kind=ModuleKind.STATIC,
            clause_ids=meta.clause_ids,
            reasons=("Appendices included for templates and letters",),
        ))
    return modules


def assemble_complaints_policy(template: Template, answers: Any = None) -> AssemblyResult:
    """Assemble the Complaints policy for one firm's answers.

    ``answers`` may be a ``ComplaintsAnswers`` or a camelCase mapping laid
    over ``DEFAULT_COMPLAINTS_ANSWERS``.
    """
    if not isinstance(answers, ComplaintsAnswers):
        answers = ComplaintsAnswers.from_dict(answers)

    modules = [_build(entry, template, answers) for entry in MODULES if entry.applies(answers)]

    if answers.include_appendices or answers.detail_level is DetailLevel.ENTERPRISE:
        modules.extend(_appendix_modules(template))

    result = AssemblyResult.from_modules(modules)
    logger.info(
        "Complaints policy assembled",
        template=template.code,
        detail_level=answers.detail_level.value,
        modules=[m.id for m in result.modules],
        clauses=len(result.clause_ids),
    )
    return result
