from __future__ import annotations

from typing import List, Optional

from ..config import DEFAULT_SETTINGS, EngineSettings
from ..models import RuleGroup
from ..registry import RuleRegistry
from ..rule import Rule
from .financial import LOAN_TO_COST, LOAN_TO_GDV, MARGIN_ON_COST
from .gating import EXIT_EVIDENCE, PLANNING_STAGE, TECHNICAL_PACK
from .remediable import BUILD_PACE, CONTINGENCY, DOCUMENT_QUALITY
from .track_record import (
    COMPLETED_PROJECTS,
    CONSTRUCTION_PERIOD,
    EXPERIENCE_YEARS,
    NO_DEFAULT_HISTORY,
    SCHEME_SIZE,
)

GROUP_ORDER = (RuleGroup.GATING, RuleGroup.FATAL, RuleGroup.FIXABLE)


def build_rule_set(settings: Optional[EngineSettings] = None) -> RuleRegistry:
    """Assemble the built-in rules for the given flags, gating group first."""
    settings = settings or DEFAULT_SETTINGS

    gating: List[Rule] = []
    if settings.planning_gating:
        gating.append(PLANNING_STAGE)
    if settings.technical_pack_gating:
        gating.append(TECHNICAL_PACK)
    if settings.exit_evidence_gating:
        gating.append(EXIT_EVIDENCE)

    fatal: List[Rule] = [MARGIN_ON_COST, LOAN_TO_GDV, LOAN_TO_COST]
    fixable: List[Rule] = [CONTINGENCY, BUILD_PACE]
    if settings.track_record_rules:
        fatal += [EXPERIENCE_YEARS, COMPLETED_PROJECTS, NO_DEFAULT_HISTORY]
        fixable += [CONSTRUCTION_PERIOD, SCHEME_SIZE]
    if settings.document_quality_rule:
        fixable.append(DOCUMENT_QUALITY)

    return RuleRegistry(gating + fatal + fixable)


def all_rules() -> List[Rule]:
    return build_rule_set(
        EngineSettings(
            planning_gating=True,
            technical_pack_gating=True,
            exit_evidence_gating=True,
            track_record_rules=True,
            document_quality_rule=True,
        )
    ).rules()


__all__ = [
    "GROUP_ORDER",
    "build_rule_set",
    "all_rules",
    "PLANNING_STAGE",
    "TECHNICAL_PACK",
    "EXIT_EVIDENCE",
    "MARGIN_ON_COST",
    "LOAN_TO_GDV",
    "LOAN_TO_COST",
    "CONTINGENCY",
    "BUILD_PACE",
    "DOCUMENT_QUALITY",
    "EXPERIENCE_YEARS",
    "COMPLETED_PROJECTS",
    "NO_DEFAULT_HISTORY",
    "CONSTRUCTION_PERIOD",
    "SCHEME_SIZE",
]
