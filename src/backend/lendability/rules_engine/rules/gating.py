from __future__ import annotations

from ..models import RuleCategory, RuleGroup
from ..prerequisites import (
    EXIT_EVIDENCE_ID,
    PLANNING_STAGE_ID,
    TECH_PACK_ID,
    check_exit_evidence,
    check_planning_stage,
    check_technical_pack,
)
from ..rule import CheckRule

PLANNING_STAGE = CheckRule(
    rule_id=PLANNING_STAGE_ID,
    title="Planning position sufficient for a development facility",
    check=check_planning_stage,
    category=RuleCategory.PREREQUISITE,
    group=RuleGroup.GATING,
)

TECHNICAL_PACK = CheckRule(
    rule_id=TECH_PACK_ID,
    title="Technical readiness pack complete",
    check=check_technical_pack,
    category=RuleCategory.PREREQUISITE,
    group=RuleGroup.GATING,
)

EXIT_EVIDENCE = CheckRule(
    rule_id=EXIT_EVIDENCE_ID,
    title="Exit route evidenced",
    check=check_exit_evidence,
    category=RuleCategory.PREREQUISITE,
    group=RuleGroup.GATING,
)
