"""Rules whose breach can be fixed by restructuring the appraisal or programme."""

from __future__ import annotations

from typing import Optional

from ..context import EvaluationContext
from ..models import RuleCategory, RuleFailure, RuleGroup, Severity
from ..predicates import RuleMeta, threshold_max, threshold_min
from ..rule import CheckRule, PredicateRule

CONTINGENCY = PredicateRule(
    predicate=threshold_min,
    field="metrics.contingency_pct",
    limit_from_bands="min_contingency_pct",
    group=RuleGroup.FIXABLE,
    title="Minimum build contingency",
    weight=6,
    meta=RuleMeta(
        rule_id="FIN-021",
        severity=Severity.FIXABLE,
        category=RuleCategory.METRIC,
        reason="Contingency below mainstream lender minimum.",
        fix="Increase contingency to at least the minimum percentage of build cost.",
    ),
)

BUILD_PACE = PredicateRule(
    predicate=threshold_max,
    field="metrics.build_months_per_unit",
    limit_from_bands="max_build_months_per_unit",
    group=RuleGroup.FIXABLE,
    title="Maximum build months per unit",
    weight=5,
    meta=RuleMeta(
        rule_id="PRG-010",
        severity=Severity.FIXABLE,
        category=RuleCategory.STRUCTURAL,
        reason="Build programme too slow for the number of units.",
        fix="Tighten the build programme or evidence why the programme is realistic.",
    ),
)

DOCUMENT_QUALITY_META = RuleMeta(
    rule_id="DOC-001",
    severity=Severity.FIXABLE,
    category=RuleCategory.DOCUMENT,
    reason="Document quality score below threshold.",
    fix="Improve the completeness and consistency of the submitted documents.",
    required=False,
)


def check_document_quality(ctx: EvaluationContext) -> Optional[RuleFailure]:
    # No score means the scoring collaborator was not used: nothing to check.
    if ctx.resolve("ai_scores.document_quality") is None:
        return None
    return threshold_min(
        ctx, "ai_scores.document_quality", ctx.bands.min_document_quality_score, DOCUMENT_QUALITY_META
    )


DOCUMENT_QUALITY = CheckRule(
    rule_id=DOCUMENT_QUALITY_META.rule_id,
    title="Document quality score",
    check=check_document_quality,
    category=RuleCategory.DOCUMENT,
    group=RuleGroup.FIXABLE,
    required=False,
    weight=3,
)
