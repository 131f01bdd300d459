"""Developer track record and scheme size rules (optional group)."""

from __future__ import annotations

from typing import Optional

from ..context import EvaluationContext
from ..models import FixSeverity, RuleCategory, RuleFailure, RuleGroup, Severity
from ..predicates import RuleMeta, make_failure, threshold_max, threshold_min
from ..rule import CheckRule, PredicateRule

EXPERIENCE_YEARS = PredicateRule(
    predicate=threshold_min,
    field="input.developer.experience_years",
    limit_from_bands="min_experience_years",
    group=RuleGroup.FATAL,
    title="Minimum developer experience",
    weight=8,
    meta=RuleMeta(
        rule_id="EXP-001",
        severity=Severity.FATAL,
        category=RuleCategory.TRACK_RECORD,
        reason="Developer experience below minimum.",
        fix="Bring in an experienced development partner or project manager.",
    ),
)

COMPLETED_PROJECTS = PredicateRule(
    predicate=threshold_min,
    field="input.developer.completed_projects",
    limit_from_bands="min_completed_projects",
    group=RuleGroup.FATAL,
    title="Completed projects track record",
    weight=7,
    meta=RuleMeta(
        rule_id="EXP-002",
        severity=Severity.FATAL,
        category=RuleCategory.TRACK_RECORD,
        reason="Completed projects below minimum.",
        fix="Evidence further completed schemes or partner with an established developer.",
    ),
)

NO_DEFAULT_META = RuleMeta(
    rule_id="EXP-003",
    severity=Severity.FATAL,
    category=RuleCategory.TRACK_RECORD,
    reason="Developer has default history.",
    fix="Provide a full explanation of the default and evidence of resolution.",
)


def check_default_history(ctx: EvaluationContext) -> Optional[RuleFailure]:
    # Only a declared default fails; an undeclared history passes.
    value = ctx.resolve("input.developer.default_history")
    if value is not True:
        return None
    return make_failure(NO_DEFAULT_META, {"input.developer.default_history": value})


NO_DEFAULT_HISTORY = CheckRule(
    rule_id=NO_DEFAULT_META.rule_id,
    title="No default history",
    check=check_default_history,
    category=RuleCategory.TRACK_RECORD,
    group=RuleGroup.FATAL,
    weight=10,
)

CONSTRUCTION_PERIOD = PredicateRule(
    predicate=threshold_max,
    field="input.programme.build_months",
    limit_from_bands="max_build_months",
    group=RuleGroup.FIXABLE,
    title="Maximum construction period",
    weight=6,
    meta=RuleMeta(
        rule_id="DEV-001",
        severity=Severity.FIXABLE,
        category=RuleCategory.STRUCTURAL,
        reason="Construction period exceeds maximum.",
        fix="Phase the scheme or shorten the build programme.",
    ),
)

SCHEME_SIZE_META = RuleMeta(
    rule_id="DEV-002",
    severity=Severity.FIXABLE,
    category=RuleCategory.STRUCTURAL,
    reason="Scheme size below minimum.",
    fix="Increase the unit count or floor area, or approach a small-works lender.",
    fix_severity=FixSeverity.MAJOR,
)


def check_scheme_size(ctx: EvaluationContext) -> Optional[RuleFailure]:
    units_ok = threshold_min(ctx, "input.scheme.units", ctx.bands.min_units, SCHEME_SIZE_META) is None
    area_ok = threshold_min(ctx, "input.scheme.square_feet", ctx.bands.min_square_feet, SCHEME_SIZE_META) is None
    if units_ok or area_ok:
        return None
    return make_failure(
        SCHEME_SIZE_META,
        {
            "input.scheme.units": ctx.resolve("input.scheme.units"),
            "input.scheme.square_feet": ctx.resolve("input.scheme.square_feet"),
            "min_units": ctx.bands.min_units,
            "min_square_feet": ctx.bands.min_square_feet,
        },
    )


SCHEME_SIZE = CheckRule(
    rule_id=SCHEME_SIZE_META.rule_id,
    title="Minimum scheme size",
    check=check_scheme_size,
    category=RuleCategory.STRUCTURAL,
    group=RuleGroup.FIXABLE,
    weight=5,
)
