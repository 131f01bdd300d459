"""Core metric rules; a breach is FATAL for the current scheme."""

from __future__ import annotations

from ..models import RuleCategory, RuleGroup, Severity
from ..predicates import RuleMeta, threshold_max, threshold_min
from ..rule import PredicateRule

MARGIN_ON_COST = PredicateRule(
    predicate=threshold_min,
    field="metrics.margin_on_cost",
    limit_from_bands="min_margin_on_cost",
    group=RuleGroup.FATAL,
    title="Minimum margin on cost",
    weight=10,
    meta=RuleMeta(
        rule_id="FIN-014",
        severity=Severity.FATAL,
        category=RuleCategory.METRIC,
        reason="Margin on cost below mainstream lender minimum.",
        fix="Increase GDV, reduce costs, or inject more equity.",
    ),
)

LOAN_TO_GDV = PredicateRule(
    predicate=threshold_max,
    field="metrics.loan_to_gdv",
    limit_from_bands="max_ltgdv",
    group=RuleGroup.FATAL,
    title="Maximum loan to GDV",
    weight=10,
    meta=RuleMeta(
        rule_id="FIN-030",
        severity=Severity.FATAL,
        category=RuleCategory.METRIC,
        reason="Loan to GDV above mainstream lender maximum.",
        fix="Reduce the facility or increase equity until leverage is within the band.",
    ),
)

LOAN_TO_COST = PredicateRule(
    predicate=threshold_max,
    field="metrics.loan_to_cost",
    limit_from_bands="max_ltc",
    group=RuleGroup.FATAL,
    title="Maximum loan to cost",
    weight=10,
    meta=RuleMeta(
        rule_id="FIN-031",
        severity=Severity.FATAL,
        category=RuleCategory.METRIC,
        reason="Loan to cost above mainstream lender maximum.",
        fix="Inject more equity or reduce total cost.",
    ),
)
