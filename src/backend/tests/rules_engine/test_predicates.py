from decimal import Decimal

import pytest

from lendability.rules_engine.models import FixSeverity, RuleCategory, Severity, WorkflowStatus
from lendability.rules_engine.predicates import (
    RuleMeta,
    enum_allowed,
    presence,
    threshold_max,
    threshold_min,
)

META = RuleMeta(
    rule_id="TEST-001",
    severity=Severity.FIXABLE,
    category=RuleCategory.METRIC,
    reason="Test reason.",
    fix="Test fix.",
)


def test_threshold_min_boundary_is_inclusive(make_ctx, base_deal):
    ctx = make_ctx(base_deal)  # contingency_pct == 0.08
    assert threshold_min(ctx, "metrics.contingency_pct", 0.08, META) is None
    assert threshold_min(ctx, "metrics.contingency_pct", 0.09, META) is not None


def test_threshold_max_boundary_is_inclusive(make_ctx, base_deal):
    ctx = make_ctx(base_deal)  # build_months_per_unit == 2.5
    assert threshold_max(ctx, "metrics.build_months_per_unit", 2.5, META) is None
    assert threshold_max(ctx, "metrics.build_months_per_unit", 1.5, META) is not None


def test_threshold_on_raw_input_one_unit_either_side(make_ctx, make_deal):
    ctx = make_ctx(make_deal(programme={"build_months": 24}))
    assert threshold_max(ctx, "input.programme.build_months", 24, META) is None
    assert threshold_max(ctx, "input.programme.build_months", 23, META) is not None
    assert threshold_min(ctx, "input.programme.build_months", 24, META) is None
    assert threshold_min(ctx, "input.programme.build_months", 25, META) is not None


def test_threshold_treats_null_as_failure(make_ctx, make_deal):
    ctx = make_ctx(make_deal(appraisal={"total_cost": 0}))
    failure = threshold_min(ctx, "metrics.margin_on_cost", 0.15, META)
    assert failure is not None
    assert failure.evidence == {"metrics.margin_on_cost": None, "min": 0.15}


def test_failure_carries_metadata_and_evidence(make_ctx, make_deal):
    ctx = make_ctx(make_deal(appraisal={"contingency": 10_000}))
    failure = threshold_min(ctx, "metrics.contingency_pct", 0.05, META)
    assert failure.rule_id == "TEST-001"
    assert failure.severity == Severity.FIXABLE
    assert failure.status is None
    assert failure.reason == "Test reason."
    assert failure.fix == "Test fix."
    assert failure.fix_severity == FixSeverity.MAJOR
    assert failure.evidence["metrics.contingency_pct"] == Decimal("0.02")


@pytest.mark.parametrize("value", [None, ""])
def test_presence_fails_on_missing_or_empty(make_ctx, make_deal, value):
    ctx = make_ctx(make_deal(planning={"stage": value}))
    assert presence(ctx, "input.planning.stage", None, META) is not None


def test_presence_fails_when_section_absent(make_ctx, make_deal):
    ctx = make_ctx(make_deal(exit=None))
    failure = presence(ctx, "input.exit.strategy", None, META)
    assert failure.evidence == {"input.exit.strategy": None}


def test_presence_passes_on_value(make_ctx, base_deal):
    assert presence(make_ctx(base_deal), "input.planning.stage", None, META) is None


def test_enum_allowed(make_ctx, make_deal):
    ctx = make_ctx(make_deal(planning={"stage": "PRE_APP"}))
    failure = enum_allowed(ctx, "input.planning.stage", ("FULL", "OUTLINE"), META)
    assert failure is not None
    assert failure.evidence == {"input.planning.stage": "PRE_APP", "allowed": ["FULL", "OUTLINE"]}
    assert enum_allowed(ctx, "input.planning.stage", ("PRE_APP",), META) is None


def test_fix_severity_defaults_follow_severity_and_required():
    gating = RuleMeta("G", Severity.FIXABLE, RuleCategory.PREREQUISITE, "r", "f", status=WorkflowStatus.GATING)
    fatal = RuleMeta("F", Severity.FATAL, RuleCategory.METRIC, "r", "f")
    advisory = RuleMeta("A", Severity.FIXABLE, RuleCategory.DOCUMENT, "r", "f", required=False)
    assert gating.resolved_fix_severity() == FixSeverity.CRITICAL
    assert fatal.resolved_fix_severity() == FixSeverity.CRITICAL
    assert META.resolved_fix_severity() == FixSeverity.MAJOR
    assert advisory.resolved_fix_severity() == FixSeverity.MINOR


def test_rule_meta_requires_id():
    with pytest.raises(ValueError):
        RuleMeta("", Severity.FATAL, RuleCategory.METRIC, "r", "f")
