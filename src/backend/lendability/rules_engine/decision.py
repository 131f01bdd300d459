from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import (
    FIX_SEVERITY_RANK,
    DecisionPolicy,
    DecisionStatus,
    EvaluationResult,
    RuleFailure,
    RuleOutcome,
    RuleSummary,
    StatusOrdering,
    Verdict,
    status_for_failure,
)


def summarize(outcomes: Sequence[RuleOutcome]) -> RuleSummary:
    passed = sum(1 for o in outcomes if o.passed)
    return RuleSummary(total_rules=len(outcomes), passed_rules=passed, failed_rules=len(outcomes) - passed)


def decide_by_precedence(
    failures: Iterable[RuleFailure],
    *,
    summary: RuleSummary = RuleSummary(),
) -> EvaluationResult:
    """GATING > FATAL > FIXABLE > PASS, whatever the order of `failures`."""
    failures = tuple(failures)
    status = StatusOrdering.default().worst([status_for_failure(f) for f in failures])
    if status == DecisionStatus.PASS:
        return EvaluationResult(
            verdict=Verdict.MEETS_CRITERIA,
            status=DecisionStatus.PASS,
            failures=(),
            policy=DecisionPolicy.SEVERITY_PRECEDENCE,
            summary=summary,
        )
    return EvaluationResult(
        verdict=Verdict.NOT_YET_LENDABLE,
        status=status,
        failures=failures,
        policy=DecisionPolicy.SEVERITY_PRECEDENCE,
        summary=summary,
    )


def sort_by_fix_severity(failures: Iterable[RuleFailure]) -> List[RuleFailure]:
    # sorted() is stable: equal ranks keep evaluation order.
    return sorted(failures, key=lambda f: FIX_SEVERITY_RANK[f.fix_severity])


def required_rule_passed(outcomes: Sequence[RuleOutcome]) -> bool:
    return any(o.required and o.passed for o in outcomes)


def decide_by_required_rules(outcomes: Sequence[RuleOutcome]) -> EvaluationResult:
    """Reject iff a required rule failed; fix severity only orders the output.

    A deal is never approved on non-required (e.g. AI-scored) rules alone: at
    least one required rule has to have been evaluated and passed. Failures of
    non-required rules stay in the list as advisory fixes.
    """
    summary = summarize(outcomes)
    ordered = tuple(sort_by_fix_severity(f for o in outcomes for f in o.failures))
    blocking = [f for o in outcomes if o.required for f in o.failures]
    if not blocking and required_rule_passed(outcomes):
        return EvaluationResult(
            verdict=Verdict.MEETS_CRITERIA,
            status=DecisionStatus.PASS,
            failures=ordered,
            policy=DecisionPolicy.REQUIRED_RULES,
            summary=summary,
        )

    status = StatusOrdering.default().worst([status_for_failure(f) for f in blocking])
    if status == DecisionStatus.PASS:
        # No required rule was evaluated, so the deal has not been assessed.
        status = DecisionStatus.GATING
    return EvaluationResult(
        verdict=Verdict.NOT_YET_LENDABLE,
        status=status,
        failures=ordered,
        policy=DecisionPolicy.REQUIRED_RULES,
        summary=summary,
    )


def decide(
    outcomes: Sequence[RuleOutcome],
    policy: DecisionPolicy = DecisionPolicy.SEVERITY_PRECEDENCE,
) -> EvaluationResult:
    if policy == DecisionPolicy.REQUIRED_RULES:
        return decide_by_required_rules(outcomes)
    failures = [f for o in outcomes for f in o.failures]
    result = decide_by_precedence(failures, summary=summarize(outcomes))
    if result.status == DecisionStatus.PASS and not required_rule_passed(outcomes):
        # Non-required (e.g. AI-scored) rules alone never approve a deal.
        return result.model_copy(update={"verdict": Verdict.NOT_YET_LENDABLE, "status": DecisionStatus.GATING})
    return result
