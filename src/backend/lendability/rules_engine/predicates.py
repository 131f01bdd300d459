from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Collection, Optional

from .context import EvaluationContext
from .models import FixSeverity, RuleCategory, RuleFailure, Severity, WorkflowStatus


@dataclass(frozen=True)
class RuleMeta:
    rule_id: str
    severity: Severity
    category: RuleCategory
    reason: str
    fix: str
    status: Optional[WorkflowStatus] = None
    fix_severity: Optional[FixSeverity] = None
    required: bool = True

    def __post_init__(self):
        if not self.rule_id:
            raise ValueError("RuleMeta must define rule_id")

    def resolved_fix_severity(self) -> FixSeverity:
        if self.fix_severity is not None:
            return self.fix_severity
        if not self.required:
            return FixSeverity.MINOR
        if self.status == WorkflowStatus.GATING or self.severity == Severity.FATAL:
            return FixSeverity.CRITICAL
        return FixSeverity.MAJOR


def make_failure(meta: RuleMeta, evidence: dict[str, Any], *, reason: Optional[str] = None) -> RuleFailure:
    return RuleFailure(
        rule_id=meta.rule_id,
        severity=meta.severity,
        status=meta.status,
        category=meta.category,
        reason=reason or meta.reason,
        fix=meta.fix,
        fix_severity=meta.resolved_fix_severity(),
        required=meta.required,
        evidence=evidence,
    )


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool) and value == value


def as_decimal(value: Any) -> Decimal:
    # str() first: Decimal(0.15) would carry the float's binary error.
    return value if isinstance(value, Decimal) else Decimal(str(value))


def presence(ctx: EvaluationContext, field: str, limit: Any, meta: RuleMeta) -> Optional[RuleFailure]:
    value = ctx.resolve(field)
    if value is None or value == "":
        return make_failure(meta, {field: value})
    return None


def enum_allowed(
    ctx: EvaluationContext, field: str, limit: Collection[Any], meta: RuleMeta
) -> Optional[RuleFailure]:
    value = ctx.resolve(field)
    if value in limit:
        return None
    return make_failure(meta, {field: value, "allowed": list(limit)})


def threshold_min(ctx: EvaluationContext, field: str, limit: float, meta: RuleMeta) -> Optional[RuleFailure]:
    value = ctx.resolve(field)
    if is_number(value) and as_decimal(value) >= as_decimal(limit):
        return None
    return make_failure(meta, {field: value, "min": limit})


def threshold_max(ctx: EvaluationContext, field: str, limit: float, meta: RuleMeta) -> Optional[RuleFailure]:
    value = ctx.resolve(field)
    if is_number(value) and as_decimal(value) <= as_decimal(limit):
        return None
    return make_failure(meta, {field: value, "max": limit})
