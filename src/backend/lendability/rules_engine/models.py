from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    FATAL = "FATAL"
    FIXABLE = "FIXABLE"


class WorkflowStatus(str, Enum):
    GATING = "GATING"


class DecisionStatus(str, Enum):
    PASS = "PASS"
    FIXABLE = "FIXABLE"
    FATAL = "FATAL"
    GATING = "GATING"


class Verdict(str, Enum):
    MEETS_CRITERIA = "MEETS_CRITERIA"
    NOT_YET_LENDABLE = "NOT_YET_LENDABLE"


class FixSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"
    MINOR = "MINOR"


FIX_SEVERITY_RANK: Dict[FixSeverity, int] = {
    FixSeverity.CRITICAL: 0,
    FixSeverity.MAJOR: 1,
    FixSeverity.MINOR: 2,
}


class RuleCategory(str, Enum):
    PREREQUISITE = "PREREQUISITE"
    METRIC = "METRIC"
    STRUCTURAL = "STRUCTURAL"
    TRACK_RECORD = "TRACK_RECORD"
    DOCUMENT = "DOCUMENT"


class RuleGroup(str, Enum):
    GATING = "GATING"
    FATAL = "FATAL"
    FIXABLE = "FIXABLE"


class DecisionPolicy(str, Enum):
    SEVERITY_PRECEDENCE = "SEVERITY_PRECEDENCE"
    REQUIRED_RULES = "REQUIRED_RULES"


def coerce_number(value: Any) -> Optional[float]:
    # bool is an int subclass; a flag is never a financial figure.
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_decimal(value: Any) -> Optional[Decimal]:
    """Money and programme figures are kept exact: "1150.23" stays 1150.23."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, (float, str)):
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def _coerce_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "y", "1"):
            return True
        if text in ("false", "no", "n", "0"):
            return False
    return None


def _coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class _Section(BaseModel):
    """Base for deal input sections: frozen, lenient, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class PlanningInfo(_Section):
    stage: Optional[str] = None
    has_tdc: Optional[bool] = Field(default=None, alias="hasTdc")

    @field_validator("stage", mode="before")
    @classmethod
    def _stage(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("has_tdc", mode="before")
    @classmethod
    def _has_tdc(cls, value: Any) -> Optional[bool]:
        return _coerce_flag(value)


class TechnicalPack(_Section):
    site_investigation: Optional[bool] = None
    measured_survey: Optional[bool] = None
    design_drawings: Optional[bool] = None
    cost_plan: Optional[bool] = None
    structural_warranty: Optional[bool] = None

    @field_validator("*", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Optional[bool]:
        return _coerce_flag(value)


class Appraisal(_Section):
    gdv: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    equity: Optional[Decimal] = None
    build_cost: Optional[Decimal] = None
    contingency: Optional[Decimal] = None

    @field_validator("*", mode="before")
    @classmethod
    def _amounts(cls, value: Any) -> Optional[Decimal]:
        return coerce_decimal(value)


class Programme(_Section):
    build_months: Optional[Decimal] = None

    @field_validator("build_months", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> Optional[Decimal]:
        return coerce_decimal(value)


class SchemeInfo(_Section):
    name: Optional[str] = None
    units: Optional[Decimal] = None
    square_feet: Optional[Decimal] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("units", "square_feet", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> Optional[Decimal]:
        return coerce_decimal(value)


class DeveloperProfile(_Section):
    experience_years: Optional[float] = None
    completed_projects: Optional[float] = None
    default_history: Optional[bool] = None

    @field_validator("experience_years", "completed_projects", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> Optional[float]:
        return coerce_number(value)

    @field_validator("default_history", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Optional[bool]:
        return _coerce_flag(value)


class ExitEvidence(_Section):
    strategy: Optional[str] = None
    sales_comparables: Optional[float] = None
    agent_valuation: Optional[bool] = None
    refinance_aip: Optional[bool] = None

    @field_validator("strategy", mode="before")
    @classmethod
    def _strategy(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("sales_comparables", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> Optional[float]:
        return coerce_number(value)

    @field_validator("agent_valuation", "refinance_aip", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Optional[bool]:
        return _coerce_flag(value)


class AIScores(_Section):
    """Opaque scores from the document-extraction collaborator (0-100)."""

    document_quality: Optional[float] = None
    market_viability: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _bounded(cls, value: Any) -> Optional[float]:
        number = coerce_number(value)
        if number is None or number < 0 or number > 100:
            return None
        return number


class DealInput(_Section):
    planning: Optional[PlanningInfo] = None
    technical: Optional[TechnicalPack] = None
    appraisal: Optional[Appraisal] = None
    programme: Optional[Programme] = None
    scheme: Optional[SchemeInfo] = None
    developer: Optional[DeveloperProfile] = None
    exit: Optional[ExitEvidence] = None
    ai_scores: Optional[AIScores] = Field(default=None, alias="aiScores")

    @field_validator("*", mode="before")
    @classmethod
    def _sections(cls, value: Any) -> Any:
        # A section that is not a mapping is treated as absent.
        if value is None or isinstance(value, BaseModel):
            return value
        if isinstance(value, Mapping):
            return dict(value)
        return None


class DerivedMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    margin_on_cost: Optional[Decimal] = None
    margin_on_gdv: Optional[Decimal] = None
    loan_to_cost: Optional[Decimal] = None
    loan_to_gdv: Optional[Decimal] = None
    contingency_pct: Optional[Decimal] = None
    build_months_per_unit: Optional[Decimal] = None


class RuleFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(min_length=1)
    severity: Severity
    status: Optional[WorkflowStatus] = None
    category: RuleCategory
    reason: str
    fix: str
    fix_severity: FixSeverity = FixSeverity.MAJOR
    required: bool = True
    evidence: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_gating(self) -> bool:
        return self.status == WorkflowStatus.GATING


class RuleSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rules: int = 0
    passed_rules: int = 0
    failed_rules: int = 0


class EvaluationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    status: DecisionStatus
    failures: Tuple[RuleFailure, ...] = ()
    policy: DecisionPolicy = DecisionPolicy.SEVERITY_PRECEDENCE
    summary: RuleSummary = Field(default_factory=RuleSummary)

    def failure_ids(self) -> List[str]:
        return [f.rule_id for f in self.failures]


class DetailedEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    result: EvaluationResult
    metrics: DerivedMetrics
    bands_version: str = ""


@dataclass(frozen=True)
class StatusOrdering:
    order: Dict[DecisionStatus, int]

    @classmethod
    def default(cls) -> "StatusOrdering":
        # Higher wins.
        return cls(
            order={
                DecisionStatus.GATING: 40,
                DecisionStatus.FATAL: 30,
                DecisionStatus.FIXABLE: 20,
                DecisionStatus.PASS: 10,
            }
        )

    def worst(self, statuses: List[DecisionStatus]) -> DecisionStatus:
        if not statuses:
            return DecisionStatus.PASS
        return max(statuses, key=lambda s: self.order.get(s, 0))


def status_for_failure(failure: RuleFailure) -> DecisionStatus:
    if failure.is_gating:
        return DecisionStatus.GATING
    if failure.severity == Severity.FATAL:
        return DecisionStatus.FATAL
    return DecisionStatus.FIXABLE


@dataclass(frozen=True)
class RuleOutcome:
    """Failures produced by one rule during one evaluation."""

    rule_id: str
    required: bool
    failures: Tuple[RuleFailure, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.failures
