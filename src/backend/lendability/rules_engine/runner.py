from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from .config import EngineSettings, MainstreamBands, coerce_bands
from .context import EvaluationContext
from .decision import decide
from .metrics import compute_metrics
from .models import (
    DealInput,
    DetailedEvaluation,
    EvaluationResult,
    RuleCategory,
    RuleGroup,
    RuleOutcome,
    WorkflowStatus,
)
from .registry import RuleRegistry
from .rule import Rule
from .rules import GROUP_ORDER, build_rule_set

logger = logging.getLogger(__name__)

DealLike = Union[DealInput, Mapping[str, Any]]
BandsLike = Union[MainstreamBands, Mapping[str, Any]]


def coerce_deal(deal: DealLike) -> DealInput:
    if isinstance(deal, DealInput):
        return deal
    if not isinstance(deal, Mapping):
        raise TypeError(f"Deal input must be DealInput or a mapping, got {type(deal).__name__}")
    return DealInput.model_validate(dict(deal))


def _outcome(rule: Rule, ctx: EvaluationContext) -> RuleOutcome:
    failures = tuple(rule.evaluate(ctx))
    if rule.group == RuleGroup.GATING:
        # The gating group can only report "not assessable yet".
        failures = tuple(
            f if f.is_gating else f.model_copy(update={"status": WorkflowStatus.GATING}) for f in failures
        )
    return RuleOutcome(rule_id=rule.rule_id, required=rule.required, failures=failures)


class RulesRunner:
    """Evaluates deals against an ordered rule catalog.

    Holds no per-evaluation state: one runner can be shared across threads.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None, *, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        if rules is None:
            self._registry = build_rule_set(self.settings)
        else:
            self._registry = RuleRegistry(rules)

    def rules(self) -> List[Rule]:
        return self._registry.rules()

    def rules_by_category(self, category: Union[RuleCategory, str]) -> List[Rule]:
        return self._registry.by_category(category)

    def _ordered_rules(self) -> List[Rule]:
        # Gating, then FATAL, then FIXABLE; registration order within a group.
        rank = {group: i for i, group in enumerate(GROUP_ORDER)}
        return sorted(self._registry.rules(), key=lambda r: rank[r.group])

    def _run(self, deal: DealLike, bands: BandsLike):
        bands = coerce_bands(bands)
        deal = coerce_deal(deal)
        metrics = compute_metrics(deal)
        ctx = EvaluationContext.build(deal, metrics, bands)

        # Every rule runs; an earlier failure never stops a later rule.
        outcomes = [_outcome(rule, ctx) for rule in self._ordered_rules()]
        result = decide(outcomes, self.settings.decision_policy)
        logger.debug(
            "Evaluated %d rules against bands %s: %s (%d failures)",
            len(outcomes),
            bands.version,
            result.status.value,
            len(result.failures),
        )
        return result, metrics, bands

    def evaluate(self, deal: DealLike, bands: BandsLike) -> EvaluationResult:
        result, _, _ = self._run(deal, bands)
        return result

    def evaluate_detailed(self, deal: DealLike, bands: BandsLike) -> DetailedEvaluation:
        result, metrics, bands = self._run(deal, bands)
        return DetailedEvaluation(result=result, metrics=metrics, bands_version=bands.version)


def evaluate(deal: DealLike, bands: BandsLike, *, settings: Optional[EngineSettings] = None) -> EvaluationResult:
    return RulesRunner(settings=settings).evaluate(deal, bands)


def evaluate_detailed(
    deal: DealLike, bands: BandsLike, *, settings: Optional[EngineSettings] = None
) -> DetailedEvaluation:
    return RulesRunner(settings=settings).evaluate_detailed(deal, bands)


__all__ = [
    "RulesRunner",
    "coerce_deal",
    "evaluate",
    "evaluate_detailed",
]
