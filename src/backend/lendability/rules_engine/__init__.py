"""Deterministic lendability rules engine.

Turns (deal input, threshold bands, rule set) into (verdict, status, ordered
failures). Pure in-process computation: no I/O happens during evaluation.
"""

from .config import (
    SME_MAINSTREAM_BANDS_V1,
    BandsConfigurationError,
    EngineSettings,
    MainstreamBands,
    get_bands,
    load_bands,
)
from .context import EvaluationContext
from .metrics import compute_metrics
from .models import (
    DealInput,
    DecisionPolicy,
    DecisionStatus,
    DerivedMetrics,
    DetailedEvaluation,
    EvaluationResult,
    FixSeverity,
    RuleCategory,
    RuleFailure,
    Severity,
    Verdict,
    WorkflowStatus,
)
from .runner import RulesRunner, evaluate, evaluate_detailed
