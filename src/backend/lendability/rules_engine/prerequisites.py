"""Gating checks: findings that mean a deal cannot be assessed yet.

Every failure produced here carries WorkflowStatus.GATING so the decision
step can tell "missing prerequisite" apart from "assessed and deficient".
"""

from __future__ import annotations

from typing import List

from .context import EvaluationContext
from .models import RuleCategory, RuleFailure, Severity, WorkflowStatus
from .predicates import RuleMeta, enum_allowed, is_number, make_failure, presence

PLANNING_STAGE_ID = "PREREQ_PLANNING_STAGE"
TECH_PACK_ID = "PREREQ_TECH_PACK"
EXIT_EVIDENCE_ID = "PREREQ_EXIT_EVIDENCE"

PERMISSION_IN_PRINCIPLE = "PIP"

TECH_PACK_ITEMS = {
    "site_investigation": "Site investigation / ground report",
    "measured_survey": "Measured survey",
    "design_drawings": "Design drawings",
    "cost_plan": "Cost plan",
    "structural_warranty": "Structural warranty quote",
}

EXIT_SALE = "SALE"
EXIT_REFINANCE = "REFINANCE"


def _gating(rule_id: str, reason: str, fix: str) -> RuleMeta:
    return RuleMeta(
        rule_id=rule_id,
        severity=Severity.FIXABLE,
        category=RuleCategory.PREREQUISITE,
        reason=reason,
        fix=fix,
        status=WorkflowStatus.GATING,
    )


PLANNING_META = _gating(
    PLANNING_STAGE_ID,
    "Planning stage is not sufficient for a mainstream development facility.",
    "Obtain full, outline or reserved-matters consent (or technical details consent on a PiP) before applying.",
)


def check_planning_stage(ctx: EvaluationContext) -> List[RuleFailure]:
    field = "input.planning.stage"
    missing = presence(ctx, field, None, PLANNING_META)
    if missing is not None:
        return [make_failure(PLANNING_META, missing.evidence, reason="Planning stage not provided.")]

    stage = str(ctx.resolve(field)).strip().upper()
    if stage == PERMISSION_IN_PRINCIPLE:
        if ctx.resolve("input.planning.has_tdc") is True:
            return []
        return [
            make_failure(
                PLANNING_META,
                {field: ctx.resolve(field), "input.planning.has_tdc": ctx.resolve("input.planning.has_tdc")},
                reason="Permission in principle without technical details consent is not a lendable planning position.",
            )
        ]

    if stage in ctx.bands.allowed_planning_statuses:
        return []
    failure = enum_allowed(ctx, field, ctx.bands.allowed_planning_statuses, PLANNING_META)
    return [failure] if failure is not None else []


def check_technical_pack(ctx: EvaluationContext) -> List[RuleFailure]:
    pack = ctx.input.technical
    if pack is None:
        meta = _gating(
            TECH_PACK_ID,
            "Technical readiness pack not supplied.",
            "Provide the technical pack: " + ", ".join(TECH_PACK_ITEMS.values()).lower() + ".",
        )
        return [make_failure(meta, {"input.technical": None})]

    failures: List[RuleFailure] = []
    for name, label in TECH_PACK_ITEMS.items():
        value = getattr(pack, name)
        if value is True:
            continue
        meta = _gating(
            f"PREREQ_TECH_{name.upper()}",
            f"{label} missing from the technical pack.",
            f"Provide the {label.lower()}.",
        )
        failures.append(make_failure(meta, {f"input.technical.{name}": value}))
    return failures


def check_exit_evidence(ctx: EvaluationContext) -> List[RuleFailure]:
    field = "input.exit.strategy"
    meta = _gating(
        EXIT_EVIDENCE_ID,
        "Exit strategy is not evidenced.",
        "State the exit route (sale or refinance) and supply supporting evidence.",
    )
    strategy = ctx.resolve(field)
    if strategy is None or str(strategy).strip().upper() not in (EXIT_SALE, EXIT_REFINANCE):
        return [make_failure(meta, {field: strategy}, reason="Exit strategy missing or not recognised.")]

    route = str(strategy).strip().upper()
    if route == EXIT_SALE:
        comparables = ctx.resolve("input.exit.sales_comparables")
        agent_valuation = ctx.resolve("input.exit.agent_valuation")
        enough = is_number(comparables) and comparables >= ctx.bands.min_sales_comparables
        if enough or agent_valuation is True:
            return []
        return [
            make_failure(
                meta,
                {
                    field: strategy,
                    "input.exit.sales_comparables": comparables,
                    "input.exit.agent_valuation": agent_valuation,
                    "min_sales_comparables": ctx.bands.min_sales_comparables,
                },
                reason="Sale exit lacks comparable evidence or an agent valuation.",
            )
        ]

    aip = ctx.resolve("input.exit.refinance_aip")
    if aip is True:
        return []
    return [
        make_failure(
            meta,
            {field: strategy, "input.exit.refinance_aip": aip},
            reason="Refinance exit lacks a term lender agreement in principle.",
        )
    ]
