from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import DealInput, DerivedMetrics

ZERO = Decimal("0")


def _ratio(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    if denominator <= 0:
        return None
    return numerator / denominator


def _value(section, name: str) -> Decimal:
    if section is None:
        return ZERO
    value = getattr(section, name, None)
    return ZERO if value is None else value


def compute_metrics(deal: DealInput) -> DerivedMetrics:
    """Derive the underwriting ratios from raw appraisal figures.

    Figures are Decimal, so a ratio that sits exactly on a band limit compares
    equal to it. Missing or non-numeric figures count as zero; a metric whose
    denominator is zero comes back as None.
    """
    appraisal = deal.appraisal
    gdv = _value(appraisal, "gdv")
    total_cost = _value(appraisal, "total_cost")
    equity = _value(appraisal, "equity")
    build_cost = _value(appraisal, "build_cost")
    contingency = _value(appraisal, "contingency")
    units = _value(deal.scheme, "units")
    build_months = _value(deal.programme, "build_months")

    return DerivedMetrics(
        margin_on_cost=_ratio(gdv - total_cost, total_cost),
        margin_on_gdv=_ratio(gdv - total_cost, gdv),
        loan_to_cost=_ratio(total_cost - equity, total_cost),
        loan_to_gdv=_ratio(total_cost - equity, gdv),
        contingency_pct=_ratio(contingency, build_cost),
        build_months_per_unit=_ratio(build_months, units),
    )
