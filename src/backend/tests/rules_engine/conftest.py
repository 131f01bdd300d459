import copy
import os
import sys


BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from lendability.rules_engine.config import SME_MAINSTREAM_BANDS_V1, MainstreamBands
from lendability.rules_engine.context import EvaluationContext
from lendability.rules_engine.metrics import compute_metrics
from lendability.rules_engine.models import DealInput


BASE_DEAL = {
    "scheme": {"name": "Orchard Row", "units": 4, "square_feet": 6200},
    "planning": {"stage": "FULL"},
    "appraisal": {
        "gdv": 1_000_000,
        "total_cost": 800_000,
        "equity": 200_000,
        "build_cost": 500_000,
        "contingency": 40_000,  # 8%
    },
    "programme": {"build_months": 10},
}


@pytest.fixture
def base_deal() -> dict:
    return copy.deepcopy(BASE_DEAL)


@pytest.fixture
def make_deal():
    def _make(**sections) -> dict:
        deal = copy.deepcopy(BASE_DEAL)
        for name, values in sections.items():
            if values is None:
                deal.pop(name, None)
            elif isinstance(values, dict) and isinstance(deal.get(name), dict):
                deal[name] = {**deal[name], **values}
            else:
                deal[name] = values
        return deal

    return _make


@pytest.fixture
def bands() -> MainstreamBands:
    return SME_MAINSTREAM_BANDS_V1


@pytest.fixture
def make_bands():
    def _make(**overrides) -> MainstreamBands:
        return SME_MAINSTREAM_BANDS_V1.model_copy(update=overrides)

    return _make


@pytest.fixture
def make_ctx(bands):
    def _make(deal: dict, *, bands_override: MainstreamBands | None = None) -> EvaluationContext:
        model = DealInput.model_validate(deal)
        return EvaluationContext.build(model, compute_metrics(model), bands_override or bands)

    return _make
