import json

import pytest
import yaml

from lendability.rules_engine.config import (
    SME_MAINSTREAM_BANDS_V1,
    BandsConfigurationError,
    EngineSettings,
    MainstreamBands,
    coerce_bands,
    get_bands,
    load_bands,
)
from lendability.rules_engine.models import DecisionPolicy


def test_default_bands_values():
    b = SME_MAINSTREAM_BANDS_V1
    assert b.min_margin_on_cost == 0.15
    assert b.min_contingency_pct == 0.05
    assert b.max_ltgdv == 0.65
    assert b.max_ltc == 0.85
    assert b.max_build_months_per_unit == 2.5
    assert b.allowed_planning_statuses == ("FULL", "OUTLINE", "RESERVED_MATTERS")


def test_bands_are_immutable():
    with pytest.raises(Exception):
        SME_MAINSTREAM_BANDS_V1.max_ltgdv = 0.9


def test_get_bands_by_version():
    assert get_bands("sme-mainstream-v1") is SME_MAINSTREAM_BANDS_V1
    with pytest.raises(BandsConfigurationError):
        get_bands("sme-mainstream-v99")


def test_coerce_bands_normalises_statuses():
    raw = SME_MAINSTREAM_BANDS_V1.model_dump()
    raw["allowed_planning_statuses"] = ["full", " outline "]
    assert coerce_bands(raw).allowed_planning_statuses == ("FULL", "OUTLINE")


@pytest.mark.parametrize(
    "change",
    [
        {"allowed_planning_statuses": []},
        {"max_ltgdv": -0.1},
        {"max_ltc": "high"},
        {"unexpected_limit": 1},
    ],
)
def test_malformed_bands_fail_fast(change):
    raw = {**SME_MAINSTREAM_BANDS_V1.model_dump(), **change}
    with pytest.raises(BandsConfigurationError):
        coerce_bands(raw)


def test_coerce_bands_rejects_other_types():
    with pytest.raises(BandsConfigurationError):
        coerce_bands(["FULL"])


def test_load_bands_yaml(tmp_path):
    path = tmp_path / "bands.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "version": "regional-v2",
                "min_margin_on_cost": 0.2,
                "min_contingency_pct": 0.1,
                "max_ltgdv": 0.6,
                "max_ltc": 0.8,
                "max_build_months_per_unit": 2,
                "allowed_planning_statuses": ["FULL"],
            }
        )
    )
    bands = load_bands(path)
    assert isinstance(bands, MainstreamBands)
    assert bands.version == "regional-v2"
    assert bands.min_margin_on_cost == 0.2
    assert bands.min_document_quality_score == 70


def test_load_bands_json(tmp_path):
    path = tmp_path / "bands.json"
    path.write_text(json.dumps(SME_MAINSTREAM_BANDS_V1.model_dump()))
    assert load_bands(path) == SME_MAINSTREAM_BANDS_V1


def test_load_bands_empty_file(tmp_path):
    path = tmp_path / "bands.yaml"
    path.write_text("")
    with pytest.raises(BandsConfigurationError):
        load_bands(path)


def test_settings_defaults():
    s = EngineSettings()
    assert s.planning_gating is True
    assert s.technical_pack_gating is False
    assert s.exit_evidence_gating is False
    assert s.track_record_rules is False
    assert s.document_quality_rule is True
    assert s.decision_policy == DecisionPolicy.SEVERITY_PRECEDENCE


def test_settings_from_env_mapping():
    s = EngineSettings.from_env(
        {
            "LENDABILITY_TECHNICAL_PACK_GATING": "true",
            "LENDABILITY_PLANNING_GATING": "0",
            "LENDABILITY_DECISION_POLICY": "required_rules",
            "UNRELATED": "x",
        }
    )
    assert s.technical_pack_gating is True
    assert s.planning_gating is False
    assert s.decision_policy == DecisionPolicy.REQUIRED_RULES


def test_settings_from_process_env(monkeypatch):
    monkeypatch.setenv("LENDABILITY_TRACK_RECORD_RULES", "yes")
    assert EngineSettings.from_env().track_record_rules is True
