import json

from lendability.rules_engine.catalog import build_catalog, main
from lendability.rules_engine.config import EngineSettings


def test_catalog_lists_every_builtin_rule():
    entries = build_catalog()
    ids = [e.rule_id for e in entries]
    assert ids[:3] == ["PREREQ_PLANNING_STAGE", "PREREQ_TECH_PACK", "PREREQ_EXIT_EVIDENCE"]
    assert "EXP-003" in ids and "DEV-002" in ids and "DOC-001" in ids
    assert len(ids) == len(set(ids))


def test_catalog_entry_for_threshold_rule():
    entry = next(e for e in build_catalog() if e.rule_id == "FIN-030")
    assert entry.field == "metrics.loan_to_gdv"
    assert entry.limit == "bands.max_ltgdv"
    assert entry.severity == "FATAL"
    assert entry.group == "FATAL"
    assert entry.extra == {"predicate": "threshold_max"}


def test_catalog_respects_settings():
    ids = [e.rule_id for e in build_catalog(EngineSettings(planning_gating=False, document_quality_rule=False))]
    assert ids == ["FIN-014", "FIN-030", "FIN-031", "FIN-021", "PRG-010"]


def test_catalog_cli_json(capsys):
    main(["--format", "json"])
    out = json.loads(capsys.readouterr().out)
    assert {"rule_id", "title", "category", "group", "required", "weight"} <= set(out[0])
