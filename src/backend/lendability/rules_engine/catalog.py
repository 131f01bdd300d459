from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from .config import EngineSettings
from .rule import CheckRule, PredicateRule, Rule
from .rules import all_rules, build_rule_set


class RuleCatalogEntry(BaseModel):
    rule_id: str
    title: str
    category: str
    group: str
    required: bool
    weight: float

    kind: str
    field: str = ""
    limit: Optional[str] = None
    severity: str = ""
    reason: str = ""
    fix: str = ""
    extra: Dict[str, Any] = Field(default_factory=dict)


def _entry(rule: Rule) -> RuleCatalogEntry:
    entry = RuleCatalogEntry(
        rule_id=rule.rule_id,
        title=rule.title,
        category=rule.category.value,
        group=rule.group.value,
        required=rule.required,
        weight=rule.weight,
        kind=type(rule).__name__,
    )
    if isinstance(rule, PredicateRule):
        limit = f"bands.{rule.limit_from_bands}" if rule.limit_from_bands else repr(rule.limit)
        return entry.model_copy(
            update={
                "field": rule.field,
                "limit": limit,
                "severity": rule.meta.severity.value,
                "reason": rule.meta.reason,
                "fix": rule.meta.fix,
                "extra": {"predicate": rule.predicate.__name__},
            }
        )
    if isinstance(rule, CheckRule):
        return entry.model_copy(update={"extra": {"check": getattr(rule.check, "__name__", "")}})
    return entry


def build_catalog(settings: Optional[EngineSettings] = None) -> List[RuleCatalogEntry]:
    """Describe the built-in rules; every rule when no settings are given."""
    rules = all_rules() if settings is None else build_rule_set(settings).rules()
    return [_entry(rule) for rule in rules]


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the lendability rule catalog.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--from-env",
        action="store_true",
        help="Only list rules enabled by LENDABILITY_* settings instead of every built-in rule.",
    )
    args = parser.parse_args(argv)

    settings = EngineSettings.from_env() if args.from_env else None
    catalog = [e.model_dump() for e in build_catalog(settings)]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
