from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .models import DecisionPolicy

logger = logging.getLogger(__name__)


class BandsConfigurationError(ValueError):
    """Raised when a threshold configuration is incomplete or malformed."""


class MainstreamBands(BaseModel):
    """Named set of underwriting limits (one policy version).

    Ratios are fractions (0.15 == 15%). The first six fields have no default:
    a band set missing any of them is rejected rather than silently filled in.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = "custom"

    min_margin_on_cost: float
    min_contingency_pct: float
    max_ltgdv: float
    max_ltc: float
    max_build_months_per_unit: float
    allowed_planning_statuses: Tuple[str, ...]

    # Track record / scheme size / document limits used by the optional rule groups.
    min_experience_years: float = 3
    min_completed_projects: float = 2
    max_build_months: float = 24
    min_units: float = 2
    min_square_feet: float = 5000
    min_document_quality_score: float = 70
    min_sales_comparables: float = 3

    @field_validator("allowed_planning_statuses", mode="before")
    @classmethod
    def _statuses(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(str(v).strip().upper() for v in value)
        return value

    @model_validator(mode="after")
    def _check_limits(self) -> "MainstreamBands":
        if not self.allowed_planning_statuses:
            raise ValueError("allowed_planning_statuses must not be empty")
        for name in ("min_contingency_pct", "max_ltgdv", "max_ltc", "max_build_months_per_unit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        return self


SME_MAINSTREAM_BANDS_V1 = MainstreamBands(
    version="sme-mainstream-v1",
    min_margin_on_cost=0.15,
    min_contingency_pct=0.05,
    max_ltgdv=0.65,
    max_ltc=0.85,
    max_build_months_per_unit=2.5,
    allowed_planning_statuses=("FULL", "OUTLINE", "RESERVED_MATTERS"),
)

BANDS_VERSIONS: Mapping[str, MainstreamBands] = {
    SME_MAINSTREAM_BANDS_V1.version: SME_MAINSTREAM_BANDS_V1,
}


def get_bands(version: str) -> MainstreamBands:
    try:
        return BANDS_VERSIONS[version]
    except KeyError:
        known = ", ".join(sorted(BANDS_VERSIONS))
        raise BandsConfigurationError(f"Unknown bands version '{version}' (known: {known})") from None


def coerce_bands(value: Union[MainstreamBands, Mapping[str, Any]]) -> MainstreamBands:
    if isinstance(value, MainstreamBands):
        return value
    if not isinstance(value, Mapping):
        raise BandsConfigurationError(
            f"Bands must be MainstreamBands or a mapping, got {type(value).__name__}"
        )
    try:
        return MainstreamBands.model_validate(dict(value))
    except ValidationError as exc:
        raise BandsConfigurationError(f"Invalid bands configuration: {exc}") from exc


def load_bands(path: Union[str, Path]) -> MainstreamBands:
    """Load a band set from a YAML or JSON file."""
    path = Path(path)
    with path.open() as handle:
        if path.suffix.lower() == ".json":
            raw = json.load(handle)
        else:
            raw = yaml.safe_load(handle)
    if raw is None:
        raise BandsConfigurationError(f"Bands file is empty: {path}")
    bands = coerce_bands(raw)
    logger.info("Loaded bands %s from %s", bands.version, path)
    return bands


class EngineSettings(BaseModel):
    """Feature flags selecting rule groups and the decision policy."""

    model_config = ConfigDict(frozen=True)

    planning_gating: bool = True
    technical_pack_gating: bool = False
    exit_evidence_gating: bool = False
    track_record_rules: bool = False
    document_quality_rule: bool = True
    decision_policy: DecisionPolicy = DecisionPolicy.SEVERITY_PRECEDENCE

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """
        Build settings from environment variables.

        Reads LENDABILITY_PLANNING_GATING, LENDABILITY_TECHNICAL_PACK_GATING,
        LENDABILITY_EXIT_EVIDENCE_GATING, LENDABILITY_TRACK_RECORD_RULES,
        LENDABILITY_DOCUMENT_QUALITY_RULE and LENDABILITY_DECISION_POLICY.
        Unset variables keep the defaults.
        """
        if env is None:
            load_dotenv()
            env = os.environ
        raw: Dict[str, Any] = {}
        for name in cls.model_fields:
            value = env.get(f"LENDABILITY_{name.upper()}", "").strip()
            if value:
                raw[name] = value.upper() if name == "decision_policy" else value
        return cls.model_validate(raw)


DEFAULT_SETTINGS = EngineSettings()
