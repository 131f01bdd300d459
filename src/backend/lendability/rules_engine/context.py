from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Type, get_args

from pydantic import BaseModel

from .config import MainstreamBands
from .models import AIScores, DealInput, DerivedMetrics


_ROOTS: dict[str, Type[BaseModel]] = {
    "input": DealInput,
    "metrics": DerivedMetrics,
    "bands": MainstreamBands,
    "ai_scores": AIScores,
}


@dataclass(frozen=True)
class EvaluationContext:
    input: DealInput
    metrics: DerivedMetrics
    bands: MainstreamBands
    ai_scores: Optional[AIScores] = None

    @classmethod
    def build(cls, deal: DealInput, metrics: DerivedMetrics, bands: MainstreamBands) -> "EvaluationContext":
        return cls(input=deal, metrics=metrics, bands=bands, ai_scores=deal.ai_scores)

    def resolve(self, path: str) -> Any:
        """Read a dotted path such as `input.appraisal.gdv`; absent steps give None."""
        root, _, rest = path.partition(".")
        node: Any = getattr(self, root, None) if root in _ROOTS else None
        if not rest:
            return node
        for part in rest.split("."):
            if node is None:
                return None
            node = getattr(node, part, None)
        return node


def _model_in(annotation: Any) -> Optional[Type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in get_args(annotation):
        found = _model_in(arg)
        if found is not None:
            return found
    return None


def validate_path(path: str) -> str:
    """Check a context path against the model fields; raise ValueError if unknown."""
    parts = path.split(".")
    model = _ROOTS.get(parts[0])
    if model is None:
        raise ValueError(f"Unknown context root in path '{path}' (expected one of {sorted(_ROOTS)})")
    for part in parts[1:]:
        if model is None:
            raise ValueError(f"Path '{path}' descends past a leaf field at '{part}'")
        field = model.model_fields.get(part)
        if field is None:
            raise ValueError(f"Unknown field '{part}' in path '{path}'")
        model = _model_in(field.annotation)
    return path
