from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Union

from .context import EvaluationContext, validate_path
from .models import RuleCategory, RuleFailure, RuleGroup
from .predicates import RuleMeta

Predicate = Callable[[EvaluationContext, str, Any, RuleMeta], Optional[RuleFailure]]
CheckFn = Callable[[EvaluationContext], Union[RuleFailure, Iterable[RuleFailure], None]]


class Rule(ABC):
    rule_id: str
    title: str
    category: RuleCategory
    group: RuleGroup
    required: bool = True
    weight: float = 1.0

    def __init__(self):
        if not getattr(self, "rule_id", None):
            raise ValueError("Rule must define rule_id")

    @abstractmethod
    def evaluate(self, ctx: EvaluationContext) -> List[RuleFailure]:  # pragma: no cover
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule_id!r})"


class PredicateRule(Rule):
    """Declarative rule: a predicate bound to a context path and a limit.

    `limit` is either a literal value or the name of a field on the bands in
    use, read at evaluation time so one rule set serves any band version.
    """

    def __init__(
        self,
        *,
        predicate: Predicate,
        field: str,
        meta: RuleMeta,
        group: RuleGroup,
        title: str = "",
        limit: Any = None,
        limit_from_bands: Optional[str] = None,
        weight: float = 1.0,
    ):
        self.rule_id = meta.rule_id
        self.title = title or meta.reason
        self.category = meta.category
        self.group = group
        self.required = meta.required
        self.weight = weight
        self.predicate = predicate
        self.field = validate_path(field)
        self.meta = meta
        self.limit = limit
        if limit_from_bands:
            validate_path(f"bands.{limit_from_bands}")
        self.limit_from_bands = limit_from_bands
        super().__init__()

    def resolve_limit(self, ctx: EvaluationContext) -> Any:
        if self.limit_from_bands:
            return getattr(ctx.bands, self.limit_from_bands)
        return self.limit

    def evaluate(self, ctx: EvaluationContext) -> List[RuleFailure]:
        failure = self.predicate(ctx, self.field, self.resolve_limit(ctx), self.meta)
        return [failure] if failure is not None else []


class CheckRule(Rule):
    """Wraps a function that may return zero or more failures.

    Used for the multi-branch prerequisite checks and for caller-supplied
    catalog rules.
    """

    def __init__(
        self,
        *,
        rule_id: str,
        check: CheckFn,
        category: RuleCategory,
        group: RuleGroup,
        title: str = "",
        required: bool = True,
        weight: float = 1.0,
    ):
        self.rule_id = rule_id
        self.title = title or rule_id
        self.category = category
        self.group = group
        self.required = required
        self.weight = weight
        self.check = check
        super().__init__()

    def evaluate(self, ctx: EvaluationContext) -> List[RuleFailure]:
        result: Union[RuleFailure, Iterable[RuleFailure], None] = self.check(ctx)
        if result is None:
            return []
        if isinstance(result, RuleFailure):
            return [result]
        return list(result)
