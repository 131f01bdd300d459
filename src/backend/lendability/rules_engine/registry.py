from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

from .models import RuleCategory
from .rule import Rule


class RuleRegistry:
    """Ordered rule catalog; registration order is evaluation order."""

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._rules: Dict[str, Rule] = {}
        for rule in rules or ():
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        rule_id = getattr(rule, "rule_id", None)
        if not rule_id:
            raise ValueError("Rule missing rule_id")
        if rule_id in self._rules:
            raise ValueError(f"Duplicate rule_id registered: {rule_id}")
        self._rules[rule_id] = rule
        return rule

    def rules(self) -> List[Rule]:
        return list(self._rules.values())

    def get(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    def ids(self) -> Iterable[str]:
        return self._rules.keys()

    def by_category(self, category: Union[RuleCategory, str]) -> List[Rule]:
        category = RuleCategory(category)
        return [rule for rule in self._rules.values() if rule.category == category]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules.values())
