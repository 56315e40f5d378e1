"""Rule registry with option-based selection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from apiscan.config.schema import ScanOptions
from apiscan.rules.custom import RuleLoadError, iter_rule_files, load_rule_file
from apiscan.rules.models import Rule

logger = logging.getLogger(__name__)

CUSTOM_RULES_DIRNAME = ".apiscan-rules"


class RuleRegistry:
    """Ordered store of detection rules, keyed by id."""

    def __init__(self, rules: Optional[Iterable[Rule]] = None) -> None:
        self._rules: Dict[str, Rule] = {}
        if rules is not None:
            self.register_many(rules)

    # ---- registration ----

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise ValueError(f"Duplicate rule id: {rule.id}")
        self._rules[rule.id] = rule

    def register_many(self, rules: Iterable[Rule]) -> None:
        for r in rules:
            self.register(r)

    # ---- queries ----

    @property
    def all_rules(self) -> List[Rule]:
        return list(self._rules.values())

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def select(self, language: str, options: Optional[ScanOptions] = None) -> List[Rule]:
        """Rules that apply to a file of *language* under *options*, in catalog order."""
        return [r for r in self._rules.values() if r.applies_to(language, options)]

    # ---- custom rule loading ----

    def load_custom_rules(self, directory: Path) -> int:
        """Load YAML rule files from *directory*. Returns count loaded."""
        count = 0
        for path in iter_rule_files(directory):
            rules = load_rule_file(path)
            try:
                self.register_many(rules)
            except ValueError as exc:
                raise RuleLoadError(f"{path}: {exc}") from exc
            logger.debug("Loaded %d custom rule(s) from %s", len(rules), path)
            count += len(rules)
        return count


def build_registry(root: Optional[Path] = None) -> RuleRegistry:
    """Create a registry of the built-in catalog plus custom rules under *root*."""
    from apiscan.rules.builtin import ALL_BUILTIN_RULES

    registry = RuleRegistry(ALL_BUILTIN_RULES)

    if root is not None:
        registry.load_custom_rules(root / CUSTOM_RULES_DIRNAME)

    return registry
