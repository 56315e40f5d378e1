"""User-defined pattern rules loaded from YAML files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Mapping

import yaml

from apiscan.config.schema import CATEGORIES, LANGUAGES, SEVERITIES
from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    Violation,
    any_match,
    check_violations,
)
from apiscan.rules.models import Rule, RuleDefinition


class RuleLoadError(Exception):
    """Raised when a custom rule file cannot be read or an entry is malformed."""


def _require_str(entry: Mapping[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RuleLoadError(f"{where}: '{key}' must be a non-empty string")
    return value


def _choice(entry: Mapping[str, Any], key: str, allowed: tuple, default: str, where: str) -> str:
    value = entry.get(key, default)
    if value not in allowed:
        raise RuleLoadError(
            f"{where}: invalid {key} '{value}' (expected one of: {', '.join(allowed)})"
        )
    return value


def _compile(pattern: Any, where: str) -> re.Pattern[str]:
    if not isinstance(pattern, str):
        raise RuleLoadError(f"{where}: pattern must be a string")
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise RuleLoadError(f"{where}: invalid regex {pattern!r}: {exc}") from exc


def rule_from_mapping(entry: Any, source: str = "<custom>") -> Rule:
    """Build a local-pattern :class:`Rule` from one YAML entry."""
    if not isinstance(entry, dict):
        raise RuleLoadError(f"{source}: each rule must be a mapping")

    rule_id = _require_str(entry, "id", source)
    where = f"{source} [{rule_id}]"

    languages = entry.get("languages")
    if languages is None:
        language_set = ALL_LANGUAGES
    else:
        if not isinstance(languages, list) or not languages:
            raise RuleLoadError(f"{where}: 'languages' must be a non-empty list")
        unknown = [lang for lang in languages if lang not in LANGUAGES]
        if unknown:
            raise RuleLoadError(f"{where}: unknown language(s): {', '.join(map(str, unknown))}")
        language_set = frozenset(languages)

    raw_patterns = entry.get("patterns")
    if not isinstance(raw_patterns, list) or not raw_patterns:
        raise RuleLoadError(f"{where}: 'patterns' must be a non-empty list")

    violations: List[Violation] = []
    for item in raw_patterns:
        if not isinstance(item, dict):
            raise RuleLoadError(f"{where}: each pattern must be a mapping")
        violations.append(
            (
                _compile(item.get("pattern"), where),
                _require_str(item, "message", where),
                str(item.get("suggestion", "")),
            )
        )

    safe = entry.get("safe_patterns") or []
    if not isinstance(safe, list):
        raise RuleLoadError(f"{where}: 'safe_patterns' must be a list")
    safe_patterns = [_compile(p, where) for p in safe]

    definition = RuleDefinition(
        id=rule_id,
        name=str(entry.get("name", rule_id)),
        description=str(entry.get("description", "")),
        category=_choice(entry, "category", CATEGORIES, "best-practices", where),  # type: ignore[arg-type]
        severity=_choice(entry, "severity", SEVERITIES, "medium", where),  # type: ignore[arg-type]
        languages=language_set,
    )

    def check(file: ScanFile) -> List[ScanIssue]:
        issues = check_violations(definition, violations, file)
        if not safe_patterns:
            return issues
        return [i for i in issues if not any_match(safe_patterns, i.code_snippet or "")]

    return Rule(definition, check)


def load_rule_file(path: Path) -> List[Rule]:
    """Parse one YAML file holding a single rule mapping or a list of them."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise RuleLoadError(f"Cannot load custom rules from {path}: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    return [rule_from_mapping(entry, str(path)) for entry in data]


def iter_rule_files(directory: Path) -> List[Path]:
    if not directory.is_dir():
        return []
    return [p for p in sorted(directory.iterdir()) if p.suffix in (".yaml", ".yml")]
