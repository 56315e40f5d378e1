"""Rule data model: a static definition paired with a check function."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence

from apiscan.config.schema import (
    SEVERITY_ORDER,
    Category,
    ScanOptions,
    Severity,
)
from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile

CheckFn = Callable[[ScanFile], List[ScanIssue]]


@dataclass(frozen=True)
class RuleDefinition:
    """Static metadata for one rule. ``id`` is unique within a catalog."""

    id: str
    name: str
    description: str
    category: Category
    severity: Severity
    languages: FrozenSet[str]
    fixable: bool = False
    docs: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    """A detector: ``check(file)`` returns zero or more issues for one file.

    Checks are pure with respect to engine state and may raise; the engine
    isolates failures per rule and file.
    """

    definition: RuleDefinition
    check: CheckFn

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def category(self) -> str:
        return self.definition.category

    @property
    def severity(self) -> str:
        return self.definition.severity

    def applies_to(self, language: str, options: Optional[ScanOptions] = None) -> bool:
        """Selection filter for one (file language, rule) pair.

        All conditions must hold. ``disabled_rules`` is checked independently
        of ``enabled_rules``, so a rule named in both is disabled.
        """
        d = self.definition
        if language not in d.languages:
            return False
        if options is None:
            return True
        if options.categories and d.category not in options.categories:
            return False
        if options.enabled_rules and d.id not in options.enabled_rules:
            return False
        if options.disabled_rules and d.id in options.disabled_rules:
            return False
        if (
            options.severity_threshold
            and SEVERITY_ORDER[d.severity] < SEVERITY_ORDER[options.severity_threshold]
        ):
            return False
        return True


def make_issue(
    definition: RuleDefinition,
    file: ScanFile,
    lines: Sequence[str],
    index: int,
    *,
    message: str,
    suggestion: str,
    column: int = 1,
    severity: Optional[Severity] = None,
) -> ScanIssue:
    """Build an issue anchored at 0-based line *index* of *lines*.

    The snippet is the trimmed source line. Severity defaults to the
    definition's own.
    """
    snippet = lines[index].strip() if 0 <= index < len(lines) else None
    return ScanIssue(
        rule_id=definition.id,
        rule_name=definition.name,
        category=definition.category,
        severity=severity or definition.severity,
        message=message,
        suggestion=suggestion,
        file_path=file.path,
        line=index + 1,
        column=column,
        code_snippet=snippet,
        fixable=definition.fixable,
    )
