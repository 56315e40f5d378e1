"""Issue, statistics, and scan result models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from apiscan.config.schema import Category, ScanOptions, Severity, severity_at_or_above


@dataclass(frozen=True)
class ScanIssue:
    """One finding produced by a rule. ``line`` and ``column`` are 1-based."""

    rule_id: str
    rule_name: str
    category: Category
    severity: Severity
    message: str
    suggestion: str
    file_path: str
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    code_snippet: Optional[str] = None
    fixable: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class Suppression:
    """Audit record of an issue removed by an inline ignore comment."""

    rule_id: str
    file_path: str
    line: int
    source: str  # e.g. 'apiscan-ignore' or 'apiscan-ignore[SEC001]'


@dataclass
class ScanStats:
    total_files: int = 0
    scanned_files: int = 0
    skipped_files: int = 0
    total_issues: int = 0
    issues_by_severity: Dict[str, int] = field(default_factory=dict)
    issues_by_category: Dict[str, int] = field(default_factory=dict)
    issues_by_language: Dict[str, int] = field(default_factory=dict)
    scan_duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScanResult:
    """Complete result of one ``ScanEngine.scan_files`` call."""

    id: str
    issues: List[ScanIssue]
    stats: ScanStats
    scanned_at: datetime
    options: ScanOptions
    suppressed: List[Suppression] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        return len(self.issues)

    @property
    def score(self) -> int:
        from apiscan.findings.scoring import calculate_score

        return calculate_score(self.stats)

    def issues_at_or_above(self, threshold: str) -> List[ScanIssue]:
        return [i for i in self.issues if severity_at_or_above(i.severity, threshold)]
