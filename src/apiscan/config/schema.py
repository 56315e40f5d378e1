"""Vocabularies, scan options, and the .apiscan.toml sections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

Severity = Literal["critical", "high", "medium", "low", "info"]

Category = Literal[
    "security",
    "design",
    "error-handling",
    "performance",
    "documentation",
    "best-practices",
]

Language = Literal[
    "javascript",
    "typescript",
    "python",
    "go",
    "java",
    "php",
    "ruby",
]

SEVERITY_ORDER: dict[str, int] = {
    "critical": 5,
    "high": 4,
    "medium": 3,
    "low": 2,
    "info": 1,
}

# Highest first; also the bucket order for stats.
SEVERITIES: tuple[str, ...] = ("critical", "high", "medium", "low", "info")

CATEGORIES: tuple[str, ...] = (
    "security",
    "design",
    "error-handling",
    "performance",
    "documentation",
    "best-practices",
)

LANGUAGES: tuple[str, ...] = (
    "javascript",
    "typescript",
    "python",
    "go",
    "java",
    "php",
    "ruby",
)

DEFAULT_MAX_FILE_SIZE = 500 * 1024

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "vendor",
    "__pycache__",
    "*.min.js",
    "*.test.*",
    "*.spec.*",
)


def severity_at_or_above(severity: str, threshold: str) -> bool:
    """Return True if *severity* ranks at or above *threshold*."""
    return SEVERITY_ORDER.get(severity, 0) >= SEVERITY_ORDER.get(threshold, 0)


@dataclass
class ScanOptions:
    """Options accepted by intake and the scan engine.

    ``None`` means "not set": no restriction is applied for that field.
    ``exclude_patterns=None`` selects ``DEFAULT_EXCLUDE_PATTERNS``; an empty
    list disables exclusion entirely.
    """

    languages: Optional[List[Language]] = None
    categories: Optional[List[Category]] = None
    severity_threshold: Optional[Severity] = None
    max_file_size: Optional[int] = None
    exclude_patterns: Optional[List[str]] = None
    enabled_rules: Optional[List[str]] = None
    disabled_rules: Optional[List[str]] = None
    respect_suppressions: bool = True

    @property
    def effective_max_file_size(self) -> int:
        if self.max_file_size is None:
            return DEFAULT_MAX_FILE_SIZE
        return self.max_file_size

    @property
    def effective_exclude_patterns(self) -> List[str]:
        if self.exclude_patterns is None:
            return list(DEFAULT_EXCLUDE_PATTERNS)
        return list(self.exclude_patterns)


# ---- .apiscan.toml sections ----


@dataclass
class ScanConfig:
    languages: List[str] = field(default_factory=list)  # empty = all
    categories: List[str] = field(default_factory=list)  # empty = all
    severity_threshold: Optional[Severity] = None
    max_file_size: int = 512_000
    exclude: Optional[List[str]] = None  # None = built-in exclude set
    respect_suppressions: bool = True


@dataclass
class RulesConfig:
    enable: List[str] = field(default_factory=list)  # empty = all enabled
    disable: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    format: Literal["terminal", "json", "sarif"] = "terminal"
    show_summary: bool = True
    fail_on: Severity = "high"  # exit 1 on issues at or above this level
    min_score: Optional[int] = None  # exit 1 when the score drops below


@dataclass
class ApiScanConfig:
    version: str = "1.0"
    scan: ScanConfig = field(default_factory=ScanConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_scan_options(self) -> ScanOptions:
        """Translate file-level config into engine ``ScanOptions``."""
        return ScanOptions(
            languages=list(self.scan.languages) or None,  # type: ignore[arg-type]
            categories=list(self.scan.categories) or None,  # type: ignore[arg-type]
            severity_threshold=self.scan.severity_threshold,
            max_file_size=self.scan.max_file_size,
            exclude_patterns=(
                list(self.scan.exclude) if self.scan.exclude is not None else None
            ),
            enabled_rules=list(self.rules.enable) or None,
            disabled_rules=list(self.rules.disable) or None,
            respect_suppressions=self.scan.respect_suppressions,
        )
