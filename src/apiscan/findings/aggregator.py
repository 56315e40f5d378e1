"""Issue ordering and scan statistics."""

from __future__ import annotations

from typing import Dict, List, Sequence

from apiscan.config.schema import CATEGORIES, SEVERITIES, SEVERITY_ORDER
from apiscan.findings.models import ScanIssue, ScanStats
from apiscan.intake.models import ScanFile


def sort_issues(issues: Sequence[ScanIssue]) -> List[ScanIssue]:
    """Sort by severity, critical first.

    ``sorted`` is stable, so issues of equal severity keep their
    file-then-rule insertion order.
    """
    return sorted(issues, key=lambda i: SEVERITY_ORDER.get(i.severity, 0), reverse=True)


def compute_stats(
    files: Sequence[ScanFile],
    issues: Sequence[ScanIssue],
    *,
    scanned_files: int,
    skipped_files: int,
    duration_ms: float,
) -> ScanStats:
    """Aggregate counts over *issues*.

    Severity and category buckets are zero-initialised so every key is
    present. The language breakdown is sparse and resolves each issue's file
    by the first input file with an equal path.
    """
    by_severity: Dict[str, int] = {s: 0 for s in SEVERITIES}
    by_category: Dict[str, int] = {c: 0 for c in CATEGORIES}
    by_language: Dict[str, int] = {}

    path_language: Dict[str, str] = {}
    for f in files:
        path_language.setdefault(f.path, f.language)

    for issue in issues:
        by_severity[issue.severity] = by_severity.get(issue.severity, 0) + 1
        by_category[issue.category] = by_category.get(issue.category, 0) + 1
        language = path_language.get(issue.file_path)
        if language is not None:
            by_language[language] = by_language.get(language, 0) + 1

    return ScanStats(
        total_files=len(files),
        scanned_files=scanned_files,
        skipped_files=skipped_files,
        total_issues=len(issues),
        issues_by_severity=by_severity,
        issues_by_category=by_category,
        issues_by_language=by_language,
        scan_duration_ms=duration_ms,
    )
