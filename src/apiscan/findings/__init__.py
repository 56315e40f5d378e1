"""Issue models, ordering, statistics, and scoring."""

from apiscan.findings.aggregator import compute_stats, sort_issues
from apiscan.findings.models import ScanIssue, ScanResult, ScanStats, Suppression
from apiscan.findings.scoring import calculate_score, score_label

__all__ = [
    "ScanIssue",
    "ScanResult",
    "ScanStats",
    "Suppression",
    "calculate_score",
    "compute_stats",
    "score_label",
    "sort_issues",
]
