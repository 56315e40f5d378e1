"""Quality score from severity-weighted issue density per scanned file."""

from __future__ import annotations

import math
from typing import Mapping

from apiscan.findings.models import ScanStats

SEVERITY_WEIGHTS: Mapping[str, int] = {
    "critical": 25,
    "high": 10,
    "medium": 4,
    "low": 1,
    "info": 0,
}


def calculate_score(stats: ScanStats) -> int:
    """Return a 0-100 score; 100 when nothing was scanned.

    Rounds half up (98.5 -> 99), not to even.
    """
    if stats.scanned_files == 0:
        return 100

    penalty = sum(
        SEVERITY_WEIGHTS.get(severity, 0) * count
        for severity, count in stats.issues_by_severity.items()
    )
    score = max(0.0, 100 - penalty / max(stats.scanned_files, 1))
    return int(math.floor(score + 0.5))


def score_label(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Fair"
    if score >= 40:
        return "Poor"
    return "Critical"
