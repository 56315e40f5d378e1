"""Tests for the quality score and its labels."""

import pytest

from apiscan.config.schema import SEVERITIES
from apiscan.findings import ScanStats, calculate_score, score_label


def _stats(scanned: int, **counts: int) -> ScanStats:
    by_severity = {s: 0 for s in SEVERITIES}
    by_severity.update(counts)
    return ScanStats(
        total_files=scanned,
        scanned_files=scanned,
        total_issues=sum(by_severity.values()),
        issues_by_severity=by_severity,
    )


class TestCalculateScore:
    def test_nothing_scanned(self):
        assert calculate_score(_stats(0, critical=10)) == 100

    def test_no_issues(self):
        assert calculate_score(_stats(3)) == 100

    def test_weights(self):
        assert calculate_score(_stats(1, critical=1)) == 75
        assert calculate_score(_stats(1, high=1)) == 90
        assert calculate_score(_stats(1, medium=1)) == 96
        assert calculate_score(_stats(1, low=1)) == 99
        assert calculate_score(_stats(1, info=50)) == 100

    def test_normalised_per_file(self):
        assert calculate_score(_stats(5, critical=1)) == 95

    def test_rounds_half_up(self):
        # 100 - 3/2 = 98.5
        assert calculate_score(_stats(2, low=3)) == 99

    def test_floor_at_zero(self):
        assert calculate_score(_stats(1, critical=10)) == 0

    @pytest.mark.parametrize("severity", ["critical", "high", "medium", "low", "info"])
    def test_non_increasing(self, severity):
        previous = 100
        for count in range(0, 30):
            score = calculate_score(_stats(3, **{severity: count}))
            assert 0 <= score <= previous
            previous = score


class TestScoreLabel:
    @pytest.mark.parametrize(
        "score,label",
        [
            (100, "Excellent"),
            (90, "Excellent"),
            (89, "Good"),
            (75, "Good"),
            (74, "Fair"),
            (60, "Fair"),
            (59, "Poor"),
            (40, "Poor"),
            (39, "Critical"),
            (0, "Critical"),
        ],
    )
    def test_thresholds(self, score, label):
        assert score_label(score) == label
