"""Scan engine and inline suppression."""

from apiscan.scanner.engine import ScanEngine
from apiscan.scanner.suppression import (
    SuppressionChecker,
    apply_suppressions,
    parse_inline_suppression,
)

__all__ = [
    "ScanEngine",
    "SuppressionChecker",
    "apply_suppressions",
    "parse_inline_suppression",
]
