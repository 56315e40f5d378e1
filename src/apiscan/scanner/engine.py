"""Core scan engine: runs the rule catalog over intake files.

Failure isolation: an exception raised by one rule on one file discards
that rule's output for that file only. The scan itself never aborts
because of a rule.
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from apiscan.config.schema import ScanOptions
from apiscan.findings.aggregator import compute_stats, sort_issues
from apiscan.findings.models import ScanIssue, ScanResult, Suppression
from apiscan.intake.models import ScanFile
from apiscan.rules.models import Rule
from apiscan.rules.registry import RuleRegistry, build_registry
from apiscan.scanner.suppression import apply_suppressions

logger = logging.getLogger(__name__)

# (issues, suppressions, skipped)
_FileOutcome = Tuple[List[ScanIssue], List[Suppression], bool]


class ScanEngine:
    """Evaluates a read-only rule catalog against files.

    The catalog is fixed at construction and safe to share between
    concurrent scans.
    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        *,
        registry: Optional[RuleRegistry] = None,
        max_workers: int = 1,
    ) -> None:
        if registry is None:
            registry = RuleRegistry(rules) if rules is not None else build_registry()
        elif rules is not None:
            raise ValueError("Pass either rules or registry, not both")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._registry = registry
        self.max_workers = max_workers

    # ---- catalog access ----

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def rules(self) -> List[Rule]:
        return self._registry.all_rules

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._registry.get(rule_id)

    def applicable_rules(self, file: ScanFile, options: Optional[ScanOptions] = None) -> List[Rule]:
        return self._registry.select(file.language, options)

    # ---- scanning ----

    def scan_file(self, file: ScanFile, options: Optional[ScanOptions] = None) -> List[ScanIssue]:
        """Run every applicable rule on *file*; issues come back in catalog order."""
        issues: List[ScanIssue] = []
        for rule in self.applicable_rules(file, options):
            try:
                found = list(rule.check(file))
            except Exception:
                logger.debug("Rule %s failed on %s", rule.id, file.path, exc_info=True)
                continue
            issues.extend(found)
        return issues

    def _evaluate(self, file: ScanFile, options: ScanOptions) -> _FileOutcome:
        if file.size > options.effective_max_file_size:
            logger.debug(
                "Skipping %s (%d bytes > %d)", file.path, file.size, options.effective_max_file_size
            )
            return [], [], True

        issues = self.scan_file(file, options)
        if options.respect_suppressions:
            issues, suppressed = apply_suppressions(file, issues)
            return issues, suppressed, False
        return issues, [], False

    def scan_files(
        self, files: Sequence[ScanFile], options: Optional[ScanOptions] = None
    ) -> ScanResult:
        """Scan *files* in input order and return a sorted, summarised result."""
        # snapshot so the result keeps the options this scan actually used
        options = copy.deepcopy(options) if options is not None else ScanOptions()
        start = time.perf_counter()

        if self.max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # map() yields in submission order
                outcomes = list(pool.map(lambda f: self._evaluate(f, options), files))
        else:
            outcomes = [self._evaluate(f, options) for f in files]

        collected: List[ScanIssue] = []
        suppressed: List[Suppression] = []
        scanned = skipped = 0
        for issues, sups, was_skipped in outcomes:
            if was_skipped:
                skipped += 1
                continue
            scanned += 1
            collected.extend(issues)
            suppressed.extend(sups)

        issues = sort_issues(collected)
        elapsed = (time.perf_counter() - start) * 1000

        stats = compute_stats(
            files,
            issues,
            scanned_files=scanned,
            skipped_files=skipped,
            duration_ms=round(elapsed, 2),
        )
        logger.debug(
            "Scanned %d/%d file(s): %d issue(s), %d suppressed",
            scanned,
            len(files),
            len(issues),
            len(suppressed),
        )

        return ScanResult(
            id=str(uuid.uuid4()),
            issues=issues,
            stats=stats,
            scanned_at=datetime.now(timezone.utc),
            options=options,
            suppressed=suppressed,
        )
