"""Inline suppression comments.

Suppression conventions (matches ESLint/pylint/semgrep):
  - ``// apiscan-ignore`` or ``# apiscan-ignore`` on line N suppresses ALL
    rules on line N.
  - The same comment on a line of its own also suppresses line N+1.
  - ``apiscan-ignore[SEC001,DES004]`` suppresses only those rules.
"""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from apiscan.findings.models import ScanIssue, Suppression
from apiscan.intake.models import ScanFile

_SUPPRESS_RE = re.compile(
    r"(?://|#)\s*apiscan-ignore"
    r"(?:\[([A-Za-z0-9_,\s-]+)\])?"  # optional [RULE_A, RULE_B]
    r"\s*(?:\*/|-->)?\s*$"
)

# None means every rule
_Scope = Optional[FrozenSet[str]]


def parse_inline_suppression(line_content: str) -> Tuple[bool, _Scope]:
    """Parse a line for an ``apiscan-ignore`` comment.

    Returns:
        (is_suppressed, rule_ids). *rule_ids* is None to suppress ALL rules,
        or a frozenset of specific IDs.
    """
    m = _SUPPRESS_RE.search(line_content)
    if m is None:
        return False, None
    scope = m.group(1)
    if scope:
        return True, frozenset(r.strip() for r in scope.split(",") if r.strip())
    return True, None


def is_pure_comment(line_content: str) -> bool:
    """Return True if the line is a standalone comment."""
    return line_content.strip().startswith(("#", "//", "/*"))


class SuppressionChecker:
    """Decide whether an issue on a given line is suppressed.

    Built from the full line list of one file so it can look at the
    *previous* line for next-line suppression.
    """

    def __init__(self, lines: Sequence[str]) -> None:
        # 1-based line -> scope
        self._lines: Dict[int, _Scope] = {}
        pending: Optional[_Scope] = None
        has_pending = False

        for line_no, content in enumerate(lines, 1):
            is_suppressed, rule_ids = parse_inline_suppression(content)

            if is_suppressed:
                self._lines[line_no] = rule_ids
                has_pending = is_pure_comment(content)
                pending = rule_ids if has_pending else None
            else:
                if has_pending:
                    self._lines[line_no] = pending
                has_pending = False
                pending = None

    @classmethod
    def for_file(cls, file: ScanFile) -> "SuppressionChecker":
        return cls(file.content.split("\n"))

    def __bool__(self) -> bool:
        return bool(self._lines)

    def is_suppressed(self, file_path: str, line: int, rule_id: str) -> Optional[Suppression]:
        """Return a Suppression record if the issue should be dropped, else None."""
        if line not in self._lines:
            return None
        scope = self._lines[line]
        if scope is None:
            return Suppression(rule_id=rule_id, file_path=file_path, line=line, source="apiscan-ignore")
        if rule_id in scope:
            return Suppression(
                rule_id=rule_id,
                file_path=file_path,
                line=line,
                source=f"apiscan-ignore[{rule_id}]",
            )
        return None


def apply_suppressions(
    file: ScanFile, issues: List[ScanIssue]
) -> Tuple[List[ScanIssue], List[Suppression]]:
    """Split *issues* into (kept, suppressed) using the file's ignore comments."""
    checker = SuppressionChecker.for_file(file)
    if not checker:
        return issues, []

    kept: List[ScanIssue] = []
    suppressed: List[Suppression] = []
    for issue in issues:
        sup = checker.is_suppressed(file.path, issue.line, issue.rule_id)
        if sup is not None:
            suppressed.append(sup)
        else:
            kept.append(issue)
    return kept, suppressed
