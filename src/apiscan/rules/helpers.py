"""Line-oriented helpers shared by the built-in rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from apiscan.config.schema import LANGUAGES
from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.models import RuleDefinition, make_issue

ALL_LANGUAGES = frozenset(LANGUAGES)
JS_LANGUAGES = frozenset({"javascript", "typescript"})

COMMENT_MARKERS = ("//", "#")
JS_COMMENT_MARKERS = ("//",)


def compile_all(patterns: Iterable[str], flags: int = re.IGNORECASE) -> List[re.Pattern[str]]:
    return [re.compile(p, flags) for p in patterns]


def split_lines(content: str) -> List[str]:
    """Split on ``\\n`` only; line 1 is index 0."""
    return content.split("\n")


def is_comment(line: str, markers: Sequence[str] = COMMENT_MARKERS) -> bool:
    """True if the trimmed line starts with one of *markers*."""
    return line.strip().startswith(tuple(markers))


def first_match(patterns: Iterable[re.Pattern[str]], text: str) -> Optional[re.Match[str]]:
    """Return the match of the first pattern that hits *text*."""
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m
    return None


def any_match(patterns: Iterable[re.Pattern[str]], text: str) -> bool:
    return any(p.search(text) for p in patterns)


def window(lines: Sequence[str], index: int, before: int, after: int) -> str:
    """Join lines ``[index - before, index + after)`` clamped to the file."""
    start = max(0, index - before)
    end = min(len(lines), index + after)
    return "\n".join(lines[start:end])


@dataclass
class BlockTracker:
    """Brace-depth state for rules that follow one block through a file.

    Braces are counted character by character, including those inside
    strings and regex literals. This is a textual heuristic.
    """

    depth: int = 0
    tracking: bool = False
    entry_index: int = 0
    entry_depth: int = 0
    flags: Set[str] = field(default_factory=set)

    def enter(self, index: int) -> None:
        self.tracking = True
        self.entry_index = index
        self.entry_depth = self.depth
        self.flags = set()

    def feed(self, line: str, can_close: bool = True) -> bool:
        """Count braces on *line*; return True if the tracked block closed.

        With ``can_close=False`` the depth still moves but tracking never ends.
        """
        closed = False
        for char in line:
            if char == "{":
                self.depth += 1
            elif char == "}":
                self.depth -= 1
                if can_close and self.tracking and self.depth <= self.entry_depth:
                    self.tracking = False
                    closed = True
        return closed


# (pattern, message, suggestion)
Violation = Tuple[re.Pattern[str], str, str]


def check_violations(
    definition: RuleDefinition,
    violations: Sequence[Violation],
    file: ScanFile,
    markers: Sequence[str] = COMMENT_MARKERS,
) -> List[ScanIssue]:
    """One issue per non-comment line, for the first violation that matches it."""
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line, markers):
            continue
        for pattern, message, suggestion in violations:
            m = pattern.search(line)
            if m is None:
                continue
            issues.append(
                make_issue(
                    definition,
                    file,
                    lines,
                    index,
                    column=m.start() + 1,
                    message=message,
                    suggestion=suggestion,
                )
            )
            break

    return issues
