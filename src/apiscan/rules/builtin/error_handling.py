"""Error-handling rules: missing try/catch, unhandled promises, raw error responses."""

from __future__ import annotations

import re
from typing import List

from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    JS_COMMENT_MARKERS,
    JS_LANGUAGES,
    BlockTracker,
    Violation,
    check_violations,
    first_match,
    is_comment,
    split_lines,
)
from apiscan.rules.models import Rule, RuleDefinition, make_issue

# ── ERR001 missing try/catch ─────────────────────────────────────────────────

_TRY_CATCH = RuleDefinition(
    id="ERR001",
    name="Missing Error Handling",
    description=(
        "Detects async route handlers and database operations that lack try-catch "
        "error handling."
    ),
    category="error-handling",
    severity="high",
    languages=JS_LANGUAGES,
)

_ASYNC_HANDLER = re.compile(
    r"(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*['\"`][^'\"`]+['\"`]\s*,\s*"
    r"async\s*(?:\([^)]*\)|[a-zA-Z]+)\s*=>\s*\{",
    re.I,
)
_DB_OPERATION = re.compile(
    r"(?:await\s+)?(?:db|prisma|mongoose|sequelize|knex|pool|connection|query|Model)\s*[.(]",
    re.I,
)
_TRY_BLOCK = re.compile(r"try\s*\{", re.I)

_TRY_CATCH_SUGGESTION = (
    "Wrap async operations in try-catch blocks. Example:\n"
    "async (req, res) => {\n"
    "  try {\n"
    "    const result = await db.query(...);\n"
    "    res.json(result);\n"
    "  } catch (error) {\n"
    "    res.status(500).json({ error: 'Internal server error' });\n"
    "  }\n"
    "}"
)


def _check_missing_try_catch(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)
    block = BlockTracker()

    for index, line in enumerate(lines):
        if is_comment(line, JS_COMMENT_MARKERS):
            continue
        if not block.tracking and _ASYNC_HANDLER.search(line):
            block.enter(index)
        if block.tracking:
            if _TRY_BLOCK.search(line):
                block.flags.add("try")
            if _DB_OPERATION.search(line) and "await" in line:
                block.flags.add("db")

        if block.feed(line) and "db" in block.flags and "try" not in block.flags:
            issues.append(
                make_issue(
                    _TRY_CATCH,
                    file,
                    lines,
                    block.entry_index,
                    message=(
                        "Async route handler with database operations lacks try-catch "
                        "error handling"
                    ),
                    suggestion=_TRY_CATCH_SUGGESTION,
                )
            )

    return issues


MISSING_TRY_CATCH = Rule(_TRY_CATCH, _check_missing_try_catch)

# ── ERR002 unhandled promise ─────────────────────────────────────────────────

_PROMISE = RuleDefinition(
    id="ERR002",
    name="Unhandled Promise Rejection",
    description=(
        "Detects Promise chains and async calls that lack .catch() or try-catch error "
        "handling."
    ),
    category="error-handling",
    severity="high",
    languages=JS_LANGUAGES,
)

_PROMISE_CHAINS = [
    re.compile(
        r"(?:fetch|axios|got|request|http\.get|https\.get)\s*\([^)]*\)\s*"
        r"\.then\s*\([^)]*\)\s*(?!\.catch)",
        re.I,
    ),
    re.compile(r"new\s+Promise\s*\([^)]*\)\s*\.then\s*\([^)]*\)\s*(?!\.catch)", re.I),
]
_THEN_BLOCK = re.compile(
    r"\.then\s*\(\s*(?:async\s*)?\([^)]*\)\s*=>\s*\{[^}]*\}\s*\)\s*;", re.I
)


def _check_unhandled_promise(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line, JS_COMMENT_MARKERS):
            continue

        m = first_match(_PROMISE_CHAINS, line)
        if m and ".catch" not in " ".join(lines[index : index + 3]):
            issues.append(
                make_issue(
                    _PROMISE,
                    file,
                    lines,
                    index,
                    column=m.start() + 1,
                    message="Promise chain missing .catch() error handler",
                    suggestion=(
                        "Add .catch() to handle promise rejections, or use async/await "
                        "with try-catch. Example: fetch(url).then(handler).catch(err => "
                        "console.error(err))"
                    ),
                )
            )

        m = _THEN_BLOCK.search(line)
        if m:
            following = lines[index + 1] if index + 1 < len(lines) else ""
            # "catch" also covers ".catch"
            if "catch" not in following:
                issues.append(
                    make_issue(
                        _PROMISE,
                        file,
                        lines,
                        index,
                        column=m.start() + 1,
                        severity="medium",
                        message=(
                            "Promise .then() without .catch() may cause unhandled rejection"
                        ),
                        suggestion=(
                            "Always add .catch() after .then() chains to handle errors "
                            "gracefully."
                        ),
                    )
                )

    return issues


UNHANDLED_PROMISE = Rule(_PROMISE, _check_unhandled_promise)

# ── ERR003 error response format ─────────────────────────────────────────────

_ERROR_FORMAT = RuleDefinition(
    id="ERR003",
    name="Inconsistent Error Response Format",
    description=(
        "Detects error responses that don't follow a consistent structure, making "
        "client-side error handling harder."
    ),
    category="error-handling",
    severity="medium",
    languages=ALL_LANGUAGES,
)

_RAW_ERROR_VIOLATIONS: List[Violation] = [
    (
        re.compile(
            r"res\.status\s*\(\s*(?:4\d\d|5\d\d)\s*\)\.(?:send|json)\s*\(\s*"
            r"(?:err\.message|error\.message|e\.message|err\.toString\(\)|"
            r"error\.toString\(\))\s*\)",
            re.I,
        ),
        "Sending raw error message directly to client",
        "Use a consistent error response format: res.status(500).json({ error: "
        "'Internal server error', code: 'INTERNAL_ERROR' }). Never expose raw error "
        "messages to clients as they may leak sensitive information.",
    ),
    (
        re.compile(
            r"res\.status\s*\(\s*(?:4\d\d|5\d\d)\s*\)\.(?:send|json)\s*\(\s*err\s*\)", re.I
        ),
        "Sending raw error object directly to client",
        "Never send raw error objects to clients. Use a structured error format: "
        "{ error: 'message', code: 'ERROR_CODE', details?: [...] }",
    ),
    (
        re.compile(
            r"res\.(?:send|json)\s*\(\s*\{\s*(?:error|message)\s*:\s*err(?:\.message)?"
            r"\s*\}\s*\)",
            re.I,
        ),
        "Exposing raw error details in response",
        "Sanitize error messages before sending to clients. Log the full error "
        "server-side and return a safe, user-friendly message.",
    ),
    (
        re.compile(r"console\.error\s*\(\s*err\s*\)\s*;\s*(?!.*res\.status)", re.I),
        "Error logged but no error response sent to client",
        "After logging the error, send an appropriate error response to the client.",
    ),
]


def _check_error_response_format(file: ScanFile) -> List[ScanIssue]:
    return check_violations(_ERROR_FORMAT, _RAW_ERROR_VIOLATIONS, file)


ERROR_RESPONSE_FORMAT = Rule(_ERROR_FORMAT, _check_error_response_format)

ALL_ERROR_HANDLING_RULES = [
    MISSING_TRY_CATCH,
    UNHANDLED_PROMISE,
    ERROR_RESPONSE_FORMAT,
]
