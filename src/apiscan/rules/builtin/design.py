"""REST design rules."""

from __future__ import annotations

import re
from typing import List

from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    Violation,
    any_match,
    check_violations,
    compile_all,
    is_comment,
    split_lines,
)
from apiscan.rules.models import Rule, RuleDefinition, make_issue

_Q = "['\"`]"
_NQ = "[^'\"`]"

# ── DES001 HTTP methods ──────────────────────────────────────────────────────

_METHODS = RuleDefinition(
    id="DES001",
    name="Incorrect HTTP Method Usage",
    description="Detects incorrect HTTP method usage that violates REST conventions.",
    category="design",
    severity="medium",
    languages=ALL_LANGUAGES,
)


def _route(method: str, words: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?:app|router)\.{method}\s*\(\s*{_Q}{_NQ}*(?:{words}){_NQ}*{_Q}", re.I
    )


_METHOD_VIOLATIONS: List[Violation] = [
    (
        _route("get", "create|add|new|insert|register|signup"),
        "GET route used for resource creation - should use POST",
        "Use POST for creating resources. GET requests should be idempotent and only "
        "retrieve data.",
    ),
    (
        _route("get", "delete|remove|destroy"),
        "GET route used for resource deletion - should use DELETE",
        "Use DELETE for removing resources. GET requests should never have side effects.",
    ),
    (
        _route("get", "update|edit|modify|change"),
        "GET route used for resource update - should use PUT or PATCH",
        "Use PUT for full updates or PATCH for partial updates. GET requests must be "
        "read-only.",
    ),
    (
        _route("post", "delete|remove|destroy"),
        "POST route used for resource deletion - should use DELETE",
        "Use DELETE HTTP method for deleting resources to follow REST conventions.",
    ),
    (
        _route("post", "getAll|getList|list|fetch"),
        "POST route used for data retrieval - should use GET",
        "Use GET for retrieving data. POST should be reserved for creating resources.",
    ),
]


def _check_http_methods(file: ScanFile) -> List[ScanIssue]:
    return check_violations(_METHODS, _METHOD_VIOLATIONS, file)


HTTP_METHODS = Rule(_METHODS, _check_http_methods)

# ── DES002 status codes ──────────────────────────────────────────────────────

_STATUS = RuleDefinition(
    id="DES002",
    name="Incorrect HTTP Status Codes",
    description="Detects incorrect or inconsistent HTTP status code usage in API responses.",
    category="design",
    severity="medium",
    languages=ALL_LANGUAGES,
)

_STATUS_VIOLATIONS: List[Violation] = [
    (
        re.compile(r"res\.status\s*\(\s*200\s*\).*(?:delete|remove|destroy)", re.I),
        "Using 200 for DELETE operations - should use 204 No Content",
        "Return 204 No Content for successful DELETE operations that return no body, or "
        "200 with a body if returning the deleted resource.",
    ),
    (
        re.compile(r"res\.status\s*\(\s*200\s*\).*(?:create|insert|new)", re.I),
        "Using 200 for resource creation - should use 201 Created",
        "Return 201 Created when a new resource is successfully created. Include a "
        "Location header pointing to the new resource.",
    ),
    (
        re.compile(
            r"res\.status\s*\(\s*(?:200|201)\s*\).*(?:error|fail|invalid|not found)", re.I
        ),
        "Using success status code for error responses",
        "Use appropriate error status codes: 400 (Bad Request), 401 (Unauthorized), "
        "403 (Forbidden), 404 (Not Found), 422 (Unprocessable Entity), 500 (Internal "
        "Server Error).",
    ),
    (
        re.compile(r"res\.status\s*\(\s*500\s*\).*(?:not found|missing|no such)", re.I),
        "Using 500 for 'not found' errors - should use 404",
        "Use 404 Not Found when a requested resource doesn't exist. Reserve 500 for "
        "unexpected server errors.",
    ),
    (
        re.compile(r"res\.status\s*\(\s*403\s*\).*(?:login|authenticate|token)", re.I),
        "Using 403 Forbidden for unauthenticated requests - should use 401",
        "Use 401 Unauthorized when the user is not authenticated (no valid credentials). "
        "Use 403 Forbidden when the user is authenticated but lacks permission.",
    ),
    (
        re.compile(r"(?:return|send|respond).*status.*200.*(?:error|exception|fail)", re.I),
        "Returning 200 OK with an error in the body",
        "Use appropriate HTTP error status codes instead of returning errors in a 200 "
        "response body. This breaks REST conventions and makes error handling harder "
        "for clients.",
    ),
]


def _check_status_codes(file: ScanFile) -> List[ScanIssue]:
    return check_violations(_STATUS, _STATUS_VIOLATIONS, file)


STATUS_CODES = Rule(_STATUS, _check_status_codes)

# ── DES003 API versioning ────────────────────────────────────────────────────

_VERSIONING = RuleDefinition(
    id="DES003",
    name="Missing API Versioning",
    description=(
        "Detects API routes that lack versioning, which makes backward-compatible "
        "changes harder."
    ),
    category="design",
    severity="low",
    languages=ALL_LANGUAGES,
)

_UNVERSIONED_ROUTE_PATTERNS = compile_all(
    [
        rf"(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*{_Q}(/[^'\"`v]{_NQ}*){_Q}",
        rf"@(?:Get|Post|Put|Patch|Delete)Mapping\s*\(\s*{_Q}(/[^'\"`v]{_NQ}*){_Q}",
    ]
)

_VERSION_PATTERNS = compile_all(
    [
        r"/v\d+/",
        r"/api/v\d+",
        r"version",
        r"/v\d+$",
    ]
)

_UNVERSIONED_SKIP_PATHS = ("/health", "/ping", "/status", "/metrics", "/favicon")


def _route_path(m: re.Match[str]) -> str:
    groups = m.groups()
    if len(groups) >= 2 and groups[1]:
        return groups[1]
    return groups[0] or ""


def _check_api_versioning(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    if any_match(_VERSION_PATTERNS, file.content):
        return issues

    lines = split_lines(file.content)
    route_lines: List[int] = []

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        for pattern in _UNVERSIONED_ROUTE_PATTERNS:
            m = pattern.search(line)
            if m is None:
                continue
            if _route_path(m).startswith(_UNVERSIONED_SKIP_PATHS):
                continue
            route_lines.append(index)
            break

    if route_lines:
        issues.append(
            make_issue(
                _VERSIONING,
                file,
                lines,
                route_lines[0],
                message=f"Found {len(route_lines)} API route(s) without versioning",
                suggestion=(
                    "Add API versioning to your routes. Example: /api/v1/users instead of "
                    "/users. This allows you to make breaking changes in future versions "
                    "without affecting existing clients."
                ),
            )
        )

    return issues


API_VERSIONING = Rule(_VERSIONING, _check_api_versioning)

# ── DES004 naming conventions ────────────────────────────────────────────────

_NAMING = RuleDefinition(
    id="DES004",
    name="API Naming Convention Violations",
    description=(
        "Detects API route naming that violates REST conventions (e.g., verbs in URLs, "
        "camelCase paths)."
    ),
    category="design",
    severity="low",
    languages=ALL_LANGUAGES,
)

_ANY_ROUTE = r"(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*"

_NAMING_VIOLATIONS: List[Violation] = [
    (
        re.compile(rf"{_ANY_ROUTE}{_Q}{_NQ}*(?:/get[A-Z/]|/fetch[A-Z/]|/retrieve[A-Z/]){_NQ}*{_Q}", re.I),
        "Verb 'get/fetch/retrieve' in URL path - use nouns for REST resources",
        "Use nouns in URL paths. Instead of /getUsers, use GET /users. The HTTP method "
        "already expresses the action.",
    ),
    (
        re.compile(rf"{_ANY_ROUTE}{_Q}{_NQ}*(?:/create[A-Z/]|/add[A-Z/]|/new[A-Z/]){_NQ}*{_Q}", re.I),
        "Verb 'create/add/new' in URL path - use nouns for REST resources",
        "Use nouns in URL paths. Instead of /createUser, use POST /users. The HTTP "
        "method already expresses the action.",
    ),
    (
        re.compile(rf"{_ANY_ROUTE}{_Q}{_NQ}*(?:/delete[A-Z/]|/remove[A-Z/]){_NQ}*{_Q}", re.I),
        "Verb 'delete/remove' in URL path - use nouns for REST resources",
        "Use nouns in URL paths. Instead of /deleteUser/:id, use DELETE /users/:id.",
    ),
    (
        # Case-sensitive: an upper-case letter followed by a lower-case one.
        re.compile(rf"{_ANY_ROUTE}{_Q}{_NQ}*[A-Z][a-z]{_NQ}*{_Q}"),
        "camelCase in URL path - use kebab-case for REST API paths",
        "Use kebab-case (lowercase with hyphens) for URL paths. Instead of /userProfile, "
        "use /user-profile.",
    ),
]


def _check_naming_conventions(file: ScanFile) -> List[ScanIssue]:
    return check_violations(_NAMING, _NAMING_VIOLATIONS, file)


NAMING_CONVENTIONS = Rule(_NAMING, _check_naming_conventions)

ALL_DESIGN_RULES = [
    HTTP_METHODS,
    STATUS_CODES,
    API_VERSIONING,
    NAMING_CONVENTIONS,
]
