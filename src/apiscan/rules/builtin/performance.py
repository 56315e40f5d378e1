"""Performance rules: pagination, N+1 queries, cache headers."""

from __future__ import annotations

import re
from typing import List

from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    BlockTracker,
    any_match,
    compile_all,
    first_match,
    is_comment,
    split_lines,
    window,
)
from apiscan.rules.models import Rule, RuleDefinition, make_issue

# ── PERF001 missing pagination ───────────────────────────────────────────────

_PAGINATION = RuleDefinition(
    id="PERF001",
    name="Missing Pagination",
    description=(
        "Detects API endpoints that return collections without pagination, which can "
        "cause performance issues with large datasets."
    ),
    category="performance",
    severity="medium",
    languages=ALL_LANGUAGES,
)

_COLLECTION_QUERIES = compile_all(
    [
        r"(?:findAll|findMany|find\(\)|getAll|fetchAll|selectAll|\.all\(\))",
        r"(?:Model|db|prisma|mongoose|sequelize)\.\w+\.find\s*\(\s*\)",
        r"SELECT\s+\*\s+FROM\s+\w+\s*(?:WHERE[^;]*)?;",
        r"\.find\s*\(\s*\{\s*\}\s*\)",
        r"collection\.find\s*\(\s*\)",
    ]
)

_PAGINATION_HINTS = compile_all(
    [
        r"limit",
        r"offset",
        r"page",
        r"skip",
        r"take",
        r"perPage",
        r"per_page",
        r"pageSize",
        r"page_size",
        r"cursor",
        r"LIMIT\s+\d+",
    ]
)


def _check_missing_pagination(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        if any_match(_PAGINATION_HINTS, window(lines, index, 2, 5)):
            continue
        m = first_match(_COLLECTION_QUERIES, line)
        if m is None:
            continue
        issues.append(
            make_issue(
                _PAGINATION,
                file,
                lines,
                index,
                column=m.start() + 1,
                message="Collection query without pagination - may return unbounded results",
                suggestion=(
                    "Add pagination to collection endpoints. Example: const { page = 1, "
                    "limit = 20 } = req.query; const items = await Model.findMany({ skip: "
                    "(page-1)*limit, take: limit }); Return total count and pagination "
                    "metadata in response."
                ),
            )
        )

    return issues


MISSING_PAGINATION = Rule(_PAGINATION, _check_missing_pagination)

# ── PERF002 N+1 queries ──────────────────────────────────────────────────────

_N_PLUS_ONE = RuleDefinition(
    id="PERF002",
    name="N+1 Query Problem",
    description=(
        "Detects potential N+1 query patterns where database queries are made inside loops."
    ),
    category="performance",
    severity="high",
    languages=ALL_LANGUAGES,
)

_LOOP_STARTS = compile_all(
    [
        r"for\s*\(",
        r"\.forEach\s*\(",
        r"\.map\s*\(",
        r"\.filter\s*\(",
        r"\.reduce\s*\(",
        r"while\s*\(",
        r"for\s+\w+\s+in\s+",
        r"for\s+\w+\s+of\s+",
    ]
)

_DB_QUERIES = compile_all(
    [
        r"await\s+\w+\.find(?:One|ById|By)?\s*\(",
        r"await\s+db\.\w+\s*\(",
        r"await\s+prisma\.\w+\.\w+\s*\(",
        r"await\s+\w+\.query\s*\(",
        r"await\s+\w+\.execute\s*\(",
        r"\$\w+->find\s*\(",
        r"Model\.where\s*\(",
        r"\.objects\.get\s*\(",
        r"\.objects\.filter\s*\(",
    ]
)


def _check_n_plus_one(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)
    loop = BlockTracker()

    for index, line in enumerate(lines):
        if is_comment(line):
            # a commented-out brace moves depth but never ends the loop
            loop.feed(line, can_close=False)
            continue
        if not loop.tracking and any_match(_LOOP_STARTS, line):
            loop.enter(index)
        if loop.tracking and any_match(_DB_QUERIES, line):
            issues.append(
                make_issue(
                    _N_PLUS_ONE,
                    file,
                    lines,
                    index,
                    message="Database query inside a loop - potential N+1 query problem",
                    suggestion=(
                        "Avoid database queries inside loops. Instead, collect all IDs "
                        "first, then fetch all records in a single query. Example: "
                        "const ids = items.map(i => i.id); const records = await "
                        "Model.findMany({ where: { id: { in: ids } } });"
                    ),
                )
            )
        loop.feed(line)

    return issues


N_PLUS_ONE = Rule(_N_PLUS_ONE, _check_n_plus_one)

# ── PERF003 missing cache headers ────────────────────────────────────────────

_CACHE = RuleDefinition(
    id="PERF003",
    name="Missing Cache Headers",
    description=(
        "Detects GET endpoints that return data without setting appropriate cache headers."
    ),
    category="performance",
    severity="low",
    languages=ALL_LANGUAGES,
)

_GET_ROUTES = compile_all(
    [
        r"(?:app|router)\.get\s*\(\s*['\"`][^'\"`]+['\"`]\s*,",
        r"@GetMapping",
        r"Route::get\s*\(",
        r"r\.GET\s*\(",
    ]
)

_CACHE_HINTS = compile_all(
    [
        r"Cache-Control",
        r"ETag",
        r"Last-Modified",
        r"cache",
        r"redis",
        r"memcache",
        r"setHeader.*cache",
    ]
)


def _check_missing_cache(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    if any_match(_CACHE_HINTS, file.content):
        return issues

    lines = split_lines(file.content)
    get_routes = [
        index
        for index, line in enumerate(lines)
        if not is_comment(line) and any_match(_GET_ROUTES, line)
    ]

    if len(get_routes) >= 2:
        issues.append(
            make_issue(
                _CACHE,
                file,
                lines,
                get_routes[0],
                message=f"{len(get_routes)} GET endpoints found without any caching strategy",
                suggestion=(
                    "Consider adding cache headers to GET endpoints: res.set("
                    "'Cache-Control', 'public, max-age=300'). For dynamic data, use ETag "
                    "or Last-Modified headers. For heavy queries, consider Redis caching."
                ),
            )
        )

    return issues


MISSING_CACHE = Rule(_CACHE, _check_missing_cache)

ALL_PERFORMANCE_RULES = [
    MISSING_PAGINATION,
    N_PLUS_ONE,
    MISSING_CACHE,
]
