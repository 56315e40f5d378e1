"""Documentation rules."""

from __future__ import annotations

import re
from typing import List

from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import ALL_LANGUAGES, any_match, compile_all, is_comment, split_lines
from apiscan.rules.models import Rule, RuleDefinition, make_issue

_OPENAPI = RuleDefinition(
    id="DOC001",
    name="Missing API Documentation",
    description="Detects API routes that lack OpenAPI/Swagger documentation comments.",
    category="documentation",
    severity="low",
    languages=ALL_LANGUAGES,
)

_ROUTES = compile_all(
    [
        r"(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*['\"`][^'\"`]+['\"`]",
        r"@(?:Get|Post|Put|Patch|Delete)Mapping",
        r"Route::(get|post|put|patch|delete)\s*\(",
    ]
)

# Searched against the whole file. Block comments and docstrings may span lines.
_DOC_MARKERS = [
    re.compile(r"/\*\*.*?\*/", re.S),
    re.compile(r"@swagger", re.I),
    re.compile(r"@openapi", re.I),
    re.compile(r"\* @param", re.I),
    re.compile(r"\* @returns", re.I),
    re.compile(r"\* @response", re.I),
    re.compile(r"#\s*---"),
    re.compile(r"openapi:", re.I),
    re.compile(r"swagger:", re.I),
    re.compile(r'""".*?"""', re.S),
    re.compile(r"'''.*?'''", re.S),
]

_OPENAPI_SUGGESTION = (
    "Add JSDoc/OpenAPI comments to document your API endpoints. Example:\n"
    "/**\n"
    " * @swagger\n"
    " * /users:\n"
    " *   get:\n"
    " *     summary: Get all users\n"
    " *     responses:\n"
    " *       200:\n"
    " *         description: Success\n"
    " */\n"
    "Consider using swagger-jsdoc and swagger-ui-express to auto-generate API docs."
)


def _check_missing_openapi(file: ScanFile) -> List[ScanIssue]:
    if any_match(_DOC_MARKERS, file.content):
        return []

    lines = split_lines(file.content)
    routes = [
        index
        for index, line in enumerate(lines)
        if not is_comment(line) and any_match(_ROUTES, line)
    ]
    if not routes:
        return []

    return [
        make_issue(
            _OPENAPI,
            file,
            lines,
            routes[0],
            message=f"{len(routes)} API route(s) found without OpenAPI/Swagger documentation",
            suggestion=_OPENAPI_SUGGESTION,
        )
    ]


MISSING_OPENAPI = Rule(_OPENAPI, _check_missing_openapi)

ALL_DOCUMENTATION_RULES = [MISSING_OPENAPI]
