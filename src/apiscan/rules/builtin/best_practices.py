"""Best-practice rules: input validation and sensitive data in responses."""

from __future__ import annotations

import re
from typing import List, Tuple

from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    any_match,
    compile_all,
    is_comment,
    split_lines,
    window,
)
from apiscan.rules.models import Rule, RuleDefinition, make_issue

# ── BP001 input validation ───────────────────────────────────────────────────

_VALIDATION = RuleDefinition(
    id="BP001",
    name="Missing Input Validation",
    description=(
        "Detects API endpoints that use request body/query parameters without validation."
    ),
    category="best-practices",
    severity="high",
    languages=ALL_LANGUAGES,
)

_VALIDATORS = compile_all(
    [
        r"joi\.",
        r"yup\.",
        r"zod\.",
        r"celebrate\(",
        r"express-validator",
        r"validator\.",
        r"validate\s*\(",
        r"schema\.parse",
        r"schema\.validate",
        r"marshmallow",
        r"pydantic",
        r"class-validator",
        r"@IsString\(",
        r"@IsNumber\(",
        r"@IsEmail\(",
        r"@Valid\b",
        r"@NotNull\b",
        r"binding\.ShouldBind",
        r"c\.ShouldBindJSON",
    ]
)

_REQUEST_DATA = compile_all(
    [
        r"req\.body\.\w+",
        r"request\.body\.\w+",
        r"req\.query\.\w+",
        r"request\.query\.\w+",
        r"req\.params\.\w+",
        r"request\.data\[",
        r"request\.form\[",
        r"request\.args\[",
        r"\$_POST\[",
        r"\$_GET\[",
        r"\$_REQUEST\[",
        r"c\.Param\s*\(",
        r"c\.Query\s*\(",
    ]
)


def _check_input_validation(file: ScanFile) -> List[ScanIssue]:
    if any_match(_VALIDATORS, file.content):
        return []

    lines = split_lines(file.content)
    accesses = [
        index
        for index, line in enumerate(lines)
        if not is_comment(line) and any_match(_REQUEST_DATA, line)
    ]
    if len(accesses) < 2:
        return []

    return [
        make_issue(
            _VALIDATION,
            file,
            lines,
            accesses[0],
            message=(
                f"Request data accessed {len(accesses)} times without input validation"
            ),
            suggestion=(
                "Add input validation using a schema validation library. Example with "
                "Zod:\nconst schema = z.object({ name: z.string().min(1), email: "
                "z.string().email() });\nconst data = schema.parse(req.body);\nOr use "
                "Joi, Yup, express-validator, or framework-specific validators."
            ),
        )
    ]


INPUT_VALIDATION = Rule(_VALIDATION, _check_input_validation)

# ── BP002 sensitive data exposure ────────────────────────────────────────────

_EXPOSURE = RuleDefinition(
    id="BP002",
    name="Sensitive Data Exposure",
    description=(
        "Detects API responses that may expose sensitive user data like passwords, "
        "tokens, or PII."
    ),
    category="best-practices",
    severity="high",
    languages=ALL_LANGUAGES,
)

# (pattern, field label)
_SENSITIVE_FIELDS: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"\.password\b", re.I), "password"),
    (re.compile(r"\.passwordHash\b", re.I), "passwordHash"),
    (re.compile(r"\.hashedPassword\b", re.I), "hashedPassword"),
    (re.compile(r"\.salt\b", re.I), "salt"),
    (re.compile(r"\.secret\b", re.I), "secret"),
    (re.compile(r"\.privateKey\b", re.I), "privateKey"),
    (re.compile(r"\.creditCard\b", re.I), "creditCard"),
    (re.compile(r"\.cardNumber\b", re.I), "cardNumber"),
    (re.compile(r"\.ssn\b", re.I), "SSN"),
    (re.compile(r"\.socialSecurity\b", re.I), "social security number"),
]

_RESPONSES = compile_all(
    [
        r"res\.(?:json|send)\s*\(",
        r"return\s+(?:res\.)?json\s*\(",
        r"response\.json\s*\(",
        r"jsonify\s*\(",
        r"render_json\s*\(",
    ]
)

_FIELD_FILTERS = [
    re.compile(r"select:", re.I),
    re.compile(r"omit:", re.I),
    re.compile(r"exclude:", re.I),
    re.compile(r"\.toJSON\s*\(\s*\)"),
    re.compile(r"\.toObject\s*\(\s*\)"),
    re.compile(r"delete\s+\w+\.\w+"),
]


def _check_sensitive_exposure(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line) or not any_match(_RESPONSES, line):
            continue
        if any_match(_FIELD_FILTERS, line):
            continue

        context = window(lines, index, 5, 2)
        for pattern, label in _SENSITIVE_FIELDS:
            if not pattern.search(context):
                continue
            issues.append(
                make_issue(
                    _EXPOSURE,
                    file,
                    lines,
                    index,
                    message=f'Potential exposure of sensitive field "{label}" in API response',
                    suggestion=(
                        "Remove sensitive fields before sending responses. Use field "
                        "selection in queries (Prisma: select: { password: false }) or "
                        "explicitly delete them: delete user.password; Or use a "
                        "DTO/serializer to control what data is exposed."
                    ),
                )
            )
            break

    return issues


SENSITIVE_DATA_EXPOSURE = Rule(_EXPOSURE, _check_sensitive_exposure)

ALL_BEST_PRACTICE_RULES = [
    INPUT_VALIDATION,
    SENSITIVE_DATA_EXPOSURE,
]
