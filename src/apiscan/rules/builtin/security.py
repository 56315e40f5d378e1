"""Security rules."""

from __future__ import annotations

import re
from typing import List

from apiscan.intake.models import ScanFile
from apiscan.findings.models import ScanIssue
from apiscan.rules.helpers import (
    ALL_LANGUAGES,
    any_match,
    compile_all,
    first_match,
    is_comment,
    split_lines,
    window,
)
from apiscan.rules.models import Rule, RuleDefinition, make_issue

_Q = "['\"`]"  # any JS/Python/Ruby string quote
_NQ = "[^'\"`]"

# ── SEC001 hardcoded secrets ─────────────────────────────────────────────────

_SECRETS = RuleDefinition(
    id="SEC001",
    name="Hardcoded Secrets",
    description="Detects hardcoded API keys, passwords, tokens and other secrets in code.",
    category="security",
    severity="critical",
    languages=ALL_LANGUAGES,
)

_SECRET_PATTERNS = [
    (
        re.compile(rf"(?:password|passwd|pwd)\s*[:=]\s*{_Q}([^'\"`\s]{{6,}}){_Q}", re.I),
        "hardcoded password",
    ),
    (
        re.compile(rf"(?:api[_-]?key|apikey)\s*[:=]\s*{_Q}([^'\"`\s]{{8,}}){_Q}", re.I),
        "hardcoded API key",
    ),
    (
        re.compile(rf"(?:secret[_-]?key|secret)\s*[:=]\s*{_Q}([^'\"`\s]{{8,}}){_Q}", re.I),
        "hardcoded secret",
    ),
    (
        re.compile(
            rf"(?:access[_-]?token|auth[_-]?token)\s*[:=]\s*{_Q}([^'\"`\s]{{8,}}){_Q}", re.I
        ),
        "hardcoded token",
    ),
    (
        re.compile(rf"(?:private[_-]?key)\s*[:=]\s*{_Q}([^'\"`\s]{{8,}}){_Q}", re.I),
        "hardcoded private key",
    ),
    (re.compile(r"sk-[a-zA-Z0-9]{32,}"), "OpenAI API key"),
    (re.compile(r"ghp_[a-zA-Z0-9]{36}"), "GitHub personal access token"),
    (re.compile(r"AKIA[0-9A-Z]{16}"), "AWS access key ID"),
    (
        re.compile(r"(?:mysql|postgres|mongodb|redis)://[^:]+:[^@\s]+@", re.I),
        "database connection string with credentials",
    ),
]

# A line mentioning any of these reads its value from somewhere else.
_SECRET_SAFE_PATTERNS = [
    re.compile(r"process\.env\."),
    re.compile(r"os\.environ"),
    re.compile(r"getenv\("),
    re.compile(r"config\."),
    re.compile(r"\$\{"),
    re.compile(r"placeholder", re.I),
    re.compile(r"example", re.I),
    re.compile(r"your[_-]?key", re.I),
    re.compile(r"xxx+", re.I),
    re.compile(r"\*{3,}"),
]


def _check_hardcoded_secrets(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        if any_match(_SECRET_SAFE_PATTERNS, line):
            continue
        for pattern, label in _SECRET_PATTERNS:
            m = pattern.search(line)
            if m is None:
                continue
            issues.append(
                make_issue(
                    _SECRETS,
                    file,
                    lines,
                    index,
                    column=m.start() + 1,
                    message=f"Found {label} in source code",
                    suggestion=(
                        "Move secrets to environment variables (e.g., process.env.MY_SECRET) "
                        "and use a .env file with dotenv. Never commit secrets to version control."
                    ),
                )
            )
            break

    return issues


HARDCODED_SECRETS = Rule(_SECRETS, _check_hardcoded_secrets)

# ── SEC002 SQL injection ─────────────────────────────────────────────────────

_SQL = RuleDefinition(
    id="SEC002",
    name="SQL Injection Risk",
    description=(
        "Detects potential SQL injection vulnerabilities where user input is directly "
        "concatenated into SQL queries."
    ),
    category="security",
    severity="critical",
    languages=frozenset({"javascript", "typescript", "python", "php", "ruby", "java"}),
)

_SQL_INJECTION_PATTERNS = compile_all(
    [
        rf"{_Q}\s*\+\s*(?:req\.|request\.|params\.|query\.|body\.|input)",
        r"(?:SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER).*\+\s*"
        r"(?:req|request|params|query|body|input|user)",
        rf"execute\s*\(\s*{_Q}.*\+",
        rf"cursor\.execute\s*\(\s*{_Q}.*%\s*(?:req|request|params|query|body|input)",
        rf"db\.query\s*\(\s*{_Q}.*\$\{{(?!process\.env)",
        rf"\.raw\s*\(\s*{_Q}.*\$\{{(?!process\.env)",
        rf"f{_Q}.*(?:SELECT|INSERT|UPDATE|DELETE).*\{{(?!process\.env)",
        r"String\.format\s*\(.*(?:SELECT|INSERT|UPDATE|DELETE)",
    ]
)

# Placeholders or an explicit escaping step on the same line.
_SQL_SAFE_PATTERNS = [
    re.compile(r"\?\s*,"),
    re.compile(r"\$\d+"),
    re.compile(r"parameterized", re.I),
    re.compile(r"prepared", re.I),
    re.compile(r"placeholder", re.I),
    re.compile(r"sanitize", re.I),
    re.compile(r"escape", re.I),
]


def _check_sql_injection(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        if any_match(_SQL_SAFE_PATTERNS, line):
            continue
        m = first_match(_SQL_INJECTION_PATTERNS, line)
        if m is None:
            continue
        issues.append(
            make_issue(
                _SQL,
                file,
                lines,
                index,
                column=m.start() + 1,
                message="Potential SQL injection: user input concatenated into SQL query",
                suggestion=(
                    "Use parameterized queries or prepared statements. Example: "
                    "db.query('SELECT * FROM users WHERE id = ?', [userId]) instead of "
                    "string concatenation."
                ),
            )
        )

    return issues


SQL_INJECTION = Rule(_SQL, _check_sql_injection)

# ── SEC003 missing authentication ────────────────────────────────────────────

_AUTH = RuleDefinition(
    id="SEC003",
    name="Missing Authentication",
    description="Detects API routes that may be missing authentication middleware.",
    category="security",
    severity="high",
    languages=frozenset({"javascript", "typescript", "python", "go", "php", "ruby"}),
)

_AUTH_ROUTE_PATTERNS = compile_all(
    [
        rf"(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*{_Q}({_NQ}+){_Q}\s*,\s*"
        r"(?:async\s*)?\((?:req|request)",
        r"@(?:Get|Post|Put|Patch|Delete)Mapping\s*\(",
        r"Route::(get|post|put|patch|delete)\s*\(",
        r"@app\.route\s*\(",
        r"r\.(GET|POST|PUT|PATCH|DELETE)\s*\(",
    ]
)

_AUTH_PATTERNS = compile_all(
    [
        r"authenticate",
        r"authorize",
        r"isAuthenticated",
        r"requireAuth",
        r"authMiddleware",
        r"verifyToken",
        r"passport\.",
        r"jwt\.",
        r"session\.",
        r"@(?:Auth|Protected|Secured|Guard)",
        r"login_required",
        r"middleware\.auth",
        r"auth\.required",
        r"checkAuth",
        r"ensureAuth",
    ]
)

_SENSITIVE_ROUTES = compile_all(
    [
        r"/admin",
        r"/user",
        r"/profile",
        r"/account",
        r"/dashboard",
        r"/settings",
        r"/payment",
        r"/order",
        r"/private",
        r"/secure",
        r"/delete",
        r"/update",
    ]
)


def _check_missing_auth(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)
    has_global_auth = any_match(_AUTH_PATTERNS, file.content)

    for index, line in enumerate(lines):
        if is_comment(line):
            continue

        for route_pattern in _AUTH_ROUTE_PATTERNS:
            m = route_pattern.search(line)
            if m is None:
                continue

            is_sensitive = any_match(_SENSITIVE_ROUTES, line)
            if not is_sensitive and has_global_auth:
                continue

            if any_match(_AUTH_PATTERNS, window(lines, index, 3, 5)):
                continue

            if is_sensitive:
                issues.append(
                    make_issue(
                        _AUTH,
                        file,
                        lines,
                        index,
                        column=m.start() + 1,
                        message=(
                            f'Sensitive route "{m.group(0)[:60]}" may be missing '
                            "authentication middleware"
                        ),
                        suggestion=(
                            "Add authentication middleware to protect this route. Example: "
                            "router.get('/admin', authenticate, handler) or use a global auth "
                            "middleware for all protected routes."
                        ),
                    )
                )
                break

    return issues


MISSING_AUTH = Rule(_AUTH, _check_missing_auth)

# ── SEC004 CORS misconfiguration ─────────────────────────────────────────────

_CORS = RuleDefinition(
    id="SEC004",
    name="CORS Misconfiguration",
    description=(
        "Detects overly permissive CORS configurations that may expose APIs to "
        "cross-origin attacks."
    ),
    category="security",
    severity="high",
    languages=ALL_LANGUAGES,
)

_WILDCARD_CORS_PATTERNS = compile_all(
    [
        rf"(?:origin|Access-Control-Allow-Origin)\s*[:=]\s*{_Q}\*{_Q}",
        rf"cors\s*\(\s*\{{\s*origin\s*:\s*{_Q}\*{_Q}",
        r"cors\s*\(\s*\)\s*(?!.*origin)",
        r"add_header\s+Access-Control-Allow-Origin\s+\*",
        rf"response\.headers\[['\"]Access-Control-Allow-Origin['\"]\]\s*=\s*{_Q}\*{_Q}",
        rf"w\.Header\(\)\.Set\s*\(\s*['\"]Access-Control-Allow-Origin['\"]\s*,\s*{_Q}\*{_Q}\)",
        r"\.AllowAllOrigins\s*\(\s*\)",
        rf"CORS_ORIGIN\s*=\s*{_Q}\*{_Q}",
    ]
)

_CORS_CREDENTIAL_PATTERNS = compile_all(
    [
        r"credentials\s*:\s*true",
        r"Access-Control-Allow-Credentials.*true",
        r"withCredentials\s*:\s*true",
    ]
)


def _check_cors(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)
    has_credentials = any_match(_CORS_CREDENTIAL_PATTERNS, file.content)
    extra = (
        " Combined with credentials:true, this is a critical security vulnerability."
        if has_credentials
        else ""
    )

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        m = first_match(_WILDCARD_CORS_PATTERNS, line)
        if m is None:
            continue
        issues.append(
            make_issue(
                _CORS,
                file,
                lines,
                index,
                column=m.start() + 1,
                severity="critical" if has_credentials else None,
                message=f"Wildcard CORS origin (*) allows any domain to access this API.{extra}",
                suggestion=(
                    "Restrict CORS to specific trusted origins. Example: cors({ origin: "
                    "['https://yourdomain.com', 'https://app.yourdomain.com'] }). Never use "
                    "wildcard with credentials."
                ),
            )
        )

    return issues


CORS_MISCONFIGURATION = Rule(_CORS, _check_cors)

# ── SEC005 missing rate limiting ─────────────────────────────────────────────

_RATE = RuleDefinition(
    id="SEC005",
    name="Missing Rate Limiting",
    description=(
        "Detects API endpoints that may be missing rate limiting, making them vulnerable "
        "to brute force and DoS attacks."
    ),
    category="security",
    severity="medium",
    languages=ALL_LANGUAGES,
)

_RATE_LIMIT_PATTERNS = compile_all(
    [
        r"rateLimit",
        r"rate[_-]limit",
        r"throttle",
        r"RateLimiter",
        r"slowDown",
        r"limiter",
        r"express-rate-limit",
        r"flask[_-]limiter",
        r"django[_-]ratelimit",
        r"golang\.org/x/time/rate",
        r"rate\.NewLimiter",
        r"bucket4j",
        r"guava.*RateLimiter",
    ]
)

_LOGIN_ROUTE_PATTERNS = compile_all(
    [
        rf"(?:app|router)\.(post)\s*\(\s*{_Q}{_NQ}*"
        rf"(?:login|signin|auth|register|signup|password|token){_NQ}*{_Q}",
        rf"@PostMapping\s*\(\s*{_Q}{_NQ}*(?:login|signin|auth|register){_NQ}*{_Q}",
        rf"Route::post\s*\(\s*{_Q}{_NQ}*(?:login|signin|auth|register){_NQ}*{_Q}",
    ]
)


def _check_rate_limiting(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    if any_match(_RATE_LIMIT_PATTERNS, file.content):
        return issues

    lines = split_lines(file.content)
    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        m = first_match(_LOGIN_ROUTE_PATTERNS, line)
        if m is None:
            continue
        issues.append(
            make_issue(
                _RATE,
                file,
                lines,
                index,
                column=m.start() + 1,
                severity="high",
                message=(
                    "Authentication endpoint detected without rate limiting - "
                    "vulnerable to brute force attacks"
                ),
                suggestion=(
                    "Add rate limiting to authentication endpoints. Example with "
                    "express-rate-limit: const limiter = rateLimit({ windowMs: 15 * 60 * 1000, "
                    "max: 5 }); router.post('/login', limiter, handler)"
                ),
            )
        )

    return issues


RATE_LIMITING = Rule(_RATE, _check_rate_limiting)

# ── SEC006 cross-site scripting ──────────────────────────────────────────────

_XSS = RuleDefinition(
    id="SEC006",
    name="Cross-Site Scripting Risk",
    description=(
        "Detects request data or dynamic content written into HTML without escaping."
    ),
    category="security",
    severity="high",
    languages=frozenset({"javascript", "typescript", "python", "php", "ruby", "java"}),
)

_REQUEST_INPUT = r"(?:req|request)\.(?:query|params|body)"

_XSS_VIOLATIONS = [
    (
        re.compile(rf"res\.send\s*\(.*(?:\$\{{\s*{_REQUEST_INPUT}|\+\s*{_REQUEST_INPUT})", re.I),
        "Request data reflected into an HTML response without escaping",
        "Escape user input before writing it into HTML, or return JSON with "
        "res.json() and let the client render it safely.",
    ),
    (
        re.compile(r"\.innerHTML\s*\+?=(?!=)\s*(?!\s*['\"`][^'\"`$]*['\"`]\s*;?\s*$)", re.I),
        "Dynamic content assigned to innerHTML",
        "Use textContent for plain text, or sanitize the markup with DOMPurify before "
        "assigning it to innerHTML.",
    ),
    (
        re.compile(r"dangerouslySetInnerHTML"),
        "dangerouslySetInnerHTML renders unescaped HTML",
        "Avoid dangerouslySetInnerHTML. If raw HTML is unavoidable, sanitize it first "
        "(e.g., DOMPurify.sanitize(html)).",
    ),
    (
        re.compile(r"document\.write\s*\(", re.I),
        "document.write() with dynamic content can inject scripts",
        "Build DOM nodes with createElement/textContent instead of document.write().",
    ),
    (
        re.compile(r"render_template_string\s*\(.*request\.", re.I),
        "Template rendered from request data",
        "Never build templates from request data. Use render_template() with a static "
        "template and pass user input as context variables.",
    ),
    (
        re.compile(r"(?:Markup\s*\(.*request\.|\{[{%][^}]*\|\s*safe\b)"),
        "Template autoescaping bypassed",
        "Remove Markup()/|safe on user-controlled values and let the template engine "
        "escape them.",
    ),
    (
        re.compile(r"echo\s+\$_(?:GET|POST|REQUEST)\[", re.I),
        "Request parameter echoed into the page without escaping",
        "Wrap output in htmlspecialchars($value, ENT_QUOTES, 'UTF-8').",
    ),
    (
        re.compile(r"(?:\.html_safe\b|raw\s*\(?\s*params\[)"),
        "Output marked as HTML-safe without sanitizing",
        "Drop html_safe/raw on user input; use sanitize() or let ERB escape the value.",
    ),
    (
        re.compile(r"getWriter\(\)\.(?:write|print\w*)\s*\(.*request\.getParameter", re.I),
        "Request parameter written to the servlet response without encoding",
        "Encode output with an HTML encoder (e.g., OWASP Encoder Encode.forHtml()) "
        "before writing request data.",
    ),
]

_XSS_SAFE_PATTERNS = compile_all(
    [
        r"escape",
        r"sanitize",
        r"DOMPurify",
        r"encodeURIComponent",
        r"htmlspecialchars",
        r"textContent",
        r"Encode\.forHtml",
    ]
)


def _check_xss(file: ScanFile) -> List[ScanIssue]:
    issues: List[ScanIssue] = []
    lines = split_lines(file.content)

    for index, line in enumerate(lines):
        if is_comment(line):
            continue
        if any_match(_XSS_SAFE_PATTERNS, line):
            continue
        for pattern, message, suggestion in _XSS_VIOLATIONS:
            m = pattern.search(line)
            if m is None:
                continue
            issues.append(
                make_issue(
                    _XSS,
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


XSS_VULNERABILITY = Rule(_XSS, _check_xss)

ALL_SECURITY_RULES = [
    HARDCODED_SECRETS,
    SQL_INJECTION,
    MISSING_AUTH,
    CORS_MISCONFIGURATION,
    RATE_LIMITING,
    XSS_VULNERABILITY,
]
