"""Map file paths to supported languages by extension."""

from __future__ import annotations

import posixpath
import re
from typing import Dict, Optional, Tuple

from apiscan.config.schema import Language

LANGUAGE_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    "javascript": (".js", ".jsx", ".mjs", ".cjs"),
    "typescript": (".ts", ".tsx", ".mts", ".cts"),
    "python": (".py", ".pyw"),
    "go": (".go",),
    "java": (".java",),
    "php": (".php", ".phtml"),
    "ruby": (".rb", ".rake"),
}

_LANGUAGE_LABELS: Dict[str, str] = {
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "python": "Python",
    "go": "Go",
    "java": "Java",
    "php": "PHP",
    "ruby": "Ruby",
}

_EXTENSION_TO_LANGUAGE: Dict[str, str] = {
    ext: lang for lang, exts in LANGUAGE_EXTENSIONS.items() for ext in exts
}

_API_PATH_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"route",
        r"controller",
        r"handler",
        r"endpoint",
        r"api",
        r"server",
        r"app\.(js|ts|py|go|rb|php|java)$",
        r"index\.(js|ts|py|go|rb|php|java)$",
    )
]

_API_CONTENT_PATTERNS = [
    re.compile(p)
    for p in (
        r"express\(\)",
        r"fastify\(",
        r"koa\(\)",
        r"hapi\.",
        r"flask\(",
        r"FastAPI\(",
        r"Django",
        r"gin\.",
        r"echo\.",
        r"fiber\.",
        r"http\.HandleFunc",
        r"@RestController",
        r"@GetMapping",
        r"@PostMapping",
        r"Route::get",
        r"Route::post",
        r"get\s*['\"]/.*['\"]",
        r"post\s*['\"]/.*['\"]",
        r"app\.(get|post|put|delete|patch)\s*\(",
        r"router\.(get|post|put|delete|patch)\s*\(",
    )
]


def _extension(path: str) -> str:
    # Windows-style separators are normalised so the final segment is found.
    basename = posixpath.basename(path.replace("\\", "/"))
    _, ext = posixpath.splitext(basename)
    return ext.lower()


def detect_language(path: str) -> Optional[Language]:
    """Return the language for *path*, or None when the extension is unsupported."""
    return _EXTENSION_TO_LANGUAGE.get(_extension(path))  # type: ignore[return-value]


def language_label(language: str) -> str:
    """Human-readable name for a language tag."""
    return _LANGUAGE_LABELS.get(language, language)


def is_api_file(path: str, content: str) -> bool:
    """Heuristic: does this file look like it declares HTTP endpoints?"""
    lower = path.lower()
    if any(p.search(lower) for p in _API_PATH_PATTERNS):
        return True
    return any(p.search(content) for p in _API_CONTENT_PATTERNS)
