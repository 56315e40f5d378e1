"""File intake: exclusion filtering, language classification, size annotation."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Mapping, Optional, Union

from apiscan.config.schema import ScanOptions
from apiscan.intake.language import detect_language
from apiscan.intake.models import FileEntry, ScanFile

logger = logging.getLogger(__name__)

RawEntry = Union[FileEntry, Mapping[str, str]]


def compile_exclude_pattern(pattern: str) -> Callable[[str], bool]:
    """Build a path predicate for one exclude pattern.

    Patterns with ``*`` become an unanchored regex (``*`` → ``.*``, ``.``
    escaped). Anything else is a plain substring test. A wildcard pattern
    that does not compile is logged and never matches.
    """
    if "*" not in pattern:
        return lambda path: pattern in path

    source = pattern.replace(".", r"\.").replace("*", ".*")
    try:
        regex = re.compile(source)
    except re.error as exc:
        logger.warning("Ignoring invalid exclude pattern %r: %s", pattern, exc)
        return lambda path: False
    return lambda path: regex.search(path) is not None


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Return True if any exclude pattern matches *path*."""
    return any(compile_exclude_pattern(p)(path) for p in patterns)


def byte_size(content: str) -> int:
    """UTF-8 byte length of *content*."""
    return len(content.encode("utf-8", errors="surrogatepass"))


def _coerce(entry: RawEntry) -> FileEntry:
    if isinstance(entry, FileEntry):
        return entry
    return FileEntry(path=entry["path"], content=entry["content"])


def create_files_from_entries(
    entries: Iterable[RawEntry],
    options: Optional[ScanOptions] = None,
) -> List[ScanFile]:
    """Turn raw (path, content) entries into scan-ready files.

    Order is preserved. Entries are dropped when an exclude pattern matches
    the path, when the extension is unsupported, or when the language is
    outside ``options.languages``.
    """
    opts = options or ScanOptions()
    matchers = [compile_exclude_pattern(p) for p in opts.effective_exclude_patterns]
    files: List[ScanFile] = []

    for raw in entries:
        entry = _coerce(raw)

        if any(m(entry.path) for m in matchers):
            logger.debug("Excluded %s", entry.path)
            continue

        language = detect_language(entry.path)
        if language is None:
            continue

        if opts.languages and language not in opts.languages:
            continue

        files.append(
            ScanFile(
                path=entry.path,
                content=entry.content,
                language=language,
                size=byte_size(entry.content),
            )
        )

    return files
