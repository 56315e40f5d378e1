"""Collect (path, content) entries from the local filesystem for the CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from apiscan.intake.entries import byte_size
from apiscan.intake.language import detect_language
from apiscan.intake.models import FileEntry

MAX_FILES = 500
MAX_TOTAL_BYTES = 10 * 1024 * 1024

# Directories never worth descending into.
SKIP_DIRS: Set[str] = {
    ".git",
    "node_modules",
    ".next",
    "dist",
    "build",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".pytest_cache",
}


class SourceError(Exception):
    """Raised when input files cannot be collected."""


def _walk(target: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(target):
        # Prune in place so os.walk never descends.
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def _relative(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def iter_candidate_paths(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield files under *paths* whose extension maps to a supported language."""
    for target in paths:
        if target.is_dir():
            for path in _walk(target):
                if detect_language(path.name) is not None:
                    yield path
        elif target.is_file():
            if detect_language(target.name) is not None:
                yield target
        else:
            raise SourceError(f"Path not found: {target}")


def collect_entries(
    paths: Iterable[Path],
    root: Path,
    *,
    max_files: int = MAX_FILES,
    max_total_bytes: int = MAX_TOTAL_BYTES,
) -> List[FileEntry]:
    """Read supported source files under *paths* into FileEntry records.

    Paths in the result are posix-style and relative to *root* when possible.
    Raises SourceError when a path is missing or a ceiling is exceeded.
    """
    entries: List[FileEntry] = []
    seen: Set[str] = set()
    total = 0

    for path in iter_candidate_paths(paths):
        rel = _relative(path, root)
        if rel in seen:
            continue
        seen.add(rel)

        if len(entries) >= max_files:
            raise SourceError(f"Too many files. Maximum {max_files} files allowed.")

        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise SourceError(f"Cannot read {path}: {exc}") from exc

        total += byte_size(content)
        if total > max_total_bytes:
            raise SourceError(
                f"Project too large. Maximum {max_total_bytes // (1024 * 1024)}MB "
                "total content size."
            )

        entries.append(FileEntry(path=rel, content=content))

    return entries
