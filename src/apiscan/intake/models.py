"""Raw entries from a caller and classified scan files."""

from __future__ import annotations

from dataclasses import dataclass

from apiscan.config.schema import Language


@dataclass(frozen=True)
class FileEntry:
    """A raw (path, content) pair as supplied by the caller."""

    path: str
    content: str


@dataclass(frozen=True)
class ScanFile:
    """A classified, size-annotated file ready for the rules.

    ``path`` is passed through verbatim and need not exist on disk.
    ``size`` is the UTF-8 byte length of ``content``, not its character count.
    """

    path: str
    content: str
    language: Language
    size: int
