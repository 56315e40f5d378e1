"""Language classification, intake filtering, and file collection."""

from apiscan.intake.entries import create_files_from_entries, is_excluded
from apiscan.intake.filesystem import SourceError, collect_entries
from apiscan.intake.language import (
    LANGUAGE_EXTENSIONS,
    detect_language,
    is_api_file,
    language_label,
)
from apiscan.intake.models import FileEntry, ScanFile

__all__ = [
    "FileEntry",
    "LANGUAGE_EXTENSIONS",
    "ScanFile",
    "SourceError",
    "collect_entries",
    "create_files_from_entries",
    "detect_language",
    "is_api_file",
    "is_excluded",
    "language_label",
]
