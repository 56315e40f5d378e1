"""Configuration loading, schema, and defaults."""

from apiscan.config.loader import ConfigError, load_config
from apiscan.config.schema import (
    ApiScanConfig,
    Category,
    Language,
    ScanOptions,
    Severity,
    severity_at_or_above,
)

__all__ = [
    "ApiScanConfig",
    "Category",
    "ConfigError",
    "Language",
    "ScanOptions",
    "Severity",
    "load_config",
    "severity_at_or_above",
]
