"""Load and merge configuration from .apiscan.toml and APISCAN_* env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from apiscan.config.schema import (
    CATEGORIES,
    DEFAULT_EXCLUDE_PATTERNS,
    LANGUAGES,
    SEVERITIES,
    ApiScanConfig,
    OutputConfig,
    RulesConfig,
    ScanConfig,
)

CONFIG_FILENAME = ".apiscan.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _check_values(key: str, values: Iterable[str], allowed: tuple[str, ...]) -> None:
    for value in values:
        if value not in allowed:
            raise ConfigError(
                f"Invalid {key} {value!r}; expected one of: {', '.join(allowed)}"
            )


def _check_type(key: str, value: Any, expected: type, optional: bool = False) -> None:
    if optional and value is None:
        return
    if not isinstance(value, expected):
        raise ConfigError(
            f"{key} must be a {expected.__name__}, got {type(value).__name__} {value!r}"
        )


def validate_types(cfg: ApiScanConfig) -> None:
    """Reject list and flag settings given as the wrong TOML type."""
    _check_type("scan.languages", cfg.scan.languages, list)
    _check_type("scan.categories", cfg.scan.categories, list)
    _check_type("scan.exclude", cfg.scan.exclude, list, optional=True)
    _check_type("scan.respect_suppressions", cfg.scan.respect_suppressions, bool)
    _check_type("rules.enable", cfg.rules.enable, list)
    _check_type("rules.disable", cfg.rules.disable, list)
    _check_type("output.show_summary", cfg.output.show_summary, bool)


def validate_config(cfg: ApiScanConfig) -> None:
    """Reject wrongly typed values and vocabulary the engine does not know about."""
    validate_types(cfg)
    _check_values("language", cfg.scan.languages, LANGUAGES)
    _check_values("category", cfg.scan.categories, CATEGORIES)
    if cfg.scan.severity_threshold is not None:
        _check_values("severity_threshold", [cfg.scan.severity_threshold], SEVERITIES)
    _check_values("fail_on", [cfg.output.fail_on], SEVERITIES)
    _check_values("format", [cfg.output.format], ("terminal", "json", "sarif"))
    size = cfg.scan.max_file_size
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise ConfigError(
            f"max_file_size must be a non-negative integer, got {cfg.scan.max_file_size!r}"
        )


def _merge_env_overrides(cfg: ApiScanConfig) -> None:
    """Apply APISCAN_* environment variable overrides."""
    if val := os.environ.get("APISCAN_FORMAT"):
        if val in ("terminal", "json", "sarif"):
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("APISCAN_FAIL_ON"):
        if val in SEVERITIES:
            cfg.output.fail_on = val  # type: ignore[assignment]
    if val := os.environ.get("APISCAN_SEVERITY_THRESHOLD"):
        if val in SEVERITIES:
            cfg.scan.severity_threshold = val  # type: ignore[assignment]
    if val := os.environ.get("APISCAN_DISABLE_RULES"):
        cfg.rules.disable.extend(r.strip() for r in val.split(",") if r.strip())
    if val := os.environ.get("APISCAN_EXCLUDE"):
        patterns = [p.strip() for p in val.split(os.pathsep) if p.strip()]
        base = cfg.scan.exclude if cfg.scan.exclude is not None else list(DEFAULT_EXCLUDE_PATTERNS)
        cfg.scan.exclude = base + patterns
    if val := os.environ.get("APISCAN_MAX_FILE_SIZE"):
        try:
            size = int(val)
        except ValueError:
            size = -1
        if size >= 0:
            cfg.scan.max_file_size = size


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> ApiScanConfig:
    """Load, validate, and return an ApiScanConfig."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = ApiScanConfig()
    else:
        raw = _parse_toml(config_path)
        try:
            cfg = ApiScanConfig(
                version=str(raw.get("version", "1.0")),
                scan=_build_section(raw, ScanConfig, "scan"),
                rules=_build_section(raw, RulesConfig, "rules"),
                output=_build_section(raw, OutputConfig, "output"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc
        validate_types(cfg)

    _merge_env_overrides(cfg)
    validate_config(cfg)
    return cfg
