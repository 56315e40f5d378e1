"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from apiscan.config.defaults import DEFAULT_TOML
from apiscan.config.loader import CONFIG_FILENAME, ConfigError, load_config
from apiscan.config.schema import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MAX_FILE_SIZE,
    ApiScanConfig,
    ScanOptions,
    severity_at_or_above,
)


class TestSeverityComparison:
    def test_at_or_above(self):
        assert severity_at_or_above("critical", "high") is True
        assert severity_at_or_above("high", "high") is True
        assert severity_at_or_above("medium", "high") is False
        assert severity_at_or_above("info", "low") is False

    def test_info_threshold_accepts_everything(self):
        for severity in ("critical", "high", "medium", "low", "info"):
            assert severity_at_or_above(severity, "info") is True


class TestScanOptions:
    def test_defaults(self):
        opts = ScanOptions()
        assert opts.effective_max_file_size == DEFAULT_MAX_FILE_SIZE == 512000
        assert opts.effective_exclude_patterns == list(DEFAULT_EXCLUDE_PATTERNS)
        assert opts.respect_suppressions is True

    def test_explicit_values(self):
        opts = ScanOptions(max_file_size=0, exclude_patterns=[])
        assert opts.effective_max_file_size == 0
        assert opts.effective_exclude_patterns == []


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.output.fail_on == "high"
        assert cfg.output.format == "terminal"
        assert cfg.scan.exclude is None

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text(
            'version = "1.0"\n'
            "[scan]\n"
            'languages = ["python"]\n'
            'severity_threshold = "medium"\n'
            "[rules]\n"
            'disable = ["DOC001"]\n'
            "[output]\n"
            'fail_on = "critical"\n'
            "min_score = 70\n"
        )
        cfg = load_config(tmp_path)
        assert cfg.scan.languages == ["python"]
        assert cfg.rules.disable == ["DOC001"]
        assert cfg.output.fail_on == "critical"
        assert cfg.output.min_score == 70

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text("[scan]\nshiny = true\n[extra]\nx = 1\n")
        cfg = load_config(tmp_path)
        assert cfg.scan.max_file_size == 512000

    def test_starter_template_loads(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text(DEFAULT_TOML)
        cfg = load_config(tmp_path)
        assert cfg.output.format == "terminal"
        assert cfg.scan.respect_suppressions is True

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[output]\nfail_on = "low"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.output.fail_on == "low"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    @pytest.mark.parametrize(
        "body",
        [
            '[scan]\nlanguages = ["cobol"]\n',
            '[scan]\ncategories = ["style"]\n',
            '[scan]\nseverity_threshold = "urgent"\n',
            "[scan]\nmax_file_size = -1\n",
            '[output]\nformat = "html"\n',
            'scan = "nope"\n',
            '[rules]\nenable = "SEC001"\n',
            '[rules]\ndisable = "DOC001"\n',
            '[scan]\nexclude = "vendor"\n',
            '[scan]\nlanguages = "python"\n',
            '[scan]\ncategories = "design"\n',
            '[scan]\nrespect_suppressions = "yes"\n',
            "[scan]\nmax_file_size = true\n",
            "[output]\nshow_summary = 1\n",
        ],
    )
    def test_invalid_values_raise(self, tmp_path: Path, body: str):
        (tmp_path / CONFIG_FILENAME).write_text(body)
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestToScanOptions:
    def test_empty_lists_become_unset(self):
        opts = ApiScanConfig().to_scan_options()
        assert opts.languages is None
        assert opts.categories is None
        assert opts.enabled_rules is None
        assert opts.disabled_rules is None
        assert opts.exclude_patterns is None

    def test_values_carried(self):
        cfg = ApiScanConfig()
        cfg.scan.languages = ["go"]
        cfg.scan.exclude = []
        cfg.rules.enable = ["SEC001"]
        opts = cfg.to_scan_options()
        assert opts.languages == ["go"]
        assert opts.exclude_patterns == []
        assert opts.enabled_rules == ["SEC001"]


class TestEnvVarOverrides:
    def test_fail_on_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_FAIL_ON", "critical")
        assert load_config(tmp_path).output.fail_on == "critical"

    def test_format_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_FORMAT", "sarif")
        assert load_config(tmp_path).output.format == "sarif"

    def test_invalid_value_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_FORMAT", "html")
        monkeypatch.setenv("APISCAN_MAX_FILE_SIZE", "lots")
        cfg = load_config(tmp_path)
        assert cfg.output.format == "terminal"
        assert cfg.scan.max_file_size == 512000

    def test_disable_rules_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_DISABLE_RULES", "DOC001, PERF003")
        cfg = load_config(tmp_path)
        assert cfg.rules.disable == ["DOC001", "PERF003"]

    def test_exclude_extends_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_EXCLUDE", "generated")
        cfg = load_config(tmp_path)
        assert cfg.scan.exclude == list(DEFAULT_EXCLUDE_PATTERNS) + ["generated"]

    def test_max_file_size_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_MAX_FILE_SIZE", "1024")
        assert load_config(tmp_path).scan.max_file_size == 1024

    def test_severity_threshold_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_SEVERITY_THRESHOLD", "high")
        assert load_config(tmp_path).scan.severity_threshold == "high"

    def test_negative_max_file_size_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APISCAN_MAX_FILE_SIZE", "-5")
        assert load_config(tmp_path).scan.max_file_size == 512000

    def test_env_lists_with_string_config_raise(self, tmp_path: Path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text('[rules]\ndisable = "DOC001"\n')
        monkeypatch.setenv("APISCAN_DISABLE_RULES", "PERF003")
        with pytest.raises(ConfigError):
            load_config(tmp_path)
