"""Tests for the scan engine: selection, isolation, ordering, stats, suppression."""

from typing import List

import pytest

from apiscan.config.schema import CATEGORIES, SEVERITIES, ScanOptions
from apiscan.findings.models import ScanIssue
from apiscan.intake.models import ScanFile
from apiscan.rules import Rule, RuleDefinition, RuleRegistry, make_issue
from apiscan.rules.builtin.security import HARDCODED_SECRETS
from apiscan.rules.helpers import ALL_LANGUAGES
from apiscan.scanner import ScanEngine

from conftest import make_file


def _static_rule(rule_id: str, severity: str, category: str = "design") -> Rule:
    """A rule that reports exactly one issue on line 1 of every file."""
    definition = RuleDefinition(
        id=rule_id,
        name=rule_id,
        description="",
        category=category,  # type: ignore[arg-type]
        severity=severity,  # type: ignore[arg-type]
        languages=ALL_LANGUAGES,
    )

    def check(file: ScanFile) -> List[ScanIssue]:
        lines = file.content.split("\n")
        return [
            make_issue(definition, file, lines, 0, message=f"{rule_id}:{file.path}", suggestion="")
        ]

    return Rule(definition, check)


def _failing_rule() -> Rule:
    definition = RuleDefinition(
        id="BOOM",
        name="Always fails",
        description="",
        category="security",
        severity="critical",
        languages=ALL_LANGUAGES,
    )

    def check(file: ScanFile) -> List[ScanIssue]:
        raise RuntimeError("rule exploded")

    return Rule(definition, check)


def _stats_without_duration(result) -> dict:
    data = result.stats.to_dict()
    data.pop("scan_duration_ms")
    return data


class TestEngineConstruction:
    def test_default_catalog(self):
        engine = ScanEngine()
        assert len(engine.rules) == 19
        assert engine.get_rule("BP002") is not None
        assert engine.get_rule("NOPE") is None

    def test_rules_and_registry_exclusive(self):
        with pytest.raises(ValueError):
            ScanEngine([HARDCODED_SECRETS], registry=RuleRegistry())

    def test_workers_must_be_positive(self):
        with pytest.raises(ValueError):
            ScanEngine(max_workers=0)

    def test_applicable_rules(self):
        engine = ScanEngine()
        ids = [r.id for r in engine.applicable_rules(make_file("main.go", ""))]
        assert "SEC002" not in ids
        assert "ERR001" not in ids
        assert "SEC001" in ids


class TestScanFile:
    def test_catalog_order_unsorted(self):
        engine = ScanEngine([_static_rule("LOW", "low"), _static_rule("CRIT", "critical")])
        issues = engine.scan_file(make_file("a.js", "x"))
        assert [i.rule_id for i in issues] == ["LOW", "CRIT"]

    def test_failing_rule_is_isolated(self, hardcoded_password_js):
        engine = ScanEngine([_failing_rule(), HARDCODED_SECRETS])
        issues = engine.scan_file(make_file("a.js", hardcoded_password_js))
        assert [i.rule_id for i in issues] == ["SEC001"]


class TestScanFiles:
    def test_scenario_naming_and_pagination(self, users_route_js):
        result = ScanEngine().scan_files([make_file("routes/users.js", users_route_js)])
        ids = {i.rule_id for i in result.issues}
        assert "DES004" in ids
        assert "PERF001" in ids

    def test_scenario_hardcoded_password(self, hardcoded_password_js):
        result = ScanEngine().scan_files([make_file("config.js", hardcoded_password_js)])
        secrets = [i for i in result.issues if i.rule_id == "SEC001"]
        assert len(secrets) == 1
        assert secrets[0].severity == "critical"
        assert secrets[0].line == 1

    def test_scenario_cors_escalation(self, cors_with_credentials_js):
        result = ScanEngine().scan_files([make_file("server.js", cors_with_credentials_js)])
        cors = [i for i in result.issues if i.rule_id == "SEC004"]
        assert len(cors) == 1
        assert cors[0].severity == "critical"

    def test_scenario_oversized_file_skipped(self, hardcoded_password_js):
        big = make_file("big.js", hardcoded_password_js)
        small = make_file("small.js", "let a = 1;\n")
        result = ScanEngine().scan_files([big, small], ScanOptions(max_file_size=20))
        assert result.stats.total_files == 2
        assert result.stats.skipped_files == 1
        assert result.stats.scanned_files == 1
        assert all(i.file_path != "big.js" for i in result.issues)

    def test_clean_file(self, clean_js):
        result = ScanEngine().scan_files([make_file("items.js", clean_js)])
        assert result.issues == []
        assert result.score == 100

    def test_empty_input(self):
        result = ScanEngine().scan_files([])
        assert result.stats.total_files == 0
        assert result.score == 100

    def test_result_options_detached_from_caller(self):
        options = ScanOptions(categories=["security"], disabled_rules=["SEC002"])
        result = ScanEngine().scan_files([make_file("a.js", "let a = 1;\n")], options)
        options.categories.append("design")
        options.disabled_rules = None
        options.max_file_size = 1
        assert result.options is not options
        assert result.options.categories == ["security"]
        assert result.options.disabled_rules == ["SEC002"]
        assert result.options.max_file_size is None

    def test_stats_invariants(self, users_route_js, cors_with_credentials_js, hardcoded_password_js):
        files = [
            make_file("routes/users.js", users_route_js),
            make_file("server.ts", cors_with_credentials_js),
            make_file("settings.py", 'password = "SuperSecret123"\n'),
            make_file("config.js", hardcoded_password_js),
        ]
        result = ScanEngine().scan_files(files)
        stats = result.stats
        assert stats.total_issues == len(result.issues)
        assert sum(stats.issues_by_severity.values()) == stats.total_issues
        assert sum(stats.issues_by_category.values()) == stats.total_issues
        assert set(stats.issues_by_severity) == set(SEVERITIES)
        assert set(stats.issues_by_category) == set(CATEGORIES)
        assert stats.scanned_files + stats.skipped_files == stats.total_files
        assert sum(stats.issues_by_language.values()) == stats.total_issues
        assert set(stats.issues_by_language) <= {"javascript", "typescript", "python"}
        assert 0 <= result.score <= 100

    def test_sorted_by_severity_stable(self):
        engine = ScanEngine(
            [
                _static_rule("A", "low"),
                _static_rule("B", "high"),
                _static_rule("C", "low"),
            ]
        )
        result = engine.scan_files([make_file("f1.js", "x"), make_file("f2.js", "y")])
        assert [i.message for i in result.issues] == [
            "B:f1.js",
            "B:f2.js",
            "A:f1.js",
            "C:f1.js",
            "A:f2.js",
            "C:f2.js",
        ]

    def test_failing_rule_does_not_stop_scan(self, hardcoded_password_js):
        engine = ScanEngine([_failing_rule(), HARDCODED_SECRETS])
        files = [make_file("a.js", hardcoded_password_js), make_file("b.py", 'password = "hunter22"\n')]
        result = engine.scan_files(files)
        assert [i.file_path for i in result.issues] == ["a.js", "b.py"]
        assert result.stats.scanned_files == 2

    def test_idempotent(self, users_route_js, hardcoded_password_js):
        files = [make_file("routes/users.js", users_route_js), make_file("a.js", hardcoded_password_js)]
        engine = ScanEngine()
        first = engine.scan_files(files)
        second = engine.scan_files(files)
        assert first.issues == second.issues
        assert _stats_without_duration(first) == _stats_without_duration(second)
        assert first.id != second.id

    def test_thread_pool_matches_sequential(self, users_route_js, cors_with_credentials_js):
        files = [
            make_file(f"routes/r{i}.js", users_route_js if i % 2 else cors_with_credentials_js)
            for i in range(6)
        ]
        sequential = ScanEngine().scan_files(files)
        pooled = ScanEngine(max_workers=4).scan_files(files)
        assert pooled.issues == sequential.issues
        assert _stats_without_duration(pooled) == _stats_without_duration(sequential)

    def test_disabled_wins_over_enabled(self, hardcoded_password_js):
        options = ScanOptions(enabled_rules=["SEC001"], disabled_rules=["SEC001"])
        result = ScanEngine().scan_files([make_file("a.js", hardcoded_password_js)], options)
        assert result.issues == []

    def test_category_filter(self, users_route_js):
        options = ScanOptions(categories=["design"])
        result = ScanEngine().scan_files([make_file("routes/users.js", users_route_js)], options)
        assert result.issues
        assert {i.category for i in result.issues} == {"design"}

    def test_result_metadata(self):
        result = ScanEngine().scan_files([make_file("a.js", "")])
        assert result.scanned_at.tzinfo is not None
        assert result.stats.scan_duration_ms >= 0
        assert isinstance(result.options, ScanOptions)


class TestSuppressionInEngine:
    def test_scoped_ignore(self):
        source = 'const password = "SuperSecret123"; // apiscan-ignore[SEC001]\n'
        options = ScanOptions(enabled_rules=["SEC001"])
        result = ScanEngine().scan_files([make_file("a.js", source)], options)
        assert result.issues == []
        assert len(result.suppressed) == 1
        assert result.suppressed[0].source == "apiscan-ignore[SEC001]"
        assert result.stats.total_issues == 0

    def test_other_rule_not_suppressed(self):
        source = 'const password = "SuperSecret123"; // apiscan-ignore[DES004]\n'
        options = ScanOptions(enabled_rules=["SEC001"])
        result = ScanEngine().scan_files([make_file("a.js", source)], options)
        assert len(result.issues) == 1
        assert result.suppressed == []

    def test_previous_line_ignore(self):
        source = '# apiscan-ignore\npassword = "SuperSecret123"\n'
        options = ScanOptions(enabled_rules=["SEC001"])
        result = ScanEngine().scan_files([make_file("settings.py", source)], options)
        assert result.issues == []
        assert result.suppressed[0].line == 2

    def test_suppressions_can_be_disabled(self):
        source = 'const password = "SuperSecret123"; // apiscan-ignore\n'
        options = ScanOptions(enabled_rules=["SEC001"], respect_suppressions=False)
        result = ScanEngine().scan_files([make_file("a.js", source)], options)
        assert len(result.issues) == 1
        assert result.suppressed == []
