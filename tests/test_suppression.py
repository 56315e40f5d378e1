"""Tests for the suppression system."""

from apiscan.scanner.suppression import (
    SuppressionChecker,
    apply_suppressions,
    is_pure_comment,
    parse_inline_suppression,
)
from apiscan.rules.builtin.security import HARDCODED_SECRETS

from conftest import make_file


class TestInlineParsing:
    def test_slash_comment(self):
        ok, ids = parse_inline_suppression('const key = "secret";  // apiscan-ignore')
        assert ok is True
        assert ids is None  # suppress all

    def test_hash_comment(self):
        ok, ids = parse_inline_suppression('key = "secret"  # apiscan-ignore')
        assert ok is True
        assert ids is None

    def test_rule_scoped(self):
        ok, ids = parse_inline_suppression("router.get('/getUsers', h); // apiscan-ignore[DES004, DOC001]")
        assert ok is True
        assert ids == frozenset({"DES004", "DOC001"})

    def test_block_comment_close(self):
        ok, _ = parse_inline_suppression("/* apiscan-ignore */")
        assert ok is False
        ok, _ = parse_inline_suppression("x(); // apiscan-ignore */")
        assert ok is True

    def test_no_suppression(self):
        ok, _ = parse_inline_suppression('key = "normal"')
        assert ok is False

    def test_must_end_the_line(self):
        ok, _ = parse_inline_suppression("// apiscan-ignore this and more")
        assert ok is False

    def test_pure_comment(self):
        assert is_pure_comment("   // apiscan-ignore")
        assert is_pure_comment("# note")
        assert not is_pure_comment("x = 1  # apiscan-ignore")


class TestSuppressionChecker:
    def test_same_line(self):
        checker = SuppressionChecker(["a()", "b()  // apiscan-ignore", "c()"])
        assert checker.is_suppressed("f.js", 2, "SEC001") is not None
        assert checker.is_suppressed("f.js", 1, "SEC001") is None
        # trailing comment does not carry to the next line
        assert checker.is_suppressed("f.js", 3, "SEC001") is None

    def test_next_line(self):
        checker = SuppressionChecker(["# apiscan-ignore[SEC001]", 'password = "x"', "y = 2"])
        sup = checker.is_suppressed("f.py", 2, "SEC001")
        assert sup is not None
        assert sup.source == "apiscan-ignore[SEC001]"
        assert checker.is_suppressed("f.py", 2, "SEC002") is None
        assert checker.is_suppressed("f.py", 3, "SEC001") is None

    def test_record_fields(self):
        checker = SuppressionChecker(["x()  // apiscan-ignore"])
        sup = checker.is_suppressed("src/a.js", 1, "DES004")
        assert sup.rule_id == "DES004"
        assert sup.file_path == "src/a.js"
        assert sup.line == 1
        assert sup.source == "apiscan-ignore"

    def test_empty_checker_is_falsy(self):
        assert not SuppressionChecker(["a()", "b()"])


class TestApplySuppressions:
    def test_split(self):
        source = (
            'const password = "SuperSecret123";\n'
            'const pwd = "AnotherSecret9"; // apiscan-ignore\n'
        )
        file = make_file("a.js", source)
        issues = HARDCODED_SECRETS.check(file)
        kept, suppressed = apply_suppressions(file, issues)
        assert [i.line for i in kept] == [1]
        assert [s.line for s in suppressed] == [2]

    def test_no_comments_passthrough(self, hardcoded_password_js):
        file = make_file("a.js", hardcoded_password_js)
        issues = HARDCODED_SECRETS.check(file)
        kept, suppressed = apply_suppressions(file, issues)
        assert kept == issues
        assert suppressed == []
