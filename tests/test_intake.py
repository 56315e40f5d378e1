"""Tests for language detection, file intake, and filesystem collection."""

import logging
from pathlib import Path

import pytest

from apiscan.config.schema import ScanOptions
from apiscan.intake import (
    FileEntry,
    SourceError,
    collect_entries,
    create_files_from_entries,
    detect_language,
    is_api_file,
    is_excluded,
    language_label,
)


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("src/app.js", "javascript"),
            ("src/App.JSX", "javascript"),
            ("lib/index.mjs", "javascript"),
            ("server.ts", "typescript"),
            ("component.tsx", "typescript"),
            ("views.py", "python"),
            ("main.go", "go"),
            ("UserController.java", "java"),
            ("index.php", "php"),
            ("routes.rb", "ruby"),
            ("tasks/db.rake", "ruby"),
        ],
    )
    def test_supported(self, path, expected):
        assert detect_language(path) == expected

    @pytest.mark.parametrize("path", ["README.md", "Makefile", "data.json", "style.css", "noext"])
    def test_unsupported(self, path):
        assert detect_language(path) is None

    def test_only_final_extension_counts(self):
        assert detect_language("archive.js.txt") is None
        assert detect_language("types.d.ts") == "typescript"

    def test_windows_separators(self):
        assert detect_language("src\\routes\\users.js") == "javascript"

    def test_dot_in_directory_name(self):
        assert detect_language("pkg.v2/README") is None


class TestLanguageHelpers:
    def test_label(self):
        assert language_label("typescript") == "TypeScript"
        assert language_label("php") == "PHP"

    def test_label_unknown_passthrough(self):
        assert language_label("cobol") == "cobol"

    def test_api_file_by_path(self):
        assert is_api_file("src/routes/users.js", "")
        assert is_api_file("app.py", "")

    def test_api_file_by_content(self):
        assert is_api_file("lib/thing.js", "const app = express();")

    def test_not_api_file(self):
        assert not is_api_file("lib/math.js", "export const add = (a, b) => a + b;")


class TestExcludePatterns:
    def test_substring(self):
        assert is_excluded("node_modules/lib/index.js", ["node_modules"])
        assert not is_excluded("src/index.js", ["node_modules"])

    def test_wildcard(self):
        assert is_excluded("src/app.test.js", ["*.test.*"])
        assert is_excluded("public/jquery.min.js", ["*.min.js"])
        assert not is_excluded("src/testing.js", ["*.test.*"])

    def test_dot_is_literal_in_wildcard(self):
        assert not is_excluded("src/appXminXjs", ["*.min.js"])

    def test_invalid_wildcard_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="apiscan.intake.entries"):
            assert not is_excluded("src/[app].js", ["[*"])
        assert any("invalid exclude pattern" in r.message.lower() for r in caplog.records)


class TestCreateFilesFromEntries:
    def test_classifies_and_sizes(self):
        files = create_files_from_entries([FileEntry("a.py", "x = 'é'\n")])
        assert len(files) == 1
        f = files[0]
        assert f.language == "python"
        # é is two bytes in UTF-8
        assert f.size == len("x = 'é'\n") + 1

    def test_accepts_mappings(self):
        files = create_files_from_entries([{"path": "a.go", "content": "package main"}])
        assert [f.language for f in files] == ["go"]

    def test_unsupported_never_appears(self):
        entries = [FileEntry("README.md", "# hi"), FileEntry("a.js", "")]
        for options in (None, ScanOptions(), ScanOptions(languages=["javascript"])):
            paths = [f.path for f in create_files_from_entries(entries, options)]
            assert "README.md" not in paths

    def test_default_excludes(self):
        entries = [
            FileEntry("node_modules/x/index.js", ""),
            FileEntry("dist/bundle.js", ""),
            FileEntry("src/app.spec.ts", ""),
            FileEntry("src/app.ts", ""),
        ]
        assert [f.path for f in create_files_from_entries(entries)] == ["src/app.ts"]

    def test_empty_exclude_list_disables_defaults(self):
        entries = [FileEntry("node_modules/x/index.js", "")]
        files = create_files_from_entries(entries, ScanOptions(exclude_patterns=[]))
        assert len(files) == 1

    def test_language_filter(self):
        entries = [FileEntry("a.js", ""), FileEntry("b.py", ""), FileEntry("c.go", "")]
        files = create_files_from_entries(entries, ScanOptions(languages=["python", "go"]))
        assert [f.path for f in files] == ["b.py", "c.go"]

    def test_preserves_order(self):
        entries = [FileEntry(f"f{i}.js", "") for i in (3, 1, 2)]
        assert [f.path for f in create_files_from_entries(entries)] == ["f3.js", "f1.js", "f2.js"]


class TestCollectEntries:
    def test_collects_supported_files(self, project_dir: Path):
        entries = collect_entries([project_dir], project_dir)
        assert [e.path for e in entries] == ["routes/users.js"]

    def test_skips_vendor_dirs(self, tmp_path: Path):
        (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
        (tmp_path / "node_modules" / "pkg" / "index.js").write_text("x")
        (tmp_path / "app.js").write_text("y")
        entries = collect_entries([tmp_path], tmp_path)
        assert [e.path for e in entries] == ["app.js"]

    def test_single_file(self, project_dir: Path):
        target = project_dir / "routes" / "users.js"
        entries = collect_entries([target], project_dir)
        assert entries[0].content.startswith("const password")

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(SourceError):
            collect_entries([tmp_path / "nope"], tmp_path)

    def test_file_ceiling(self, tmp_path: Path):
        for i in range(3):
            (tmp_path / f"f{i}.js").write_text("x")
        with pytest.raises(SourceError, match="Too many files"):
            collect_entries([tmp_path], tmp_path, max_files=2)

    def test_size_ceiling(self, tmp_path: Path):
        (tmp_path / "big.js").write_text("x" * 100)
        with pytest.raises(SourceError, match="too large"):
            collect_entries([tmp_path], tmp_path, max_total_bytes=50)

    def test_undecodable_bytes_replaced(self, tmp_path: Path):
        (tmp_path / "bin.js").write_bytes(b"const a = '\xff';\n")
        entries = collect_entries([tmp_path], tmp_path)
        assert "�" in entries[0].content
