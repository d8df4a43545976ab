"""
Unit tests for the concurrent Scanner.
"""

import os
import sys
import threading
from datetime import datetime

import pytest

from codesum.core.errors import FileExtractionError, TraversalError
from codesum.core.file_scanner import Scanner, count_lines, get_default_registry
from codesum.core.file_scanner import scanner as scanner_module
from codesum.core.ignore_set import IgnoreSet


def _paths(result) -> set[str]:
    return {record.path for record in result.files}


class TestLineCounting:
    """Scan-line convention: a trailing partial line counts, a final newline adds nothing."""

    def test_without_trailing_newline(self):
        assert count_lines("a\nb\nc") == 3

    def test_with_trailing_newline(self):
        assert count_lines("a\nb\nc\n") == 3

    def test_empty(self):
        assert count_lines("") == 0

    def test_single_newline(self):
        assert count_lines("\n") == 1

    def test_blank_lines_count(self):
        assert count_lines("a\n\n\nb") == 4

    def test_crlf_counts_newlines(self):
        assert count_lines("a\r\nb\r\n") == 2

    def test_files_report_pinned_convention(self, make_tree):
        root = make_tree({"no_newline.py": "a\nb\nc", "newline.py": "a\nb\nc\n"})

        result = Scanner().walk(root)

        counts = {record.path: record.line_count for record in result.files}
        assert counts == {"no_newline.py": 3, "newline.py": 3}


class TestSelection:
    """Which files end up in the result."""

    def test_records_recognized_files_with_language(self, make_tree):
        root = make_tree({
            "main.go": "package main\n",
            "lib/util.c": "int x;\n",
            "lib/util.h": "extern int x;\n",
            "README.md": "# readme\n",
            "script.sh": "echo\n",
        })

        result = Scanner().walk(root)

        languages = {record.path: record.language for record in result.files}
        assert languages == {
            "main.go": "Go",
            "lib/util.c": "C",
            "lib/util.h": "C/C++ Header",
        }

    def test_extension_match_is_case_insensitive(self, make_tree):
        root = make_tree({"Main.PY": "print(1)\n"})

        result = Scanner().walk(root)

        assert _paths(result) == {"Main.PY"}
        assert result.files[0].language == "Python"

    def test_paths_are_relative_posix(self, make_tree):
        root = make_tree({"a/b/c/deep.rs": "fn main() {}\n"})

        result = Scanner().walk(root)

        assert _paths(result) == {"a/b/c/deep.rs"}

    def test_vendor_subtree_is_pruned(self, make_tree):
        root = make_tree({
            ".ignore": "vendor\n",
            "main.go": "package main\n",
            "vendor/github.com/x/y.go": "package y\n",
            "vendor/lib.py": "x = 1\n",
            "vendor/native/z.c": "int z;\n",
        })
        ignore_set = IgnoreSet.load([root / ".ignore"])

        result = Scanner(ignore_set=ignore_set).walk(root)

        assert _paths(result) == {"main.go"}

    def test_ignore_source_listing_directory(self, make_tree):
        root = make_tree({
            ".ignore": "generated\n",
            "src/app.py": "x = 1\n",
            "src/generated/models.py": "y = 2\n",
        })
        ignore_set = IgnoreSet.load([root / ".ignore"])

        result = Scanner(ignore_set=ignore_set).walk(root)

        assert _paths(result) == {"src/app.py"}

    def test_file_glob_skips_files(self, make_tree):
        root = make_tree({"api.pb.go": "package api\n", "api.go": "package api\n"})

        result = Scanner(ignore_set=IgnoreSet(["*.pb.go"])).walk(root)

        assert _paths(result) == {"api.go"}

    def test_directory_prefix_pattern(self, make_tree):
        root = make_tree({"src/legacy/old.c": "int a;\n", "src/new.c": "int b;\n"})

        result = Scanner(ignore_set=IgnoreSet(["src/legacy"])).walk(root)

        assert _paths(result) == {"src/new.c"}

    def test_only_ignored_entries_gives_empty_result(self, make_tree):
        root = make_tree({
            "node_modules/pkg/index.py": "x\n",
            "tmp/scratch.go": "package tmp\n",
            "backup/old.rs": "fn a() {}\n",
        })

        result = Scanner().walk(root)

        assert len(result) == 0
        assert result.language_histogram == {}

    def test_configured_extension_subset(self, make_tree):
        root = make_tree({"a.go": "package a\n", "b.py": "b = 1\n"})

        result = Scanner(extensions={".go"}).walk(root)

        assert _paths(result) == {"a.go"}

    def test_unknown_configured_extensions_are_dropped(self, make_tree):
        root = make_tree({"notes.txt": "text\n", "a.go": "package a\n"})

        scanner = Scanner(extensions={".go", ".txt"})

        assert scanner.extensions == frozenset({".go"})
        assert _paths(scanner.walk(root)) == {"a.go"}

    def test_empty_extension_set_recognizes_nothing(self, make_tree):
        root = make_tree({"a.go": "package a\n", "b.py": "b = 1\n"})

        scanner = Scanner(extensions=[])
        result = scanner.walk(root)

        assert scanner.extensions == frozenset()
        assert len(result) == 0

    def test_default_extensions_come_from_registry(self):
        assert Scanner().extensions == get_default_registry().get_all_extensions()

    def test_deeply_nested_tree(self, tmp_path):
        depth = 1100
        directory = tmp_path
        for _ in range(depth):
            directory = directory / "d"
            os.mkdir(directory)
        (directory / "deep.go").write_text("package deep\n", encoding="utf-8")

        try:
            result = Scanner().walk(tmp_path)

            assert _paths(result) == {"/".join(["d"] * depth + ["deep.go"])}
        finally:
            (directory / "deep.go").unlink()
            for _ in range(depth):
                os.rmdir(directory)
                directory = directory.parent

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlinked_directories_are_not_descended(self, make_tree, tmp_path_factory):
        outside = tmp_path_factory.mktemp("outside")
        (outside / "far.go").write_text("package far\n", encoding="utf-8")
        root = make_tree({"main.go": "package main\n"})
        os.symlink(outside, root / "linked", target_is_directory=True)

        result = Scanner().walk(root)

        assert _paths(result) == {"main.go"}


class TestRecordFields:
    """Metadata extracted per file."""

    def test_contents_are_raw(self, make_tree):
        root = make_tree({"win.c": "int a;\r\nint b;\r\n"})

        record = Scanner().walk(root).files[0]

        assert record.contents == "int a;\r\nint b;\r\n"
        assert record.line_count == 2

    def test_invalid_utf8_is_replaced_not_fatal(self, tmp_path):
        (tmp_path / "bin.c").write_bytes(b"int a; /* \xff */\n")

        record = Scanner().walk(tmp_path).files[0]

        assert "�" in record.contents

    def test_modified_time_matches_stat(self, make_tree):
        root = make_tree({"a.py": "a = 1\n"})
        os.utime(root / "a.py", (1_600_000_000, 1_600_000_000))

        record = Scanner().walk(root).files[0]

        assert record.modified_time == datetime.fromtimestamp(1_600_000_000)

    def test_records_are_immutable(self, make_tree):
        root = make_tree({"a.py": "a = 1\n"})
        record = Scanner().walk(root).files[0]

        with pytest.raises(AttributeError):
            record.line_count = 5  # type: ignore[misc]


class TestIdempotence:
    """Scanning an unchanged tree twice gives the same content."""

    def test_two_scans_are_equal(self, make_tree):
        root = make_tree({
            "a.go": "package a\n",
            "pkg/b.go": "package pkg\n",
            "pkg/c.h": "#pragma once\n",
            "src/d.py": "d = 4",
        })

        first = Scanner(max_workers=4).walk(root)
        second = Scanner(max_workers=1).walk(root)

        assert set(first.files) == set(second.files)
        assert first.language_histogram == second.language_histogram


class TestErrors:
    """Traversal and extraction failures abort the run."""

    def test_missing_root(self, tmp_path):
        with pytest.raises(TraversalError):
            Scanner().walk(tmp_path / "does-not-exist")

    def test_root_is_a_file(self, tmp_path):
        path = tmp_path / "file.go"
        path.write_text("package x\n", encoding="utf-8")

        with pytest.raises(TraversalError, match="not a directory"):
            Scanner().walk(path)

    def test_traversal_error_is_an_oserror(self, tmp_path):
        with pytest.raises(OSError):
            Scanner().walk(tmp_path / "missing")

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unlistable_subdirectory(self, make_tree):
        root = make_tree({"ok.go": "package ok\n", "locked/inner.go": "package inner\n"})
        (root / "locked").chmod(0o000)
        try:
            with pytest.raises(TraversalError):
                Scanner().walk(root)
        finally:
            (root / "locked").chmod(0o755)

    def test_file_deleted_before_read_fails_the_run(self, make_tree, monkeypatch):
        root = make_tree({
            "a.go": "package a\n",
            "b.go": "package b\n",
            "c.go": "package c\n",
        })
        original = scanner_module.extract_file

        def delete_then_extract(path, rel_path, language):
            if rel_path == "b.go":
                path.unlink()
            return original(path, rel_path, language)

        monkeypatch.setattr(scanner_module, "extract_file", delete_then_extract)

        with pytest.raises(FileExtractionError) as exc_info:
            Scanner().walk(root)

        assert exc_info.value.path == "b.go"

    def test_no_files_scheduled_after_failure(self, make_tree, monkeypatch):
        root = make_tree({f"f{i:02d}.py": f"x = {i}\n" for i in range(20)})
        scheduled: list[str] = []
        failed = threading.Event()

        def fail_first(path, rel_path, language):
            scheduled.append(rel_path)
            if rel_path == "f00.py":
                failed.set()
                raise FileExtractionError(rel_path, "boom")
            return scanner_module.FileRecord(
                path=rel_path,
                language=language,
                line_count=1,
                modified_time=datetime.now(),
                contents="",
            )

        monkeypatch.setattr(scanner_module, "extract_file", fail_first)

        with pytest.raises(FileExtractionError, match="boom"):
            Scanner(max_workers=1).walk(root)

        assert failed.is_set()
        assert scheduled == ["f00.py"]

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            Scanner(max_workers=0)
