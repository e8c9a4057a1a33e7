"""Tests for the tree-sitter post-edit syntax check."""

import pytest

from smart_edit.editing.syntax_check import SyntaxReport, check_syntax, detect_language


class TestDetectLanguage:
    @pytest.mark.parametrize("path, language", [
        ("src/app.py", "python"),
        ("stubs/app.pyi", "python"),
        ("web/index.JS", "javascript"),
        ("web/view.jsx", "javascript"),
        ("README.md", None),
        ("Makefile", None),
    ])
    def test_extension_mapping(self, path, language):
        assert detect_language(path) == language


def test_unsupported_extension_is_unchecked():
    report = check_syntax("notes.txt", "{{{ not code")
    assert report == SyntaxReport(language=None)
    assert report.valid is True


class TestPython:
    @pytest.fixture(autouse=True)
    def _grammar(self):
        pytest.importorskip("tree_sitter")
        pytest.importorskip("tree_sitter_python")

    def test_valid_source(self):
        report = check_syntax("a.py", "def f():\n    return 1\n")
        assert report.checked is True
        assert report.valid is True
        assert report.error_line is None

    def test_error_line_reported(self):
        report = check_syntax("a.py", "x = 1\ny = 2\ndef f(:\n    return 1\n")
        assert report.checked is True
        assert report.valid is False
        assert report.error_line is not None
        assert report.error_line >= 3


class TestJavaScript:
    @pytest.fixture(autouse=True)
    def _grammar(self):
        pytest.importorskip("tree_sitter")
        pytest.importorskip("tree_sitter_javascript")

    def test_valid_source(self):
        assert check_syntax("a.js", "function f() { return 1; }\n").valid is True

    def test_unbalanced_braces(self):
        assert check_syntax("a.js", "function f() { return 1;\n").valid is False
