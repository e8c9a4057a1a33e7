"""Tests for the EditTools entry points."""

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from smart_edit.config import Config
from smart_edit.editing.metrics import read_edit_stats
from smart_edit.errors import NotFoundError
from smart_edit.tools import EditTools


SOURCE = """\
def greet(name):
    message = "hello " + name
    return message
"""


@pytest.fixture
def project(tmp_path):
    (tmp_path / "app.py").write_text(SOURCE)
    return tmp_path


@pytest.fixture
def tools(project):
    config = Config({"sandbox_root": str(project), "metrics_enabled": False})
    return EditTools(config)


def _read(project, name="app.py"):
    with open(project / name, newline="") as f:
        return f.read()


class TestApplyDirectEdit:
    def test_smart_single_line_keeps_indentation(self, tools, project):
        result = tools.apply_direct_edit("app.py", "return message", "return message.upper()")

        assert result["success"] is True
        assert result["file_path"] == "app.py"
        assert result["match_mode"] == "smart"
        assert result["line"] == 3
        assert "    return message.upper()\n" in _read(project)

    def test_default_mode_from_config(self, project):
        config = Config({"sandbox_root": str(project), "metrics_enabled": False,
                         "default_match_mode": "exact"})
        result = EditTools(config).apply_direct_edit("app.py", "message  =", "msg =")
        assert result["error"] is True

    def test_fuzzy_irregular_spacing(self, tools, project):
        (project / "cfg.txt").write_text("a  =  1\n")
        result = tools.apply_direct_edit("cfg.txt", "a = 1", "a = 2", "fuzzy")
        assert result["strategy"] == "whitespace"
        assert _read(project, "cfg.txt") == "a = 2\n"

    def test_no_match_returns_structured_error(self, tools, project):
        result = tools.apply_direct_edit("app.py", "def farewell():", "def bye():")

        assert result["error"] is True
        assert result["tool_name"] == "smart_replace"
        assert "search_in_file" in result["hint"]
        assert _read(project) == SOURCE

    def test_invalid_mode(self, tools):
        result = tools.apply_direct_edit("app.py", "return", "yield", "greedy")
        assert result["error"] is True
        assert "Invalid match_mode" in result["message"]

    def test_missing_file(self, tools):
        result = tools.apply_direct_edit("missing.py", "a", "b")
        assert result["error"] is True
        assert result["message"].startswith("File not found")

    def test_path_outside_sandbox(self, tools):
        result = tools.apply_direct_edit("../outside.py", "a", "b")
        assert result["error"] is True
        assert "Path traversal" in result["message"]

    def test_crlf_file_round_trips(self, tools, project):
        (project / "win.txt").write_bytes(b"one\r\ntwo\r\n")
        tools.apply_direct_edit("win.txt", "two", "three", "exact")
        assert (project / "win.txt").read_bytes() == b"one\r\nthree\r\n"


class TestApplyPatch:
    def test_structured(self, tools, project):
        lines = [f"line {i}" for i in range(1, 10)] + ["x", "line 11"]
        (project / "ten.txt").write_text("\n".join(lines) + "\n")

        result = tools.apply_patch("ten.txt", "@@ -10 +10 @@\n-x\n+y")

        assert result["success"] is True
        assert result["method"] == "structured"
        assert result["hunks_applied"] == 1
        assert _read(project, "ten.txt").splitlines()[9] == "y"

    def test_fallback(self, tools, project):
        (project / "notes.txt").write_text("keep\nold\nkeep\n")
        result = tools.apply_patch("notes.txt", "- old\n+ new")

        assert result["method"] == "fallback"
        assert _read(project, "notes.txt") == "keep\nnew\nkeep\n"

    def test_failure_leaves_file_untouched(self, tools, project):
        result = tools.apply_patch("app.py", "@@ -1,1 +1,1 @@\n-nothing here\n+something\n")

        assert result["error"] is True
        assert result["tool_name"] == "apply_patch"
        assert "1 of 1 hunks failed" in result["message"]
        assert _read(project) == SOURCE


class TestLineTools:
    def test_search_in_file(self, tools):
        result = tools.search_in_file("app.py", "MESSAGE", case_sensitive=False)
        assert result["total_matches"] == 2
        assert [m["line_number"] for m in result["matches"]] == [2, 3]

    def test_search_is_literal(self, tools):
        assert tools.search_in_file("app.py", "(name)")["total_matches"] == 1

    def test_empty_search(self, tools):
        result = tools.search_in_file("app.py", "")
        assert result["error"] is True
        assert "match mode" not in result["hint"]
        assert "literal text" in result["hint"]

    def test_get_code_context(self, tools):
        result = tools.get_code_context("app.py", 2, context_lines=1)
        assert result["context"] == (
            "1: def greet(name):\n"
            '2:     message = "hello " + name\n'
            "3:     return message"
        )
        assert result["total_lines"] == 4

    def test_context_out_of_range(self, tools):
        result = tools.get_code_context("app.py", 99)
        assert result["error"] is True
        assert "out of range" in result["message"]

    def test_delete_lines(self, tools, project):
        result = tools.delete_lines("app.py", 2, 2)
        assert result["lines_deleted"] == 1
        assert _read(project) == "def greet(name):\n    return message\n"

    @pytest.mark.parametrize("start, end", [(0, 1), (3, 2), (1, 50)])
    def test_delete_invalid_range(self, tools, project, start, end):
        result = tools.delete_lines("app.py", start, end)
        assert result["error"] is True
        assert "start_line <= end_line" in result["hint"]
        assert _read(project) == SOURCE

    def test_read_file_content(self, tools):
        result = tools.read_file_content("app.py")
        assert result["content"] == SOURCE
        assert result["lines"] == 4
        assert result["size_bytes"] == len(SOURCE.encode("utf-8"))


class TestCollaborators:
    def test_custom_resolver_and_store(self):
        files = {"/virtual/a.txt": "alpha\n"}

        class MemoryStore:
            def read(self, path):
                if path not in files:
                    raise NotFoundError(f"File not found: {path}")
                return files[path]

            def write(self, path, text):
                files[path] = text

        config = Config({"metrics_enabled": False, "validate_syntax": False})
        tools = EditTools(config, resolver=lambda raw: "/virtual/" + raw, store=MemoryStore())

        assert tools.apply_direct_edit("a.txt", "alpha", "beta")["success"] is True
        assert files["/virtual/a.txt"] == "beta\n"
        assert tools.read_file_content("b.txt")["error"] is True

    def test_unexpected_exception_is_converted(self, project):
        class BrokenStore:
            def read(self, path):
                raise RuntimeError("disk on fire")

        config = Config({"sandbox_root": str(project), "metrics_enabled": False})
        result = EditTools(config, store=BrokenStore()).apply_patch("app.py", "-a\n+b")

        assert result == {
            "error": True,
            "tool_name": "apply_patch",
            "message": "disk on fire",
            "hint": "Patch could not be applied. Re-read the file and regenerate "
                    "the patch, or use smart_replace for small edits.",
        }


class TestMetrics:
    def test_edits_are_recorded(self, project):
        config = Config({"sandbox_root": str(project)})
        tools = EditTools(config)
        tools.apply_direct_edit("app.py", "return message", "return name")
        tools.apply_direct_edit("app.py", "no such line at all", "x")

        stats = read_edit_stats(project_root=str(project), metrics_dir=config.METRICS_DIR)
        assert stats["total_edits"] == 2
        assert stats["success_rate"] == 50.0

    def test_disabled(self, tools, project):
        tools.apply_direct_edit("app.py", "return message", "return name")
        assert not os.path.exists(project / ".smart_edit" / "metrics")


class TestSyntaxCheck:
    @pytest.fixture(autouse=True)
    def _grammar(self):
        pytest.importorskip("tree_sitter")
        pytest.importorskip("tree_sitter_python")

    def test_warning_by_default(self, tools, project):
        result = tools.apply_direct_edit("app.py", "def greet(name):", "def greet(name:")
        assert result["success"] is True
        assert result["syntax_valid"] is False
        assert "syntax error" in result["warning"]

    def test_reject_keeps_file(self, project):
        config = Config({"sandbox_root": str(project), "metrics_enabled": False,
                         "reject_syntax_errors": True})
        result = EditTools(config).apply_direct_edit("app.py", "def greet(name):", "def greet(name:")

        assert result["error"] is True
        assert _read(project) == SOURCE

    def test_rejected_patch_recorded_as_failure(self, project):
        config = Config({"sandbox_root": str(project), "reject_syntax_errors": True})
        tools = EditTools(config)

        result = tools.apply_patch(
            "app.py", "@@ -1,1 +1,1 @@\n-def greet(name):\n+def greet(name:\n",
        )

        assert result["error"] is True
        assert _read(project) == SOURCE
        stats = read_edit_stats(project_root=str(project), metrics_dir=config.METRICS_DIR)
        assert stats["total_edits"] == 1
        assert stats["success_rate"] == 0.0

    def test_rejected_replace_recorded_as_failure(self, project):
        config = Config({"sandbox_root": str(project), "reject_syntax_errors": True})
        EditTools(config).apply_direct_edit("app.py", "def greet(name):", "def greet(name:")

        stats = read_edit_stats(project_root=str(project), metrics_dir=config.METRICS_DIR)
        assert stats["success_rate"] == 0.0

    def test_valid_edit(self, tools):
        result = tools.apply_direct_edit("app.py", "return message", "return name")
        assert result["syntax_valid"] is True


def test_concurrent_edits_last_writer_wins(tools, project):
    (project / "race.txt").write_text("a = 1\nb = 1\n")
    expected = {"a = 2\nb = 1\n", "a = 1\nb = 2\n", "a = 2\nb = 2\n"}

    for _ in range(20):
        (project / "race.txt").write_text("a = 1\nb = 1\n")
        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [
                pool.submit(tools.apply_direct_edit, "race.txt", "a = 1", "a = 2", "exact"),
                pool.submit(tools.apply_direct_edit, "race.txt", "b = 1", "b = 2", "exact"),
            ]
            for fut in futures:
                assert fut.result()["success"] is True
        assert _read(project, "race.txt") in expected
