import io
import json

import pytest

from smart_edit import cli


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.setenv("SMART_EDIT_LOG_DIR", str(tmp_path / "logs"))
    (tmp_path / "app.txt").write_text("alpha\n    beta\ngamma\n")
    return tmp_path


def _run(project, capsys, *args):
    code = cli.main(["--root", str(project), "--no-metrics", *args])
    return code, json.loads(capsys.readouterr().out)


def test_replace(project, capsys):
    code, result = _run(project, capsys, "replace", "app.txt", "--old", "beta", "--new", "delta")
    assert code == 0
    assert result["strategy"] == "exact"
    assert (project / "app.txt").read_text() == "alpha\n    delta\ngamma\n"


def test_replace_no_match_exits_nonzero(project, capsys):
    code, result = _run(project, capsys, "replace", "app.txt", "--old", "omega", "--new", "x")
    assert code == 1
    assert result["error"] is True


def test_patch_from_file(project, capsys):
    (project / "fix.diff").write_text("@@ -3 +3 @@\n-gamma\n+GAMMA\n")
    code, result = _run(project, capsys, "patch", "app.txt", str(project / "fix.diff"))
    assert code == 0
    assert result["method"] == "structured"


def test_patch_from_stdin(project, capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("- alpha\n+ ALPHA\n"))
    code, result = _run(project, capsys, "patch", "app.txt")
    assert code == 0
    assert result["method"] == "fallback"
    assert (project / "app.txt").read_text().startswith("ALPHA\n")


def test_search_ignore_case(project, capsys):
    _, result = _run(project, capsys, "search", "app.txt", "BETA", "-i")
    assert result["total_matches"] == 1


def test_context(project, capsys):
    _, result = _run(project, capsys, "context", "app.txt", "1", "-n", "0")
    assert result["context"] == "1: alpha"


def test_delete_lines(project, capsys):
    code, _ = _run(project, capsys, "delete-lines", "app.txt", "1", "2")
    assert code == 0
    assert (project / "app.txt").read_text() == "gamma\n"


def test_stats_empty(project, capsys):
    code, result = _run(project, capsys, "stats")
    assert code == 0
    assert result["total_edits"] == 0
