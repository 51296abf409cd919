"""Tests for the command line interface."""

import io
import json

import pytest

from symbol_sentinel.cli import EXIT_ERROR, EXIT_FINDINGS, EXIT_OK, main


@pytest.fixture
def project(make_tree):
    """A small project that has not been scanned yet."""
    return make_tree(
        {
            "src/a.js": "// first\n\nfunction greet(name) { return name }\n",
            "src/b.js": "\n" * 8 + "function greet(x) { return x }\n",
            "routes/users.js": "router.get('/api/users/:id', show);\n",
        }
    )


@pytest.fixture
def scanned_project(project, capsys):
    """The same project with its registry written."""
    assert main(["--root", str(project), "scan"]) == EXIT_OK
    capsys.readouterr()
    return project


def test_scan_writes_registry_and_index(project, capsys):
    assert main(["--root", str(project), "scan"]) == EXIT_OK

    registry = json.loads((project / ".wisdom" / "symbols.json").read_text(encoding="utf-8"))
    index = json.loads((project / ".wisdom" / "index.json").read_text(encoding="utf-8"))

    assert registry["functions"]["greet"] == {"file": "src/a.js", "line": 3, "occurrences": 2}
    assert registry["_meta"]["file_count"] == 3
    assert [f["path"] for f in index["files"]] == ["routes/users.js", "src/a.js", "src/b.js"]
    assert "Indexed 3 files" in capsys.readouterr().out


def test_check_reports_typos(scanned_project, capsys):
    code = main(["--root", str(scanned_project), "check", "greet", "grete", "frobnicate"])
    out = capsys.readouterr().out

    assert code == EXIT_FINDINGS
    assert "did you mean **greet**?" in out
    assert "**frobnicate**" in out
    assert "Summary: 1 known, 1 fuzzy, 1 unknown" in out


def test_check_all_known(scanned_project, capsys):
    code = main(["--root", str(scanned_project), "check", "--verbose", "greet"])
    out = capsys.readouterr().out

    assert code == EXIT_OK
    assert "All 1 symbols confirmed in registry." in out
    assert "- greet (functions, src/a.js:3)" in out


def test_check_without_registry(tmp_path, capsys):
    code = main(["--root", str(tmp_path), "check", "greet"])

    assert code == EXIT_ERROR
    assert "No symbol registry found" in capsys.readouterr().err


def test_check_with_corrupt_registry(tmp_path, capsys):
    (tmp_path / ".wisdom").mkdir()
    (tmp_path / ".wisdom" / "symbols.json").write_text("[]", encoding="utf-8")

    assert main(["--root", str(tmp_path), "check", "greet"]) == EXIT_ERROR
    assert "unreadable" in capsys.readouterr().err


def test_check_with_non_utf8_registry(tmp_path, capsys):
    (tmp_path / ".wisdom").mkdir()
    (tmp_path / ".wisdom" / "symbols.json").write_bytes(b"\xff\xfe")

    assert main(["--root", str(tmp_path), "check", "greet"]) == EXIT_ERROR
    assert "not UTF-8" in capsys.readouterr().err


def test_routes(scanned_project, capsys):
    assert main(["--root", str(scanned_project), "routes", "/api/users/7"]) == EXIT_OK
    code = main(["--root", str(scanned_project), "routes", "/api/users/7", "/api/teams"])

    assert code == EXIT_FINDINGS
    assert "- /api/teams" in capsys.readouterr().out


def test_overview(scanned_project, capsys):
    assert main(["--root", str(scanned_project), "overview"]) == EXIT_OK
    assert capsys.readouterr().out.startswith("# Project Overview")


def test_check_content_diff_from_stdin(scanned_project, monkeypatch, capsys):
    target = scanned_project / "src" / "page.js"
    target.write_text("greet('a');\ngrete('b');\n", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.StringIO("grete('b');\n"))

    code = main(["--root", str(scanned_project), "check-content", "src/page.js", "--diff-only"])

    assert code == EXIT_FINDINGS
    assert "grete -> did you mean greet?" in capsys.readouterr().err


def test_check_content_clean(scanned_project):
    target = scanned_project / "src" / "page.js"
    target.write_text("greet('a');\n", encoding="utf-8")

    assert main(["--root", str(scanned_project), "check-content", str(target)]) == EXIT_OK


def test_missing_root(tmp_path, capsys):
    assert main(["--root", str(tmp_path / "nope"), "overview"]) == EXIT_ERROR
    assert "Project root not found" in capsys.readouterr().err


def test_invalid_configuration(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("SENTINEL_MAX_FILES", "many")

    assert main(["--root", str(tmp_path), "scan"]) == EXIT_ERROR
    assert "SENTINEL_MAX_FILES" in capsys.readouterr().err
