"""
Tests for the Typer command line (*cli.main*).

Logging is console-only (`--no-log-file`). Older click releases mix stderr
into `result.stdout`, so commands that log at INFO are checked by containment.
"""
from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from prpromptbuilder import __version__
from prpromptbuilder.cli.main import app
from prpromptbuilder.core.template_renderer import DIFF_TOKEN_TEXT

runner = CliRunner()


def _invoke(*args):
    return runner.invoke(app, ["--no-log-file", *args])


@pytest.fixture
def diff_file(tmp_path, two_file_diff):
    path = tmp_path / "pr.diff"
    path.write_text(two_file_diff, encoding="utf-8")
    return path


@pytest.fixture
def comments_file(tmp_path):
    path = tmp_path / "comments.json"
    path.write_text(json.dumps([
        {
            "id": "c1", "header": "### COMMENT by bob", "commentBody": "Please rename.",
            "author": "bob", "timestamp": "2024-01-01T00:00:00Z",
        },
        {
            "threadKey": "55", "path": "file1.txt", "line": 1, "resolved": True,
            "comments": [
                {"id": "9", "commentBody": "Old nit", "author": "amy", "timestamp": "2024-01-02T00:00:00Z"},
            ],
        },
    ]), encoding="utf-8")
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_files_lists_metadata(diff_file):
    result = _invoke("files", str(diff_file))
    assert result.exit_code == 0, result.output
    lines = [line for line in result.stdout.splitlines() if "\t" in line]
    assert lines[0].startswith("file1.txt\t1 lines\t")
    assert lines[1].startswith("file2.txt\t1 lines\t")


def test_payload_with_omitted_file(diff_file):
    result = _invoke("payload", str(diff_file), "--omit", "file2.txt")
    assert result.exit_code == 0, result.output
    assert "### files changed (2)\n- file1.txt\n- file2.txt _(diff omitted)_" in result.stdout
    assert "+content1" in result.stdout
    assert "+content2" not in result.stdout


def test_payload_writes_output_file(diff_file, tmp_path):
    out = tmp_path / "out" / "payload.md"
    result = _invoke("payload", str(diff_file), "--select", "file2.txt", "-o", str(out))
    assert result.exit_code == 0, result.output
    text = out.read_text(encoding="utf-8")
    assert "- file1.txt _(diff omitted)_\n- file2.txt" in text


def test_render_with_slots(tmp_path):
    tpl = tmp_path / "t.md"
    tpl.write_text("# {{TITLE}}\n{{EMPTY}}\n{{MISSING}}\nbody", encoding="utf-8")
    result = _invoke("render", str(tpl), "--slot", "TITLE=Hello", "--slot", "EMPTY=")
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "# Hello\nbody"


def test_render_rejects_bad_slot(tmp_path):
    tpl = tmp_path / "t.md"
    tpl.write_text("x", encoding="utf-8")
    result = _invoke("render", str(tpl), "--slot", "novalue")
    assert result.exit_code != 0


def test_assemble_injects_into_template(diff_file, comments_file, tmp_path):
    tpl = tmp_path / "t.md"
    tpl.write_text(f"### TASK\nFix it.\n\n{DIFF_TOKEN_TEXT}", encoding="utf-8")
    result = _invoke(
        "assemble", "--diff", str(diff_file), "--comments", str(comments_file),
        "--template", str(tpl), "--select-file", "file1.txt", "--text", "Be brief.",
    )
    assert result.exit_code == 0, result.output
    out = result.stdout.strip()
    assert "### TASK\nFix it.\n\n### files changed (2)" in out
    assert "+content2" not in out
    assert "### COMMENT by bob\nPlease rename." in out
    # resolved thread is left out by default
    assert "Old nit" not in out
    assert "### COMMENT by bob\nPlease rename.\n\nBe brief." in out


def test_assemble_include_resolved_and_exclude_block(diff_file, comments_file):
    result = _invoke(
        "assemble", "--diff", str(diff_file), "--comments", str(comments_file),
        "--no-template", "--include-resolved", "--exclude-block", "c1",
    )
    assert result.exit_code == 0, result.output
    out = result.stdout
    assert "### files changed (2)" in out
    assert "### THREAD ON file1.txt#L1 (1 comment)\n> _@amy · 2024-Jan-02_\n\nOld nit" in out
    assert "Please rename." not in out


def test_assemble_uses_mode_template_from_config(diff_file):
    result = _invoke("assemble", "--diff", str(diff_file), "--mode", "review")
    assert result.exit_code == 0, result.output
    assert "### TASK\nYou are reviewing" in result.stdout
    assert result.stdout.count("+content1") == 1


def test_assemble_nothing_to_send_fails():
    result = _invoke("assemble", "--no-template")
    assert result.exit_code == 1


def test_assemble_bad_comments_file(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")
    result = _invoke("assemble", "--comments", str(bad), "--text", "hi")
    assert result.exit_code == 1


def test_url_command():
    result = _invoke("url", "--repo", "acme/widgets", "--branch", "main", "--file", "a.py", "--root", "/src")
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "repoprompt://open?files=a.py&focus=true&workspace=widgets"


def test_url_rejects_bad_repo():
    result = _invoke("url", "--repo", "widgets", "--branch", "main")
    assert result.exit_code != 0


def test_assemble_count_tokens_offline(diff_file, monkeypatch):
    from prpromptbuilder.core import token_counter

    def encoding_for_model(name):
        raise OSError("offline")

    monkeypatch.setattr(token_counter.tiktoken, "encoding_for_model", encoding_for_model)
    result = _invoke("assemble", "--diff", str(diff_file), "--no-template", "--count-tokens")
    assert result.exit_code == 0, result.output
    assert "Prompt token count (openai)" in result.output


def test_assemble_ignores_unknown_file_paths(diff_file):
    result = _invoke(
        "assemble", "--diff", str(diff_file), "--no-template",
        "--select-file", "file1.txt", "--select-file", "nope.txt", "--omit-file", "ghost.txt",
    )
    assert result.exit_code == 0, result.output
    assert "(1 of 2 files)" in result.output
    assert "Ignoring --select-file paths not present in the diff: ['nope.txt']" in result.output
    assert "Ignoring --omit-file paths not present in the diff: ['ghost.txt']" in result.output
    assert "+content1" in result.stdout
    assert "+content2" not in result.stdout


def test_payload_ignores_unknown_selected_path(diff_file):
    result = _invoke("payload", str(diff_file), "--select", "file1.txt", "--select", "nope.txt")
    assert result.exit_code == 0, result.output
    assert "- nope.txt" not in result.stdout
    assert "### files changed (2)\n- file1.txt\n- file2.txt _(diff omitted)_" in result.stdout


def test_assemble_rejects_unknown_mode(diff_file):
    result = _invoke("assemble", "--diff", str(diff_file), "--mode", "rewrite")
    assert result.exit_code == 2
