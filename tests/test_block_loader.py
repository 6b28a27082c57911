"""
Unit-tests for *cli.block_loader*
"""
from __future__ import annotations

import json

import pytest

from prpromptbuilder.cli.block_loader import BlockLoadError, load_comment_blocks, make_diff_blocks


def _write(tmp_path, data) -> object:
    path = tmp_path / "comments.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_camel_and_snake_case_entries(tmp_path):
    path = _write(tmp_path, [
        {"id": "a", "header": "H1", "commentBody": "one", "author": "x", "timestamp": "t", "filePath": "f.py"},
        {"id": "b", "header": "H2", "comment_body": "two", "author": "y", "timestamp": "t"},
    ])
    first, second = load_comment_blocks(path)
    assert (first.id, first.comment_body, first.file_path) == ("a", "one", "f.py")
    assert (second.id, second.comment_body) == ("b", "two")
    assert first.kind == "comment"


def test_thread_entries_are_folded_in_time_order(tmp_path):
    path = _write(tmp_path, [{
        "threadKey": "7", "path": "src/app.py", "line": 12, "diffHunk": "@@ -1 +1 @@", "resolved": True,
        "comments": [
            {"id": "2", "commentBody": "Done.", "author": "bob", "timestamp": "2024-03-02T10:00:00Z"},
            {"id": "1", "commentBody": "Rename?", "author": "amy", "timestamp": "2024-03-01T10:00:00Z"},
        ],
    }])
    (block,) = load_comment_blocks(path)
    assert block.id == "thread-7-1"
    assert block.header == "### THREAD ON src/app.py#L12 (2 comments)"
    assert block.comment_body == (
        "> _@amy · 2024-Mar-01_\n\nRename?\n\n"
        "> _@bob · 2024-Mar-02_\n\nDone."
    )
    assert block.author == "bob"
    assert block.is_resolved_thread


@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        {"not": "a list"},
        ["just a string"],
        [{"id": "x", "header": "H"}],
        [{"threadKey": "1", "path": "p", "comments": []}],
    ],
)
def test_invalid_files_raise_block_load_error(tmp_path, content):
    with pytest.raises(BlockLoadError):
        load_comment_blocks(_write(tmp_path, content))


def test_missing_file_raises_block_load_error(tmp_path):
    with pytest.raises(BlockLoadError):
        load_comment_blocks(tmp_path / "absent.json")


def test_make_diff_blocks_headers():
    blocks = make_diff_blocks(["d1", "d2", "d3"], ["### MAIN"])
    assert [b.id for b in blocks] == ["diff-1", "diff-2", "diff-3"]
    assert [b.header for b in blocks] == ["### MAIN", "### DIFF 2", "### DIFF 3"]
    assert make_diff_blocks(["d"])[0].header == "### FULL PR DIFF"
