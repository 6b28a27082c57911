"""
Unit-tests for *core.block_formatter*
"""
from __future__ import annotations

import pytest

from prpromptbuilder.core.models import CommentBlock, DiffBlock, IndividualComment
from prpromptbuilder.core.block_formatter import (
    SECTION_SEPARATOR,
    format_comment_date,
    format_prompt_block,
    format_single_comment,
    join_blocks,
    make_thread_block,
)


def _comment(id: str, author: str, timestamp: str, body: str) -> IndividualComment:
    return IndividualComment(id=id, comment_body=body, author=author, timestamp=timestamp)


# -----------------------------------------------------------------------------
# join_blocks
# -----------------------------------------------------------------------------
def test_join_drops_empty_and_whitespace_parts():
    assert join_blocks(["A", "", "  ", "B"]) == join_blocks(["A", "B"]) == "A\n\nB"


def test_join_right_trims_but_keeps_leading_whitespace():
    assert join_blocks(["  A  \n", "\tB\n\n"]) == "  A\n\n\tB"


@pytest.mark.parametrize("parts, expected", [([], ""), (["only"], "only"), (["", "only\n"], "only")])
def test_join_never_leaves_dangling_separator(parts, expected):
    assert join_blocks(parts) == expected


def test_separator_is_one_blank_line():
    assert SECTION_SEPARATOR == "\n\n"


# -----------------------------------------------------------------------------
# format_prompt_block
# -----------------------------------------------------------------------------
def test_diff_block_strips_trailing_whitespace_only():
    block = DiffBlock(id="d", header="### FULL PR DIFF", patch="  diff --git a/x b/x\n+x\n\n  ")
    assert format_prompt_block(block) == "### FULL PR DIFF\n  diff --git a/x b/x\n+x"


def test_comment_block_uses_body_verbatim():
    block = CommentBlock(id="c", header="### COMMENT", comment_body="> _@bob · 2024-Jan-01_\n\nhi", author="bob", timestamp="2024-01-01T00:00:00Z")
    assert format_prompt_block(block) == "### COMMENT\n> _@bob · 2024-Jan-01_\n\nhi"


def test_header_is_not_duplicated_when_formatting_twice():
    block = CommentBlock(id="c", header="### COMMENT", comment_body="hi", author="bob", timestamp="t")
    assert format_prompt_block(block).count("### COMMENT") == 1


# -----------------------------------------------------------------------------
# Comments and threads
# -----------------------------------------------------------------------------
@pytest.mark.parametrize(
    "timestamp, expected",
    [
        ("2024-01-05T10:00:00Z", "2024-Jan-05"),
        ("2023-12-31T23:30:00-02:00", "2024-Jan-01"),
        ("2024-07-09T00:00:00", "2024-Jul-09"),
        ("not a date", "not a date"),
    ],
)
def test_format_comment_date(timestamp, expected):
    assert format_comment_date(timestamp) == expected


def test_format_single_comment():
    comment = _comment("1", "alice", "2024-03-02T08:00:00Z", "  Looks good  \n")
    assert format_single_comment(comment) == "> _@alice · 2024-Mar-02_\n\nLooks good"


def test_make_thread_block_folds_comments():
    comments = [
        _comment("11", "alice", "2024-01-01T00:00:00Z", "Why?"),
        _comment("12", "bob", "2024-01-02T00:00:00Z", "Because."),
    ]
    block = make_thread_block("99", "src/app.py", 42, "@@ -1 +1 @@", comments, resolved=True)

    assert block.id == "thread-99-11"
    assert block.header == "### THREAD ON src/app.py#L42 (2 comments)"
    assert block.comment_body == (
        "> _@alice · 2024-Jan-01_\n\nWhy?\n\n"
        "> _@bob · 2024-Jan-02_\n\nBecause."
    )
    assert block.author == "bob"
    assert block.timestamp == "2024-01-02T00:00:00Z"
    assert block.thread_id == "99"
    assert block.resolved is True
    assert block.is_resolved_thread
    assert (block.file_path, block.line, block.diff_hunk) == ("src/app.py", 42, "@@ -1 +1 @@")


def test_single_comment_thread_header_is_singular():
    block = make_thread_block("7", "a.py", 1, None, [_comment("1", "a", "2024-01-01T00:00:00Z", "x")])
    assert block.header.endswith("(1 comment)")


def test_empty_thread_gets_placeholder():
    block = make_thread_block("7", "a.py", 3, None, [])
    assert block.header == "### EMPTY THREAD ON a.py#L3"
    assert block.comment_body == "_No comments in this thread._"
    assert block.thread_id == "7"
