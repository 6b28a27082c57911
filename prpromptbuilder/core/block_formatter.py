# prpromptbuilder/core/block_formatter.py

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from loguru import logger

from .models import CommentBlock, DiffBlock, IndividualComment, PromptBlock

# Canonical separator between prompt sections
SECTION_SEPARATOR = "\n\n"

_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def join_blocks(parts: Iterable[str]) -> str:
    """
    Joins prompt sections with SECTION_SEPARATOR.

    Empty or whitespace-only parts are dropped and the rest are right-trimmed,
    so no separator is ever doubled or left dangling.
    """
    kept = [part.rstrip() for part in parts if part and part.strip()]
    return SECTION_SEPARATOR.join(kept)


def format_prompt_block(block: PromptBlock) -> str:
    """Renders one block as its header line followed by its content."""
    if isinstance(block, DiffBlock):
        return f"{block.header}\n{block.patch.rstrip()}"
    return f"{block.header}\n{block.comment_body}"


def format_comment_date(timestamp: str) -> str:
    """Formats an ISO timestamp as `YYYY-Mon-DD` in UTC, e.g. `2024-Jan-05`."""
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable comment timestamp {timestamp!r}; showing it verbatim.")
        return timestamp
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    utc = parsed.astimezone(timezone.utc)
    return f"{utc.year}-{_MONTHS[utc.month - 1]}-{utc.day:02d}"


def format_single_comment(comment: IndividualComment) -> str:
    """Attribution line, a blank line, then the comment text."""
    date_string = format_comment_date(comment.timestamp)
    return f"> _@{comment.author} · {date_string}_\n\n{comment.comment_body.strip()}"


def make_thread_block(
    thread_key: str,
    path: str,
    line: int,
    hunk: Optional[str],
    comments: List[IndividualComment],
    resolved: bool = False,
) -> CommentBlock:
    """
    Folds an already grouped, chronologically sorted thread into one CommentBlock.

    Block-level author and timestamp come from the last comment.
    """
    if not comments:
        logger.warning(f"Thread {thread_key} on {path}#L{line} has no comments.")
        now = datetime.now(timezone.utc).isoformat()
        return CommentBlock(
            id=f"emptythread-{thread_key}-{now}",
            header=f"### EMPTY THREAD ON {path}#L{line}",
            comment_body="_No comments in this thread._",
            author="unknown",
            timestamp=now,
            thread_id=thread_key,
            resolved=resolved,
            file_path=path,
            line=line,
            diff_hunk=hunk,
        )

    first_comment = comments[0]
    last_comment = comments[-1]
    plural = "s" if len(comments) > 1 else ""
    return CommentBlock(
        id=f"thread-{thread_key}-{first_comment.id}",
        header=f"### THREAD ON {path}#L{line} ({len(comments)} comment{plural})",
        comment_body=SECTION_SEPARATOR.join(format_single_comment(c) for c in comments),
        author=last_comment.author,
        timestamp=last_comment.timestamp,
        thread_id=thread_key,
        resolved=resolved,
        file_path=path,
        line=line,
        diff_hunk=hunk,
        author_avatar_url=last_comment.author_avatar_url,
    )
