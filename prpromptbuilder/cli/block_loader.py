# prpromptbuilder/cli/block_loader.py

import json
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..core.models import CommentBlock, DiffBlock, IndividualComment
from ..core.block_formatter import make_thread_block

PR_DIFF_HEADER = "### FULL PR DIFF"


class BlockLoadError(Exception):
    """Raised when a comments file cannot be read or does not validate."""
    pass


class _CamelModel(BaseModel):
    # Accept both the GitHub-ish camelCase export and snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentSpec(_CamelModel):
    id: str
    header: str
    comment_body: str
    author: str
    timestamp: str
    thread_id: Optional[str] = None
    resolved: Optional[bool] = None
    file_path: Optional[str] = None
    line: Optional[int] = None
    diff_hunk: Optional[str] = None
    author_avatar_url: Optional[str] = None

    def to_block(self) -> CommentBlock:
        return CommentBlock(**self.model_dump())


class ThreadCommentSpec(_CamelModel):
    id: str
    comment_body: str
    author: str
    timestamp: str
    author_avatar_url: Optional[str] = None


class ThreadSpec(_CamelModel):
    """A review thread whose comments still need folding into one block."""
    thread_key: str
    path: str
    line: int
    diff_hunk: Optional[str] = None
    resolved: bool = False
    comments: List[ThreadCommentSpec] = Field(default_factory=list)

    def to_block(self) -> CommentBlock:
        comments = sorted(
            (IndividualComment(**c.model_dump()) for c in self.comments),
            key=lambda c: c.timestamp,
        )
        return make_thread_block(self.thread_key, self.path, self.line, self.diff_hunk, comments, resolved=self.resolved)


def _parse_entry(entry: dict) -> Union[CommentSpec, ThreadSpec]:
    if "comments" in entry:
        return ThreadSpec.model_validate(entry)
    return CommentSpec.model_validate(entry)


def load_comment_blocks(path: Path) -> List[CommentBlock]:
    """
    Reads comment blocks from a JSON array.

    Entries with a `comments` list are threads and get folded with
    `make_thread_block`; other entries are taken as ready-made comment blocks.

    Raises:
        BlockLoadError: On unreadable files, invalid JSON or invalid entries.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise BlockLoadError(f"Could not read comments from {path}: {e}") from e

    if not isinstance(data, list):
        raise BlockLoadError(f"Comments file {path} must contain a JSON array.")

    blocks: List[CommentBlock] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise BlockLoadError(f"Entry {index} in {path} is not an object.")
        try:
            blocks.append(_parse_entry(entry).to_block())
        except ValidationError as e:
            raise BlockLoadError(f"Entry {index} in {path} is invalid: {e}") from e

    logger.info(f"Loaded {len(blocks)} comment block(s) from {path}")
    return blocks


def make_diff_blocks(diff_texts: Sequence[str], headers: Optional[Sequence[str]] = None) -> List[DiffBlock]:
    """
    Wraps raw diffs as DiffBlocks with ids `diff-1`, `diff-2`, ...

    Missing headers default to the full-PR header for the first diff and a
    numbered header for the rest.
    """
    headers = list(headers or [])
    blocks: List[DiffBlock] = []
    for index, text in enumerate(diff_texts):
        if index < len(headers):
            header = headers[index]
        elif index == 0:
            header = PR_DIFF_HEADER
        else:
            header = f"### DIFF {index + 1}"
        blocks.append(DiffBlock(id=f"diff-{index + 1}", header=header, patch=text))
    return blocks
