# prpromptbuilder/core/models.py

from __future__ import annotations # Allows using Literal without quotes

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Set, Union, Literal

LaunchMode = Literal["workspace", "folder"]
PromptMode = Literal["implement", "review", "adjust-pr", "respond"]
TokenBackend = Literal["openai", "gemini"]


@dataclass
class FilePatch:
    """One file's contribution to a unified diff."""
    path: str          # post-change ("b/") path
    patch: str         # verbatim text from its `diff --git` line up to the next file
    line_count: int = 0  # added + removed content lines (0 for binary files)
    byte_count: int = 0  # UTF-8 length of `patch`
    is_binary: bool = False


@dataclass
class DiffBlock:
    """A raw (possibly multi-file) diff shown as one prompt section."""
    id: str
    header: str
    patch: str
    kind: Literal["diff"] = field(default="diff", init=False)


@dataclass
class CommentBlock:
    """
    A PR comment or a grouped review thread.

    `thread_id` set means the block represents a thread; `resolved` is only
    meaningful in that case. `comment_body` is already formatted text.
    """
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
    kind: Literal["comment"] = field(default="comment", init=False)

    @property
    def is_resolved_thread(self) -> bool:
        return bool(self.thread_id) and self.resolved is True


PromptBlock = Union[DiffBlock, CommentBlock]


@dataclass
class IndividualComment:
    """A single review comment before it is folded into a thread block."""
    id: str
    comment_body: str
    author: str
    timestamp: str
    author_avatar_url: Optional[str] = None


@dataclass
class ResolvedPullMeta:
    """Pull request metadata needed to open RepoPrompt on the right checkout."""
    owner: str
    repo: str
    branch: str
    files: List[str]
    root_path: str


@dataclass
class SelectionState:
    """
    Which blocks (and, for the active diff block, which files) go into the prompt.

    Built by `compute_default_selection` when the block list is (re)established
    and mutated only through the methods below in between.
    """
    selected_block_ids: Set[str] = field(default_factory=set)
    expanded: Dict[str, bool] = field(default_factory=dict)
    active_diff_block_id: Optional[str] = None
    # None means "every file of the active diff"
    selected_file_paths: Optional[Set[str]] = None
    patches: Dict[str, FilePatch] = field(default_factory=dict)
    all_files: List[str] = field(default_factory=list)
    has_picked_files: bool = False

    def is_selected(self, block_id: str) -> bool:
        return block_id in self.selected_block_ids

    def toggle_block(self, block_id: str) -> None:
        if block_id in self.selected_block_ids:
            self.selected_block_ids.discard(block_id)
        else:
            self.selected_block_ids.add(block_id)

    def toggle_expanded(self, block_id: str) -> None:
        self.expanded[block_id] = not self.expanded.get(block_id, True)

    def confirm_file_selection(self, paths: Set[str]) -> None:
        """Applies the file picker's choice to the active diff block."""
        self.selected_file_paths = set(paths)
        self.has_picked_files = True

    def effective_file_selection(self) -> Set[str]:
        if self.selected_file_paths is None:
            return set(self.all_files)
        return self.selected_file_paths
