# prpromptbuilder/core/__init__.py

# Re-export core models and components for easier access
from .models import (
    FilePatch,
    DiffBlock,
    CommentBlock,
    PromptBlock,
    IndividualComment,
    ResolvedPullMeta,
    SelectionState,
    LaunchMode,
    PromptMode,
    TokenBackend,
)
from .diff_segmenter import split_unified_diff
from .payload_builder import build_clipboard_payload, get_omission_reason, format_file_selection_label
from .template_renderer import (
    DIFF_PLACEHOLDER_TEXT,
    DIFF_TOKEN_TEXT,
    InjectionMarker,
    inject_diff_content,
    render_template,
    analyse_template,
    is_standard,
    strip_files_list_section,
)
from .block_formatter import SECTION_SEPARATOR, join_blocks, format_prompt_block, format_single_comment, make_thread_block
from .prompt_assembler import (
    compute_default_selection,
    assemble_prompt,
    assemble_from_state,
    format_block_for_copy,
    file_selection_label,
    nothing_to_send,
)
from .repoprompt import build_repoprompt_url, build_repoprompt_text, format_diff_blocks_for_prompt

__all__ = [
    # Models
    "FilePatch", "DiffBlock", "CommentBlock", "PromptBlock", "IndividualComment",
    "ResolvedPullMeta", "SelectionState", "LaunchMode", "PromptMode", "TokenBackend",
    # Diff handling
    "split_unified_diff", "build_clipboard_payload", "get_omission_reason", "format_file_selection_label",
    # Templates
    "DIFF_PLACEHOLDER_TEXT", "DIFF_TOKEN_TEXT", "InjectionMarker", "inject_diff_content",
    "render_template", "analyse_template", "is_standard", "strip_files_list_section",
    # Blocks and assembly
    "SECTION_SEPARATOR", "join_blocks", "format_prompt_block", "format_single_comment", "make_thread_block",
    "compute_default_selection", "assemble_prompt", "assemble_from_state", "format_block_for_copy",
    "file_selection_label", "nothing_to_send",
    # RepoPrompt
    "build_repoprompt_url", "build_repoprompt_text", "format_diff_blocks_for_prompt",
]
