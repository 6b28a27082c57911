# prpromptbuilder/core/prompt_assembler.py
"""
Merges a prompt template, the selected prompt blocks and the user's own text
into the final prompt string.

Selection lives in an explicit `SelectionState`: `compute_default_selection`
builds it whenever the block list is (re)established, and `assemble_prompt` /
`assemble_from_state` read it. Nothing here does I/O.
"""

from typing import AbstractSet, List, Optional, Sequence

from loguru import logger

from .models import CommentBlock, DiffBlock, PromptBlock, SelectionState
from .diff_segmenter import split_unified_diff
from .payload_builder import build_clipboard_payload, format_file_selection_label
from .block_formatter import format_prompt_block, join_blocks
from .template_renderer import inject_diff_content


def _is_resolved_thread(block: PromptBlock) -> bool:
    return isinstance(block, CommentBlock) and block.is_resolved_thread


def default_selected_ids(blocks: Sequence[PromptBlock]) -> set:
    """Every block except resolved comment threads."""
    return {block.id for block in blocks if not _is_resolved_thread(block)}


def compute_default_selection(
    blocks: Sequence[PromptBlock],
    preselected_ids: Optional[AbstractSet[str]] = None,
) -> SelectionState:
    """
    Builds the selection shown when the block list is (re)established.

    Resolved threads start unselected and collapsed; everything else starts
    selected and expanded. An explicit `preselected_ids` replaces the computed
    selection entirely (expansion still follows the resolved rule). The first
    diff block becomes the active one, with all of its files selected.
    """
    if preselected_ids is not None:
        selected = set(preselected_ids)
    else:
        selected = default_selected_ids(blocks)

    state = SelectionState(
        selected_block_ids=selected,
        expanded={block.id: not _is_resolved_thread(block) for block in blocks},
    )

    active = next((block for block in blocks if isinstance(block, DiffBlock)), None)
    if active is not None:
        state.active_diff_block_id = active.id
        state.patches = split_unified_diff(active.patch)
        state.all_files = list(state.patches)
        state.selected_file_paths = set(state.all_files)

    logger.debug(
        f"Default selection: {len(state.selected_block_ids)} of {len(blocks)} block(s), "
        f"active diff: {state.active_diff_block_id}"
    )
    return state


def _find_active_diff_block(
    blocks: Sequence[PromptBlock], active_diff_block_id: Optional[str]
) -> Optional[DiffBlock]:
    if active_diff_block_id is None:
        return None
    for block in blocks:
        if isinstance(block, DiffBlock) and block.id == active_diff_block_id:
            return block
    return None


def build_diff_payload(block: DiffBlock, selected_file_paths: Optional[AbstractSet[str]]) -> str:
    """Selective payload for a diff block; None selects every file."""
    patches = split_unified_diff(block.patch)
    all_files = list(patches)
    selected = set(all_files) if selected_file_paths is None else set(selected_file_paths)
    return build_clipboard_payload(selected_files=selected, all_files=all_files, patches=patches)


def assemble_prompt(
    template: str,
    user_text: str,
    blocks: Sequence[PromptBlock],
    selected_block_ids: AbstractSet[str],
    active_diff_block_id: Optional[str] = None,
    selected_file_paths: Optional[AbstractSet[str]] = None,
) -> str:
    """
    Produces the final prompt.

    The active diff block (if selected) contributes a selective payload that is
    injected at the template's diff marker. Without a marker, or without a
    template, the payload becomes its own section ahead of the other blocks.
    Diff content therefore appears at most once.
    """
    active = _find_active_diff_block(blocks, active_diff_block_id)

    diff_payload = ""
    if active is not None and active.id in selected_block_ids:
        diff_payload = build_diff_payload(active, selected_file_paths)

    non_diff_payload = join_blocks(
        format_prompt_block(block)
        for block in blocks
        if block.id in selected_block_ids and block is not active
    )

    template = (template or "").strip()
    extra = (user_text or "").strip()

    parts: List[str]
    if template:
        injected, rendered = inject_diff_content(template, diff_payload)
        if injected:
            parts = [rendered, non_diff_payload, extra]
        else:
            parts = [template, diff_payload, non_diff_payload, extra]
    else:
        parts = [diff_payload, non_diff_payload, extra]

    result = join_blocks(parts).rstrip()
    logger.debug(f"Assembled prompt: {len(result)} chars from {len(selected_block_ids)} selected block(s).")
    return result


def assemble_from_state(
    template: str,
    user_text: str,
    blocks: Sequence[PromptBlock],
    state: SelectionState,
) -> str:
    return assemble_prompt(
        template=template,
        user_text=user_text,
        blocks=blocks,
        selected_block_ids=state.selected_block_ids,
        active_diff_block_id=state.active_diff_block_id,
        selected_file_paths=state.selected_file_paths,
    )


def format_block_for_copy(block: PromptBlock, state: SelectionState) -> str:
    """Text for a "copy this section" action; the header is added exactly once."""
    if isinstance(block, DiffBlock) and block.id == state.active_diff_block_id:
        payload = build_clipboard_payload(
            selected_files=state.effective_file_selection(),
            all_files=state.all_files,
            patches=state.patches,
        )
        return f"{block.header}\n{payload}"
    return format_prompt_block(block)


def file_selection_label(state: SelectionState) -> str:
    return format_file_selection_label(len(state.effective_file_selection()), len(state.all_files))


def nothing_to_send(selected_block_ids: AbstractSet[str], template: str, user_text: str) -> bool:
    """Callers should refuse to copy/launch when this is True."""
    return (
        len(selected_block_ids) == 0
        and not (user_text or "").strip()
        and not (template or "").strip()
    )
