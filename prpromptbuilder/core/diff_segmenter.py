# prpromptbuilder/core/diff_segmenter.py
"""
Splits a raw multi-file unified diff (as returned by GitHub for a PR or a
single commit) into per-file patches keyed by their post-change path.

The split is total: lines that do not look like diff syntax are carried
along with whichever file section is open, and anything before the first
`diff --git` line is dropped.
"""

from typing import Dict, List, Optional

from loguru import logger

from .models import FilePatch
from .diff_utils import match_file_header, contains_binary_marker, calculate_patch_line_changes


def _finalize_patch(path: str, patch_lines: List[str]) -> FilePatch:
    """Builds the FilePatch metadata for one accumulated file section."""
    patch = "\n".join(patch_lines)
    is_binary = contains_binary_marker(patch_lines)
    line_count = 0
    if not is_binary:
        added, deleted = calculate_patch_line_changes(patch_lines)
        line_count = added + deleted
    return FilePatch(
        path=path,
        patch=patch,
        line_count=line_count,
        byte_count=len(patch.encode("utf-8")),
        is_binary=is_binary,
    )


def split_unified_diff(diff_text: str) -> Dict[str, FilePatch]:
    """
    Parses a unified diff into an ordered mapping of path -> FilePatch.

    Args:
        diff_text: Raw `git diff` output, possibly covering many files.

    Returns:
        Dict[str, FilePatch]: Entries in the order the files appear in the diff.
        A path repeated later in the diff replaces the earlier entry.
    """
    patches: Dict[str, FilePatch] = {}
    if not diff_text or not diff_text.strip():
        return patches

    current_path: Optional[str] = None
    current_lines: List[str] = []
    discarded_preamble = 0

    for line in diff_text.split("\n"):
        header_path = match_file_header(line)
        if header_path is not None:
            if current_path:
                patches[current_path] = _finalize_patch(current_path, current_lines)
            current_path = header_path
            current_lines = [line]
        elif current_path:
            current_lines.append(line)
        else:
            discarded_preamble += 1

    if current_path:
        patches[current_path] = _finalize_patch(current_path, current_lines)

    if discarded_preamble:
        logger.trace(f"Discarded {discarded_preamble} line(s) before the first file header.")
    logger.debug(f"Split diff into {len(patches)} file patch(es).")
    return patches
