# prpromptbuilder/core/payload_builder.py

import math
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from .models import FilePatch

# Files beyond these sizes get an explicit reason when left out of the payload
MAX_PATCH_LINES = 400
MAX_PATCH_BYTES = 100_000

MANIFEST_HEADER = "### files changed ({count})"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_omission_reason(meta: Optional[FilePatch]) -> Optional[str]:
    """
    Explains why a file's diff is likely to have been left out.

    Checked in priority order: binary, line count, byte size. Returns None when
    there is no metadata or the file is unremarkable.
    """
    if meta is None:
        return None
    if meta.is_binary:
        return "binary file"
    if meta.line_count > MAX_PATCH_LINES:
        return f"{meta.line_count} lines"
    if meta.byte_count > MAX_PATCH_BYTES:
        return f"{_round_half_up(meta.byte_count / 1024)} KB"
    return None


def _manifest_line(path: str, selected: bool, meta: Optional[FilePatch]) -> str:
    if selected:
        return f"- {path}"
    reason = get_omission_reason(meta)
    if reason:
        return f"- {path} _({reason} – diff omitted)_"
    return f"- {path} _(diff omitted)_"


def build_clipboard_payload(
    selected_files: Set[str],
    all_files: Iterable[str],
    patches: Dict[str, FilePatch],
) -> str:
    """
    Builds the manifest + body text for a user-chosen subset of a diff's files.

    The manifest lists every file (sorted by code point), marking unselected ones
    as omitted. The body holds the trimmed patch of each selected file, also in
    sorted order.
    """
    sorted_all: List[str] = sorted(all_files)

    header_lines = [MANIFEST_HEADER.format(count=len(sorted_all))]
    for path in sorted_all:
        header_lines.append(_manifest_line(path, path in selected_files, patches.get(path)))

    patch_contents = [
        patches[path].patch.strip()
        for path in sorted_all
        if path in selected_files and path in patches
    ]

    logger.debug(f"Payload: {len(patch_contents)} of {len(sorted_all)} file patch(es) included.")
    return ("\n".join(header_lines) + "\n\n" + "\n".join(patch_contents)).strip()


def format_file_selection_label(selected_count: int, total_count: int) -> str:
    """Short summary shown next to a diff block, e.g. "(3 of 5 files)"."""
    if total_count == 0:
        return "(No files in diff)"
    if selected_count == total_count:
        return f"(All {total_count} files)"
    return f"({selected_count} of {total_count} files)"
