# prpromptbuilder/core/diff_utils.py

import re
from typing import List, Optional, Tuple

FILE_HEADER_PATTERN = re.compile(r"^diff --git a/(?:.*?) b/(.+)$")
BINARY_MARKER_PATTERN = re.compile(r"^Binary files .* and .* differ$")


def match_file_header(line: str) -> Optional[str]:
    """
    Returns the post-change ("b/") path if `line` opens a new file section.

    Returns None for any other line.
    """
    match = FILE_HEADER_PATTERN.match(line)
    if match is None:
        return None
    return match.group(1).strip()


def contains_binary_marker(patch_lines: List[str]) -> bool:
    """True if any line is a `Binary files ... and ... differ` marker."""
    return any(BINARY_MARKER_PATTERN.match(line) for line in patch_lines)


def calculate_patch_line_changes(patch_lines: List[str]) -> Tuple[int, int]:
    """
    Counts added/deleted content lines in a file patch.

    Args:
        patch_lines: Lines of one file's patch, headers included.

    Returns:
        Tuple[int, int]: Number of added lines, number of deleted lines.
    """
    added = 0
    deleted = 0
    for line in patch_lines:
        # '+++' / '---' are the file header lines, not content
        if line.startswith('+') and not line.startswith('+++'):
            added += 1
        elif line.startswith('-') and not line.startswith('---'):
            deleted += 1
    return added, deleted
