# prpromptbuilder/core/template_renderer.py
"""
Prompt template handling.

Templates are plain text with `{{NAME}}` slots. Two extra markers say where
the selected diff goes: the legacy placeholder sentence and the
`{{DIFF_CONTENT}}` token.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from loguru import logger

DIFF_PLACEHOLDER_TEXT = "(diff content here, possibly empty if not selected for template)"
DIFF_TOKEN_TEXT = "{{DIFF_CONTENT}}"

_TOKEN_ONLY_LINE = re.compile(r"^\s*\{\{\w+\}\}\s*$")
# Two or more blank (or whitespace-only) lines in a row
_BLANK_LINE_RUN = re.compile(r"\n(?:[ \t]*\n){2,}")
_FILES_LIST_SECTION = re.compile(
    r"^###\s*files changed\s*\(\d+\)[^\r\n]*[\r\n]+(?:^[\t ]*[-*]\s+.*\s*[\r\n]*)+",
    re.IGNORECASE | re.MULTILINE,
)


class InjectionMarker(Enum):
    """Places in a template where diff content may be injected, in priority order."""
    PLACEHOLDER = DIFF_PLACEHOLDER_TEXT
    TOKEN = DIFF_TOKEN_TEXT


def find_injection_markers(template: str) -> List[InjectionMarker]:
    """Returns the markers present in `template`, highest priority first."""
    return [marker for marker in InjectionMarker if marker.value in template]


def inject_diff_content(template: str, diff_payload: str) -> Tuple[bool, str]:
    """
    Puts `diff_payload` at the template's diff marker.

    The first occurrence of the highest-priority marker receives the payload;
    every other marker occurrence (of either kind) is removed, so the payload
    appears exactly once.

    Returns:
        (injected, result). When no marker exists the template comes back
        unchanged with injected=False.
    """
    markers = find_injection_markers(template)
    if not markers:
        return False, template

    primary = markers[0]
    before, after = template.split(primary.value, 1)
    for marker in markers:
        before = before.replace(marker.value, "")
        after = after.replace(marker.value, "")
    logger.trace(f"Injecting diff payload at {primary.name} marker.")
    return True, before + diff_payload + after


def render_template(template: str, slots: Mapping[str, Optional[str]]) -> str:
    """
    Substitutes `{{name}}` slots and tidies the whitespace they leave behind.

    - Slot values are trimmed; None counts as an empty string.
    - A line that held a slot and is blank after substitution is dropped.
      Multi-line values are filtered line by line, so a blank line inside a
      value is dropped too.
    - A line consisting only of an unreplaced `{{TOKEN}}` is dropped, including
      one brought in by a slot value.
    - Runs of blank lines collapse to a single blank line.
    - The result is trimmed.

    Rendering an already rendered template with the same slots is a no-op.
    """
    rendered_lines: List[str] = []
    for line in template.split("\n"):
        had_slot = False
        for name, value in slots.items():
            token = "{{" + name + "}}"
            if token in line:
                had_slot = True
                line = line.replace(token, (value or "").strip())
        for piece in line.split("\n"):
            if had_slot and not piece.strip():
                continue
            if _TOKEN_ONLY_LINE.match(piece):
                continue
            rendered_lines.append(piece)

    out = _BLANK_LINE_RUN.sub("\n\n", "\n".join(rendered_lines))
    return out.strip()


@dataclass
class TemplateMeta:
    """Which standard slots a template expects."""
    expects_files_list: bool
    expects_setup: bool
    expects_link: bool
    expects_pr_details: bool
    expects_pr_details_block: bool
    expects_diff_content: bool


def analyse_template(template: str) -> TemplateMeta:
    return TemplateMeta(
        expects_files_list="{{FILES_LIST}}" in template,
        expects_setup="{{SETUP}}" in template,
        expects_link="{{LINK}}" in template,
        expects_pr_details="{{PR_DETAILS}}" in template,
        expects_pr_details_block="{{prDetailsBlock}}" in template,
        expects_diff_content=DIFF_TOKEN_TEXT in template,
    )


def is_standard(meta: TemplateMeta) -> bool:
    """
    A standard template has SETUP, LINK, FILES_LIST and DIFF_CONTENT, plus
    exactly one of the two PR details tokens.
    """
    has_required = (
        meta.expects_setup
        and meta.expects_link
        and meta.expects_files_list
        and meta.expects_diff_content
    )
    return has_required and (meta.expects_pr_details != meta.expects_pr_details_block)


def strip_files_list_section(text: Optional[str]) -> str:
    """
    Removes a `### files changed (N)` header and its bullet list from `text`.

    Used on PR bodies so they cannot duplicate the manifest built from the diff.
    """
    if not text:
        return ""
    return _FILES_LIST_SECTION.sub("", text).strip()
