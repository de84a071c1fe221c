"""
Text normalization module for text reconstruction.

Runs once over the assembled document text:
- Hyphenation merge ("exam-\\nple" -> "example")
- Hard-wrap merge (wrapped lines back into paragraphs)
- Blank line collapse
- Title and footer framing
"""

import logging
import re
from pathlib import PurePath
from typing import List, Optional, Union

from ..config import OutputConfig
from .cancel import CANCELLED, Cancelled, CancellationPoller, CancellationToken
from .line_text import first_visible_char, last_visible_char, should_insert_space

logger = logging.getLogger(__name__)


# Letter/digit, hyphen, line break, letter/digit. Look-arounds let chains
# like "a-\nb-\nc" merge in a single pass.
HYPHEN_BREAK_PATTERN = re.compile(r"(?<=[^\W_])-\n(?=[^\W_])")
HEADING_PATTERN = re.compile(r"^\s*#+\s")
LIST_PATTERN = re.compile(r"^\s*(?:[-*•●]|\d+\.)\s+")
HARD_STOP_PATTERN = re.compile(r"[.!?。！？]$")
TRAILING_DASH_PATTERN = re.compile(r"[-–—]$")
BLANK_RUN_PATTERN = re.compile(r"\n{3,}")
EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")


# ============================================================================
# Line Predicates
# ============================================================================

def is_heading(line: str) -> bool:
    return HEADING_PATTERN.match(line) is not None


def is_list_item(line: str) -> bool:
    return LIST_PATTERN.match(line) is not None


def ends_sentence(line: str) -> bool:
    stripped = line.rstrip()
    return HARD_STOP_PATTERN.search(stripped) is not None and TRAILING_DASH_PATTERN.search(stripped) is None


# ============================================================================
# Passes
# ============================================================================

def merge_hyphenation(text: str) -> str:
    """Join words broken by a hyphen at the end of a line."""
    return HYPHEN_BREAK_PATTERN.sub("", text)


def join_wrapped_lines(buffer: str, current: str) -> str:
    """
    Append a wrapped continuation to the paragraph buffer.

    A list item continued by plain text keeps CJK runs unspaced; everything
    else joins with one space.
    """
    if is_list_item(buffer) and not is_list_item(current) and not is_heading(current):
        joiner = " " if should_insert_space(last_visible_char(buffer), first_visible_char(current)) else ""
        return buffer + joiner + current.strip()
    return buffer + " " + current


def merge_hard_wraps(
    text: str,
    token: Optional[CancellationToken] = None,
    check_interval: int = 200
) -> Union[str, Cancelled]:
    """
    Re-join lines broken by the page width into paragraphs.

    A line starts a new output line when either it or the buffer is blank,
    a heading or a list item, or when the buffer ends a sentence.
    """
    lines = text.split("\n")
    poller = CancellationPoller(token, check_interval)
    merged: List[str] = []
    buffer = lines[0]

    for current in lines[1:]:
        if poller.tick():
            logger.info("Line merge cancelled")
            return CANCELLED

        flush = (
            not buffer.strip()
            or not current.strip()
            or is_heading(buffer)
            or is_heading(current)
            or is_list_item(buffer)
            or is_list_item(current)
            or ends_sentence(buffer)
        )
        if flush:
            merged.append(buffer)
            buffer = current
        else:
            buffer = join_wrapped_lines(buffer, current)

    if buffer:
        merged.append(buffer)
    return "\n".join(merged)


def collapse_blank_lines(text: str) -> str:
    """Reduce any run of blank lines to a single paragraph separator."""
    return BLANK_RUN_PATTERN.sub("\n\n", text)


def normalize_text(
    lines: List[str],
    token: Optional[CancellationToken] = None,
    check_interval: int = 200
) -> Union[str, Cancelled]:
    """
    Apply every normalization pass to the classified output lines.

    Returns:
        The document body, or CANCELLED
    """
    if token is not None and token.cancelled:
        return CANCELLED

    text = merge_hyphenation("\n".join(lines))
    text = merge_hard_wraps(text, token, check_interval)
    if text is CANCELLED:
        return CANCELLED
    return collapse_blank_lines(text)


# ============================================================================
# Framing
# ============================================================================

def title_from_name(source_name: Union[str, PurePath]) -> str:
    """Document title: the file name with its last extension stripped."""
    name = PurePath(str(source_name)).name or str(source_name)
    return EXTENSION_PATTERN.sub("", name)


def frame_document(body: str, title: str, config: Optional[OutputConfig] = None) -> str:
    """Prefix the title line and append the separator and footer."""
    config = config or OutputConfig()
    text = f"# {title}\n\n{body}"
    if not text.endswith("\n\n"):
        text += "\n\n"
    text += "---\n\n"
    text += "\n".join(config.footer_lines) + "\n\n"
    return text


def empty_document(title: str, config: Optional[OutputConfig] = None) -> str:
    """Placeholder output for documents without any text fragments."""
    config = config or OutputConfig()
    return f"# {title}\n\n{config.empty_notice}"
