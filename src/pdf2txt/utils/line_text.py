"""
Line text module for text reconstruction.

PDF-like sources rarely encode spaces reliably, so word boundaries are
inferred from the horizontal gaps between fragments:
- Adaptive word-gap threshold from the gap distribution of the line
- Script-aware spacing (no spaces between CJK characters)
- Recovery for sources that emit one fragment per glyph
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import SpacingConfig
from .fragments import Fragment

logger = logging.getLogger(__name__)


# Hiragana/Katakana, CJK Ext A, CJK Unified, CJK Compatibility, Hangul
# Syllables, CJK Ext B-F and Compatibility Supplement
CJK_PATTERN = re.compile(
    "[\u3040-\u30FF\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF\uAC00-\uD7AF"
    "\U00020000-\U0002FA1F]"
)
SPACE_RUN_PATTERN = re.compile(r"[ \t]+")


# ============================================================================
# Character Helpers
# ============================================================================

def is_cjk_char(ch: str) -> bool:
    return bool(ch) and CJK_PATTERN.match(ch) is not None


def first_visible_char(text: str) -> str:
    for ch in text:
        if ch.strip():
            return ch
    return ""


def last_visible_char(text: str) -> str:
    for ch in reversed(text):
        if ch.strip():
            return ch
    return ""


def should_insert_space(prev_char: str, next_char: str) -> bool:
    """Spaces separate words except between two CJK characters."""
    if not prev_char or not next_char:
        return True
    return not (is_cjk_char(prev_char) and is_cjk_char(next_char))


# ============================================================================
# Gap Statistics
# ============================================================================

@dataclass
class GapStats:
    """Word-gap statistics for one line."""
    base_threshold: float
    median_gap: float
    p90_gap: float
    sample_count: int
    threshold: float
    single_char_rate: float


def horizontal_gaps(fragments: Sequence[Fragment]) -> List[float]:
    """Positive gaps between adjacent fragments in x order."""
    gaps = []
    for prev, curr in zip(fragments, fragments[1:]):
        gap = curr.x - prev.right
        if gap > 0:
            gaps.append(gap)
    return gaps


def compute_gap_stats(
    fragments: Sequence[Fragment],
    config: Optional[SpacingConfig] = None
) -> GapStats:
    """
    Derive the word-gap threshold for a line's non-whitespace fragments.

    With enough samples, a bimodal distribution (letter spacing mixed with
    word spacing) splits at the midpoint of median and p90; a unimodal one
    uses a multiple of the median. The threshold never drops below a base
    derived from the average character width.
    """
    config = config or SpacingConfig()

    widths = [f.width for f in fragments if len(f.text) > 0]
    total_chars = sum(len(f.text) for f in fragments)
    avg_char_width = sum(widths) / total_chars if total_chars else 0.0
    base = avg_char_width * config.base_threshold_ratio if avg_char_width else config.fallback_base_threshold

    gaps = np.sort(np.asarray(horizontal_gaps(fragments), dtype=float))
    n = len(gaps)
    median_gap = float(gaps[n // 2]) if n else 0.0
    p90_gap = float(gaps[int(n * config.gap_percentile)]) if n else 0.0

    threshold = base
    if n >= config.min_gap_samples:
        if p90_gap > median_gap * config.bimodal_ratio:
            threshold = max(base, (median_gap + p90_gap) / 2)
        elif median_gap > 0:
            threshold = max(base, median_gap * config.median_gap_ratio)

    single_chars = sum(1 for f in fragments if len(f.text) == 1)
    single_char_rate = single_chars / len(fragments) if fragments else 0.0

    return GapStats(
        base_threshold=base,
        median_gap=median_gap,
        p90_gap=p90_gap,
        sample_count=n,
        threshold=threshold,
        single_char_rate=single_char_rate
    )


# ============================================================================
# Line Building
# ============================================================================

def join_fragments(fragments: Sequence[Fragment], threshold: float) -> str:
    """
    Concatenate fragments, inserting a space at explicit whitespace markers
    and at gaps wider than ``threshold``.
    """
    result = ""
    prev: Optional[Fragment] = None

    for fragment in fragments:
        if fragment.is_whitespace:
            if not result.endswith(" "):
                result += " "
            prev = None
            continue

        if prev is not None:
            gap = fragment.x - prev.right
            if gap > threshold and not result.endswith(" "):
                if should_insert_space(last_visible_char(result), first_visible_char(fragment.text)):
                    result += " "

        result += fragment.text
        prev = fragment

    return SPACE_RUN_PATTERN.sub(" ", result).strip()


def build_line_text(
    fragments: Sequence[Fragment],
    config: Optional[SpacingConfig] = None
) -> str:
    """
    Build the text of one visual line.

    Args:
        fragments: The line's fragments, ordered by x
        config: Spacing heuristics

    Returns:
        Trimmed text with inferred word spacing
    """
    config = config or SpacingConfig()

    cleaned = [f for f in fragments if f.text and (f.text.strip() or f.is_whitespace)]
    if not cleaned:
        return ""

    non_space = [f for f in cleaned if not f.is_whitespace]
    stats = compute_gap_stats(non_space, config)

    line = join_fragments(cleaned, stats.threshold)

    if (" " not in line
            and stats.single_char_rate > config.single_char_rate
            and stats.median_gap > 0):
        recovery = max(
            stats.base_threshold * config.recovery_base_ratio,
            stats.median_gap * config.recovery_median_ratio
        )
        logger.debug(f"Rebuilding glyph-per-fragment line with threshold {recovery:.2f}")
        line = join_fragments(cleaned, recovery)

    return line
