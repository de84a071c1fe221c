"""
Structure classification module for text reconstruction.

Provides:
- Heading level detection from font size
- List item detection and bullet normalization
- Paragraph breaks and section rules from vertical spacing
- Cross-page detection of page furniture (page numbers, running
  headers and footers)

Precedence is explicit in the rule tables below: page furniture is dropped
before any other rule runs, and list rules override heading rules.
"""

import logging
import math
import re
import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Dict, Any, Callable, Pattern, Sequence, Set

from ..config import StructureConfig
from .lines import LineRecord
from .stats import DocumentStatistics

logger = logging.getLogger(__name__)

RULE_MARKER = "---"


# ============================================================================
# Rule Tables
# ============================================================================

@dataclass(frozen=True)
class ListRule:
    """A list marker pattern and the text that replaces the marker."""
    name: str
    pattern: Pattern
    replacement: Optional[str] = None  # None keeps the text unchanged


@dataclass(frozen=True)
class HeadingRule:
    """Minimum line height (from document statistics) for a heading level."""
    level: int
    threshold: Callable[[DocumentStatistics], float]


LIST_RULES: Tuple[ListRule, ...] = (
    ListRule("bullet", re.compile(r"^[•●\-]\s*"), "- "),
    ListRule("ordered", re.compile(r"^\d+\.")),
)

HEADING_RULES: Tuple[HeadingRule, ...] = (
    HeadingRule(2, lambda stats: stats.sub_header_threshold),
    HeadingRule(3, lambda stats: stats.header_threshold),
)

# Any list-looking line, after bullet normalization
LIST_ITEM_PATTERN = re.compile(r"^(?:[-*•●]|\d+\.)")


@dataclass
class ClassifiedLine:
    """A line's text with its structural role."""
    text: str
    level: int = 0  # 0 = body text, 2 = ##, 3 = ###
    is_list: bool = False

    @property
    def prefix(self) -> str:
        return "#" * self.level + " " if self.level else ""

    @property
    def is_heading(self) -> bool:
        return self.level > 0

    def render(self) -> str:
        return self.prefix + self.text


def heading_level(max_height: float, stats: DocumentStatistics) -> int:
    for rule in HEADING_RULES:
        if max_height >= rule.threshold(stats):
            return rule.level
    return 0


def classify_line(text: str, max_height: float, stats: DocumentStatistics) -> ClassifiedLine:
    """
    Assign a heading level and list role to one line of text.

    A line matching a list rule never becomes a heading.
    """
    line = ClassifiedLine(text=text, level=heading_level(max_height, stats))

    for rule in LIST_RULES:
        if rule.pattern.match(line.text):
            if rule.replacement is not None:
                line.text = rule.pattern.sub(rule.replacement, line.text, count=1)
            line.level = 0
            break

    line.is_list = LIST_ITEM_PATTERN.match(line.text) is not None
    return line


# ============================================================================
# Page Furniture
# ============================================================================

def normalize_page_marker(text: str) -> str:
    """
    Reduce a line to a position-independent signature.

    Lower-cases, drops punctuation and symbols, collapses every run of
    numerals to a single ``0`` and removes whitespace, so "Page 9 of 12"
    and "Page 10 of 12" share a signature.
    """
    kept = []
    for ch in text.lower():
        category = unicodedata.category(ch)
        if category[0] in ("P", "S"):
            continue
        kept.append("0" if category[0] == "N" else ch)
    normalized = re.sub(r"0+", "0", "".join(kept))
    return re.sub(r"\s+", "", normalized)


@dataclass
class FurnitureCluster:
    """Lines sharing a marker signature, band and y bucket."""
    pages: Set[int] = field(default_factory=set)
    indices: List[int] = field(default_factory=list)


def detect_page_furniture(
    records: Sequence[LineRecord],
    stats: DocumentStatistics,
    config: Optional[StructureConfig] = None
) -> Set[int]:
    """
    Find lines that repeat across pages in the top or bottom band.

    Only lines smaller than body text are candidates. A cluster recurring on
    at least ``max(2, ceil(page_count * 0.4))`` pages is page furniture.

    Returns:
        Indices into ``records`` of the lines to drop
    """
    config = config or StructureConfig()
    bucket_size = max(config.furniture_min_bucket, stats.body_height * config.furniture_bucket_ratio)
    max_height = stats.body_height * config.furniture_max_font_ratio
    clusters: Dict[Tuple[str, str, int], FurnitureCluster] = defaultdict(FurnitureCluster)

    for index, record in enumerate(records):
        if not record.text:
            continue
        page_height = stats.page_height(record.page)
        if not page_height:
            continue

        band_size = page_height * config.furniture_band_ratio
        if record.y <= band_size:
            band = "top"
        elif record.y >= page_height - band_size:
            band = "bottom"
        else:
            continue

        if record.max_fragment_height >= max_height:
            continue

        signature = normalize_page_marker(record.text)
        if not signature:
            continue

        y_bucket = math.floor(record.y / bucket_size + 0.5)
        cluster = clusters[(signature, band, y_bucket)]
        cluster.pages.add(record.page)
        cluster.indices.append(index)

    min_repeat = max(
        config.furniture_min_repeat,
        math.ceil(stats.page_count * config.furniture_min_repeat_ratio)
    )

    furniture: Set[int] = set()
    for (signature, band, _), cluster in clusters.items():
        if len(cluster.pages) >= min_repeat:
            logger.debug(f"Page furniture {signature!r} ({band}) on {len(cluster.pages)} pages")
            furniture.update(cluster.indices)

    if furniture:
        logger.info(f"Suppressing {len(furniture)} page furniture lines")
    return furniture


# ============================================================================
# Document Classification
# ============================================================================

@dataclass
class StructureResult:
    """Output lines plus counts for metrics."""
    lines: List[str] = field(default_factory=list)
    furniture: Set[int] = field(default_factory=set)
    headings: Dict[int, int] = field(default_factory=dict)
    list_items: int = 0
    rules: int = 0
    paragraph_breaks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lines": len(self.lines),
            "suppressed_lines": len(self.furniture),
            "headings": {f"h{level}": count for level, count in sorted(self.headings.items())},
            "list_items": self.list_items,
            "rules": self.rules,
            "paragraph_breaks": self.paragraph_breaks
        }


class StructureClassifier:
    """
    Turns the ordered line records of a whole document into annotated
    output lines.

    Runs after every page has been sequenced, since page furniture is
    detected from recurrence across pages.
    """

    def __init__(self, stats: DocumentStatistics, config: Optional[StructureConfig] = None):
        self.stats = stats
        self.config = config or StructureConfig()

    def classify(self, records: Sequence[LineRecord]) -> StructureResult:
        body = self.stats.body_height
        cfg = self.config

        result = StructureResult()
        result.furniture = detect_page_furniture(records, self.stats, cfg)
        out = result.lines

        last_y: Optional[float] = None
        last_page: Optional[int] = None
        dense_run = 0

        for index, record in enumerate(records):
            if index in result.furniture:
                continue

            gap: Optional[float] = None
            if record.page == last_page and last_y is not None:
                gap = record.y - last_y
                if gap > body * cfg.paragraph_gap_ratio:
                    out.append("")
                    result.paragraph_breaks += 1
                dense_run = dense_run + 1 if gap < body * cfg.dense_gap_ratio else 0
            else:
                dense_run = 0
            last_y = record.y
            last_page = record.page

            if not record.text:
                continue

            line = classify_line(record.text, record.max_fragment_height, self.stats)
            if line.is_list:
                dense_run += 1
                result.list_items += 1

            # With the default ratios a rule gap (> 1.8x body) always resets the
            # dense run and headings are never list items, so the cutoff only
            # bites when dense_gap_ratio is configured above rule_gap_ratio.
            if (gap is not None
                    and gap > body * cfg.rule_gap_ratio
                    and line.is_heading
                    and dense_run < cfg.dense_run_cutoff
                    and out
                    and out[-1] != RULE_MARKER):
                if out[-1] != "":
                    out.append("")
                out.extend([RULE_MARKER, ""])
                result.rules += 1

            if line.is_heading:
                result.headings[line.level] = result.headings.get(line.level, 0) + 1
            out.append(line.render())

        logger.info(
            f"Classified {len(records)} lines: {sum(result.headings.values())} headings, "
            f"{result.list_items} list items, {result.rules} rules"
        )
        return result
