"""
Reading-order module for text reconstruction.

Provides:
- Line and LineRecord data classes
- Fragment ordering robust to sub-unit baseline jitter
- Greedy clustering of fragments into visual lines
"""

import logging
from dataclasses import dataclass
from functools import cached_property, cmp_to_key
from typing import List, Optional, Tuple, Dict, Any, Sequence, Union

from .cancel import CANCELLED, Cancelled, CancellationPoller, CancellationToken
from .fragments import Fragment

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Line:
    """Fragments judged to lie on one visual line of a page."""
    page: int
    y: float  # anchor: y of the first fragment seen
    fragments: Tuple[Fragment, ...]

    @cached_property
    def max_height(self) -> float:
        return max((f.height for f in self.fragments), default=0.0)


@dataclass(frozen=True)
class LineRecord:
    """Text form of a Line, the unit of structure classification."""
    page: int
    y: float
    text: str
    max_fragment_height: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "y": self.y,
            "text": self.text,
            "max_fragment_height": self.max_fragment_height
        }


# ============================================================================
# Ordering and Clustering
# ============================================================================

def reading_order_key(sort_epsilon: float = 2.0):
    """
    Sort key placing fragments by page, then top-to-bottom.

    Fragments whose y values differ by less than ``sort_epsilon`` are
    treated as collinear and ordered left-to-right instead.
    """
    def compare(a: Fragment, b: Fragment) -> int:
        if a.page != b.page:
            return a.page - b.page
        if abs(a.y - b.y) < sort_epsilon:
            return (a.x > b.x) - (a.x < b.x)
        return (a.y > b.y) - (a.y < b.y)

    return cmp_to_key(compare)


def sort_fragments(fragments: Sequence[Fragment], sort_epsilon: float = 2.0) -> List[Fragment]:
    """Return fragments in approximate reading order."""
    return sorted(fragments, key=reading_order_key(sort_epsilon))


def _freeze(page: int, y: float, items: List[Fragment]) -> Line:
    return Line(page=page, y=y, fragments=tuple(sorted(items, key=lambda f: f.x)))


def group_lines(
    fragments: Sequence[Fragment],
    line_tolerance: float,
    sort_epsilon: float = 2.0,
    token: Optional[CancellationToken] = None,
    check_interval: int = 200
) -> Union[List[Line], Cancelled]:
    """
    Cluster fragments into ordered visual lines.

    A new line opens when the page changes or a fragment's y is at least
    ``line_tolerance`` away from the current line's anchor y. The anchor is
    never recomputed, so a line cannot drift down the page.

    Args:
        fragments: All fragments of the document, in any order
        line_tolerance: Maximum y distance from the anchor
        sort_epsilon: Collinearity epsilon for the initial sort
        token: Optional cancellation token

    Returns:
        Lines ordered by (page, y, x), or CANCELLED
    """
    ordered = sort_fragments(fragments, sort_epsilon)
    if not ordered:
        return []

    poller = CancellationPoller(token, check_interval)
    lines: List[Line] = []
    first = ordered[0]
    anchor_page, anchor_y, items = first.page, first.y, [first]

    for fragment in ordered[1:]:
        if poller.tick():
            return CANCELLED

        if fragment.page == anchor_page and abs(fragment.y - anchor_y) < line_tolerance:
            items.append(fragment)
            continue

        lines.append(_freeze(anchor_page, anchor_y, items))
        if fragment.page != anchor_page and poller.check():
            return CANCELLED
        anchor_page, anchor_y, items = fragment.page, fragment.y, [fragment]

    lines.append(_freeze(anchor_page, anchor_y, items))
    logger.info(f"Grouped {len(ordered)} fragments into {len(lines)} lines")
    return lines
