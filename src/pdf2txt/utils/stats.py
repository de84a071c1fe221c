"""
Document statistics for text reconstruction.

The body text size (modal fragment height) is the reference scale for every
later heuristic. It is computed once and threaded through the pipeline as an
immutable value.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Any, Mapping, Optional, Sequence

import numpy as np

from ..config import LayoutConfig, StructureConfig
from .fragments import Fragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentStatistics:
    """Read-only document-wide statistics."""
    body_height: float
    header_threshold: float
    sub_header_threshold: float
    line_tolerance: float
    page_count: int = 0
    page_heights: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view of a private copy
        object.__setattr__(self, "page_heights", MappingProxyType(dict(self.page_heights)))

    def page_height(self, page: int) -> float:
        return self.page_heights.get(page, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "body_height": self.body_height,
            "header_threshold": round(self.header_threshold, 3),
            "sub_header_threshold": round(self.sub_header_threshold, 3),
            "line_tolerance": round(self.line_tolerance, 3),
            "page_count": self.page_count,
            "page_heights": {str(k): v for k, v in sorted(self.page_heights.items())}
        }


def round_half_up(values: np.ndarray, decimals: int = 1) -> np.ndarray:
    """Round half away from zero for non-negative values (numpy rounds to even)."""
    scale = 10 ** decimals
    return np.floor(values * scale + 0.5) / scale


def estimate_body_height(
    heights: Sequence[float],
    default: float = 12.0,
    decimals: int = 1
) -> float:
    """
    Estimate the body text size as the mode of rounded heights.

    Ties resolve to the smallest height, so the result is reproducible for
    any input order.

    Args:
        heights: Fragment heights
        default: Returned when there are no heights
        decimals: Rounding precision for the histogram

    Returns:
        The most frequent rounded height
    """
    if len(heights) == 0:
        return default

    rounded = round_half_up(np.asarray(heights, dtype=float), decimals)
    values, counts = np.unique(rounded, return_counts=True)
    # np.unique sorts ascending and argmax returns the first maximum
    body = float(values[int(np.argmax(counts))])
    return round(body, decimals)


def compute_statistics(
    fragments: Sequence[Fragment],
    page_heights: Dict[int, float],
    page_count: int,
    layout_config: Optional[LayoutConfig] = None,
    structure_config: Optional[StructureConfig] = None
) -> DocumentStatistics:
    """Compute DocumentStatistics from all fragments of a document."""
    layout_config = layout_config or LayoutConfig()
    structure_config = structure_config or StructureConfig()

    body_height = estimate_body_height(
        [f.height for f in fragments],
        default=layout_config.default_body_height,
        decimals=layout_config.height_precision
    )
    line_tolerance = max(
        layout_config.min_line_tolerance,
        body_height * layout_config.line_tolerance_ratio
    )

    stats = DocumentStatistics(
        body_height=body_height,
        header_threshold=body_height * structure_config.header_ratio,
        sub_header_threshold=body_height * structure_config.sub_header_ratio,
        line_tolerance=line_tolerance,
        page_count=page_count,
        page_heights=page_heights
    )
    logger.info(
        f"Body height {body_height} (h3 >= {stats.header_threshold:.2f}, "
        f"h2 >= {stats.sub_header_threshold:.2f}, line tolerance {line_tolerance:.2f})"
    )
    return stats
