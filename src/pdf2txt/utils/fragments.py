"""
Fragment ingestion module for text reconstruction.

Provides:
- Input contract from the extraction layer (RawFragment, PageContent)
- Normalized, immutable Fragment records
- Ingestion with y-axis normalization, per-page byte cap and cancellation
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Iterable, Union

from .cancel import CANCELLED, Cancelled, CancellationPoller, CancellationToken
from .errors import ResourceLimitError

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class RawFragment:
    """A text run as reported by the extraction layer."""
    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


@dataclass
class PageContent:
    """One page of raw fragments from the extraction layer."""
    page_number: int
    height: float
    fragments: List[RawFragment] = field(default_factory=list)
    flip_y: bool = False  # True when the source measures y bottom-up


@dataclass(frozen=True)
class Fragment:
    """A normalized text fragment with top-down coordinates."""
    text: str
    x: float
    y: float
    width: float
    height: float
    page: int
    is_whitespace: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class IngestResult:
    """All fragments of a document plus per-page geometry."""
    fragments: List[Fragment] = field(default_factory=list)
    page_heights: Dict[int, float] = field(default_factory=dict)
    page_count: int = 0
    empty_pages: List[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.fragments


# ============================================================================
# Ingestion
# ============================================================================

def normalize_fragment(
    raw: RawFragment,
    page: PageContent,
    width_estimate_ratio: float = 0.5
) -> Optional[Fragment]:
    """
    Convert one raw fragment into a normalized Fragment.

    Returns None for fragments with empty text. Blank text becomes a
    single-space whitespace marker.
    """
    text = raw.text or ""
    if not text:
        return None

    is_whitespace = not text.strip()
    height = abs(raw.height)
    width = raw.width or (len(text) * height * width_estimate_ratio)
    y = page.height - raw.y if page.flip_y else raw.y

    return Fragment(
        text=" " if is_whitespace else text,
        x=raw.x,
        y=y,
        width=width,
        height=height,
        page=page.page_number,
        is_whitespace=is_whitespace
    )


def ingest_pages(
    pages: Iterable[PageContent],
    page_count: Optional[int] = None,
    token: Optional[CancellationToken] = None,
    max_page_text_bytes: int = 200 * 1024 * 1024,
    check_interval: int = 200,
    width_estimate_ratio: float = 0.5
) -> Union[IngestResult, Cancelled]:
    """
    Collect and normalize fragments from every page.

    Args:
        pages: Page contents, usually a lazy iterator from the extractor
        page_count: Total page count reported by the source (defaults to
            the number of pages seen)
        token: Optional cancellation token
        max_page_text_bytes: Cap on UTF-8 bytes of text per page
        check_interval: Fragments between cancellation checks

    Returns:
        IngestResult, or CANCELLED if the token fired

    Raises:
        ResourceLimitError: If a page exceeds the byte cap
    """
    poller = CancellationPoller(token, check_interval)
    result = IngestResult()
    pages_seen = 0

    for page in pages:
        if poller.check():
            logger.info(f"Ingestion cancelled before page {page.page_number}")
            return CANCELLED

        pages_seen += 1
        result.page_heights[page.page_number] = page.height
        page_bytes = 0
        page_fragments = 0

        for raw in page.fragments:
            if poller.tick():
                logger.info(f"Ingestion cancelled on page {page.page_number}")
                return CANCELLED

            fragment = normalize_fragment(raw, page, width_estimate_ratio)
            if fragment is None:
                continue

            page_bytes += len(raw.text.encode("utf-8"))
            if page_bytes > max_page_text_bytes:
                raise ResourceLimitError(page.page_number, max_page_text_bytes)

            result.fragments.append(fragment)
            page_fragments += 1

        if page_fragments == 0:
            result.empty_pages.append(page.page_number)
            logger.warning(f"Page {page.page_number} has no text (image-only?)")
        else:
            logger.debug(f"Page {page.page_number}: {page_fragments} fragments, {page_bytes} bytes")

    result.page_count = page_count if page_count is not None else pages_seen
    logger.info(f"Ingested {len(result.fragments)} fragments from {pages_seen} pages")
    return result
