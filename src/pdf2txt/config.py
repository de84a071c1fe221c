"""
Configuration and constants for the text reconstruction pipeline.

This module provides:
- Global configuration settings
- Tunable heuristics for line clustering, word spacing and structure
- Output framing (title, footer, empty-document notice)
"""

import os
from dataclasses import dataclass, field
from typing import List
import logging

logger = logging.getLogger("pdf2txt")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class IngestConfig:
    """Fragment ingestion configuration."""
    max_page_text_bytes: int = 200 * 1024 * 1024  # 200 MB of UTF-8 per page
    cancel_check_interval: int = 200  # elements between cancellation checks
    width_estimate_ratio: float = 0.5  # width ~ len(text) * height * ratio


@dataclass
class LayoutConfig:
    """Reading-order and line clustering configuration."""
    default_body_height: float = 12.0
    height_precision: int = 1  # decimals kept when building the height histogram
    sort_epsilon: float = 2.0  # y values closer than this are ordered by x
    line_tolerance_ratio: float = 0.25
    min_line_tolerance: float = 2.0


@dataclass
class SpacingConfig:
    """Word-gap inference configuration."""
    base_threshold_ratio: float = 0.6  # of average character width
    fallback_base_threshold: float = 2.0
    min_gap_samples: int = 3
    bimodal_ratio: float = 1.6  # p90 above median * ratio => bimodal gaps
    median_gap_ratio: float = 1.4
    gap_percentile: float = 0.9
    # Recovery for one-glyph-per-fragment sources
    single_char_rate: float = 0.6
    recovery_base_ratio: float = 0.6
    recovery_median_ratio: float = 1.1


@dataclass
class StructureConfig:
    """Heading, list, paragraph and page-furniture heuristics."""
    header_ratio: float = 1.15  # >= body * ratio => ###
    sub_header_ratio: float = 1.4  # >= body * ratio => ##
    paragraph_gap_ratio: float = 1.5
    dense_gap_ratio: float = 0.9
    rule_gap_ratio: float = 1.8
    dense_run_cutoff: int = 3
    # Page furniture (page numbers, running headers/footers)
    furniture_band_ratio: float = 0.1
    furniture_max_font_ratio: float = 0.95
    furniture_min_repeat_ratio: float = 0.4
    furniture_min_repeat: int = 2
    furniture_bucket_ratio: float = 0.5
    furniture_min_bucket: float = 4.0


@dataclass
class OutputConfig:
    """Output framing configuration."""
    format: str = "md"  # md or txt; content is identical, only the extension differs
    footer_lines: List[str] = field(default_factory=lambda: [
        "File converted using pdf2txt",
        "https://github.com/SPACESODA/pdf2txt",
    ])
    empty_notice: str = "[No text detected. This may be an image-only PDF.]"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    ingest: IngestConfig = field(default_factory=IngestConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    spacing: SpacingConfig = field(default_factory=SpacingConfig)
    structure: StructureConfig = field(default_factory=StructureConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Global settings
    debug_mode: bool = False
    max_file_bytes: int = 1024 * 1024 * 1024  # 1 GB per source file


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("PDF2TXT_DEBUG", "").lower() == "true":
        config.debug_mode = True

    max_mb = os.environ.get("PDF2TXT_MAX_PAGE_TEXT_MB")
    if max_mb:
        try:
            config.ingest.max_page_text_bytes = int(max_mb) * 1024 * 1024
        except ValueError:
            logger.warning(f"Ignoring invalid PDF2TXT_MAX_PAGE_TEXT_MB: {max_mb!r}")

    output_format = os.environ.get("PDF2TXT_OUTPUT_FORMAT", "").lower()
    if output_format in ("md", "txt"):
        config.output.format = output_format

    return config


# ============================================================================
# Output Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"
