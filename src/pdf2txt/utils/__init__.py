"""
Utility modules for the text reconstruction pipeline.
"""

from .errors import (
    ConversionError, ExtractionError, SourceUnavailableError,
    PasswordRequiredError, ResourceLimitError
)
from .cancel import CANCELLED, CancellationToken
from .fragments import Fragment, PageContent, RawFragment, ingest_pages
from .stats import DocumentStatistics, compute_statistics, estimate_body_height
from .lines import Line, LineRecord, group_lines
from .line_text import build_line_text
from .structure import ClassifiedLine, StructureClassifier, classify_line
from .normalize import normalize_text, frame_document
from .extract import PdfDocument
from .io import collect_inputs, save_json, ensure_dir
from .assembler import DocumentAssembler, Document, ConversionResult, ConversionStatus
from .batch import BatchConverter, BatchItem
from .export import TextExporter, DocumentExporter

__all__ = [
    # Errors
    "ConversionError", "ExtractionError", "SourceUnavailableError",
    "PasswordRequiredError", "ResourceLimitError",
    # Cancellation
    "CANCELLED", "CancellationToken",
    # Ingestion
    "Fragment", "PageContent", "RawFragment", "ingest_pages",
    # Statistics
    "DocumentStatistics", "compute_statistics", "estimate_body_height",
    # Lines
    "Line", "LineRecord", "group_lines", "build_line_text",
    # Structure
    "ClassifiedLine", "StructureClassifier", "classify_line",
    # Normalization
    "normalize_text", "frame_document",
    # IO
    "PdfDocument", "collect_inputs", "save_json", "ensure_dir",
    # Assembly
    "DocumentAssembler", "Document", "ConversionResult", "ConversionStatus",
    "BatchConverter", "BatchItem",
    # Export
    "TextExporter", "DocumentExporter",
]
