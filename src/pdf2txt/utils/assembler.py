"""
Document assembler module for text reconstruction.

Provides:
- Document data model (Document, DocumentMetrics)
- Pipeline orchestration from page fragments to framed text
- The single-document boundary that turns every failure into a status
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict, Any, Iterable, Union

from ..config import PipelineConfig, JSON_SCHEMA_VERSION
from .cancel import CANCELLED, Cancelled, CancellationPoller, CancellationToken
from .errors import (
    ExtractionError,
    PasswordRequiredError,
    ResourceLimitError,
    SourceUnavailableError,
    is_password_error,
)
from .extract import PdfDocument, PdfSource
from .fragments import PageContent, ingest_pages
from .line_text import build_line_text
from .lines import LineRecord, group_lines
from .normalize import empty_document, frame_document, normalize_text, title_from_name
from .stats import DocumentStatistics, compute_statistics
from .structure import StructureClassifier

logger = logging.getLogger(__name__)

PASSWORD_MESSAGE = "Password-protected PDF"
INCORRECT_PASSWORD_MESSAGE = "Incorrect password"
UNAVAILABLE_MESSAGE = "File not available. Please make sure it is fully downloaded."


# ============================================================================
# Data Classes
# ============================================================================

class ConversionStatus(Enum):
    """Per-document outcome."""
    DONE = "done"
    SKIPPED = "skipped"  # cancelled or never started: not processed
    PASSWORD = "password"
    ERROR = "error"


@dataclass
class DocumentMetrics:
    """Metrics about document processing."""
    pages_processed: int = 0
    empty_pages: List[int] = field(default_factory=list)
    fragments_total: int = 0
    lines_total: int = 0
    lines_suppressed: int = 0
    headings_h2: int = 0
    headings_h3: int = 0
    list_items: int = 0
    rules_inserted: int = 0
    paragraph_breaks: int = 0
    processing_time_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages_processed": self.pages_processed,
            "empty_pages": list(self.empty_pages),
            "fragments_total": self.fragments_total,
            "lines": {
                "total": self.lines_total,
                "suppressed": self.lines_suppressed
            },
            "headings": {
                "h2": self.headings_h2,
                "h3": self.headings_h3
            },
            "list_items": self.list_items,
            "rules_inserted": self.rules_inserted,
            "paragraph_breaks": self.paragraph_breaks,
            "processing_time_seconds": round(self.processing_time_seconds, 2)
        }


@dataclass
class Document:
    """Complete reconstructed document."""
    task_id: str
    source_file: str
    title: str = ""
    text: str = ""
    statistics: Optional[DocumentStatistics] = None
    metrics: Optional[DocumentMetrics] = None
    lines: List[LineRecord] = field(default_factory=list)  # kept in debug mode only
    created_at: str = ""
    schema_version: str = JSON_SCHEMA_VERSION

    def __post_init__(self):
        if not self.task_id:
            self.task_id = str(uuid.uuid4())
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "task_id": self.task_id,
            "schema_version": self.schema_version,
            "source_file": self.source_file,
            "created_at": self.created_at,
            "title": self.title,
            "statistics": self.statistics.to_dict() if self.statistics else {},
            "metrics": self.metrics.to_dict() if self.metrics else {},
            "text": self.text
        }
        if self.lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data


@dataclass
class ConversionResult:
    """Outcome of converting one document. Never carries an exception."""
    source_name: str
    status: ConversionStatus
    text: Optional[str] = None
    message: Optional[str] = None
    document: Optional[Document] = None

    @property
    def ok(self) -> bool:
        return self.status == ConversionStatus.DONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source_name,
            "status": self.status.value,
            "message": self.message,
            "document": self.document.to_dict() if self.document else None
        }


# ============================================================================
# Document Assembler
# ============================================================================

class DocumentAssembler:
    """
    Orchestrates the text reconstruction pipeline.

    Coordinates:
    - Fragment ingestion
    - Body size estimation
    - Line sequencing and text building
    - Structure classification
    - Text normalization and framing
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    @property
    def debug_mode(self) -> bool:
        return self.config.debug_mode

    def process_pages(
        self,
        pages: Iterable[PageContent],
        source_name: str,
        page_count: Optional[int] = None,
        token: Optional[CancellationToken] = None
    ) -> Union[Document, Cancelled]:
        """
        Run the pipeline over one document's pages.

        Args:
            pages: Page contents from the extraction layer
            source_name: Source file name, used for the title
            page_count: Total page count reported by the source
            token: Optional cancellation token

        Returns:
            Document, or CANCELLED

        Raises:
            ResourceLimitError: If a page exceeds the text size cap
        """
        cfg = self.config
        interval = cfg.ingest.cancel_check_interval
        start_time = time.time()

        ingested = ingest_pages(
            pages,
            page_count=page_count,
            token=token,
            max_page_text_bytes=cfg.ingest.max_page_text_bytes,
            check_interval=interval,
            width_estimate_ratio=cfg.ingest.width_estimate_ratio
        )
        if ingested is CANCELLED:
            return CANCELLED

        title = title_from_name(source_name)
        doc = Document(task_id=str(uuid.uuid4()), source_file=str(source_name), title=title)
        metrics = DocumentMetrics(
            pages_processed=ingested.page_count,
            empty_pages=list(ingested.empty_pages),
            fragments_total=len(ingested.fragments)
        )
        doc.metrics = metrics

        if ingested.is_empty:
            logger.warning(f"No text detected in {source_name}")
            doc.text = empty_document(title, cfg.output)
            metrics.processing_time_seconds = time.time() - start_time
            return doc

        stats = compute_statistics(
            ingested.fragments,
            ingested.page_heights,
            ingested.page_count,
            cfg.layout,
            cfg.structure
        )
        doc.statistics = stats

        lines = group_lines(
            ingested.fragments,
            stats.line_tolerance,
            sort_epsilon=cfg.layout.sort_epsilon,
            token=token,
            check_interval=interval
        )
        if lines is CANCELLED:
            return CANCELLED

        poller = CancellationPoller(token, interval)
        records = []
        for line in lines:
            if poller.tick():
                return CANCELLED
            records.append(LineRecord(
                page=line.page,
                y=line.y,
                text=build_line_text(line.fragments, cfg.spacing),
                max_fragment_height=line.max_height
            ))

        structure = StructureClassifier(stats, cfg.structure).classify(records)

        body = normalize_text(structure.lines, token, interval)
        if body is CANCELLED:
            return CANCELLED

        doc.text = frame_document(body, title, cfg.output)
        if self.debug_mode:
            doc.lines = records

        metrics.lines_total = len(records)
        metrics.lines_suppressed = len(structure.furniture)
        metrics.headings_h2 = structure.headings.get(2, 0)
        metrics.headings_h3 = structure.headings.get(3, 0)
        metrics.list_items = structure.list_items
        metrics.rules_inserted = structure.rules
        metrics.paragraph_breaks = structure.paragraph_breaks
        metrics.processing_time_seconds = time.time() - start_time

        logger.info(f"Processed {source_name} in {metrics.processing_time_seconds:.2f}s")
        return doc

    def convert(
        self,
        source: PdfSource,
        source_name: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[CancellationToken] = None
    ) -> ConversionResult:
        """
        Convert one PDF. Every failure is returned as a status, never raised.

        Args:
            source: Path to a PDF or its raw bytes
            source_name: Display name (defaults to the file name)
            password: Optional passphrase for encrypted documents
            token: Optional cancellation token

        Returns:
            ConversionResult
        """
        if source_name is None:
            source_name = Path(source).name if isinstance(source, (str, Path)) else "document.pdf"

        if token is not None and token.cancelled:
            return ConversionResult(source_name, ConversionStatus.SKIPPED)

        try:
            with PdfDocument(source, password=password) as pdf:
                document = self.process_pages(
                    pdf.iter_pages(),
                    source_name,
                    page_count=pdf.page_count,
                    token=token
                )
        except PasswordRequiredError as e:
            logger.warning(f"{source_name}: {e}")
            message = INCORRECT_PASSWORD_MESSAGE if e.incorrect else PASSWORD_MESSAGE
            return ConversionResult(source_name, ConversionStatus.PASSWORD, message=message)
        except SourceUnavailableError as e:
            logger.error(f"{source_name}: {e}")
            return ConversionResult(source_name, ConversionStatus.ERROR, message=UNAVAILABLE_MESSAGE)
        except (ResourceLimitError, ExtractionError) as e:
            logger.error(f"{source_name}: {e}")
            return ConversionResult(source_name, ConversionStatus.ERROR, message=str(e))
        except Exception as e:
            if is_password_error(e):
                logger.warning(f"{source_name}: {e}")
                return ConversionResult(source_name, ConversionStatus.PASSWORD, message=PASSWORD_MESSAGE)
            logger.exception(f"Unexpected error converting {source_name}")
            return ConversionResult(source_name, ConversionStatus.ERROR, message=str(e) or "Unknown error")

        if document is CANCELLED:
            logger.info(f"{source_name}: cancelled")
            return ConversionResult(source_name, ConversionStatus.SKIPPED)

        return ConversionResult(
            source_name,
            ConversionStatus.DONE,
            text=document.text,
            document=document
        )
