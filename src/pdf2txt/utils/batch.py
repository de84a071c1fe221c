"""
Batch conversion of several documents.

Documents are converted strictly one at a time. A failure in one document
never stops the others; cancellation stops the running document and leaves
the rest unprocessed.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from ..config import PipelineConfig
from .assembler import ConversionResult, ConversionStatus, DocumentAssembler
from .cancel import CancellationToken
from .io import ProcessingProgress

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "File not available offline (0 bytes)"
TOO_LARGE_MESSAGE = "File over 1 GB"


@dataclass
class BatchItem:
    """One queued document and its result."""
    path: Path
    size: int
    result: ConversionResult

    @property
    def name(self) -> str:
        return self.path.name


class BatchConverter:
    """Sequential converter for a queue of PDF files."""

    def __init__(
        self,
        assembler: Optional[DocumentAssembler] = None,
        config: Optional[PipelineConfig] = None,
        token: Optional[CancellationToken] = None
    ):
        self.config = config or (assembler.config if assembler else PipelineConfig())
        self.assembler = assembler or DocumentAssembler(self.config)
        self.token = token or CancellationToken()
        self.progress = ProcessingProgress()

    def _precheck(self, path: Path) -> Tuple[int, Optional[ConversionResult]]:
        """Size checks done before a document is queued."""
        try:
            size = path.stat().st_size
        except OSError:
            # Missing files go through conversion and report as unavailable
            return -1, None

        if size == 0:
            return size, ConversionResult(path.name, ConversionStatus.SKIPPED, message=EMPTY_FILE_MESSAGE)
        if size > self.config.max_file_bytes:
            return size, ConversionResult(path.name, ConversionStatus.SKIPPED, message=TOO_LARGE_MESSAGE)
        return size, None

    def convert_files(
        self,
        paths: List[Union[str, Path]],
        password: Optional[str] = None
    ) -> List[BatchItem]:
        """
        Convert each file in order.

        Duplicates (same file name and size) are dropped from the queue.

        Args:
            paths: PDF files to convert
            password: Passphrase tried on every encrypted document

        Returns:
            One BatchItem per unique input
        """
        seen: Set[Tuple[str, int]] = set()
        queue: List[BatchItem] = []

        for raw_path in paths:
            path = Path(raw_path)
            size, skipped = self._precheck(path)
            key = (path.name, size)
            if key in seen:
                logger.info(f"Skipping duplicate {path.name}")
                continue
            seen.add(key)
            placeholder = skipped or ConversionResult(path.name, ConversionStatus.SKIPPED)
            queue.append(BatchItem(path=path, size=size, result=placeholder))

        pending = [item for item in queue if item.result.message is None]
        self.progress = ProcessingProgress(total_documents=len(pending))

        for item in pending:
            if self.token.cancelled:
                logger.info("Batch cancelled; remaining documents not processed")
                break

            self.progress.start(item.name)
            logger.info(f"Converting {item.name} ({self.progress.processed_documents + 1}/{len(pending)})")
            item.result = self.assembler.convert(
                item.path,
                source_name=item.name,
                password=password,
                token=self.token
            )
            if item.result.status in (ConversionStatus.ERROR, ConversionStatus.PASSWORD):
                self.progress.add_error(f"{item.name}: {item.result.message}")
            self.progress.complete_document()

        return queue
