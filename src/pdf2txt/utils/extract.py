"""
PDF fragment extraction using PyMuPDF.

Provides:
- Opening PDFs from a path or raw bytes, with optional passphrase
- Lazy per-page fragment extraction (span text, baseline origin, font size)
- Scoped release of the native document on every exit path
"""

import logging
from pathlib import Path
from typing import List, Optional, Union, Iterator

from .errors import ExtractionError, PasswordRequiredError, SourceUnavailableError, is_password_error
from .fragments import PageContent, RawFragment

logger = logging.getLogger(__name__)

PdfSource = Union[str, Path, bytes]


def _import_pymupdf():
    try:
        import pymupdf
    except ImportError:
        try:
            import fitz as pymupdf  # PyMuPDF releases before 1.24.3
        except ImportError:
            raise ImportError(
                "PyMuPDF is required for PDF extraction. Install with: pip install pymupdf"
            )
    return pymupdf


def page_fragments(page) -> List[RawFragment]:
    """
    Extract the text spans of a PyMuPDF page as raw fragments.

    PyMuPDF reports y top-down already. The span origin is its baseline
    point and the font size stands in for the fragment height.
    """
    fragments = []
    text_dict = page.get_text("dict")
    for block in text_dict.get("blocks", []):
        if block.get("type", 0) != 0:
            continue  # image block
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text:
                    continue
                x0, _, x1, _ = span["bbox"]
                origin_x, origin_y = span.get("origin", (x0, span["bbox"][3]))
                fragments.append(RawFragment(
                    text=text,
                    x=float(origin_x),
                    y=float(origin_y),
                    width=float(x1 - x0),
                    height=float(span.get("size", 0.0))
                ))
    return fragments


class PdfDocument:
    """
    Context manager around a PyMuPDF document.

    Usage:
        with PdfDocument("paper.pdf", password=None) as pdf:
            for page in pdf.iter_pages():
                ...
    """

    def __init__(self, source: PdfSource, password: Optional[str] = None):
        self.source = source
        self.password = password
        self._doc = None

    @property
    def page_count(self) -> int:
        return self._doc.page_count if self._doc is not None else 0

    def open(self) -> "PdfDocument":
        pymupdf = _import_pymupdf()

        if isinstance(self.source, (bytes, bytearray)):
            if not self.source:
                raise SourceUnavailableError("File is empty (0 bytes)")
            open_args = {"stream": bytes(self.source), "filetype": "pdf"}
        else:
            path = Path(self.source)
            if not path.is_file():
                raise SourceUnavailableError(f"PDF file not found: {path}")
            # Without an explicit type PyMuPDF guesses from the extension
            open_args = {"filename": str(path), "filetype": "pdf"}

        try:
            doc = pymupdf.open(**open_args)
        except Exception as e:
            if is_password_error(e):
                raise PasswordRequiredError() from e
            raise ExtractionError(f"Failed to open PDF document: {e}") from e

        if doc.needs_pass:
            if not self.password:
                doc.close()
                raise PasswordRequiredError()
            if not doc.authenticate(self.password):
                doc.close()
                raise PasswordRequiredError("Incorrect password", incorrect=True)

        self._doc = doc
        logger.info(f"Opened PDF with {doc.page_count} pages")
        return self

    def close(self):
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self) -> "PdfDocument":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def iter_pages(self) -> Iterator[PageContent]:
        """Yield pages lazily so cancellation stops further extraction."""
        if self._doc is None:
            raise ExtractionError("PDF document is not open")

        for index in range(self._doc.page_count):
            try:
                page = self._doc.load_page(index)
                rect = page.rect
                fragments = page_fragments(page)
            except Exception as e:
                raise ExtractionError(f"Failed to read page {index + 1}: {e}") from e
            yield PageContent(
                page_number=index + 1,
                height=float(rect.height),
                fragments=fragments
            )
