"""
PDF Text Reconstruction Pipeline
================================

Rebuilds readable, structurally annotated text from the positioned text
fragments of a paginated document.

Main components:
- Fragment ingestion (coordinate normalization, size guard, cancellation)
- Body text size estimation
- Reading-order line clustering
- Word spacing inference (CJK aware)
- Structure classification (headings, lists, paragraphs, page furniture)
- Text normalization (hyphenation, hard-wrap merge, blank lines)
"""

__version__ = "1.0.0"
__author__ = "pdf2txt Team"
