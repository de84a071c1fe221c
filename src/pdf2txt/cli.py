#!/usr/bin/env python
"""
Command-line interface for the pdf2txt converter.

Usage:
    pdf2txt --input <pdf_or_folder> [...] --output <output_dir> [options]

Examples:
    # Convert one PDF to Markdown
    pdf2txt --input paper.pdf --output ./output

    # Convert a folder to plain text, with a JSON report per document
    pdf2txt --input ./pdfs --output ./output --format txt --json

    # Encrypted documents
    pdf2txt --input secret.pdf --output ./output --password hunter2
"""

import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from typing import List

from . import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pdf2txt")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="pdf2txt",
        description="pdf2txt - Convert text-based PDFs to Markdown or plain text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert a PDF to Markdown:
    pdf2txt --input paper.pdf --output ./output

  Convert every PDF in a folder to .txt:
    pdf2txt --input ./pdfs --output ./output --format txt

  Also write a JSON report per document:
    pdf2txt --input paper.pdf --output ./output --json
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        nargs="+",
        help="Input PDF file(s) or folder(s) of PDFs"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--format", "-f",
        choices=["md", "txt"],
        default=None,
        help="Output file extension; content is identical (default: md)"
    )

    parser.add_argument(
        "--password", "-p",
        default=None,
        help="Passphrase tried on encrypted PDFs"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Also write a JSON report (statistics and metrics) per document"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (includes per-line records in the JSON report)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def print_summary(items: List, output_dir: Path, elapsed: float):
    """Print a per-document status table."""
    print("\n" + "=" * 60)
    print("PDF2TXT CONVERSION COMPLETE")
    print("=" * 60)
    print(f"Output: {output_dir}")
    print(f"Documents: {len(items)}")
    print(f"Processing time: {elapsed:.2f}s")
    print()
    for item in items:
        result = item.result
        line = f"  [{result.status.value:>8}] {item.name}"
        if result.message:
            line += f" - {result.message}"
        print(line)
    print("=" * 60)


def run_pipeline(args, token=None) -> int:
    """Run the conversion over every input."""
    from .config import get_config
    from .utils.assembler import ConversionStatus, DocumentAssembler
    from .utils.batch import BatchConverter
    from .utils.cancel import CancellationToken
    from .utils.export import DocumentExporter
    from .utils.io import collect_inputs, ensure_dir

    start_time = time.time()
    token = token or CancellationToken()

    config = get_config()
    if args.format:
        config.output.format = args.format
    if args.debug:
        config.debug_mode = True

    # Setup output directory
    output_dir = Path(args.output)
    ensure_dir(output_dir)

    paths = collect_inputs(args.input)
    if not paths:
        logger.error("No PDF inputs found")
        return 1

    logger.info(f"Queued {len(paths)} document(s)")

    converter = BatchConverter(DocumentAssembler(config), config=config, token=token)
    items = converter.convert_files(paths, password=args.password)

    exporter = DocumentExporter(output_dir, config.output.format)
    formats = ["text", "json"] if args.json else ["text"]
    for item in items:
        if item.result.status != ConversionStatus.DONE:
            continue
        for fmt, path in exporter.export(item.result, formats).items():
            logger.info(f"Exported {fmt}: {path}")

    if not args.quiet:
        print_summary(items, output_dir, time.time() - start_time)

    if token.cancelled:
        return 130

    failed = [
        item for item in items
        if item.result.status in (ConversionStatus.ERROR, ConversionStatus.PASSWORD)
    ]
    return 1 if failed else 0


def main():
    """Main entry point."""
    from .utils.cancel import CancellationToken

    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    token = CancellationToken()

    def handle_interrupt(signum, frame):
        logger.info("Interrupted by user, cancelling...")
        token.cancel()
        # A second Ctrl-C falls through to KeyboardInterrupt
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, handle_interrupt)

    try:
        exit_code = run_pipeline(args, token)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
