"""
I/O utilities for the text reconstruction pipeline.

Handles:
- Input discovery (single PDFs, folders of PDFs)
- Output file naming and text writing
- JSON serialization
- Directory management
- Batch progress tracking
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Union, Optional, Any
from dataclasses import dataclass, asdict, field

import numpy as np

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = ('.pdf',)
UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


# ============================================================================
# Input Discovery
# ============================================================================

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of input file or directory.

    Args:
        input_path: Path to file or directory

    Returns:
        One of: 'pdf', 'pdf_folder', 'unknown'
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        has_pdfs = any(
            f.suffix.lower() in PDF_EXTENSIONS
            for f in input_path.iterdir()
        )
        return 'pdf_folder' if has_pdfs else 'unknown'

    if not input_path.exists():
        return 'unknown'

    if input_path.suffix.lower() in PDF_EXTENSIONS:
        return 'pdf'

    return 'unknown'


def collect_inputs(
    inputs: List[Union[str, Path]],
    sort: bool = True
) -> List[Path]:
    """
    Expand files and folders into a list of PDF paths.

    Args:
        inputs: PDF files and/or folders containing PDFs
        sort: If True, sort folder contents alphabetically

    Returns:
        PDF paths in the order given, folders expanded in place
    """
    paths = []
    for item in inputs:
        item = Path(item)
        input_type = detect_input_type(item)
        if input_type == 'pdf_folder':
            found = [f for f in item.iterdir() if f.suffix.lower() in PDF_EXTENSIONS]
            if sort:
                found = sorted(found)
            logger.info(f"Found {len(found)} PDFs in {item}")
            paths.extend(found)
        elif input_type == 'pdf':
            paths.append(item)
        else:
            # Kept so the batch can report it as unavailable
            logger.warning(f"Not a PDF or folder of PDFs: {item}")
            paths.append(item)
    return paths


# ============================================================================
# Text Output
# ============================================================================

def sanitize_filename(name: str, extension: str = "md") -> str:
    """
    Output file name for a source document.

    Strips the source extension, replaces characters that are unsafe on
    common filesystems and appends the new extension.
    """
    base = re.sub(r"\.[^/.]+$", "", name)
    base = UNSAFE_FILENAME_CHARS.sub("_", base)
    return f"{base}.{extension}"


def save_text(text: str, output_path: Union[str, Path]) -> Path:
    """
    Save text to a UTF-8 file.

    Args:
        text: Content to write
        output_path: Path to save the file

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)

    logger.debug(f"Saved text: {output_path}")
    return output_path


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars, sets and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """Load data from a JSON file."""
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# Progress Tracking
# ============================================================================

@dataclass
class ProcessingProgress:
    """Track progress of a batch of documents."""
    total_documents: int = 0
    processed_documents: int = 0
    current_document: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    def start(self, name: str):
        self.current_document = name

    def complete_document(self):
        self.processed_documents += 1
        self.current_document = None

    def add_error(self, error: str):
        self.errors.append(error)
        logger.error(error)
