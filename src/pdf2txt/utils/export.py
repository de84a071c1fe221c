"""
Export module for text reconstruction.

Provides:
- Text export (.md or .txt, identical content)
- JSON report export
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .assembler import ConversionResult
from .io import sanitize_filename, save_json, save_text

logger = logging.getLogger(__name__)


class TextExporter:
    """Export converted text to a Markdown or plain-text file."""

    def __init__(self, output_format: str = "md"):
        if output_format not in ("md", "txt"):
            raise ValueError(f"Unknown output format: {output_format}")
        self.output_format = output_format

    def export(self, result: ConversionResult, output_dir: Union[str, Path]) -> Path:
        """
        Write the result text next to the other outputs.

        Returns:
            Path to the generated file
        """
        if result.text is None:
            raise ValueError(f"No text to export for {result.source_name}")

        output_path = Path(output_dir) / sanitize_filename(result.source_name, self.output_format)
        save_text(result.text, output_path)
        logger.info(f"Exported {self.output_format} to: {output_path}")
        return output_path


class DocumentExporter:
    """Convenience class for exporting to multiple formats."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        output_format: str = "md"
    ):
        self.output_dir = Path(output_dir)
        self.text_exporter = TextExporter(output_format)

    def export(
        self,
        result: ConversionResult,
        formats: Optional[List[str]] = None
    ) -> Dict[str, Path]:
        """
        Export a conversion result.

        Args:
            result: A finished conversion
            formats: Any of 'text', 'json' (default: text only)

        Returns:
            Dictionary mapping format to output path
        """
        if formats is None:
            formats = ["text"]

        self.output_dir.mkdir(parents=True, exist_ok=True)
        results = {}

        if "text" in formats and result.text is not None:
            results["text"] = self.text_exporter.export(result, self.output_dir)

        if "json" in formats:
            path = self.output_dir / sanitize_filename(result.source_name, "json")
            results["json"] = save_json(result.to_dict(), path)

        return results
