#!/usr/bin/env python3
"""
Readers Module
Scene file readers producing SceneData
"""

from pathlib import Path

from .base_reader import BaseReader, SceneFormatError
from .json_reader import JSONReader

# Supported file extensions
JSON_EXTENSIONS = {'.json'}
SUPPORTED_EXTENSIONS = JSON_EXTENSIONS


def create_reader(input_file):
    """Factory function to create appropriate reader based on file extension

    Args:
        input_file: Path to input scene file

    Returns:
        BaseReader: JSONReader instance

    Raises:
        ValueError: If file extension is not supported
    """
    ext = Path(input_file).suffix.lower()

    if ext in JSON_EXTENSIONS:
        return JSONReader(input_file)
    raise ValueError(
        f"Unsupported file format: {ext}\n"
        f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


def is_supported_format(input_file):
    """Check if a file has a supported format

    Args:
        input_file: Path to input scene file

    Returns:
        bool: True if format is supported
    """
    return Path(input_file).suffix.lower() in SUPPORTED_EXTENSIONS


__all__ = [
    'BaseReader',
    'JSONReader',
    'SceneFormatError',
    'create_reader',
    'is_supported_format',
    'JSON_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
