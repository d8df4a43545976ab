"""
File scanner module for codesum.

Provides concurrent directory scanning with extension filtering, ignore
pattern support and per-file metadata extraction.
"""

from .interfaces import ScannerInterface
from .language_registry import (
    UNRECOGNIZED,
    Classification,
    LanguageRegistry,
    extension_to_language,
    get_default_registry,
)
from .models import FileRecord, ScanResult, count_lines
from .scanner import Scanner

__all__ = [
    # Main classes
    "Scanner",
    "ScannerInterface",
    "FileRecord",
    "ScanResult",
    "count_lines",
    # Language registry
    "Classification",
    "LanguageRegistry",
    "extension_to_language",
    "get_default_registry",
    # Constants
    "UNRECOGNIZED",
]
