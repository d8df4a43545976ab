"""
Core Layer - Ignore patterns, language classification and file scanning.
"""

from codesum.core.config import (
    CodesumConfig,
    LoggingConfig,
    OutputConfig,
    ScanConfig,
    load_config,
)
from codesum.core.errors import (
    CodesumError,
    ConfigReadError,
    FileExtractionError,
    TraversalError,
)
from codesum.core.file_scanner import (
    UNRECOGNIZED,
    Classification,
    FileRecord,
    LanguageRegistry,
    Scanner,
    ScannerInterface,
    ScanResult,
    count_lines,
    extension_to_language,
    get_default_registry,
)
from codesum.core.ignore_set import BUILTIN_IGNORES, IgnoreSet

__all__ = [
    # Config
    "CodesumConfig",
    "LoggingConfig",
    "OutputConfig",
    "ScanConfig",
    "load_config",
    # Errors
    "CodesumError",
    "ConfigReadError",
    "FileExtractionError",
    "TraversalError",
    # Ignore patterns
    "BUILTIN_IGNORES",
    "IgnoreSet",
    # File scanner
    "Classification",
    "FileRecord",
    "LanguageRegistry",
    "Scanner",
    "ScannerInterface",
    "ScanResult",
    "UNRECOGNIZED",
    "count_lines",
    "extension_to_language",
    "get_default_registry",
]
