"""
Abstract interfaces for file scanning operations.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .models import ScanResult


class ScannerInterface(ABC):
    """
    Abstract interface for directory scanning.

    Implementations walk a tree, skip ignored and unrecognized entries and
    return every accepted file as a FileRecord.
    """

    @abstractmethod
    def walk(self, root_path: Path | str) -> ScanResult:
        """
        Scan a directory tree.

        Args:
            root_path: Root directory to scan

        Returns:
            ScanResult holding one FileRecord per accepted file

        Raises:
            TraversalError: If the root or a directory cannot be enumerated
            FileExtractionError: If an accepted file cannot be read

        Notes:
            - Never returns a partial result
        """

    @abstractmethod
    def is_recognized(self, path: Path | str) -> bool:
        """Check whether a file's extension is in the recognized set."""
