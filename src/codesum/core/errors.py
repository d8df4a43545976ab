"""
Error taxonomy for codesum.

ConfigReadError is recovered where it is raised (the source is treated as
absent). TraversalError and FileExtractionError abort the whole run.
"""

from pathlib import Path


class CodesumError(Exception):
    """Base class for all codesum errors."""


class ConfigReadError(CodesumError):
    """An ignore source or manifest file exists but could not be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class TraversalError(CodesumError, OSError):
    """The scan root is inaccessible or a directory could not be enumerated."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot traverse {self.path}: {reason}")

    def __str__(self) -> str:
        return f"Cannot traverse {self.path}: {self.reason}"


class FileExtractionError(CodesumError, OSError):
    """A selected source file could not be stat'd or read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot extract {self.path}: {reason}")

    def __str__(self) -> str:
        return f"Cannot extract {self.path}: {self.reason}"
