"""
Data models for the file scanner module.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class FileRecord:
    """
    A recognized source file accepted by the scanner.

    Attributes:
        path: Path relative to the scan root, with '/' separators
        language: Language label from the registry ('Go', 'C/C++ Header', ...)
        line_count: Number of lines (see count_lines for the convention)
        modified_time: Local modification time of the file
        contents: Full file contents
    """

    path: str
    language: str
    line_count: int
    modified_time: datetime
    contents: str


@dataclass(frozen=True)
class ScanResult:
    """
    Frozen outcome of a scan.

    The order of ``files`` carries no meaning; sort before presenting.
    """

    files: tuple[FileRecord, ...] = ()
    language_histogram: dict[str, int] = field(init=False, compare=False)

    def __post_init__(self) -> None:
        histogram = Counter(record.language for record in self.files)
        object.__setattr__(self, "language_histogram", dict(histogram))

    @property
    def total_lines(self) -> int:
        return sum(record.line_count for record in self.files)

    def sorted_files(self) -> list[FileRecord]:
        """Files ordered by path."""
        return sorted(self.files, key=lambda record: record.path)

    def __len__(self) -> int:
        return len(self.files)


def count_lines(text: str) -> int:
    """
    Count lines using the scan-line convention.

    Every newline ends a line, and trailing content without a newline is one
    more line: "a\\nb\\nc" and "a\\nb\\nc\\n" both count 3, "" counts 0.
    """
    count = text.count("\n")
    if text and not text.endswith("\n"):
        count += 1
    return count
