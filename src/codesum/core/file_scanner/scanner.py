"""
Scanner implementation for concurrent directory scanning.
"""

import logging
import os
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from codesum.core.errors import FileExtractionError, TraversalError
from codesum.core.ignore_set import IgnoreSet

from .interfaces import ScannerInterface
from .language_registry import LanguageRegistry, get_default_registry
from .models import FileRecord, ScanResult, count_lines

logger = logging.getLogger(__name__)


def extract_file(path: Path, rel_path: str, language: str) -> FileRecord:
    """
    Stat, read and line-count one file.

    Raises:
        FileExtractionError: If the file cannot be stat'd or read
    """
    try:
        stat = os.stat(path)
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as e:
        raise FileExtractionError(rel_path, e.strerror or str(e)) from e

    contents = raw.decode("utf-8", errors="replace")
    return FileRecord(
        path=rel_path,
        language=language,
        line_count=count_lines(contents),
        modified_time=datetime.fromtimestamp(stat.st_mtime),
        contents=contents,
    )


class _Accumulator:
    """Shared sink for extraction tasks; only insertion is serialized."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[FileRecord] = []
        self._futures: list[Future] = []
        self._first_error: BaseException | None = None
        self._failed = threading.Event()

    @property
    def failed(self) -> bool:
        return self._failed.is_set()

    @property
    def first_error(self) -> BaseException | None:
        return self._first_error

    def extract(self, path: Path, rel_path: str, language: str) -> FileRecord | None:
        """Task body; does nothing once another task has failed."""
        if self._failed.is_set():
            return None
        return extract_file(path, rel_path, language)

    def track(self, future: Future) -> None:
        with self._lock:
            self._futures.append(future)
            failed = self._failed.is_set()
        if failed:
            future.cancel()
        future.add_done_callback(self.collect)

    def collect(self, future: Future) -> None:
        """Done-callback for extraction futures."""
        if future.cancelled():
            return

        error = future.exception()
        if error is not None:
            with self._lock:
                if self._first_error is None:
                    self._first_error = error
                self._failed.set()
                queued = list(self._futures)
            # Tasks that have not started yet are dropped; running ones finish
            for other in queued:
                other.cancel()
            return

        record = future.result()
        if record is None:
            return
        with self._lock:
            self._records.append(record)

    def freeze(self) -> ScanResult:
        with self._lock:
            return ScanResult(files=tuple(self._records))


class Scanner(ScannerInterface):
    """
    Concrete implementation of ScannerInterface.

    One coordinating thread walks the tree; each accepted file is read by a
    task on a bounded thread pool. After the first failed task no more
    files are scheduled and queued tasks are cancelled; tasks already
    running finish, and the first error is raised once the pool has drained.
    """

    def __init__(
        self,
        ignore_set: IgnoreSet | None = None,
        extensions: Iterable[str] | None = None,
        language_registry: LanguageRegistry | None = None,
        max_workers: int = 8,
    ):
        """
        Initialize the Scanner.

        Args:
            ignore_set: Patterns that prune directories and skip files.
                        If None, only the built-in patterns apply.
            extensions: Recognized extensions including the dot. If None,
                        every extension the registry knows. An empty
                        collection recognizes nothing. Extensions unknown
                        to the registry are dropped.
            language_registry: Registry used to label files.
            max_workers: Size of the extraction thread pool.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self._ignore_set = ignore_set if ignore_set is not None else IgnoreSet()
        self._language_registry = language_registry or get_default_registry()
        self._max_workers = max_workers

        if extensions is None:
            extensions = self._language_registry.get_all_extensions()
        requested = {ext.lower() for ext in extensions}
        unknown = {ext for ext in requested if not self._language_registry.is_supported(ext)}
        if unknown:
            logger.warning(
                f"Ignoring extensions with no known language: {', '.join(sorted(unknown))}"
            )
        self._extensions: frozenset[str] = frozenset(requested - unknown)

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    @property
    def ignore_set(self) -> IgnoreSet:
        return self._ignore_set

    def is_recognized(self, path: Path | str) -> bool:
        return Path(path).suffix.lower() in self._extensions

    def walk(self, root_path: Path | str) -> ScanResult:
        """
        Scan a directory tree concurrently.

        Args:
            root_path: Root directory to scan

        Returns:
            Frozen ScanResult with paths relative to root_path
        """
        root = Path(root_path)
        if not root.exists():
            raise TraversalError(root, "no such directory")
        if not root.is_dir():
            raise TraversalError(root, "not a directory")

        accumulator = _Accumulator()
        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="codesum-scan"
        ) as executor:
            self._walk_tree(root, executor, accumulator)

        if accumulator.first_error is not None:
            raise accumulator.first_error

        result = accumulator.freeze()
        logger.info(
            f"Scanned {len(result)} files ({result.total_lines} lines) under {root}"
        )
        return result

    def _walk_tree(
        self,
        root: Path,
        executor: ThreadPoolExecutor,
        accumulator: _Accumulator,
    ) -> None:
        """
        Depth-first walk over an explicit stack of pending directories.

        Raises:
            TraversalError: If a directory cannot be enumerated
        """
        pending: list[tuple[Path, str]] = [(root, "")]
        while pending:
            directory, rel_dir = pending.pop()
            subdirs = self._walk_directory(directory, rel_dir, executor, accumulator)
            if accumulator.failed:
                logger.debug("Extraction failed, no further files will be scheduled")
                return
            # Reversed so that subdirectories are visited in name order
            pending.extend(reversed(subdirs))

    def _walk_directory(
        self,
        directory: Path,
        rel_dir: str,
        executor: ThreadPoolExecutor,
        accumulator: _Accumulator,
    ) -> list[tuple[Path, str]]:
        """
        Schedule the accepted files of one directory.

        Returns:
            Non-ignored subdirectories as (path, relative path) pairs

        Raises:
            TraversalError: If the directory cannot be enumerated
        """
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise TraversalError(directory, e.strerror or str(e)) from e

        subdirs: list[tuple[Path, str]] = []
        for entry in entries:
            if accumulator.failed:
                break

            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name

            if entry.is_dir(follow_symlinks=False):
                if self._ignore_set.should_skip(rel_path):
                    logger.debug(f"Pruning ignored directory: {rel_path}")
                    continue
                subdirs.append((Path(entry.path), rel_path))
                continue

            if entry.is_symlink() and entry.is_dir():
                logger.debug(f"Skipping symlinked directory: {rel_path}")
                continue

            if not self.is_recognized(entry.name):
                continue

            if self._ignore_set.should_skip(rel_path):
                logger.debug(f"Ignoring: {rel_path}")
                continue

            language = self._language_registry.detect_from_path(entry.name)
            accumulator.track(
                executor.submit(accumulator.extract, Path(entry.path), rel_path, language)
            )
        return subdirs
