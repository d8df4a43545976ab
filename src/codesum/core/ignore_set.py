"""
IgnoreSet module for codesum.

Holds the exclusion patterns of a run. A pattern excludes a path when:
- it glob-matches the path's base name (single segment, case-sensitive,
  Python fnmatch syntax, no recursive ``**``), or
- the path starts with the pattern followed by a ``/`` (directory prefix).

Patterns come from ignore files (``.ignore``, ``.gitignore`` by default),
from configuration, and from a fixed built-in set that is always applied.
"""

import logging
from collections.abc import Iterable, Iterator
from fnmatch import fnmatchcase
from pathlib import Path, PurePath

from codesum.core.errors import ConfigReadError

logger = logging.getLogger(__name__)

# Directory names that are ALWAYS excluded regardless of user config
BUILTIN_IGNORES: frozenset[str] = frozenset([
    # Vendored dependencies
    "vendor",
    "node_modules",
    # Scratch and test trees
    "test",
    "tmp",
    "backup",
    # Package-manager and interpreter caches
    "__pycache__",
    ".venv",
    ".cache",
    ".tox",
    # VCS metadata
    ".git",
    ".hg",
    ".svn",
])


def _is_malformed(pattern: str) -> bool:
    """Return True for globs with an unterminated class or a dangling escape."""
    if pattern.endswith("\\"):
        return True

    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c != "[":
            continue
        j = i
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            j += 1
        if j >= n:
            return True
        i = j + 1
    return False


def read_pattern_source(path: Path) -> list[str] | None:
    """
    Read ignore patterns from a single source file.

    Returns:
        The patterns, or None if the file does not exist.

    Raises:
        ConfigReadError: If the file exists but cannot be read
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise ConfigReadError(path, f"invalid UTF-8 encoding ({e.reason})") from e
    except OSError as e:
        raise ConfigReadError(path, e.strerror or str(e)) from e

    patterns = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


class IgnoreSet:
    """
    Immutable set of ignore patterns.

    Membership is all that matters: patterns have no precedence, no
    negation and no ordering.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self._patterns: frozenset[str] = frozenset(patterns) | BUILTIN_IGNORES
        # Malformed globs never match by name but still act as prefixes
        self._globs: tuple[str, ...] = tuple(
            sorted(p for p in self._patterns if not _is_malformed(p))
        )
        self._prefixes: tuple[str, ...] = tuple(sorted(f"{p}/" for p in self._patterns))

    @classmethod
    def load(
        cls, sources: Iterable[Path | str], extra_patterns: Iterable[str] = ()
    ) -> "IgnoreSet":
        """
        Build an IgnoreSet from ordered pattern sources.

        Missing sources are skipped silently. Sources that exist but cannot
        be read are logged and skipped; the run continues without them.

        Args:
            sources: Paths of ignore files to read, in order
            extra_patterns: Additional patterns (e.g. from configuration)

        Returns:
            IgnoreSet including the built-in patterns
        """
        patterns: set[str] = set(extra_patterns)
        for source in sources:
            source_path = Path(source)
            try:
                loaded = read_pattern_source(source_path)
            except ConfigReadError as e:
                logger.warning(f"Skipping ignore source: {e}")
                continue
            if loaded is None:
                logger.debug(f"Ignore source not found: {source_path}")
                continue
            logger.debug(f"Loaded {len(loaded)} patterns from {source_path}")
            patterns.update(loaded)

        return cls(patterns)

    @property
    def patterns(self) -> frozenset[str]:
        return self._patterns

    def should_skip(self, path: PurePath | str) -> bool:
        """
        Check whether a root-relative path is excluded.

        Args:
            path: Path relative to the scan root, using '/' separators

        Returns:
            True if the base name matches a glob or the path lies under a
            pattern used as a directory prefix
        """
        rel = path.as_posix() if isinstance(path, PurePath) else str(path)
        name = rel.rsplit("/", 1)[-1]

        for pattern in self._globs:
            if fnmatchcase(name, pattern):
                return True
        for prefix in self._prefixes:
            if rel.startswith(prefix):
                return True
        return False

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._patterns))

    def __repr__(self) -> str:
        return f"IgnoreSet({len(self._patterns)} patterns)"
