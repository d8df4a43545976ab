"""
Project identity resolution for codesum.

Derives a project's name, repository hint and dominant language, first from
manifest files found in the project root and otherwise from the language
histogram of the scan.
"""

import logging
import os
import re
import tomllib
from collections import Counter
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from codesum.core.errors import ConfigReadError
from codesum.core.file_scanner import (
    UNRECOGNIZED,
    LanguageRegistry,
    Scanner,
    ScanResult,
    get_default_registry,
)

logger = logging.getLogger(__name__)

UNKNOWN_REPOSITORY = "Unknown"

_CMAKE_PROJECT_RE = re.compile(r"\bproject\s*\(\s*([^\s)]+)([^)]*)\)", re.IGNORECASE)
_CMAKE_KEYWORDS = {"VERSION", "DESCRIPTION", "HOMEPAGE_URL", "LANGUAGES"}


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of a successful manifest probe.

    Attributes:
        name: Project name implied by the manifest
        source: Manifest that produced the result (e.g. 'go.mod')
        project_type: Language implied by the manifest, None if it implies none
        hint: Module path or repository URL found in the manifest
    """

    name: str
    source: str
    project_type: Optional[str] = None
    hint: Optional[str] = None


@dataclass(frozen=True)
class ProjectDescriptor:
    """
    Identity of a scanned project.

    Attributes:
        name: Project name
        repository: Origin remote URL, module path, or 'Unknown'
        dominant_type: Project language as resolved (manifest, or histogram)
        source: What decided the name ('go.mod', '.git/config', 'directory', ...)
        scan_type: Histogram argmax over the full scan, kept apart from
            dominant_type because a manifest or the root-only heuristic may
            disagree with it
    """

    name: str
    repository: str
    dominant_type: str
    source: str
    scan_type: str


def histogram_argmax(histogram: Mapping[str, int]) -> str:
    """
    Return the label with the strictly largest count.

    Labels are visited in sorted order and only a strictly greater count
    replaces the current best, so ties go to the lexicographically smallest
    label. An empty histogram yields UNRECOGNIZED.
    """
    best, best_count = UNRECOGNIZED, 0
    for label in sorted(histogram):
        if histogram[label] > best_count:
            best, best_count = label, histogram[label]
    return best


def _read_manifest(path: Path) -> str | None:
    """
    Read a manifest file as text.

    Returns:
        File content, or None if the file does not exist

    Raises:
        ConfigReadError: If the file exists but cannot be read
    """
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        # A .git file (worktree, submodule) has no config beneath it
        return None
    except UnicodeDecodeError as e:
        raise ConfigReadError(path, f"invalid UTF-8 encoding ({e.reason})") from e
    except OSError as e:
        raise ConfigReadError(path, e.strerror or str(e)) from e


def _load_toml(path: Path, content: str) -> dict | None:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        logger.warning(f"Malformed TOML in {path}: {e}")
        return None


def probe_go_mod(root: Path) -> ProbeResult | None:
    """go.mod: the `module` directive names the project."""
    path = root / "go.mod"
    content = _read_manifest(path)
    if content is None:
        return None

    for line in content.splitlines():
        fields = line.split()
        if len(fields) > 1 and fields[0] == "module":
            module = fields[1].strip('"')
            return ProbeResult(name=module, source="go.mod", project_type="Go", hint=module)

    logger.debug(f"No module declaration found in {path}")
    return None


def probe_cargo_toml(root: Path) -> ProbeResult | None:
    """Cargo.toml: `[package].name`."""
    path = root / "Cargo.toml"
    content = _read_manifest(path)
    if content is None:
        return None

    data = _load_toml(path, content)
    name = ((data or {}).get("package") or {}).get("name")
    if not isinstance(name, str) or not name:
        return None
    return ProbeResult(name=name, source="Cargo.toml", project_type="Rust")


def probe_pyproject(root: Path) -> ProbeResult | None:
    """pyproject.toml: `[project].name`, then `[tool.poetry].name`."""
    path = root / "pyproject.toml"
    content = _read_manifest(path)
    if content is None:
        return None

    data = _load_toml(path, content) or {}
    name = (data.get("project") or {}).get("name")
    if not name:
        name = ((data.get("tool") or {}).get("poetry") or {}).get("name")
    if not isinstance(name, str) or not name:
        return None
    return ProbeResult(name=name, source="pyproject.toml", project_type="Python")


def probe_cmake(root: Path) -> ProbeResult | None:
    """CMakeLists.txt: `project(<name> ...)`; C when only C is declared."""
    path = root / "CMakeLists.txt"
    content = _read_manifest(path)
    if content is None:
        return None

    match = _CMAKE_PROJECT_RE.search(content)
    if match is None:
        return None

    name = match.group(1).strip('"')
    args = match.group(2).split()
    if "LANGUAGES" in args:
        languages = []
        for token in args[args.index("LANGUAGES") + 1:]:
            if token in _CMAKE_KEYWORDS:
                break
            languages.append(token)
    else:
        languages = [token for token in args if token in {"C", "CXX"}]

    project_type = "C" if languages and set(languages) == {"C"} else "C++"
    return ProbeResult(name=name, source="CMakeLists.txt", project_type=project_type)


def read_git_remote(root: Path) -> str | None:
    """Return the `origin` remote URL from .git/config, or None."""
    content = _read_manifest(root / ".git" / "config")
    if content is None:
        return None

    in_origin = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith("["):
            in_origin = line.replace(" ", "") == '[remote"origin"]'
            continue
        if in_origin and "=" in line:
            key, value = line.split("=", 1)
            if key.strip() == "url":
                return value.strip()
    return None


def repository_name(url: str) -> str:
    """Base name of a repository URL without the .git suffix."""
    tail = re.split(r"[/:\\]", url.rstrip("/"))[-1]
    return tail[:-4] if tail.endswith(".git") else tail


# Manifest probes in priority order; the first one that succeeds wins
MANIFEST_PROBES: tuple[Callable[[Path], ProbeResult | None], ...] = (
    probe_go_mod,
    probe_cargo_toml,
    probe_pyproject,
    probe_cmake,
)


class ProjectResolver:
    """
    Resolves a ProjectDescriptor for a scanned root.

    Probes run in a fixed order: go.mod, Cargo.toml, pyproject.toml,
    CMakeLists.txt, then the origin remote in .git/config. The VCS probe
    yields a name but no language, so its type comes from the files directly
    in the root. With no probe the directory name and the full-scan
    histogram are used.
    """

    def __init__(
        self,
        scanner: Scanner | None = None,
        language_registry: LanguageRegistry | None = None,
    ):
        self._language_registry = language_registry or get_default_registry()
        self._scanner = scanner or Scanner(language_registry=self._language_registry)

    def resolve(self, root: Path | str, scan_result: ScanResult) -> ProjectDescriptor:
        """
        Derive project identity for root.

        Args:
            root: Directory that was scanned
            scan_result: Result of scanning root

        Returns:
            ProjectDescriptor
        """
        root_path = Path(root).resolve()
        scan_type = self.dominant_type(scan_result.language_histogram)

        remote_url = self._safe_probe(read_git_remote, root_path)
        probe = self._run_manifest_probes(root_path)

        if probe is None and remote_url:
            probe = ProbeResult(
                name=repository_name(remote_url), source=".git/config", hint=remote_url
            )

        if probe is None:
            name = root_path.name or str(root_path)
            dominant_type = scan_type
            source = "directory"
            hint = None
        else:
            name = probe.name
            source = probe.source
            hint = probe.hint
            if probe.project_type is not None:
                dominant_type = probe.project_type
            else:
                dominant_type = self.dominant_type(self._root_histogram(root_path))

        descriptor = ProjectDescriptor(
            name=name,
            repository=remote_url or hint or UNKNOWN_REPOSITORY,
            dominant_type=dominant_type,
            source=source,
            scan_type=scan_type,
        )
        logger.debug(f"Resolved project: {descriptor}")
        return descriptor

    def dominant_type(self, histogram: Mapping[str, int]) -> str:
        """Histogram argmax, with an ambiguous winner narrowed to a candidate."""
        label = histogram_argmax(histogram)
        candidates = self._language_registry.candidates_for(label)
        if not candidates:
            return label

        present = {c: histogram[c] for c in candidates if histogram.get(c, 0) > 0}
        if not present:
            return label
        return histogram_argmax(present)

    def _run_manifest_probes(self, root: Path) -> ProbeResult | None:
        for probe in MANIFEST_PROBES:
            result = self._safe_probe(probe, root)
            if result is not None:
                logger.debug(f"Manifest probe {probe.__name__} matched: {result.name}")
                return result
        return None

    @staticmethod
    def _safe_probe(probe: Callable, root: Path):
        try:
            return probe(root)
        except ConfigReadError as e:
            logger.warning(f"Skipping manifest: {e}")
            return None

    def _root_histogram(self, root: Path) -> dict[str, int]:
        """Language counts for recognized, non-ignored files directly in root."""
        counts: Counter[str] = Counter()
        try:
            with os.scandir(root) as it:
                for entry in it:
                    if not entry.is_file():
                        continue
                    if not self._scanner.is_recognized(entry.name):
                        continue
                    if self._scanner.ignore_set.should_skip(entry.name):
                        continue
                    counts[self._language_registry.detect_from_path(entry.name)] += 1
        except OSError as e:
            logger.warning(f"Cannot list {root} for language detection: {e}")
        return dict(counts)
