"""
Summary service wiring the core components together.

Every component receives its settings from the one CodesumConfig passed in;
nothing here reads environment or module-level state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from codesum.core.config import CodesumConfig
from codesum.core.file_scanner import LanguageRegistry, Scanner, ScanResult, get_default_registry
from codesum.core.ignore_set import IgnoreSet
from codesum.services.project_resolver import ProjectDescriptor, ProjectResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectSummary:
    """A scan result together with the project it belongs to."""

    project: ProjectDescriptor
    result: ScanResult


def build_ignore_set(config: CodesumConfig, root: Path) -> IgnoreSet:
    """Load ignore sources relative to root plus configured extra patterns."""
    sources = [root / name for name in config.scan.ignore_files]
    return IgnoreSet.load(sources, config.scan.extra_ignore_patterns)


class SummaryService:
    """Runs one scan and resolves the project for a root directory."""

    def __init__(
        self,
        config: CodesumConfig,
        language_registry: Optional[LanguageRegistry] = None,
    ):
        self._config = config
        self._language_registry = language_registry or get_default_registry()

    def create_scanner(self, root: Path) -> Scanner:
        return Scanner(
            ignore_set=build_ignore_set(self._config, root),
            extensions=self._config.scan.extensions,
            language_registry=self._language_registry,
            max_workers=self._config.scan.max_workers,
        )

    def summarize(self, root: Path | str) -> ProjectSummary:
        """
        Scan root and resolve its project descriptor.

        Raises:
            TraversalError: If root cannot be walked
            FileExtractionError: If a selected file cannot be read
        """
        root_path = Path(root)
        scanner = self.create_scanner(root_path)
        logger.debug(
            f"Scanning {root_path} with {len(scanner.ignore_set)} ignore patterns "
            f"and extensions {', '.join(sorted(scanner.extensions))}"
        )

        result = scanner.walk(root_path)
        resolver = ProjectResolver(scanner=scanner, language_registry=self._language_registry)
        project = resolver.resolve(root_path, result)
        return ProjectSummary(project=project, result=result)
