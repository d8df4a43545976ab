"""
Language registry for mapping file extensions to language labels.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Default path to the languages configuration file
_DEFAULT_LANGUAGES_CONFIG = Path(__file__).parent.parent / "languages.yaml"

# Label for extensions outside the registry
UNRECOGNIZED = "Unknown"


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying a single extension.

    Attributes:
        label: Language label ('Go', 'C/C++ Header', 'Unknown', ...)
        candidates: Languages an ambiguous label may stand for, empty otherwise
    """

    label: str
    candidates: tuple[str, ...] = ()

    @property
    def ambiguous(self) -> bool:
        return bool(self.candidates)

    @property
    def recognized(self) -> bool:
        return self.label != UNRECOGNIZED


class LanguageRegistry:
    """
    Registry mapping file extensions to language labels.

    Extensions shared by more than one language are registered as ambiguous:
    they keep a combined label and remember the languages they could belong
    to, so the choice can be made later from project-level signals.

    Example:
        >>> registry = LanguageRegistry()
        >>> registry.detect(".go")
        'Go'
        >>> registry.classify(".h").candidates
        ('C', 'C++')
    """

    def __init__(self, load_defaults: bool = True):
        """
        Initialize the language registry.

        Args:
            load_defaults: If True, load default language mappings from languages.yaml.
        """
        self._extension_to_language: dict[str, str] = {}
        self._language_to_extensions: dict[str, set[str]] = {}
        self._candidates: dict[str, tuple[str, ...]] = {}

        if load_defaults:
            self._load_from_yaml(_DEFAULT_LANGUAGES_CONFIG)

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "LanguageRegistry":
        """
        Create a LanguageRegistry from a YAML configuration file.

        Raises:
            ValueError: If the config file format is invalid
        """
        registry = cls(load_defaults=False)
        registry._load_from_yaml(Path(config_path))
        return registry

    def _load_from_yaml(self, config_path: Path) -> None:
        """
        Load language mappings from a YAML file.

        Expected format:
            languages:
              Label:
                - .ext1
            ambiguous:
              Combined Label:
                extensions: [.ext2]
                candidates: [Label, Other]
        """
        if not config_path.exists():
            logger.warning(f"Languages config not found: {config_path}, using empty registry")
            return

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse languages config: {e}")
            raise ValueError(f"Invalid YAML in languages config: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid languages config format: expected dict, got {type(data)}"
            )

        for language, extensions in (data.get("languages") or {}).items():
            if not isinstance(extensions, list):
                logger.warning(
                    f"Invalid extensions for {language}: expected list, got {type(extensions)}"
                )
                continue
            self.register(str(language), [str(ext) for ext in extensions])

        for label, entry in (data.get("ambiguous") or {}).items():
            if not isinstance(entry, dict):
                logger.warning(f"Invalid ambiguous entry for {label}: expected mapping")
                continue
            self.register_ambiguous(
                str(label),
                [str(ext) for ext in entry.get("extensions") or []],
                [str(candidate) for candidate in entry.get("candidates") or []],
            )

    def _add_mapping(self, extension: str, language: str) -> None:
        ext_lower = extension.lower()
        self._extension_to_language[ext_lower] = language
        self._language_to_extensions.setdefault(language, set()).add(ext_lower)

    def register(self, language: str, extensions: list[str]) -> "LanguageRegistry":
        """Register a language with its file extensions. Returns self for chaining."""
        for ext in extensions:
            self._add_mapping(ext, language)
        return self

    def register_ambiguous(
        self, label: str, extensions: list[str], candidates: list[str]
    ) -> "LanguageRegistry":
        """Register extensions shared by several candidate languages."""
        for ext in extensions:
            self._add_mapping(ext, label)
        self._candidates[label] = tuple(sorted(set(candidates)))
        return self

    def classify(self, extension: str) -> Classification:
        """Classify an extension (including the dot) into a Classification."""
        label = self._extension_to_language.get(extension.lower(), UNRECOGNIZED)
        return Classification(label=label, candidates=self._candidates.get(label, ()))

    def detect(self, extension: str) -> str:
        """Return the language label for an extension, or UNRECOGNIZED."""
        return self._extension_to_language.get(extension.lower(), UNRECOGNIZED)

    def detect_from_path(self, file_path: Path | str) -> str:
        return self.detect(Path(file_path).suffix)

    def candidates_for(self, label: str) -> tuple[str, ...]:
        """Candidate languages of an ambiguous label (empty if unambiguous)."""
        return self._candidates.get(label, ())

    def get_extensions(self, language: str) -> set[str]:
        return self._language_to_extensions.get(language, set()).copy()

    def get_all_extensions(self) -> set[str]:
        """Get all registered file extensions."""
        return set(self._extension_to_language.keys())

    def is_supported(self, extension: str) -> bool:
        return extension.lower() in self._extension_to_language


_default_registry: LanguageRegistry | None = None


def get_default_registry() -> LanguageRegistry:
    """Get the shared default language registry, loading it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = LanguageRegistry()
    return _default_registry


def extension_to_language(extension: str) -> str:
    """Map a lowercase extension (with leading dot) to its language label."""
    return get_default_registry().detect(extension)
