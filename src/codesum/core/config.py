"""
Configuration module for codesum.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.

A single CodesumConfig is built once at startup and handed to every
component; nothing in the core reads process-wide settings on its own.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from codesum.core.file_scanner.language_registry import get_default_registry

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

OUTPUT_FORMATS = ("markdown", "json", "table")

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    return section_defaults.get(key, fallback)


def _default_extensions() -> list[str]:
    """Extensions from defaults.yaml, or every extension in languages.yaml if unset."""
    configured = _get_default("scan", "extensions")
    if configured is None:
        return sorted(get_default_registry().get_all_extensions())
    return list(configured)


@dataclass
class ScanConfig:
    """Configuration for directory traversal and file extraction."""

    extensions: list[str] = field(default_factory=_default_extensions)
    ignore_files: list[str] = field(
        default_factory=lambda: list(
            _get_default("scan", "ignore_files", [".ignore", ".gitignore"])
        )
    )
    extra_ignore_patterns: list[str] = field(
        default_factory=lambda: list(_get_default("scan", "extra_ignore_patterns", []))
    )
    max_workers: int = field(default_factory=lambda: _get_default("scan", "max_workers", 8))


@dataclass
class OutputConfig:
    """Configuration for rendering the summary."""

    format: str = field(default_factory=lambda: _get_default("output", "format", "markdown"))


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default("logging", "format", "%(message)s")
    )


@dataclass
class CodesumConfig:
    """Main configuration class for codesum."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "CodesumConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            CodesumConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        if not isinstance(data, dict):
            raise ValueError(f"Invalid config format in {path}: expected a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "CodesumConfig":
        """Create CodesumConfig from a dictionary."""
        config = cls()

        if "scan" in data:
            config.scan = ScanConfig(**data["scan"])
        if "output" in data:
            config.output = OutputConfig(**data["output"])
        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def apply_env_overrides(self) -> "CodesumConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: CODESUM_<SECTION>_<KEY>
        Examples:
            - CODESUM_SCAN_MAX_WORKERS
            - CODESUM_SCAN_EXTENSIONS (comma separated)
            - CODESUM_OUTPUT_FORMAT
            - CODESUM_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Scan config
            "CODESUM_SCAN_EXTENSIONS": ("scan", "extensions", _parse_list),
            "CODESUM_SCAN_IGNORE_FILES": ("scan", "ignore_files", _parse_list),
            "CODESUM_SCAN_EXTRA_IGNORE_PATTERNS": ("scan", "extra_ignore_patterns", _parse_list),
            "CODESUM_SCAN_MAX_WORKERS": ("scan", "max_workers", int),
            # Output config
            "CODESUM_OUTPUT_FORMAT": ("output", "format", str),
            # Logging config
            "CODESUM_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

    def validate(self) -> "CodesumConfig":
        """
        Check values that would otherwise fail deep inside a scan.

        Raises:
            ValueError: If a value is out of range
        """
        if self.scan.max_workers < 1:
            raise ValueError(f"scan.max_workers must be >= 1, got {self.scan.max_workers}")
        if self.output.format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format '{self.output.format}', "
                f"expected one of: {', '.join(OUTPUT_FORMATS)}"
            )
        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_list(value: str) -> list[str]:
    """Parse a comma separated string into a list of trimmed items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> CodesumConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        CodesumConfig instance
    """
    if config_path:
        config = CodesumConfig.from_file(config_path)
    else:
        config = CodesumConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
