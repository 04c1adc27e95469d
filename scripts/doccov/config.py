"""Configuration loading and validation for coverage runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Error in doccov configuration."""

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        error_type: str = "config_invalid",
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.error_type = error_type

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        return " | ".join(parts)


COVERAGE_SCOPE_CLASSES = "classes"
COVERAGE_SCOPE_ELEMENTS = "elements"
COVERAGE_SCOPES = (COVERAGE_SCOPE_CLASSES, COVERAGE_SCOPE_ELEMENTS)

OUTPUT_FORMATS = ("console", "json", "html")

DEFAULT_CONFIG_FILE = "doccov.yml"
DEFAULT_SOURCE_PATHS = ["src/"]
DEFAULT_DOCS_PATHS = ["docs/"]
DEFAULT_EXCLUDE_PATHS = ["vendor/", "tests/"]
DEFAULT_MINIMUM_COVERAGE = 80.0


@dataclass
class Configuration:
    """Complete settings for one coverage run."""

    project_root: Path
    source_paths: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_PATHS))
    docs_paths: list[str] = field(default_factory=lambda: list(DEFAULT_DOCS_PATHS))
    exclude_paths: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS))
    output_format: str = "console"
    output_file: str = ""
    minimum_coverage: float = DEFAULT_MINIMUM_COVERAGE
    coverage_scope: str = COVERAGE_SCOPE_ELEMENTS
    baseline_file: Optional[str] = None

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root)
        if self.coverage_scope not in COVERAGE_SCOPES:
            logger.warning(
                f"Unknown coverage scope {self.coverage_scope!r}, using {COVERAGE_SCOPE_ELEMENTS!r}"
            )
            self.coverage_scope = COVERAGE_SCOPE_ELEMENTS

    def _absolute(self, paths: list[str]) -> list[Path]:
        return [self.project_root / p.lstrip("/") for p in paths]

    @property
    def absolute_source_paths(self) -> list[Path]:
        return self._absolute(self.source_paths)

    @property
    def absolute_docs_paths(self) -> list[Path]:
        return self._absolute(self.docs_paths)

    @property
    def absolute_exclude_paths(self) -> list[Path]:
        return self._absolute(self.exclude_paths)

    @property
    def is_classes_only_scope(self) -> bool:
        return self.coverage_scope == COVERAGE_SCOPE_CLASSES


def _string_list(value: Any, key: str, config_file: Optional[str]) -> list[str]:
    """Accept a single string or a list of strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings", file=config_file)


def load_config_file(config_path: Path | str) -> dict[str, Any]:
    """Load raw settings from a YAML file.

    Args:
        config_path: Path to the doccov.yml file.

    Returns:
        Mapping of settings, empty if the file is missing or blank.

    Raises:
        ConfigError: If the file exists but is not a valid YAML mapping.
    """
    config_path = Path(config_path)
    config_file = str(config_path)

    if not config_path.exists():
        return {}

    try:
        content = config_path.read_text(encoding="utf-8")
        if not content.strip():
            return {}
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", file=config_file)
    except OSError as e:
        raise ConfigError(
            f"Could not read config: {e}", file=config_file, error_type="file_system_error"
        )

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level doccov config must be a mapping", file=config_file)
    return data


def build_configuration(
    project_root: Path | str,
    file_data: Optional[dict[str, Any]] = None,
    overrides: Optional[dict[str, Any]] = None,
    config_file: Optional[str] = None,
) -> Configuration:
    """Merge defaults, config file values and explicit overrides.

    Overrides whose value is None are treated as "not given".

    Raises:
        ConfigError: If a value has the wrong type or an unknown format.
    """
    data: dict[str, Any] = dict(file_data or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    output_format = str(data.get("output_format", "console"))
    if output_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Unknown output format '{output_format}'. Must be one of: {', '.join(OUTPUT_FORMATS)}",
            file=config_file,
        )

    try:
        minimum_coverage = float(data.get("minimum_coverage", DEFAULT_MINIMUM_COVERAGE))
    except (TypeError, ValueError):
        raise ConfigError(
            f"'minimum_coverage' must be a number, got {data.get('minimum_coverage')!r}",
            file=config_file,
        )

    baseline_file = data.get("baseline_file")

    return Configuration(
        project_root=Path(project_root),
        source_paths=_string_list(data.get("source_paths", DEFAULT_SOURCE_PATHS), "source_paths", config_file),
        docs_paths=_string_list(data.get("docs_paths", DEFAULT_DOCS_PATHS), "docs_paths", config_file),
        exclude_paths=_string_list(
            data.get("exclude_paths", DEFAULT_EXCLUDE_PATHS), "exclude_paths", config_file
        ),
        output_format=output_format,
        output_file=str(data.get("output_file") or ""),
        minimum_coverage=minimum_coverage,
        coverage_scope=str(data.get("coverage_scope", COVERAGE_SCOPE_ELEMENTS)),
        baseline_file=str(baseline_file) if baseline_file else None,
    )


def load_config(
    project_root: Path | str,
    config_path: Optional[Path | str] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> Configuration:
    """Load configuration for a project.

    Args:
        project_root: Project directory being analyzed.
        config_path: Config file, relative paths resolved against the
            project root. Defaults to ``doccov.yml``.
        overrides: Explicit values (typically CLI options) that win over
            the file.

    Returns:
        Configuration with file values merged over defaults.
    """
    project_root = Path(project_root).resolve()
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILE)
    if not path.is_absolute():
        path = project_root / path

    file_data = load_config_file(path)
    return build_configuration(project_root, file_data, overrides, config_file=str(path))
