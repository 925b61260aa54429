# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.settings",
#   "purpose": "Run options, environment-driven settings, and YAML option loading",
#   "sections": [
#     {"id": "constants", "name": "Defaults", "anchor": "DEF", "kind": "constants"},
#     {"id": "options", "name": "RunOptions", "anchor": "OPT", "kind": "api"},
#     {"id": "settings", "name": "RunnerSettings", "anchor": "SET", "kind": "api"},
#     {"id": "loading", "name": "YAML Loading", "anchor": "LOAD", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Configuration models for the Doxygen runner.

Two layers are kept apart:

- :class:`RunOptions` describes a single documentation run and is supplied by
  the caller.  It is immutable once constructed.
- :class:`RunnerSettings` carries machine-level settings (tool cache, mirror
  URL, logging) read from ``RENDERDOCS_*`` environment variables.
"""

from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

__all__ = [
    "AccessLevel",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_DOXYGEN_VERSION",
    "DEFAULT_FILE_EXTENSIONS",
    "DEFAULT_XML_FOLDER",
    "RunOptions",
    "RunnerSettings",
    "get_settings",
    "load_raw_yaml",
    "load_run_options",
    "reset_settings_cache",
]

# --- Defaults ------------------------------------------------------------------

DEFAULT_DOXYGEN_VERSION = "1.9.8"
DEFAULT_XML_FOLDER = Path("./build/xml/")
DEFAULT_CONFIG_FILE = Path("./doxygen.config")
DEFAULT_FILE_EXTENSIONS = (".h",)
DEFAULT_TOOLS_DIR = Path.home() / ".cache" / "renderdocs" / "tools"
DEFAULT_LOG_DIR = Path.home() / ".cache" / "renderdocs" / "logs"
DEFAULT_DOWNLOAD_BASE_URL = "https://www.doxygen.nl/files"


class AccessLevel(str, Enum):
    """Member visibility extracted into the documentation."""

    PUBLIC = "public"
    PRIVATE = "private"


# --- RunOptions ----------------------------------------------------------------


class RunOptions(BaseModel):
    """Immutable description of a single Doxygen run.

    Attributes:
        source_folder: Root folder scanned (recursively) for annotated sources.
        doxygen_version: Exact Doxygen release to install and execute.
        output_xml: Whether Doxygen should emit its XML representation.
        xml_folder: Destination of the XML output; only used with ``output_xml``.
        file_extensions: Ordered file patterns handed to ``FILE_PATTERNS``.
        exclude: Optional ``EXCLUDE_PATTERNS`` value.
        access_level: ``private`` also extracts private members.
        debug: Verbose mode; disables Doxygen's quiet mode and surfaces
            unrecognised tool output.
        config_file: Location of the generated directive file.

    Examples:
        >>> options = RunOptions(source_folder=Path("src"), file_extensions=[".h", ".cpp"])
        >>> options.access_level
        <AccessLevel.PUBLIC: 'public'>
    """

    source_folder: Path
    doxygen_version: str = DEFAULT_DOXYGEN_VERSION
    output_xml: bool = True
    xml_folder: Path = DEFAULT_XML_FOLDER
    file_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS))
    exclude: Optional[str] = None
    access_level: AccessLevel = AccessLevel.PUBLIC
    debug: bool = False
    config_file: Path = DEFAULT_CONFIG_FILE

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("doxygen_version")
    @classmethod
    def validate_version(cls, value: str) -> str:
        """Reject blank version identifiers."""

        stripped = value.strip()
        if not stripped:
            raise ValueError("doxygen_version must not be empty")
        return stripped

    @field_validator("file_extensions")
    @classmethod
    def validate_extensions(cls, value: List[str]) -> List[str]:
        """Ensure at least one non-blank file pattern is configured."""

        cleaned = [item.strip() for item in value]
        if not cleaned:
            raise ValueError("file_extensions must contain at least one entry")
        if any(not item for item in cleaned):
            raise ValueError("file_extensions must not contain blank entries")
        return cleaned

    @field_validator("access_level", mode="before")
    @classmethod
    def normalize_access_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


# --- RunnerSettings ------------------------------------------------------------


class RunnerSettings(BaseSettings):
    """Environment-derived settings shared by every run on this machine."""

    tools_dir: Path = Field(
        default=DEFAULT_TOOLS_DIR,
        description="Directory holding one sub-folder per installed Doxygen version",
    )
    download_base_url: str = Field(
        default=DEFAULT_DOWNLOAD_BASE_URL,
        description="Base URL serving the Doxygen release archives",
    )
    download_timeout_sec: float = Field(default=120.0, gt=0)
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_dir: Path = Field(default=DEFAULT_LOG_DIR)
    log_retention_days: int = Field(default=30, ge=1)
    max_log_size_mb: int = Field(default=20, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RENDERDOCS_", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Normalise logging levels and ensure they match the supported set."""

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        upper = value.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    @field_validator("download_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


_SETTINGS_LOCK = threading.RLock()
_SETTINGS_CACHE: Optional[RunnerSettings] = None


def get_settings() -> RunnerSettings:
    """Return a memoised :class:`RunnerSettings` built from the environment."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        if _SETTINGS_CACHE is None:
            try:
                _SETTINGS_CACHE = RunnerSettings()
            except PydanticValidationError as exc:
                raise ConfigError(f"Invalid RENDERDOCS_* environment settings: {exc}") from exc
        return _SETTINGS_CACHE


def reset_settings_cache() -> None:
    """Invalidate the cached settings (test helper)."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


# --- YAML Loading --------------------------------------------------------------


def load_raw_yaml(path: Path) -> Mapping[str, object]:
    """Read a YAML file and return its top-level mapping."""

    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigError(f"Options file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Options file '{path}' contains invalid YAML") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError("Options file must contain a mapping at the root")
    return data


def load_run_options(path: Path, **overrides: object) -> RunOptions:
    """Build :class:`RunOptions` from a YAML file.

    Args:
        path: YAML document whose keys mirror the ``RunOptions`` fields.
        **overrides: Fields used when the document does not set them.

    Returns:
        Validated, immutable run options.

    Raises:
        ConfigError: If the file is missing, malformed, or fails validation.
    """

    raw = dict(overrides)
    raw.update(load_raw_yaml(path))
    try:
        return RunOptions.model_validate(raw)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid run options in {path}: {exc}") from exc
