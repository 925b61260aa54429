# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.errors",
#   "purpose": "Define the exception hierarchy used across installation, configuration, execution, and verification",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "configuration", "name": "Configuration Errors", "anchor": "CFG", "kind": "api"},
#     {"id": "fatal", "name": "Fatal Run Failures", "anchor": "FAT", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared across the Doxygen runner.

A run spans tool installation, directive file synthesis, process execution,
and XML output verification.  Failures fall into two groups: configuration
errors raised before anything touches the filesystem, and fatal run failures
that end a run without producing diagnostics.  Documentation warnings are not
exceptions at all; they are returned to the caller as data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = [
    "DoxygenRunnerError",
    "ConfigError",
    "FatalRunError",
    "InstallationFailure",
    "MissingNativeDependency",
    "ToolLaunchError",
    "EmptyStructuredOutput",
]


class DoxygenRunnerError(RuntimeError):
    """Base exception for Doxygen runner failures."""


class ConfigError(DoxygenRunnerError):
    """Raised when run options or settings files are invalid."""


class FatalRunError(DoxygenRunnerError):
    """Base class for conditions that terminate a run without diagnostics.

    Attributes:
        exit_code: Process status the entry point reports for this failure.
    """

    exit_code: int = 1


class InstallationFailure(FatalRunError):
    """Raised when the requested Doxygen version could not be installed."""

    def __init__(self, message: str, *, version: str) -> None:
        super().__init__(message)
        self.version = version


class MissingNativeDependency(FatalRunError):
    """Raised when Doxygen cannot start because a shared library is absent."""

    def __init__(self, library: str) -> None:
        super().__init__(f"Failed to run Doxygen due to missing libraries: {library}")
        self.library = library


class ToolLaunchError(FatalRunError):
    """Raised when the Doxygen binary cannot be executed by the OS."""

    def __init__(self, message: str, *, binary: Optional[Path] = None) -> None:
        super().__init__(message)
        self.binary = binary


class EmptyStructuredOutput(FatalRunError):
    """Raised when XML output was requested but the output folder is empty."""

    def __init__(self, folder: Path) -> None:
        super().__init__(f"No XML files found in {folder}.")
        self.folder = folder
