# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner",
#   "purpose": "Package initialization for RenderDocs.DoxygenRunner",
#   "sections": []
# }
# === /NAVMAP ===

"""Public API for the RenderDocs Doxygen runner.

The runner installs a pinned Doxygen release, writes its directive file,
executes it over annotated C/C++ sources, and returns the documentation
warnings Doxygen reported.  The XML it produces is consumed by a separate
markdown renderer.
"""

from __future__ import annotations

from .diagnostics import DiagnosticMessage, filter_diagnostics
from .doxyfile import build_directives, prepare, read_doxyfile, write_doxyfile
from .errors import (
    ConfigError,
    DoxygenRunnerError,
    EmptyStructuredOutput,
    FatalRunError,
    InstallationFailure,
    MissingNativeDependency,
    ToolLaunchError,
)
from .execution import detect_missing_library, execute
from .installation import DoxygenInstallation
from .runner import DoxygenRunner, ExecutionResult, RunResult, run_documentation
from .settings import AccessLevel, RunnerSettings, RunOptions, load_run_options
from .verification import verify_xml_output

__version__ = "0.3.0"

__all__ = [
    "AccessLevel",
    "ConfigError",
    "DiagnosticMessage",
    "DoxygenInstallation",
    "DoxygenRunner",
    "DoxygenRunnerError",
    "EmptyStructuredOutput",
    "ExecutionResult",
    "FatalRunError",
    "InstallationFailure",
    "MissingNativeDependency",
    "RunOptions",
    "RunResult",
    "RunnerSettings",
    "ToolLaunchError",
    "__version__",
    "build_directives",
    "detect_missing_library",
    "execute",
    "filter_diagnostics",
    "load_run_options",
    "prepare",
    "read_doxyfile",
    "run_documentation",
    "verify_xml_output",
    "write_doxyfile",
]
