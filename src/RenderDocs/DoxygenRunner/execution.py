# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.execution",
#   "purpose": "Invoke Doxygen and classify its outcome",
#   "sections": [
#     {"id": "detect-missing-library", "name": "detect_missing_library", "anchor": "function-detect-missing-library", "kind": "function"},
#     {"id": "run-doxygen", "name": "run_doxygen", "anchor": "function-run-doxygen", "kind": "function"},
#     {"id": "execute", "name": "execute", "anchor": "function-execute", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Doxygen process execution and outcome classification.

Three outcomes are distinguished:

1. Clean exit: no diagnostics.
2. Missing shared library: Doxygen never started.  Fatal.
3. Any other non-zero exit: stderr is handed to
   :func:`~.diagnostics.filter_diagnostics`.

Doxygen exposes no structured error taxonomy, so (2) is recognised by the
loader's message text rather than by exit code.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional

from .diagnostics import DiagnosticMessage, filter_diagnostics
from .errors import MissingNativeDependency, ToolLaunchError

__all__ = [
    "MISSING_LIBRARY_MARKER",
    "detect_missing_library",
    "execute",
    "run_doxygen",
]

# Emitted by the dynamic loader (ld.so) when a required .so cannot be found.
MISSING_LIBRARY_MARKER = "error while loading shared libraries:"
_MISSING_LIBRARY_PATTERN = re.compile(re.escape(MISSING_LIBRARY_MARKER) + r" ([^:\n]+)")


def detect_missing_library(text: str) -> Optional[str]:
    """Return the missing library named in ``text``.

    Returns ``None`` when the loader marker is absent and ``"unknown"`` when
    the marker is present without a library name.

    Examples:
        >>> detect_missing_library(
        ...     "doxygen: error while loading shared libraries: libclang.so.9: cannot open"
        ... )
        'libclang.so.9'
        >>> detect_missing_library("a.h:1: warning: x") is None
        True
    """

    if MISSING_LIBRARY_MARKER not in text:
        return None
    match = _MISSING_LIBRARY_PATTERN.search(text)
    if match is None:
        return "unknown"
    return match.group(1).strip() or "unknown"


def _decode(payload: object) -> str:
    if payload is None:
        return ""
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return str(payload)


def run_doxygen(binary: Path, config_file: Path) -> subprocess.CompletedProcess:
    """Run ``binary`` against ``config_file``; raises ``CalledProcessError`` on failure."""

    return subprocess.run(
        [str(binary), str(config_file)],
        check=True,
        capture_output=True,
    )


def execute(
    binary: Path,
    config_file: Path,
    *,
    debug: bool = False,
    logger: logging.Logger,
) -> List[DiagnosticMessage]:
    """Run Doxygen and return its documentation diagnostics.

    Args:
        binary: Installed Doxygen executable.
        config_file: Directive file written by :func:`~.doxyfile.prepare`.
        debug: Surface unrecognised stderr lines through ``logger``.
        logger: Sink for execution telemetry.

    Returns:
        Diagnostics in emission order; empty for a clean run.

    Raises:
        MissingNativeDependency: If a shared library required by Doxygen is absent.
        ToolLaunchError: If the operating system refuses to start the binary.
    """

    if debug:
        logger.info("Running Doxygen ...", extra={"stage": "execute", "binary": str(binary)})
    try:
        run_doxygen(binary, config_file)
    except subprocess.CalledProcessError as exc:
        stderr = _decode(exc.stderr)
        library = detect_missing_library(f"{exc}\n{stderr}")
        if library is not None:
            logger.error(
                f"Failed to run Doxygen due to missing libraries: {library}",
                extra={"stage": "execute", "library": library},
            )
            raise MissingNativeDependency(library) from exc
        logger.debug(
            "doxygen exited with diagnostics",
            extra={"stage": "execute", "returncode": exc.returncode},
        )
        return filter_diagnostics(stderr, debug=debug, logger=logger)
    except OSError as exc:
        logger.error(
            "doxygen could not be started",
            extra={"stage": "execute", "binary": str(binary), "error": str(exc)},
        )
        raise ToolLaunchError(f"Failed to start Doxygen at {binary}: {exc}", binary=binary) from exc
    return []
