# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.doxyfile",
#   "purpose": "Map run options onto Doxygen directives and persist the directive file",
#   "sections": [
#     {"id": "build-directives", "name": "build_directives", "anchor": "function-build-directives", "kind": "function"},
#     {"id": "write-doxyfile", "name": "write_doxyfile", "anchor": "function-write-doxyfile", "kind": "function"},
#     {"id": "read-doxyfile", "name": "read_doxyfile", "anchor": "function-read-doxyfile", "kind": "function"},
#     {"id": "prepare", "name": "prepare", "anchor": "function-prepare", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Doxygen directive file synthesis.

The directive set is a pure function of :class:`~.settings.RunOptions`:
identical options always yield identical directives in the same order.
Textual output formats are never generated; only the XML representation is
toggled.  Warnings are configured as failures (``FAIL_ON_WARNINGS``) so that
Doxygen reports a non-zero exit whenever documentation diagnostics exist.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping

from .io_safe import clean_directory, create_directories
from .settings import AccessLevel, RunOptions

__all__ = [
    "GeneratedConfig",
    "build_directives",
    "prepare",
    "read_doxyfile",
    "write_doxyfile",
]

GeneratedConfig = Dict[str, str]

_PATH_DIRECTIVES = frozenset({"INPUT", "XML_OUTPUT"})


def _flag(value: bool) -> str:
    return "YES" if value else "NO"


def build_directives(options: RunOptions) -> GeneratedConfig:
    """Return the ordered Doxygen directives for ``options``.

    Examples:
        >>> directives = build_directives(RunOptions(source_folder=Path("src"), file_extensions=[".h", ".cpp"]))
        >>> directives["FILE_PATTERNS"]
        '.h .cpp'
    """

    return {
        "INPUT": str(options.source_folder),
        "RECURSIVE": "YES",
        "GENERATE_HTML": "NO",
        "GENERATE_LATEX": "NO",
        "GENERATE_XML": _flag(options.output_xml),
        "XML_OUTPUT": str(options.xml_folder),
        # Lowercase compound file names.
        "CASE_SENSE_NAMES": "NO",
        "FILE_PATTERNS": " ".join(options.file_extensions),
        "EXCLUDE_PATTERNS": options.exclude or "",
        "EXTRACT_PRIVATE": _flag(options.access_level is AccessLevel.PRIVATE),
        "EXTRACT_STATIC": "NO",
        "QUIET": _flag(not options.debug),
        "WARN_NO_PARAMDOC": "YES",
        "WARN_AS_ERROR": "FAIL_ON_WARNINGS",
        # Without preprocessing, conditional (#ifdef) blocks stay visible.
        "ENABLE_PREPROCESSING": "NO",
    }


def _format_value(key: str, value: str) -> str:
    if key in _PATH_DIRECTIVES and any(char.isspace() for char in value):
        return f'"{value}"'
    return value


def write_doxyfile(directives: Mapping[str, str], path: Path) -> Path:
    """Write ``directives`` as ``KEY = value`` lines, replacing any previous file."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{key} = {_format_value(key, value)}".rstrip() for key, value in directives.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def read_doxyfile(path: Path) -> GeneratedConfig:
    """Parse a directive file written by :func:`write_doxyfile`."""

    directives: GeneratedConfig = {}
    for raw_line in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        directives[key.strip()] = value
    return directives


def prepare(options: RunOptions, logger: logging.Logger) -> GeneratedConfig:
    """Persist the directive file and reset the XML output folder.

    When XML output is enabled the folder is emptied and recreated so that no
    artefact from an earlier run survives into this one.
    """

    directives = build_directives(options)
    if options.debug:
        logger.info(
            f"Creating Doxygen config file {options.config_file} ...",
            extra={"stage": "configure", "config_file": str(options.config_file)},
        )
    write_doxyfile(directives, options.config_file)

    if directives["GENERATE_XML"] == "YES":
        clean_directory(options.xml_folder)
        create_directories([options.xml_folder])
        logger.info(
            f"Generating XML documentation at {options.xml_folder} ...",
            extra={"stage": "configure", "xml_folder": str(options.xml_folder)},
        )
    return directives
