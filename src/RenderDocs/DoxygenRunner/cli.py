# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.cli",
#   "purpose": "Typer entry point that runs Doxygen and maps fatal results to exit codes",
#   "sections": [
#     {"id": "run", "name": "run", "anchor": "function-run", "kind": "function"},
#     {"id": "install", "name": "install", "anchor": "function-install", "kind": "function"},
#     {"id": "version-cmd", "name": "version_cmd", "anchor": "function-version-cmd", "kind": "function"},
#     {"id": "cli-main", "name": "cli_main", "anchor": "function-cli-main", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Command line entry point for the Doxygen runner.

This is the only place where a fatal run result becomes a non-zero process
exit.  Diagnostics are written to stdout (one per line, or as JSON with
``--json``); log output goes to stderr.

Example:
    $ renderdocs-runner run ./src --include-cpp --xml-folder build/xml
    $ renderdocs-runner install 1.9.8
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console

from . import __version__
from .errors import ConfigError, FatalRunError
from .installation import DoxygenInstallation
from .logging_config import setup_logging
from .runner import DoxygenRunner
from .settings import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_DOXYGEN_VERSION,
    DEFAULT_XML_FOLDER,
    AccessLevel,
    RunOptions,
    get_settings,
    load_run_options,
)

_console = Console()
_err_console = Console(stderr=True)

app = typer.Typer(
    name="renderdocs-runner",
    help="Run Doxygen over annotated sources and report documentation warnings",
    no_args_is_help=True,
)


def _build_options(
    source: Path,
    *,
    xml_folder: Path,
    include_cpp: bool,
    exclude: Optional[str],
    access_level: AccessLevel,
    doxygen_version: str,
    config_file: Path,
    no_xml: bool,
    debug: bool,
    options_file: Optional[Path],
) -> RunOptions:
    extensions: List[str] = [".h"]
    if include_cpp:
        extensions.append(".cpp")
    fields = {
        "source_folder": source,
        "doxygen_version": doxygen_version,
        "output_xml": not no_xml,
        "xml_folder": xml_folder,
        "file_extensions": extensions,
        "exclude": exclude,
        "access_level": access_level,
        "debug": debug,
        "config_file": config_file,
    }
    if options_file is not None:
        return load_run_options(options_file, **fields)
    return RunOptions(**fields)


@app.command()
def run(
    source: Path = typer.Argument(..., help="Source folder containing the header files"),
    xml_folder: Path = typer.Option(DEFAULT_XML_FOLDER, "--xml-folder", help="XML output folder"),
    include_cpp: bool = typer.Option(False, "--include-cpp", "-c", help="Include .cpp files"),
    exclude: Optional[str] = typer.Option(None, "--exclude", "-e", help="Pattern for excluding files"),
    access_level: AccessLevel = typer.Option(
        AccessLevel.PUBLIC, "--access-level", case_sensitive=False, help="Member visibility"
    ),
    doxygen_version: str = typer.Option(DEFAULT_DOXYGEN_VERSION, "--doxygen-version"),
    config_file: Path = typer.Option(DEFAULT_CONFIG_FILE, "--config-file", help="Directive file path"),
    no_xml: bool = typer.Option(False, "--no-xml", help="Skip XML generation"),
    options_file: Optional[Path] = typer.Option(
        None, "--options-file", help="YAML run options; values override command line flags"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Verbose output"),
    as_json: bool = typer.Option(False, "--json", help="Emit the result as JSON"),
) -> None:
    """Run Doxygen over SOURCE and print documentation warnings."""

    try:
        options = _build_options(
            source,
            xml_folder=xml_folder,
            include_cpp=include_cpp,
            exclude=exclude,
            access_level=access_level,
            doxygen_version=doxygen_version,
            config_file=config_file,
            no_xml=no_xml,
            debug=debug,
            options_file=options_file,
        )
        settings = get_settings()
    except (ConfigError, ValueError) as exc:
        _err_console.print(f"[red]Invalid options: {exc}[/red]")
        raise typer.Exit(2)

    logger = setup_logging(settings, debug=options.debug, stream=sys.stderr)
    result = asyncio.run(DoxygenRunner(options, settings=settings, logger=logger).run())

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        for message in result.messages:
            typer.echo(message.line)

    if result.fatal is not None:
        _err_console.print(f"[red]❌ {result.fatal}[/red]")
        raise typer.Exit(result.exit_code)
    if result.messages and not as_json:
        _err_console.print(f"[yellow]{len(result.messages)} documentation warning(s)[/yellow]")


@app.command()
def install(
    version: str = typer.Argument(DEFAULT_DOXYGEN_VERSION, help="Doxygen version to install"),
) -> None:
    """Download VERSION of Doxygen unless it is already installed."""

    settings = get_settings()
    logger = setup_logging(settings, stream=sys.stderr)
    installation = DoxygenInstallation(settings, logger=logger)
    try:
        binary = asyncio.run(installation.ensure_installed(version))
    except FatalRunError as exc:
        _err_console.print(f"[red]❌ {exc}[/red]")
        raise typer.Exit(exc.exit_code)
    _console.print(f"[green]✓[/green] Doxygen {version}: {binary}")


@app.command("version")
def version_cmd() -> None:
    """Show version information."""

    _console.print(f"[bold]renderdocs-runner[/bold] version {__version__}")


def cli_main(argv: Optional[Sequence[str]] = None) -> int:
    """Invoke the CLI without exiting the interpreter and return its exit code.

    Usage errors are reported by Typer itself and map to exit code ``2``.
    """

    command = typer.main.get_command(app)
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        command.main(args=args, prog_name="renderdocs-runner")
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1
    return 0


def main() -> None:  # pragma: no cover - console script shim
    sys.exit(cli_main())


__all__ = ["app", "cli_main", "main"]
