# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.runner",
#   "purpose": "Orchestrate installation, configuration, execution, and verification of a Doxygen run",
#   "sections": [
#     {"id": "runresult", "name": "RunResult", "anchor": "class-runresult", "kind": "class"},
#     {"id": "doxygenrunner", "name": "DoxygenRunner", "anchor": "class-doxygenrunner", "kind": "class"},
#     {"id": "run-documentation", "name": "run_documentation", "anchor": "function-run-documentation", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Doxygen run orchestration.

A run proceeds strictly in sequence::

    install -> write directive file -> execute -> (verify XML output)

Fatal conditions (installation failure, missing shared libraries, empty XML
output) end the run immediately.  They are raised by the individual steps and
converted here into a :class:`RunResult` carrying the error, so that only the
top-level entry point decides whether the process exits.  Documentation
warnings are never fatal, even though the directive file sets
``WARN_AS_ERROR``; they are returned as data.

Runs must not share a ``config_file`` or ``xml_folder`` concurrently because
the XML folder is emptied during preparation.

Usage:
    from RenderDocs.DoxygenRunner.runner import DoxygenRunner

    result = asyncio.run(DoxygenRunner(options).run())
    for message in result.messages:
        print(message)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .diagnostics import DiagnosticMessage
from .doxyfile import GeneratedConfig, prepare
from .errors import FatalRunError
from .execution import execute
from .installation import DoxygenInstallation
from .logging_config import LOGGER_NAME, bind_run, generate_run_id, setup_logging
from .settings import RunnerSettings, RunOptions, get_settings
from .verification import verify_xml_output

__all__ = ["ExecutionResult", "RunResult", "DoxygenRunner", "run_documentation"]

ExecutionResult = List[DiagnosticMessage]


@dataclass
class RunResult:
    """Outcome of :meth:`DoxygenRunner.run`.

    Attributes:
        messages: Documentation diagnostics in emission order.
        fatal: The fatal error that ended the run, if any.
        run_id: Identifier stamped on the run's log records.
    """

    messages: ExecutionResult = field(default_factory=list)
    fatal: Optional[FatalRunError] = None
    run_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fatal is None

    @property
    def exit_code(self) -> int:
        return self.fatal.exit_code if self.fatal is not None else 0

    def raise_for_fatal(self) -> ExecutionResult:
        """Re-raise the fatal error, otherwise return the diagnostics."""

        if self.fatal is not None:
            raise self.fatal
        return self.messages

    def to_dict(self) -> Dict[str, object]:
        return {
            "run_id": self.run_id,
            "ok": self.ok,
            "messages": [message.line for message in self.messages],
            "fatal": None
            if self.fatal is None
            else {"kind": type(self.fatal).__name__, "message": str(self.fatal)},
        }


class DoxygenRunner:
    """Run Doxygen once for a fixed set of :class:`RunOptions`."""

    def __init__(
        self,
        options: RunOptions,
        *,
        settings: Optional[RunnerSettings] = None,
        installation: Optional[DoxygenInstallation] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.options = options
        self.settings = settings or get_settings()
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.installation = installation or DoxygenInstallation(self.settings, logger=self.logger)

    async def check_installation(self) -> Path:
        return await self.installation.ensure_installed(self.options.doxygen_version)

    def prepare(self, logger: Optional[logging.Logger] = None) -> GeneratedConfig:
        return prepare(self.options, logger or self.logger)

    def check_xml_output(self, logger: Optional[logging.Logger] = None) -> int:
        return verify_xml_output(
            self.options.xml_folder, debug=self.options.debug, logger=logger or self.logger
        )

    async def run(self) -> RunResult:
        """Execute the full pipeline and return diagnostics or the fatal error."""

        run_id = generate_run_id()
        log = bind_run(self.logger, run_id)
        options = self.options
        try:
            binary = await self.check_installation()
            self.prepare(log)
            messages = execute(binary, options.config_file, debug=options.debug, logger=log)
            if options.output_xml:
                self.check_xml_output(log)
        except FatalRunError as exc:
            log.debug("run ended fatally", extra={"stage": "run", "error": type(exc).__name__})
            return RunResult(fatal=exc, run_id=run_id)

        log.debug(
            "run completed",
            extra={"stage": "run", "diagnostics": len(messages)},
        )
        return RunResult(messages=messages, run_id=run_id)


def run_documentation(
    options: RunOptions,
    *,
    settings: Optional[RunnerSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> RunResult:
    """Synchronous convenience wrapper around :meth:`DoxygenRunner.run`.

    Without a ``logger`` the package logger is used as configured by the
    caller.  In debug mode it is first set up with :func:`setup_logging`
    (console output on stderr) so the verbose listing is visible.
    """

    settings = settings or get_settings()
    if logger is None and options.debug:
        logger = setup_logging(settings, debug=True, stream=sys.stderr)
    return asyncio.run(DoxygenRunner(options, settings=settings, logger=logger).run())
