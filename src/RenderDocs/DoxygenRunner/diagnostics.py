"""Doxygen diagnostic extraction.

Doxygen writes documentation warnings to stderr interleaved with unrelated
noise (banners, build chatter, errors about the environment).  Only lines of
the canonical shape ``<file>:<line>: warning: <text>`` are kept; a warning
wrapped over several lines is first collapsed into one logical line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

__all__ = ["DiagnosticMessage", "filter_diagnostics", "normalize_continuations"]

WARNING_LINE_PATTERN = re.compile(r"^([^:\n]+):(\d+): warning: (.+)$")
_CONTINUATION = "\n  "


@dataclass(frozen=True)
class DiagnosticMessage:
    """One normalised documentation warning.

    Attributes:
        line: The full normalised line, exactly as Doxygen reported it.
        source: File component of the locator.
        line_number: Line component of the locator.
        text: Warning text following ``warning:``.

    Examples:
        >>> msg = DiagnosticMessage.parse("a.h:10: warning: Undocumented")
        >>> (msg.source, msg.line_number, msg.text)
        ('a.h', 10, 'Undocumented')
    """

    line: str
    source: str
    line_number: int
    text: str

    @property
    def locator(self) -> str:
        return f"{self.source}:{self.line_number}"

    @classmethod
    def parse(cls, line: str) -> "DiagnosticMessage":
        match = WARNING_LINE_PATTERN.match(line)
        if match is None:
            raise ValueError(f"not a documentation warning: {line!r}")
        return cls(
            line=line,
            source=match.group(1),
            line_number=int(match.group(2)),
            text=match.group(3),
        )

    def __str__(self) -> str:
        return self.line


def normalize_continuations(raw_text: str) -> str:
    """Join wrapped warning lines (newline plus two spaces) into one line.

    Windows line endings are folded to ``\\n`` first.
    """

    return raw_text.replace("\r\n", "\n").replace(_CONTINUATION, " ")


def filter_diagnostics(
    raw_text: str, *, debug: bool = False, logger: logging.Logger
) -> List[DiagnosticMessage]:
    """Extract documentation warnings from Doxygen's stderr.

    Order and multiplicity follow the input; nothing is sorted or
    de-duplicated.  With ``debug`` enabled, every non-empty discarded line is
    logged so an operator can spot unexpected tool output.  Logging never
    affects the returned messages.
    """

    messages: List[DiagnosticMessage] = []
    for line in normalize_continuations(raw_text).split("\n"):
        if WARNING_LINE_PATTERN.match(line):
            messages.append(DiagnosticMessage.parse(line))
        elif debug and line:
            logger.warning(f"🤔 {line}", extra={"stage": "diagnostics", "unmatched": True})
    return messages
