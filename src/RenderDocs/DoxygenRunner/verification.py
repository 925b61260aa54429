"""XML output verification."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import EmptyStructuredOutput

__all__ = ["verify_xml_output"]


def verify_xml_output(xml_folder: Path, *, debug: bool = False, logger: logging.Logger) -> int:
    """Confirm Doxygen produced at least one entry in ``xml_folder``.

    Returns:
        Number of entries found.

    Raises:
        EmptyStructuredOutput: If the folder is missing or empty.
    """

    xml_folder = Path(xml_folder)
    entries = sorted(xml_folder.iterdir()) if xml_folder.is_dir() else []
    if not entries:
        logger.error(
            f"❌ No XML files found in {xml_folder}.",
            extra={"stage": "verify", "xml_folder": str(xml_folder)},
        )
        raise EmptyStructuredOutput(xml_folder)

    if debug:
        logger.info(f"✅ Found {len(entries)} XML files.", extra={"stage": "verify"})
        for entry in entries:
            logger.info(f"📄 {entry.name}", extra={"stage": "verify"})
    return len(entries)
