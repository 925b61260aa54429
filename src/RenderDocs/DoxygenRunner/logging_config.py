"""
Structured Logging Utilities

This module centralizes logging setup for the Doxygen runner. Console output
stays human-readable while a rotating JSON-lines file keeps the structured
``extra`` fields (stage, run id, versions, paths) emitted by each component.
Old log files are compressed and eventually purged to keep a bounded
retention window.
"""

from __future__ import annotations

import gzip
import json
import logging
import sys
import uuid
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Dict, List, Optional

from .settings import RunnerSettings

LOGGER_NAME = "RenderDocs.DoxygenRunner"

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def generate_run_id() -> str:
    """Create a short identifier that links the log entries of one run.

    Examples:
        >>> len(generate_run_id())
        12
    """
    return uuid.uuid4().hex[:12]


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record.

    Any attribute supplied through ``extra=`` is copied into the payload.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stage": getattr(record, "stage", None),
            "run_id": getattr(record, "run_id", None),
        }
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _compress_old_log(path: Path) -> None:
    """Compress ``path`` into a ``.gz`` file and remove the original."""

    compressed_path = path.with_suffix(path.suffix + ".gz")
    with path.open("rb") as source, gzip.open(compressed_path, "wb") as target:
        target.write(source.read())
    path.unlink(missing_ok=True)


def _cleanup_logs(log_dir: Path, retention_days: int) -> List[str]:
    """Rotate or purge log files in ``log_dir`` based on retention policy."""

    actions: List[str] = []
    now = datetime.now(timezone.utc)
    retention_delta = timedelta(days=retention_days)
    for file in log_dir.glob("*.jsonl"):
        mtime = datetime.fromtimestamp(file.stat().st_mtime, tz=timezone.utc)
        if now - mtime > retention_delta:
            _compress_old_log(file)
            actions.append(f"Compressed {file.name}")
    for file in log_dir.glob("*.jsonl.gz"):
        mtime = datetime.fromtimestamp(file.stat().st_mtime, tz=timezone.utc)
        if now - mtime > retention_delta:
            file.unlink(missing_ok=True)
            actions.append(f"Deleted expired archive {file.name}")
    return actions


def setup_logging(
    settings: Optional[RunnerSettings] = None,
    *,
    debug: bool = False,
    stream: Optional[IO[str]] = None,
    log_dir: Optional[Path] = None,
    file_logging: bool = True,
) -> logging.Logger:
    """Configure the runner logger with a console handler and JSON file sidecar.

    Args:
        settings: Runner settings supplying level, retention, and size limits.
        debug: Force ``DEBUG`` level regardless of ``settings.log_level``.
        stream: Console stream; defaults to ``sys.stdout``.
        log_dir: Optional override for the JSON log directory.
        file_logging: Disable to skip the rotating JSON file handler.

    Returns:
        Logger named ``RenderDocs.DoxygenRunner``.
    """

    settings = settings or RunnerSettings()
    logger = logging.getLogger(LOGGER_NAME)
    level = "DEBUG" if debug else settings.log_level
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_renderdocs_managed", False):
            logger.removeHandler(handler)
            if isinstance(handler, logging.StreamHandler) and not isinstance(
                handler, logging.FileHandler
            ):
                continue
            handler.close()

    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream_handler = logging.StreamHandler(stream or sys.stdout)
    stream_handler.setFormatter(console_formatter)
    stream_handler._renderdocs_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if file_logging:
        resolved_dir = log_dir or settings.log_dir
        resolved_dir.mkdir(parents=True, exist_ok=True)
        _cleanup_logs(resolved_dir, settings.log_retention_days)
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        file_handler = RotatingFileHandler(
            resolved_dir / f"renderdocs-{today}.jsonl",
            maxBytes=int(settings.max_log_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._renderdocs_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def bind_run(logger: logging.Logger, run_id: str) -> logging.LoggerAdapter:
    """Return an adapter stamping ``run_id`` onto every record."""

    return _RunAdapter(logger, {"run_id": run_id})


class _RunAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


__all__ = [
    "JSONFormatter",
    "LOGGER_NAME",
    "bind_run",
    "generate_run_id",
    "setup_logging",
]
