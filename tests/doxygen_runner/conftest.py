# === NAVMAP v1 ===
# {
#   "module": "tests.doxygen_runner.conftest",
#   "purpose": "Shared fixtures for Doxygen runner tests",
#   "sections": [
#     {"id": "settings", "name": "Isolated settings", "anchor": "SET", "kind": "fixture"},
#     {"id": "fake-doxygen", "name": "Fake Doxygen binary", "anchor": "FAKE", "kind": "fixture"},
#     {"id": "subprocess", "name": "Subprocess stubs", "anchor": "SUB", "kind": "fixture"}
#   ]
# }
# === /NAVMAP ===

"""Fixtures for the Doxygen runner suite.

Provides isolated :class:`RunnerSettings`, a shell-script stand-in for the
Doxygen binary installed where :class:`DoxygenInstallation` looks for it, and
a helper that makes the subprocess boundary fail with canned stderr.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

import pytest

from RenderDocs.DoxygenRunner import execution as execution_mod
from RenderDocs.DoxygenRunner.installation import DoxygenInstallation
from RenderDocs.DoxygenRunner.logging_config import LOGGER_NAME
from RenderDocs.DoxygenRunner.settings import RunnerSettings, RunOptions, reset_settings_cache
from tests.helpers.fake_doxygen import TEST_VERSION, write_fake_binary


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for name in ("FAKE_DOXYGEN_STDERR", "FAKE_DOXYGEN_XML", "FAKE_DOXYGEN_EXIT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RENDERDOCS_TOOLS_DIR", str(tmp_path / "env-tools"))
    monkeypatch.setenv("RENDERDOCS_LOG_DIR", str(tmp_path / "env-logs"))
    reset_settings_cache()
    yield
    reset_settings_cache()
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_renderdocs_managed", False):
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.propagate = True


@pytest.fixture
def runner_settings(tmp_path: Path) -> RunnerSettings:
    return RunnerSettings(
        tools_dir=tmp_path / "tools",
        log_dir=tmp_path / "logs",
        download_base_url="https://mirror.test/files/",
    )


@pytest.fixture
def test_logger() -> logging.Logger:
    logger = logging.getLogger("tests.doxygen_runner")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    source = tmp_path / "src"
    source.mkdir()
    (source / "widget.h").write_text("/** A widget. */\nclass Widget {};\n")
    return source


@pytest.fixture
def make_options(tmp_path: Path, source_tree: Path) -> Callable[..., RunOptions]:
    def _make(**overrides) -> RunOptions:
        fields = {
            "source_folder": source_tree,
            "doxygen_version": TEST_VERSION,
            "xml_folder": tmp_path / "build" / "xml",
            "config_file": tmp_path / "build" / "doxygen.config",
        }
        fields.update(overrides)
        return RunOptions(**fields)

    return _make


@pytest.fixture
def installed_doxygen(runner_settings: RunnerSettings, test_logger: logging.Logger) -> DoxygenInstallation:
    """Installation whose ``TEST_VERSION`` binary is the fake shell script."""

    installation = DoxygenInstallation(runner_settings, system="Linux", logger=test_logger)
    write_fake_binary(installation.install_dir(TEST_VERSION) / f"doxygen-{TEST_VERSION}" / "bin" / "doxygen")
    return installation


@pytest.fixture
def failing_doxygen(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make every Doxygen invocation fail with the given stderr."""

    def _install(stderr: str, *, returncode: int = 1, side_effect: Optional[Callable[[Path], None]] = None) -> None:
        def _fake_run(binary: Path, config_file: Path) -> subprocess.CompletedProcess:
            if side_effect is not None:
                side_effect(config_file)
            raise subprocess.CalledProcessError(
                returncode, [str(binary), str(config_file)], output=b"", stderr=stderr.encode("utf-8")
            )

        monkeypatch.setattr(execution_mod, "run_doxygen", _fake_run)

    return _install
