# === NAVMAP v1 ===
# {
#   "module": "RenderDocs.DoxygenRunner.installation",
#   "purpose": "Locate, download, and unpack version-pinned Doxygen releases",
#   "sections": [
#     {"id": "assets", "name": "Release Assets", "anchor": "AST", "kind": "helpers"},
#     {"id": "client", "name": "HTTP Client Construction", "anchor": "CLI", "kind": "helpers"},
#     {"id": "installation", "name": "DoxygenInstallation", "anchor": "INS", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Version-pinned Doxygen installation.

Each requested version lives in its own folder below
``RunnerSettings.tools_dir``.  Missing versions are fetched from the release
mirror with a single asynchronous download (there is no retry and no fallback
version), unpacked with the traversal-safe extractors from :mod:`.io_safe`,
and moved into place only once the binary is known to be present.
"""

from __future__ import annotations

import logging
import platform
import shutil
import ssl
import tempfile
from pathlib import Path
from typing import Optional, Tuple

import certifi
import httpx

from .errors import ConfigError, InstallationFailure
from .io_safe import extract_archive_safe
from .settings import RunnerSettings, get_settings

LOGGER = logging.getLogger("RenderDocs.DoxygenRunner.installation")

# --- Release Assets -----------------------------------------------------------

_LINUX_ASSET = "doxygen-{version}.linux.bin.tar.gz"
_WINDOWS_ASSET = "doxygen-{version}.windows.x64.bin.zip"


def release_asset(version: str, system: Optional[str] = None) -> Tuple[str, str]:
    """Return ``(archive_name, binary_name)`` for ``version`` on ``system``.

    Raises:
        InstallationFailure: If no prebuilt release exists for the platform.
    """

    system = (system or platform.system()).lower()
    if system == "linux":
        return _LINUX_ASSET.format(version=version), "doxygen"
    if system == "windows":
        return _WINDOWS_ASSET.format(version=version), "doxygen.exe"
    raise InstallationFailure(
        f"No prebuilt Doxygen {version} release is available for platform '{system}'",
        version=version,
    )


# --- HTTP Client Construction -------------------------------------------------


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def build_async_client(settings: RunnerSettings) -> httpx.AsyncClient:
    """Construct the HTTPX client used for release downloads."""

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.download_timeout_sec, connect=10.0),
        verify=_build_ssl_context(),
        follow_redirects=True,
        trust_env=True,
    )


# --- DoxygenInstallation -------------------------------------------------------


class DoxygenInstallation:
    """Manage the Doxygen binaries installed below ``tools_dir``."""

    def __init__(
        self,
        settings: Optional[RunnerSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        system: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.system = system or platform.system()
        self.logger = logger or LOGGER
        self._client = client

    @property
    def root(self) -> Path:
        return Path(self.settings.tools_dir).expanduser() / "doxygen"

    def install_dir(self, version: str) -> Path:
        return self.root / version

    def binary_path(self, version: str) -> Optional[Path]:
        """Return the installed binary for ``version`` or ``None`` when absent."""

        _, binary_name = release_asset(version, self.system)
        folder = self.install_dir(version)
        if not folder.is_dir():
            return None
        for candidate in (
            folder / binary_name,
            folder / "bin" / binary_name,
            folder / f"doxygen-{version}" / "bin" / binary_name,
        ):
            if candidate.is_file():
                return candidate
        matches = sorted(path for path in folder.rglob(binary_name) if path.is_file())
        return matches[0] if matches else None

    def is_installed(self, version: str) -> bool:
        return self.binary_path(version) is not None

    def download_url(self, version: str) -> str:
        archive_name, _ = release_asset(version, self.system)
        return f"{self.settings.download_base_url}/{archive_name}"

    async def download_version(self, version: str) -> bool:
        """Download and unpack ``version``; return ``True`` when the binary is in place.

        Network, HTTP status, malformed URL, filesystem, and archive errors are
        logged and reported as ``False`` so the caller decides how to fail.
        """

        archive_name, _ = release_asset(version, self.system)
        url = self.download_url(version)
        self.logger.info(
            "downloading doxygen",
            extra={"stage": "install", "version": version, "url": url},
        )

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(prefix=".download-", dir=self.root) as tmp:
                staging = Path(tmp)
                archive_path = staging / archive_name
                try:
                    await self._fetch(url, archive_path)
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    self.logger.error(
                        "doxygen download failed",
                        extra={"stage": "install", "version": version, "url": url, "error": str(exc)},
                    )
                    return False

                unpack_dir = staging / "unpacked"
                try:
                    extract_archive_safe(archive_path, unpack_dir, logger=self.logger)
                except ConfigError as exc:
                    self.logger.error(
                        "doxygen archive could not be extracted",
                        extra={"stage": "install", "version": version, "error": str(exc)},
                    )
                    return False

                target = self.install_dir(version)
                if target.exists():
                    shutil.rmtree(target)
                shutil.move(str(unpack_dir), str(target))
        except OSError as exc:
            self.logger.error(
                "doxygen could not be installed",
                extra={
                    "stage": "install",
                    "version": version,
                    "tools_dir": str(self.root),
                    "error": str(exc),
                },
            )
            return False

        binary = self.binary_path(version)
        if binary is None:
            self.logger.error(
                "doxygen binary missing from release archive",
                extra={"stage": "install", "version": version, "archive": archive_name},
            )
            return False
        self.logger.info(
            "doxygen installed",
            extra={"stage": "install", "version": version, "binary": str(binary)},
        )
        return True

    async def _fetch(self, url: str, destination: Path) -> None:
        client = self._client or build_async_client(self.settings)
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with destination.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
        finally:
            if self._client is None:
                await client.aclose()

    async def ensure_installed(self, version: str) -> Path:
        """Make sure ``version`` is available locally and return its binary.

        Raises:
            InstallationFailure: If the version is absent and cannot be downloaded.
        """

        binary = self.binary_path(version)
        if binary is not None:
            self.logger.debug(
                "doxygen already installed",
                extra={"stage": "install", "version": version, "binary": str(binary)},
            )
            return binary

        self.logger.info(
            "Doxygen is not installed. Downloading ...",
            extra={"stage": "install", "version": version},
        )
        if not await self.download_version(version):
            raise InstallationFailure(f"Failed to download Doxygen {version}", version=version)
        binary = self.binary_path(version)
        if binary is None:  # pragma: no cover - download_version already checked
            raise InstallationFailure(f"Failed to download Doxygen {version}", version=version)
        return binary


__all__ = [
    "DoxygenInstallation",
    "build_async_client",
    "release_asset",
]
