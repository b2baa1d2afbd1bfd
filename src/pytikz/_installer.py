"""Package installer backed by a tarball mirror and a local directory."""

from __future__ import annotations

import asyncio
import io
import logging
import shutil
import tarfile
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import aiohttp

from pytikz._constants import ARCHIVE_SUFFIX, PACKAGE_NAME_RE, USER_AGENT
from pytikz.config import PytikzConfig
from pytikz.exceptions import InvalidCharactersError, PackageFetchError
from pytikz.reconcile.validator import validate_package_name

_logger = logging.getLogger(__name__)


class PackageInstaller(Protocol):
    """Structural installer interface consumed by the reconciler.

    Batch calls report failure by returning ``False`` rather than raising.
    """

    async def install(self, batch: frozenset[str]) -> bool:
        ...

    async def uninstall(self, batch: frozenset[str]) -> bool:
        ...

    async def query_installed(self) -> list[str]:
        ...


def _safe_members(archive: tarfile.TarFile, target: Path) -> list[tarfile.TarInfo]:
    """Reject members that would land outside *target*."""
    root = target.resolve()
    members = archive.getmembers()
    for member in members:
        dest = (root / member.name).resolve()
        if dest != root and root not in dest.parents:
            raise tarfile.TarError(f"archive member escapes package directory: {member.name}")
        if member.issym() or member.islnk():
            raise tarfile.TarError(f"links are not allowed in package archives: {member.name}")
    return members


def _unpack(data: bytes, packages_dir: Path, name: str) -> None:
    """Extract into a staging directory, then swap it into place."""
    packages_dir.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(dir=packages_dir, prefix=f".{name}-"))
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            members = _safe_members(archive, staging)
            archive.extractall(staging, members=members, filter="data")
        final = packages_dir / name
        if final.exists():
            shutil.rmtree(final)
        staging.rename(final)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise


class ArchivePackageInstaller:
    """Install packages by unpacking ``<mirror>/<name>.tar.gz`` archives.

    Each package lives in ``<packages_dir>/<name>/``.  A batch keeps going
    after a per-package failure and returns ``False`` at the end, so it may
    be partially applied; callers re-query to learn the real state.
    """

    def __init__(self, config: PytikzConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._packages_dir = Path(config.packages_dir)

    @property
    def packages_dir(self) -> Path:
        return self._packages_dir

    async def _download(self, name: str) -> bytes:
        url = f"{self._config.mirror_url.rstrip('/')}/{name}{ARCHIVE_SUFFIX}"
        _logger.debug("GET %s", url)
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
        try:
            async with self._http.get(url, headers={"user-agent": USER_AGENT}, timeout=timeout) as resp:
                if resp.status != 200:
                    text = await resp.text(errors="replace")
                    raise PackageFetchError(
                        f"HTTP {resp.status} for {name}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
                return await resp.read()
        except PackageFetchError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise PackageFetchError(f"Download of {name} failed: {exc}", url=url) from exc

    async def _install_one(self, name: str) -> None:
        validate_package_name(name)
        data = await self._download(name)
        await asyncio.to_thread(_unpack, data, self._packages_dir, name)
        _logger.info("Installed package %s", name)

    async def _uninstall_one(self, name: str) -> None:
        validate_package_name(name)
        target = self._packages_dir / name
        if not target.exists():
            _logger.debug("Package %s not installed, nothing to remove", name)
            return
        await asyncio.to_thread(shutil.rmtree, target)
        _logger.info("Uninstalled package %s", name)

    async def install(self, batch: Iterable[str]) -> bool:
        ok = True
        for name in sorted(batch):
            try:
                await self._install_one(name)
            except (PackageFetchError, InvalidCharactersError, tarfile.TarError, OSError) as exc:
                _logger.warning("Failed to install %s: %s", name, exc)
                ok = False
        return ok

    async def uninstall(self, batch: Iterable[str]) -> bool:
        ok = True
        for name in sorted(batch):
            try:
                await self._uninstall_one(name)
            except (InvalidCharactersError, OSError) as exc:
                _logger.warning("Failed to uninstall %s: %s", name, exc)
                ok = False
        return ok

    async def query_installed(self) -> list[str]:
        if not self._packages_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._packages_dir.iterdir()
            if entry.is_dir() and PACKAGE_NAME_RE.fullmatch(entry.name)
        )
