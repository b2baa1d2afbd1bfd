"""Settings persistence."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pytikz.exceptions import SettingsStoreError
from pytikz.models.settings import PluginSettings

_logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    async def load(self) -> PluginSettings:
        ...

    async def save(self, settings: PluginSettings) -> None:
        ...


class JsonSettingsStore:
    """Store :class:`PluginSettings` as a JSON document on disk."""

    def __init__(self, path: Path | str, *, defaults: PluginSettings | None = None) -> None:
        self._path = Path(path)
        self._defaults = defaults if defaults is not None else PluginSettings()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> PluginSettings:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            _logger.debug("No settings file at %s, using defaults", self._path)
            return self._defaults
        except OSError as exc:
            raise SettingsStoreError(f"Cannot read settings from {self._path}: {exc}") from exc
        try:
            return PluginSettings.model_validate_json(text)
        except ValidationError as exc:
            raise SettingsStoreError(f"Invalid settings file {self._path}: {exc}") from exc

    def _write(self, settings: PluginSettings) -> None:
        payload = settings.model_dump_json(indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SettingsStoreError(f"Cannot write settings to {self._path}: {exc}") from exc

    async def load(self) -> PluginSettings:
        return await asyncio.to_thread(self._read)

    async def save(self, settings: PluginSettings) -> None:
        await asyncio.to_thread(self._write, settings)
        _logger.debug("Saved settings to %s", self._path)
