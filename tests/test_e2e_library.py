from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from pytikz._cache import MemoryCacheStore
from pytikz._constants import (
    MSG_CUSTOM_PACKAGES_DISABLED,
    MSG_INVALID_CHARACTERS,
    MSG_PACKAGES_UPDATED,
    MSG_SETTINGS_SAVE_FAILED,
    MSG_UNINSTALL_FAILED,
    MSG_UPDATE_FAILED,
)
from pytikz._settings_store import JsonSettingsStore
from pytikz.client import PackageManager
from pytikz.config import PytikzConfig
from pytikz.exceptions import (
    CustomPackagesDisabledError,
    InvalidCharactersError,
    OperationInProgressError,
    PytikzError,
    SettingsStoreError,
)
from pytikz.models.settings import PluginSettings


@dataclass
class FakeRenderer:
    """Stands in for the rendering engine's package directory."""

    installed: list[str] = field(default_factory=list)
    fail_install: set[str] = field(default_factory=set)
    fail_uninstall: bool = False
    calls: list[tuple[str, frozenset[str]]] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def install(self, batch: frozenset[str]) -> bool:
        self.calls.append(("install", batch))
        if self.gate is not None:
            await self.gate.wait()
        for name in sorted(batch):
            if name not in self.fail_install and name not in self.installed:
                self.installed.append(name)
        return not (batch & self.fail_install)

    async def uninstall(self, batch: frozenset[str]) -> bool:
        self.calls.append(("uninstall", batch))
        if self.fail_uninstall:
            return False
        self.installed = [name for name in self.installed if name not in batch]
        return True

    async def query_installed(self) -> list[str]:
        return list(self.installed)


@dataclass
class RecordingNotifier:
    messages: list[str] = field(default_factory=list)

    def notify(self, message: str, duration: float) -> None:
        self.messages.append(message)


def _manager(
    tmp_path: Path,
    renderer: FakeRenderer,
    notifier: RecordingNotifier,
    *,
    cache_store: MemoryCacheStore | None = None,
    settings_store: JsonSettingsStore | None = None,
) -> PackageManager:
    config = PytikzConfig(settings_path=tmp_path / "settings.json", packages_dir=tmp_path / "packages")
    return PackageManager(
        config,
        installer=renderer,
        settings_store=settings_store or JsonSettingsStore(config.settings_path),
        cache_store=cache_store,
        notifier=notifier,
    )


async def _seed(tmp_path: Path, settings: PluginSettings) -> None:
    await JsonSettingsStore(tmp_path / "settings.json").save(settings)


class GatedSettingsStore(JsonSettingsStore):
    """Holds each save until the test releases its gate."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self.gates: list[asyncio.Event] = []

    async def save(self, settings: PluginSettings) -> None:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        await super().save(settings)


class FailingSettingsStore(JsonSettingsStore):
    async def save(self, settings: PluginSettings) -> None:
        raise SettingsStoreError("disk full")


async def _until(condition: Callable[[], bool]) -> None:
    while not condition():
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_update_packages_end_to_end(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["pgfplots", "fontspec"]))
    renderer = FakeRenderer(installed=["pgfplots", "fontspec"])
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        assert manager.draft == "pgfplots fontspec"
        manager.edit_packages("amsmath  pgfplots")
        result = await manager.update_packages()

        assert result.ok
        assert renderer.calls == [
            ("uninstall", frozenset({"fontspec"})),
            ("install", frozenset({"amsmath"})),
        ]
        assert manager.installed_packages.names == ("pgfplots", "amsmath")
        assert not manager.is_updating

    assert notifier.messages == [MSG_PACKAGES_UPDATED]
    reloaded = await JsonSettingsStore(tmp_path / "settings.json").load()
    assert reloaded.custom_packages == ["pgfplots", "amsmath"]


@pytest.mark.asyncio
async def test_invalid_input_aborts_before_any_installer_call(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["pgfplots"]))
    renderer = FakeRenderer(installed=["pgfplots"])
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        manager.edit_packages("amsmath; rm -rf")
        with pytest.raises(InvalidCharactersError):
            await manager.update_packages()

        assert renderer.calls == []
        assert manager.installed_packages.names == ("pgfplots",)
        assert manager.settings.enable_custom_packages is True
        assert not manager.is_updating

    assert notifier.messages == [MSG_INVALID_CHARACTERS]


@pytest.mark.asyncio
async def test_partial_failure_sends_one_notice_and_trusts_requery(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["pgfplots", "fontspec"]))
    renderer = FakeRenderer(installed=["pgfplots", "fontspec"], fail_install={"amsmath"})
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        manager.edit_packages("amsmath pgfplots")
        result = await manager.update_packages()

        assert not result.ok
        assert manager.installed_packages.names == ("pgfplots",)

    assert notifier.messages == [MSG_UPDATE_FAILED]


@pytest.mark.asyncio
async def test_second_update_while_pending_is_rejected(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True))
    renderer = FakeRenderer(gate=asyncio.Event())
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        manager.edit_packages("amsmath")
        first = asyncio.create_task(manager.update_packages())
        await asyncio.sleep(0)
        assert manager.is_updating

        with pytest.raises(OperationInProgressError):
            await manager.update_packages()

        assert renderer.gate is not None
        renderer.gate.set()
        result = await first
        assert result.ok
        assert not manager.is_updating


@pytest.mark.asyncio
async def test_update_is_refused_while_custom_packages_are_disabled(tmp_path: Path) -> None:
    renderer = FakeRenderer(installed=["pgfplots"])
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        manager.edit_packages("amsmath")
        with pytest.raises(CustomPackagesDisabledError):
            await manager.update_packages()

        assert renderer.calls == []
        assert manager.settings.custom_packages == []
        assert not manager.is_updating

    assert notifier.messages == [MSG_CUSTOM_PACKAGES_DISABLED]


@pytest.mark.asyncio
async def test_invert_toggle_during_update_keeps_requeried_packages(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["fontspec"]))
    renderer = FakeRenderer(installed=["fontspec"])
    store = GatedSettingsStore(tmp_path / "settings.json")

    async with _manager(tmp_path, renderer, RecordingNotifier(), settings_store=store) as manager:
        manager.edit_packages("amsmath")
        update = asyncio.create_task(manager.update_packages())
        await _until(lambda: len(store.gates) == 1)

        toggle = asyncio.create_task(manager.set_invert_colors(False))
        for _ in range(5):
            await asyncio.sleep(0)
        assert len(store.gates) == 1

        store.gates[0].set()
        assert (await update).ok
        await _until(lambda: len(store.gates) == 2)
        store.gates[1].set()
        await toggle

        assert manager.settings.custom_packages == ["amsmath"]
        assert manager.settings.invert_colors_in_dark_mode is False
        assert manager.installed_packages.names == ("amsmath",)

    reloaded = await JsonSettingsStore(tmp_path / "settings.json").load()
    assert reloaded.custom_packages == ["amsmath"]
    assert reloaded.invert_colors_in_dark_mode is False


@pytest.mark.asyncio
async def test_settings_save_failure_is_reported_and_raised(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True))
    renderer = FakeRenderer()
    notifier = RecordingNotifier()
    store = FailingSettingsStore(tmp_path / "settings.json")

    async with _manager(tmp_path, renderer, notifier, settings_store=store) as manager:
        manager.edit_packages("amsmath")
        with pytest.raises(SettingsStoreError):
            await manager.update_packages()
        assert not manager.is_updating
        assert renderer.installed == ["amsmath"]

        with pytest.raises(SettingsStoreError):
            await manager.set_invert_colors(False)
        assert manager.settings.invert_colors_in_dark_mode is True

    assert notifier.messages == [MSG_UPDATE_FAILED, MSG_SETTINGS_SAVE_FAILED]


@pytest.mark.asyncio
async def test_disabling_custom_packages_uninstalls_all(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["amsmath", "tikzcd"]))
    renderer = FakeRenderer(installed=["amsmath", "tikzcd"])
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        assert await manager.set_custom_packages_enabled(False)

        assert renderer.calls == [("uninstall", frozenset({"amsmath", "tikzcd"}))]
        assert manager.settings.enable_custom_packages is False
        assert manager.installed_packages.names == ()
        assert manager.draft == ""


@pytest.mark.asyncio
async def test_failed_uninstall_keeps_toggle_on(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(enable_custom_packages=True, custom_packages=["amsmath"]))
    renderer = FakeRenderer(installed=["amsmath"], fail_uninstall=True)
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        assert not await manager.set_custom_packages_enabled(False)

        assert manager.settings.enable_custom_packages is True
        assert manager.installed_packages.names == ("amsmath",)

    assert notifier.messages == [MSG_UNINSTALL_FAILED]


@pytest.mark.asyncio
async def test_enabling_and_invert_colors_only_save_flags(tmp_path: Path) -> None:
    renderer = FakeRenderer()
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier) as manager:
        assert await manager.set_custom_packages_enabled(True)
        await manager.set_invert_colors(False)

        assert renderer.calls == []

    reloaded = await JsonSettingsStore(tmp_path / "settings.json").load()
    assert reloaded.enable_custom_packages is True
    assert reloaded.invert_colors_in_dark_mode is False


@pytest.mark.asyncio
async def test_refresh_picks_up_external_changes(tmp_path: Path) -> None:
    await _seed(tmp_path, PluginSettings(custom_packages=["amsmath"]))
    renderer = FakeRenderer(installed=["amsmath", "pgfplots"])

    async with _manager(tmp_path, renderer, RecordingNotifier()) as manager:
        installed = await manager.refresh()

        assert installed.names == ("amsmath", "pgfplots")
        assert manager.settings.custom_packages == ["amsmath", "pgfplots"]


@pytest.mark.asyncio
async def test_cache_clear_failure_leaves_packages_alone(tmp_path: Path) -> None:
    class _LockedStore(MemoryCacheStore):
        async def clear(self) -> None:
            raise RuntimeError("IndexedDB unavailable")

    await _seed(tmp_path, PluginSettings(custom_packages=["amsmath"]))
    renderer = FakeRenderer(installed=["amsmath"])
    notifier = RecordingNotifier()

    async with _manager(tmp_path, renderer, notifier, cache_store=_LockedStore()) as manager:
        result = await manager.clear_cache()

        assert not result.ok
        assert renderer.calls == []
        assert manager.installed_packages.names == ("amsmath",)
        assert not manager.is_clearing_cache

    assert notifier.messages == ["IndexedDB unavailable"]


@pytest.mark.asyncio
async def test_manager_requires_context() -> None:
    manager = PackageManager(installer=FakeRenderer())

    with pytest.raises(PytikzError):
        await manager.update_packages()
