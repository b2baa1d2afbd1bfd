"""High-level async facade over package reconciliation and the SVG cache."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pytikz._cache import CacheStore, MemoryCacheStore
from pytikz._constants import (
    MSG_CUSTOM_PACKAGES_DISABLED,
    MSG_INVALID_CHARACTERS,
    MSG_PACKAGES_UPDATED,
    MSG_SETTINGS_SAVE_FAILED,
    MSG_UNINSTALL_FAILED,
    MSG_UPDATE_FAILED,
)
from pytikz._installer import ArchivePackageInstaller, PackageInstaller
from pytikz._settings_store import JsonSettingsStore, SettingsStore
from pytikz.config import PytikzConfig
from pytikz.exceptions import (
    CustomPackagesDisabledError,
    InvalidCharactersError,
    PytikzError,
    SettingsStoreError,
)
from pytikz.invalidator import CacheInvalidator
from pytikz.models.packages import DesiredPackageSet, InstalledPackageSet
from pytikz.models.results import CacheClearResult, ReconcileResult
from pytikz.models.settings import PluginSettings
from pytikz.notify import LoggingNotifier, Notifier
from pytikz.reconcile.guard import OperationGuard
from pytikz.reconcile.reconciler import Reconciler
from pytikz.reconcile.validator import parse_package_names

_logger = logging.getLogger(__name__)


class PackageManager:
    """Headless settings surface for custom TikZ packages.

    Usage::

        async with PackageManager(PytikzConfig.from_env()) as manager:
            manager.edit_packages("pgfplots amsmath")
            result = await manager.update_packages()

    The text-field draft (:attr:`draft`) and the confirmed package list
    (:attr:`installed_packages`) are kept apart; only the reconciler writes
    the latter, from a fresh installer query.
    """

    def __init__(
        self,
        config: PytikzConfig | None = None,
        *,
        http_session: aiohttp.ClientSession | None = None,
        installer: PackageInstaller | None = None,
        settings_store: SettingsStore | None = None,
        cache_store: CacheStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._config = config or PytikzConfig()
        self._external_session = http_session is not None
        self._http_session = http_session
        self._installer = installer
        self._settings_store = settings_store or JsonSettingsStore(
            self._config.settings_path,
            defaults=PluginSettings(invert_colors_in_dark_mode=self._config.invert_colors_in_dark_mode),
        )
        self._notifier = notifier or LoggingNotifier()
        self._cache_invalidator = CacheInvalidator(
            cache_store if cache_store is not None else MemoryCacheStore(),
            self._notifier,
            notice_duration=self._config.notice_duration,
        )
        self._reconciler: Reconciler | None = None
        self._update_guard = OperationGuard("package update")
        self._cache_guard = OperationGuard("cache clear")
        self._draft = ""

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PackageManager:
        if self._installer is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._installer = ArchivePackageInstaller(self._config, self._http_session)
        settings = await self._settings_store.load()
        self._reconciler = Reconciler(self._installer, self._settings_store, settings)
        self._draft = settings.installed.as_text()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._reconciler = None

    def _require_reconciler(self) -> Reconciler:
        if self._reconciler is None:
            raise PytikzError("Manager not initialized. Use 'async with PackageManager(...) as manager:'")
        return self._reconciler

    def _notify(self, message: str) -> None:
        self._notifier.notify(message, self._config.notice_duration)

    def _report_save_failure(self, exc: SettingsStoreError, message: str) -> None:
        _logger.error("Settings could not be saved: %s", exc, exc_info=True)
        self._notify(message)

    # ------------------------------------------------------------------
    # State readers
    # ------------------------------------------------------------------

    @property
    def settings(self) -> PluginSettings:
        return self._require_reconciler().settings

    @property
    def installed_packages(self) -> InstalledPackageSet:
        return self._require_reconciler().installed

    @property
    def draft(self) -> str:
        """Current, unvalidated contents of the package text field."""
        return self._draft

    @property
    def is_updating(self) -> bool:
        return self._update_guard.is_pending

    @property
    def is_clearing_cache(self) -> bool:
        return self._cache_guard.is_pending

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def edit_packages(self, raw: str) -> None:
        """Record a keystroke in the package text field."""
        self._draft = raw

    async def update_packages(self) -> ReconcileResult:
        """Validate the draft and reconcile the installed packages to it.

        Raises :class:`CustomPackagesDisabledError` when the feature is
        switched off and :class:`InvalidCharactersError` for bad input, in
        both cases after notifying the user and without touching the
        installer or the settings.  Batch failures do not raise; they are
        reported once through the notifier and in the returned result.  A
        failed settings save is reported and re-raised.
        """
        reconciler = self._require_reconciler()
        async with self._update_guard.hold():
            if not reconciler.settings.enable_custom_packages:
                _logger.info("Package update refused: custom packages are disabled")
                self._notify(MSG_CUSTOM_PACKAGES_DISABLED)
                raise CustomPackagesDisabledError("custom packages are disabled")

            try:
                desired = DesiredPackageSet(names=tuple(parse_package_names(self._draft)))
            except InvalidCharactersError as exc:
                _logger.info("Rejected package input: %s", exc)
                self._notify(MSG_INVALID_CHARACTERS)
                raise

            try:
                result = await reconciler.reconcile(desired)
            except SettingsStoreError as exc:
                self._report_save_failure(exc, MSG_UPDATE_FAILED)
                raise
            self._notify(MSG_PACKAGES_UPDATED if result.ok else MSG_UPDATE_FAILED)
            return result

    async def set_custom_packages_enabled(self, value: bool) -> bool:
        """Flip the custom-packages toggle.

        Switching it off removes every installed package first.  If that
        fails the toggle stays on and ``False`` is returned.
        """
        reconciler = self._require_reconciler()
        async with self._update_guard.hold():
            try:
                if not value and len(reconciler.installed):
                    result = await reconciler.uninstall_all()
                    self._draft = result.installed.as_text()
                    if not result.ok:
                        self._notify(MSG_UNINSTALL_FAILED)
                        return False
                await reconciler.save_preferences(enable_custom_packages=value)
            except SettingsStoreError as exc:
                self._report_save_failure(exc, MSG_SETTINGS_SAVE_FAILED)
                raise
            return True

    async def refresh(self) -> InstalledPackageSet:
        """Resync the confirmed package list with what is on disk."""
        reconciler = self._require_reconciler()
        async with self._update_guard.hold():
            try:
                return await reconciler.refresh()
            except SettingsStoreError as exc:
                self._report_save_failure(exc, MSG_SETTINGS_SAVE_FAILED)
                raise

    # ------------------------------------------------------------------
    # Display / cache
    # ------------------------------------------------------------------

    async def set_invert_colors(self, value: bool) -> None:
        try:
            await self._require_reconciler().save_preferences(invert_colors_in_dark_mode=value)
        except SettingsStoreError as exc:
            self._report_save_failure(exc, MSG_SETTINGS_SAVE_FAILED)
            raise

    async def clear_cache(self) -> CacheClearResult:
        async with self._cache_guard.hold():
            return await self._cache_invalidator.clear()
