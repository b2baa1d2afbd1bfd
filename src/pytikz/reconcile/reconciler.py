"""Apply a reconciliation plan against the package installer.

The reconciler is the only writer of the confirmed package list.  It never
persists what it *intended* to install: after every mutating call it asks
the installer what is actually there and saves that.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pytikz.models.packages import DesiredPackageSet, InstalledPackageSet, ReconciliationPlan
from pytikz.models.results import BatchKind, ReconcileResult
from pytikz.models.settings import PluginSettings
from pytikz.reconcile.differ import compute_plan

if TYPE_CHECKING:
    from pytikz._installer import PackageInstaller
    from pytikz._settings_store import SettingsStore

_logger = logging.getLogger(__name__)


class Reconciler:
    """Owns the committed :class:`PluginSettings` and its package list.

    Readers get :attr:`installed`, which only changes after a re-query has
    been persisted.
    """

    def __init__(
        self,
        installer: PackageInstaller,
        settings_store: SettingsStore,
        settings: PluginSettings | None = None,
    ) -> None:
        self._installer = installer
        self._store = settings_store
        self._settings = settings if settings is not None else PluginSettings()
        self._commit_lock = asyncio.Lock()

    @property
    def settings(self) -> PluginSettings:
        return self._settings

    @property
    def installed(self) -> InstalledPackageSet:
        return self._settings.installed

    def plan(self, desired: DesiredPackageSet) -> ReconciliationPlan:
        return compute_plan(self.installed, desired.names)

    async def reconcile(self, desired: DesiredPackageSet) -> ReconcileResult:
        """Uninstall, install, then re-query and persist the installed set."""
        plan = self.plan(desired)
        _logger.debug(
            "Reconcile plan: install=%s uninstall=%s",
            sorted(plan.to_install),
            sorted(plan.to_uninstall),
        )
        return await self._apply(plan)

    async def uninstall_all(self) -> ReconcileResult:
        """Remove every installed package in one batch."""
        plan = ReconciliationPlan(to_uninstall=self.installed.as_set())
        return await self._apply(plan)

    async def refresh(self) -> InstalledPackageSet:
        """Re-query the installer and persist the result."""
        installed = InstalledPackageSet.from_query(await self._installer.query_installed())
        await self._commit(lambda current: current.with_installed(installed))
        return installed

    async def save_preferences(self, **changes: Any) -> PluginSettings:
        """Persist non-package settings (toggles)."""
        if "custom_packages" in changes:
            raise ValueError("custom_packages is only written from an installer query")
        return await self._commit(lambda current: current.model_copy(update=changes))

    async def _apply(self, plan: ReconciliationPlan) -> ReconcileResult:
        uninstall_ok: bool | None = None
        install_ok: bool | None = None

        # Uninstall first so a package being reinstalled is gone before it returns.
        if plan.to_uninstall:
            uninstall_ok = await self._run_batch(BatchKind.UNINSTALL, self._installer.uninstall, plan.to_uninstall)
        if plan.to_install:
            install_ok = await self._run_batch(BatchKind.INSTALL, self._installer.install, plan.to_install)

        installed = await self.refresh()
        result = ReconcileResult(
            plan=plan,
            installed=installed,
            uninstall_ok=uninstall_ok,
            install_ok=install_ok,
        )
        if not result.ok:
            _logger.warning(
                "Package update incomplete (%s failed); installed now: %s",
                ", ".join(result.failures),
                installed.as_text() or "<none>",
            )
        return result

    async def _run_batch(
        self,
        kind: BatchKind,
        call: Callable[[frozenset[str]], Awaitable[bool]],
        batch: frozenset[str],
    ) -> bool:
        try:
            ok = bool(await call(batch))
        except Exception:
            _logger.warning("%s batch raised for %s", kind, sorted(batch), exc_info=True)
            return False
        if not ok:
            _logger.warning("%s batch reported failure for %s", kind, sorted(batch))
        return ok

    async def _commit(self, change: Callable[[PluginSettings], PluginSettings]) -> PluginSettings:
        # Serialised; each write starts from the latest committed settings.
        async with self._commit_lock:
            settings = change(self._settings)
            await self._store.save(settings)
            self._settings = settings
            return settings
