"""pytikz - Custom LaTeX package management and SVG cache control for TikZ rendering."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytikz")
except PackageNotFoundError:
    __version__ = "0+local"
from pytikz._cache import CacheStore, MemoryCacheStore, content_fingerprint
from pytikz._installer import ArchivePackageInstaller, PackageInstaller
from pytikz._settings_store import JsonSettingsStore, SettingsStore
from pytikz.client import PackageManager
from pytikz.config import PytikzConfig
from pytikz.exceptions import (
    BatchFailedError,
    CacheClearFailedError,
    CustomPackagesDisabledError,
    InstallBatchFailedError,
    InvalidCharactersError,
    OperationInProgressError,
    PackageFetchError,
    PytikzConfigError,
    PytikzError,
    ReconcileError,
    SettingsStoreError,
    UninstallBatchFailedError,
)
from pytikz.invalidator import CacheInvalidator
from pytikz.models import (
    BatchKind,
    CacheClearResult,
    DesiredPackageSet,
    InstalledPackageSet,
    PluginSettings,
    ReconcileResult,
    ReconciliationPlan,
)
from pytikz.notify import LoggingNotifier, Notifier
from pytikz.reconcile import (
    GuardState,
    OperationGuard,
    Reconciler,
    compute_plan,
    parse_package_names,
    validate_package_name,
)

__all__ = [
    "__version__",
    "ArchivePackageInstaller",
    "BatchFailedError",
    "BatchKind",
    "CacheClearFailedError",
    "CacheClearResult",
    "CacheInvalidator",
    "CacheStore",
    "CustomPackagesDisabledError",
    "DesiredPackageSet",
    "GuardState",
    "InstallBatchFailedError",
    "InstalledPackageSet",
    "InvalidCharactersError",
    "JsonSettingsStore",
    "LoggingNotifier",
    "MemoryCacheStore",
    "Notifier",
    "OperationGuard",
    "OperationInProgressError",
    "PackageFetchError",
    "PackageInstaller",
    "PackageManager",
    "PluginSettings",
    "PytikzConfig",
    "PytikzConfigError",
    "PytikzError",
    "ReconcileError",
    "ReconcileResult",
    "Reconciler",
    "ReconciliationPlan",
    "SettingsStore",
    "UninstallBatchFailedError",
    "compute_plan",
    "content_fingerprint",
    "parse_package_names",
    "validate_package_name",
]
