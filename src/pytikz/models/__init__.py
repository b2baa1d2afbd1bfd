"""Typed models for pytikz."""

from pytikz.models.packages import DesiredPackageSet, InstalledPackageSet, ReconciliationPlan
from pytikz.models.results import BatchKind, CacheClearResult, ReconcileResult
from pytikz.models.settings import PluginSettings

__all__ = [
    "BatchKind",
    "CacheClearResult",
    "DesiredPackageSet",
    "InstalledPackageSet",
    "PluginSettings",
    "ReconcileResult",
    "ReconciliationPlan",
]
