"""Typed outcomes of user-triggered operations."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pytikz.exceptions import (
    BatchFailedError,
    CacheClearFailedError,
    InstallBatchFailedError,
    ReconcileError,
    UninstallBatchFailedError,
)
from pytikz.models.packages import InstalledPackageSet, ReconciliationPlan


class BatchKind(StrEnum):
    UNINSTALL = "uninstall"
    INSTALL = "install"


class ReconcileResult(BaseModel):
    """Outcome of one reconciliation attempt.

    ``uninstall_ok`` / ``install_ok`` are ``None`` when the batch was
    skipped because it had nothing to do.  ``installed`` is always the
    re-queried ground truth, never the plan's intent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    plan: ReconciliationPlan
    installed: InstalledPackageSet
    uninstall_ok: bool | None = None
    install_ok: bool | None = None

    @property
    def failures(self) -> list[BatchKind]:
        failed: list[BatchKind] = []
        if self.uninstall_ok is False:
            failed.append(BatchKind.UNINSTALL)
        if self.install_ok is False:
            failed.append(BatchKind.INSTALL)
        return failed

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failure(self) -> None:
        """Raise :class:`ReconcileError` if any batch failed."""
        errors: list[BatchFailedError] = []
        for kind in self.failures:
            if kind is BatchKind.UNINSTALL:
                errors.append(UninstallBatchFailedError(self.plan.to_uninstall))
            else:
                errors.append(InstallBatchFailedError(self.plan.to_install))
        if errors:
            raise ReconcileError(errors)


class CacheClearResult(BaseModel):
    """Outcome of a bulk cache clear."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error: CacheClearFailedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
