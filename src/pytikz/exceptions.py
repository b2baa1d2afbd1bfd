"""Custom exception hierarchy for pytikz."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class PytikzError(Exception):
    """Base exception for all pytikz errors."""


class PytikzConfigError(PytikzError):
    """Invalid or missing configuration."""


class InvalidCharactersError(PytikzError, ValueError):
    """Package name input contains characters outside ``[a-z0-9\\s]``.

    The whole update is rejected; no partial token list is produced.
    """

    def __init__(self, characters: str, message: str | None = None) -> None:
        self.characters = characters
        super().__init__(message or f"Invalid characters in package names: {characters!r}")


class CustomPackagesDisabledError(PytikzError):
    """A package update was requested while custom packages are switched off."""


class BatchFailedError(PytikzError):
    """A single installer batch call reported failure."""

    label = "batch"

    def __init__(self, packages: Iterable[str]) -> None:
        self.packages = tuple(sorted(packages))
        super().__init__(f"{self.label.capitalize()} batch failed for: {' '.join(self.packages)}")


class InstallBatchFailedError(BatchFailedError):
    """The install batch call returned ``False``."""

    label = "install"


class UninstallBatchFailedError(BatchFailedError):
    """The uninstall batch call returned ``False``."""

    label = "uninstall"


class ReconcileError(PytikzError):
    """Aggregate of every batch failure in one reconciliation attempt."""

    def __init__(self, failures: Sequence[BatchFailedError]) -> None:
        self.failures = tuple(failures)
        super().__init__("; ".join(str(f) for f in self.failures))


class CacheClearFailedError(PytikzError):
    """The content cache store failed to clear."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


class OperationInProgressError(PytikzError):
    """An operation was triggered while a previous one is still pending."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} is already in progress")


class SettingsStoreError(PytikzError):
    """Settings could not be loaded or saved."""


class PackageFetchError(PytikzError):
    """A package archive could not be downloaded (network, non-200)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
