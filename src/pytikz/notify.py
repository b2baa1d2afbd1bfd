"""User-facing notification channel."""

from __future__ import annotations

import logging
from typing import Protocol

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget message sink (e.g. a toast in the host UI)."""

    def notify(self, message: str, duration: float) -> None:
        ...


class LoggingNotifier:
    """Default notifier that writes notices to the log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def notify(self, message: str, duration: float) -> None:
        self._logger.info("%s", message)
