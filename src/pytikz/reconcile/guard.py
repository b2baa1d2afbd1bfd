"""Idle/Pending state machine for user-triggered operations.

A settings button is disabled while its operation runs.  The guard models
that explicitly so the rule holds without a UI: a second entry while the
first is still pending raises instead of starting a concurrent run.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import StrEnum

from pytikz.exceptions import OperationInProgressError

_logger = logging.getLogger(__name__)


class GuardState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"


class OperationGuard:
    """Single-flight guard for one named operation."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._state = GuardState.IDLE

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is GuardState.PENDING

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        """Move to PENDING for the duration of the block, then back to IDLE."""
        if self._state is GuardState.PENDING:
            raise OperationInProgressError(self.name)
        self._state = GuardState.PENDING
        _logger.debug("%s: idle -> pending", self.name)
        try:
            yield
        finally:
            self._state = GuardState.IDLE
            _logger.debug("%s: pending -> idle", self.name)
