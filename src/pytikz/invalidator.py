"""Bulk invalidation of the rendered-content cache."""

from __future__ import annotations

import logging

from pytikz._cache import CacheStore
from pytikz._constants import DEFAULT_NOTICE_DURATION, MSG_CACHE_CLEARED
from pytikz.exceptions import CacheClearFailedError
from pytikz.models.results import CacheClearResult
from pytikz.notify import Notifier

_logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Clear the whole cache and tell the user how it went.

    Cached SVGs are rebuilt on the next render, so there is no partial mode.
    """

    def __init__(
        self,
        store: CacheStore,
        notifier: Notifier,
        *,
        notice_duration: float = DEFAULT_NOTICE_DURATION,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._notice_duration = notice_duration

    async def clear(self) -> CacheClearResult:
        try:
            await self._store.clear()
        except Exception as exc:
            error = CacheClearFailedError(exc)
            _logger.error("Failed to clear cached SVGs: %s", error, exc_info=True)
            self._notifier.notify(str(error), self._notice_duration)
            return CacheClearResult(error=error)
        _logger.info("Cleared cached SVGs")
        self._notifier.notify(MSG_CACHE_CLEARED, self._notice_duration)
        return CacheClearResult()
