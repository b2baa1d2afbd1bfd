"""Content cache of rendered SVG output.

Entries are keyed by :func:`content_fingerprint` of the diagram source and
the render configuration.  The cache is only ever cleared as a whole.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any, Protocol


def content_fingerprint(source: str, config: Mapping[str, Any] | None = None) -> str:
    """Deterministic cache key for a render.

    Parameters
    ----------
    source : str
        Diagram source text.
    config : Mapping or None
        Render configuration (e.g. installed packages, dark mode).  Key
        order does not affect the result.

    Returns
    -------
    str
        64-character lowercase SHA-256 hex digest.
    """
    canonical = json.dumps(dict(config or {}), sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256()
    digest.update(source.encode("utf-8"))
    digest.update(b"\0")
    digest.update(canonical.encode("utf-8"))
    return digest.hexdigest()


class CacheStore(Protocol):
    """Opaque key-value store for rendered artifacts."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def clear(self) -> None:
        """Remove every entry; raise on failure."""
        ...

    async def keys(self) -> list[str]:
        ...


class MemoryCacheStore:
    """In-process :class:`CacheStore`."""

    def __init__(self, name: str = "TikzJax", store_name: str = "svgImages") -> None:
        self.name = name
        self.store_name = store_name
        self._entries: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._entries.get(key)

    async def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    async def clear(self) -> None:
        self._entries.clear()

    async def keys(self) -> list[str]:
        return list(self._entries)
