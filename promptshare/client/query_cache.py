"""Tuple-keyed read cache with prefix invalidation.

Keys look like ``("prompts", "recent", "all")`` or ``("userLike", prompt_id,
user_id)``. Invalidating a prefix such as ``("prompts",)`` marks every key that
starts with it as stale; the next ``fetch`` of a stale key reloads it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

QueryKey = tuple[Any, ...]


@dataclass
class _Entry:
    data: Any
    stale: bool = False


class QueryCache:
    """In-memory cache of query results for one client session."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, _Entry] = {}

    async def fetch(
        self, key: QueryKey, loader: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Return the cached value for ``key``, loading it if missing or stale.

        Args:
            key: Query key.
            loader: Coroutine factory producing the fresh value.

        Returns:
            The cached or freshly loaded value.
        """
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            return entry.data

        logger.debug("Loading query %s", key)
        data = await loader()
        self._entries[key] = _Entry(data=data)
        return data

    def get(self, key: QueryKey) -> Any:
        """Return cached data for ``key`` (stale or not) without loading."""
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set(self, key: QueryKey, data: Any) -> None:
        self._entries[key] = _Entry(data=data)

    def is_stale(self, key: QueryKey) -> bool:
        """True when ``key`` is missing or has been invalidated."""
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every key starting with ``prefix`` as stale.

        Returns:
            Number of entries marked stale.
        """
        marked = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                entry.stale = True
                marked += 1
        logger.debug("Invalidated %d query(ies) under %s", marked, prefix)
        return marked
