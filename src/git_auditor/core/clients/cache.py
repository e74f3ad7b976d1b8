"""Bounded in-memory response cache with per-entry time-to-live.

Eviction is first-in-first-out by insertion order: reading an entry never
refreshes its position, only re-inserting it does.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
"""Returned by :meth:`ResponseCache.get` for absent or expired keys.

``None`` is a legitimate cached value (a not-found response), so absence
needs its own sentinel.
"""


class ResponseCache:
    """Maps request keys to decoded payloads until they expire."""

    def __init__(
        self,
        max_entries: int = 500,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        value, expires_at = entry
        if self._clock() >= expires_at:
            return MISSING
        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        # Overwrite counts as a fresh insertion.
        self._entries.pop(key, None)
        self._entries[key] = (value, self._clock() + ttl)
        if len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted %s", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not MISSING

    def __len__(self) -> int:
        return len(self._entries)
