"""Time-bounded cache of fetched episode scripts."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class ScriptCacheKey:
  imdb_id: str
  season_number: int
  episode_number: int
  language: str


@dataclass(frozen=True)
class _CacheEntry:
  text: str
  expires_at: float


class InMemoryScriptCache:
  """Keeps raw subtitle text for a fixed time-to-live."""

  def __init__(self, ttl: timedelta = timedelta(days=30), *, clock: Callable[[], float] = time.monotonic) -> None:
    self._ttl_seconds = ttl.total_seconds()
    self._clock = clock
    self._entries: dict[ScriptCacheKey, _CacheEntry] = {}
    self._lock = asyncio.Lock()

  async def get(self, key: ScriptCacheKey) -> str | None:
    async with self._lock:
      entry = self._entries.get(key)
      if entry is None:
        return None
      if entry.expires_at <= self._clock():
        del self._entries[key]
        return None
      return entry.text

  async def put(self, key: ScriptCacheKey, text: str) -> None:
    async with self._lock:
      self._entries[key] = _CacheEntry(text=text, expires_at=self._clock() + self._ttl_seconds)
