"""In-memory TTL cache for scraped results, persisted to a JSON file.

Entries are never deleted. A stale entry is ignored on read and overwritten
by the next successful fetch for the same key, so the store grows with the
number of distinct tracking numbers and countries seen. That is fine for a
single-process assistant; this is not an LRU.

The file is rewritten on a timer rather than on every mutation, so a crash
can lose up to one flush interval of writes.
"""

import asyncio
import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from services.payloads import Category

logger = logging.getLogger(__name__)

CACHED_CATEGORIES = (Category.TRACKING, Category.TARIFF, Category.DISCOUNTS)

# Timestamps and TTLs are epoch milliseconds, the layout older cache files use.
TTL_MS = {
    Category.TRACKING: 5 * 60 * 1000,
    Category.TARIFF: 60 * 60 * 1000,
    Category.DISCOUNTS: 60 * 60 * 1000,
}

# Discounts are not parameterized; the whole offer list lives under one key.
DISCOUNTS_KEY = "data"


@dataclass
class CacheEntry:
    data: dict
    timestamp: int

    def to_dict(self) -> dict:
        return {"data": self.data, "timestamp": self.timestamp}


def now_ms() -> int:
    return int(time.time() * 1000)


def is_valid(entry: CacheEntry | None, ttl: int, now: int | None = None) -> bool:
    """True while the entry is younger than ``ttl`` milliseconds.

    An entry stamped in the future (clock skew, a hand-edited file) is
    treated as stale rather than fresh forever.
    """
    if entry is None:
        return False
    if now is None:
        now = now_ms()
    age = now - entry.timestamp
    return 0 <= age < ttl


class CacheStore:
    """Three independent key -> CacheEntry mappings, one per cached category."""

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._maps: dict[Category, dict[str, CacheEntry]] = {c: {} for c in CACHED_CATEGORIES}

    def get(self, category: Category, key: str) -> CacheEntry | None:
        return self._maps[Category(category)].get(key)

    def put(self, category: Category, key: str, data: dict) -> CacheEntry:
        entry = CacheEntry(data=data, timestamp=self._clock())
        self._maps[Category(category)][key] = entry
        return entry

    def fresh(self, category: Category, key: str) -> CacheEntry | None:
        """Return the entry only if it is within its category TTL."""
        category = Category(category)
        entry = self.get(category, key)
        if is_valid(entry, TTL_MS[category], now=self._clock()):
            return entry
        return None

    def stats(self) -> dict[str, int]:
        return {c.value: len(entries) for c, entries in self._maps.items()}

    def to_dict(self) -> dict:
        return {
            c.value: {key: entry.to_dict() for key, entry in entries.items()}
            for c, entries in self._maps.items()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CacheStore):
            return NotImplemented
        return self._maps == other._maps


def _parse_entry(raw) -> CacheEntry | None:
    if not isinstance(raw, dict):
        return None
    data = raw.get("data")
    timestamp = raw.get("timestamp")
    if not isinstance(data, dict) or isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return None
    return CacheEntry(data=data, timestamp=int(timestamp))


def load_from_durable(path: str | os.PathLike, clock: Callable[[], int] = now_ms) -> CacheStore:
    """Load the cache file, degrading to an empty store if it is missing or corrupt."""
    store = CacheStore(clock=clock)
    path = Path(path)
    if not path.exists():
        logger.info("No cache file at %s, starting empty", path)
        return store

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable cache file %s: %s", path, e)
        return store

    if not isinstance(raw, dict):
        logger.warning("Ignoring cache file %s: top level is %s, not an object", path, type(raw).__name__)
        return store

    for category in CACHED_CATEGORIES:
        section = raw.get(category.value, {})
        if not isinstance(section, dict):
            logger.warning("Dropping malformed %s section in %s", category.value, path)
            continue
        for key, value in section.items():
            entry = _parse_entry(value)
            if entry is None:
                logger.warning("Dropping malformed %s entry %r in %s", category.value, key, path)
                continue
            store._maps[category][key] = entry

    logger.info("Loaded cache from %s: %s", path, store.stats())
    return store


def _write_atomic(path: Path, text: str) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)


def flush_to_durable(store: CacheStore, path: str | os.PathLike) -> None:
    """Serialize the whole store, replacing the cache file."""
    _write_atomic(Path(path), json.dumps(store.to_dict(), indent=2))


async def flush_async(store: CacheStore, path: str | os.PathLike) -> None:
    """Snapshot on the event loop, write the file off-loop."""
    text = json.dumps(store.to_dict(), indent=2)
    await asyncio.to_thread(_write_atomic, Path(path), text)


async def run_flush_loop(store: CacheStore, path: str | os.PathLike, interval: float = 60) -> None:
    """Flush the store every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await flush_async(store, path)
            logger.debug("Flushed cache to %s", path)
        except OSError as e:
            logger.error("Cache flush to %s failed: %s", path, e)
