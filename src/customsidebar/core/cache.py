"""Sidebar caches with TTL expiry.

File cache structure:
    .cache/
    ├── .gitignore
    └── sidebars/
        └── <key_hash>.json          # {"key", "expires_at", "sidebar"}

Entries are written unconditionally on every assembly and read back until
they expire. A TTL of zero or less means the entry never expires.
"""

import hashlib
import json
import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TypedDict

from customsidebar.core.navigation import (
    SidebarResult,
    SidebarResultDict,
    copy_sidebar,
    sidebar_from_dict,
    sidebar_to_dict,
)

logger = logging.getLogger(__name__)

KEY_PREFIX = "sidebar"


def make_cache_key(locale: str) -> str:
    """Compute the cache key for a display locale."""
    return f"{KEY_PREFIX}:{locale}"


def compute_key_hash(key: str) -> str:
    """Compute a filesystem-safe name for a cache key.

    Args:
        key: Cache key (e.g., "sidebar:de")

    Returns:
        SHA-256 hash of the key
    """
    return hashlib.sha256(key.encode()).hexdigest()


def expiry_time(ttl_seconds: int, now: float) -> float | None:
    """Absolute expiry for a TTL, or None for entries that never expire."""
    if ttl_seconds <= 0:
        return None
    return now + ttl_seconds


class CachedSidebar(TypedDict):
    """Cached sidebar file structure."""

    key: str
    expires_at: float | None
    sidebar: SidebarResultDict


class SidebarCache(Protocol):
    """Key-value store for assembled sidebars."""

    def get(self, key: str) -> SidebarResult | None: ...

    def set(self, key: str, value: SidebarResult, ttl_seconds: int) -> None: ...

    def invalidate(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCache:
    """In-process sidebar cache.

    Stores copies so that callers mutating a returned sidebar can't change
    what later requests see.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float | None, SidebarResult]] = {}

    def get(self, key: str) -> SidebarResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return copy_sidebar(value)

    def set(self, key: str, value: SidebarResult, ttl_seconds: int) -> None:
        self._entries[key] = (expiry_time(ttl_seconds, self._clock()), copy_sidebar(value))

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class FileCache:
    """File-based sidebar cache.

    Each key is stored as one JSON file named after the key hash, holding the
    serialized sidebar and its absolute expiry time.
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path, clock: Callable[[], float] = time.time) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
            clock: Time source, seconds since the epoch
        """
        self._cache_dir = cache_dir
        self._sidebars_dir = cache_dir / "sidebars"
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def _path_for(self, key: str) -> Path:
        return self._sidebars_dir / f"{compute_key_hash(key)}.json"

    def get(self, key: str) -> SidebarResult | None:
        """Retrieve a cached sidebar if present and not expired.

        Args:
            key: Cache key

        Returns:
            Cached sidebar, or None on miss, expiry or unreadable entry
        """
        entry_path = self._path_for(key)
        if not entry_path.exists():
            return None

        entry = self._read_entry(entry_path)
        if entry is None or entry["key"] != key:
            return None

        expires_at = entry["expires_at"]
        if expires_at is not None and self._clock() >= expires_at:
            logger.debug(f"Cache entry {key} expired")
            return None

        try:
            return sidebar_from_dict(entry["sidebar"])
        except (KeyError, TypeError) as e:
            logger.warning(f"Ignoring malformed cache entry {key}: {e}")
            return None

    def set(self, key: str, value: SidebarResult, ttl_seconds: int) -> None:
        """Store a sidebar, replacing any previous entry.

        Args:
            key: Cache key
            value: Sidebar to store
            ttl_seconds: Time-to-live; <= 0 stores the entry without expiry
        """
        self._ensure_cache_dir()
        self._sidebars_dir.mkdir(parents=True, exist_ok=True)

        entry: CachedSidebar = {
            "key": key,
            "expires_at": expiry_time(ttl_seconds, self._clock()),
            "sidebar": sidebar_to_dict(value),
        }
        self._path_for(key).write_text(json.dumps(entry), encoding="utf-8")

    def invalidate(self, key: str) -> None:
        """Remove a cached sidebar.

        Args:
            key: Cache key to invalidate
        """
        entry_path = self._path_for(key)
        if entry_path.exists():
            entry_path.unlink()

    def clear(self) -> None:
        """Remove all cached sidebars."""
        if self._sidebars_dir.exists():
            shutil.rmtree(self._sidebars_dir)

    def _read_entry(self, entry_path: Path) -> CachedSidebar | None:
        """Read and validate a cache file.

        Args:
            entry_path: Path to cache JSON file

        Returns:
            CachedSidebar if valid, None otherwise
        """
        try:
            data = json.loads(entry_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        if "key" not in data or "sidebar" not in data:
            return None
        if not isinstance(data["sidebar"], dict):
            return None

        return CachedSidebar(
            key=data["key"],
            expires_at=data.get("expires_at"),
            sidebar=data["sidebar"],
        )
