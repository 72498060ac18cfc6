"""Cache invalidation on page writes."""

from customsidebar.live.watcher import CacheInvalidator

__all__ = ["CacheInvalidator"]
