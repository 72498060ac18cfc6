"""Sidebar cache invalidation on page writes.

Monitors the page directory and clears cached sidebars whenever a page file
is added, modified or deleted, so the next request rebuilds them.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from watchfiles import Change, awatch

from customsidebar.core.cache import SidebarCache
from customsidebar.core.title import NAMESPACES

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Watches page files and clears the sidebar cache on changes.

    Any page may feed a sidebar (directly, as an overlay, as a template or as
    a message override), so every page change clears every cached sidebar.
    """

    def __init__(
        self,
        source_dir: Path,
        cache: SidebarCache,
        *,
        extension: str = ".wiki",
        on_invalidate: Callable[[list[str]], None] | None = None,
    ) -> None:
        """Initialize the invalidator.

        Args:
            source_dir: Page directory to watch
            cache: Sidebar cache to clear
            extension: Page file extension
            on_invalidate: Called with the changed page names after each clear
        """
        self._source_dir = source_dir
        self._cache = cache
        self._extension = extension
        self._on_invalidate = on_invalidate
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the file watcher."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Watch for page changes until cancelled or stop_event is set."""
        async for changes in awatch(self._source_dir, stop_event=stop_event):
            self.handle_changes(changes)

    def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> list[str]:
        """Clear the cache if any page file changed.

        Args:
            changes: (change type, file path) pairs from the watcher

        Returns:
            Names of the changed pages, empty when the cache was left alone
        """
        changed = sorted(
            {
                self._to_page_name(Path(path_str))
                for _, path_str in changes
                if self._is_page_file(Path(path_str))
            }
        )
        if not changed:
            return []

        logger.info(f"Pages changed: {', '.join(changed)}; clearing sidebar cache")
        self._cache.clear()
        if self._on_invalidate is not None:
            self._on_invalidate(changed)
        return changed

    def _is_page_file(self, path: Path) -> bool:
        """Check if a path is a page file inside the source directory.

        Args:
            path: Path to check

        Returns:
            True if path is a page file
        """
        try:
            path.relative_to(self._source_dir)
        except ValueError:
            return False
        return path.suffix == self._extension

    def _to_page_name(self, file_path: Path) -> str:
        """Convert a page file path to a page name.

        Args:
            file_path: Absolute file path

        Returns:
            Page name (e.g., "Help:Sidebar", "Prayer/de")
        """
        parts = list(file_path.relative_to(self._source_dir).with_suffix("").parts)
        if len(parts) > 1:
            namespace = NAMESPACES.get(parts[0].replace("_", " ").lower())
            if namespace is not None:
                return f"{namespace}:{'/'.join(parts[1:])}".replace("_", " ")
        return "/".join(parts).replace("_", " ")
