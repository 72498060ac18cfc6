"""Page storage.

Pages are plain wikitext files laid out by namespace and subpage:

    pages/
    ├── Main_Page.wiki
    ├── Prayer.wiki
    ├── Prayer/
    │   └── de.wiki              # Prayer/de
    ├── Help/
    │   └── Sidebar.wiki         # Help:Sidebar
    └── MediaWiki/
        └── Sidebar.wiki         # MediaWiki:Sidebar
"""

from pathlib import Path
from typing import Protocol

from customsidebar.core.title import Title, TitleResolver


class PageStore(Protocol):
    """Document store keyed by page title."""

    def get_content(self, title: Title) -> str | None: ...


class FilePageStore:
    """Page store backed by a directory of wikitext files."""

    def __init__(self, source_dir: Path, extension: str = ".wiki") -> None:
        """Initialize store.

        Args:
            source_dir: Root directory containing page files
            extension: Page file extension, including the dot
        """
        self._source_dir = source_dir
        self._extension = extension

    @property
    def source_dir(self) -> Path:
        """Root directory containing page files."""
        return self._source_dir

    @property
    def extension(self) -> str:
        """Page file extension."""
        return self._extension

    def path_for(self, title: Title) -> Path:
        """Map a title to its page file.

        Args:
            title: Page title

        Returns:
            Path to the page file (which may not exist)
        """
        parts = title.text.replace(" ", "_").split("/")
        base = self._source_dir
        if title.namespace:
            base = base / title.namespace.replace(" ", "_")
        return base.joinpath(*parts[:-1], f"{parts[-1]}{self._extension}")

    def get_content(self, title: Title) -> str | None:
        """Read page content.

        Args:
            title: Page title

        Returns:
            Page text, or None if the page doesn't exist
        """
        page_path = self.path_for(title)
        if not page_path.is_file():
            return None
        return page_path.read_text(encoding="utf-8")


class MemoryPageStore:
    """Page store backed by a dictionary of prefixed titles to text."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self._pages: dict[str, str] = {}
        for name, text in (pages or {}).items():
            self._pages[_key(name)] = text

    def set_content(self, name: str, text: str) -> None:
        """Create or replace a page."""
        self._pages[_key(name)] = text

    def get_content(self, title: Title) -> str | None:
        return self._pages.get(title.prefixed_db_key)


def _key(name: str) -> str:
    """Normalize a page name to the form used by Title.prefixed_db_key."""
    title = TitleResolver().new_from_text(name)
    if title is None:
        raise ValueError(f"Invalid page name: {name!r}")
    return title.prefixed_db_key
