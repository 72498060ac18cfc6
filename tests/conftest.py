"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from customsidebar.assets import get_messages_dir
from customsidebar.config import (
    CacheConfig,
    Config,
    I18nConfig,
    LinksConfig,
    PagesConfig,
    SidebarConfig,
    SiteConfig,
)
from customsidebar.core.context import RequestContext
from customsidebar.core.links import LinkResolver
from customsidebar.core.messages import MessageCatalog, Translator
from customsidebar.core.outline import OutlineParser
from customsidebar.core.pages import MemoryPageStore
from customsidebar.core.preprocessor import Preprocessor
from customsidebar.core.resolver import OutlineResolver
from customsidebar.core.title import TitleResolver


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates source_dir and returns a Config instance suitable for testing.
    Use exist_ok=True to allow other fixtures to also create the pages dir.
    """
    source_dir = tmp_path / "pages"
    source_dir.mkdir(exist_ok=True)
    cache_dir = tmp_path / ".cache"

    return Config(
        pages=PagesConfig(source_dir=source_dir),
        site=SiteConfig(),
        sidebar=SidebarConfig(),
        cache=CacheConfig(cache_dir=cache_dir),
        i18n=I18nConfig(),
        links=LinksConfig(),
    )


@pytest.fixture
def titles() -> TitleResolver:
    """Title resolver with the default article path."""
    return TitleResolver()


@pytest.fixture
def pages() -> MemoryPageStore:
    """Empty in-memory page store."""
    return MemoryPageStore()


@pytest.fixture
def make_context(titles: TitleResolver) -> Callable[..., RequestContext]:
    """Factory for request contexts on a given page."""

    def factory(
        page: str = "Main Page",
        locale: str = "en",
        user_groups: tuple[str, ...] = (),
        user_name: str = "",
    ) -> RequestContext:
        title = titles.new_from_text(page)
        assert title is not None
        return RequestContext(
            title=title,
            locale=locale,
            content_language="en",
            user_name=user_name,
            user_groups=user_groups,
        )

    return factory


@pytest.fixture
def translator(pages: MemoryPageStore, titles: TitleResolver) -> Translator:
    """Translator over the bundled catalogs and the page store."""
    catalog = MessageCatalog([get_messages_dir()], pages=pages, titles=titles)
    return Translator(catalog)


@pytest.fixture
def parser(titles: TitleResolver, translator: Translator) -> OutlineParser:
    """Outline parser over the bundled catalogs."""
    return OutlineParser(LinkResolver(titles), translator)


@pytest.fixture
def preprocessor(pages: MemoryPageStore, titles: TitleResolver) -> Preprocessor:
    """Preprocessor reading templates from the page store."""
    return Preprocessor(pages, titles)


@pytest.fixture
def resolver(
    pages: MemoryPageStore,
    titles: TitleResolver,
    preprocessor: Preprocessor,
) -> OutlineResolver:
    """Outline resolver over the page store."""
    return OutlineResolver(titles, pages, preprocessor)
