"""Tests for outline source resolution."""

import logging
from collections.abc import Callable

import pytest
from customsidebar.core.context import RequestContext
from customsidebar.core.pages import MemoryPageStore
from customsidebar.core.preprocessor import Preprocessor
from customsidebar.core.resolver import OutlineResolver
from customsidebar.core.title import TitleResolver


class TestOutlineResolverResolve:
    """Tests for OutlineResolver.resolve()."""

    def test__none__returns_none(
        self,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Return None when there is no source."""
        assert resolver.resolve(None, make_context()) is None

    def test__literal_outline__is_returned(
        self,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Return outline text as is."""
        text = "\n* Nav\n** Home"

        assert resolver.resolve(text, make_context()) == text

    def test__literal_outline__is_preprocessed(
        self,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Expand directives in literal outlines."""
        result = resolver.resolve("* Nav\n** User:{{#__username}}", make_context(user_name="Bob"))

        assert result == "* Nav\n** User:Bob"

    def test__page_name__is_transcluded(
        self,
        pages: MemoryPageStore,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Replace a page name with the page's content."""
        pages.set_content("Help:Sidebar", "* Help\n** Help:Contents<noinclude>\ndocs</noinclude>")

        assert resolver.resolve(" Help:Sidebar ", make_context()) == "* Help\n** Help:Contents"

    def test__page_chain__is_followed(
        self,
        pages: MemoryPageStore,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Follow pages that name other pages."""
        pages.set_content("First", "Second")
        pages.set_content("Second", "Third")
        pages.set_content("Third", "* Nav")

        assert resolver.resolve("First", make_context()) == "* Nav"

    def test__single_line_outline_page__is_not_followed(
        self,
        pages: MemoryPageStore,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Stop at a page holding a one-line outline."""
        pages.set_content("Nav", "* Nav")

        assert resolver.resolve("Nav", make_context()) == "* Nav"

    def test__templates_in_pages__are_expanded(
        self,
        pages: MemoryPageStore,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Preprocess each transcluded page."""
        pages.set_content("Sidebar page", "* {{PAGENAME}}\n** Home")

        result = resolver.resolve("Sidebar page", make_context(page="Prayer"))

        assert result == "* Prayer\n** Home"

    def test__missing_page__resolves_to_empty(
        self,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Treat missing pages as empty."""
        assert resolver.resolve("Nowhere", make_context()) == ""

    def test__invalid_name__is_returned_unchanged(
        self,
        resolver: OutlineResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Return text that isn't a title without looking anything up."""
        assert resolver.resolve("not [a] title", make_context()) == "not [a] title"

    def test__page_cycle__is_bounded(
        self,
        pages: MemoryPageStore,
        titles: TitleResolver,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Give up on page chains that never settle."""
        pages.set_content("Ping", "Pong")
        pages.set_content("Pong", "Ping")
        resolver = OutlineResolver(titles, pages, preprocessor, max_transclusions=5)

        with caplog.at_level(logging.WARNING):
            result = resolver.resolve("Ping", make_context())

        assert result is None
        assert "did not settle after 5 page lookups" in caplog.text

    def test__long_chain__within_bound(
        self,
        pages: MemoryPageStore,
        titles: TitleResolver,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Follow chains as long as the lookup bound."""
        pages.set_content("P1", "P2")
        pages.set_content("P2", "P3")
        pages.set_content("P3", "* Nav")
        resolver = OutlineResolver(titles, pages, preprocessor, max_transclusions=3)

        assert resolver.resolve("P1", make_context()) == "* Nav"
