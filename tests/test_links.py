"""Tests for link resolution."""

from customsidebar.core.links import INVALID_TITLE, LinkKind, LinkResolver
from customsidebar.core.title import TitleResolver


class TestLinkResolverResolve:
    """Tests for LinkResolver.resolve()."""

    def test__external_url__passes_through(self, titles: TitleResolver) -> None:
        """Return external URLs unchanged."""
        link = LinkResolver(titles).resolve("https://example.com/path?q=1")

        assert link.kind is LinkKind.EXTERNAL
        assert link.href == "https://example.com/path?q=1"

    def test__protocol_match__is_case_insensitive(self, titles: TitleResolver) -> None:
        """Match URL protocols regardless of case."""
        link = LinkResolver(titles).resolve("HTTPS://Example.com")

        assert link.kind is LinkKind.EXTERNAL
        assert link.href == "HTTPS://Example.com"

    def test__protocol_relative_url__is_external(self, titles: TitleResolver) -> None:
        """Treat protocol-relative URLs as external."""
        link = LinkResolver(titles).resolve("//cdn.example.com/x")

        assert link.kind is LinkKind.EXTERNAL

    def test__page_reference__becomes_local_url(self, titles: TitleResolver) -> None:
        """Resolve page references to local URLs."""
        link = LinkResolver(titles).resolve("Main Page")

        assert link.kind is LinkKind.INTERNAL
        assert link.href == "/Main_Page"

    def test__invalid_title__becomes_sentinel(self, titles: TitleResolver) -> None:
        """Resolve invalid titles to the INVALID-TITLE sentinel."""
        link = LinkResolver(titles).resolve("Foo[bar]")

        assert link.kind is LinkKind.INVALID
        assert link.href == INVALID_TITLE

    def test__custom_protocols__replace_defaults(self, titles: TitleResolver) -> None:
        """Only treat configured protocols as external."""
        resolver = LinkResolver(titles, url_protocols=["gopher://"])

        assert resolver.is_external("gopher://example.org")
        assert not resolver.is_external("https://example.com")
        assert resolver.resolve("mailto:someone@example.com").kind is LinkKind.INTERNAL
