"""Tests for the <sidebar> page tag."""

from customsidebar.core.tags import (
    extract_sidebar_source,
    sidebar_tag_handler,
    strip_sidebar_tags,
)


class TestSidebarTag:
    """Tests for <sidebar> tag handling."""

    def test__handler__renders_nothing(self) -> None:
        """Render the tag as empty output."""
        assert sidebar_tag_handler("* Nav\n** Home", {"class": "x"}) == ""

    def test__strip__removes_every_region(self) -> None:
        """Remove tag regions from page text."""
        text = "Before<sidebar>* A</sidebar>Middle<SIDEBAR>\n* B\n</SIDEBAR>After"

        assert strip_sidebar_tags(text) == "BeforeMiddleAfter"

    def test__extract__returns_first_region(self) -> None:
        """Return the content of the first tag."""
        text = "x<sidebar>Help:Sidebar</sidebar>y<sidebar>Other</sidebar>"

        assert extract_sidebar_source(text) == "Help:Sidebar"

    def test__extract__spans_lines(self) -> None:
        """Match tags whose content spans lines."""
        assert extract_sidebar_source("<sidebar>\n* Nav\n</sidebar>") == "\n* Nav\n"

    def test__extract__without_tag__returns_none(self) -> None:
        """Return None for pages without a tag."""
        assert extract_sidebar_source("No sidebar here") is None
