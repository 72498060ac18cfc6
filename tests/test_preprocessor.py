"""Tests for wikitext preprocessing."""

from collections.abc import Callable

from customsidebar.core.context import RequestContext
from customsidebar.core.pages import MemoryPageStore
from customsidebar.core.preprocessor import Preprocessor, strip_noinclude
from customsidebar.core.title import TitleResolver


class TestStripNoinclude:
    """Tests for strip_noinclude()."""

    def test__removes_regions(self) -> None:
        """Remove noinclude regions including their content."""
        text = "* Nav<noinclude>\n[[Category:Sidebars]]</noinclude>\n** Home"

        assert strip_noinclude(text) == "* Nav\n** Home"


class TestPreprocessorDirectives:
    """Tests for user name and inclusion directives."""

    def test__user_name__is_substituted(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Replace both user name directives."""
        context = make_context(user_name="Alice")

        result = preprocessor.preprocess(
            "** User:{{current-user-name}}|{{#__username}}",
            context,
        )

        assert result == "** User:Alice|Alice"

    def test__transcluded_text__keeps_includeonly(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Drop noinclude and keep includeonly content by default."""
        result = preprocessor.preprocess(
            "<noinclude>doc</noinclude><includeonly>* Nav</includeonly>",
            make_context(),
        )

        assert result == "* Nav"

    def test__page_text__keeps_noinclude(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Keep noinclude and drop includeonly content for the viewed page."""
        result = preprocessor.preprocess(
            "<noinclude>* Nav</noinclude><includeonly>hidden</includeonly>",
            make_context(),
            as_page=True,
        )

        assert result == "* Nav"


class TestPreprocessorMagicWords:
    """Tests for magic word expansion."""

    def test__page_names(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Expand page name magic words from the current title."""
        context = make_context(page="Help:Prayer/de")

        result = preprocessor.preprocess("{{PAGENAME}} {{FULLPAGENAME}} {{NAMESPACE}}", context)

        assert result == "Prayer/de Help:Prayer/de Help"

    def test__languages(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Expand language magic words from the request."""
        context = make_context(locale="de")

        result = preprocessor.preprocess("{{USERLANGUAGE}}/{{CONTENTLANGUAGE}}", context)

        assert result == "de/en"


class TestPreprocessorTemplates:
    """Tests for template transclusion."""

    def test__template__is_transcluded_with_arguments(
        self,
        pages: MemoryPageStore,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Substitute numbered and named arguments."""
        pages.set_content("Template:Entry", "** {{{1}}}|{{{label|{{{1}}}}}}")

        result = preprocessor.preprocess(
            "* Nav\n{{Entry|Prayer|label=Daily prayer}}\n{{Entry|Help}}",
            make_context(),
        )

        assert result == "* Nav\n** Prayer|Daily prayer\n** Help|Help"

    def test__nested_templates__are_expanded(
        self,
        pages: MemoryPageStore,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Expand templates used inside templates."""
        pages.set_content("Template:Outer", "* {{Inner}}")
        pages.set_content("Template:Inner", "Nav<noinclude> (doc)</noinclude>")

        result = preprocessor.preprocess("{{Outer}}", make_context())

        assert result == "* Nav"

    def test__main_namespace_page__is_transcluded(
        self,
        pages: MemoryPageStore,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Transclude main namespace pages with a leading colon."""
        pages.set_content("Shared nav", "** Home")

        result = preprocessor.preprocess("{{:Shared nav}}", make_context())

        assert result == "** Home"

    def test__missing_template__becomes_link(
        self,
        preprocessor: Preprocessor,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Render missing templates as links to their page."""
        result = preprocessor.preprocess("{{Nothing here}}", make_context())

        assert result == "[[:Template:Nothing here]]"

    def test__template_loop__is_reported(
        self,
        pages: MemoryPageStore,
        titles: TitleResolver,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Stop expanding self-including templates."""
        pages.set_content("Template:Loop", "x{{Loop}}")
        preprocessor = Preprocessor(pages, titles, max_depth=3)

        result = preprocessor.preprocess("{{Loop}}", make_context())

        assert result.startswith("xxx")
        assert "Template loop detected: [[Template:Loop]]" in result
