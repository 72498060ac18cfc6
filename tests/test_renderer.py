"""Tests for HTML rendering."""

from collections.abc import Callable

from customsidebar.core.context import RequestContext
from customsidebar.core.navigation import NavigationNode, build_sidebar_result
from customsidebar.core.outline import OutlineParser
from customsidebar.core.renderer import TreeRenderer


class TestTreeRendererRender:
    """Tests for TreeRenderer.render()."""

    def test__renders_nested_lists(
        self,
        parser: OutlineParser,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Render each heading as nested lists with level classes."""
        tree = parser.parse(
            "* Nav\n** Special:MyLanguage/Prayer|Prayer\n*** Morning|Morning prayer",
            make_context(page="Prayer/de"),
        )

        html = TreeRenderer().render(tree)

        assert html == {
            "Nav": (
                '<ul class="sidebar-level-1">'
                '<li id="n-Prayer">'
                '<a href="/Special:MyLanguage/Prayer" class="is-active">Prayer</a>'
                '<ul class="sidebar-level-2">'
                '<li id="n-Morning-prayer"><a href="/Morning">Morning prayer</a></li>'
                "</ul>"
                "</li>"
                "</ul>"
            ),
        }

    def test__heading_without_items__renders_empty(
        self,
        parser: OutlineParser,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Render headings without items as empty fragments."""
        html = TreeRenderer().render(parser.parse("* Empty", make_context()))

        assert html == {"Empty": ""}

    def test__repeated_headings__are_concatenated(
        self,
        parser: OutlineParser,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Join fragments of headings that appear twice."""
        html = TreeRenderer().render(parser.parse("* Nav\n** A\n* Nav\n** B", make_context()))

        assert list(html) == ["Nav"]
        assert html["Nav"].count('<ul class="sidebar-level-1">') == 2

    def test__escapes_text_and_attributes(self) -> None:
        """Escape display text, hrefs and ids."""
        node = NavigationNode(
            depth=1,
            raw_key="H",
            raw_label="H",
            display_text="H",
            href="",
            children=[
                NavigationNode(
                    depth=2,
                    raw_key="x",
                    raw_label='"quoted"',
                    display_text="<b>bold</b> & co",
                    href='https://example.com/?a=1&b="2"',
                    dom_id='n-"quoted"',
                ),
            ],
        )

        html = TreeRenderer().render_node(node)

        assert "&lt;b&gt;bold&lt;/b&gt; &amp; co" in html
        assert 'href="https://example.com/?a=1&amp;b=&quot;2&quot;"' in html
        assert 'id="n-&quot;quoted&quot;"' in html
        assert "<b>" not in html


class TestTreeRendererRenderSidebar:
    """Tests for TreeRenderer.render_sidebar()."""

    def test__matches_tree_rendering(
        self,
        parser: OutlineParser,
        make_context: Callable[..., RequestContext],
    ) -> None:
        """Render an assembled sidebar like the tree it came from."""
        tree = parser.parse("* Nav\n** Home\n* Tools\n** Special:Upload|Upload", make_context())
        renderer = TreeRenderer()

        assert renderer.render_sidebar(build_sidebar_result(tree)) == renderer.render(tree)
