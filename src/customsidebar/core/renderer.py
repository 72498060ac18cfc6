"""HTML rendering of navigation trees.

Each heading renders to its own fragment:

    <ul class="sidebar-level-1">
      <li id="n-Prayer"><a href="/Special:MyLanguage/Prayer" class="is-active">Prayer</a>
        <ul class="sidebar-level-2">...</ul>
      </li>
    </ul>

Headings themselves are labels only; the host places each fragment under its
heading text.
"""

from html import escape

from customsidebar.core.navigation import NavigationNode, SidebarResult

ACTIVE_CLASS = "is-active"
LEVEL_CLASS = "sidebar-level-{depth}"


class TreeRenderer:
    """Renders navigation trees to nested lists."""

    def render(self, tree: list[NavigationNode]) -> dict[str, str]:
        """Render a parsed outline tree.

        Args:
            tree: Top-level (heading) nodes

        Returns:
            Ordered mapping of heading text to its HTML fragment
        """
        portals: dict[str, str] = {}
        for heading in tree:
            fragment = self.render_node(heading)
            portals[heading.display_text] = portals.get(heading.display_text, "") + fragment
        return portals

    def render_sidebar(self, sidebar: SidebarResult) -> dict[str, str]:
        """Render an assembled sidebar.

        Args:
            sidebar: Ordered mapping of heading text to its items

        Returns:
            Ordered mapping of heading text to its HTML fragment
        """
        return {
            heading: self.render_node(
                NavigationNode(
                    depth=1,
                    raw_key=heading,
                    raw_label=heading,
                    display_text=heading,
                    href="",
                    children=items,
                )
            )
            for heading, items in sidebar.items()
        }

    def render_node(self, node: NavigationNode) -> str:
        """Render one node and its subtree."""
        parts: list[str] = []

        if node.depth > 1:
            class_attr = f' class="{ACTIVE_CLASS}"' if node.is_active else ""
            parts.append(
                f'<a href="{escape(node.href)}"{class_attr}>{escape(node.display_text)}</a>'
            )

        if node.children:
            parts.append(f'<ul class="{LEVEL_CLASS.format(depth=node.depth)}">')
            for child in node.children:
                parts.append(f'<li id="{escape(child.dom_id)}">{self.render_node(child)}</li>')
            parts.append("</ul>")

        return "".join(parts)
