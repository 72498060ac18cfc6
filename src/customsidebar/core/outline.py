"""Outline parsing.

An outline is a bulleted list, one entry per line, nesting given by the number
of leading asterisks:

    * Navigation
    ** mainpage|mainpage-description
    ** Special:MyLanguage/Prayer|Prayer
    *** Special:MyLanguage/Prayer/Morning|Morning prayer

Each entry is `link|label`; without a separator the link doubles as the label.
Both parts go through the translator, so they may be message keys. Entries
whose link translates to "-" are disabled and produce no node.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from customsidebar.core.context import RequestContext
from customsidebar.core.links import SKIP_TOKEN, LinkResolver
from customsidebar.core.messages import Translator
from customsidebar.core.navigation import NavigationNode

logger = logging.getLogger(__name__)

MARKER = "*"
SEPARATOR = "|"
MY_LANGUAGE_PREFIX = "Special:MyLanguage/"

LINE_RE = re.compile(r"^(\*+)\s(.+)$")


@dataclass(frozen=True)
class OutlineLine:
    """A single marker-prefixed outline line."""

    number: int
    raw: str
    depth: int
    payload: str

    @property
    def key(self) -> str:
        """Token before the separator, used for the link."""
        return self.payload.split(SEPARATOR, 1)[0].strip()

    @property
    def label(self) -> str:
        """Token after the separator, or the key when there is none."""
        parts = self.payload.split(SEPARATOR, 1)
        label = parts[1].strip() if len(parts) == 2 else ""
        return label or self.key

    @classmethod
    def from_text(cls, number: int, raw: str) -> "OutlineLine | None":
        """Parse one line of source text.

        Args:
            number: 1-based line number, for diagnostics
            raw: Line text without the line break

        Returns:
            OutlineLine, or None if the line isn't a non-empty outline entry
        """
        match = LINE_RE.match(raw)
        if match is None:
            return None
        line = cls(number=number, raw=raw, depth=len(match.group(1)), payload=match.group(2))
        if not line.key:
            return None
        return line


def iter_outline_lines(text: str) -> Iterator[OutlineLine]:
    """Yield the outline entries of a text, skipping everything else."""
    for number, raw in enumerate(text.split("\n"), start=1):
        line = OutlineLine.from_text(number, raw.rstrip("\r"))
        if line is None:
            if raw.strip():
                logger.debug(f"Skipping non-outline line {number}: {raw!r}")
            continue
        yield line


def make_dom_id(label: str) -> str:
    """Build the element id for an entry from its raw label."""
    return "n-" + label.replace(" ", "-")


@dataclass
class _OpenLevel:
    """A node that may still receive children."""

    declared_depth: int
    node: NavigationNode


class OutlineParser:
    """Builds navigation trees from outline text.

    Lines are consumed top-down with an explicit stack of open levels: a line
    closes every open level declared at its own depth or deeper, then becomes
    a child of the innermost level still open.

    A line more than one level deeper than that parent is still attached as
    its direct child; its depth is normalized to parent depth + 1 so that the
    tree never has gaps, and a warning is logged.
    """

    def __init__(self, links: LinkResolver, translator: Translator) -> None:
        """Initialize parser.

        Args:
            links: Resolver for entry links
            translator: Translator for link tokens and labels
        """
        self._links = links
        self._translator = translator

    def parse(self, text: str | None, context: RequestContext) -> list[NavigationNode]:
        """Parse outline text into a tree.

        Args:
            text: Outline text (None is treated as empty)
            context: Request context, for labels and the active entry

        Returns:
            Top-level nodes, in source order
        """
        roots: list[NavigationNode] = []
        if not text:
            return roots

        stack: list[_OpenLevel] = []
        for line in iter_outline_lines(text):
            while stack and stack[-1].declared_depth >= line.depth:
                stack.pop()

            node = self._build_node(line, context)
            if node is None:
                continue

            if stack:
                parent = stack[-1]
                siblings = parent.node.children
                parent_depth = parent.node.depth
                parent_declared = parent.declared_depth
            else:
                siblings = roots
                parent_depth = 0
                parent_declared = 0

            if line.depth > parent_declared + 1:
                logger.warning(
                    f"Outline line {line.number} jumps from depth {parent_declared} "
                    f"to {line.depth}; nesting it at depth {parent_depth + 1}"
                )
            node.depth = parent_depth + 1

            siblings.append(node)
            stack.append(_OpenLevel(declared_depth=line.depth, node=node))

        return roots

    def _build_node(self, line: OutlineLine, context: RequestContext) -> NavigationNode | None:
        """Resolve one outline entry, or None if the entry is disabled."""
        link_token = self._translator.translate(line.key)
        if link_token == SKIP_TOKEN:
            logger.debug(f"Skipping disabled outline entry on line {line.number}")
            return None

        link = self._links.resolve(link_token)
        label = line.label
        return NavigationNode(
            depth=line.depth,
            raw_key=line.key,
            raw_label=label,
            display_text=self._translator.translate(label, context.locale),
            href=link.href,
            is_active=self._is_active(link.href, context),
            dom_id=make_dom_id(label),
        )

    def _is_active(self, href: str, context: RequestContext) -> bool:
        """Check whether an entry points at the current page.

        Only entries linking through Special:MyLanguage are considered. The
        current page matches when its path starts with the link target, so
        translated subpages ("Prayer/de") activate the entry for "Prayer".
        """
        prefix = self._links.titles.article_base + MY_LANGUAGE_PREFIX
        if not href.startswith(prefix):
            return False
        target = href[len(prefix):]
        return bool(target) and context.title.path.startswith(target)


def serialize_outline(nodes: list[NavigationNode]) -> str:
    """Render a tree back to outline text.

    Args:
        nodes: Top-level nodes

    Returns:
        Outline text, one line per node
    """
    lines: list[str] = []
    _serialize_nodes(nodes, lines)
    return "\n".join(lines)


def _serialize_nodes(nodes: list[NavigationNode], lines: list[str]) -> None:
    for node in nodes:
        payload = node.raw_key
        if node.raw_label != node.raw_key:
            payload += SEPARATOR + node.raw_label
        lines.append(f"{MARKER * node.depth} {payload}")
        _serialize_nodes(node.children, lines)
