"""Navigation tree and sidebar structures.

A parsed outline is a tree of NavigationNode. The sidebar is a view over that
tree: an ordered mapping from each top-level heading to the items below it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TypedDict


class NavigationNodeDict(TypedDict, total=False):
    """Dictionary representation of a navigation node."""

    depth: int
    key: str
    label: str
    text: str
    href: str
    active: bool
    id: str
    children: list[NavigationNodeDict]


@dataclass
class NavigationNode:
    """Navigation node with children for the sidebar tree."""

    depth: int
    raw_key: str
    raw_label: str
    display_text: str
    href: str
    is_active: bool = False
    dom_id: str = ""
    children: list[NavigationNode] = field(default_factory=list)

    def to_dict(self) -> NavigationNodeDict:
        """Convert to dictionary for JSON serialization."""
        result: NavigationNodeDict = {
            "depth": self.depth,
            "key": self.raw_key,
            "label": self.raw_label,
            "text": self.display_text,
            "href": self.href,
            "active": self.is_active,
            "id": self.dom_id,
        }
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: NavigationNodeDict) -> NavigationNode:
        """Rebuild a node (and its subtree) from its dictionary form."""
        return cls(
            depth=data["depth"],
            raw_key=data["key"],
            raw_label=data["label"],
            display_text=data["text"],
            href=data["href"],
            is_active=data.get("active", False),
            dom_id=data.get("id", ""),
            children=[cls.from_dict(child) for child in data.get("children", [])],
        )


# Heading text -> items below the heading, in source order
SidebarResult = dict[str, list[NavigationNode]]

SidebarResultDict = dict[str, list[NavigationNodeDict]]


def build_sidebar_result(tree: list[NavigationNode]) -> SidebarResult:
    """Build a sidebar from a parsed outline tree.

    Each top-level node becomes a heading keyed by its display text. A heading
    that appears twice keeps one entry with the items of both occurrences.

    Args:
        tree: Top-level nodes of a parsed outline

    Returns:
        Ordered mapping of heading text to its items
    """
    result: SidebarResult = {}
    for heading in tree:
        result.setdefault(heading.display_text, []).extend(heading.children)
    return result


def merge_sidebars(base: SidebarResult, overlay: SidebarResult) -> SidebarResult:
    """Merge an overlay sidebar into a base sidebar.

    New headings are appended; items under a heading that already exists are
    appended after the existing items. Neither input is modified.

    Args:
        base: Sidebar merged so far
        overlay: Sidebar to add

    Returns:
        New merged sidebar
    """
    merged: SidebarResult = {heading: list(items) for heading, items in base.items()}
    for heading, items in overlay.items():
        merged.setdefault(heading, []).extend(items)
    return merged


def copy_sidebar(sidebar: SidebarResult) -> SidebarResult:
    """Deep copy a sidebar so callers can't mutate shared state."""
    return copy.deepcopy(sidebar)


def sidebar_to_dict(sidebar: SidebarResult) -> SidebarResultDict:
    """Convert a sidebar to dictionaries for JSON serialization."""
    return {heading: [item.to_dict() for item in items] for heading, items in sidebar.items()}


def sidebar_from_dict(data: SidebarResultDict) -> SidebarResult:
    """Rebuild a sidebar from its dictionary form."""
    return {
        heading: [NavigationNode.from_dict(item) for item in items]
        for heading, items in data.items()
    }
