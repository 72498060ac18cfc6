"""The <sidebar> page tag.

Pages declare their sidebar inside `<sidebar>...</sidebar>`: either the
outline itself or the name of a page holding it. The tag only matters to the
sidebar build; when the page itself is rendered it produces nothing.
"""

import re

TAG_NAME = "sidebar"

SIDEBAR_TAG_RE = re.compile(rf"<{TAG_NAME}>(.*?)</{TAG_NAME}>", re.IGNORECASE | re.DOTALL)


def sidebar_tag_handler(content: str, attributes: dict[str, str] | None = None) -> str:
    """Render a <sidebar> tag in page output: always empty."""
    return ""


def strip_sidebar_tags(text: str) -> str:
    """Remove <sidebar> regions from page text before normal rendering.

    Args:
        text: Page wikitext

    Returns:
        Text with every <sidebar> region replaced by its (empty) rendering
    """
    return SIDEBAR_TAG_RE.sub(lambda m: sidebar_tag_handler(m.group(1)), text)


def extract_sidebar_source(text: str) -> str | None:
    """Return the content of the first <sidebar> region, if any."""
    match = SIDEBAR_TAG_RE.search(text)
    if match is None:
        return None
    return match.group(1)
