"""Page titles and their link paths.

Normalizes user-supplied page references into canonical titles the way a
wiki does: namespace prefixes are recognized case-insensitively, underscores
and spaces are interchangeable and the first letter is capitalized. Titles
know how to render themselves as local URLs under a configurable article path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import quote

from customsidebar.core.types import LocalPath

MAIN_NAMESPACE = ""

# Canonical namespace names; keys are lowercased aliases
NAMESPACES: dict[str, str] = {
    "media": "Media",
    "special": "Special",
    "talk": "Talk",
    "user": "User",
    "user talk": "User talk",
    "project": "Project",
    "project talk": "Project talk",
    "file": "File",
    "image": "File",
    "file talk": "File talk",
    "mediawiki": "MediaWiki",
    "mediawiki talk": "MediaWiki talk",
    "template": "Template",
    "template talk": "Template talk",
    "help": "Help",
    "help talk": "Help talk",
    "category": "Category",
    "category talk": "Category talk",
}

# Special page aliases, matched case-insensitively with spaces as underscores
SPECIAL_PAGE_ALIASES: dict[str, str] = {
    "allpages": "AllPages",
    "categories": "Categories",
    "contributions": "Contributions",
    "mylanguage": "MyLanguage",
    "mypage": "MyPage",
    "mytalk": "MyTalk",
    "preferences": "Preferences",
    "random": "Random",
    "randompage": "Random",
    "recentchanges": "RecentChanges",
    "search": "Search",
    "specialpages": "SpecialPages",
    "upload": "Upload",
    "userlogin": "UserLogin",
    "watchlist": "Watchlist",
    "whatlinkshere": "WhatLinksHere",
}

MAX_TITLE_LENGTH = 255

_ILLEGAL_CHARS = re.compile(r"[<>\[\]|{}\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"[ _\t\u00a0]+")
_RELATIVE = re.compile(r"(^|/)\.{1,2}(/|$)")

# Characters left unescaped in local URLs, as wiki links do
_URL_SAFE = ";@$!*(),/~:"


@dataclass(frozen=True)
class Title:
    """Canonical page title."""

    namespace: str
    text: str
    fragment: str = ""

    @property
    def prefixed_text(self) -> str:
        """Title with namespace prefix, spaces as spaces."""
        if self.namespace:
            return f"{self.namespace}:{self.text}"
        return self.text

    @property
    def prefixed_db_key(self) -> str:
        """Title with namespace prefix, spaces as underscores."""
        return self.prefixed_text.replace(" ", "_")

    @property
    def path(self) -> str:
        """URL-encoded prefixed key without any article path (e.g., "Prayer/de")."""
        return quote(self.prefixed_db_key, safe=_URL_SAFE)

    def local_url(self, article_path: str = "/$1") -> LocalPath:
        """Render the title as a local URL.

        Args:
            article_path: URL pattern with "$1" standing for the encoded title

        Returns:
            Local URL including the fragment, if any
        """
        url = article_path.replace("$1", self.path)
        if self.fragment:
            url += "#" + quote(self.fragment.replace(" ", "_"), safe=_URL_SAFE)
        return LocalPath(url)

    def fix_special_name(self, aliases: dict[str, str] | None = None) -> Title:
        """Canonicalize the name of a special page.

        "Special:mylanguage/Foo" becomes "Special:MyLanguage/Foo". Titles in
        other namespaces, and unknown special pages, are returned unchanged.
        """
        if self.namespace != "Special":
            return self

        table = aliases if aliases is not None else SPECIAL_PAGE_ALIASES
        name, sep, subpage = self.text.partition("/")
        canonical = table.get(name.replace(" ", "_").lower())
        if canonical is None or canonical == name:
            return self
        return replace(self, text=f"{canonical}{sep}{subpage}")


class TitleResolver:
    """Resolves symbolic page references to titles.

    Holds the site's link settings: the article path used for local URLs and
    the special page alias table.
    """

    def __init__(
        self,
        *,
        article_path: str = "/$1",
        special_page_aliases: dict[str, str] | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            article_path: URL pattern with "$1" standing for the encoded title
            special_page_aliases: Extra aliases merged over the built-in table
        """
        self._article_path = article_path
        self._aliases = dict(SPECIAL_PAGE_ALIASES)
        for alias, canonical in (special_page_aliases or {}).items():
            self._aliases[alias.replace(" ", "_").lower()] = canonical

    @property
    def article_path(self) -> str:
        """URL pattern used for local links."""
        return self._article_path

    @property
    def article_base(self) -> str:
        """Article path up to the title placeholder (e.g., "/" or "/wiki/")."""
        return self._article_path.split("$1", 1)[0]

    def new_from_text(self, text: str) -> Title | None:
        """Parse a page reference into a title.

        Args:
            text: Page reference (e.g., "main page", "Help:Contents#Links")

        Returns:
            Title if the reference is valid, None otherwise
        """
        name, _, fragment = text.partition("#")
        name = _WHITESPACE.sub(" ", name).strip()
        fragment = fragment.strip()

        # A leading colon forces the main namespace
        if name.startswith(":"):
            name = name[1:].lstrip()

        if not name or _ILLEGAL_CHARS.search(name) or _RELATIVE.search(name):
            return None

        namespace = MAIN_NAMESPACE
        prefix, sep, rest = name.partition(":")
        if sep:
            canonical = NAMESPACES.get(prefix.strip().lower())
            if canonical is not None:
                namespace = canonical
                name = rest.strip()
                if not name:
                    return None

        name = name[0].upper() + name[1:]
        title = Title(namespace=namespace, text=name, fragment=fragment)

        if len(title.prefixed_db_key.encode("utf-8")) > MAX_TITLE_LENGTH:
            return None
        return title

    def fix_special_name(self, title: Title) -> Title:
        """Canonicalize a special page name using this resolver's aliases."""
        return title.fix_special_name(self._aliases)

    def local_url(self, title: Title) -> LocalPath:
        """Render a title as a local URL under the configured article path."""
        return title.local_url(self._article_path)

    def resolve_reference(self, token: str) -> LocalPath | None:
        """Resolve a page reference to its canonical local path.

        Args:
            token: Page reference

        Returns:
            Local URL, or None when the reference is not a valid title
        """
        title = self.new_from_text(token)
        if title is None:
            return None
        return self.local_url(self.fix_special_name(title))
