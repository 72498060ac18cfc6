"""Link resolution for outline entries.

Turns the link token of an outline entry into an href: external URLs pass
through, page references become local URLs, anything else becomes the
INVALID-TITLE sentinel.
"""

from dataclasses import dataclass
from enum import Enum

from customsidebar.core.title import TitleResolver

INVALID_TITLE = "INVALID-TITLE"

# Token that marks an outline entry as disabled; filtered before resolution
SKIP_TOKEN = "-"

DEFAULT_URL_PROTOCOLS: tuple[str, ...] = (
    "bitcoin:",
    "ftp://",
    "ftps://",
    "geo:",
    "git://",
    "gopher://",
    "http://",
    "https://",
    "irc://",
    "ircs://",
    "magnet:",
    "mailto:",
    "matrix:",
    "mms://",
    "news:",
    "nntp://",
    "redis://",
    "sftp://",
    "sip:",
    "sips:",
    "sms:",
    "ssh://",
    "svn://",
    "tel:",
    "telnet://",
    "urn:",
    "worldwind://",
    "xmpp:",
    "//",
)


class LinkKind(Enum):
    """Kind of resolved link."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    INVALID = "invalid"


@dataclass(frozen=True)
class ResolvedLink:
    """Result of resolving a link token."""

    kind: LinkKind
    href: str


class LinkResolver:
    """Resolves outline link tokens to hrefs."""

    def __init__(
        self,
        titles: TitleResolver,
        url_protocols: tuple[str, ...] | list[str] | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            titles: Title resolver used for page references
            url_protocols: URL prefixes treated as external links
                           (default: DEFAULT_URL_PROTOCOLS)
        """
        self._titles = titles
        protocols = DEFAULT_URL_PROTOCOLS if url_protocols is None else url_protocols
        self._url_protocols = tuple(p.lower() for p in protocols)

    @property
    def titles(self) -> TitleResolver:
        """Title resolver used for page references."""
        return self._titles

    def is_external(self, token: str) -> bool:
        """Check whether a token starts with a known URL protocol."""
        return token.lower().startswith(self._url_protocols)

    def resolve(self, token: str) -> ResolvedLink:
        """Resolve a link token.

        Args:
            token: Link token from an outline entry (already translated)

        Returns:
            ResolvedLink with the href and its kind
        """
        if self.is_external(token):
            return ResolvedLink(kind=LinkKind.EXTERNAL, href=token)

        local_path = self._titles.resolve_reference(token)
        if local_path is None:
            return ResolvedLink(kind=LinkKind.INVALID, href=INVALID_TITLE)
        return ResolvedLink(kind=LinkKind.INTERNAL, href=local_path)
