"""Sidebar assembly.

Combines the page's own outline with group and namespace overlays, falls back
to the host's default sidebar, and caches the result per locale.
"""

import logging
from collections.abc import Callable

from customsidebar.core.cache import SidebarCache, make_cache_key
from customsidebar.core.context import RequestContext
from customsidebar.core.navigation import (
    SidebarResult,
    build_sidebar_result,
    copy_sidebar,
    merge_sidebars,
)
from customsidebar.core.outline import OutlineParser
from customsidebar.core.pages import PageStore
from customsidebar.core.preprocessor import Preprocessor
from customsidebar.core.resolver import OutlineResolver
from customsidebar.core.tags import extract_sidebar_source

logger = logging.getLogger(__name__)

# Namespace overlay key for pages without a namespace prefix
MAIN_NAMESPACE_KEY = "Main"


class OutlineSources:
    """Locates the outline sources for a request.

    The primary source is the current page's <sidebar> tag, or the default
    outline when the page has none. Overlays come from the user's groups
    (last group first) followed by the page's namespace.
    """

    def __init__(
        self,
        pages: PageStore,
        preprocessor: Preprocessor,
        *,
        default_text: str | None = None,
        group_overlays: dict[str, str] | None = None,
        namespace_overlays: dict[str, str] | None = None,
    ) -> None:
        """Initialize sources.

        Args:
            pages: Page store holding the current page
            preprocessor: Preprocessor applied to the current page's content
            default_text: Outline source for pages without a <sidebar> tag
            group_overlays: Outline source per user group
            namespace_overlays: Outline source per namespace ("Main" for none)
        """
        self._pages = pages
        self._preprocessor = preprocessor
        self._default_text = default_text
        self._group_overlays = group_overlays or {}
        self._namespace_overlays = namespace_overlays or {}

    def primary(self, context: RequestContext) -> str | None:
        """Find the outline source of the current page.

        Args:
            context: Request context

        Returns:
            Source text, or None for pages without content or a fallback
        """
        content = self._pages.get_content(context.title)
        if not content:
            return None

        page_text = self._preprocessor.preprocess(content, context, as_page=True)
        source = extract_sidebar_source(page_text)
        if source is not None:
            return source
        return self._default_text

    def overlays(self, context: RequestContext) -> list[str]:
        """List the overlay sources for a request, in merge order."""
        sources = [
            self._group_overlays[group]
            for group in reversed(context.user_groups)
            if group in self._group_overlays
        ]
        namespace = context.title.namespace or MAIN_NAMESPACE_KEY
        if namespace in self._namespace_overlays:
            sources.append(self._namespace_overlays[namespace])
        return sources


class SidebarAssembler:
    """Builds the sidebar for a request, consulting the cache first.

    The cache is a plain read-then-write: concurrent requests for the same
    locale may both miss and both store. Rebuilding is deterministic for the
    same inputs, so the last write wins without harm.
    """

    def __init__(
        self,
        resolver: OutlineResolver,
        parser: OutlineParser,
        sources: OutlineSources,
        *,
        cache: SidebarCache | None = None,
        cache_expiry: int = 86400,
        seed_default: bool = True,
    ) -> None:
        """Initialize assembler.

        Args:
            resolver: Resolves outline sources to outline text
            parser: Parses outline text into trees
            sources: Locates the outline sources of a request
            cache: Sidebar cache; None disables caching
            cache_expiry: Cache TTL in seconds
            seed_default: Start from a copy of the host sidebar when the page
                          has no outline of its own and overlays apply
        """
        self._resolver = resolver
        self._parser = parser
        self._sources = sources
        self._cache = cache
        self._cache_expiry = cache_expiry
        self._seed_default = seed_default

    def assemble(
        self,
        context: RequestContext,
        default_sidebar: SidebarResult | Callable[[], SidebarResult],
    ) -> SidebarResult:
        """Assemble the sidebar for a request.

        Args:
            context: Request context
            default_sidebar: Sidebar the host built without this extension, or a
                             callable building it, called only on a cache miss

        Returns:
            Assembled sidebar, or the host sidebar when nothing was found
        """
        key = make_cache_key(context.locale)

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Sidebar cache hit for {key}")
                return cached
            logger.debug(f"Sidebar cache miss for {key}")

        if callable(default_sidebar):
            default_sidebar = default_sidebar()

        result = self.compose(
            context,
            self._sources.primary(context),
            self._sources.overlays(context),
            default_sidebar,
        )

        if self._cache is not None:
            self._cache.set(key, result, self._cache_expiry)

        return result

    def compose(
        self,
        context: RequestContext,
        primary_source: str | None,
        overlay_sources: list[str],
        default_sidebar: SidebarResult,
    ) -> SidebarResult:
        """Build a sidebar from explicit sources, without caching.

        Args:
            context: Request context
            primary_source: Outline source for the base sidebar
            overlay_sources: Outline sources merged on top, in order
            default_sidebar: Sidebar the host built without this extension

        Returns:
            Merged sidebar, or default_sidebar when the merge is empty
        """
        sidebar = self.parse_source(primary_source, context)
        if not sidebar and overlay_sources and self._seed_default:
            sidebar = copy_sidebar(default_sidebar)

        for source in overlay_sources:
            sidebar = merge_sidebars(sidebar, self.parse_source(source, context))

        if sidebar:
            return sidebar
        return default_sidebar

    def parse_source(self, source: str | None, context: RequestContext) -> SidebarResult:
        """Resolve and parse one outline source into a sidebar."""
        text = self._resolver.resolve(source, context)
        return build_sidebar_result(self._parser.parse(text, context))
