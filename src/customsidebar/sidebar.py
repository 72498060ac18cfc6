"""Sidebar building for a host site.

Wires the page store, message catalog, link resolution, outline parsing and
cache together from configuration, and exposes the call the host makes while
rendering a page.
"""

import logging

from customsidebar.assets import get_messages_dir
from customsidebar.config import CacheConfig, Config
from customsidebar.core.assembler import OutlineSources, SidebarAssembler
from customsidebar.core.cache import FileCache, MemoryCache, SidebarCache
from customsidebar.core.context import RequestContext
from customsidebar.core.links import LinkResolver
from customsidebar.core.messages import MessageCatalog, Translator
from customsidebar.core.navigation import NavigationNode, SidebarResult
from customsidebar.core.outline import OutlineParser
from customsidebar.core.pages import FilePageStore, PageStore
from customsidebar.core.preprocessor import Preprocessor
from customsidebar.core.renderer import TreeRenderer
from customsidebar.core.resolver import OutlineResolver
from customsidebar.core.title import TitleResolver

logger = logging.getLogger(__name__)

# Page holding the site-wide sidebar the host shows by default
DEFAULT_SIDEBAR_PAGE = "MediaWiki:Sidebar"


def create_cache(config: CacheConfig) -> SidebarCache:
    """Create the sidebar cache backend named in the configuration.

    Args:
        config: Cache configuration

    Returns:
        Cache instance (regardless of config.enabled)
    """
    if config.backend == "memory":
        return MemoryCache()
    return FileCache(config.cache_dir)


class SidebarBuilder:
    """Builds sidebars for pages of one site.

    One builder serves many requests; everything request-specific travels in
    a RequestContext.
    """

    def __init__(
        self,
        config: Config,
        *,
        pages: PageStore | None = None,
        cache: SidebarCache | None = None,
    ) -> None:
        """Initialize builder.

        Args:
            config: Application configuration
            pages: Page store (default: FilePageStore over pages.source_dir)
            cache: Sidebar cache (default: from config when cache.enabled)
        """
        self._config = config
        content_language = config.site.content_language

        self._titles = TitleResolver(
            article_path=config.site.article_path,
            special_page_aliases=config.links.special_page_aliases,
        )
        if pages is None:
            pages = FilePageStore(config.pages.source_dir, config.pages.extension)
        self._pages = pages

        messages_dirs = [get_messages_dir()]
        if config.i18n.messages_dir is not None:
            messages_dirs.append(config.i18n.messages_dir)
        catalog = MessageCatalog(
            messages_dirs,
            content_language=content_language,
            pages=self._pages,
            titles=self._titles,
        )
        self._translator = Translator(catalog, content_language)

        self._preprocessor = Preprocessor(self._pages, self._titles)
        self._resolver = OutlineResolver(
            self._titles,
            self._pages,
            self._preprocessor,
            max_transclusions=config.sidebar.max_transclusions,
        )
        self._parser = OutlineParser(
            LinkResolver(self._titles, config.links.url_protocols),
            self._translator,
        )

        if cache is None and config.cache.enabled:
            cache = create_cache(config.cache)
        self._cache = cache

        self._assembler = SidebarAssembler(
            self._resolver,
            self._parser,
            OutlineSources(
                self._pages,
                self._preprocessor,
                default_text=config.sidebar.default_text,
                group_overlays=config.sidebar.groups,
                namespace_overlays=config.sidebar.namespaces,
            ),
            cache=cache,
            cache_expiry=config.cache.expiry,
            seed_default=config.sidebar.seed_default,
        )
        self._renderer = TreeRenderer()

    @property
    def config(self) -> Config:
        """Application configuration."""
        return self._config

    @property
    def pages(self) -> PageStore:
        """Page store."""
        return self._pages

    @property
    def cache(self) -> SidebarCache | None:
        """Sidebar cache, None when caching is disabled."""
        return self._cache

    @property
    def assembler(self) -> SidebarAssembler:
        """Sidebar assembler."""
        return self._assembler

    @property
    def renderer(self) -> TreeRenderer:
        """Tree renderer."""
        return self._renderer

    def make_context(
        self,
        page: str,
        locale: str | None = None,
        user_groups: list[str] | tuple[str, ...] = (),
        user_name: str = "",
    ) -> RequestContext:
        """Create the request context for a page view.

        Args:
            page: Current page title
            locale: Display language (default: content language)
            user_groups: Groups of the current user, in declaration order
            user_name: Name of the current user

        Returns:
            RequestContext for the request

        Raises:
            ValueError: If page is not a valid title
        """
        title = self._titles.new_from_text(page)
        if title is None:
            raise ValueError(f"Invalid page title: {page!r}")
        content_language = self._config.site.content_language
        return RequestContext(
            title=title,
            locale=locale or content_language,
            content_language=content_language,
            user_name=user_name,
            user_groups=tuple(user_groups),
        )

    def build_sidebar(
        self,
        page: str,
        locale: str | None = None,
        user_groups: list[str] | tuple[str, ...] = (),
        default_sidebar: SidebarResult | None = None,
        user_name: str = "",
    ) -> SidebarResult:
        """Build the sidebar for a page view.

        Args:
            page: Current page title
            locale: Display language (default: content language)
            user_groups: Groups of the current user, in declaration order
            default_sidebar: Sidebar the host would show otherwise
                             (default: parsed from MediaWiki:Sidebar on a
                             cache miss)
            user_name: Name of the current user

        Returns:
            Ordered mapping of heading text to its items
        """
        context = self.make_context(page, locale, user_groups, user_name)
        logger.debug(f"Building sidebar for {context.title.prefixed_text} ({context.locale})")
        if default_sidebar is None:
            return self._assembler.assemble(context, lambda: self.default_sidebar(context))
        return self._assembler.assemble(context, default_sidebar)

    def default_sidebar(self, context: RequestContext) -> SidebarResult:
        """Build the site-wide sidebar from MediaWiki:Sidebar."""
        return self._assembler.parse_source(DEFAULT_SIDEBAR_PAGE, context)

    def tree(self, source: str, context: RequestContext) -> list[NavigationNode]:
        """Resolve and parse a single outline source."""
        return self._parser.parse(self._resolver.resolve(source, context), context)

    def render(self, sidebar: SidebarResult) -> dict[str, str]:
        """Render a sidebar to one HTML fragment per heading."""
        return self._renderer.render_sidebar(sidebar)


def build_sidebar(
    builder: SidebarBuilder,
    current_page: str,
    current_locale: str,
    current_user_groups: list[str] | tuple[str, ...],
    default_sidebar: SidebarResult,
    user_name: str = "",
) -> SidebarResult:
    """Host entry point: build the sidebar for the page being rendered.

    Args:
        builder: Site sidebar builder
        current_page: Title of the page being rendered
        current_locale: Display language of the request
        current_user_groups: Groups of the current user
        default_sidebar: Sidebar the host built on its own
        user_name: Name of the current user

    Returns:
        Sidebar to show; default_sidebar itself when nothing applies
    """
    return builder.build_sidebar(
        current_page,
        current_locale,
        current_user_groups,
        default_sidebar,
        user_name,
    )
