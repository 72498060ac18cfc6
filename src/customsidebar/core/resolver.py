"""Outline source resolution.

An outline source is either the outline itself or the name of a page holding
it. Page names are followed, page by page, until the text stops changing.
"""

import logging

from customsidebar.core.context import RequestContext
from customsidebar.core.outline import MARKER
from customsidebar.core.pages import PageStore
from customsidebar.core.preprocessor import Preprocessor, strip_noinclude
from customsidebar.core.title import TitleResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRANSCLUSIONS = 10


class OutlineResolver:
    """Resolves outline sources to outline text."""

    def __init__(
        self,
        titles: TitleResolver,
        pages: PageStore,
        preprocessor: Preprocessor,
        *,
        max_transclusions: int = DEFAULT_MAX_TRANSCLUSIONS,
    ) -> None:
        """Initialize resolver.

        Args:
            titles: Title resolver for page names
            pages: Page store to transclude from
            preprocessor: Preprocessor applied to the source and each page
            max_transclusions: Page lookups allowed before giving up
        """
        self._titles = titles
        self._pages = pages
        self._preprocessor = preprocessor
        self._max_transclusions = max_transclusions

    def resolve(self, source: str | None, context: RequestContext) -> str | None:
        """Resolve an outline source.

        Args:
            source: Outline text or page name; None when nothing is configured
            context: Request context for preprocessing

        Returns:
            Outline text, or None when there is no source or the page chain
            doesn't settle within max_transclusions lookups
        """
        if source is None:
            return None

        text = self._preprocessor.preprocess(source, context)
        lookups = 0
        while not text.strip().startswith(MARKER):
            if lookups >= self._max_transclusions:
                logger.warning(
                    f"Outline source {source.strip()!r} did not settle after "
                    f"{self._max_transclusions} page lookups; skipping it"
                )
                return None
            previous = text
            text = self._transclude(text, context)
            lookups += 1
            if text == previous:
                break
        return text

    def _transclude(self, text: str, context: RequestContext) -> str:
        """Replace a page name with the page's preprocessed content.

        Text that isn't a valid page name is returned unchanged.
        """
        title = self._titles.new_from_text(text.strip())
        if title is None:
            return text

        content = self._pages.get_content(title)
        if content is None:
            logger.debug(f"Outline page {title.prefixed_text} does not exist")
            content = ""
        return self._preprocessor.preprocess(strip_noinclude(content), context)
