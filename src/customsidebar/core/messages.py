"""Interface message lookup.

Messages come from JSON catalogs (one `<lang>.json` per language, wiki i18n
format) and can be overridden per site by pages in the MediaWiki namespace:
`MediaWiki:Mainpage` for the content language, `MediaWiki:Mainpage/de` for
other languages.
"""

import json
import logging
from pathlib import Path

from customsidebar.core.pages import PageStore
from customsidebar.core.title import TitleResolver

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "en"


def normalize_key(key: str) -> str:
    """Normalize a message key: spaces become underscores, first letter lowercase."""
    key = key.strip().replace(" ", "_")
    return key[:1].lower() + key[1:]


def fallback_chain(locale: str, content_language: str) -> list[str]:
    """Build the language fallback chain for a locale.

    Args:
        locale: Requested language code (e.g., "de-formal")
        content_language: Site content language

    Returns:
        Ordered, de-duplicated language codes (e.g., ["de-formal", "de", "en"])
    """
    chain: list[str] = []
    candidates = [locale]
    if "-" in locale:
        candidates.append(locale.split("-", 1)[0])
    candidates += [content_language, FALLBACK_LANGUAGE]
    for lang in candidates:
        lang = lang.lower()
        if lang and lang not in chain:
            chain.append(lang)
    return chain


class MessageCatalog:
    """Message store with catalog files and page overrides.

    Catalog directories are merged in order, later directories overriding
    earlier ones. Catalogs are loaded lazily, once per language.
    """

    def __init__(
        self,
        messages_dirs: list[Path],
        *,
        content_language: str = "en",
        pages: PageStore | None = None,
        titles: TitleResolver | None = None,
    ) -> None:
        """Initialize catalog.

        Args:
            messages_dirs: Directories containing <lang>.json files
            content_language: Site content language
            pages: Page store for MediaWiki-namespace overrides
            titles: Title resolver used to locate override pages
        """
        self._messages_dirs = messages_dirs
        self._content_language = content_language.lower()
        self._pages = pages
        self._titles = titles or TitleResolver()
        self._loaded: dict[str, dict[str, str]] = {}

    def get(self, key: str, lang: str) -> str | None:
        """Look up a message in one language, without fallback.

        Args:
            key: Normalized message key
            lang: Language code

        Returns:
            Message text (possibly empty), or None if not defined
        """
        override = self._get_page_override(key, lang)
        if override is not None:
            return override
        return self._messages(lang).get(key)

    def _get_page_override(self, key: str, lang: str) -> str | None:
        if self._pages is None:
            return None
        name = f"MediaWiki:{key}"
        if lang != self._content_language:
            name = f"{name}/{lang}"
        title = self._titles.new_from_text(name)
        if title is None:
            return None
        content = self._pages.get_content(title)
        return content.strip() if content is not None else None

    def _messages(self, lang: str) -> dict[str, str]:
        if lang not in self._loaded:
            self._loaded[lang] = self._load(lang)
        return self._loaded[lang]

    def _load(self, lang: str) -> dict[str, str]:
        """Load and merge catalog files for a language.

        Unreadable or malformed catalogs are skipped with a warning.
        """
        merged: dict[str, str] = {}
        for messages_dir in self._messages_dirs:
            catalog_path = messages_dir / f"{lang}.json"
            if not catalog_path.is_file():
                continue
            try:
                data = json.loads(catalog_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping message catalog {catalog_path}: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Skipping message catalog {catalog_path}: not an object")
                continue
            for key, value in data.items():
                if key.startswith("@") or not isinstance(value, str):
                    continue
                merged[normalize_key(key)] = value
        return merged


class Translator:
    """Resolves text tokens through the message catalog.

    Tokens without a (non-blank) message translate to themselves, so outline
    entries may use either message keys or literal text.
    """

    def __init__(self, catalog: MessageCatalog, content_language: str = "en") -> None:
        self._catalog = catalog
        self._content_language = content_language.lower()

    def message(self, key: str, locale: str | None = None) -> str | None:
        """Look up a message along the fallback chain.

        Args:
            key: Message key, normalized before lookup
            locale: Language code (default: content language)

        Returns:
            Message text, or None if the message is blank or undefined
        """
        normalized = normalize_key(key)
        if not normalized:
            return None
        for lang in fallback_chain(locale or self._content_language, self._content_language):
            text = self._catalog.get(normalized, lang)
            if text is not None:
                return text or None
        return None

    def translate(self, key: str, locale: str | None = None) -> str:
        """Translate a token, falling back to the raw token.

        Args:
            key: Message key or literal text
            locale: Language code (default: content language)

        Returns:
            Translated text, or key itself when no translation exists
        """
        text = self.message(key, locale)
        if text is None:
            logger.debug(f"No message for {key!r}, using raw text")
            return key
        return text
