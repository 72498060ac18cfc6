"""Configuration management for customsidebar.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from customsidebar.core.links import DEFAULT_URL_PROTOCOLS
from customsidebar.core.resolver import DEFAULT_MAX_TRANSCLUSIONS

CONFIG_FILENAME = "customsidebar.toml"

CACHE_BACKENDS = ("file", "memory")


@dataclass
class PagesConfig:
    """Page store configuration."""

    source_dir: Path = field(default_factory=lambda: Path("pages"))
    extension: str = ".wiki"


@dataclass
class SiteConfig:
    """Site-wide settings."""

    content_language: str = "en"
    article_path: str = "/$1"


@dataclass
class SidebarConfig:
    """Outline sources."""

    default_text: str | None = None
    seed_default: bool = True
    groups: dict[str, str] = field(default_factory=dict)
    namespaces: dict[str, str] = field(default_factory=dict)
    max_transclusions: int = DEFAULT_MAX_TRANSCLUSIONS


@dataclass
class CacheConfig:
    """Sidebar cache configuration."""

    enabled: bool = False
    expiry: int = 86400
    backend: str = "file"
    cache_dir: Path = field(default_factory=lambda: Path(".cache"))


@dataclass
class I18nConfig:
    """Message catalog configuration."""

    messages_dir: Path | None = None


@dataclass
class LinksConfig:
    """Link resolution configuration."""

    url_protocols: list[str] = field(default_factory=lambda: list(DEFAULT_URL_PROTOCOLS))
    special_page_aliases: dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Application configuration."""

    pages: PagesConfig
    site: SiteConfig
    sidebar: SidebarConfig
    cache: CacheConfig
    i18n: I18nConfig
    links: LinksConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for customsidebar.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults.

        Returns:
            Config instance with default values
        """
        return cls(
            pages=PagesConfig(),
            site=SiteConfig(),
            sidebar=SidebarConfig(),
            cache=CacheConfig(),
            i18n=I18nConfig(),
            links=LinksConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        config_dir = path.parent

        return cls(
            pages=cls._parse_pages(data.get("pages"), config_dir),
            site=cls._parse_site(data.get("site")),
            sidebar=cls._parse_sidebar(data.get("sidebar")),
            cache=cls._parse_cache(data.get("cache"), config_dir),
            i18n=cls._parse_i18n(data.get("i18n"), config_dir),
            links=cls._parse_links(data.get("links")),
            config_path=path,
        )

    @classmethod
    def _parse_pages(cls, data: object, config_dir: Path) -> PagesConfig:
        """Parse pages configuration section.

        Args:
            data: Raw pages section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            PagesConfig instance
        """
        if data is None:
            return PagesConfig(source_dir=config_dir / "pages")

        if not isinstance(data, dict):
            raise ValueError("pages section must be a dictionary")

        source_dir = data.get("source_dir", "pages")
        if not isinstance(source_dir, str):
            raise ValueError("pages.source_dir must be a string")

        extension = data.get("extension", ".wiki")
        if not isinstance(extension, str) or not extension.startswith("."):
            raise ValueError("pages.extension must be a string starting with '.'")

        return PagesConfig(source_dir=config_dir / source_dir, extension=extension)

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section.

        Args:
            data: Raw site section data

        Returns:
            SiteConfig instance
        """
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        content_language = data.get("content_language", "en")
        if not isinstance(content_language, str) or not content_language:
            raise ValueError("site.content_language must be a non-empty string")

        article_path = data.get("article_path", "/$1")
        if not isinstance(article_path, str):
            raise ValueError("site.article_path must be a string")
        if "$1" not in article_path:
            raise ValueError("site.article_path must contain '$1'")

        return SiteConfig(content_language=content_language, article_path=article_path)

    @classmethod
    def _parse_sidebar(cls, data: object) -> SidebarConfig:
        """Parse sidebar configuration section.

        Args:
            data: Raw sidebar section data

        Returns:
            SidebarConfig instance
        """
        if data is None:
            return SidebarConfig()

        if not isinstance(data, dict):
            raise ValueError("sidebar section must be a dictionary")

        default_text = data.get("default_text")
        if default_text is not None and not isinstance(default_text, str):
            raise ValueError("sidebar.default_text must be a string")

        seed_default = data.get("seed_default", True)
        if not isinstance(seed_default, bool):
            raise ValueError("sidebar.seed_default must be a boolean")

        max_transclusions = data.get("max_transclusions", DEFAULT_MAX_TRANSCLUSIONS)
        if not isinstance(max_transclusions, int) or max_transclusions < 1:
            raise ValueError("sidebar.max_transclusions must be a positive integer")

        return SidebarConfig(
            default_text=default_text,
            seed_default=seed_default,
            groups=_parse_string_map(data.get("groups"), "sidebar.groups"),
            namespaces=_parse_string_map(data.get("namespaces"), "sidebar.namespaces"),
            max_transclusions=max_transclusions,
        )

    @classmethod
    def _parse_cache(cls, data: object, config_dir: Path) -> CacheConfig:
        """Parse cache configuration section.

        Args:
            data: Raw cache section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            CacheConfig instance
        """
        if data is None:
            return CacheConfig(cache_dir=config_dir / ".cache")

        if not isinstance(data, dict):
            raise ValueError("cache section must be a dictionary")

        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise ValueError("cache.enabled must be a boolean")

        expiry = data.get("expiry", 86400)
        if not isinstance(expiry, int):
            raise ValueError("cache.expiry must be an integer")

        backend = data.get("backend", "file")
        if backend not in CACHE_BACKENDS:
            raise ValueError(f"cache.backend must be one of: {', '.join(CACHE_BACKENDS)}")

        cache_dir = data.get("cache_dir", ".cache")
        if not isinstance(cache_dir, str):
            raise ValueError("cache.cache_dir must be a string")

        return CacheConfig(
            enabled=enabled,
            expiry=expiry,
            backend=backend,
            cache_dir=config_dir / cache_dir,
        )

    @classmethod
    def _parse_i18n(cls, data: object, config_dir: Path) -> I18nConfig:
        """Parse i18n configuration section.

        Args:
            data: Raw i18n section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            I18nConfig instance
        """
        if data is None:
            return I18nConfig()

        if not isinstance(data, dict):
            raise ValueError("i18n section must be a dictionary")

        messages_dir = data.get("messages_dir")
        if messages_dir is None:
            return I18nConfig()
        if not isinstance(messages_dir, str):
            raise ValueError("i18n.messages_dir must be a string")

        return I18nConfig(messages_dir=config_dir / messages_dir)

    @classmethod
    def _parse_links(cls, data: object) -> LinksConfig:
        """Parse links configuration section.

        Args:
            data: Raw links section data

        Returns:
            LinksConfig instance
        """
        if data is None:
            return LinksConfig()

        if not isinstance(data, dict):
            raise ValueError("links section must be a dictionary")

        url_protocols = list(DEFAULT_URL_PROTOCOLS)
        protocols_raw = data.get("url_protocols")
        if protocols_raw is not None:
            if not isinstance(protocols_raw, list):
                raise ValueError("links.url_protocols must be a list")
            url_protocols = []
            for item in protocols_raw:
                if not isinstance(item, str):
                    raise ValueError("links.url_protocols items must be strings")
                url_protocols.append(item)

        return LinksConfig(
            url_protocols=url_protocols,
            special_page_aliases=_parse_string_map(
                data.get("special_page_aliases"),
                "links.special_page_aliases",
            ),
        )

    def with_overrides(
        self,
        *,
        source_dir: Path | None = None,
        cache_dir: Path | None = None,
        cache_enabled: bool | None = None,
        content_language: str | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.

        Args:
            source_dir: Override pages.source_dir
            cache_dir: Override cache.cache_dir
            cache_enabled: Override cache.enabled
            content_language: Override site.content_language

        Returns:
            New Config instance with overrides applied
        """
        pages = self.pages
        if source_dir is not None:
            pages = replace(self.pages, source_dir=source_dir)

        cache = self.cache
        if cache_dir is not None or cache_enabled is not None:
            cache = replace(
                self.cache,
                cache_dir=cache_dir if cache_dir is not None else self.cache.cache_dir,
                enabled=cache_enabled if cache_enabled is not None else self.cache.enabled,
            )

        site = self.site
        if content_language is not None:
            site = replace(self.site, content_language=content_language)

        return replace(self, pages=pages, cache=cache, site=site)


def _parse_string_map(data: object, name: str) -> dict[str, str]:
    """Parse a table of string values.

    Args:
        data: Raw table data
        name: Dotted section name for error messages

    Returns:
        Mapping of keys to string values
    """
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"{name} must be a dictionary")

    result: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"{name} values must be strings")
        result[key] = value
    return result
