"""Request-scoped state for one sidebar build."""

from dataclasses import dataclass, field

from customsidebar.core.title import Title


@dataclass(frozen=True)
class RequestContext:
    """Everything a sidebar build knows about the current request."""

    title: Title
    locale: str
    content_language: str = "en"
    user_name: str = ""
    user_groups: tuple[str, ...] = field(default_factory=tuple)
