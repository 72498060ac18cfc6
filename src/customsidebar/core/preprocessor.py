"""Wikitext preprocessing.

Expands the subset of wikitext directives that outlines rely on before their
lines are parsed:

- `{{current-user-name}}` (and the older `{{#__username}}`) become the user name
- `<noinclude>` and `<includeonly>` regions are kept or dropped depending on
  whether the text is transcluded or is the page being viewed
- magic words: PAGENAME, FULLPAGENAME, NAMESPACE, USERLANGUAGE, CONTENTLANGUAGE
- templates: `{{Name|a|k=v}}` transcludes `Template:Name`, `{{:Page}}` a main
  namespace page, substituting `{{{1}}}`, `{{{k}}}` and `{{{k|default}}}`
"""

import logging
import re
from collections.abc import Callable

from customsidebar.core.context import RequestContext
from customsidebar.core.pages import PageStore
from customsidebar.core.title import TitleResolver

logger = logging.getLogger(__name__)

MAX_TEMPLATE_DEPTH = 40

USER_NAME_RE = re.compile(r"\{\{(?:current-user-name|#__username)\}\}", re.IGNORECASE)
NOINCLUDE_RE = re.compile(r"<noinclude\s*>.*?</noinclude\s*>", re.IGNORECASE | re.DOTALL)
INCLUDEONLY_RE = re.compile(r"<includeonly\s*>(.*?)</includeonly\s*>", re.IGNORECASE | re.DOTALL)
NOINCLUDE_TAG_RE = re.compile(r"</?noinclude\s*>", re.IGNORECASE)

# Innermost {{...}} not part of a {{{...}}} parameter
TEMPLATE_RE = re.compile(r"(?<!\{)\{\{(?!\{)([^{}]*)\}\}(?!\})")
PARAMETER_RE = re.compile(r"\{\{\{([^{}|]*)(?:\|([^{}]*))?\}\}\}")

_MAX_PASSES = 100


def strip_noinclude(text: str) -> str:
    """Remove <noinclude> regions."""
    return NOINCLUDE_RE.sub("", text)


class Preprocessor:
    """Expands templates and magic words in wikitext."""

    def __init__(
        self,
        pages: PageStore,
        titles: TitleResolver,
        *,
        max_depth: int = MAX_TEMPLATE_DEPTH,
    ) -> None:
        """Initialize preprocessor.

        Args:
            pages: Page store providing template content
            titles: Title resolver for template names
            max_depth: Maximum template nesting before a loop is reported
        """
        self._pages = pages
        self._titles = titles
        self._max_depth = max_depth

    def preprocess(self, text: str, context: RequestContext, *, as_page: bool = False) -> str:
        """Expand a piece of wikitext for the given request.

        Text is treated as transcluded by default: <noinclude> regions are
        dropped and <includeonly> regions kept. With as_page=True it is
        treated as the page being viewed, the other way round.

        Args:
            text: Raw wikitext
            context: Request context (current page, user, locale)
            as_page: Whether the text is the content of the current page

        Returns:
            Expanded wikitext
        """
        text = USER_NAME_RE.sub(lambda _: context.user_name, text)
        if as_page:
            text = NOINCLUDE_TAG_RE.sub("", text)
            text = INCLUDEONLY_RE.sub("", text)
        else:
            text = strip_noinclude(text)
            text = INCLUDEONLY_RE.sub(r"\1", text)
        return self._expand(text, context, None, 0)

    def _expand(
        self,
        text: str,
        context: RequestContext,
        args: dict[str, str] | None,
        depth: int,
    ) -> str:
        if args is not None:
            # Innermost parameters first, so defaults may themselves be parameters
            replacer = _parameter_replacer(args)
            for _ in range(_MAX_PASSES):
                substituted = PARAMETER_RE.sub(replacer, text)
                if substituted == text:
                    break
                text = substituted

        for _ in range(_MAX_PASSES):
            expanded = TEMPLATE_RE.sub(
                lambda m: self._expand_call(m.group(1), context, depth),
                text,
            )
            if expanded == text:
                break
            text = expanded
        return text

    def _expand_call(self, inner: str, context: RequestContext, depth: int) -> str:
        """Expand the body of a single {{...}} call."""
        name, *raw_args = inner.split("|")
        name = name.strip()

        magic = self._magic_word(name, context)
        if magic is not None:
            return magic

        # Names without a namespace refer to templates; ":Page" forces the main namespace
        title = self._titles.new_from_text(name)
        if title is not None and not title.namespace and not name.startswith(":"):
            title = self._titles.new_from_text(f"Template:{name}")
        if title is None:
            return "{{" + inner + "}}"

        if depth >= self._max_depth:
            logger.warning(f"Template loop detected: {title.prefixed_text}")
            return (
                '<span class="error">Template loop detected: '
                f"[[{title.prefixed_text}]]</span>"
            )

        body = self._pages.get_content(title)
        if body is None:
            return f"[[:{title.prefixed_text}]]"

        body = strip_noinclude(body)
        body = INCLUDEONLY_RE.sub(r"\1", body)
        return self._expand(body, context, _parse_args(raw_args), depth + 1)

    def _magic_word(self, name: str, context: RequestContext) -> str | None:
        handler = _MAGIC_WORDS.get(name)
        if handler is None:
            return None
        return handler(context)


def _parse_args(raw_args: list[str]) -> dict[str, str]:
    """Parse template call arguments into numbered and named parameters."""
    args: dict[str, str] = {}
    position = 0
    for raw in raw_args:
        key, sep, value = raw.partition("=")
        if sep and key.strip():
            args[key.strip()] = value.strip()
        else:
            position += 1
            args[str(position)] = raw
    return args


def _parameter_replacer(args: dict[str, str]) -> Callable[[re.Match[str]], str]:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name in args:
            return args[name]
        default = match.group(2)
        if default is not None:
            return default
        return match.group(0)

    return replace


_MAGIC_WORDS: dict[str, Callable[[RequestContext], str]] = {
    "PAGENAME": lambda c: c.title.text,
    "FULLPAGENAME": lambda c: c.title.prefixed_text,
    "NAMESPACE": lambda c: c.title.namespace,
    "USERLANGUAGE": lambda c: c.locale,
    "CONTENTLANGUAGE": lambda c: c.content_language,
}
