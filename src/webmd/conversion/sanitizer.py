"""
Lexical HTML sanitizer.

Works on serialized markup with a small start-tag tokenizer instead of a DOM.
Elements are removed with a balanced scan: from a matching start tag, nested
start/end tags of the same name are counted until the matching end tag is
found, and the whole span is cut. A start tag that never closes is cut on its
own and scanning carries on after it.

Passes, in the order the pipeline applies them:

- strip_hidden: scripts, styles, comments, hidden elements, consent banners,
  modal dialogs and invisible Unicode characters.
- strip_boilerplate: nav everywhere; header/footer/aside (and their ARIA
  roles) outside <article>.
- strip_images: <img> tags.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Attribute blob may contain quoted '>' characters.
_ATTR_BLOB = r"""((?:"[^"]*"|'[^']*'|[^'">])*)"""

_START_TAG_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9:-]*)" + _ATTR_BLOB + ">")
_ATTR_RE = re.compile(r"""([^\s"'<>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?""")

# Comments and raw-text elements in one alternation so whichever starts first wins.
_COMMENT_OR_RAW_TEXT_RE = re.compile(
    r"<!--.*?-->|<(script|style|noscript)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)

_INVISIBLE_CHARS_RE = re.compile(r"[\u200b-\u200f\u202a-\u202e\u2060\u2066-\u2069\ufeff]")

_HIDDEN_STYLE_RE = re.compile(
    r"(?<![\w-])(?:display\s*:\s*none|visibility\s*:\s*hidden)\b",
    re.IGNORECASE,
)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Wrapper ids used by common cookie/consent SDKs (compared lowercased)
CONSENT_BANNER_IDS = frozenset(
    {
        "onetrust-consent-sdk",
        "cookiebot",
        "cybotcookiebotdialog",
        "cookie-consent",
        "cookie-banner",
        "cookie-notice",
        "consent-banner",
        "gdpr-consent",
        "cc-window",
        "cc_div",
    }
)

DIALOG_ROLES = frozenset({"dialog", "alertdialog"})
NAVIGATION_ROLES = frozenset({"navigation"})
BOILERPLATE_TAGS = frozenset({"header", "footer", "aside"})
BOILERPLATE_ROLES = frozenset({"banner", "contentinfo", "complementary"})


@dataclass(frozen=True)
class StartTag:
    """
    A start tag found in serialized HTML.

    Attributes:
        name: Lowercased tag name
        start: Offset of the opening '<'
        end: Offset just past the closing '>'
        attrs: Lowercased attribute names mapped to their raw values
        self_closing: True for '<tag ... />'
    """

    name: str
    start: int
    end: int
    attrs: dict[str, str]
    self_closing: bool = False

    @property
    def roles(self) -> frozenset[str]:
        return frozenset(self.attrs.get("role", "").lower().split())

    @property
    def is_void(self) -> bool:
        return self.self_closing or self.name in VOID_ELEMENTS


TagPredicate = Callable[[StartTag], bool]


def _parse_attrs(blob: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for match in _ATTR_RE.finditer(blob):
        name = match.group(1).lower()
        value = match.group(2)
        if value is None:
            value = match.group(3)
        if value is None:
            value = match.group(4) or ""
        # First occurrence wins, as in browsers
        attrs.setdefault(name, value)
    return attrs


def iter_start_tags(html: str, pos: int = 0) -> Iterator[StartTag]:
    """Yield every start tag in ``html`` from offset ``pos`` onwards."""
    for match in _START_TAG_RE.finditer(html, pos):
        blob = match.group(2)
        yield StartTag(
            name=match.group(1).lower(),
            start=match.start(),
            end=match.end(),
            attrs=_parse_attrs(blob),
            self_closing=blob.rstrip().endswith("/"),
        )


@lru_cache(maxsize=64)
def _same_name_tag_re(name: str) -> re.Pattern[str]:
    return re.compile(
        r"<(/?)" + re.escape(name) + r"(?=[\s/>])" + _ATTR_BLOB + ">",
        re.IGNORECASE,
    )


def find_balanced_end(html: str, tag: StartTag) -> int:
    """
    Find the end of the element opened by ``tag``.

    Returns:
        Offset just past the matching end tag, or -1 if the element never closes
    """
    depth = 1
    for match in _same_name_tag_re(tag.name).finditer(html, tag.end):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        elif not match.group(2).rstrip().endswith("/"):
            depth += 1
    return -1


def strip_elements(
    html: str,
    predicate: TagPredicate,
    preserve: Optional[re.Pattern[str]] = None,
) -> str:
    """
    Remove every element whose start tag satisfies ``predicate``.

    Args:
        html: Serialized HTML
        predicate: Selects the start tags to remove
        preserve: Tokens matching this pattern inside a removed span are kept

    Returns:
        HTML with the matching elements and their descendants removed
    """
    pieces: list[str] = []
    copied_to = 0
    scan = 0

    while True:
        tag = next((t for t in iter_start_tags(html, scan) if predicate(t)), None)
        if tag is None:
            break

        if tag.is_void:
            end = tag.end
        else:
            end = find_balanced_end(html, tag)
            if end == -1:
                logger.debug(f"No closing tag for <{tag.name}> at offset {tag.start}, removing start tag only")
                end = tag.end

        pieces.append(html[copied_to : tag.start])
        if preserve is not None:
            pieces.extend(preserve.findall(html, tag.start, end))
        copied_to = scan = end

    if not pieces:
        return html
    pieces.append(html[copied_to:])
    return "".join(pieces)


def _is_hidden(tag: StartTag) -> bool:
    attrs = tag.attrs
    if tag.name == "template" or "hidden" in attrs:
        return True
    if attrs.get("aria-hidden", "").strip().lower() == "true":
        return True
    style = attrs.get("style")
    if style and _HIDDEN_STYLE_RE.search(style):
        return True
    if attrs.get("id", "").strip().lower() in CONSENT_BANNER_IDS:
        return True
    return bool(tag.roles & DIALOG_ROLES)


def _is_navigation(tag: StartTag) -> bool:
    return tag.name == "nav" or bool(tag.roles & NAVIGATION_ROLES)


def _is_boilerplate(tag: StartTag) -> bool:
    return tag.name in BOILERPLATE_TAGS or bool(tag.roles & BOILERPLATE_ROLES)


def _is_image(tag: StartTag) -> bool:
    return tag.name == "img"


def strip_hidden(html: str) -> str:
    """
    Remove content a reader would never see.

    Strips script/style/noscript/template elements, comments, elements
    marked hidden (``hidden``, ``aria-hidden="true"``, inline
    ``display:none``/``visibility:hidden``), cookie/consent banners,
    dialog/alertdialog modals and zero-width/bidi control characters.
    """
    if not html:
        return html
    html = _COMMENT_OR_RAW_TEXT_RE.sub("", html)
    html = strip_elements(html, _is_hidden)
    return _INVISIBLE_CHARS_RE.sub("", html)


def _placeholder_prefix(html: str) -> str:
    """Derive a placeholder prefix from the content, guaranteed absent from it."""
    seed = hashlib.sha1(html.encode("utf-8", "surrogatepass")).hexdigest()[:16]
    prefix = f"\x00webmd-article-{seed}-"
    while prefix in html:
        seed = hashlib.sha1(seed.encode("ascii")).hexdigest()[:16]
        prefix = f"\x00webmd-article-{seed}-"
    return prefix


def _article_spans(html: str) -> list[tuple[int, int]]:
    """Offsets of every outermost, properly closed <article> element."""
    spans: list[tuple[int, int]] = []
    scan = 0
    while True:
        tag = next((t for t in iter_start_tags(html, scan) if t.name == "article"), None)
        if tag is None:
            return spans
        end = find_balanced_end(html, tag)
        if end == -1:
            scan = tag.end
            continue
        spans.append((tag.start, end))
        scan = end


def strip_boilerplate(html: str) -> str:
    """
    Remove page furniture.

    ``<nav>`` and ``role="navigation"`` go everywhere. ``<header>``,
    ``<footer>``, ``<aside>`` and roles banner/contentinfo/complementary go
    only outside ``<article>`` elements: each article is swapped for a
    placeholder token while the rest of the page is stripped, then put back.
    """
    if not html:
        return html
    html = strip_elements(html, _is_navigation)

    spans = _article_spans(html)
    if not spans:
        return strip_elements(html, _is_boilerplate)

    prefix = _placeholder_prefix(html)
    articles: dict[str, str] = {}
    shell: list[str] = []
    copied_to = 0
    for index, (start, end) in enumerate(spans):
        token = f"{prefix}{index}\x00"
        articles[token] = html[start:end]
        shell.append(html[copied_to:start])
        shell.append(token)
        copied_to = end
    shell.append(html[copied_to:])

    token_re = re.compile(re.escape(prefix) + r"\d+\x00")
    stripped = strip_elements("".join(shell), _is_boilerplate, preserve=token_re)
    return token_re.sub(lambda m: articles[m.group(0)], stripped)


def strip_images(html: str) -> str:
    """Remove ``<img>`` tags, leaving surrounding content untouched."""
    if not html:
        return html
    return strip_elements(html, _is_image)


def sanitize(html: str, keep_nav: bool = False, images: bool = False) -> str:
    """
    Run all sanitizer passes in order.

    Args:
        html: Rendered HTML
        keep_nav: Skip the boilerplate pass
        images: Keep <img> tags

    Returns:
        Sanitized HTML
    """
    html = strip_hidden(html)
    if not keep_nav:
        html = strip_boilerplate(html)
    if not images:
        html = strip_images(html)
    return html
