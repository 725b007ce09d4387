# markdown_render/markdown/sanitizer.py
"""
Allow-list HTML sanitizer.

This is the only thing standing between author markdown and a page that
injects the rendered HTML verbatim, so the whole decision process lives here
and is driven by one immutable ``SanitizationPolicy`` value:

- elements whose tag is not allowed are dropped together with their children
- allowed elements keep only attributes listed for their tag or for ``*``
- ``style`` keeps only declarations whose value fully matches a pattern for
  that property
- ``href``/``src`` keep only allowed schemes (or relative URLs)
- ``iframe`` elements survive only when ``src`` points at an allowed host
- comments, doctypes and other non-text nodes are removed
- text not wrapped in any element is always kept

Nothing referenced by the markup is fetched or executed; malformed input is
repaired by the parser and sanitized best-effort rather than rejected.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Pattern, Tuple
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString

from .serializer import attribute_value, serialize_soup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizationPolicy:
    tags: FrozenSet[str]
    attributes: Mapping[str, FrozenSet[str]]
    styles: Mapping[str, Tuple[Pattern, ...]]
    iframe_hostnames: FrozenSet[str]
    url_schemes: FrozenSet[str] = frozenset({"http", "https", "mailto", "tel", "ftp"})
    url_attributes: FrozenSet[str] = field(default_factory=lambda: frozenset({"href", "src"}))

    def allowed_attributes(self, tag: str) -> FrozenSet[str]:
        return self.attributes.get(tag, frozenset()) | self.attributes.get("*", frozenset())


_MATHML_TAGS = {
    "math",
    "semantics",
    "annotation",
    "mrow",
    "mi",
    "mo",
    "mn",
    "ms",
    "mtext",
    "mspace",
    "msup",
    "msub",
    "msubsup",
    "mfrac",
    "msqrt",
    "mroot",
    "mover",
    "munder",
    "munderover",
    "mstyle",
    "mpadded",
    "mphantom",
    "menclose",
    "mtable",
    "mtr",
    "mtd",
}

_MATHML_ATTRIBUTES = {
    "math": ["xmlns", "display", "alttext"],
    "annotation": ["encoding"],
    "mi": ["mathvariant"],
    "mn": ["mathvariant"],
    "mo": [
        "stretchy",
        "form",
        "fence",
        "separator",
        "lspace",
        "rspace",
        "accent",
        "largeop",
        "movablelimits",
        "symmetric",
        "maxsize",
        "minsize",
    ],
    "mstyle": ["displaystyle", "scriptlevel", "mathvariant"],
    "mover": ["accent"],
    "munder": ["accentunder"],
    "munderover": ["accent", "accentunder"],
    "mfrac": ["linethickness", "bevelled"],
    "menclose": ["notation"],
    "mspace": ["width", "height", "depth"],
    "mpadded": ["width", "height", "depth", "lspace", "voffset"],
    "mtable": ["columnalign", "rowspacing", "columnspacing", "displaystyle"],
    "mtr": ["columnalign"],
    "mtd": ["columnalign", "rowspan", "colspan"],
}


def _build_default_policy() -> SanitizationPolicy:
    tags = {
        # headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # text
        "blockquote",
        "p",
        "a",
        "b",
        "i",
        "strong",
        "em",
        "strike",
        "del",
        "sup",
        "sub",
        "span",
        "div",
        "br",
        "hr",
        # lists
        "ul",
        "ol",
        "nl",
        "li",
        # code
        "code",
        "pre",
        # tables
        "table",
        "thead",
        "caption",
        "tbody",
        "tr",
        "th",
        "td",
        # media
        "iframe",
        "img",
    }
    tags |= _MATHML_TAGS

    attributes = {
        "a": ["href", "name", "target"],
        "img": ["src"],
        "iframe": ["src", "allow", "allowfullscreen", "scrolling", "class"],
        "*": ["class", "id", "aria-hidden"],
        "span": ["style"],
        # pandoc writes table column alignment as inline text-align
        "th": ["style"],
        "td": ["style"],
        **_MATHML_ATTRIBUTES,
    }

    styles = {
        # Match HEX and RGB
        "color": (
            re.compile(r"^#(0x)?[0-9a-f]+$", re.IGNORECASE),
            re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$"),
        ),
        "text-align": (
            re.compile(r"^left$"),
            re.compile(r"^right$"),
            re.compile(r"^center$"),
        ),
    }

    return SanitizationPolicy(
        tags=frozenset(tags),
        attributes=MappingProxyType({tag: frozenset(names) for tag, names in attributes.items()}),
        styles=MappingProxyType(styles),
        iframe_hostnames=frozenset({"www.youtube.com", "codesandbox.io", "codepen.io"}),
    )


DEFAULT_POLICY = _build_default_policy()

# Browsers ignore these inside URLs, so "java\tscript:" is still javascript:
_URL_IGNORED = re.compile(r"[\x00-\x20\x7f]+")
_URL_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")


def _url_scheme(value: str):
    match = _URL_SCHEME.match(_URL_IGNORED.sub("", value))
    return match.group(1).lower() if match else None


def _url_allowed(value: str, policy: SanitizationPolicy) -> bool:
    scheme = _url_scheme(value)
    return scheme is None or scheme in policy.url_schemes


def _iframe_allowed(tag: Tag, policy: SanitizationPolicy) -> bool:
    src = attribute_value(tag.get("src")).strip()
    if not src:
        return False

    scheme = _url_scheme(src)
    if scheme not in (None, "http", "https"):
        return False

    # Browsers read "\" as "/" in http(s) URLs, so split the way they do
    normalized = _URL_IGNORED.sub("", src).replace("\\", "/")
    try:
        parsed = urlsplit(normalized)
        hostname = parsed.hostname
    except ValueError:
        return False
    if "@" in parsed.netloc:
        return False
    return hostname is not None and hostname in policy.iframe_hostnames


def _clean_style(value: str, policy: SanitizationPolicy) -> str:
    kept = []
    for declaration in value.split(";"):
        prop, sep, prop_value = declaration.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        prop_value = prop_value.strip()
        patterns = policy.styles.get(prop)
        if not patterns:
            continue
        if any(pattern.fullmatch(prop_value) for pattern in patterns):
            kept.append(f"{prop}:{prop_value}")
    return ";".join(kept)


def _keep_element(tag: Tag, policy: SanitizationPolicy) -> bool:
    if tag.name not in policy.tags:
        return False
    if tag.name == "iframe" and not _iframe_allowed(tag, policy):
        return False
    return True


def _filter_attributes(tag: Tag, policy: SanitizationPolicy) -> None:
    allowed = policy.allowed_attributes(tag.name)

    for name, value in list(tag.attrs.items()):
        if name not in allowed:
            del tag[name]
            continue

        if name == "style":
            cleaned = _clean_style(attribute_value(value), policy)
            if cleaned:
                tag[name] = cleaned
            else:
                del tag[name]
        elif name in policy.url_attributes and not _url_allowed(attribute_value(value), policy):
            del tag[name]


def sanitize(html: str, policy: SanitizationPolicy = DEFAULT_POLICY) -> str:
    """Filter an HTML string against ``policy`` and return the cleaned HTML."""
    soup = BeautifulSoup(html or "", "html.parser")

    stack = [soup]
    while stack:
        parent = stack.pop()
        for child in list(parent.contents):
            if isinstance(child, Tag):
                if not _keep_element(child, policy):
                    child.decompose()
                    continue
                _filter_attributes(child, policy)
                stack.append(child)
            elif isinstance(child, PreformattedString):
                # comments, doctypes, CDATA, processing instructions
                child.extract()

    return serialize_soup(soup.contents)


def sanitize_html(html: str) -> str:
    """Sanitize with the default policy."""
    return sanitize(html, DEFAULT_POLICY)
