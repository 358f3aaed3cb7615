"""
Inline markup → Portable Text spans.

The formatter is a two-phase tokenizer rather than a DOM walk:

1. every ``<a href>`` is swapped for a placeholder token and remembered
   together with its resolved URL and its raw inner markup;
2. bold/italic open and close tags and ``<br>`` become boundary tokens, all
   other tags are stripped, and the token stream is walked left to right.

Link placeholders are expanded by re-running phase 2 on the link's own
markup, starting from the bold/italic state at the point of the link, so a
link whose text switches formatting yields several spans sharing one link
mark.
"""

from __future__ import annotations

import html
import re
from typing import Callable, List, NamedTuple, Optional, Tuple

from legacy_migrator.models.portable_text import BOLD, ITALIC, LinkDefinition, Span
from legacy_migrator.parsers.media import strip_media
from legacy_migrator.parsers.portable_schema import empty_span, link_definition, span
from legacy_migrator.parsers.references import ReferenceResolver, UnresolvedCallback

__all__ = ["InlineFormatter", "clean_text", "strip_tags"]


_BOLD_OPEN = "\x00B+\x00"
_BOLD_CLOSE = "\x00B-\x00"
_ITALIC_OPEN = "\x00I+\x00"
_ITALIC_CLOSE = "\x00I-\x00"
_BREAK = "\x00BR\x00"
_TOKEN_RE = re.compile(r"(\x00(?:B\+|B-|I\+|I-|BR|L\d+)\x00)")
_LINK_TOKEN_RE = re.compile(r"^\x00L(\d+)\x00$")

_LINK_RE = re.compile(
    r"<a\b[^>]*?(?<![\w-])href\s*=\s*[\"']([^\"']*)[\"'][^>]*>([\s\S]*?)</a\s*>",
    re.IGNORECASE,
)
_BOLD_OPEN_RE = re.compile(r"<(?:strong|b)(?:\s[^>]*)?>", re.IGNORECASE)
_BOLD_CLOSE_RE = re.compile(r"</(?:strong|b)\s*>", re.IGNORECASE)
_ITALIC_OPEN_RE = re.compile(r"<(?:em|i)(?:\s[^>]*)?>", re.IGNORECASE)
_ITALIC_CLOSE_RE = re.compile(r"</(?:em|i)\s*>", re.IGNORECASE)
_BREAK_RE = re.compile(r"<br\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

# Legacy drop caps: <span class="first-big-letter">W</span><strong>ord</strong>
_DROP_CAP_STRONG_RE = re.compile(
    r"<span[^>]*class=[\"'][^\"']*first-big-letter[^\"']*[\"'][^>]*>([^<]*)</span>\s*<strong([^>]*)>",
    re.IGNORECASE,
)
_DROP_CAP_RE = re.compile(
    r"<span[^>]*class=[\"'][^\"']*first-big-letter[^\"']*[\"'][^>]*>([^<]*)</span>",
    re.IGNORECASE,
)


def strip_tags(markup: str) -> str:
    return _TAG_RE.sub("", markup or "")


def clean_text(text: str) -> str:
    """Decode entities, turn non-breaking spaces into spaces, collapse whitespace."""
    decoded = html.unescape(text or "").replace("\xa0", " ")
    return _WS_RE.sub(" ", decoded)


class _Link(NamedTuple):
    definition: LinkDefinition
    inner: str


class InlineFormatter:
    """
    Convert one inline fragment into spans plus the link definitions they use.

    :param resolver: resolves each ``href``.
    :param new_key: key factory shared with the enclosing conversion.
    :param on_unresolved: called with ``(kind, legacy_id)`` for shortcode
        links that could not be resolved.
    """

    def __init__(
        self,
        resolver: ReferenceResolver,
        new_key: Callable[[], str],
        on_unresolved: Optional[UnresolvedCallback] = None,
    ) -> None:
        self.resolver = resolver
        self.new_key = new_key
        self.on_unresolved = on_unresolved

    def format(self, fragment: Optional[str]) -> Tuple[List[Span], List[LinkDefinition]]:
        links: List[_Link] = []

        def extract_link(m: "re.Match[str]") -> str:
            href = self.resolver.resolve(html.unescape(m.group(1)), self.on_unresolved)
            links.append(_Link(link_definition(href, key=self.new_key()), m.group(2)))
            return f"\x00L{len(links) - 1}\x00"

        content = _preclean(fragment or "")
        content = _LINK_RE.sub(extract_link, content)

        spans = _trim_edges(self._walk(content, links, 0, 0, None))
        if not spans:
            spans = [empty_span(key=self.new_key())]
        return spans, [link.definition for link in links]

    def _walk(
        self,
        content: str,
        links: List[_Link],
        bold: int,
        italic: int,
        link_key: Optional[str],
    ) -> List[Span]:
        spans: List[Span] = []
        buffer: List[str] = []

        def flush() -> None:
            text = clean_text("".join(buffer))
            buffer.clear()
            if not text:
                return
            marks = []
            if link_key:
                marks.append(link_key)
            if bold:
                marks.append(BOLD)
            if italic:
                marks.append(ITALIC)
            spans.append(span(text, marks, key=self.new_key()))

        for part in _TOKEN_RE.split(_tokenize(content)):
            if not part:
                continue
            if part == _BOLD_OPEN:
                flush()
                bold += 1
            elif part == _BOLD_CLOSE:
                flush()
                bold = max(bold - 1, 0)
            elif part == _ITALIC_OPEN:
                flush()
                italic += 1
            elif part == _ITALIC_CLOSE:
                flush()
                italic = max(italic - 1, 0)
            elif part == _BREAK:
                flush()
                spans.append(span("\n", key=self.new_key()))
            else:
                m = _LINK_TOKEN_RE.match(part)
                if m is None:
                    buffer.append(part)
                    continue
                flush()
                index = int(m.group(1))
                if index < len(links):
                    link = links[index]
                    spans.extend(_drop_blank_ends(self._walk(link.inner, links, bold, italic, link.definition.key)))
        flush()
        return spans


def _preclean(markup: str) -> str:
    # NUL delimits the internal tokens; it never survives from the input.
    content = strip_media(markup.replace("\x00", ""))
    content = _DROP_CAP_STRONG_RE.sub(r"<strong\2>\1", content)
    return _DROP_CAP_RE.sub(r"\1", content)


def _tokenize(content: str) -> str:
    content = _BREAK_RE.sub(_BREAK, content)
    content = _BOLD_OPEN_RE.sub(_BOLD_OPEN, content)
    content = _BOLD_CLOSE_RE.sub(_BOLD_CLOSE, content)
    content = _ITALIC_OPEN_RE.sub(_ITALIC_OPEN, content)
    content = _ITALIC_CLOSE_RE.sub(_ITALIC_CLOSE, content)
    return strip_tags(content)


def _is_blank(s: Span) -> bool:
    return s.text != "\n" and not s.text.strip()


def _drop_blank_ends(spans: List[Span]) -> List[Span]:
    while spans and _is_blank(spans[0]):
        spans.pop(0)
    while spans and _is_blank(spans[-1]):
        spans.pop()
    return spans


def _trim_edges(spans: List[Span]) -> List[Span]:
    spans = _drop_blank_ends(spans)
    if spans and spans[0].text != "\n":
        spans[0] = spans[0].model_copy(update={"text": spans[0].text.lstrip()})
    if spans and spans[-1].text != "\n":
        spans[-1] = spans[-1].model_copy(update={"text": spans[-1].text.rstrip()})
    return spans
