from __future__ import annotations

import itertools
import uuid
from typing import Iterable, List, Optional, Sequence

from legacy_migrator.models.portable_text import (
    BOLD,
    ITALIC,
    ColumnBreak,
    CrossReferenceEmbed,
    HorizontalLine,
    ImagePlaceholder,
    LinkDefinition,
    Node,
    Span,
    TextBlock,
    TwoColumnLine,
    VideoEmbed,
)


class KeyGenerator:
    """
    Produces ``_key`` values that are unique within one conversion.

    A random prefix per generator keeps keys from different runs apart; the
    counter guarantees uniqueness inside a run.
    """

    def __init__(self, prefix: Optional[str] = None) -> None:
        self.prefix = prefix or uuid.uuid4().hex[:6]
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter):04x}"


# --- Builders for Portable Text nodes ---

def span(text: str, marks: Iterable[str] = (), *, key: str) -> Span:
    return Span(key=key, text=text or "", marks=tuple(marks))


def empty_span(*, key: str) -> Span:
    return Span(key=key, text="", marks=())


def link_definition(href: str, *, key: str, open_in_new_tab: bool = True) -> LinkDefinition:
    return LinkDefinition(key=key, href=href or "#", open_in_new_tab=open_in_new_tab)


def text_block(
    children: Sequence[Span],
    mark_defs: Sequence[LinkDefinition] = (),
    *,
    key: str,
    style: str = "normal",
) -> TextBlock:
    return TextBlock(key=key, style=style, children=tuple(children), mark_defs=tuple(mark_defs))


def heading_block(text: str, style: str, *, key: str, span_key: str) -> TextBlock:
    return TextBlock(key=key, style=style, children=(span(text.strip(), key=span_key),))


def list_item_block(
    children: Sequence[Span],
    mark_defs: Sequence[LinkDefinition],
    *,
    key: str,
    ordered: bool,
) -> TextBlock:
    return TextBlock(
        key=key,
        style="normal",
        list_item="number" if ordered else "bullet",
        level=1,
        children=tuple(children),
        mark_defs=tuple(mark_defs),
    )


def image_placeholder(
    src: str,
    alt: str = "",
    *,
    key: str,
    alignment: Optional[str] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> ImagePlaceholder:
    return ImagePlaceholder(
        key=key,
        src=src,
        alt=alt or "",
        alignment=alignment,
        width=width if width and width > 0 else None,
        height=height if height and height > 0 else None,
    )


def video_embed(provider: str, external_id: str, *, key: str, title: Optional[str] = None) -> VideoEmbed:
    return VideoEmbed(key=key, provider=provider, external_id=external_id, title=title or None)


def horizontal_line(*, key: str) -> HorizontalLine:
    return HorizontalLine(key=key)


def column_break(*, key: str) -> ColumnBreak:
    return ColumnBreak(key=key)


def cross_reference(legacy_id: str, *, key: str) -> CrossReferenceEmbed:
    return CrossReferenceEmbed(key=key, legacy_id=str(legacy_id))


def two_column_line(*, key: str) -> TwoColumnLine:
    return TwoColumnLine(key=key)


# --- Span inspection helpers ---

def has_visible_text(children: Sequence[Span]) -> bool:
    return any(s.text.strip() for s in children)


# --- Minimal validator/normalizer ---

def validate_document(nodes: Sequence[Node]) -> List[Node]:
    """
    Final pass over an assembled node list.
    - Text blocks always carry at least one span.
    - Span marks are limited to bold, italic and the markDefs of their own
      block; anything else is dropped.
    """
    fixed: List[Node] = []
    for n in nodes:
        if isinstance(n, TextBlock):
            children = n.children or (empty_span(key=f"{n.key}-0"),)
            known = {d.key for d in n.mark_defs} | {BOLD, ITALIC}
            children = tuple(
                s if all(m in known for m in s.marks)
                else s.model_copy(update={"marks": tuple(m for m in s.marks if m in known)})
                for s in children
            )
            if children != n.children:
                n = n.model_copy(update={"children": children})
        fixed.append(n)
    return fixed
