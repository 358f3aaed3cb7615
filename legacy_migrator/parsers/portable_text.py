from __future__ import annotations

from typing import Callable, Dict, List, Optional

from legacy_migrator.config import ConverterConfig
from legacy_migrator.models.lookup import LookupTables
from legacy_migrator.models.portable_text import ConversionResult, Node, UnresolvedReference
from legacy_migrator.parsers import events as ev
from legacy_migrator.parsers.events import BlockEvent
from legacy_migrator.parsers.inline import InlineFormatter, clean_text, strip_tags
from legacy_migrator.parsers.media import MediaExtractor, strip_media
from legacy_migrator.parsers.portable_schema import (
    KeyGenerator,
    has_visible_text,
    heading_block,
    list_item_block,
    text_block,
    validate_document,
)
from legacy_migrator.parsers.references import ReferenceResolver
from legacy_migrator.parsers.segmenter import BlockSegmenter, heading_level, list_items


class PortableTextConverter:
    """
    Convert legacy HTML (with CMS shortcodes) into Portable Text nodes.

    The converter holds only read-only state: the lookup tables and the
    configuration.  Every call to :meth:`convert` gets its own key generator
    and unresolved-reference list, so one instance may be shared freely.
    """

    def __init__(self, tables: Optional[LookupTables] = None, config: Optional[ConverterConfig] = None) -> None:
        self.tables = tables or LookupTables()
        self.config = config or ConverterConfig()
        self.resolver = ReferenceResolver(
            self.tables,
            self.config.canonical_base_url,
            self.config.site_hosts or None,
        )

    def convert(self, markup: Optional[str], *, drop_column_break_marker: Optional[bool] = None) -> ConversionResult:
        if not markup:
            return ConversionResult()
        drop = self.config.drop_column_break_marker if drop_column_break_marker is None else drop_column_break_marker
        return _Conversion(self, drop).run(markup)


class _Conversion:
    """State of a single :meth:`PortableTextConverter.convert` call."""

    def __init__(self, converter: PortableTextConverter, drop_column_break_marker: bool) -> None:
        self.config = converter.config
        self.segmenter = BlockSegmenter(drop_column_break_marker)
        self.new_key = KeyGenerator()
        self.unresolved: List[UnresolvedReference] = []
        self.media = MediaExtractor(converter.resolver, self.new_key)
        self.inline = InlineFormatter(converter.resolver, self.new_key, self._record_unresolved)
        self._handlers: Dict[str, Callable[[BlockEvent], List[Node]]] = {
            ev.HEADING: self._heading,
            ev.PARAGRAPH: self._paragraph,
            ev.BULLET_LIST: self._list,
            ev.NUMBER_LIST: self._list,
        }
        self._heading_shift = 0

    def _record_unresolved(self, kind: str, legacy_id: str) -> None:
        self.unresolved.append(UnresolvedReference(kind=kind, legacy_id=legacy_id))

    def run(self, markup: str) -> ConversionResult:
        events = self.segmenter.segment(markup)
        levels = [heading_level(e) for e in events if e.kind == ev.HEADING]
        if levels:
            self._heading_shift = max(min(levels) - 2, 0)

        nodes: List[Node] = []
        owned_until = -1
        for event in events:
            # Anything starting inside an already handled match was rescanned by its owner.
            if event.offset < owned_until:
                continue
            owned_until = event.end
            handler = self._handlers.get(event.kind)
            if handler is not None:
                nodes.extend(handler(event))
                continue
            node = self.media.build(event)
            if node is not None:
                nodes.append(node)

        return ConversionResult(nodes=tuple(validate_document(nodes)), unresolved=tuple(self.unresolved))

    # --- handlers ---

    def _heading_style(self, level: int) -> str:
        if self.config.heading_style_limit == 1:
            return self.config.primary_heading_style
        if level - self._heading_shift <= 2:
            return self.config.primary_heading_style
        return self.config.secondary_heading_style

    def _heading(self, event: BlockEvent) -> List[Node]:
        body = event.groups[1]
        text = clean_text(strip_tags(strip_media(body))).strip()
        style = self._heading_style(heading_level(event))
        media = [n for n in (self.media.build(e) for e in self.media.find_all(body)) if n is not None]

        out: List[Node] = []
        if media:
            # A lone leftover character next to an image is a drop-cap remnant, not a title.
            if len(text) > 1:
                out.append(heading_block(text, style, key=self.new_key(), span_key=self.new_key()))
            out.extend(media)
        elif text:
            out.append(heading_block(text, style, key=self.new_key(), span_key=self.new_key()))
        return out

    def _text_block(self, fragment: str) -> List[Node]:
        if not clean_text(strip_tags(strip_media(fragment))).strip():
            return []
        children, mark_defs = self.inline.format(fragment)
        if not has_visible_text(children):
            return []
        return [text_block(children, mark_defs, key=self.new_key())]

    def _paragraph(self, event: BlockEvent) -> List[Node]:
        body = event.groups[0]
        found = self.media.find_all(body)
        if not found:
            return self._text_block(body)

        out: List[Node] = []
        cursor = 0
        for media_event in found:
            out.extend(self._text_block(body[cursor:media_event.offset]))
            node = self.media.build(media_event)
            if node is not None:
                out.append(node)
            cursor = media_event.end
        out.extend(self._text_block(body[cursor:]))
        return out

    def _list(self, event: BlockEvent) -> List[Node]:
        ordered = event.kind == ev.NUMBER_LIST
        out: List[Node] = []
        for item in list_items(event.groups[0]):
            children, mark_defs = self.inline.format(item)
            if has_visible_text(children):
                out.append(list_item_block(children, mark_defs, key=self.new_key(), ordered=ordered))
            for media_event in self.media.find_all(item):
                node = self.media.build(media_event)
                if node is not None:
                    out.append(node)
        return out


def convert_html_to_portable_text(
    markup: Optional[str],
    tables: Optional[LookupTables] = None,
    *,
    config: Optional[ConverterConfig] = None,
    drop_column_break_marker: Optional[bool] = None,
) -> ConversionResult:
    """
    Convert one legacy HTML document into Portable Text.

    Covered:
    - Headings (collapsed to one or two configured styles), paragraphs with
      bold/italic/link spans and line breaks, bullet and numbered lists.
    - ``<img>`` and ``[image ...]`` placeholders, YouTube/Vimeo embeds,
      ``<hr>``, the pagebreak column marker and ``[recenzja id=N]`` embeds.
    - ``[product_link,id=N]``/``[sitetree_link,id=N]`` link targets resolved
      through ``tables``; unresolved ones become ``"#"`` and are listed in
      ``ConversionResult.unresolved``.
    """
    return PortableTextConverter(tables, config).convert(markup, drop_column_break_marker=drop_column_break_marker)
