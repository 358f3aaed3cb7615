from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from legacy_migrator.parsers import events as ev
from legacy_migrator.parsers.events import BlockEvent
from legacy_migrator.parsers.media import (
    COLUMN_BREAK_PARAGRAPH_RE,
    COLUMN_BREAK_RE,
    MEDIA_PATTERNS,
)


HEADING_RE = re.compile(r"<(h[1-6])\b[^>]*>([\s\S]*?)</\1\s*>", re.IGNORECASE)
PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>([\s\S]*?)</p\s*>", re.IGNORECASE)
BULLET_LIST_RE = re.compile(r"<ul\b[^>]*>([\s\S]*?)</ul\s*>", re.IGNORECASE)
NUMBER_LIST_RE = re.compile(r"<ol\b[^>]*>([\s\S]*?)</ol\s*>", re.IGNORECASE)
LIST_ITEM_RE = re.compile(r"<li\b[^>]*>([\s\S]*?)</li\s*>", re.IGNORECASE)
_OTHER_COMMENT_RE = re.compile(r"<!--(?!\s*pagebreak\s*-->)[\s\S]*?-->", re.IGNORECASE)

# Containers first so that, on an equal offset, the outer match leads.
CONTAINER_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (ev.HEADING, HEADING_RE),
    (ev.PARAGRAPH, PARAGRAPH_RE),
    (ev.BULLET_LIST, BULLET_LIST_RE),
    (ev.NUMBER_LIST, NUMBER_LIST_RE),
)


def prepare_markup(markup: str, *, drop_column_break_marker: bool = False) -> str:
    """
    Normalize line endings and comments before scanning.

    Column-break comments survive unless ``drop_column_break_marker`` is set,
    in which case they vanish together with any paragraph that held only the
    marker.  Every other HTML comment is removed.
    """
    content = (markup or "").replace("\r\n", "\n").replace("\r", "\n")
    if drop_column_break_marker:
        content = COLUMN_BREAK_PARAGRAPH_RE.sub("", content)
        content = COLUMN_BREAK_RE.sub("", content)
    return _OTHER_COMMENT_RE.sub("", content)


class BlockSegmenter:
    """
    Scan markup for every block construct independently and merge the matches.

    Each pattern family runs over the whole input on its own; the resulting
    event lists are concatenated and stable-sorted by offset, longer match
    first on ties.  Matches nested in a container are kept: the assembler
    decides ownership.
    """

    def __init__(self, drop_column_break_marker: bool = False) -> None:
        self.drop_column_break_marker = drop_column_break_marker

    def segment(self, markup: str) -> List[BlockEvent]:
        content = prepare_markup(markup, drop_column_break_marker=self.drop_column_break_marker)
        found: List[BlockEvent] = []
        for kind, pattern in CONTAINER_PATTERNS + MEDIA_PATTERNS:
            for m in pattern.finditer(content):
                found.append(BlockEvent(m.start(), m.end(), kind, m.group(0), m.groups()))
        found.sort(key=lambda e: (e.offset, -(e.end - e.offset)))
        return found


def list_items(list_body: str) -> List[str]:
    return [m.group(1) for m in LIST_ITEM_RE.finditer(list_body or "")]


def heading_level(event: BlockEvent) -> int:
    return int(event.groups[0][1])
