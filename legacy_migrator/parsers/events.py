from __future__ import annotations

from typing import NamedTuple, Tuple


# Container kinds own the span they match; their handlers rescan it.
HEADING = "heading"
PARAGRAPH = "p"
BULLET_LIST = "ul"
NUMBER_LIST = "ol"

# Media and structural kinds map straight to one node.
IMG = "img"
IMAGE_SHORTCODE = "image_shortcode"
YOUTUBE = "youtube"
VIMEO = "vimeo"
HR = "hr"
COLUMN_BREAK = "column_break"
CROSS_REFERENCE = "cross_reference"


class BlockEvent(NamedTuple):
    offset: int
    end: int
    kind: str
    raw: str
    groups: Tuple[str, ...] = ()
