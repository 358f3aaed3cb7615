"""
Recognition of media and structural constructs in legacy markup.

Each construct is matched independently by its own pattern:

* ``<img>`` elements and ``[image ...]`` shortcodes → image placeholders
* YouTube and Vimeo ``<iframe>`` embeds → video embeds
* ``<hr>`` → horizontal line
* ``<!-- pagebreak -->`` → column break (or nothing, see ``drop_column_break_marker``)
* ``[recenzja id=N]`` → cross-reference embed carrying the legacy id

Image sources go through :meth:`ReferenceResolver.resolve_media_url`, never
through the shortcode lookups.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from legacy_migrator.models.portable_text import Node
from legacy_migrator.parsers import events as ev
from legacy_migrator.parsers.events import BlockEvent
from legacy_migrator.parsers.portable_schema import (
    column_break,
    cross_reference,
    horizontal_line,
    image_placeholder,
    video_embed,
)
from legacy_migrator.parsers.references import ReferenceResolver


IMG_RE = re.compile(r"<img\b[^>]*?(?<![\w-])src\s*=\s*[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
ANY_IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
IMAGE_SHORTCODE_RE = re.compile(r"\[image\s+([^\]]+)\]", re.IGNORECASE)
YOUTUBE_IFRAME_RE = re.compile(
    r"<iframe\b[^>]*?(?<![\w-])src\s*=\s*[\"']"
    r"((?:https?:)?//(?:www\.)?youtube(?:-nocookie)?\.com/embed/[A-Za-z0-9_-]{11}[^\"']*)"
    r"[\"'][^>]*>[\s\S]*?</iframe>",
    re.IGNORECASE,
)
VIMEO_IFRAME_RE = re.compile(
    r"<iframe\b[^>]*?(?<![\w-])src\s*=\s*[\"']"
    r"((?:https?:)?//(?:player\.)?vimeo\.com/video/\d+[^\"']*)"
    r"[\"'][^>]*>[\s\S]*?</iframe>",
    re.IGNORECASE,
)
HR_RE = re.compile(r"<hr\b[^>]*>", re.IGNORECASE)
COLUMN_BREAK_RE = re.compile(r"<!--\s*pagebreak\s*-->", re.IGNORECASE)
COLUMN_BREAK_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>\s*<!--\s*pagebreak\s*-->\s*</p>", re.IGNORECASE)
CROSS_REFERENCE_RE = re.compile(r"\[recenzja\s+id\s*=\s*[\"']?(\d+)[\"']?\s*\]", re.IGNORECASE)

YOUTUBE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
YOUTUBE_URL_RES = (
    re.compile(r"(?:youtube(?:-nocookie)?\.com/(?:embed/|watch\?v=|v/)|youtu\.be/)([A-Za-z0-9_-]{11})"),
    re.compile(r"youtube\.com/watch\?.*?\bv=([A-Za-z0-9_-]{11})"),
)
VIMEO_URL_RE = re.compile(r"vimeo\.com/(?:video/)?(\d+)")

# Order matters only for equal offsets, which these patterns never produce.
MEDIA_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (ev.IMG, IMG_RE),
    (ev.IMAGE_SHORTCODE, IMAGE_SHORTCODE_RE),
    (ev.YOUTUBE, YOUTUBE_IFRAME_RE),
    (ev.VIMEO, VIMEO_IFRAME_RE),
    (ev.HR, HR_RE),
    (ev.COLUMN_BREAK, COLUMN_BREAK_RE),
    (ev.CROSS_REFERENCE, CROSS_REFERENCE_RE),
)


def get_attr(raw: str, name: str) -> Optional[str]:
    """Value of a quoted ``name="..."`` attribute inside ``raw``, if any."""
    m = re.search(rf"(?<![\w-]){name}\s*=\s*\"([^\"]*)\"", raw, re.IGNORECASE)
    if not m:
        m = re.search(rf"(?<![\w-]){name}\s*=\s*'([^']*)'", raw, re.IGNORECASE)
    return m.group(1) if m else None


def get_int_attr(raw: str, name: str) -> Optional[int]:
    m = re.search(rf"(?<![\w-]){name}\s*=\s*[\"']?(\d+)", raw, re.IGNORECASE)
    return int(m.group(1)) if m else None


def float_from_class(class_attr: Optional[str]) -> Optional[str]:
    """Only the exact tokens ``left``/``right`` float; ``leftAlone`` and friends do not."""
    tokens = (class_attr or "").split()
    if "left" in tokens:
        return "left"
    if "right" in tokens:
        return "right"
    return None


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """Extract a YouTube video id from a bare id or any common URL form."""
    cleaned = (url or "").replace("\xa0", " ").strip()
    if not cleaned or cleaned.lower() == "null":
        return None
    if YOUTUBE_ID_RE.match(cleaned):
        return cleaned
    for pattern in YOUTUBE_URL_RES:
        m = pattern.search(cleaned)
        if m:
            return m.group(1)
    return None


def extract_vimeo_id(url: Optional[str]) -> Optional[str]:
    cleaned = (url or "").strip()
    if not cleaned:
        return None
    if cleaned.isdigit():
        return cleaned
    m = VIMEO_URL_RE.search(cleaned)
    return m.group(1) if m else None


def strip_media(markup: str) -> str:
    """Remove every image and cross-reference construct from ``markup``."""
    text = ANY_IMG_TAG_RE.sub("", markup or "")
    text = IMAGE_SHORTCODE_RE.sub("", text)
    return CROSS_REFERENCE_RE.sub("", text)


class MediaExtractor:
    """
    Find media/structural constructs and build their placeholder nodes.

    :param resolver: used to make image sources absolute.
    :param new_key: key factory shared with the rest of the conversion.
    """

    def __init__(self, resolver: ReferenceResolver, new_key: Callable[[], str]) -> None:
        self.resolver = resolver
        self.new_key = new_key
        self._builders: Dict[str, Callable[[BlockEvent], Optional[Node]]] = {
            ev.IMG: self._build_img,
            ev.IMAGE_SHORTCODE: self._build_image_shortcode,
            ev.YOUTUBE: self._build_youtube,
            ev.VIMEO: self._build_vimeo,
            ev.HR: lambda e: horizontal_line(key=self.new_key()),
            ev.COLUMN_BREAK: lambda e: column_break(key=self.new_key()),
            ev.CROSS_REFERENCE: lambda e: cross_reference(e.groups[0], key=self.new_key()),
        }

    def find_all(self, markup: str) -> List[BlockEvent]:
        """All media and structural matches in ``markup``, ordered by offset."""
        found: List[BlockEvent] = []
        for kind, pattern in MEDIA_PATTERNS:
            for m in pattern.finditer(markup or ""):
                found.append(BlockEvent(m.start(), m.end(), kind, m.group(0), m.groups()))
        found.sort(key=lambda e: (e.offset, -(e.end - e.offset)))
        return _drop_nested(found)

    def build(self, event: BlockEvent) -> Optional[Node]:
        builder = self._builders.get(event.kind)
        return builder(event) if builder else None

    # --- builders ---

    def _build_img(self, event: BlockEvent) -> Optional[Node]:
        src = event.groups[0] if event.groups else get_attr(event.raw, "src")
        if not src:
            return None
        return image_placeholder(
            self.resolver.resolve_media_url(src),
            get_attr(event.raw, "alt") or "",
            key=self.new_key(),
        )

    def _build_image_shortcode(self, event: BlockEvent) -> Optional[Node]:
        attrs = event.groups[0] if event.groups else event.raw
        src = get_attr(attrs, "src")
        if not src:
            return None
        return image_placeholder(
            self.resolver.resolve_media_url(src),
            get_attr(attrs, "title") or get_attr(attrs, "alt") or "",
            key=self.new_key(),
            alignment=float_from_class(get_attr(attrs, "class")),
            width=get_int_attr(attrs, "width"),
            height=get_int_attr(attrs, "height"),
        )

    def _build_youtube(self, event: BlockEvent) -> Optional[Node]:
        video_id = extract_youtube_id(event.groups[0])
        if not video_id:
            return None
        return video_embed("youtube", video_id, key=self.new_key(), title=get_attr(event.raw, "title"))

    def _build_vimeo(self, event: BlockEvent) -> Optional[Node]:
        video_id = extract_vimeo_id(event.groups[0])
        if not video_id:
            return None
        return video_embed("vimeo", video_id, key=self.new_key(), title=get_attr(event.raw, "title"))


def _drop_nested(found: List[BlockEvent]) -> List[BlockEvent]:
    # An <img> inside a matched iframe body is not a separate construct.
    kept: List[BlockEvent] = []
    end = -1
    for e in found:
        if e.offset < end:
            continue
        kept.append(e)
        end = e.end
    return kept
