from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


BOLD = "strong"
ITALIC = "em"

Float = Literal["left", "right"]
ListItemKind = Literal["bullet", "number"]
VideoProvider = Literal["youtube", "vimeo"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LinkDefinition(_Frozen):
    """Target of a link mark; shared by every span cut from one ``<a>``."""

    type: Literal["link"] = Field("link", alias="_type")
    key: str = Field(..., alias="_key")
    href: str
    open_in_new_tab: bool = Field(True, alias="openInNewTab")


class Span(_Frozen):
    type: Literal["span"] = Field("span", alias="_type")
    key: str = Field(..., alias="_key")
    text: str = ""
    marks: Tuple[str, ...] = ()

    @field_validator("marks", mode="before")
    @classmethod
    def _dedup_marks(cls, v):
        if not v:
            return ()
        seen = set()
        out = []
        for mark in v:
            if mark not in seen:
                seen.add(mark)
                out.append(mark)
        return tuple(out)


class TextBlock(_Frozen):
    type: Literal["block"] = Field("block", alias="_type")
    key: str = Field(..., alias="_key")
    style: str = "normal"
    list_item: Optional[ListItemKind] = Field(None, alias="listItem")
    level: Optional[int] = None
    children: Tuple[Span, ...] = ()
    mark_defs: Tuple[LinkDefinition, ...] = Field((), alias="markDefs")

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.children)

    @property
    def is_heading(self) -> bool:
        return self.style != "normal"


class ImagePlaceholder(_Frozen):
    """Image awaiting upload; ``src`` is replaced by an asset reference later."""

    type: Literal["imagePlaceholder"] = Field("imagePlaceholder", alias="_type")
    key: str = Field(..., alias="_key")
    src: str
    alt: str = ""
    alignment: Optional[Float] = Field(None, alias="float")
    width: Optional[int] = None
    height: Optional[int] = None


class VideoEmbed(_Frozen):
    type: Literal["videoEmbed"] = Field("videoEmbed", alias="_type")
    key: str = Field(..., alias="_key")
    provider: VideoProvider
    external_id: str = Field(..., alias="externalId")
    title: Optional[str] = None


class HorizontalLine(_Frozen):
    type: Literal["ptHorizontalLine"] = Field("ptHorizontalLine", alias="_type")
    key: str = Field(..., alias="_key")
    style: str = "horizontalLine"


class ColumnBreak(_Frozen):
    type: Literal["ptPageBreak"] = Field("ptPageBreak", alias="_type")
    key: str = Field(..., alias="_key")
    style: str = "columnBreak"


class CrossReferenceEmbed(_Frozen):
    """Embed of another legacy document, resolved to a reference downstream."""

    type: Literal["ptReviewEmbed"] = Field("ptReviewEmbed", alias="_type")
    key: str = Field(..., alias="_key")
    legacy_id: str = Field(..., alias="legacyId")


class TwoColumnLine(_Frozen):
    type: Literal["ptTwoColumnLine"] = Field("ptTwoColumnLine", alias="_type")
    key: str = Field(..., alias="_key")
    style: str = "twoColumnLine"


Node = Annotated[
    Union[
        TextBlock,
        ImagePlaceholder,
        VideoEmbed,
        HorizontalLine,
        ColumnBreak,
        CrossReferenceEmbed,
        TwoColumnLine,
    ],
    Field(discriminator="type"),
]


class UnresolvedReference(_Frozen):
    kind: Literal["product_link", "sitetree_link"]
    legacy_id: str = Field(..., alias="legacyId")


class ConversionResult(_Frozen):
    """Output of one conversion: ordered nodes plus what could not be resolved."""

    nodes: Tuple[Node, ...] = ()
    unresolved: Tuple[UnresolvedReference, ...] = ()

    @property
    def links(self) -> List[LinkDefinition]:
        return [d for n in self.nodes if isinstance(n, TextBlock) for d in n.mark_defs]

    def to_payload(self) -> dict[str, Any]:
        return {"nodes": [n.to_payload() for n in self.nodes]}
