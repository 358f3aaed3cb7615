from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


PRODUCT_LINK_KIND = "ProductLink"


class SiteTreeEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    url_segment: str = Field("", alias="URLSegment")
    node_kind: str = Field("", alias="ClassName")
    linked_product_id: Optional[str] = Field(None, alias="LinkedProductID")

    @field_validator("linked_product_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        if not text or text.lower() == "null" or text == "0":
            return None
        return text

    @property
    def is_product_link(self) -> bool:
        return self.node_kind == PRODUCT_LINK_KIND and bool(self.linked_product_id)


class LookupTables:
    """
    Read-only view over the two legacy id tables.

    ``products`` maps a legacy product id to its ``brand/product`` path and
    ``site_tree`` maps a legacy page id to its :class:`SiteTreeEntry`.  Both
    are wrapped in ``MappingProxyType`` so a conversion can never alter them.
    """

    def __init__(
        self,
        products: Optional[Mapping[str, str]] = None,
        site_tree: Optional[Mapping[str, SiteTreeEntry]] = None,
    ) -> None:
        self.products: Mapping[str, str] = MappingProxyType(dict(products or {}))
        self.site_tree: Mapping[str, SiteTreeEntry] = MappingProxyType(dict(site_tree or {}))

    @classmethod
    def from_dicts(
        cls,
        products: Optional[Mapping[str, str]] = None,
        site_tree: Optional[Mapping[str, Mapping[str, Optional[str]]]] = None,
    ) -> "LookupTables":
        """Build tables from plain dicts, e.g. ``{"42": {"url_segment": "o-nas"}}``."""
        entries: Dict[str, SiteTreeEntry] = {}
        for node_id, row in (site_tree or {}).items():
            entries[str(node_id)] = row if isinstance(row, SiteTreeEntry) else SiteTreeEntry(**dict(row))
        return cls({str(k): v for k, v in (products or {}).items()}, entries)

    def product_path(self, product_id: str) -> Optional[str]:
        path = self.products.get(str(product_id))
        return path.strip("/") if path else None

    def site_tree_entry(self, node_id: str) -> Optional[SiteTreeEntry]:
        return self.site_tree.get(str(node_id))

    def __repr__(self) -> str:
        return f"LookupTables(products={len(self.products)}, site_tree={len(self.site_tree)})"
