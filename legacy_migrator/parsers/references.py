"""
Link target resolution for legacy content.

Legacy markup points at other pages in three ways: ``[product_link,id=N]``
and ``[sitetree_link,id=N]`` shortcodes carrying legacy ids, links to the
legacy host itself (with or without a scheme), and plain relative paths.
:class:`ReferenceResolver` turns all of them into absolute URLs on the
canonical site using the injected :class:`~legacy_migrator.models.lookup.LookupTables`.
Nothing here raises; an id that cannot be resolved becomes ``"#"``.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlparse

from legacy_migrator.models.lookup import LookupTables

__all__ = ["ReferenceResolver", "PRODUCT_LINK_RE", "SITETREE_LINK_RE"]


PRODUCT_LINK_RE = re.compile(r"\[product_link\s*,\s*id\s*=\s*(\d+)\s*\]", re.IGNORECASE)
SITETREE_LINK_RE = re.compile(r"\[sitetree_link\s*,\s*id\s*=\s*(\d+)\s*\]", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

UnresolvedCallback = Callable[[str, str], None]


def _default_hosts(base_url: str) -> List[str]:
    host = urlparse(base_url).netloc.lower()
    if not host:
        return []
    hosts = [host]
    if host.startswith("www."):
        hosts.append(host[4:])
    else:
        hosts.append(f"www.{host}")
    return hosts


class ReferenceResolver:
    """
    Resolve raw ``href`` values and media sources to absolute URLs.

    :param tables: product and site-tree lookup tables.
    :param base_url: canonical site root, e.g. ``https://www.example.com``.
    :param site_hosts: hosts treated as "the legacy site"; defaults to the
        host of ``base_url`` with and without ``www.``.
    """

    def __init__(self, tables: LookupTables, base_url: str, site_hosts: Optional[Sequence[str]] = None) -> None:
        self.tables = tables
        self.base_url = base_url.rstrip("/")
        hosts = list(site_hosts) if site_hosts else _default_hosts(self.base_url)
        # Longest first so "www.example.com" wins over "example.com".
        self.site_hosts = sorted({h.lower().rstrip("/") for h in hosts if h}, key=len, reverse=True)

    def _join(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def product_url(self, product_id: str) -> Optional[str]:
        path = self.tables.product_path(product_id)
        return self._join(path) if path else None

    def site_tree_url(self, node_id: str) -> Optional[str]:
        entry = self.tables.site_tree_entry(node_id)
        if entry is None:
            return None
        # Product-link pages point at a product; its path wins over the page's own segment.
        if entry.is_product_link:
            url = self.product_url(entry.linked_product_id or "")
            if url:
                return url
        if entry.url_segment:
            return self._join(entry.url_segment)
        return None

    def resolve(self, raw_target: Optional[str], on_unresolved: Optional[UnresolvedCallback] = None) -> str:
        target = (raw_target or "").strip()
        if not target:
            return "#"

        product = PRODUCT_LINK_RE.search(target)
        if product:
            url = self.product_url(product.group(1))
            if url is None and on_unresolved:
                on_unresolved("product_link", product.group(1))
            return url or "#"

        node = SITETREE_LINK_RE.search(target)
        if node:
            url = self.site_tree_url(node.group(1))
            if url is None and on_unresolved:
                on_unresolved("sitetree_link", node.group(1))
            return url or "#"

        return self.resolve_media_url(target)

    def resolve_media_url(self, src: Optional[str]) -> str:
        """Absolute-URL normalization without the shortcode lookups."""
        target = (src or "").strip()
        if not target:
            return "#"

        bare = _SCHEME_RE.sub("", target)
        lowered = bare.lower()
        for host in self.site_hosts:
            if lowered == host or lowered.startswith(host + "/") or lowered.startswith(host + "?"):
                return f"https://{bare}"

        if _SCHEME_RE.match(target):
            return target
        if target.startswith("//"):
            return f"https:{target}"
        if target.startswith("/"):
            return f"{self.base_url}{target}"
        if target.startswith("#") or target.lower().startswith(("mailto:", "tel:")):
            return target
        return self._join(target)
