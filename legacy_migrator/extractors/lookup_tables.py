"""
Loading of the legacy id lookup tables from their CSV exports.

Two exports back the link resolver:

``product-brand-slug-map.csv``
    ``ProductID`` → ``FullPath`` (``brand/product``).

``sitetree-map.csv``
    ``SiteTreeID`` → ``URLSegment``, ``ClassName`` and ``LinkedProductID``.

Both are read with pandas as plain strings.  Malformed rows are skipped and
a missing or unreadable file yields an empty table with a warning, so a
conversion run never stops because a lookup export is absent.
:class:`LookupTableCache` loads them at most once per process.
"""

from __future__ import annotations

import os
import threading
from typing import Dict, Optional

import pandas as pd

from legacy_migrator.models.lookup import LookupTables, SiteTreeEntry


def _read_table(csv_path: str) -> Optional[pd.DataFrame]:
    if not csv_path or not os.path.exists(csv_path):
        print(f"[WARNING] Lookup table not found: {csv_path}")
        return None
    try:
        df = pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            on_bad_lines="skip",
            skip_blank_lines=True,
        )
    except (OSError, ValueError, pd.errors.ParserError) as e:
        print(f"[WARNING] Could not read lookup table {csv_path}: {e}")
        return None
    df.columns = [str(c).strip() for c in df.columns]
    return df.apply(lambda col: col.str.strip())


def read_product_paths(csv_path: str) -> Dict[str, str]:
    """Map ``ProductID`` to ``FullPath``; rows missing either are ignored."""
    df = _read_table(csv_path)
    if df is None or not {"ProductID", "FullPath"} <= set(df.columns):
        return {}
    products: Dict[str, str] = {}
    for product_id, full_path in zip(df["ProductID"], df["FullPath"]):
        if product_id and full_path:
            products[product_id] = full_path
    return products


def read_site_tree(csv_path: str) -> Dict[str, SiteTreeEntry]:
    """Map ``SiteTreeID`` to a :class:`SiteTreeEntry`; rows without an id are ignored."""
    df = _read_table(csv_path)
    if df is None or "SiteTreeID" not in df.columns:
        return {}
    for column in ("URLSegment", "ClassName", "LinkedProductID"):
        if column not in df.columns:
            df[column] = ""
    site_tree: Dict[str, SiteTreeEntry] = {}
    for row in df[["SiteTreeID", "URLSegment", "ClassName", "LinkedProductID"]].itertuples(index=False):
        if not row.SiteTreeID:
            continue
        site_tree[row.SiteTreeID] = SiteTreeEntry(
            URLSegment=row.URLSegment,
            ClassName=row.ClassName,
            LinkedProductID=row.LinkedProductID,
        )
    return site_tree


def load_lookup_tables(products_csv: str, site_tree_csv: str) -> LookupTables:
    products = read_product_paths(products_csv)
    site_tree = read_site_tree(site_tree_csv)
    if products or site_tree:
        print(f"[INFO] Loaded {len(products)} product paths and {len(site_tree)} site tree entries")
    return LookupTables(products, site_tree)


class LookupTableCache:
    """
    Process-wide holder of the lookup tables, loaded on first access.

    Concurrent first calls race on a lock; exactly one of them reads the
    CSVs and every caller gets the same :class:`LookupTables` instance.
    """

    def __init__(self, products_csv: str, site_tree_csv: str, loader=load_lookup_tables) -> None:
        self.products_csv = products_csv
        self.site_tree_csv = site_tree_csv
        self._loader = loader
        self._lock = threading.Lock()
        self._tables: Optional[LookupTables] = None

    @property
    def loaded(self) -> bool:
        return self._tables is not None

    def get(self) -> LookupTables:
        if self._tables is None:
            with self._lock:
                if self._tables is None:
                    self._tables = self._loader(self.products_csv, self.site_tree_csv)
        return self._tables
