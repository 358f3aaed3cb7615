"""
Readers for the legacy CMS exports: content records and id lookup tables.
"""

from .lookup_tables import LookupTableCache, load_lookup_tables, read_product_paths, read_site_tree
from .records import extract_records_from_csv

__all__ = [
    "LookupTableCache",
    "extract_records_from_csv",
    "load_lookup_tables",
    "read_product_paths",
    "read_site_tree",
]
