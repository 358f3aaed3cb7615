from .lookup import LookupTables, SiteTreeEntry
from .portable_text import ConversionResult, LinkDefinition, Node, Span, TextBlock, UnresolvedReference

__all__ = [
    "ConversionResult",
    "LinkDefinition",
    "LookupTables",
    "Node",
    "SiteTreeEntry",
    "Span",
    "TextBlock",
    "UnresolvedReference",
]
