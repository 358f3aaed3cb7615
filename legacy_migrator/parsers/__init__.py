"""
Parsers and converters used by the migration pipeline.

The main entry point is :class:`PortableTextConverter` (or the
``convert_html_to_portable_text`` shortcut) from
:mod:`legacy_migrator.parsers.portable_text`.
"""

from .layout import merge_sections
from .plain_text import html_to_plain_text
from .portable_text import PortableTextConverter, convert_html_to_portable_text
from .references import ReferenceResolver

__all__ = [
    "PortableTextConverter",
    "ReferenceResolver",
    "convert_html_to_portable_text",
    "html_to_plain_text",
    "merge_sections",
]
