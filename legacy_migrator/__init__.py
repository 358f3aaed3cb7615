"""
Conversion of legacy CMS content (HTML with bracket shortcodes) into
Portable Text documents.

Subpackages:

``models``
    Pydantic models for Portable Text nodes and the legacy lookup tables.
``parsers``
    The regex-driven converter and its helpers.
``extractors``
    Readers for the CMS CSV exports.
``utils``
    JSON Lines reporting of conversion outcomes.
"""

__version__ = "0.1.0"
