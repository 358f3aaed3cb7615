"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for structured logging of
conversion outcomes.
"""

from .errors import ERRORS, report_error, report_ok, set_report_dir

__all__ = ["ERRORS", "report_error", "report_ok", "set_report_dir"]
