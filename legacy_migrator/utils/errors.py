"""
Structured logging helpers for conversion errors and successes.

Every outcome of a record conversion is appended to a JSON Lines file under
``reports/conversion`` (see :func:`set_report_dir`) so a run can be reviewed
or parsed afterwards.

``report_error``
    Record a failure or warning for a record.  An optional exception is
    serialized to the log.

``report_ok``
    Record a successful step for a record.  Extra key/value information can be
    attached through ``extra``.

The ``ERRORS`` dictionary maps event codes to human readable messages.  Codes
not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Mapping, Optional

# Same lookup for error and success codes.
ERRORS: Dict[str, str] = {
    "EMPTY_DOCUMENT": "Content converted to zero nodes",
    "UNRESOLVED_LINK": "Shortcode link could not be resolved",
    "CONVERSION_FAILED": "Failed to convert content",
    "WRITE_FAILED": "Failed to write converted document",
    "CONVERTED": "Content converted successfully",
}

_REPORT_DIR = os.path.join("reports", "conversion")


def set_report_dir(path: str) -> None:
    """Redirect subsequent report entries to ``path``."""
    global _REPORT_DIR
    _REPORT_DIR = path


def report_dir() -> str:
    return _REPORT_DIR


def _write_jsonl(name: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``name`` in the report dir."""
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(os.path.join(_REPORT_DIR, name), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _entry(code: str, record: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "id": record.get("ID"),
        "title": record.get("Title"),
    }


def report_error(code: str, record: Mapping[str, Any], exc: Optional[Exception] = None) -> None:
    """Log an error event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    record:
        The source record.  Only its ``ID`` and ``Title`` keys are referenced.
    exc:
        Optional exception instance that triggered the error.
    """
    entry = _entry(code, record)
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {entry['message']} - {record.get('ID', '')}")
    _write_jsonl("errors.jsonl", entry)


def report_ok(code: str, record: Mapping[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``record``, merging ``extra`` into the entry."""
    entry = _entry(code, record)
    if extra:
        entry.update(extra)
    print(f"[OK] {entry['message']} - {record.get('ID', '')}")
    _write_jsonl("success.jsonl", entry)
