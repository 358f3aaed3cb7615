"""
High-level orchestration of the legacy content → Portable Text conversion.

This module defines a :class:`ContentMigrationTool` class that ties the
extractors, the converter and the reporting utilities into one pipeline:
read records from a CMS CSV export, convert each record's HTML, write one
JSON document per record and log every outcome.

Configuration is supplied via a JSON file path or directly as a dictionary
(see :mod:`legacy_migrator.config` for the sections and defaults).
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from legacy_migrator.config import apply_defaults, converter_config, load_config
from legacy_migrator.extractors.lookup_tables import LookupTableCache
from legacy_migrator.extractors.records import extract_records_from_csv
from legacy_migrator.models.lookup import LookupTables
from legacy_migrator.models.portable_text import ConversionResult
from legacy_migrator.parsers.plain_text import html_to_plain_text
from legacy_migrator.parsers.portable_text import PortableTextConverter
from legacy_migrator.utils.errors import report_dir, report_error, report_ok


class ContentMigrationTool:
    """
    Encapsulates the state needed to convert a batch of legacy records.

    Lookup tables are read lazily from the CSVs named in the ``tables``
    section the first time a record is converted, unless ``tables`` is given
    explicitly.  Per-record success and failure details are recorded with
    :mod:`legacy_migrator.utils.errors`.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        tables: Optional[LookupTables] = None,
    ) -> None:
        if config_file:
            config = load_config(config_file, required=True)
        else:
            config = apply_defaults(dict(config or {}))

        self.config = config
        self.converter_config = converter_config(config)
        self._table_cache = LookupTableCache(
            config["tables"]["products_csv"],
            config["tables"]["site_tree_csv"],
        )
        self._tables = tables
        self._converter: Optional[PortableTextConverter] = None

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        os.makedirs(report_dir(), exist_ok=True)
        with open(os.path.join(report_dir(), "migration.log"), "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    @property
    def converter(self) -> PortableTextConverter:
        if self._converter is None:
            tables = self._tables if self._tables is not None else self._table_cache.get()
            self._converter = PortableTextConverter(tables, self.converter_config)
        return self._converter

    def extract_records(self, csv_path: str) -> List[Dict[str, Any]]:
        if not os.path.exists(csv_path):
            self.log_message(f"Input file not found: {csv_path}", "ERROR")
            return []
        self.log_message(f"Extracting records from CSV {csv_path}")
        try:
            return extract_records_from_csv(
                csv_path,
                content_column=self.config["migration"]["content_column"],
                id_column=self.config["migration"]["id_column"],
            )
        except (OSError, ValueError) as e:
            self.log_message(f"Error extracting CSV: {e}", "ERROR")
            return []

    def convert_record(self, record: Dict[str, Any]) -> ConversionResult:
        """
        Convert one record's ``ContentHTML``.

        Empty output and unresolved shortcode links are reported but do not
        fail the record.
        """
        result = self.converter.convert(record.get("ContentHTML"))
        if not result.nodes:
            report_error("EMPTY_DOCUMENT", record)
        for ref in result.unresolved:
            self.log_message(f"Unresolved {ref.kind} id={ref.legacy_id} in record {record.get('ID')}", "WARNING")
            report_error("UNRESOLVED_LINK", record, ValueError(f"{ref.kind} id={ref.legacy_id}"))
        return result

    def convert_records(self, records: List[Dict[str, Any]], output_dir: Optional[str] = None) -> List[str]:
        """
        Convert ``records`` and write one ``<ID>.json`` per record.

        Each file holds the record id and title, the Portable Text nodes and a
        plain-text description.  Honors ``migration.limit``.

        :return: paths of the files written.
        """
        out_dir = output_dir or self.config["migration"]["output_dir"]
        limit: Optional[int] = self.config["migration"].get("limit")
        os.makedirs(out_dir, exist_ok=True)
        written: List[str] = []

        for count, record in enumerate(records):
            if limit is not None and count >= limit:
                break
            record_id = str(record.get("ID") or count + 1)
            self.log_message(f"Converting record '{record_id}'")
            try:
                result = self.convert_record(record)
            except Exception as e:
                report_error("CONVERSION_FAILED", record, e)
                continue

            document = {
                "id": record_id,
                "title": record.get("Title") or "",
                "content": result.to_payload()["nodes"],
                "description": html_to_plain_text(record.get("ContentHTML")),
            }
            path = os.path.join(out_dir, f"{record_id}.json")
            try:
                with open(path, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2)
            except OSError as e:
                report_error("WRITE_FAILED", record, e)
                continue
            written.append(path)
            report_ok("CONVERTED", record, {"nodes": len(result.nodes), "path": path})

        self.log_message(f"Converted {len(written)} of {len(records)} records into {out_dir}")
        return written
