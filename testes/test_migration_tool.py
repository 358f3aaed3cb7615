import csv
import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("bs4")

from legacy_migrator.migration_tool import ContentMigrationTool
from legacy_migrator.models.lookup import LookupTables
from legacy_migrator.utils import errors


@pytest.fixture(autouse=True)
def report_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("LEGACY_BASE_URL", raising=False)
    previous = errors.report_dir()
    errors.set_report_dir(str(tmp_path / "reports"))
    yield tmp_path / "reports"
    errors.set_report_dir(previous)


@pytest.fixture
def tables():
    return LookupTables.from_dicts(site_tree={"42": {"url_segment": "o-nas", "node_kind": "Page"}})


def write_export(path, rows):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["ID", "Title", "Content"])
        writer.writeheader()
        writer.writerows(rows)
    return str(path)


def read_jsonl(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_extract_records(tmp_path, tables):
    path = write_export(tmp_path / "export.csv", [
        {"ID": " 11 ", "Title": "Recenzja &amp; test", "Content": "<p>x</p>"},
        {"ID": "", "Title": "Bez id", "Content": ""},
    ])
    tool = ContentMigrationTool(tables=tables)
    records = tool.extract_records(path)
    assert [r["ID"] for r in records] == ["11", "2"]
    assert records[0]["Title"] == "Recenzja & test"
    assert records[0]["ContentHTML"] == "<p>x</p>"


def test_extract_records_missing_file_or_column(tmp_path, tables):
    tool = ContentMigrationTool(tables=tables)
    assert tool.extract_records(str(tmp_path / "absent.csv")) == []
    bad = tmp_path / "bad.csv"
    bad.write_text("ID,Body\n1,<p>x</p>\n", encoding="utf-8")
    assert tool.extract_records(str(bad)) == []


def test_convert_records_writes_documents_and_reports(tmp_path, tables, report_dir):
    path = write_export(tmp_path / "export.csv", [
        {"ID": "1", "Title": "Pierwsza", "Content": '<h2>Intro</h2><p>Zobacz <a href="[sitetree_link,id=42]">nas</a>.</p>'},
        {"ID": "2", "Title": "Pusta", "Content": "<p>&nbsp;</p>"},
        {"ID": "3", "Title": "Zepsuty link", "Content": '<p><a href="[product_link,id=5]">produkt</a></p>'},
    ])
    out_dir = tmp_path / "out"
    tool = ContentMigrationTool({"migration": {"output_dir": str(out_dir)}}, tables=tables)
    written = tool.convert_records(tool.extract_records(path))

    assert sorted(os.path.basename(p) for p in written) == ["1.json", "2.json", "3.json"]
    with open(out_dir / "1.json", encoding="utf-8") as f:
        document = json.load(f)
    assert document["title"] == "Pierwsza"
    assert [n["_type"] for n in document["content"]] == ["block", "block"]
    assert document["content"][1]["markDefs"][0]["href"] == "https://www.example.com/o-nas"
    assert document["description"] == "Intro Zobacz nas."

    error_codes = [e["code"] for e in read_jsonl(report_dir / "errors.jsonl")]
    assert error_codes == ["EMPTY_DOCUMENT", "UNRESOLVED_LINK"]
    ok = read_jsonl(report_dir / "success.jsonl")
    assert [e["id"] for e in ok] == ["1", "2", "3"]
    assert ok[0]["nodes"] == 2
    assert os.path.exists(report_dir / "migration.log")


def test_limit_is_honored(tmp_path, tables):
    records = [{"ID": str(i), "ContentHTML": f"<p>{i}</p>"} for i in range(5)]
    tool = ContentMigrationTool({"migration": {"limit": 2, "output_dir": str(tmp_path / "out")}}, tables=tables)
    assert len(tool.convert_records(records)) == 2


def test_converter_options_come_from_config(tmp_path, tables):
    tool = ContentMigrationTool(
        {"converter": {"drop_column_break_marker": True, "canonical_base_url": "https://new.example.org"}},
        tables=tables,
    )
    result = tool.convert_record({"ID": "1", "ContentHTML": '<p>a</p><!-- pagebreak --><p><a href="/b">b</a></p>'})
    assert [n.type for n in result.nodes] == ["block", "block"]
    assert result.links[0].href == "https://new.example.org/b"


def test_tables_are_loaded_lazily_from_config(tmp_path):
    pytest.importorskip("pandas")
    site_tree = tmp_path / "sitetree.csv"
    site_tree.write_text("SiteTreeID,URLSegment,ClassName,LinkedProductID\n42,kontakt,Page,\n", encoding="utf-8")
    tool = ContentMigrationTool({"tables": {"products_csv": str(tmp_path / "none.csv"), "site_tree_csv": str(site_tree)}})
    result = tool.convert_record({"ID": "1", "ContentHTML": '<p><a href="[sitetree_link,id=42]">k</a></p>'})
    assert result.links[0].href == "https://www.example.com/kontakt"
