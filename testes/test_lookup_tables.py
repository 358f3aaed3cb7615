import os
import sys
import threading
import time

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("pandas")

from legacy_migrator.extractors.lookup_tables import (
    LookupTableCache,
    load_lookup_tables,
    read_product_paths,
    read_site_tree,
)
from legacy_migrator.models.lookup import LookupTables
from legacy_migrator.parsers.references import ReferenceResolver

PRODUCTS_CSV = (
    "ProductID,ProductURLSegment,BrandURLSegment,FullPath,Title\n"
    "7,ref160m,audioresearch,audioresearch/ref160m,Ref 160M\n"
    "8,,,,Bez ścieżki\n"
    "9,k300,krell, krell/k300 ,\"K-300, integra\"\n"
    "10,a,b,c,d,e,f\n"
)

SITE_TREE_CSV = (
    "SiteTreeID,URLSegment,ClassName,Title,ParentID,LinkedProductID\n"
    "42,o-nas,Page,O nas,0,\n"
    "43,stary,ProductLink,Link,0,7\n"
    "44,null-link,ProductLink,Link,0,NULL\n"
    ",orphan,Page,Brak id,0,\n"
)


@pytest.fixture
def csv_files(tmp_path):
    products = tmp_path / "products.csv"
    site_tree = tmp_path / "sitetree.csv"
    products.write_text(PRODUCTS_CSV, encoding="utf-8")
    site_tree.write_text(SITE_TREE_CSV, encoding="utf-8")
    return str(products), str(site_tree)


def test_read_product_paths(csv_files):
    products = read_product_paths(csv_files[0])
    assert products == {"7": "audioresearch/ref160m", "9": "krell/k300"}


def test_read_site_tree(csv_files):
    site_tree = read_site_tree(csv_files[1])
    assert set(site_tree) == {"42", "43", "44"}
    assert site_tree["42"].url_segment == "o-nas"
    assert site_tree["42"].linked_product_id is None
    assert site_tree["43"].is_product_link
    assert site_tree["43"].linked_product_id == "7"
    assert not site_tree["44"].is_product_link


def test_missing_files_give_empty_tables(tmp_path, capsys):
    missing = str(tmp_path / "nope.csv")
    assert read_product_paths(missing) == {}
    assert read_site_tree(missing) == {}
    assert "[WARNING]" in capsys.readouterr().out


def test_missing_columns_give_empty_table(tmp_path):
    path = tmp_path / "other.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    assert read_product_paths(str(path)) == {}
    assert read_site_tree(str(path)) == {}


def test_loaded_tables_drive_the_resolver(csv_files):
    tables = load_lookup_tables(*csv_files)
    resolver = ReferenceResolver(tables, "https://www.example.com")
    assert resolver.resolve("[sitetree_link,id=43]") == "https://www.example.com/audioresearch/ref160m"
    assert resolver.resolve("[sitetree_link,id=44]") == "https://www.example.com/null-link"


def test_tables_are_read_only(csv_files):
    tables = load_lookup_tables(*csv_files)
    with pytest.raises(TypeError):
        tables.products["1"] = "x"


def test_cache_loads_once_under_concurrency():
    calls = []

    def slow_loader(products_csv, site_tree_csv):
        calls.append((products_csv, site_tree_csv))
        time.sleep(0.05)
        return LookupTables(products={"1": "a/b"})

    cache = LookupTableCache("p.csv", "s.csv", loader=slow_loader)
    results = []
    threads = [threading.Thread(target=lambda: results.append(cache.get())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == [("p.csv", "s.csv")]
    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert cache.loaded
