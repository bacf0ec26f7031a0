"""BISAC catalog and /bisac-codes tests."""

from __future__ import annotations

import importlib.util
from pathlib import Path

from fastapi.testclient import TestClient

from app.services.bisac_service import build_catalog, load_bisac_catalog


def test_build_catalog_derives_hierarchy() -> None:
    """Main and sub categories come from the ' / ' separated description."""
    catalog = build_catalog(
        [
            {"code": "FIC000000", "description": "FICTION / General"},
            {"code": "COM051360", "description": "COMPUTERS / Programming Languages / Python"},
            {"code": "BAD", "description": ""},
        ]
    )
    python = catalog.by_codes("COM051360")[0]
    assert python["mainCategory"] == "COMPUTERS"
    assert python["subCategory"] == "Programming Languages / Python"
    assert python["level"] == 3
    assert catalog.categories == [{"name": "COMPUTERS", "count": 1}, {"name": "FICTION", "count": 1}]


def test_missing_data_file_yields_empty_catalog(tmp_path: Path) -> None:
    """An unreadable file is logged and served as an empty dataset."""
    catalog = load_bisac_catalog(tmp_path / "absent.json")
    assert catalog.codes == []
    assert catalog.lookup("categories", "", 10) == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert load_bisac_catalog(corrupt).codes == []


def test_search_is_case_insensitive(client: TestClient) -> None:
    """type=search matches code or description substrings."""
    response = client.get("/bisac-codes", params={"q": "python"})
    codes = [row["code"] for row in response.json()["bisacCodes"]]
    assert "COM051360" in codes

    response = client.get("/bisac-codes", params={"type": "search", "q": "fic0000"})
    assert [row["code"] for row in response.json()["bisacCodes"]] == ["FIC000000"]


def test_search_respects_limit_and_empty_query(client: TestClient) -> None:
    """Results are capped at limit; a blank query returns nothing."""
    response = client.get("/bisac-codes", params={"q": "fiction", "limit": 3})
    assert len(response.json()["bisacCodes"]) == 3
    assert client.get("/bisac-codes").json() == {"bisacCodes": []}


def test_categories_and_by_category(client: TestClient) -> None:
    """Categories list every main category; by_category filters exactly."""
    categories = client.get("/bisac-codes", params={"type": "categories"}).json()["bisacCodes"]
    names = [row["name"] for row in categories]
    assert names == sorted(names)
    assert "POETRY" in names

    rows = client.get(
        "/bisac-codes", params={"type": "by_category", "q": "POETRY"}
    ).json()["bisacCodes"]
    assert rows
    assert {row["mainCategory"] for row in rows} == {"POETRY"}


def test_by_codes_and_unknown_type(client: TestClient) -> None:
    """Comma-separated codes are matched exactly; unknown types return []."""
    rows = client.get(
        "/bisac-codes", params={"type": "by_codes", "q": "FIC000000, POE001000,NOPE"}
    ).json()["bisacCodes"]
    assert sorted(row["code"] for row in rows) == ["FIC000000", "POE001000"]

    assert client.get("/bisac-codes", params={"type": "nope", "q": "x"}).json() == {"bisacCodes": []}


def test_prepare_script_reads_csv_export(tmp_path: Path) -> None:
    """The CSV reader skips the header and short rows."""
    script = Path(__file__).resolve().parents[1] / "scripts" / "prepare_bisac_json.py"
    module_spec = importlib.util.spec_from_file_location("prepare_bisac_json", script)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    read_entries = module.read_entries

    source = tmp_path / "bisac.csv"
    source.write_text(
        'Code,Description,Comment\n'
        'POE000000,POETRY / General,\n'
        'broken\n'
        '"HIS037080","HISTORY / Modern / 20th Century / General",see also\n',
        encoding="utf-8",
    )
    entries = read_entries(source)
    assert entries == [
        {"code": "POE000000", "description": "POETRY / General"},
        {"code": "HIS037080", "description": "HISTORY / Modern / 20th Century / General"},
    ]
    assert build_catalog(entries).categories == [
        {"name": "HISTORY", "count": 1},
        {"name": "POETRY", "count": 1},
    ]


def test_large_limit_is_accepted(client: TestClient) -> None:
    """Any limit slices the results instead of failing the request."""
    response = client.get("/bisac-codes", params={"type": "search", "q": "fic", "limit": 1000})
    assert response.status_code == 200
    rows = response.json()["bisacCodes"]
    assert len(rows) >= 12
    assert all("fic" in (row["code"] + row["description"]).lower() for row in rows)

    response = client.get("/bisac-codes", params={"q": "fic", "limit": 0})
    assert response.json() == {"bisacCodes": []}
