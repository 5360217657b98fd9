"""Tests du module I/O tableurs."""

from pathlib import Path

import pandas as pd
import pytest

from budgetmatch.io_excel import (
    SpreadsheetFileError,
    build_template,
    list_sheets,
    load_import_rows,
    load_sheet,
    parse_budget_rows,
    save_xlsx,
)

HEADER = ["ชื่อหน่วยงาน", "จังหวัด", *[str(i) for i in range(1, 18)]]


def test_parse_budget_rows_basic() -> None:
    df = pd.DataFrame(
        [
            HEADER,
            ["  รพ.นครพิงค์ ", " เชียงใหม่ ", "5000", "1,200", "abc", None],
        ]
    )
    rows = parse_budget_rows(df)
    assert len(rows) == 1
    row = rows[0]
    assert row.unit_name == "รพ.นครพิงค์"
    assert row.province == "เชียงใหม่"
    assert row.budgets[1] == 5000
    assert row.budgets[2] == 1200
    assert row.budgets[3] == 0
    assert row.budgets[4] == 0


def test_parse_budget_rows_zero_fill_short_row() -> None:
    df = pd.DataFrame([HEADER[:3], ["สสจ.ลำปาง", "ลำปาง", "10"]])
    rows = parse_budget_rows(df)
    assert sorted(rows[0].budgets) == list(range(1, 18))
    assert rows[0].budgets[1] == 10
    assert rows[0].budgets[17] == 0


def test_parse_budget_rows_name_only() -> None:
    rows = parse_budget_rows(pd.DataFrame([["หัวตาราง"], ["โรงพยาบาลน่าน"]]))
    assert rows[0].province == ""
    assert len(rows[0].budgets) == 17


def test_parse_budget_rows_skips_empty_names() -> None:
    df = pd.DataFrame([HEADER[:3], [None, "เชียงใหม่", "1"], ["  ", "ลำปาง", "2"], ["รพ.ลำปาง", "ลำปาง", "3"]])
    rows = parse_budget_rows(df)
    assert [r.unit_name for r in rows] == ["รพ.ลำปาง"]


def test_parse_budget_rows_header_only() -> None:
    assert parse_budget_rows(pd.DataFrame([HEADER])) == []


def test_parse_budget_rows_custom_category_count() -> None:
    df = pd.DataFrame([HEADER[:5], ["a", "b", "1", "2", "3"]])
    rows = parse_budget_rows(df, category_count=3)
    assert rows[0].budgets == {1: 1.0, 2: 2.0, 3: 3.0}


def test_load_import_rows_xlsx(tmp_path: Path) -> None:
    path = tmp_path / "budgets.xlsx"
    pd.DataFrame(
        [
            HEADER,
            ["รพ.นครพิงค์", "เชียงใหม่", 5000, 1200.5] + [0] * 15,
            ["สสจ.ลำปาง", "ลำปาง", 42],
        ]
    ).to_excel(path, header=False, index=False, engine="openpyxl")
    rows = load_import_rows(path)
    assert [r.unit_name for r in rows] == ["รพ.นครพิงค์", "สสจ.ลำปาง"]
    assert rows[0].budgets[1] == 5000
    assert rows[0].budgets[2] == 1200.5
    assert rows[1].budgets[1] == 42
    assert rows[1].budgets[17] == 0


def test_load_import_rows_csv(tmp_path: Path) -> None:
    path = tmp_path / "budgets.csv"
    path.write_text("name;province;1;2\nโรงพยาบาลน่าน;น่าน;100;200\n", encoding="utf-8")
    rows = load_import_rows(path)
    assert rows[0].unit_name == "โรงพยาบาลน่าน"
    assert rows[0].budgets[2] == 200


def test_load_sheet_named(tmp_path: Path) -> None:
    path = tmp_path / "multi.xlsx"
    save_xlsx(path, {"อื่น": pd.DataFrame({"a": [1]}), "budgets": pd.DataFrame({"x": ["y"]})})
    df = load_sheet(path, "budgets")
    assert df.iloc[0, 0] == "x"
    assert df.iloc[1, 0] == "y"


def test_list_sheets(tmp_path: Path) -> None:
    path = tmp_path / "test.xlsx"
    save_xlsx(path, {"Feuille1": pd.DataFrame({"a": [1]}), "Feuille2": pd.DataFrame({"b": [2]})})
    assert list_sheets(path) == ["Feuille1", "Feuille2"]


def test_list_sheets_csv(tmp_path: Path) -> None:
    path = tmp_path / "x.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    assert list_sheets(path) == ["(données)"]


def test_load_sheet_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(SpreadsheetFileError, match="introuvable"):
        load_sheet(tmp_path / "inexistant.xlsx")


def test_load_sheet_missing_sheet(tmp_path: Path) -> None:
    xlsx = tmp_path / "test.xlsx"
    pd.DataFrame({"a": [1]}).to_excel(xlsx, sheet_name="Feuille1", index=False, engine="openpyxl")
    with pytest.raises(SpreadsheetFileError, match="Feuille 'Inexistante' introuvable"):
        load_sheet(xlsx, sheet_name="Inexistante")


def test_build_template_default() -> None:
    df = build_template()
    assert list(df.columns) == HEADER
    assert len(df) == 0


def test_build_template_labels() -> None:
    df = build_template(3, ["ธรรมาภิบาล", "บุคลากร"])
    assert list(df.columns) == ["ชื่อหน่วยงาน", "จังหวัด", "ธรรมาภิบาล", "บุคลากร", "3"]


def test_save_xlsx_truncates_sheet_name(tmp_path: Path) -> None:
    path = tmp_path / "out.xlsx"
    save_xlsx(path, {"x" * 40: pd.DataFrame({"a": [1]})})
    assert list_sheets(path) == ["x" * 31]
