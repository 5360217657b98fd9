"""Tests des types de matching."""

import pytest

from budgetmatch.config import RequestValidationError
from budgetmatch.matching.schema import ImportRow, MatchResult, MatchSummary, coerce_amount, zero_filled_budgets


def test_coerce_amount() -> None:
    assert coerce_amount(5000) == 5000.0
    assert coerce_amount("1,250.50") == 1250.5
    assert coerce_amount(" 12 ") == 12.0
    assert coerce_amount("n/a") == 0.0
    assert coerce_amount(None) == 0.0
    assert coerce_amount(float("nan")) == 0.0
    assert coerce_amount("nan") == 0.0
    assert coerce_amount(True) == 0.0


def test_zero_filled_budgets() -> None:
    budgets = zero_filled_budgets({2: 10, 40: 99})
    assert sorted(budgets) == list(range(1, 18))
    assert budgets[2] == 10
    assert budgets[1] == 0


def test_import_row_default_budgets() -> None:
    assert len(ImportRow("x").budgets) == 17


def test_import_row_from_dict() -> None:
    row = ImportRow.from_dict(
        {"unit_name": " รพ.น่าน ", "province": None, "budgets": {"1": 10, "17": "20", "18": 5, "x": 1}}
    )
    assert row.unit_name == " รพ.น่าน "
    assert row.province == ""
    assert len(row.budgets) == 17
    assert row.budgets[1] == 10
    assert row.budgets[17] == 20
    assert 18 not in row.budgets


def test_import_row_from_dict_missing_budgets() -> None:
    row = ImportRow.from_dict({"unit_name": "a"})
    assert set(row.budgets.values()) == {0.0}


def test_import_row_from_dict_invalid() -> None:
    with pytest.raises(RequestValidationError):
        ImportRow.from_dict("a")
    with pytest.raises(RequestValidationError, match="budgets invalide"):
        ImportRow.from_dict({"unit_name": "a", "budgets": [1, 2]})


def test_match_summary() -> None:
    matches = [
        MatchResult("a", "A", "1", "hospital", 100.0, "exact"),
        MatchResult("b", "B", "2", "hospital", 80.0, "fuzzy"),
        MatchResult("c", None, None, None, 10.0, "unmatched"),
        MatchResult("d", None, None, None, 0.0, "unmatched"),
    ]
    assert MatchSummary.from_matches(matches).to_dict() == {"total": 4, "exact": 1, "fuzzy": 1, "unmatched": 2}


def test_import_row_direct_construction_is_zero_filled() -> None:
    row = ImportRow("โรงพยาบาลลำปาง", "ลำปาง", {1: 100.0, 18: 5.0})
    assert sorted(row.budgets) == list(range(1, 18))
    assert row.budgets[1] == 100.0
    assert row.budgets[17] == 0.0


def test_import_row_category_count() -> None:
    row = ImportRow.from_dict({"unit_name": "a", "budgets": {"3": 1, "4": 2}}, category_count=3)
    assert row.budgets == {1: 0.0, 2: 0.0, 3: 1.0}
