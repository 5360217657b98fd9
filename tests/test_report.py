"""Tests du module report."""

import pytest

from budgetmatch import __version__
from budgetmatch.matching.schema import MatchResult, MatchSummary
from budgetmatch.pipeline import ImportResult, PreviewResult
from budgetmatch.report import build_report_df, build_result_sheets, print_report_console


@pytest.fixture
def matches() -> list[MatchResult]:
    return [
        MatchResult("สสจ.น่าน", "สำนักงานสาธารณสุขจังหวัดน่าน", "o1", "health_office", 100.0, "exact"),
        MatchResult("รพ.น่าน", "โรงพยาบาลน่าน", "h1", "hospital", 75.0, "fuzzy"),
        MatchResult("xyz", None, None, None, 12.5, "unmatched"),
    ]


@pytest.fixture
def import_result(matches: list[MatchResult]) -> ImportResult:
    result = ImportResult(imported=2, matches=matches)
    result.fail("xyz", "no matching unit found")
    return result


def test_build_report_df_preview(matches: list[MatchResult]) -> None:
    result = PreviewResult(MatchSummary.from_matches(matches), matches)
    df = build_report_df(result, 2568, 70.0)
    values = dict(zip(df["Key"], df["Value"]))
    assert values["mode"] == "preview"
    assert values["nb_rows"] == 3
    assert values["nb_exact"] == 1
    assert values["nb_fuzzy"] == 1
    assert values["nb_unmatched"] == 1
    assert values["similarity_threshold"] == 70.0
    assert values["version"] == __version__
    assert "nb_imported" not in values


def test_build_report_df_import(import_result: ImportResult) -> None:
    df = build_report_df(import_result, 2568, 70.0)
    values = dict(zip(df["Key"], df["Value"]))
    assert values["nb_imported"] == 2
    assert values["nb_failed"] == 1


def test_build_result_sheets(import_result: ImportResult) -> None:
    sheets = build_result_sheets(import_result, 2568, 70.0)
    assert list(sheets) == ["MATCHES", "ERRORS", "REPORT"]
    assert sheets["MATCHES"]["matched_to"].tolist()[:2] == ["สำนักงานสาธารณสุขจังหวัดน่าน", "โรงพยาบาลน่าน"]
    assert sheets["ERRORS"].to_dict("records") == [{"unit_name": "xyz", "error": "no matching unit found"}]


def test_build_result_sheets_preview(matches: list[MatchResult]) -> None:
    sheets = build_result_sheets(PreviewResult(MatchSummary.from_matches(matches), matches), 2568, 70.0)
    assert "ERRORS" not in sheets


def test_print_report_console(import_result: ImportResult, capsys: pytest.CaptureFixture[str]) -> None:
    print_report_console(import_result, 2568)
    out = capsys.readouterr().out
    assert "Import budgets" in out
    assert "Importées:        2" in out
    assert "xyz: no matching unit found" in out
