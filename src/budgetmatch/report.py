"""Génération du rapport et des onglets MATCHES / ERRORS / REPORT."""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from budgetmatch import __version__
from budgetmatch.matching.schema import MatchResult, MatchSummary
from budgetmatch.pipeline import ImportResult, PreviewResult

MATCH_COLUMNS = ["unit_name", "matched_to", "matched_id", "matched_type", "similarity", "status"]


def build_matches_df(matches: list[MatchResult]) -> pd.DataFrame:
    """Une ligne par ligne importée, dans l'ordre du tableur."""
    return pd.DataFrame([m.to_dict() for m in matches], columns=MATCH_COLUMNS)


def build_errors_df(result: ImportResult) -> pd.DataFrame:
    return pd.DataFrame([e.to_dict() for e in result.errors], columns=["unit_name", "error"])


def build_report_df(
    result: PreviewResult | ImportResult,
    fiscal_year: int,
    threshold: float,
) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : mode, année fiscale, nb lignes, nb exact / fuzzy / unmatched,
    nb importées / en échec (mode import), seuil, horodatage, version.
    """
    summary = MatchSummary.from_matches(result.matches)
    rows: list[tuple[str, object]] = [
        ("Metric", "Value"),
        ("mode", result.mode),
        ("fiscal_year", fiscal_year),
        ("nb_rows", summary.total),
        ("nb_exact", summary.exact),
        ("nb_fuzzy", summary.fuzzy),
        ("nb_unmatched", summary.unmatched),
    ]
    if isinstance(result, ImportResult):
        rows.extend([("nb_imported", result.imported), ("nb_failed", result.failed)])
    rows.extend(
        [
            ("", ""),
            ("Parameters", ""),
            ("similarity_threshold", threshold),
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )
    return pd.DataFrame(rows, columns=["Key", "Value"])


def build_result_sheets(
    result: PreviewResult | ImportResult,
    fiscal_year: int,
    threshold: float,
) -> dict[str, pd.DataFrame]:
    sheets = {"MATCHES": build_matches_df(result.matches)}
    if isinstance(result, ImportResult):
        sheets["ERRORS"] = build_errors_df(result)
    sheets["REPORT"] = build_report_df(result, fiscal_year, threshold)
    return sheets


def print_report_console(result: PreviewResult | ImportResult, fiscal_year: int) -> None:
    """Affiche un résumé du rapport en console."""
    summary = MatchSummary.from_matches(result.matches)

    print("\n=== Import budgets ===")
    print(f"  Mode:             {result.mode}")
    print(f"  Année fiscale:    {fiscal_year}")
    print(f"  Lignes:           {summary.total}")
    print(f"  Exacts:           {summary.exact}")
    print(f"  Approchés:        {summary.fuzzy}")
    print(f"  Non trouvés:      {summary.unmatched}")
    if isinstance(result, ImportResult):
        print(f"  Importées:        {result.imported}")
        print(f"  En échec:         {result.failed}")
        for err in result.errors:
            print(f"    - {err.unit_name}: {err.error}")
    print(f"  Version:          {__version__}")
    print(f"  Timestamp:        {datetime.now().isoformat()}")
    print("======================\n")
