"""I/O tableurs : lecture du fichier de budgets, modèle vierge, export des résultats."""

from __future__ import annotations

import csv
from pathlib import Path

import pandas as pd

from budgetmatch.config import DEFAULT_CATEGORY_COUNT, BudgetMatchError
from budgetmatch.matching.schema import ImportRow, coerce_amount
from budgetmatch.normalize import safe_str

SUPPORTED_INPUT_EXTENSIONS = (".xlsx", ".xls", ".ods", ".csv")
# utf-8-sig absorbe le BOM d'Excel ; cp874 = export CSV Excel sous Windows thaï
CSV_ENCODINGS = ("utf-8-sig", "cp874")
TEMPLATE_COLUMNS = ("ชื่อหน่วยงาน", "จังหวัด")


class SpreadsheetFileError(BudgetMatchError):
    """Erreur de chargement d'un fichier (fichier absent, feuille inexistante, format illisible)."""


def _get_engine(path: Path) -> str | None:
    """Retourne le moteur pandas selon l'extension, ou None pour auto."""
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return "openpyxl"
    if suffix == ".xls":
        return "xlrd"
    if suffix == ".ods":
        return "odf"
    return None


def _is_csv(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def _detect_csv_delimiter(path: Path, encoding: str) -> str:
    with path.open("r", encoding=encoding) as f:
        sample_lines = [line for line in (f.readline() for _ in range(5)) if line.strip()]
    if not sample_lines:
        return ","
    try:
        return csv.Sniffer().sniff("".join(sample_lines), delimiters=[",", ";", "\t", "|"]).delimiter
    except csv.Error:
        first = sample_lines[0]
        counts = {d: first.count(d) for d in [",", ";", "\t", "|"]}
        best = max(counts, key=lambda d: counts[d])
        return best if counts[best] > 0 else ","


def _open_excel(path: Path) -> pd.ExcelFile:
    try:
        engine = _get_engine(path)
        return pd.ExcelFile(path, engine=engine) if engine else pd.ExcelFile(path)
    except ImportError as e:
        ext = path.suffix.lower()
        if ext == ".xls":
            raise SpreadsheetFileError("Format .xls requis: pip install xlrd") from e
        if ext == ".ods":
            raise SpreadsheetFileError("Format ODS requis: pip install odfpy") from e
        raise SpreadsheetFileError(f"Impossible de lire {path}: {e}") from e
    except Exception as e:
        raise SpreadsheetFileError(f"Impossible de lire le fichier {path}: {e}") from e


def list_sheets(filepath: str | Path) -> list[str]:
    """
    Liste les noms des feuilles d'un fichier tableur (une seule "feuille" pour CSV).

    Raises:
        SpreadsheetFileError: Si le fichier est absent ou illisible.
    """
    path = Path(filepath)
    if not path.exists():
        raise SpreadsheetFileError(f"Fichier introuvable: {path}")
    if _is_csv(path):
        return ["(données)"]
    return [str(s) for s in _open_excel(path).sheet_names]


def load_sheet(filepath: str | Path, sheet_name: str | None = None) -> pd.DataFrame:
    """
    Charge une feuille sans en-têtes (toutes les cellules en texte, colonnes numérotées).

    Formats supportés : .xlsx, .xls, .ods, .csv.

    Raises:
        SpreadsheetFileError: Si le fichier est absent, illisible ou si la feuille n'existe pas.
    """
    path = Path(filepath)
    if not path.exists():
        raise SpreadsheetFileError(f"Fichier introuvable: {path}")

    if _is_csv(path):
        last_error: Exception | None = None
        for encoding in CSV_ENCODINGS:
            try:
                delimiter = _detect_csv_delimiter(path, encoding)
                return pd.read_csv(path, dtype=str, header=None, encoding=encoding, sep=delimiter)
            except UnicodeDecodeError as e:
                last_error = e
            except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
                raise SpreadsheetFileError(f"Erreur CSV {path}: {e}. Vérifiez le séparateur.") from e
        raise SpreadsheetFileError(f"Encodage CSV non reconnu pour {path}: {last_error}")

    xl = _open_excel(path)
    if sheet_name is None:
        sheet_name = str(xl.sheet_names[0])
    elif sheet_name not in xl.sheet_names:
        sheets = [str(s) for s in xl.sheet_names]
        raise SpreadsheetFileError(f"Feuille '{sheet_name}' introuvable dans {path}. Feuilles: {', '.join(sheets)}")

    try:
        return pd.read_excel(xl, sheet_name=sheet_name, dtype=str, header=None)
    except Exception as e:
        raise SpreadsheetFileError(f"Erreur feuille '{sheet_name}' dans {path}: {e}") from e


def parse_budget_rows(df: pd.DataFrame, category_count: int = DEFAULT_CATEGORY_COUNT) -> list[ImportRow]:
    """
    Convertit une feuille brute en lignes d'import.

    Ligne 1 = en-têtes (ignorée). Colonne A = nom d'unité, B = province,
    C.. = budgets des catégories 1..category_count. Les lignes sans nom d'unité sont
    ignorées ; les cellules manquantes ou illisibles valent 0.
    """
    rows: list[ImportRow] = []
    for values in df.iloc[1:].itertuples(index=False, name=None):
        cells = list(values)
        unit_name = safe_str(cells[0]).strip() if cells else ""
        if not unit_name:
            continue
        province = safe_str(cells[1]).strip() if len(cells) > 1 else ""
        budgets = {
            ordinal: coerce_amount(cells[ordinal + 1]) if ordinal + 1 < len(cells) else 0.0
            for ordinal in range(1, category_count + 1)
        }
        rows.append(ImportRow(unit_name, province, budgets, category_count))
    return rows


def load_import_rows(
    filepath: str | Path,
    sheet_name: str | None = None,
    category_count: int = DEFAULT_CATEGORY_COUNT,
) -> list[ImportRow]:
    """Charge et convertit un fichier de budgets."""
    return parse_budget_rows(load_sheet(filepath, sheet_name), category_count)


def build_template(
    category_count: int = DEFAULT_CATEGORY_COUNT,
    category_names: list[str] | None = None,
) -> pd.DataFrame:
    """Feuille vierge : nom d'unité, province, puis une colonne par catégorie (ordinal ou libellé)."""
    labels = list(category_names or [])
    headers = [labels[i] if i < len(labels) else str(i + 1) for i in range(category_count)]
    return pd.DataFrame(columns=[*TEMPLATE_COLUMNS, *headers])


def save_xlsx(
    filepath: str | Path,
    dataframes: dict[str, pd.DataFrame],
    *,
    index: bool = False,
) -> None:
    """
    Sauvegarde plusieurs DataFrames dans un fichier xlsx (une feuille par DataFrame).

    Args:
        filepath: Chemin de sortie.
        dataframes: Dict {nom_feuille: DataFrame}.
    """
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in dataframes.items():
            # Excel limite les noms de feuille à 31 caractères
            safe_name = str(sheet_name)[:31]
            df.to_excel(writer, sheet_name=safe_name, index=index)
