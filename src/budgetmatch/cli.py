"""Interface en ligne de commande budgetmatch."""

from __future__ import annotations

import argparse
import logging
import sys

from budgetmatch import __version__
from budgetmatch.config import DEFAULT_CATEGORY_COUNT, BudgetMatchError, Config
from budgetmatch.io_excel import build_template, list_sheets, load_import_rows, save_xlsx
from budgetmatch.pipeline import MODE_IMPORT, MODE_PREVIEW, ReconciliationPipeline
from budgetmatch.regions import PROVINCE_TO_REGION
from budgetmatch.report import build_result_sheets, print_report_console
from budgetmatch.store import SQLiteStore


def cmd_list_sheets(filepath: str) -> int:
    """Liste les feuilles d'un fichier tableur."""
    sheets = list_sheets(filepath)
    print(f"Feuilles dans {filepath}:")
    for s in sheets:
        print(f"  - {s}")
    return 0


def cmd_template(output_path: str, category_count: int) -> int:
    """Écrit un modèle vierge à remplir."""
    save_xlsx(output_path, {"budgets": build_template(category_count)})
    print(f"Modèle écrit: {output_path}")
    return 0


def cmd_init_db(config_path: str) -> int:
    """Crée le schéma et les données de référence de base (zones, provinces, catégories)."""
    config = Config.load(config_path)
    with SQLiteStore(config.database) as store:
        store.init_schema()
        provinces = store.seed_provinces(PROVINCE_TO_REGION)
        created = store.seed_categories(config.category_count)
    print(f"Base initialisée: {config.database} ({len(provinces)} provinces, {created} catégories créées)")
    return 0


def cmd_run(
    config_path: str,
    input_path: str,
    *,
    mode: str = MODE_PREVIEW,
    output_path: str | None = None,
    fiscal_year: int | None = None,
) -> int:
    """Exécute la prévisualisation ou l'import d'un fichier de budgets."""
    config = Config.load(config_path)
    year = fiscal_year if fiscal_year is not None else config.effective_fiscal_year()
    rows = load_import_rows(input_path, config.sheet, config.category_count)

    with SQLiteStore(config.database) as store:
        pipeline = ReconciliationPipeline(store, threshold=config.similarity_threshold)
        result = pipeline.run(rows, year, mode)

    print_report_console(result, year)

    if output_path:
        save_xlsx(output_path, build_result_sheets(result, year, config.similarity_threshold))
        print(f"Fichier de sortie: {output_path}")

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="budgetmatch",
        description="Import des budgets par unité (rapprochement approché des noms d'unités)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Journalisation détaillée")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    # list-sheets
    p_list = subparsers.add_parser("list-sheets", help="Lister les feuilles d'un tableur")
    p_list.add_argument("file", help="Fichier tableur")

    # template
    p_tpl = subparsers.add_parser("template", help="Écrire un modèle xlsx vierge")
    p_tpl.add_argument("output", help="Fichier xlsx de sortie")
    p_tpl.add_argument("--categories", type=int, default=DEFAULT_CATEGORY_COUNT, help="Nombre de catégories")

    # init-db
    p_init = subparsers.add_parser("init-db", help="Créer la base SQLite de référence")
    p_init.add_argument("--config", "-c", required=True, help="Fichier config JSON")

    # preview / import
    for name, help_text in ((MODE_PREVIEW, "Prévisualiser le rapprochement"), (MODE_IMPORT, "Importer les budgets")):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("file", help="Fichier de budgets (xlsx, xls, ods, csv)")
        p.add_argument("--config", "-c", required=True, help="Fichier config JSON")
        p.add_argument("--output", "-o", help="Fichier xlsx de résultats")
        p.add_argument("--fiscal-year", "-y", type=int, help="Année fiscale (ère bouddhique)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "list-sheets":
            return cmd_list_sheets(args.file)
        if args.command == "template":
            return cmd_template(args.output, args.categories)
        if args.command == "init-db":
            return cmd_init_db(args.config)
        if args.command in (MODE_PREVIEW, MODE_IMPORT):
            return cmd_run(
                args.config,
                args.file,
                mode=args.command,
                output_path=args.output,
                fiscal_year=args.fiscal_year,
            )
    except BudgetMatchError as e:
        print(f"Erreur: {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
