"""Pipeline de réconciliation : matching de toutes les lignes, puis prévisualisation ou import."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from budgetmatch.config import (
    DEFAULT_CATEGORY_COUNT,
    DEFAULT_SIMILARITY_THRESHOLD,
    BudgetMatchError,
    Config,
    PersistenceError,
    RequestValidationError,
)
from budgetmatch.matching.linker import UnitMatcher
from budgetmatch.matching.schema import (
    STATUS_UNMATCHED,
    ImportRow,
    MatchResult,
    MatchSummary,
    OrganizationalUnit,
    Province,
)
from budgetmatch.store import BudgetRecord, BudgetStore

logger = logging.getLogger(__name__)

MODE_PREVIEW = "preview"
MODE_IMPORT = "import"
VALID_MODES = frozenset({MODE_PREVIEW, MODE_IMPORT})

UNMATCHED_ERROR = "no matching unit found"
INVALID_BODY_ERROR = "Invalid request body. Required: fiscal_year, data[]"


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Unités, provinces et catégories lues une fois, figées pour la durée d'un import."""

    units: tuple[OrganizationalUnit, ...]
    provinces: tuple[Province, ...]
    category_map: dict[int, str]

    @classmethod
    def load(cls, store: BudgetStore) -> ReferenceSnapshot:
        """
        Raises:
            ReferenceDataError: Si une des listes ne peut pas être chargée.
        """
        return cls(
            units=tuple(store.fetch_units()),
            provinces=tuple(store.fetch_provinces()),
            category_map=dict(store.fetch_category_map()),
        )


@dataclass
class RowError:
    unit_name: str
    error: str

    def to_dict(self) -> dict[str, str]:
        return {"unit_name": self.unit_name, "error": self.error}


@dataclass
class PreviewResult:
    summary: MatchSummary
    matches: list[MatchResult]
    mode: str = MODE_PREVIEW

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "mode": MODE_PREVIEW,
            "summary": self.summary.to_dict(),
            "matches": [m.to_dict() for m in self.matches],
        }


@dataclass
class ImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[RowError] = field(default_factory=list)
    matches: list[MatchResult] = field(default_factory=list)
    mode: str = MODE_IMPORT

    def fail(self, unit_name: str, error: str) -> None:
        self.failed += 1
        self.errors.append(RowError(unit_name, error))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "mode": MODE_IMPORT,
            "imported": self.imported,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
            "matches": [m.to_dict() for m in self.matches],
        }


class UnitLockRegistry:
    """
    Un verrou par (unité, année fiscale) pour ne pas entrelacer deux suppressions/réinsertions.

    Un verrou n'existe que tant qu'un appelant le détient ou l'attend.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, int], threading.Lock] = {}
        self._users: dict[tuple[str, int], int] = {}

    @contextmanager
    def hold(self, unit_id: str, fiscal_year: int) -> Iterator[None]:
        key = (unit_id, fiscal_year)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]


# Partagé par tous les pipelines du processus (requêtes et CLI)
DEFAULT_LOCKS = UnitLockRegistry()


class ReconciliationPipeline:
    """Orchestre le matching et l'écriture des budgets pour un import."""

    def __init__(
        self,
        store: BudgetStore,
        *,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        locks: UnitLockRegistry | None = None,
    ) -> None:
        self.store = store
        self.threshold = threshold
        self.locks = locks if locks is not None else DEFAULT_LOCKS

    def run(
        self,
        rows: list[ImportRow],
        fiscal_year: int,
        mode: str = MODE_PREVIEW,
        reference: ReferenceSnapshot | None = None,
    ) -> PreviewResult | ImportResult:
        """
        Exécute le pipeline.

        Le matching porte toujours sur toutes les lignes, dans l'ordre d'entrée ; matches[i]
        correspond à rows[i]. En mode import, chaque ligne est indépendante : une erreur
        (unité introuvable, échec d'écriture) est enregistrée et la ligne suivante est traitée.
        Il n'y a pas de transaction globale : les lignes déjà écrites restent écrites.

        Args:
            rows: Lignes importées.
            fiscal_year: Année fiscale (clé opaque).
            mode: preview ou import.
            reference: Données de référence déjà chargées (sinon lues depuis le store).

        Raises:
            RequestValidationError: Mode inconnu.
            ReferenceDataError: Données de référence indisponibles (aucune ligne traitée).
        """
        if mode not in VALID_MODES:
            raise RequestValidationError(f"mode invalide: {mode!r}. Valides: {sorted(VALID_MODES)}")

        logger.info("Traitement de %d lignes pour l'année fiscale %s, mode: %s", len(rows), fiscal_year, mode)
        reference = reference or ReferenceSnapshot.load(self.store)

        matcher = UnitMatcher(list(reference.units), list(reference.provinces), self.threshold)
        matches = matcher.run(rows)

        if mode == MODE_PREVIEW:
            summary = MatchSummary.from_matches(matches)
            logger.info("Prévisualisation terminée: %s", summary.to_dict())
            return PreviewResult(summary=summary, matches=matches)

        result = ImportResult(matches=matches)
        for row, match in zip(rows, matches):
            if match.status == STATUS_UNMATCHED or not match.matched_unit_id:
                result.fail(row.unit_name, UNMATCHED_ERROR)
                continue

            records = self._build_records(row, match, fiscal_year, reference.category_map)
            try:
                with self.locks.hold(match.matched_unit_id, fiscal_year):
                    self.store.replace_budget_records(
                        match.matched_unit_id,
                        match.matched_unit_type or "",
                        fiscal_year,
                        records,
                    )
            except PersistenceError as e:
                logger.error("Erreur d'écriture pour %s: %s", row.unit_name, e)
                result.fail(row.unit_name, str(e))
                continue
            except Exception as e:
                logger.exception("Erreur inattendue à l'écriture de %s", row.unit_name)
                result.fail(row.unit_name, str(e) or type(e).__name__)
                continue
            result.imported += 1

        logger.info("Import terminé: %d réussies, %d en échec", result.imported, result.failed)
        return result

    @staticmethod
    def _build_records(
        row: ImportRow,
        match: MatchResult,
        fiscal_year: int,
        category_map: dict[int, str],
    ) -> list[BudgetRecord]:
        records: list[BudgetRecord] = []
        for ordinal, amount in row.budgets.items():
            category_id = category_map.get(ordinal)
            if not category_id:
                logger.warning("Ordinal de catégorie inconnu: %s", ordinal)
                continue
            records.append(
                BudgetRecord.for_unit(
                    match.matched_unit_id or "",
                    match.matched_unit_type or "",
                    fiscal_year,
                    category_id,
                    amount,
                )
            )
        return records


def parse_request(body: Any, category_count: int = DEFAULT_CATEGORY_COUNT) -> tuple[int, list[ImportRow], str]:
    """
    Valide le corps de requête {fiscal_year, data[], mode}.

    Returns:
        (fiscal_year, rows, mode)

    Raises:
        RequestValidationError: fiscal_year absent/invalide, data absent ou non-liste, mode inconnu.
    """
    if not isinstance(body, dict):
        raise RequestValidationError(INVALID_BODY_ERROR)
    fiscal_year = body.get("fiscal_year")
    data = body.get("data")
    if isinstance(fiscal_year, bool) or not isinstance(fiscal_year, int) or not fiscal_year:
        raise RequestValidationError(INVALID_BODY_ERROR)
    if not isinstance(data, list):
        raise RequestValidationError(INVALID_BODY_ERROR)

    mode = body.get("mode") or MODE_PREVIEW
    if mode not in VALID_MODES:
        raise RequestValidationError(f"mode invalide: {mode!r}. Valides: {sorted(VALID_MODES)}")

    rows = [ImportRow.from_dict(item, category_count) for item in data]
    return fiscal_year, rows, mode


def handle_request(
    body: Any,
    store: BudgetStore,
    config: Config | None = None,
    locks: UnitLockRegistry | None = None,
) -> dict[str, Any]:
    """
    Point d'entrée d'une requête d'import (après contrôle d'authentification par l'appelant).

    Returns:
        Enveloppe de réponse : succès preview/import, ou {"error": message}.
    """
    threshold = config.similarity_threshold if config else DEFAULT_SIMILARITY_THRESHOLD
    category_count = config.category_count if config else DEFAULT_CATEGORY_COUNT
    try:
        fiscal_year, rows, mode = parse_request(body, category_count)
        pipeline = ReconciliationPipeline(store, threshold=threshold, locks=locks)
        return pipeline.run(rows, fiscal_year, mode).to_dict()
    except RequestValidationError as e:
        logger.warning("Requête invalide: %s", e)
        return {"error": str(e)}
    except BudgetMatchError as e:
        logger.error("Erreur dans import-budget: %s", e)
        return {"error": str(e)}
    except Exception as e:
        logger.exception("Erreur inattendue dans import-budget")
        return {"error": str(e) or "Unknown error"}
