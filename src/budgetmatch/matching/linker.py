"""Moteur de linkage : rapprochement des lignes importées avec les unités de référence."""

from __future__ import annotations

import math

from budgetmatch.config import DEFAULT_SIMILARITY_THRESHOLD
from budgetmatch.matching.blockers import get_candidate_units, resolve_province
from budgetmatch.matching.schema import (
    STATUS_EXACT,
    STATUS_FUZZY,
    STATUS_UNMATCHED,
    ImportRow,
    MatchResult,
    OrganizationalUnit,
    Province,
)
from budgetmatch.matching.scorers import similarity
from budgetmatch.normalize import normalize_unit_name


def round_similarity(score: float) -> float:
    """Arrondi à une décimale, demi vers le haut."""
    return math.floor(score * 10 + 0.5) / 10


class UnitMatcher:
    """Rapproche un nom d'unité saisi librement d'une unité de référence (hôpital ou bureau de santé)."""

    def __init__(
        self,
        units: list[OrganizationalUnit],
        provinces: list[Province],
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        self.units = list(units)
        self.provinces = list(provinces)
        self.threshold = threshold
        # Les unités ne changent pas pendant un import : on normalise une seule fois
        self._normalized = {id(u): normalize_unit_name(u.name) for u in self.units}

    def match(self, unit_name: str, province_name: str = "") -> MatchResult:
        """
        Trouve la meilleure unité pour un nom.

        Ordre : match exact (nom normalisé ou nom brut identique), puis fuzzy dans la province,
        puis fuzzy sur l'ensemble si la province ne donne rien. En cas d'égalité de score,
        le premier candidat rencontré est conservé.

        Returns:
            MatchResult avec status exact, fuzzy ou unmatched.
        """
        normalized = normalize_unit_name(unit_name)

        for unit in self.units:
            if self._normalized[id(unit)] == normalized or unit.name == unit_name:
                return self._matched(unit_name, unit, 100.0, STATUS_EXACT)

        province = resolve_province(province_name, self.provinces)
        candidates = get_candidate_units(self.units, province)

        best_unit, best_score = self._best_candidate(normalized, candidates, None, 0.0)
        if best_unit is not None and best_score >= self.threshold:
            return self._matched(unit_name, best_unit, best_score, STATUS_FUZZY)

        if province is not None:
            best_unit, best_score = self._best_candidate(normalized, self.units, best_unit, best_score)
            if best_unit is not None and best_score >= self.threshold:
                return self._matched(unit_name, best_unit, best_score, STATUS_FUZZY)

        return MatchResult(
            unit_name=unit_name,
            matched_unit_name=None,
            matched_unit_id=None,
            matched_unit_type=None,
            similarity=round_similarity(best_score),
            status=STATUS_UNMATCHED,
        )

    def match_row(self, row: ImportRow) -> MatchResult:
        return self.match(row.unit_name, row.province)

    def run(self, rows: list[ImportRow]) -> list[MatchResult]:
        """Exécute le matching pour toutes les lignes, dans l'ordre d'entrée."""
        return [self.match_row(row) for row in rows]

    def _best_candidate(
        self,
        normalized: str,
        candidates: list[OrganizationalUnit],
        best_unit: OrganizationalUnit | None,
        best_score: float,
    ) -> tuple[OrganizationalUnit | None, float]:
        for unit in candidates:
            score = similarity(normalized, self._normalized[id(unit)])
            if score > best_score:  # strict : à égalité, le premier reste
                best_unit, best_score = unit, score
        return best_unit, best_score

    @staticmethod
    def _matched(unit_name: str, unit: OrganizationalUnit, score: float, status: str) -> MatchResult:
        rounded = round_similarity(score)
        if status == STATUS_FUZZY:
            rounded = min(rounded, 99.9)  # 100 réservé aux matchs exacts
        return MatchResult(
            unit_name=unit_name,
            matched_unit_name=unit.name,
            matched_unit_id=unit.id,
            matched_unit_type=unit.unit_type,
            similarity=rounded,
            status=status,
        )
