"""Schémas et types pour le matching des unités."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from budgetmatch.config import DEFAULT_CATEGORY_COUNT, RequestValidationError

UNIT_TYPES = frozenset({"hospital", "health_office"})
STATUS_EXACT = "exact"
STATUS_FUZZY = "fuzzy"
STATUS_UNMATCHED = "unmatched"


@dataclass(frozen=True)
class OrganizationalUnit:
    """Hôpital ou bureau de santé, cible possible d'un match."""

    id: str
    name: str
    unit_type: str  # hospital, health_office
    province_id: str | None = None
    health_region_id: str | None = None  # bureaux de santé uniquement


@dataclass(frozen=True)
class Province:
    id: str
    name: str


def coerce_amount(value: Any) -> float:
    """Montant numérique ; valeur absente ou illisible → 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if value != value else float(value)  # NaN → 0
    try:
        amount = float(str(value).replace(",", "").strip())
    except ValueError:
        return 0.0
    return 0.0 if amount != amount else amount


def zero_filled_budgets(
    budgets: dict[int, float] | None = None,
    category_count: int = DEFAULT_CATEGORY_COUNT,
) -> dict[int, float]:
    """Retourne exactement category_count entrées {ordinal: montant}, les absentes à 0."""
    budgets = budgets or {}
    return {ordinal: coerce_amount(budgets.get(ordinal)) for ordinal in range(1, category_count + 1)}


@dataclass
class ImportRow:
    """
    Une ligne du tableur importé.

    budgets contient toujours exactement category_count entrées : les ordinaux absents
    valent 0 et les ordinaux hors 1..category_count sont ignorés, quel que soit le
    mode de construction.
    """

    unit_name: str
    province: str = ""
    budgets: dict[int, float] = field(default_factory=dict)
    category_count: int = field(default=DEFAULT_CATEGORY_COUNT, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.budgets = zero_filled_budgets(self.budgets, self.category_count)

    @classmethod
    def from_dict(cls, d: Any, category_count: int = DEFAULT_CATEGORY_COUNT) -> ImportRow:
        """
        Construit une ligne depuis le format d'échange {unit_name, province, budgets{"1".."17"}}.

        Les clés de budgets sont des ordinaux (chaînes ou entiers). Les clés non numériques
        et les ordinaux hors 1..category_count sont ignorés. unit_name est conservé tel quel :
        la normalisation se charge des espaces.

        Raises:
            RequestValidationError: Si l'élément n'est pas un objet.
        """
        if not isinstance(d, dict):
            raise RequestValidationError(f"Ligne invalide (objet attendu): {d!r}")
        raw_budgets = d.get("budgets") or {}
        if not isinstance(raw_budgets, dict):
            raise RequestValidationError(f"budgets invalide pour {d.get('unit_name')!r}: objet attendu")

        parsed: dict[int, float] = {}
        for key, amount in raw_budgets.items():
            try:
                ordinal = int(str(key).strip())
            except ValueError:
                continue
            parsed[ordinal] = coerce_amount(amount)

        return cls(
            unit_name=str(d.get("unit_name") or ""),
            province=str(d.get("province") or "").strip(),
            budgets=parsed,
            category_count=category_count,
        )


@dataclass
class MatchResult:
    """Résultat de matching pour une ligne importée."""

    unit_name: str
    matched_unit_name: str | None
    matched_unit_id: str | None
    matched_unit_type: str | None
    similarity: float
    status: str  # exact, fuzzy, unmatched

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_name": self.unit_name,
            "matched_to": self.matched_unit_name,
            "matched_id": self.matched_unit_id,
            "matched_type": self.matched_unit_type,
            "similarity": self.similarity,
            "status": self.status,
        }

    def __repr__(self) -> str:
        return f"MatchResult({self.unit_name!r} -> {self.matched_unit_name!r}, {self.status}, {self.similarity:.1f})"


@dataclass
class MatchSummary:
    total: int = 0
    exact: int = 0
    fuzzy: int = 0
    unmatched: int = 0

    @classmethod
    def from_matches(cls, matches: list[MatchResult]) -> MatchSummary:
        return cls(
            total=len(matches),
            exact=sum(1 for m in matches if m.status == STATUS_EXACT),
            fuzzy=sum(1 for m in matches if m.status == STATUS_FUZZY),
            unmatched=sum(1 for m in matches if m.status == STATUS_UNMATCHED),
        )

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "exact": self.exact, "fuzzy": self.fuzzy, "unmatched": self.unmatched}
