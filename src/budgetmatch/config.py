"""Configuration, exceptions et chargement du fichier config JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

DEFAULT_SIMILARITY_THRESHOLD = 70.0
DEFAULT_CATEGORY_COUNT = 17
BUDDHIST_ERA_OFFSET = 543


class BudgetMatchError(Exception):
    """Exception de base pour budgetmatch."""


class ConfigError(BudgetMatchError, ValueError):
    """Erreur de validation de la configuration."""


class ConfigFileError(BudgetMatchError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


class RequestValidationError(BudgetMatchError, ValueError):
    """Requête d'import invalide (fiscal_year ou data manquants)."""


class ReferenceDataError(BudgetMatchError):
    """Impossible de charger les unités, provinces ou catégories de référence."""


class PersistenceError(BudgetMatchError):
    """Échec d'écriture (suppression ou insertion) des enregistrements budgétaires."""


def current_fiscal_year(today: date | None = None) -> int:
    """
    Retourne l'année fiscale thaïe courante (ère bouddhique).

    L'année fiscale commence en octobre : à partir d'octobre on passe à l'année suivante.
    """
    today = today or date.today()
    thai_year = today.year + BUDDHIST_ERA_OFFSET
    return thai_year + 1 if today.month >= 10 else thai_year


@dataclass
class Config:
    """Configuration principale de budgetmatch."""

    database: str = ""
    sheet: str | None = None  # None = première feuille
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    category_count: int = DEFAULT_CATEGORY_COUNT
    fiscal_year: int | None = None  # None = année fiscale courante

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        database = d.get("database", "")
        threshold = float(d.get("similarity_threshold", DEFAULT_SIMILARITY_THRESHOLD))
        category_count = int(d.get("category_count", DEFAULT_CATEGORY_COUNT))
        fiscal_year = d.get("fiscal_year")

        if not database:
            raise ConfigError("database requis (chemin de la base SQLite)")
        if not 0 <= threshold <= 100:
            raise ConfigError(f"similarity_threshold doit être entre 0 et 100 (got {threshold})")
        if category_count < 1:
            raise ConfigError(f"category_count doit être >= 1 (got {category_count})")
        if fiscal_year is not None:
            if isinstance(fiscal_year, bool) or not isinstance(fiscal_year, int) or fiscal_year <= 0:
                raise ConfigError(f"fiscal_year invalide: {fiscal_year!r}")

        return cls(
            database=database,
            sheet=d.get("sheet"),
            similarity_threshold=threshold,
            category_count=category_count,
            fiscal_year=fiscal_year,
        )

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        config = cls.from_dict(d)
        config.resolve_paths(path.parent)
        return config

    def resolve_paths(self, base_dir: Path) -> None:
        """Résout le chemin de la base par rapport au répertoire de base (ex. dossier du fichier config)."""
        if self.database and self.database != ":memory:" and not Path(self.database).is_absolute():
            self.database = str((Path(base_dir) / self.database).resolve())

    def effective_fiscal_year(self) -> int:
        return self.fiscal_year if self.fiscal_year is not None else current_fiscal_year()
