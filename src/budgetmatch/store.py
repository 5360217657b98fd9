"""Données de référence et persistance des budgets (SQLite)."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from budgetmatch.config import PersistenceError, ReferenceDataError
from budgetmatch.matching.schema import OrganizationalUnit, Province

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS health_regions (
    id TEXT PRIMARY KEY,
    region_number INTEGER NOT NULL UNIQUE,
    name TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS provinces (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    health_region_id TEXT REFERENCES health_regions(id)
);
CREATE TABLE IF NOT EXISTS hospitals (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    province_id TEXT REFERENCES provinces(id)
);
CREATE TABLE IF NOT EXISTS health_offices (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    province_id TEXT REFERENCES provinces(id),
    health_region_id TEXT REFERENCES health_regions(id)
);
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    code TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    order_number INTEGER NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS budget_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hospital_id TEXT REFERENCES hospitals(id),
    health_office_id TEXT REFERENCES health_offices(id),
    fiscal_year INTEGER NOT NULL,
    category_id TEXT NOT NULL REFERENCES categories(id),
    budget_amount REAL NOT NULL DEFAULT 0,
    created_by TEXT,
    CHECK ((hospital_id IS NULL) <> (health_office_id IS NULL))
);
CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_hospital
    ON budget_records(hospital_id, fiscal_year, category_id) WHERE hospital_id IS NOT NULL;
CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_health_office
    ON budget_records(health_office_id, fiscal_year, category_id) WHERE health_office_id IS NOT NULL;
"""


@dataclass
class BudgetRecord:
    """Montant budgétaire d'une unité pour une année fiscale et une catégorie."""

    hospital_id: str | None
    health_office_id: str | None
    fiscal_year: int
    category_id: str
    budget_amount: float = 0.0
    created_by: str | None = None

    @classmethod
    def for_unit(
        cls,
        unit_id: str,
        unit_type: str,
        fiscal_year: int,
        category_id: str,
        amount: float | None,
    ) -> BudgetRecord:
        return cls(
            hospital_id=unit_id if unit_type == "hospital" else None,
            health_office_id=unit_id if unit_type == "health_office" else None,
            fiscal_year=fiscal_year,
            category_id=category_id,
            budget_amount=amount or 0.0,
        )


def _unit_column(unit_type: str) -> str:
    if unit_type == "hospital":
        return "hospital_id"
    if unit_type == "health_office":
        return "health_office_id"
    raise PersistenceError(f"Type d'unité inconnu: {unit_type!r}")


class BudgetStore(ABC):
    """Frontière de persistance utilisée par le pipeline d'import."""

    @abstractmethod
    def fetch_units(self) -> list[OrganizationalUnit]:
        """Hôpitaux puis bureaux de santé, dans l'ordre de stockage."""

    @abstractmethod
    def fetch_provinces(self) -> list[Province]: ...

    @abstractmethod
    def fetch_category_map(self) -> dict[int, str]:
        """{ordinal (1..17): id de catégorie}."""

    @abstractmethod
    def delete_budget_records(self, unit_id: str, unit_type: str, fiscal_year: int) -> None: ...

    @abstractmethod
    def insert_budget_records(self, records: list[BudgetRecord]) -> None: ...

    def replace_budget_records(
        self,
        unit_id: str,
        unit_type: str,
        fiscal_year: int,
        records: list[BudgetRecord],
    ) -> None:
        """Supprime puis réinsère les budgets d'une unité pour une année fiscale."""
        self.delete_budget_records(unit_id, unit_type, fiscal_year)
        if records:
            self.insert_budget_records(records)


class SQLiteStore(BudgetStore):
    """Implémentation SQLite de BudgetStore."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        self.path = str(path)
        self.conn = sqlite3.connect(self.path)
        self.conn.execute("PRAGMA foreign_keys = ON")

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def init_schema(self) -> None:
        with self.conn:
            self.conn.executescript(SCHEMA)

    # --- Lecture des données de référence ---

    def _fetch(self, query: str, what: str, params: tuple = ()) -> list[tuple]:
        try:
            return self.conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise ReferenceDataError(f"Impossible de charger {what}: {e}") from e

    def fetch_units(self) -> list[OrganizationalUnit]:
        hospitals = self._fetch("SELECT id, name, province_id FROM hospitals ORDER BY rowid", "hospitals")
        offices = self._fetch(
            "SELECT id, name, province_id, health_region_id FROM health_offices ORDER BY rowid",
            "health_offices",
        )
        units = [OrganizationalUnit(id=r[0], name=r[1], unit_type="hospital", province_id=r[2]) for r in hospitals]
        units.extend(
            OrganizationalUnit(id=r[0], name=r[1], unit_type="health_office", province_id=r[2], health_region_id=r[3])
            for r in offices
        )
        return units

    def fetch_provinces(self) -> list[Province]:
        rows = self._fetch("SELECT id, name FROM provinces ORDER BY rowid", "provinces")
        return [Province(id=r[0], name=r[1]) for r in rows]

    def fetch_category_map(self) -> dict[int, str]:
        rows = self._fetch("SELECT order_number, id FROM categories ORDER BY order_number", "categories")
        if not rows:
            raise ReferenceDataError("Aucune catégorie budgétaire dans la base")
        return {int(order): cat_id for order, cat_id in rows}

    def fetch_budget_records(self, fiscal_year: int) -> list[BudgetRecord]:
        rows = self._fetch(
            "SELECT hospital_id, health_office_id, fiscal_year, category_id, budget_amount, created_by "
            "FROM budget_records WHERE fiscal_year = ? ORDER BY id",
            "budget_records",
            (fiscal_year,),
        )
        return [BudgetRecord(*r) for r in rows]

    # --- Écriture des budgets ---

    def delete_budget_records(self, unit_id: str, unit_type: str, fiscal_year: int) -> None:
        column = _unit_column(unit_type)
        try:
            with self.conn:
                self.conn.execute(
                    f"DELETE FROM budget_records WHERE fiscal_year = ? AND {column} = ?",
                    (fiscal_year, unit_id),
                )
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def insert_budget_records(self, records: list[BudgetRecord]) -> None:
        try:
            with self.conn:
                self._insert(records)
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def replace_budget_records(
        self,
        unit_id: str,
        unit_type: str,
        fiscal_year: int,
        records: list[BudgetRecord],
    ) -> None:
        """Suppression + insertion dans une seule transaction : l'unité garde ses anciens budgets en cas d'échec."""
        column = _unit_column(unit_type)
        try:
            with self.conn:
                self.conn.execute(
                    f"DELETE FROM budget_records WHERE fiscal_year = ? AND {column} = ?",
                    (fiscal_year, unit_id),
                )
                self._insert(records)
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def _insert(self, records: list[BudgetRecord]) -> None:
        self.conn.executemany(
            "INSERT INTO budget_records "
            "(hospital_id, health_office_id, fiscal_year, category_id, budget_amount, created_by) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [
                (r.hospital_id, r.health_office_id, r.fiscal_year, r.category_id, r.budget_amount, r.created_by)
                for r in records
            ],
        )

    # --- Alimentation des données de référence ---

    def seed_provinces(self, province_to_region: Mapping[str, int]) -> dict[str, str]:
        """
        Crée les zones de santé et les provinces à partir de la table province → zone.

        Les entrées déjà présentes (même nom / même numéro) sont conservées.

        Returns:
            {nom de province: id}
        """
        with self.conn:
            for number in sorted(set(province_to_region.values())):
                self.conn.execute(
                    "INSERT OR IGNORE INTO health_regions (id, region_number, name) VALUES (?, ?, ?)",
                    (f"region-{number}", number, f"เขตสุขภาพที่ {number}"),
                )
            for name, number in province_to_region.items():
                self.conn.execute(
                    "INSERT OR IGNORE INTO provinces (id, name, health_region_id) VALUES (?, ?, ?)",
                    (str(uuid.uuid4()), name, f"region-{number}"),
                )
        rows = self.conn.execute("SELECT name, id FROM provinces").fetchall()
        logger.info("%d provinces en base", len(rows))
        return dict(rows)

    def add_province(self, name: str, province_id: str | None = None) -> str:
        province_id = province_id or str(uuid.uuid4())
        with self.conn:
            self.conn.execute("INSERT INTO provinces (id, name) VALUES (?, ?)", (province_id, name))
        return province_id

    def add_hospital(self, name: str, province_id: str | None = None, unit_id: str | None = None) -> str:
        unit_id = unit_id or str(uuid.uuid4())
        with self.conn:
            self.conn.execute(
                "INSERT INTO hospitals (id, name, province_id) VALUES (?, ?, ?)",
                (unit_id, name, province_id),
            )
        return unit_id

    def add_health_office(
        self,
        name: str,
        province_id: str | None = None,
        health_region_id: str | None = None,
        unit_id: str | None = None,
    ) -> str:
        unit_id = unit_id or str(uuid.uuid4())
        with self.conn:
            self.conn.execute(
                "INSERT INTO health_offices (id, name, province_id, health_region_id) VALUES (?, ?, ?, ?)",
                (unit_id, name, province_id, health_region_id),
            )
        return unit_id

    def add_category(self, order_number: int, code: str, name: str = "", category_id: str | None = None) -> str:
        category_id = category_id or str(uuid.uuid4())
        with self.conn:
            self.conn.execute(
                "INSERT INTO categories (id, code, name, order_number) VALUES (?, ?, ?, ?)",
                (category_id, code, name, order_number),
            )
        return category_id

    def seed_categories(self, category_count: int) -> int:
        """
        Crée les catégories 1..category_count si la table est vide.

        Returns:
            Nombre de catégories créées.
        """
        existing = self.conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
        if existing:
            return 0
        for order in range(1, category_count + 1):
            self.add_category(order, f"CAT{order:02d}", category_id=f"category-{order}")
        return category_count
