"""Tests du module config."""

from datetime import date
from pathlib import Path

import pytest

from budgetmatch.config import Config, ConfigError, ConfigFileError, current_fiscal_year


def test_config_defaults() -> None:
    config = Config.from_dict({"database": "budgets.sqlite"})
    assert config.similarity_threshold == 70.0
    assert config.category_count == 17
    assert config.sheet is None
    assert config.fiscal_year is None


def test_config_load_resolves_paths(tmp_path: Path) -> None:
    """Config.load() résout le chemin de la base par rapport au dossier du fichier config."""
    config_path = tmp_path / "config.json"
    config_path.write_text('{"database": "data/budgets.sqlite", "fiscal_year": 2568}', encoding="utf-8")
    config = Config.load(config_path)
    assert Path(config.database).is_absolute()
    assert Path(config.database).parent == (tmp_path / "data").resolve()
    assert config.effective_fiscal_year() == 2568


def test_config_memory_database_not_resolved(tmp_path: Path) -> None:
    config = Config(database=":memory:")
    config.resolve_paths(tmp_path)
    assert config.database == ":memory:"


def test_config_validation_missing_database() -> None:
    with pytest.raises(ConfigError, match="database requis"):
        Config.from_dict({})


def test_config_validation_threshold_out_of_range() -> None:
    with pytest.raises(ConfigError, match="similarity_threshold"):
        Config.from_dict({"database": "x.sqlite", "similarity_threshold": 150})


def test_config_validation_category_count() -> None:
    with pytest.raises(ConfigError, match="category_count"):
        Config.from_dict({"database": "x.sqlite", "category_count": 0})


@pytest.mark.parametrize("year", ["2568", True, -1])
def test_config_validation_fiscal_year(year: object) -> None:
    with pytest.raises(ConfigError, match="fiscal_year invalide"):
        Config.from_dict({"database": "x.sqlite", "fiscal_year": year})


def test_config_load_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigFileError, match="introuvable"):
        Config.load(tmp_path / "inexistant.json")


def test_config_load_invalid_json(tmp_path: Path) -> None:
    bad_json = tmp_path / "config.json"
    bad_json.write_text("{ invalid json }", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="JSON invalide"):
        Config.load(bad_json)


def test_config_load_not_dict(tmp_path: Path) -> None:
    bad_config = tmp_path / "config.json"
    bad_config.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="objet JSON"):
        Config.load(bad_config)


def test_current_fiscal_year() -> None:
    assert current_fiscal_year(date(2024, 9, 30)) == 2567
    assert current_fiscal_year(date(2024, 10, 1)) == 2568
    assert current_fiscal_year(date(2025, 1, 15)) == 2568
