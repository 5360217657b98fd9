"""budgetmatch - Import des budgets par unité avec rapprochement des noms d'hôpitaux et de bureaux de santé."""

__version__ = "0.1.0"

from budgetmatch.config import (  # noqa: E402
    BudgetMatchError,
    ConfigError,
    ConfigFileError,
    PersistenceError,
    ReferenceDataError,
    RequestValidationError,
)
from budgetmatch.io_excel import SpreadsheetFileError  # noqa: E402

__all__ = [
    "__version__",
    "BudgetMatchError",
    "ConfigError",
    "ConfigFileError",
    "PersistenceError",
    "ReferenceDataError",
    "RequestValidationError",
    "SpreadsheetFileError",
]
