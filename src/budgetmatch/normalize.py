"""Normalisation des noms d'unités (hôpitaux, bureaux de santé)."""

from __future__ import annotations

import re
from typing import Any

# Abréviations courantes en tête de nom, testées dans l'ordre : seule la première qui s'applique est développée.
# Pas de NFKC ici : il décompose le sara am (ำ) et casserait la comparaison avec la base.
ABBREVIATION_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^สสจ\.?\s*", re.IGNORECASE), "สำนักงานสาธารณสุขจังหวัด"),
    (re.compile(r"^สสอ\.?\s*", re.IGNORECASE), "สำนักงานสาธารณสุขอำเภอ"),
    (re.compile(r"^รพท\.?\s*", re.IGNORECASE), "โรงพยาบาลทั่วไป"),
    (re.compile(r"^รพศ\.?\s*", re.IGNORECASE), "โรงพยาบาลศูนย์"),
    (re.compile(r"^รพช\.?\s*", re.IGNORECASE), "โรงพยาบาลชุมชน"),
    (re.compile(r"^รพ\.?\s*", re.IGNORECASE), "รพ."),  # forme courte canonique, pas de développement
    (re.compile(r"^สนง\.?เขต\s*", re.IGNORECASE), "สำนักงานเขตสุขภาพที่"),
    (re.compile(r"^สบส\.?\s*", re.IGNORECASE), "สำนักงานสนับสนุนบริการสุขภาพ"),
)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(s: str) -> str:
    """Espaces multiples → espace simple, puis strip."""
    return _WHITESPACE.sub(" ", s).strip()


def normalize_unit_name(name: str) -> str:
    """
    Canonicalise un nom d'unité saisi librement.

    - strip ;
    - développe au plus une abréviation de tête (สสจ., สสอ., รพท., รพศ., รพช., รพ., สนง.เขต, สบส.) ;
    - espaces multiples → espace simple.

    Args:
        name: Nom brut (tableur ou base de référence).

    Returns:
        Nom normalisé. Sans abréviation reconnue, seul l'espacement change.
    """
    normalized = name.strip()
    for pattern, replacement in ABBREVIATION_RULES:
        if pattern.match(normalized):
            normalized = pattern.sub(replacement, normalized, count=1)
            break
    return collapse_whitespace(normalized)


def safe_str(val: Any) -> str:
    """Convertit une valeur en chaîne pour affichage/stockage."""
    if val is None or (isinstance(val, float) and (val != val or val == float("inf"))):
        return ""
    return str(val)
