"""Calcul des scores de similarité entre noms d'unités."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Distance d'édition classique (insertion, suppression, substitution à coût 1, pas de transposition)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Calcule la similarité (0-100) entre deux noms déjà normalisés.

    similarité = (max(len) - distance) / max(len) * 100. Deux chaînes vides = 100.
    Le produit est fait avant la division : 3 éditions sur 10 caractères donnent exactement 70.0.

    Args:
        a: Premier nom.
        b: Second nom.

    Returns:
        Score entre 0 et 100, symétrique.
    """
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 100.0  # Les deux vides = identiques
    distance = levenshtein_distance(a, b)
    return (max_len - distance) * 100 / max_len
