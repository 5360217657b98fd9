"""Restriction de l'espace de recherche par province."""

from __future__ import annotations

from budgetmatch.matching.schema import OrganizationalUnit, Province


def resolve_province(province_name: str, provinces: list[Province]) -> Province | None:
    """
    Retrouve la province de référence correspondant au texte libre du tableur.

    Égalité exacte, ou inclusion dans un sens ou dans l'autre ; la première province
    qui convient (ordre de la base) l'emporte. Un texte vide ne résout aucune province.
    """
    name = province_name.strip()
    if not name:
        return None
    for province in provinces:
        if province.name == name or name in province.name or province.name in name:
            return province
    return None


def get_candidate_units(
    units: list[OrganizationalUnit],
    province: Province | None,
) -> list[OrganizationalUnit]:
    """
    Retourne les unités candidates pour une ligne.

    Si une province est résolue et possède au moins une unité, on se limite à ses unités ;
    sinon on garde l'ensemble complet.
    """
    if province is None:
        return units
    in_province = [u for u in units if u.province_id == province.id]
    return in_province or units
