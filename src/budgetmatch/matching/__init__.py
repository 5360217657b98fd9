"""Module de matching et linkage."""

from budgetmatch.matching.linker import UnitMatcher
from budgetmatch.matching.schema import ImportRow, MatchResult, MatchSummary, OrganizationalUnit, Province

__all__ = ["UnitMatcher", "ImportRow", "MatchResult", "MatchSummary", "OrganizationalUnit", "Province"]
