"""Graph package - family relationship engine over a member repository."""

from kinship.graph.models import (
    AncestorTree,
    DescendantTree,
    FamilyView,
    FanChartEntry,
    IntegrityIssue,
    LinkResult,
    SiblingEntry,
)
from kinship.graph.repository import MemberRepository, SqliteMemberRepository
from kinship.graph.family.graph import FamilyGraph

__all__ = [
    "AncestorTree",
    "DescendantTree",
    "FamilyView",
    "FanChartEntry",
    "IntegrityIssue",
    "LinkResult",
    "SiblingEntry",
    "MemberRepository",
    "SqliteMemberRepository",
    "FamilyGraph",
]
