"""Shared data models for graph operations.

These are the plain structures returned by the tree builders, the family
composer, and the link maintainer. They hold fetched Person records and
carry no database logic.
"""

from dataclasses import dataclass, field
from typing import Optional

from kinship.models import Person, RelationKind, SiblingType


def _dump(persons: list[Person]) -> list[dict]:
    return [p.model_dump(mode="json") for p in persons]


@dataclass
class IntegrityIssue:
    """Broken symmetry between two records, reported but never repaired."""
    person_id: int
    other_id: int
    kind: str  # parent_child, spouse, sibling, sibling_type, parent_cap
    detail: str

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "other_id": self.other_id,
            "kind": self.kind,
            "detail": self.detail,
        }


@dataclass
class SiblingEntry:
    """Sibling with its effective type (None when undetermined)."""
    person: Person
    type: Optional[SiblingType] = None

    def to_dict(self) -> dict:
        return {
            "person": self.person.model_dump(mode="json"),
            "type": self.type.value if self.type else None,
        }


@dataclass
class FamilyView:
    """One-hop view around a focus person."""
    focus: Person
    parents: list[Person] = field(default_factory=list)
    spouses: list[Person] = field(default_factory=list)
    children: list[Person] = field(default_factory=list)
    siblings: list[SiblingEntry] = field(default_factory=list)
    integrity_issues: list[IntegrityIssue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "focus": self.focus.model_dump(mode="json"),
            "parents": _dump(self.parents),
            "spouses": _dump(self.spouses),
            "children": _dump(self.children),
            "siblings": [s.to_dict() for s in self.siblings],
            "integrity_issues": [i.to_dict() for i in self.integrity_issues],
        }


@dataclass
class AncestorTree:
    """Up to three ancestor generations. Unknown slots are simply absent."""
    focus_person: Person
    parents: list[Person] = field(default_factory=list)
    grandparents: list[Person] = field(default_factory=list)
    great_grandparents: list[Person] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "focus_person": self.focus_person.model_dump(mode="json"),
            "parents": _dump(self.parents),
            "grandparents": _dump(self.grandparents),
            "great_grandparents": _dump(self.great_grandparents),
        }


@dataclass
class DescendantTree:
    """Up to three descendant generations."""
    focus_person: Person
    children: list[Person] = field(default_factory=list)
    grandchildren: list[Person] = field(default_factory=list)
    great_grandchildren: list[Person] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "focus_person": self.focus_person.model_dump(mode="json"),
            "children": _dump(self.children),
            "grandchildren": _dump(self.grandchildren),
            "great_grandchildren": _dump(self.great_grandchildren),
        }


@dataclass
class FanChartEntry:
    """Person placed on a fan chart ring (focus is generation 0)."""
    person: Person
    generation: int

    def to_dict(self) -> dict:
        return {"person": self.person.model_dump(mode="json"), "generation": self.generation}


@dataclass
class LinkResult:
    """Outcome of a link or unlink call."""
    member_id: int
    relative_id: int
    kind: RelationKind
    changed: bool
    sibling_type: Optional[SiblingType] = None

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "relative_id": self.relative_id,
            "kind": self.kind.value,
            "changed": self.changed,
            "sibling_type": self.sibling_type.value if self.sibling_type else None,
        }
