"""Data models for the family network."""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Parent slots per person
MAX_PARENTS = 2


class Gender(str, Enum):
    """Fixed gender enumeration."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SiblingType(str, Enum):
    """Sibling relationship types."""
    FULL = "full"
    HALF = "half"
    STEP = "step"
    ADOPTED = "adopted"


class RelationKind(str, Enum):
    """Role of a relative with respect to a member."""
    PARENT = "parent"
    CHILD = "child"
    SPOUSE = "spouse"
    SIBLING = "sibling"

    @property
    def reciprocal(self) -> "RelationKind":
        """Kind seen from the relative's side."""
        if self is RelationKind.PARENT:
            return RelationKind.CHILD
        if self is RelationKind.CHILD:
            return RelationKind.PARENT
        return self


class SiblingLink(BaseModel):
    """Explicit sibling link.

    ``type`` is None only for links read from the legacy bare-id format,
    where the type was never recorded.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    type: Optional[SiblingType] = None


def _unique(ids: list[Any]) -> list[Any]:
    seen = set()
    result = []
    for value in ids:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class Person(BaseModel):
    """Family member with descriptive and structural fields."""

    id: Optional[int] = None
    first_name: str
    last_name: str = ""
    gender: Gender = Gender.OTHER
    birth_date: Optional[date] = None
    birth_place: Optional[str] = None
    death_date: Optional[date] = None
    death_place: Optional[str] = None
    biography: Optional[str] = None
    photo_url: Optional[str] = None

    # Relations stored as ids
    parents: list[int] = Field(default_factory=list)
    spouses: list[int] = Field(default_factory=list)
    children: list[int] = Field(default_factory=list)
    siblings: list[SiblingLink] = Field(default_factory=list)

    @field_validator("spouses", "children", mode="after")
    @classmethod
    def _dedupe_ids(cls, value: list[int]) -> list[int]:
        return _unique(value)

    @field_validator("parents", mode="after")
    @classmethod
    def _cap_parents(cls, value: list[int]) -> list[int]:
        value = _unique(value)
        if len(value) > MAX_PARENTS:
            raise ValueError(f"at most {MAX_PARENTS} parents allowed, got {len(value)}")
        return value

    @field_validator("siblings", mode="before")
    @classmethod
    def _normalize_siblings(cls, value: Any) -> Any:
        """Accept typed ``{id, type}`` links or legacy bare ids."""
        if value is None:
            return []
        links = []
        seen = set()
        for entry in value:
            if isinstance(entry, SiblingLink):
                link = entry
            elif isinstance(entry, dict):
                link = SiblingLink.model_validate(entry)
            else:
                # Legacy format: bare id, type unknown
                link = SiblingLink(id=entry)
            if link.id in seen:
                continue
            seen.add(link.id)
            links.append(link)
        return links

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_living(self) -> bool:
        """No recorded death date means living."""
        return self.death_date is None

    @property
    def birth_year(self) -> Optional[int]:
        return self.birth_date.year if self.birth_date else None

    def sibling_link(self, other_id: int) -> Optional[SiblingLink]:
        """Explicit sibling link to ``other_id``, if any."""
        for link in self.siblings:
            if link.id == other_id:
                return link
        return None

    def relation_ids(self, kind: RelationKind) -> list[int]:
        """Ids held under a relationship kind."""
        if kind is RelationKind.PARENT:
            return list(self.parents)
        if kind is RelationKind.CHILD:
            return list(self.children)
        if kind is RelationKind.SPOUSE:
            return list(self.spouses)
        return [link.id for link in self.siblings]


class FilterCriteria(BaseModel):
    """Directory filter; all given criteria must match."""

    gender: Optional[Gender] = None
    last_name: Optional[str] = None
    birth_year_start: Optional[int] = None
    birth_year_end: Optional[int] = None

    def matches(self, person: Person) -> bool:
        if self.gender and person.gender != self.gender:
            return False
        if self.last_name and person.last_name.lower() != self.last_name.lower():
            return False
        if self.birth_year_start is not None or self.birth_year_end is not None:
            year = person.birth_year
            if year is None:
                return False
            if self.birth_year_start is not None and year < self.birth_year_start:
                return False
            if self.birth_year_end is not None and year > self.birth_year_end:
                return False
        return True
