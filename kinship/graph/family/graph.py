"""Main FamilyGraph facade combining all operations."""

from typing import Iterable, Optional, Union

from kinship.config import Settings, settings as default_settings
from kinship.errors import InvalidRelationshipError, MemberNotFoundError
from kinship.graph.family import siblings
from kinship.graph.family.integrity import find_integrity_issues
from kinship.graph.family.migration import import_members, migrate_legacy_siblings
from kinship.graph.family.queries import FamilyQueries
from kinship.graph.family.relationships import RelationshipOperations
from kinship.graph.family.trees import TreeBuilder
from kinship.graph.models import (
    AncestorTree,
    DescendantTree,
    FamilyView,
    FanChartEntry,
    IntegrityIssue,
    LinkResult,
)
from kinship.graph.repository import SqliteMemberRepository
from kinship.models import FilterCriteria, Person, RelationKind, SiblingType


class FamilyGraph:
    """
    Main interface for family graph operations.

    Combines the member repository with the tree, family, sibling and
    relationship operations.

    Usage:
        graph = FamilyGraph()
        arthur = graph.add_member(Person(first_name="Arthur", last_name="Pendragon"))
        uther = graph.add_member(Person(first_name="Uther"), relative_id=arthur.id, kind="parent")
        tree = graph.get_ancestors(arthur.id)
    """

    def __init__(self, config: Optional[Settings] = None, repository: Optional[SqliteMemberRepository] = None):
        self.config = config or default_settings
        if repository is None:
            self.config.database.ensure_dirs()
            repository = SqliteMemberRepository(
                self.config.database.members_db_path,
                self.config.database.graph_db_path,
            )
        self.repository = repository

        # Compose operations
        self.relationships = RelationshipOperations(
            self.repository, SiblingType(self.config.tree.default_sibling_type)
        )
        self.trees = TreeBuilder(self.repository, self.config.tree.max_generations)
        self.queries = FamilyQueries(self.repository)

    # ─────────────────────────────────────────
    # Member operations
    # ─────────────────────────────────────────

    def add_member(
        self,
        person: Person,
        relative_id: Optional[int] = None,
        kind: Union[RelationKind, str, None] = None,
        sibling_type: Union[SiblingType, str, None] = None,
    ) -> Person:
        """Create a member, optionally related to one existing member.

        ``kind`` is the new member's role for the relative: adding with
        ``kind="parent"`` makes the new member a parent of ``relative_id``.
        """
        if (relative_id is None) != (kind is None):
            raise InvalidRelationshipError("relative_id and kind must be given together")
        if relative_id is not None and self.repository.get_by_id(relative_id) is None:
            # Check before creating so a bad relative leaves no orphan behind
            raise MemberNotFoundError(relative_id)

        created = self.repository.create_member(person.model_copy(update={
            "parents": [], "spouses": [], "children": [], "siblings": [],
        }))
        if relative_id is not None:
            try:
                self.relationships.link(relative_id, created.id, kind, sibling_type)
            except Exception:
                self.repository.delete_member(created.id)
                raise
            created = self.repository.get_by_id(created.id)
        return created

    def get_member(self, member_id: int) -> Optional[Person]:
        return self.repository.get_by_id(member_id)

    def get_members(self, member_ids: Iterable[int]) -> list[Person]:
        return self.repository.get_by_ids(member_ids)

    def update_member(self, member_id: int, **kwargs) -> bool:
        return self.repository.update_member(member_id, **kwargs)

    def delete_member(self, member_id: int) -> bool:
        return self.repository.delete_member(member_id)

    def search(self, query: str) -> list[Person]:
        return self.repository.search(query)

    def filter(self, criteria: FilterCriteria) -> list[Person]:
        return self.repository.filter(criteria)

    # ─────────────────────────────────────────
    # Relationship operations (delegated)
    # ─────────────────────────────────────────

    def link(self, member_id: int, relative_id: int, kind, sibling_type=None) -> LinkResult:
        return self.relationships.link(member_id, relative_id, kind, sibling_type)

    def unlink(self, member_id: int, relative_id: int, kind) -> LinkResult:
        return self.relationships.unlink(member_id, relative_id, kind)

    # ─────────────────────────────────────────
    # Query operations (delegated)
    # ─────────────────────────────────────────

    def get_immediate_family(self, member_id: int) -> Optional[FamilyView]:
        return self.queries.get_immediate_family(member_id)

    def get_ancestors(self, member_id: int) -> Optional[AncestorTree]:
        return self.trees.get_ancestors(member_id)

    def get_descendants(self, member_id: int) -> Optional[DescendantTree]:
        return self.trees.get_descendants(member_id)

    def get_fan_chart(self, member_id: int, generations: Optional[int] = None) -> Optional[list[FanChartEntry]]:
        return self.trees.get_fan_chart(member_id, generations)

    def classify(self, a: Person, b: Person) -> Optional[SiblingType]:
        return siblings.classify(a, b)

    def group_siblings(self, members: list[Person]) -> list[list[Person]]:
        return siblings.group(members)

    # ─────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────

    def check_integrity(self, member_ids: Optional[Iterable[int]] = None) -> list[IntegrityIssue]:
        return find_integrity_issues(self.repository, member_ids)

    def migrate_legacy_siblings(self) -> int:
        return migrate_legacy_siblings(self.repository)

    def import_members(self, records: Iterable[dict]) -> list[int]:
        return import_members(self.repository, records)
