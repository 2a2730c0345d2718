"""Relationship link maintenance.

The only code path that writes structural fields. Every change touches a
relationship and its reciprocal inside one repository transaction, so
either both records change or neither does.
"""

import logging
from typing import Optional, Union

from kinship.errors import InvalidRelationshipError, InvalidRequestError, MemberNotFoundError
from kinship.graph.models import LinkResult
from kinship.graph.repository import MemberRepository
from kinship.models import MAX_PARENTS, Person, RelationKind, SiblingLink, SiblingType

logger = logging.getLogger(__name__)


def _coerce_kind(kind: Union[RelationKind, str]) -> RelationKind:
    try:
        return RelationKind(kind)
    except ValueError:
        raise InvalidRelationshipError(f"Unknown relationship kind: {kind!r}") from None


def _coerce_sibling_type(value: Union[SiblingType, str, None], default: SiblingType) -> SiblingType:
    if value is None:
        return default
    try:
        return SiblingType(value)
    except ValueError:
        raise InvalidRelationshipError(f"Unknown sibling type: {value!r}") from None


def _add_relation(person: Person, kind: RelationKind, other_id: int, sibling_type: Optional[SiblingType]) -> bool:
    """Add ``other_id`` to the field for ``kind``. Returns True if changed."""
    if kind is RelationKind.SIBLING:
        existing = person.sibling_link(other_id)
        if existing is not None and existing.type == sibling_type:
            return False
        links = [link for link in person.siblings if link.id != other_id]
        links.append(SiblingLink(id=other_id, type=sibling_type))
        person.siblings = links
        return True

    ids = _field(person, kind)
    if other_id in ids:
        return False
    ids.append(other_id)
    return True


def _remove_relation(person: Person, kind: RelationKind, other_id: int) -> bool:
    """Remove ``other_id`` from the field for ``kind``. Returns True if changed."""
    if kind is RelationKind.SIBLING:
        links = [link for link in person.siblings if link.id != other_id]
        if len(links) == len(person.siblings):
            return False
        person.siblings = links
        return True

    ids = _field(person, kind)
    if other_id not in ids:
        return False
    ids.remove(other_id)
    return True


def _field(person: Person, kind: RelationKind) -> list[int]:
    if kind is RelationKind.PARENT:
        return person.parents
    if kind is RelationKind.CHILD:
        return person.children
    return person.spouses


def _batch_errors(people: dict[int, Person]) -> list[str]:
    """Relations in a batch that lack their reciprocal inside the batch."""
    errors = []
    for pid, person in people.items():
        for kind in RelationKind:
            for other_id in person.relation_ids(kind):
                other = people.get(other_id)
                if other_id == pid:
                    errors.append(f"{pid} is its own {kind.value}")
                elif other is None:
                    errors.append(f"{pid} lists {other_id} as {kind.value} but {other_id} is not in the batch")
                elif pid not in other.relation_ids(kind.reciprocal):
                    errors.append(f"{pid} lists {other_id} as {kind.value} but {other_id} does not list {pid} back")
                elif kind is RelationKind.SIBLING:
                    mine = person.sibling_link(other_id).type
                    theirs = other.sibling_link(pid).type
                    if mine is not None and theirs is not None and mine != theirs:
                        errors.append(f"{pid} and {other_id} disagree on sibling type")
    return errors


class RelationshipOperations:
    """Create and remove family relationships on both endpoints."""

    def __init__(self, repository: MemberRepository, default_sibling_type: SiblingType = SiblingType.FULL):
        self.repository = repository
        self.default_sibling_type = SiblingType(default_sibling_type)

    def _validate(self, member_id: int, relative_id: int) -> None:
        if member_id == relative_id:
            raise InvalidRelationshipError(
                f"Member {member_id} cannot be related to themselves",
                member_id=member_id,
                relative_id=relative_id,
            )

    def _load_pair(self, tx, member_id: int, relative_id: int) -> tuple[Person, Person]:
        member = tx.get(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        relative = tx.get(relative_id)
        if relative is None:
            raise MemberNotFoundError(relative_id)
        return member, relative

    def link(
        self,
        member_id: int,
        relative_id: int,
        kind: Union[RelationKind, str],
        sibling_type: Union[SiblingType, str, None] = None,
    ) -> LinkResult:
        """Make ``relative_id`` the member's ``kind`` and record the reciprocal.

        ``link(a, b, "parent")`` adds b to a.parents and a to b.children.
        Linking an already linked pair is a no-op. For siblings, linking with
        a different type re-types the link on both sides.

        Raises:
            InvalidRelationshipError: self-link, unknown kind, or a third parent.
            MemberNotFoundError: either endpoint does not exist.
            WriteConflictError: the two-sided write could not be committed.
        """
        kind = _coerce_kind(kind)
        self._validate(member_id, relative_id)
        stype = _coerce_sibling_type(sibling_type, self.default_sibling_type) if kind is RelationKind.SIBLING else None

        with self.repository.transaction({member_id, relative_id}) as tx:
            member, relative = self._load_pair(tx, member_id, relative_id)
            self._check_parent_cap(member, relative, kind)

            changed = _add_relation(member, kind, relative_id, stype)
            changed = _add_relation(relative, kind.reciprocal, member_id, stype) or changed
            if changed:
                tx.save_relations(member)
                tx.save_relations(relative)

        if changed:
            logger.info("Linked %s as %s of %s", relative_id, kind.value, member_id)
        return LinkResult(member_id, relative_id, kind, changed, stype)

    def unlink(self, member_id: int, relative_id: int, kind: Union[RelationKind, str]) -> LinkResult:
        """Remove the relation on both sides. Removing an absent relation is a no-op."""
        kind = _coerce_kind(kind)
        self._validate(member_id, relative_id)

        with self.repository.transaction({member_id, relative_id}) as tx:
            member, relative = self._load_pair(tx, member_id, relative_id)
            removed_type = None
            if kind is RelationKind.SIBLING:
                link = member.sibling_link(relative_id) or relative.sibling_link(member_id)
                removed_type = link.type if link else None

            changed = _remove_relation(member, kind, relative_id)
            changed = _remove_relation(relative, kind.reciprocal, member_id) or changed
            if changed:
                tx.save_relations(member)
                tx.save_relations(relative)

        if changed:
            logger.info("Unlinked %s as %s of %s", relative_id, kind.value, member_id)
        return LinkResult(member_id, relative_id, kind, changed, removed_type)

    def _check_parent_cap(self, member: Person, relative: Person, kind: RelationKind) -> None:
        if kind is RelationKind.PARENT:
            child, parent = member, relative
        elif kind is RelationKind.CHILD:
            child, parent = relative, member
        else:
            return
        if parent.id not in child.parents and len(child.parents) >= MAX_PARENTS:
            raise InvalidRelationshipError(
                f"Member {child.id} already has {MAX_PARENTS} parents",
                member_id=member.id,
                relative_id=relative.id,
            )

    def check_batch(self, people: list[Person]) -> None:
        """Reject a batch whose relations are not all two-sided within it."""
        errors = _batch_errors({p.id: p for p in people})
        if errors:
            raise InvalidRequestError("; ".join(errors))

    def write_batch(self, people: list[Person]) -> None:
        """Write the structural fields of freshly created members in one transaction.

        Every relation must point inside the batch and be recorded on both
        sides; otherwise nothing is written.

        Raises:
            InvalidRequestError: a relation is one-sided, leaves the batch,
                or the two sides of a sibling link disagree on type.
        """
        self.check_batch(people)
        by_id = {p.id: p for p in people}
        with self.repository.transaction(by_id) as tx:
            for person in people:
                if tx.get(person.id) is None:
                    raise MemberNotFoundError(person.id)
                tx.save_relations(person)
