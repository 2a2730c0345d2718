"""Legacy sibling migration and record import.

Older records stored siblings as bare ids. Those are read as links with an
unknown type; the migration rewrites them as typed links, using the type
recorded on the other side when there is one, otherwise the type inferred
from shared parents, otherwise full. No id is ever dropped. Imported
records get the same treatment before they are written.
"""

import logging
from typing import Iterable

from pydantic import ValidationError

from kinship.errors import InvalidRequestError
from kinship.graph.family.relationships import RelationshipOperations
from kinship.graph.family.siblings import legacy_sibling_type
from kinship.graph.repository import SqliteMemberRepository
from kinship.models import Person, SiblingLink, SiblingType

logger = logging.getLogger(__name__)


def _retype(person: Person, other_id: int, sibling_type: SiblingType) -> bool:
    link = person.sibling_link(other_id)
    if link is None or link.type is not None:
        return False
    person.siblings = [
        SiblingLink(id=l.id, type=sibling_type) if l.id == other_id else l
        for l in person.siblings
    ]
    return True


def migrate_legacy_siblings(repository: SqliteMemberRepository) -> int:
    """Convert every untyped sibling link. Returns the number of pairs converted.

    Each pair is rewritten in its own transaction. Running it again is a
    no-op.
    """
    pairs = set()
    for person in repository.get_by_ids(repository.all_ids()):
        for link in person.siblings:
            if link.type is None:
                pairs.add(tuple(sorted((person.id, link.id))))

    converted = 0
    for a_id, b_id in sorted(pairs):
        with repository.transaction({a_id, b_id}) as tx:
            a = tx.get(a_id)
            b = tx.get(b_id)
            known = [
                link.type
                for link in (
                    a.sibling_link(b_id) if a is not None else None,
                    b.sibling_link(a_id) if b is not None else None,
                )
                if link is not None and link.type is not None
            ]
            if known:
                sibling_type = known[0]
            elif a is not None and b is not None:
                sibling_type = legacy_sibling_type(a, b)
            else:
                # Dangling link to a deleted member keeps its id, typed full
                sibling_type = SiblingType.FULL

            changed = False
            for person, other_id in ((a, b_id), (b, a_id)):
                if person is not None and _retype(person, other_id, sibling_type):
                    tx.save_relations(person)
                    changed = True
        if changed:
            converted += 1
            logger.info("Migrated sibling link %s <-> %s to %s", a_id, b_id, sibling_type.value)

    return converted


def import_members(repository: SqliteMemberRepository, records: Iterable[dict]) -> list[int]:
    """Import member records that carry their own ids and relationships.

    Records may use either sibling format. Untyped links are typed on the
    way in, so only typed links are written. The whole batch is checked
    before anything is stored: ids must be present and unused, every
    relation must be recorded on both sides within the batch, and nobody
    may have more than two parents. Returns the imported ids.

    Raises:
        InvalidRequestError: the batch fails any of the checks above.
    """
    try:
        people = [Person.model_validate(record) for record in records]
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid member record: {e}") from e

    missing_ids = [p.full_name for p in people if p.id is None]
    if missing_ids:
        raise InvalidRequestError(f"Imported records need ids: {missing_ids}")
    by_id = {p.id: p for p in people}
    if len(by_id) != len(people):
        raise InvalidRequestError("Imported records repeat an id")
    taken = [p.id for p in repository.get_by_ids(by_id)]
    if taken:
        raise InvalidRequestError(f"Member ids already in use: {taken}")

    typed = []
    for person in people:
        links = []
        for link in person.siblings:
            sibling_type = link.type
            if sibling_type is None:
                other = by_id.get(link.id)
                reciprocal = other.sibling_link(person.id) if other is not None else None
                if reciprocal is not None and reciprocal.type is not None:
                    sibling_type = reciprocal.type
                elif other is not None:
                    sibling_type = legacy_sibling_type(person, other)
                else:
                    sibling_type = SiblingType.FULL
            links.append(SiblingLink(id=link.id, type=sibling_type))
        typed.append(person.model_copy(update={"siblings": links}))

    operations = RelationshipOperations(repository)
    operations.check_batch(typed)

    for person in typed:
        repository.create_member(person)
    operations.write_batch(typed)

    logger.info("Imported %d members", len(typed))
    return list(by_id)
