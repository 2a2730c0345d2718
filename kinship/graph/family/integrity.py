"""Symmetry checks over stored relationships.

Findings are reported as repair candidates and never fixed here: for a
one-sided link there is no way to tell which side reflects what the user
meant.
"""

import logging
from typing import Iterable, Optional

from kinship.graph.models import IntegrityIssue
from kinship.graph.repository import SqliteMemberRepository
from kinship.models import MAX_PARENTS, Person

logger = logging.getLogger(__name__)


def _check_member(person: Person, people: dict[int, Person]) -> list[IntegrityIssue]:
    issues = []
    pid = person.id

    if len(person.parents) > MAX_PARENTS:
        issues.append(IntegrityIssue(pid, pid, "parent_cap", f"{len(person.parents)} parents recorded"))

    for parent_id in person.parents:
        parent = people.get(parent_id)
        if parent is not None and pid not in parent.children:
            issues.append(IntegrityIssue(pid, parent_id, "parent_child", f"{parent_id} does not list {pid} as child"))
    for child_id in person.children:
        child = people.get(child_id)
        if child is not None and pid not in child.parents:
            issues.append(IntegrityIssue(pid, child_id, "parent_child", f"{child_id} does not list {pid} as parent"))
    for spouse_id in person.spouses:
        spouse = people.get(spouse_id)
        if spouse is not None and pid not in spouse.spouses:
            issues.append(IntegrityIssue(pid, spouse_id, "spouse", f"{spouse_id} does not list {pid} as spouse"))

    for link in person.siblings:
        other = people.get(link.id)
        if other is None:
            continue
        reciprocal = other.sibling_link(pid)
        if reciprocal is None:
            issues.append(IntegrityIssue(pid, link.id, "sibling", f"link recorded on {pid} only"))
        elif (
            pid < link.id
            and link.type is not None
            and reciprocal.type is not None
            and link.type != reciprocal.type
        ):
            issues.append(IntegrityIssue(
                pid, link.id, "sibling_type",
                f"type mismatch ({link.type.value} vs {reciprocal.type.value})",
            ))
    return issues


def find_integrity_issues(
    repository: SqliteMemberRepository,
    member_ids: Optional[Iterable[int]] = None,
) -> list[IntegrityIssue]:
    """Scan members (all by default) for asymmetric relationships.

    Relatives referenced by the scanned members are fetched in one extra
    bulk call so the check also covers people outside ``member_ids``.
    """
    ids = list(member_ids) if member_ids is not None else repository.all_ids()
    people = {p.id: p for p in repository.get_by_ids(ids)}

    referenced = set()
    for person in people.values():
        referenced.update(person.parents, person.children, person.spouses)
        referenced.update(link.id for link in person.siblings)
    referenced -= set(people)
    if referenced:
        people.update({p.id: p for p in repository.get_by_ids(referenced)})

    issues = []
    for member_id in ids:
        person = people.get(member_id)
        if person is not None:
            issues.extend(_check_member(person, people))

    for issue in issues:
        logger.warning("Integrity violation (%s) between %s and %s: %s",
                       issue.kind, issue.person_id, issue.other_id, issue.detail)
    return issues
