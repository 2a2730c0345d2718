"""Sibling classification and grouping.

The effective sibling type between two people is the explicit link type
when one exists, otherwise it is derived from the overlap of their parent
sets. Both functions here are pure: they work on already-fetched records.
"""

import logging
from typing import Optional

from kinship.errors import SiblingIntegrityError
from kinship.models import Person, SiblingType

logger = logging.getLogger(__name__)

# Types that place two people in the same sibling group
GROUPING_TYPES = {SiblingType.FULL, SiblingType.HALF}


def derive_sibling_type(a: Person, b: Person) -> Optional[SiblingType]:
    """Sibling type from shared parents alone.

    Returns None when either parent set is empty (never guess) or when
    nothing is shared.
    """
    if a.id is not None and a.id == b.id:
        return None
    if not a.parents or not b.parents:
        return None
    shared = set(a.parents) & set(b.parents)
    if len(shared) >= 2:
        return SiblingType.FULL
    if len(shared) == 1:
        return SiblingType.HALF
    return None


def legacy_sibling_type(a: Person, b: Person) -> SiblingType:
    """Type for a link stored without one: inferred, or full when unknown."""
    return derive_sibling_type(a, b) or SiblingType.FULL


def explicit_sibling_type(a: Person, b: Person) -> Optional[SiblingType]:
    """Type recorded by explicit links between ``a`` and ``b``.

    Looks at both sides so the answer does not depend on argument order.
    Returns None when neither side holds a link.

    Raises:
        SiblingIntegrityError: only one side holds the link, or the two
            sides record different types.
    """
    forward = a.sibling_link(b.id)
    backward = b.sibling_link(a.id)
    if forward is None and backward is None:
        return None
    if forward is None or backward is None:
        holder, other = (a, b) if forward is not None else (b, a)
        raise SiblingIntegrityError(
            holder.id, other.id, f"link recorded on {holder.id} only"
        )

    if forward.type is None and backward.type is None:
        return legacy_sibling_type(a, b)
    if forward.type is None or backward.type is None:
        return forward.type or backward.type
    if forward.type != backward.type:
        low, high = sorted((a, b), key=lambda p: p.id)
        raise SiblingIntegrityError(
            low.id,
            high.id,
            f"type mismatch ({low.sibling_link(high.id).type.value} "
            f"vs {high.sibling_link(low.id).type.value})",
        )
    return forward.type


def classify(a: Person, b: Person) -> Optional[SiblingType]:
    """Effective sibling type between two people.

    Explicit links win over derivation, even when derivation disagrees.

    Raises:
        SiblingIntegrityError: explicit link data is asymmetric.
    """
    if a.id is not None and a.id == b.id:
        return None
    explicit = explicit_sibling_type(a, b)
    if explicit is not None:
        return explicit
    return derive_sibling_type(a, b)


def effective_sibling_type(
    a: Person,
    b: Person,
    issues: Optional[list[SiblingIntegrityError]] = None,
) -> Optional[SiblingType]:
    """Like ``classify`` but falls back to the derived type on integrity errors.

    The error is logged and, when ``issues`` is given, appended to it so the
    caller can report it. Stored data is left untouched.
    """
    try:
        return classify(a, b)
    except SiblingIntegrityError as e:
        logger.warning("Integrity violation: %s", e)
        if issues is not None:
            issues.append(e)
        return derive_sibling_type(a, b)


class _DisjointSet:
    """Union-find over list positions."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, i: int, j: int) -> None:
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return
        # Keep the earliest position as root so group order follows input order
        if root_j < root_i:
            root_i, root_j = root_j, root_i
        self.parent[root_j] = root_i


def group(members: list[Person]) -> list[list[Person]]:
    """Partition members into clusters of full/half siblings.

    Clusters are connected components over the is-sibling-with relation, so
    two people who share no parent still land together through a common
    sibling. Members with no sibling in the input produce no group.
    """
    unique: list[Person] = []
    seen = set()
    for member in members:
        key = member.id if member.id is not None else id(member)
        if key in seen:
            continue
        seen.add(key)
        unique.append(member)

    sets = _DisjointSet(len(unique))
    for i in range(len(unique)):
        for j in range(i + 1, len(unique)):
            if effective_sibling_type(unique[i], unique[j]) in GROUPING_TYPES:
                sets.union(i, j)

    components: dict[int, list[Person]] = {}
    for i, member in enumerate(unique):
        components.setdefault(sets.find(i), []).append(member)

    return [grp for grp in components.values() if len(grp) > 1]
