"""Family relationship edges using GraphLite.

Every structural field of a Person record is stored as that person's own
outgoing edges, so the two sides of a relationship are two independent
edges:

    A.parents  contains B  <->  A child_of B
    A.children contains B  <->  A parent_of B
    A.spouses  contains B  <->  A spouse_of B
    A.siblings contains {B, t}  <->  A sibling_<t> B
    A.siblings contains {B, ?}  <->  A sibling_of B   (legacy, untyped)
"""

from contextlib import closing
from pathlib import Path
from typing import Iterable, NamedTuple, Optional

from graphlite import connect, V

from kinship.models import Person, SiblingLink, SiblingType

LEGACY_SIBLING = "sibling_of"

SIBLING_RELATIONS = {
    SiblingType.FULL: "sibling_full",
    SiblingType.HALF: "sibling_half",
    SiblingType.STEP: "sibling_step",
    SiblingType.ADOPTED: "sibling_adopted",
}


def sibling_relation(sibling_type: Optional[SiblingType]) -> str:
    """Edge relation storing a sibling link of the given type."""
    if sibling_type is None:
        return LEGACY_SIBLING
    return SIBLING_RELATIONS[sibling_type]


class EdgeOp(NamedTuple):
    """Single queued edge write."""
    action: str  # "store" or "delete"
    source: int
    relation: str
    target: int


class RelationshipGraph:
    """Manage structural relationship edges with GraphLite."""

    RELATION_TYPES = [
        "parent_of",
        "child_of",
        "spouse_of",
        LEGACY_SIBLING,
        *SIBLING_RELATIONS.values(),
    ]

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.graph = connect(self.db_path, graphs=self.RELATION_TYPES)

    def _find(self, person_id: int, relation: str) -> list[int]:
        return self.graph.find(getattr(V(person_id), relation)).to(list)

    def _find_incoming(self, person_id: int, relation: str) -> list[int]:
        return self.graph.find(getattr(V(), relation)(person_id)).to(list)

    def relations_for(self, person_ids: Iterable[int]) -> dict[int, dict[str, list[int]]]:
        """Outgoing edges of many people, grouped by source and relation.

        Runs one query per relation table regardless of how many ids are
        asked for.
        """
        ids = list(dict.fromkeys(person_ids))
        edges = {pid: {relation: [] for relation in self.RELATION_TYPES} for pid in ids}
        if not ids:
            return edges
        placeholders = ", ".join("?" for _ in ids)
        with closing(self.graph.db.cursor()) as cursor:
            for relation in self.RELATION_TYPES:
                cursor.execute(
                    f"SELECT src, dst FROM {relation} WHERE src IN ({placeholders}) ORDER BY rowid",
                    ids,
                )
                for src, dst in cursor.fetchall():
                    edges[src][relation].append(dst)
        return edges

    def attach_relations(self, persons: list[Person]) -> list[Person]:
        """Fill the structural fields of many people from stored edges."""
        edges = self.relations_for(p.id for p in persons)
        result = []
        for person in persons:
            found = edges[person.id]
            siblings = [
                SiblingLink(id=sid, type=sibling_type)
                for sibling_type, relation in SIBLING_RELATIONS.items()
                for sid in found[relation]
            ]
            siblings.extend(SiblingLink(id=sid) for sid in found[LEGACY_SIBLING])
            result.append(person.model_copy(update={
                "parents": found["child_of"],
                "children": found["parent_of"],
                "spouses": found["spouse_of"],
                "siblings": siblings,
            }))
        return result

    def diff(self, before: Person, after: Person) -> list[EdgeOp]:
        """Edge writes that turn ``before``'s structural fields into ``after``'s."""
        pid = after.id
        ops: list[EdgeOp] = []

        for relation, old, new in (
            ("child_of", before.parents, after.parents),
            ("parent_of", before.children, after.children),
            ("spouse_of", before.spouses, after.spouses),
        ):
            ops.extend(EdgeOp("delete", pid, relation, i) for i in old if i not in new)
            ops.extend(EdgeOp("store", pid, relation, i) for i in new if i not in old)

        old_links = {link.id: link.type for link in before.siblings}
        new_links = {link.id: link.type for link in after.siblings}
        for sid, sibling_type in old_links.items():
            if sid not in new_links or new_links[sid] != sibling_type:
                ops.append(EdgeOp("delete", pid, sibling_relation(sibling_type), sid))
        for sid, sibling_type in new_links.items():
            if sid not in old_links or old_links[sid] != sibling_type:
                ops.append(EdgeOp("store", pid, sibling_relation(sibling_type), sid))
        return ops

    def detach_ops(self, person_id: int) -> list[EdgeOp]:
        """Edge deletions removing a person from the graph.

        Covers the person's own edges and every edge pointing at the person,
        including ones the person never recorded back.
        """
        ops: list[EdgeOp] = []
        for relation in self.RELATION_TYPES:
            ops.extend(EdgeOp("delete", person_id, relation, i) for i in self._find(person_id, relation))
            ops.extend(EdgeOp("delete", i, relation, person_id) for i in self._find_incoming(person_id, relation))
        return ops

    def apply(self, ops: list[EdgeOp]) -> None:
        """Apply edge writes in a single transaction (all or nothing)."""
        if not ops:
            return
        with self.graph.transaction() as tr:
            for op in ops:
                edge = getattr(V(op.source), op.relation)(op.target)
                if op.action == "store":
                    tr.store(edge)
                else:
                    tr.delete(edge)
