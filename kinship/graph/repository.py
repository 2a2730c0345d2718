"""Member repository: the storage seam every engine component reads through.

``MemberRepository`` is the interface the engine depends on.
``SqliteMemberRepository`` is the shipped implementation, composing the
SQLite attribute store with the GraphLite relationship graph.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import ContextManager, Iterable, Iterator, Optional, Protocol

from kinship.errors import WriteConflictError
from kinship.graph.member_store import MemberStore
from kinship.graph.relationship_graph import EdgeOp, RelationshipGraph
from kinship.models import FilterCriteria, Person

logger = logging.getLogger(__name__)

# Record locks are striped so the lock table never grows
LOCK_STRIPES = 64


class RelationshipTransaction(Protocol):
    """Read-modify-write unit for structural fields."""

    def get(self, member_id: int) -> Optional[Person]: ...

    def save_relations(self, person: Person) -> None: ...


class MemberRepository(Protocol):
    """Storage contract consumed by the engine.

    ``get_by_ids`` must answer a whole id set in one call; callers never
    loop over ``get_by_id``.
    """

    def get_by_id(self, member_id: int) -> Optional[Person]: ...

    def get_by_ids(self, member_ids: Iterable[int]) -> list[Person]: ...

    def search(self, query: str) -> list[Person]: ...

    def transaction(self, member_ids: Iterable[int]) -> ContextManager[RelationshipTransaction]: ...


class GraphTransaction:
    """Buffers structural writes and turns them into edge operations.

    Reads go straight to the repository; the first read of each record is
    kept as the baseline its saved version is diffed against.
    """

    def __init__(self, repository: "SqliteMemberRepository", member_ids: set[int]):
        self.repository = repository
        self.member_ids = member_ids
        self._baseline: dict[int, Person] = {}
        self._pending: dict[int, Person] = {}

    def get(self, member_id: int) -> Optional[Person]:
        if member_id in self._pending:
            return self._pending[member_id].model_copy(deep=True)
        person = self.repository.get_by_id(member_id)
        if person is not None:
            self._baseline.setdefault(member_id, person)
            return person.model_copy(deep=True)
        return None

    def save_relations(self, person: Person) -> None:
        if person.id not in self.member_ids:
            raise ValueError(f"Member {person.id} is not locked by this transaction")
        if person.id not in self._baseline:
            raise ValueError(f"Member {person.id} must be read before it is saved")
        self._pending[person.id] = person.model_copy(deep=True)

    def edge_ops(self) -> list[EdgeOp]:
        ops: list[EdgeOp] = []
        for member_id, person in self._pending.items():
            ops.extend(self.repository.graph.diff(self._baseline[member_id], person))
        return ops


class SqliteMemberRepository:
    """Member records backed by SQLite attributes and GraphLite edges."""

    def __init__(self, members_db_path: str, graph_db_path: str):
        self.store = MemberStore(members_db_path)
        self.graph = RelationshipGraph(graph_db_path)
        self._locks = [threading.RLock() for _ in range(LOCK_STRIPES)]

    # ─────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────

    def get_by_id(self, member_id: int) -> Optional[Person]:
        person = self.store.get_member(member_id)
        return self.graph.attach_relations([person])[0] if person else None

    def get_by_ids(self, member_ids: Iterable[int]) -> list[Person]:
        return self.graph.attach_relations(self.store.get_members(member_ids))

    def search(self, query: str) -> list[Person]:
        return self.graph.attach_relations(self.store.search(query))

    def filter(self, criteria: FilterCriteria) -> list[Person]:
        return self.graph.attach_relations(self.store.filter(criteria))

    def all_ids(self) -> list[int]:
        return self.store.all_ids()

    # ─────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────

    @contextmanager
    def transaction(self, member_ids: Iterable[int]) -> Iterator[GraphTransaction]:
        """Lock the given records, yield a transaction, commit on clean exit.

        Records map onto a fixed set of lock stripes, taken in sorted order
        so concurrent writers touching the same pair cannot deadlock. Nothing is written if the block
        raises.
        """
        ids = set(member_ids)
        locks = self._acquire(ids)
        try:
            tx = GraphTransaction(self, ids)
            yield tx
            ops = tx.edge_ops()
            try:
                self.graph.apply(ops)
            except sqlite3.Error as e:
                raise WriteConflictError(
                    f"Could not commit {len(ops)} edge writes for members {sorted(ids)}: {e}"
                ) from e
        finally:
            for lock in reversed(locks):
                lock.release()

    def _acquire(self, ids: set[int]) -> list[threading.RLock]:
        locks = [self._locks[stripe] for stripe in sorted({i % LOCK_STRIPES for i in ids})]
        for lock in locks:
            lock.acquire()
        return locks

    def create_member(self, person: Person) -> Person:
        """Insert a standalone member; relationships go through the link maintainer."""
        member_id = self.store.add_member(person)
        logger.info("Created member %s (%s)", member_id, person.full_name)
        return self.get_by_id(member_id)

    def update_member(self, member_id: int, **kwargs) -> bool:
        """Update descriptive fields only."""
        return self.store.update_member(member_id, **kwargs)

    def delete_member(self, member_id: int) -> bool:
        """Delete a member and strip its id from every relative.

        Edges in both directions are removed, so a relative that lists the
        member without being listed back is cleaned up too.
        """
        while True:
            locked = {member_id} | _endpoints(self.graph.detach_ops(member_id))
            with self.transaction(locked):
                if self.store.get_member(member_id) is None:
                    return False
                ops = self.graph.detach_ops(member_id)
                # A relative linked while we were locking: lock again
                if not _endpoints(ops) <= locked:
                    continue
                try:
                    self.graph.apply(ops)
                except sqlite3.Error as e:
                    raise WriteConflictError(f"Could not detach member {member_id}: {e}") from e
                deleted = self.store.delete_member(member_id)
            break

        logger.info("Deleted member %s and %d relationship edges", member_id, len(ops))
        return deleted


def _endpoints(ops: list[EdgeOp]) -> set[int]:
    return {op.source for op in ops} | {op.target for op in ops}
