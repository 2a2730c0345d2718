"""Ancestor and descendant tree builders.

Trees are expanded generation by generation: the ids of generation k+1 are
collected from the fetched records of generation k and fetched with one
bulk call. A relative id pointing at a missing record leaves a gap in the
tree (logged, never an error).
"""

import logging
from typing import Optional

from kinship.errors import InvalidRequestError
from kinship.graph.models import AncestorTree, DescendantTree, FanChartEntry
from kinship.graph.repository import MemberRepository
from kinship.models import Person

logger = logging.getLogger(__name__)

# Charts show parents, grandparents and great-grandparents
MAX_GENERATIONS = 3


class TreeBuilder:
    """Bounded-depth tree queries over a member repository."""

    def __init__(self, repository: MemberRepository, max_generations: int = MAX_GENERATIONS):
        self.repository = repository
        self.max_generations = min(max_generations, MAX_GENERATIONS)

    def _next_generation(self, generation: list[Person], field: str) -> list[Person]:
        """Bulk-fetch the union of ``field`` ids across a generation."""
        ids: list[int] = []
        for person in generation:
            ids.extend(getattr(person, field))
        ids = list(dict.fromkeys(ids))
        if not ids:
            return []

        found = self.repository.get_by_ids(ids)
        missing = set(ids) - {p.id for p in found}
        if missing:
            logger.debug("Skipping missing relatives %s while expanding %s", sorted(missing), field)
        return found

    def _expand(self, focus: Person, field: str, depth: int) -> list[list[Person]]:
        """Generations 1..depth above or below ``focus``; empty lists once exhausted."""
        generations: list[list[Person]] = []
        current = [focus]
        for _ in range(depth):
            current = self._next_generation(current, field) if current else []
            generations.append(current)
        return generations

    def get_ancestors(self, focus_id: int) -> Optional[AncestorTree]:
        """Parents, grandparents and great-grandparents of a focus person.

        Returns None when the focus person does not exist.
        """
        focus = self.repository.get_by_id(focus_id)
        if focus is None:
            return None

        parents, grandparents, great_grandparents = self._expand(focus, "parents", MAX_GENERATIONS)
        return AncestorTree(
            focus_person=focus,
            parents=parents,
            grandparents=grandparents,
            great_grandparents=great_grandparents,
        )

    def get_descendants(self, focus_id: int) -> Optional[DescendantTree]:
        """Children, grandchildren and great-grandchildren of a focus person.

        Returns None when the focus person does not exist.
        """
        focus = self.repository.get_by_id(focus_id)
        if focus is None:
            return None

        children, grandchildren, great_grandchildren = self._expand(focus, "children", MAX_GENERATIONS)
        return DescendantTree(
            focus_person=focus,
            children=children,
            grandchildren=grandchildren,
            great_grandchildren=great_grandchildren,
        )

    def get_fan_chart(self, focus_id: int, generations: Optional[int] = None) -> Optional[list[FanChartEntry]]:
        """Ancestors flattened for a fan chart, focus at generation 0."""
        depth = self.max_generations if generations is None else generations
        if not 1 <= depth <= self.max_generations:
            raise InvalidRequestError(
                f"generations must be between 1 and {self.max_generations}, got {depth}"
            )

        focus = self.repository.get_by_id(focus_id)
        if focus is None:
            return None

        entries = [FanChartEntry(person=focus, generation=0)]
        for number, generation in enumerate(self._expand(focus, "parents", depth), start=1):
            entries.extend(FanChartEntry(person=p, generation=number) for p in generation)
        return entries
