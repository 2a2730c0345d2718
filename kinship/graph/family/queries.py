"""Immediate family view."""

import logging
from typing import Optional

from kinship.errors import SiblingIntegrityError
from kinship.graph.family.siblings import effective_sibling_type
from kinship.graph.models import FamilyView, IntegrityIssue, SiblingEntry
from kinship.graph.repository import MemberRepository

logger = logging.getLogger(__name__)


class FamilyQueries:
    """Query operations for the one-hop family view."""

    def __init__(self, repository: MemberRepository):
        self.repository = repository

    def get_immediate_family(self, focus_id: int) -> Optional[FamilyView]:
        """Focus person with parents, spouses, children and typed siblings.

        Siblings are the union of explicit sibling links and everyone who
        shares at least one parent with the focus, each tagged with its
        effective type. Returns None when the focus person does not exist.
        """
        focus = self.repository.get_by_id(focus_id)
        if focus is None:
            return None

        parents = self.repository.get_by_ids(focus.parents)
        spouses = self.repository.get_by_ids(focus.spouses)
        children = self.repository.get_by_ids(focus.children)

        candidate_ids = [link.id for link in focus.siblings]
        for parent in parents:
            candidate_ids.extend(parent.children)
        candidate_ids = [i for i in dict.fromkeys(candidate_ids) if i != focus.id]
        candidates = self.repository.get_by_ids(candidate_ids) if candidate_ids else []

        errors: list[SiblingIntegrityError] = []
        siblings = []
        for candidate in candidates:
            sibling_type = effective_sibling_type(focus, candidate, errors)
            if sibling_type is None:
                logger.debug("Member %s is not a sibling of %s", candidate.id, focus.id)
                continue
            siblings.append(SiblingEntry(person=candidate, type=sibling_type))

        requested = (
            (focus.parents, parents),
            (focus.spouses, spouses),
            (focus.children, children),
            (candidate_ids, candidates),
        )
        for ids, found in requested:
            missing = set(ids) - {p.id for p in found}
            if missing:
                logger.debug("Skipping missing relatives %s of member %s", sorted(missing), focus.id)

        return FamilyView(
            focus=focus,
            parents=parents,
            spouses=spouses,
            children=children,
            siblings=siblings,
            integrity_issues=[
                IntegrityIssue(e.person_id, e.other_id, "sibling", e.detail) for e in errors
            ],
        )
