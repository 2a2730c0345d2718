"""Test the immediate family view."""

import pytest

from kinship.graph.family.queries import FamilyQueries
from kinship.graph.family.relationships import RelationshipOperations
from kinship.graph.relationship_graph import EdgeOp
from kinship.models import SiblingType


@pytest.fixture
def family(repository, add):
    """Arthur with parents, a spouse, a child, a full and a half sibling, and a step sibling."""
    ops = RelationshipOperations(repository)
    ids = {name: add(name) for name in (
        "Arthur", "Uther", "Igraine", "Gorlois", "Guinevere", "Mordred",
        "Kay", "Morgana", "Ector",
    )}
    ops.link(ids["Arthur"], ids["Uther"], "parent")
    ops.link(ids["Arthur"], ids["Igraine"], "parent")
    ops.link(ids["Kay"], ids["Uther"], "parent")
    ops.link(ids["Kay"], ids["Igraine"], "parent")
    ops.link(ids["Morgana"], ids["Igraine"], "parent")
    ops.link(ids["Morgana"], ids["Gorlois"], "parent")
    ops.link(ids["Arthur"], ids["Guinevere"], "spouse")
    ops.link(ids["Arthur"], ids["Mordred"], "child")
    ops.link(ids["Arthur"], ids["Ector"], "sibling", "step")
    return ids


def sibling_types(view):
    return {entry.person.first_name: entry.type for entry in view.siblings}


class TestImmediateFamily:
    def test_one_hop_relatives(self, repository, family):
        view = FamilyQueries(repository).get_immediate_family(family["Arthur"])
        assert view.focus.first_name == "Arthur"
        assert sorted(p.first_name for p in view.parents) == ["Igraine", "Uther"]
        assert [p.first_name for p in view.spouses] == ["Guinevere"]
        assert [p.first_name for p in view.children] == ["Mordred"]

    def test_siblings_typed(self, repository, family):
        view = FamilyQueries(repository).get_immediate_family(family["Arthur"])
        assert sibling_types(view) == {
            "Kay": SiblingType.FULL,
            "Morgana": SiblingType.HALF,
            "Ector": SiblingType.STEP,
        }

    def test_focus_never_listed_as_sibling(self, repository, family):
        view = FamilyQueries(repository).get_immediate_family(family["Arthur"])
        assert family["Arthur"] not in [entry.person.id for entry in view.siblings]

    def test_missing_focus_returns_none(self, repository):
        assert FamilyQueries(repository).get_immediate_family(999) is None

    def test_bounded_repository_calls(self, counting, family):
        FamilyQueries(counting).get_immediate_family(family["Arthur"])
        kinds = [kind for kind, _ in counting.calls]
        assert kinds.count("get_by_id") == 1
        assert kinds.count("get_by_ids") <= 4

    def test_no_relatives(self, counting, add):
        alone = add("Merlin", "Ambrosius")
        view = FamilyQueries(counting).get_immediate_family(alone)
        assert view.parents == [] and view.siblings == []
        assert len(counting.calls) <= 4

    def test_one_sided_link_reported_not_raised(self, repository, family):
        repository.graph.apply([EdgeOp("store", family["Arthur"], "sibling_adopted", family["Mordred"])])
        view = FamilyQueries(repository).get_immediate_family(family["Arthur"])
        assert [i.other_id for i in view.integrity_issues] == [family["Mordred"]]
        # No shared parents, so the derived fallback drops Mordred
        assert "Mordred" not in sibling_types(view)

    def test_dangling_relative_skipped(self, repository, family):
        repository.store.delete_member(family["Guinevere"])
        view = FamilyQueries(repository).get_immediate_family(family["Arthur"])
        assert view.spouses == []
