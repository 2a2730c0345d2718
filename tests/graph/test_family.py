"""Test the FamilyGraph facade."""

import pytest

from kinship.errors import InvalidRelationshipError, MemberNotFoundError
from kinship.models import Person, SiblingType


class TestMemberOperations:
    def test_add_member_with_relative(self, graph):
        arthur = graph.add_member(Person(first_name="Arthur", last_name="Pendragon"))
        uther = graph.add_member(Person(first_name="Uther"), relative_id=arthur.id, kind="parent")
        assert uther.children == [arthur.id]
        assert graph.get_member(arthur.id).parents == [uther.id]

    def test_add_sibling_with_type(self, graph):
        arthur = graph.add_member(Person(first_name="Arthur"))
        kay = graph.add_member(Person(first_name="Kay"), arthur.id, "sibling", "adopted")
        assert graph.classify(graph.get_member(arthur.id), kay) is SiblingType.ADOPTED

    def test_add_member_ignores_supplied_relations(self, graph):
        person = graph.add_member(Person(first_name="Arthur", parents=[50], siblings=[51]))
        assert person.parents == [] and person.siblings == []

    def test_missing_relative_leaves_no_orphan(self, graph):
        with pytest.raises(MemberNotFoundError):
            graph.add_member(Person(first_name="Mordred"), relative_id=999, kind="child")
        assert graph.search("Mordred") == []

    def test_failed_link_removes_new_member(self, graph):
        child = graph.add_member(Person(first_name="Arthur"))
        graph.add_member(Person(first_name="Uther"), child.id, "parent")
        graph.add_member(Person(first_name="Igraine"), child.id, "parent")
        with pytest.raises(InvalidRelationshipError):
            graph.add_member(Person(first_name="Gorlois"), child.id, "parent")
        assert graph.search("Gorlois") == []

    def test_kind_requires_relative(self, graph):
        with pytest.raises(InvalidRelationshipError):
            graph.add_member(Person(first_name="Arthur"), kind="parent")

    def test_update_member(self, graph):
        arthur = graph.add_member(Person(first_name="Arthur"))
        assert graph.update_member(arthur.id, biography="King of the Britons")
        assert graph.get_member(arthur.id).biography == "King of the Britons"


class TestQueries:
    def test_family_trees_and_groups(self, graph):
        uther = graph.add_member(Person(first_name="Uther"))
        igraine = graph.add_member(Person(first_name="Igraine"))
        arthur = graph.add_member(Person(first_name="Arthur"), uther.id, "child")
        graph.link(arthur.id, igraine.id, "parent")
        kay = graph.add_member(Person(first_name="Kay"), uther.id, "child")
        graph.link(kay.id, igraine.id, "parent")

        family = graph.get_immediate_family(arthur.id)
        assert [(s.person.id, s.type) for s in family.siblings] == [(kay.id, SiblingType.FULL)]

        ancestors = graph.get_ancestors(arthur.id)
        assert {p.id for p in ancestors.parents} == {uther.id, igraine.id}

        descendants = graph.get_descendants(uther.id)
        assert {p.id for p in descendants.children} == {arthur.id, kay.id}

        groups = graph.group_siblings(graph.get_members([uther.id, arthur.id, kay.id]))
        assert [[p.id for p in g] for g in groups] == [[arthur.id, kay.id]]

    def test_integrity_clean_after_facade_writes(self, graph):
        arthur = graph.add_member(Person(first_name="Arthur"))
        graph.add_member(Person(first_name="Guinevere"), arthur.id, "spouse")
        assert graph.check_integrity() == []
