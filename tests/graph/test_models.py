"""Test person and link models."""

import pytest
from pydantic import ValidationError

from kinship.models import FilterCriteria, Person, RelationKind, SiblingLink, SiblingType


class TestSiblingFormats:
    """Both stored sibling formats are read."""

    def test_typed_links(self):
        person = Person(first_name="Arthur", siblings=[{"id": 6, "type": "half"}])
        assert person.siblings == [SiblingLink(id=6, type=SiblingType.HALF)]

    def test_legacy_bare_ids_have_unknown_type(self):
        person = Person(first_name="Gawain", siblings=[10, 11])
        assert [link.id for link in person.siblings] == [10, 11]
        assert all(link.type is None for link in person.siblings)

    def test_mixed_formats_keep_every_id(self):
        person = Person(first_name="Gawain", siblings=[10, {"id": 11, "type": "step"}])
        assert person.sibling_link(10).type is None
        assert person.sibling_link(11).type is SiblingType.STEP

    def test_duplicates_dropped(self):
        person = Person(first_name="Arthur", parents=[4, 5, 4], siblings=[6, {"id": 6, "type": "full"}])
        assert person.parents == [4, 5]
        assert len(person.siblings) == 1


class TestPersonProperties:
    def test_full_name(self):
        assert Person(first_name="Arthur", last_name="Pendragon").full_name == "Arthur Pendragon"
        assert Person(first_name="Merlin").full_name == "Merlin"

    def test_is_living(self):
        assert Person(first_name="A").is_living
        assert not Person(first_name="A", death_date="1990-01-01").is_living

    def test_relation_ids(self):
        person = Person(first_name="A", parents=[1], children=[2], spouses=[3], siblings=[4])
        assert person.relation_ids(RelationKind.PARENT) == [1]
        assert person.relation_ids(RelationKind.CHILD) == [2]
        assert person.relation_ids(RelationKind.SPOUSE) == [3]
        assert person.relation_ids(RelationKind.SIBLING) == [4]


class TestRelationKind:
    def test_reciprocal(self):
        assert RelationKind.PARENT.reciprocal is RelationKind.CHILD
        assert RelationKind.CHILD.reciprocal is RelationKind.PARENT
        assert RelationKind.SPOUSE.reciprocal is RelationKind.SPOUSE
        assert RelationKind.SIBLING.reciprocal is RelationKind.SIBLING


class TestFilterCriteria:
    def test_matches_year_range(self):
        criteria = FilterCriteria(birth_year_start=1950, birth_year_end=1960)
        assert criteria.matches(Person(first_name="A", birth_date="1955-03-01"))
        assert not criteria.matches(Person(first_name="B", birth_date="1970-03-01"))
        assert not criteria.matches(Person(first_name="C"))

    def test_matches_last_name_case_insensitive(self):
        criteria = FilterCriteria(last_name="pendragon", gender="male")
        assert criteria.matches(Person(first_name="Arthur", last_name="Pendragon", gender="male"))
        assert not criteria.matches(Person(first_name="Morgana", last_name="Pendragon", gender="female"))


class TestParentCap:
    def test_more_than_two_parents_rejected(self):
        with pytest.raises(ValidationError):
            Person(first_name="Arthur", parents=[1, 2, 3])

    def test_duplicates_do_not_count_against_cap(self):
        assert Person(first_name="Arthur", parents=[1, 2, 1]).parents == [1, 2]
