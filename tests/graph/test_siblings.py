"""Test sibling classification and grouping."""

import pytest

from kinship.errors import SiblingIntegrityError
from kinship.graph.family.siblings import classify, effective_sibling_type, group
from kinship.models import Person, SiblingType


def person(pid, parents=(), siblings=()):
    return Person(id=pid, first_name=f"P{pid}", parents=list(parents), siblings=list(siblings))


class TestClassify:
    """Effective type of a pair."""

    def test_two_shared_parents_is_full(self):
        assert classify(person(1, [10, 11]), person(2, [10, 11])) is SiblingType.FULL

    def test_one_shared_parent_is_half(self):
        assert classify(person(1, [10, 11]), person(2, [10, 12])) is SiblingType.HALF

    def test_only_shared_parent_is_half(self):
        assert classify(person(1, [10]), person(2, [10])) is SiblingType.HALF

    def test_no_shared_parent_is_none(self):
        assert classify(person(1, [10, 11]), person(2, [12, 13])) is None

    def test_empty_parent_set_never_guesses(self):
        assert classify(person(1), person(2, [10])) is None
        assert classify(person(1), person(2)) is None

    def test_same_person_is_none(self):
        a = person(1, [10, 11])
        assert classify(a, a) is None

    def test_explicit_link_wins_over_derivation(self):
        a = person(1, [10, 11], [{"id": 2, "type": "step"}])
        b = person(2, [10, 11], [{"id": 1, "type": "step"}])
        assert classify(a, b) is SiblingType.STEP

    def test_explicit_link_without_parents(self):
        a = person(1, siblings=[{"id": 2, "type": "adopted"}])
        b = person(2, siblings=[{"id": 1, "type": "adopted"}])
        assert classify(a, b) is SiblingType.ADOPTED

    def test_symmetric(self):
        a = person(1, [10, 11])
        b = person(2, [10, 12])
        assert classify(a, b) == classify(b, a)

    def test_legacy_link_uses_inferred_type(self):
        a = person(1, [10], siblings=[2])
        b = person(2, [10, 12], siblings=[1])
        assert classify(a, b) is SiblingType.HALF

    def test_legacy_link_without_parents_is_full(self):
        assert classify(person(1, siblings=[2]), person(2, siblings=[1])) is SiblingType.FULL

    def test_typed_side_wins_over_legacy_side(self):
        a = person(1, siblings=[2])
        b = person(2, siblings=[{"id": 1, "type": "step"}])
        assert classify(a, b) is SiblingType.STEP
        assert classify(b, a) is SiblingType.STEP

    def test_one_sided_link_raises(self):
        a = person(1, siblings=[{"id": 2, "type": "full"}])
        b = person(2)
        with pytest.raises(SiblingIntegrityError) as exc:
            classify(a, b)
        assert exc.value.code == "integrity_violation"
        with pytest.raises(SiblingIntegrityError):
            classify(b, a)

    def test_type_mismatch_raises(self):
        a = person(1, siblings=[{"id": 2, "type": "full"}])
        b = person(2, siblings=[{"id": 1, "type": "step"}])
        with pytest.raises(SiblingIntegrityError):
            classify(a, b)


class TestEffectiveSiblingType:
    def test_falls_back_to_derived_and_records_issue(self):
        a = person(1, [10, 11], [{"id": 2, "type": "step"}])
        b = person(2, [10, 11])
        issues = []
        assert effective_sibling_type(a, b, issues) is SiblingType.FULL
        assert len(issues) == 1
        assert issues[0].person_id == 1


class TestGroup:
    """Sibling clusters."""

    def test_empty_input(self):
        assert group([]) == []

    def test_full_siblings_grouped(self):
        a, b = person(1, [10, 11]), person(2, [10, 11])
        assert group([a, b]) == [[a, b]]

    def test_singletons_produce_no_group(self):
        a, b, c = person(1, [10, 11]), person(2, [10, 11]), person(3, [20, 21])
        assert group([a, b, c]) == [[a, b]]

    def test_transitive_through_half_siblings(self):
        # a and c share no parent but both share one with b
        a = person(1, [10, 11])
        b = person(2, [11, 12])
        c = person(3, [12, 13])
        groups = group([a, b, c])
        assert len(groups) == 1
        assert {p.id for p in groups[0]} == {1, 2, 3}

    def test_each_member_in_at_most_one_group(self):
        members = [person(1, [10, 11]), person(2, [10, 11]), person(3, [20, 21]), person(4, [20, 21])]
        groups = group(members)
        assert [[p.id for p in g] for g in groups] == [[1, 2], [3, 4]]

    def test_step_links_do_not_join(self):
        a = person(1, siblings=[{"id": 2, "type": "step"}])
        b = person(2, siblings=[{"id": 1, "type": "step"}])
        assert group([a, b]) == []

    def test_explicit_full_link_joins_without_parents(self):
        a = person(1, siblings=[{"id": 2, "type": "full"}])
        b = person(2, siblings=[{"id": 1, "type": "full"}])
        assert group([a, b]) == [[a, b]]

    def test_duplicate_input_counted_once(self):
        a, b = person(1, [10, 11]), person(2, [10, 11])
        assert group([a, b, a]) == [[a, b]]

    def test_groups_follow_input_order(self):
        a, b = person(1, [10, 11]), person(2, [10, 11])
        c, d = person(3, [20, 21]), person(4, [20, 21])
        groups = group([c, a, d, b])
        assert [[p.id for p in g] for g in groups] == [[3, 4], [1, 2]]

    def test_full_then_half_chain_forms_one_group(self):
        # 1-2 full by parents, 2-3 half by explicit link, 1-3 unrelated
        a = person(1, [10, 11])
        b = person(2, [10, 11], [{"id": 3, "type": "half"}])
        c = person(3, [12, 13], [{"id": 2, "type": "half"}])
        assert classify(a, c) is None
        groups = group([a, b, c])
        assert [[p.id for p in g] for g in groups] == [[1, 2, 3]]
