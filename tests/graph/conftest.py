"""Pytest fixtures for graph tests."""

import pytest

from kinship.config import DatabaseSettings, Settings
from kinship.graph.family.graph import FamilyGraph
from kinship.graph.repository import SqliteMemberRepository
from kinship.models import Person


class CountingRepository:
    """Wraps a repository and counts read calls."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def get_by_id(self, member_id):
        self.calls.append(("get_by_id", member_id))
        return self.inner.get_by_id(member_id)

    def get_by_ids(self, member_ids):
        member_ids = list(member_ids)
        self.calls.append(("get_by_ids", member_ids))
        return self.inner.get_by_ids(member_ids)

    def search(self, query):
        return self.inner.search(query)

    def transaction(self, member_ids):
        return self.inner.transaction(member_ids)

    def reset(self):
        self.calls = []


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at temporary databases."""
    return Settings(database=DatabaseSettings(
        members_db_path=str(tmp_path / "members.db"),
        graph_db_path=str(tmp_path / "graph.db"),
    ))


@pytest.fixture
def repository(settings):
    """Fresh repository."""
    return SqliteMemberRepository(
        settings.database.members_db_path,
        settings.database.graph_db_path,
    )


@pytest.fixture
def counting(repository):
    """Repository wrapper recording every read."""
    return CountingRepository(repository)


@pytest.fixture
def graph(settings, repository):
    """FamilyGraph instance."""
    return FamilyGraph(settings, repository)


@pytest.fixture
def add(repository):
    """Create a standalone member and return its id."""
    def _add(first_name, last_name="Pendragon", **kwargs):
        return repository.create_member(Person(first_name=first_name, last_name=last_name, **kwargs)).id
    return _add
