"""
Unit test fixtures: a Store wired to the in-memory fake client.
"""
import pytest

from docmapper import Store
from docmapper_testing import FakeMongoClient


@pytest.fixture
def fake_client():
    return FakeMongoClient()


@pytest.fixture
def store(fake_client):
    Store.init(database="testdb", client=fake_client)
    return Store.get_instance()


@pytest.fixture
def widgets(fake_client):
    """The raw fake collection behind Widget."""
    return fake_client["testdb"]["widgets"]
