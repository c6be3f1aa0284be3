"""
Test configuration and fixtures for the docmapper test suite.
"""
import os

import pytest

from docmapper import Store
from docmapper.configuration import clear_config_cache
from docmapper.observability import clear_obs_context


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Every test starts without a Store, with an empty config, and with a clean obs context."""
    Store.reset()
    clear_config_cache()
    clear_obs_context()
    monkeypatch.setenv("DOCMAPPER_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.delenv("DOCMAPPER_NAMESPACE", raising=False)
    monkeypatch.delenv("DOCMAPPER_OBSERVABILITY", raising=False)
    # keep .env files in the working directory from leaking into tests
    monkeypatch.chdir(tmp_path)
    yield
    Store.reset()
    clear_config_cache()
    clear_obs_context()


@pytest.fixture
def mongo_uri():
    """Real MongoDB URI for integration tests; skips when not configured."""
    uri = os.getenv("DOCMAPPER_TEST_MONGO_URI")
    if not uri:
        pytest.skip("DOCMAPPER_TEST_MONGO_URI not set; skipping integration tests.")
    return uri
