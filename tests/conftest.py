"""
Pytest Configuration and Fixtures.
Shared fixtures for the inpatient export tests.
"""

import os

import pytest

from factories import build_encounter, build_mappers, build_patient
from src.core.config import ExportSettings, reset_export_settings
from src.services.rif.identifiers import IdentifierIssuer
from src.services.rif.writers import InMemoryRecordSink, RecordWriters


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep RIF_* variables of the host environment out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("RIF_"):
            monkeypatch.delenv(key, raising=False)
    reset_export_settings()
    yield
    reset_export_settings()


@pytest.fixture
def settings():
    """Default export settings."""
    return ExportSettings()


@pytest.fixture
def issuer():
    """Isolated identifier issuer starting at -1."""
    return IdentifierIssuer()


@pytest.fixture
def mappers():
    """Mapping tables covering the test vocabulary."""
    return build_mappers()


@pytest.fixture
def sink():
    """In-memory record sink."""
    return InMemoryRecordSink()


@pytest.fixture
def writers(sink):
    """Record writers over the in-memory sink."""
    return RecordWriters(sink)


@pytest.fixture
def make_encounter():
    """Factory for encounters with a claim."""
    return build_encounter


@pytest.fixture
def make_patient():
    """Factory for Medicare-covered patients."""
    return build_patient


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
