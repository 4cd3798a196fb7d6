"""Pytest fixtures for stamp card tests."""

import pytest

from app import create_app
from stampcard.catalog import StampCatalog, StampDefinition, load_catalog
from stampcard.store import ProgressStore


@pytest.fixture
def catalog():
    """The shipped six-stamp catalog."""
    return load_catalog(force_refresh=True)


@pytest.fixture
def small_catalog():
    return StampCatalog(
        (
            StampDefinition(index=1, name="Alpha Gate"),
            StampDefinition(index=2, name="Beta Hall"),
            StampDefinition(index=3, name="Gamma Yard"),
        )
    )


@pytest.fixture
def fixed_clock():
    return lambda: "2024-05-01T10:00:00+00:00"


@pytest.fixture
def store(catalog, fixed_clock):
    return ProgressStore(catalog, clock=fixed_clock)


@pytest.fixture
def app():
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "GEMINI_API_KEY": None,
            "MAINTENANCE_MODE": False,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()
