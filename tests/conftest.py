"""
Shared pytest fixtures and configuration for tablemodel tests.

This module provides:
- Registry cleanup fixtures for test isolation (engines, descriptors, settings)
- An in-memory SQLite database registered under the ``test`` alias
- A fake connection for dispatcher tests that must not touch a database

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(sqlite_db):
        Item.insert(Item(name="a"), ["name"])
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import sqlalchemy as sa

# Ensure tablemodel package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tablemodel.core.settings import get_settings
from tablemodel.framework.operations import ModelOperations
from tablemodel.sql.connection import DatabaseManager
from tablemodel.sql.engine import create_model_engine

from tests._support.fakes import FakeConnection


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests that use the SQLite fixture as integration, the rest as unit."""
    for item in items:
        if "sqlite_db" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Registry Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_registries() -> Generator[None, None, None]:
    """
    Reset engine registry, descriptor cache and cached settings around each test.

    No test can leak a registered database or a memoized descriptor into
    another.
    """
    DatabaseManager.reset()
    ModelOperations.clear_descriptor_cache()
    get_settings.cache_clear()
    yield
    DatabaseManager.reset()
    ModelOperations.clear_descriptor_cache()
    get_settings.cache_clear()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def sqlite_db() -> sa.Engine:
    """In-memory SQLite registered as ``test`` with items/memberships/notes tables."""
    engine = create_model_engine("sqlite://")
    with engine.begin() as conn:
        conn.execute(
            sa.text(
                """
                CREATE TABLE items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    value INTEGER,
                    tag TEXT
                )
                """
            )
        )
        conn.execute(
            sa.text(
                """
                CREATE TABLE memberships (
                    user_id INTEGER NOT NULL,
                    group_id INTEGER NOT NULL,
                    role TEXT,
                    PRIMARY KEY (user_id, group_id)
                )
                """
            )
        )
        conn.execute(
            sa.text("CREATE TABLE notes (id INTEGER PRIMARY KEY AUTOINCREMENT, body TEXT)")
        )
    DatabaseManager.register("test", engine)
    return engine


@pytest.fixture
def fake_connection(monkeypatch: pytest.MonkeyPatch) -> FakeConnection:
    """Route every DatabaseManager.connect() call to one FakeConnection."""
    fake = FakeConnection()
    monkeypatch.setattr(DatabaseManager, "connect", classmethod(lambda cls, name: fake))
    return fake
