"""Shared pytest fixtures for record store tests."""

import pytest

from seed_data import create_empty_db, create_seeded_db, remove_db


@pytest.fixture
def seeded_db():
    """A fresh temporary database with the standard contractors and jobs."""
    path = create_seeded_db()
    yield path
    remove_db(path)


@pytest.fixture
def empty_db():
    """A fresh temporary database with the schema and no rows."""
    path = create_empty_db()
    yield path
    remove_db(path)


@pytest.fixture(scope="module")
def shared_seeded_db():
    """One seeded database per module, for read-only (including property) tests."""
    path = create_seeded_db()
    yield path
    remove_db(path)
