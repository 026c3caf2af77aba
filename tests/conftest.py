"""Shared pytest fixtures for HustleQuest tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from hustlequest.app import HustleQuest
from hustlequest.database.db import configure_engine, init_db
from hustlequest.storage import DatabaseStorage, MemoryStorage

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    """Fixed clock at 2025-03-10 09:00, advanced by hand."""
    return FakeClock()


@pytest.fixture(params=["memory", "database"])
def storage(request, clock):
    """Each storage-backed test runs once per backend."""
    if request.param == "memory":
        return MemoryStorage(clock)
    return DatabaseStorage(clock)


@pytest.fixture
def quest(qapp, storage, clock):
    """Fully wired facade over the parametrized backend."""
    return HustleQuest(storage, clock=clock)
