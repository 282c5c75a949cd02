"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timedelta
from typing import Dict, Any

from collegematrix.guard import PersistenceGuard
from collegematrix.logger import get_logger, reset_logger
from collegematrix.models import Category, CostData, School, net_price_category
from collegematrix.storage import DocumentStore


class FakeClock:
    """Deterministic store clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2024, 9, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir with no console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock) -> DocumentStore:
    """Empty document store in a temporary SQLite file."""
    return DocumentStore(tmp_path / "test.db", clock=clock, retry_delay=0.0)


@pytest.fixture
def guard(store, quiet_logger):
    g = PersistenceGuard(store, delay_ms=50, logger=quiet_logger)
    yield g
    g.cancel()


@pytest.fixture
def categories():
    return [
        net_price_category(),
        Category("major", "Major", "Strength and reputation of your intended major program"),
    ]


@pytest.fixture
def schools():
    return [
        School("school-1", "Duke University", "Durham, NC"),
        School("school-2", "Wake Forest University", "Winston-Salem, NC"),
    ]


@pytest.fixture
def seeded_document() -> Dict[str, Any]:
    """Stored-layout document for an existing user."""
    return {
        "email": "student@example.com",
        "isPremium": False,
        "categories": [
            {"id": "net-price", "name": "Net Price", "description": "Total annual cost", "isCustom": False},
            {"id": "major", "name": "Major", "description": "Program strength", "isCustom": False},
        ],
        "weights": {"net-price": 60.0, "major": 40.0},
        "schools": [
            {"id": "school-1", "name": "Duke University", "location": "Durham, NC", "isCustom": False},
        ],
        "ratings": {"school-1": {"net-price": 5.0, "major": 9.0}},
        "costs": {"school-1": CostData(tuition=60000, housing=10000, scholarships=30000).to_doc()},
    }


@pytest.fixture
def seeded_store(store, seeded_document) -> DocumentStore:
    store.create("user-1", seeded_document)
    return store
