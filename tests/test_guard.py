"""
Tests for guard.py - fail-soft loads, the empty-categories guard and
debounced saves.
"""

import time

import pytest

from collegematrix.errors import DocumentNotFoundError, TransportError
from collegematrix.guard import PersistenceGuard
from collegematrix.models import Category, CostData, UserData


class BrokenStore:
    """Store whose every call fails like an unreachable backend."""

    def get(self, key):
        raise TransportError("get failed: unable to open database file")

    def exists(self, key):
        raise TransportError("get failed: unable to open database file")

    def merge_update(self, key, fields):
        raise TransportError("merge_update failed: disk I/O error")

    def create(self, key, fields):
        raise TransportError("create failed: disk I/O error")


class TestLoad:
    """Test load behaviour."""

    def test_load_existing(self, seeded_store, quiet_logger):
        guard = PersistenceGuard(seeded_store, logger=quiet_logger)

        data = guard.load("user-1")

        assert isinstance(data, UserData)
        assert data.user_id == "user-1"
        assert [c.id for c in data.categories] == ["net-price", "major"]
        assert data.costs["school-1"] == CostData(tuition=60000, housing=10000, scholarships=30000)

    def test_load_missing_returns_none(self, guard):
        assert guard.load("nobody") is None

    def test_load_transport_error_returns_none(self, quiet_logger):
        guard = PersistenceGuard(BrokenStore(), logger=quiet_logger)

        assert guard.load("user-1") is None
        assert quiet_logger.metrics["loads_not_found"] == 1


class TestSave:
    """Test upsert and the empty-categories guard."""

    def test_save_creates_document(self, guard, store, categories):
        assert guard.save("new-user", {"email": "n@example.com", "categories": categories}) is True

        doc = store.get("new-user")
        assert doc["email"] == "n@example.com"
        assert doc["categories"][0] == {
            "id": "net-price",
            "name": "Net Price",
            "description": "Total annual cost after scholarships and financial aid",
            "isCustom": False,
        }
        assert doc["createdAt"] == doc["updatedAt"]

    def test_save_merges_into_existing(self, seeded_store, quiet_logger):
        guard = PersistenceGuard(seeded_store, logger=quiet_logger)

        guard.save("user-1", {"weights": {"net-price": 50.0, "major": 50.0}})

        doc = seeded_store.get("user-1")
        assert doc["weights"] == {"net-price": 50.0, "major": 50.0}
        assert len(doc["schools"]) == 1
        assert doc["updatedAt"] > doc["createdAt"]

    def test_empty_categories_refused(self, seeded_store, seeded_document, quiet_logger):
        guard = PersistenceGuard(seeded_store, logger=quiet_logger)
        before = seeded_store.get("user-1")

        assert guard.save("user-1", {"categories": [], "weights": {}}) is False

        after = seeded_store.get("user-1")
        assert after["categories"] == seeded_document["categories"]
        assert after["weights"] == seeded_document["weights"]
        assert after["updatedAt"] == before["updatedAt"]
        assert quiet_logger.metrics["saves_refused"] == 1

    def test_empty_categories_refused_for_new_user(self, guard, store):
        assert guard.save("new-user", {"categories": []}) is False
        assert store.get("new-user") is None

    def test_absent_categories_not_guarded(self, seeded_store, quiet_logger):
        guard = PersistenceGuard(seeded_store, logger=quiet_logger)

        assert guard.save("user-1", {"email": "changed@example.com"}) is True
        assert seeded_store.get("user-1")["email"] == "changed@example.com"

    def test_save_rejects_unwritable_field(self, guard):
        with pytest.raises(KeyError):
            guard.save("user-1", {"user_id": "someone-else"})

    def test_save_propagates_transport_error(self, quiet_logger, categories):
        guard = PersistenceGuard(BrokenStore(), logger=quiet_logger)

        with pytest.raises(TransportError):
            guard.save("user-1", {"categories": categories})
        assert quiet_logger.metrics["errors_by_type"] == {"TransportError": 1}


class TestPremiumStatus:
    """Test the single-field premium update."""

    def test_update_premium_status(self, seeded_store, quiet_logger):
        guard = PersistenceGuard(seeded_store, logger=quiet_logger)

        guard.update_premium_status("user-1", True)

        doc = seeded_store.get("user-1")
        assert doc["isPremium"] is True
        assert len(doc["categories"]) == 2

    def test_update_premium_status_missing_user(self, guard):
        with pytest.raises(DocumentNotFoundError):
            guard.update_premium_status("nobody", True)


class TestDebouncedSave:
    """Test trailing-edge debounce."""

    def test_burst_coalesces_to_last_call(self, guard, monkeypatch):
        calls = []
        monkeypatch.setattr(guard, "save", lambda user_id, data: calls.append((user_id, data)) or True)

        guard.debounced_save("user-1", {"email": "first@example.com"})
        time.sleep(0.01)
        guard.debounced_save("user-1", {"email": "second@example.com"})
        time.sleep(0.01)
        guard.debounced_save("user-1", {"email": "third@example.com"})

        time.sleep(0.3)

        assert calls == [("user-1", {"email": "third@example.com"})]
        assert guard.pending is False

    def test_debounced_save_writes_to_store(self, guard, store, categories):
        guard.debounced_save("user-1", {"categories": categories, "email": "a@example.com"}, delay_ms=10)

        time.sleep(0.3)

        assert store.get("user-1")["email"] == "a@example.com"

    def test_separate_bursts_each_save(self, guard, monkeypatch):
        calls = []
        monkeypatch.setattr(guard, "save", lambda user_id, data: calls.append(data) or True)

        guard.debounced_save("user-1", {"email": "a"}, delay_ms=10)
        time.sleep(0.2)
        guard.debounced_save("user-1", {"email": "b"}, delay_ms=10)
        time.sleep(0.2)

        assert calls == [{"email": "a"}, {"email": "b"}]

    def test_flush_runs_pending_immediately(self, guard, monkeypatch):
        calls = []
        monkeypatch.setattr(guard, "save", lambda user_id, data: calls.append(data) or True)

        guard.debounced_save("user-1", {"email": "now"}, delay_ms=5000)
        assert guard.pending is True

        assert guard.flush() is True
        assert calls == [{"email": "now"}]
        assert guard.pending is False
        assert guard.flush() is None

    def test_cancel_drops_pending(self, guard, monkeypatch):
        calls = []
        monkeypatch.setattr(guard, "save", lambda user_id, data: calls.append(data) or True)

        guard.debounced_save("user-1", {"email": "never"}, delay_ms=20)
        guard.cancel()
        time.sleep(0.2)

        assert calls == []

    def test_failed_debounced_save_is_dropped(self, quiet_logger, categories):
        guard = PersistenceGuard(BrokenStore(), logger=quiet_logger)

        guard.debounced_save("user-1", {"categories": categories}, delay_ms=5000)

        assert guard.flush() is None
        assert quiet_logger.metrics["saves_failed"] == 1

    def test_refused_snapshot_through_debounce(self, seeded_store, seeded_document, quiet_logger):
        guard = PersistenceGuard(seeded_store, delay_ms=10, logger=quiet_logger)

        guard.debounced_save("user-1", {"categories": [Category("major", "Major")]})
        guard.debounced_save("user-1", {"categories": []})
        time.sleep(0.3)

        assert seeded_store.get("user-1")["categories"] == seeded_document["categories"]
        assert quiet_logger.metrics["saves_refused"] == 1
        assert quiet_logger.metrics["saves_coalesced"] == 1
