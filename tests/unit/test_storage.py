"""
Unit tests for storage adapters.

Both backends share one interface, so every test runs against each.
"""

import pytest

from bidvault.core.storage import MemoryAdapter, SQLiteAdapter


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        adapter = MemoryAdapter()
    else:
        adapter = SQLiteAdapter(tmp_path / "kv.db")
    yield adapter
    adapter.close()


class TestKeyValue:
    """Tests for point operations and enumeration."""

    def test_put_get(self, storage):
        storage.put("k", b"v", bucket="b")
        assert storage.get("k", bucket="b") == b"v"

    def test_missing_key(self, storage):
        assert storage.get("nope", bucket="b") is None

    def test_overwrite(self, storage):
        storage.put("k", b"1", bucket="b")
        storage.put("k", b"2", bucket="b")
        assert storage.get("k", bucket="b") == b"2"
        assert storage.count(bucket="b") == 1

    def test_buckets_isolated(self, storage):
        storage.put("k", b"a", bucket="one")
        storage.put("k", b"b", bucket="two")
        assert storage.get("k", bucket="one") == b"a"
        assert storage.get("k", bucket="two") == b"b"

    def test_items_ascending(self, storage):
        for key in ["0xc", "0xa", "0xb"]:
            storage.put(key, b"x", bucket="b")
        assert [k for k, _ in storage.items(bucket="b")] == ["0xa", "0xb", "0xc"]

    def test_count_empty_bucket(self, storage):
        assert storage.count(bucket="empty") == 0
        assert storage.items(bucket="empty") == []


class TestTransactions:
    """Tests for atomic scopes."""

    def test_commit(self, storage):
        with storage.transaction():
            storage.put("a", b"1", bucket="b")
            storage.put("b", b"2", bucket="b")
        assert storage.count(bucket="b") == 2

    def test_rollback_on_error(self, storage):
        storage.put("a", b"before", bucket="b")
        with pytest.raises(RuntimeError):
            with storage.transaction():
                storage.put("a", b"after", bucket="b")
                storage.put("new", b"x", bucket="other")
                raise RuntimeError("boom")
        assert storage.get("a", bucket="b") == b"before"
        assert storage.get("new", bucket="other") is None

    def test_nested_scope_joins_outer(self, storage):
        """An inner scope's writes roll back with the outer scope."""
        with pytest.raises(RuntimeError):
            with storage.transaction():
                with storage.transaction():
                    storage.put("inner", b"x", bucket="b")
                raise RuntimeError("boom")
        assert storage.get("inner", bucket="b") is None

    def test_usable_after_rollback(self, storage):
        with pytest.raises(RuntimeError):
            with storage.transaction():
                raise RuntimeError("boom")
        with storage.transaction():
            storage.put("k", b"v", bucket="b")
        assert storage.get("k", bucket="b") == b"v"


class TestSQLitePersistence:
    """Tests specific to the on-disk backend."""

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "kv.db"
        first = SQLiteAdapter(path)
        with first.transaction():
            first.put("k", b"v", bucket="b")
        first.close()

        second = SQLiteAdapter(path)
        assert second.get("k", bucket="b") == b"v"
        second.close()

    def test_creates_parent_dir(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "kv.db"
        adapter = SQLiteAdapter(path)
        assert path.parent.exists()
        adapter.close()
