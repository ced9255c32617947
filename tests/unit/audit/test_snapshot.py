"""Tests for snapshot reading."""

from unittest.mock import MagicMock

import pytest

from auditable.audit.configuration import AuditConfig
from auditable.audit.snapshot import Snapshot, SnapshotReader, join_ids
from tests.models import Post


@pytest.fixture
def store():
    """Create a mock audit store."""
    return MagicMock()


@pytest.fixture
def config() -> AuditConfig:
    return AuditConfig(ignore=frozenset({"id"}), habtm=("tags",))


class TestSnapshot:
    """Tests for the Snapshot mapping."""

    def test_preserves_order(self):
        snapshot = Snapshot({"b": 1, "a": 2})

        assert list(snapshot) == ["b", "a"]
        assert snapshot.to_dict() == {"b": 1, "a": 2}

    def test_is_immutable(self):
        snapshot = Snapshot({"a": 1})

        with pytest.raises(TypeError):
            snapshot["a"] = 2  # type: ignore[index]

    def test_empty_snapshot_is_not_absent(self):
        """Test an empty snapshot is still a snapshot."""
        snapshot = Snapshot()

        assert snapshot is not None
        assert len(snapshot) == 0
        assert snapshot == {}


class TestJoinIds:
    """Tests for many-to-many id normalization."""

    def test_sorts_ascending(self):
        assert join_ids([3, 1, 2]) == "1,2,3"

    def test_sorts_numerically(self):
        assert join_ids([10, 9, 100]) == "9,10,100"

    def test_keeps_duplicates(self):
        assert join_ids([2, 1, 2]) == "1,2,2"

    def test_empty(self):
        assert join_ids([]) == ""


class TestSnapshotReader:
    """Tests for SnapshotReader."""

    def test_read_folds_relations_into_id_lists(self, store, config):
        """Test related rows become a sorted, comma-joined pseudo-field."""
        store.fetch_one.return_value = {
            "id": 1,
            "title": "Hello",
            "tags": [{"id": 3}, {"id": 1}, {"id": 2}],
        }

        snapshot = SnapshotReader(store).read(Post, 1, config)

        store.fetch_one.assert_called_once_with(Post, 1, ("tags",))
        assert snapshot == {"id": 1, "title": "Hello", "tags": "1,2,3"}
        assert list(snapshot) == ["id", "title", "tags"]

    def test_read_without_related_rows(self, store, config):
        """Test an entity with no related rows gets an empty id list."""
        store.fetch_one.return_value = {"id": 1, "title": "Hello", "tags": []}

        snapshot = SnapshotReader(store).read(Post, 1, config)

        assert snapshot["tags"] == ""

    def test_read_skips_relation_missing_from_record(self, store, config):
        """Test a relation the store did not return is left out."""
        store.fetch_one.return_value = {"id": 1, "title": "Hello"}

        snapshot = SnapshotReader(store).read(Post, 1, config)

        assert "tags" not in snapshot

    def test_read_without_relations(self, store, config):
        """Test relations are not requested when excluded."""
        store.fetch_one.return_value = {"id": 1, "title": "Hello"}

        snapshot = SnapshotReader(store).read(Post, 1, config, include_relations=False)

        store.fetch_one.assert_called_once_with(Post, 1, ())
        assert snapshot == {"id": 1, "title": "Hello"}

    def test_read_absent_entity(self, store, config):
        """Test a missing entity yields None instead of raising."""
        store.fetch_one.return_value = None

        assert SnapshotReader(store).read(Post, 99, config) is None
