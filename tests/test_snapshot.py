"""Tests for snapshot encoding, MemorySnapshotTable and SnapshotStore."""

import json
import logging
from datetime import datetime, timezone

from cartledger.item import LineItem
from cartledger.snapshot import (
    MemorySnapshotTable,
    SnapshotStore,
    SnapshotTable,
    decode_content,
    encode_content,
)


def _items() -> list[LineItem]:
    a = LineItem.from_attributes("a", "A", "10.50", {"size": "L"})
    a.set_quantity(2)
    a.set_tax_rate(21)
    b = LineItem.from_attributes(7, "B", 3)
    return [a, b]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestContentEncoding:
    def test_versioned_document(self) -> None:
        doc = json.loads(encode_content(_items()))
        assert doc["v"] == 1
        assert [r["id"] for r in doc["items"]] == ["a", 7]

    def test_roundtrip(self) -> None:
        items = _items()
        restored = decode_content(encode_content(items))
        assert [i.row_id for i in restored] == [i.row_id for i in items]
        assert restored[0].qty == 2
        assert restored[0].tax_rate == 21
        assert restored[0].options.size == "L"

    def test_corrupt_content(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert decode_content("not json{") == []
        assert "corrupt" in caplog.text

    def test_missing_items(self) -> None:
        assert decode_content(json.dumps({"v": 1})) == []
        assert decode_content(json.dumps([1, 2])) == []

    def test_unknown_version(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert decode_content(json.dumps({"v": 99, "items": []})) == []
        assert "version" in caplog.text

    def test_invalid_records_skipped(self) -> None:
        doc = {"v": 1, "items": [{"id": "x", "name": "X"}, "junk", {"id": "y", "name": "Y", "price": 1}]}
        assert [i.id for i in decode_content(json.dumps(doc))] == ["y"]


# ---------------------------------------------------------------------------
# MemorySnapshotTable
# ---------------------------------------------------------------------------


class TestMemorySnapshotTable:
    def test_is_snapshot_table(self) -> None:
        assert isinstance(MemorySnapshotTable(), SnapshotTable)

    def test_replace_and_fetch(self) -> None:
        table = MemorySnapshotTable()
        now = datetime.now(timezone.utc)
        table.replace("u1", "default", "one", now)
        table.replace("u1", "default", "two", now)
        assert len(table.rows) == 1
        assert table.fetch("u1", "default").content == "two"

    def test_fetch_missing(self) -> None:
        table = MemorySnapshotTable()
        assert table.fetch("u1", "default") is None
        assert not table.exists("u1", "default")

    def test_delete_by_identifier(self) -> None:
        table = MemorySnapshotTable()
        now = datetime.now(timezone.utc)
        table.replace("u1", "default", "x", now)
        table.replace("u1", "wishlist", "x", now)
        table.replace("u2", "default", "x", now)
        assert table.delete("u1") == 2
        assert table.exists("u2", "default")


# ---------------------------------------------------------------------------
# SnapshotStore
# ---------------------------------------------------------------------------


class TestSnapshotStore:
    def test_save_and_load(self) -> None:
        store = SnapshotStore(MemorySnapshotTable())
        store.save("u1", "default", _items())
        instance, items = store.load("u1", "default")
        assert instance == "default"
        assert len(items) == 2

    def test_load_missing(self) -> None:
        assert SnapshotStore(MemorySnapshotTable()).load("u1", "default") is None

    def test_identifier_stringified(self) -> None:
        table = MemorySnapshotTable()
        store = SnapshotStore(table)
        store.save(5, "default", [])
        assert table.rows[0].identifier == "5"
        assert store.exists(5, "default")
        assert store.delete(5) == 1

    def test_timestamp_recorded(self) -> None:
        table = MemorySnapshotTable()
        SnapshotStore(table).save("u1", "default", [])
        assert table.rows[0].created_at.tzinfo is not None
