"""Tests for SqlSnapshotTable against SQLite."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, inspect

from cartledger.config import LedgerConfig
from cartledger.errors import UnknownConnection
from cartledger.kinds import Booking
from cartledger.session import MemorySession
from cartledger.snapshot import SnapshotTable
from cartledger.sql_table import SqlSnapshotTable, connect_table


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def table(db_url) -> SqlSnapshotTable:
    t = SqlSnapshotTable(db_url, "shoppingbooking")
    t.create()
    return t


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestSqlSnapshotTable:
    def test_is_snapshot_table(self, table) -> None:
        assert isinstance(table, SnapshotTable)

    def test_create_table(self, table) -> None:
        assert inspect(table.engine).has_table("shoppingbooking")
        table.create()  # idempotent

    def test_replace_and_fetch(self, table) -> None:
        table.replace("u1", "default", "one", NOW)
        table.replace("u1", "default", "two", NOW)
        row = table.fetch("u1", "default")
        assert row.content == "two"
        assert row.identifier == "u1"
        assert row.instance == "default"
        assert row.created_at.replace(tzinfo=None) == NOW.replace(tzinfo=None)

    def test_fetch_missing(self, table) -> None:
        assert table.fetch("u1", "default") is None
        assert not table.exists("u1", "default")

    def test_exists(self, table) -> None:
        table.replace("u1", "default", "x", NOW)
        assert table.exists("u1", "default")
        assert not table.exists("u1", "wishlist")

    def test_delete_all_instances(self, table) -> None:
        table.replace("u1", "default", "x", NOW)
        table.replace("u1", "wishlist", "x", NOW)
        table.replace("u2", "default", "x", NOW)
        assert table.delete("u1") == 2
        assert table.exists("u2", "default")

    def test_accepts_engine(self, db_url) -> None:
        engine = create_engine(db_url)
        t = SqlSnapshotTable(engine, "shoppingfee")
        t.create()
        assert t.engine is engine
        assert t.name == "shoppingfee"


class TestLedgerOverSql:
    def test_store_restore_round_trip(self, table) -> None:
        booking = Booking(MemorySession(), snapshots=table)
        item = booking.add("room-12", "Double room", 3, 80, {"nights": 3}, 10)
        booking.store("guest-9")
        booking.destroy()
        booking.restore("guest-9")
        restored = booking.get(item.row_id)
        assert restored.qty == 3
        assert restored.options.nights == 3
        assert booking.total() == "264.00"


class TestConnectTable:
    def test_default_connection(self, db_url) -> None:
        t = connect_table(LedgerConfig.for_kind("invoice"), {"default": db_url})
        assert t.name == "shoppinginvoice"

    def test_named_connection(self, db_url) -> None:
        config = LedgerConfig.for_kind("fee", {"database": {"connection": "reporting"}})
        t = connect_table(config, {"default": "sqlite://", "reporting": db_url})
        assert str(t.engine.url) == db_url

    def test_unknown_connection(self) -> None:
        config = LedgerConfig.for_kind("fee", {"database.connection": "missing"})
        with pytest.raises(UnknownConnection):
            connect_table(config, {"default": "sqlite://"})
