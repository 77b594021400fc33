"""Durable snapshots of ledger content.

Defines the SnapshotTable Protocol that SnapshotStore depends on. The
table is a single key-value table per kind with the columns
``identifier``, ``instance``, ``content`` and ``created_at``; concrete
implementations are MemorySnapshotTable here and SqlSnapshotTable in
``cartledger.sql_table``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from cartledger.constants import SNAPSHOT_SCHEMA_VERSION
from cartledger.errors import InvalidItem, InvalidQuantity
from cartledger.item import LineItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotRow:
    identifier: str
    instance: str
    content: str
    created_at: datetime


@runtime_checkable
class SnapshotTable(Protocol):
    """Persistence backend for stored ledgers.

    Errors raised by an implementation propagate to the ledger caller
    unchanged; nothing here retries.
    """

    def replace(
        self, identifier: str, instance: str, content: str, created_at: datetime,
    ) -> None: ...

    def fetch(self, identifier: str, instance: str) -> SnapshotRow | None: ...

    def exists(self, identifier: str, instance: str) -> bool: ...

    def delete(self, identifier: str) -> int: ...


class MemorySnapshotTable:
    """List-backed SnapshotTable, insertion ordered like a heap table."""

    def __init__(self) -> None:
        self.rows: list[SnapshotRow] = []

    def replace(
        self, identifier: str, instance: str, content: str, created_at: datetime,
    ) -> None:
        self.rows = [
            r for r in self.rows
            if not (r.identifier == identifier and r.instance == instance)
        ]
        self.rows.append(SnapshotRow(identifier, instance, content, created_at))

    def fetch(self, identifier: str, instance: str) -> SnapshotRow | None:
        for row in self.rows:
            if row.identifier == identifier and row.instance == instance:
                return row
        return None

    def exists(self, identifier: str, instance: str) -> bool:
        return self.fetch(identifier, instance) is not None

    def delete(self, identifier: str) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.identifier != identifier]
        return before - len(self.rows)


# ---------------------------------------------------------------------------
# Content encoding
# ---------------------------------------------------------------------------


def encode_content(items: Iterable[LineItem]) -> str:
    """Serialize items to the versioned snapshot document.

    Option values JSON cannot hold are stored as ``str()``, the same
    encoding ``compute_row_id`` uses, so restored row ids still match.
    """
    return json.dumps({
        "v": SNAPSHOT_SCHEMA_VERSION,
        "items": [item.to_dict() for item in items],
    }, default=str)


def decode_content(data: str) -> list[LineItem]:
    """Deserialize a snapshot document. Corrupt content loads as empty."""
    try:
        obj = json.loads(data)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Snapshot content is corrupt; restoring nothing.")
        return []

    if not isinstance(obj, dict) or not isinstance(obj.get("items"), list):
        logger.warning("Snapshot content has no item list; restoring nothing.")
        return []

    version = obj.get("v")
    if version != SNAPSHOT_SCHEMA_VERSION:
        logger.warning("Unsupported snapshot version %r; restoring nothing.", version)
        return []

    items: list[LineItem] = []
    for record in obj["items"]:
        if not isinstance(record, dict):
            continue
        try:
            items.append(LineItem.from_dict(record))
        except (InvalidItem, InvalidQuantity) as exc:
            logger.warning("Skipping invalid snapshot item: %s", exc)
    return items


# ---------------------------------------------------------------------------
# SnapshotStore
# ---------------------------------------------------------------------------


class SnapshotStore:
    """Stores and loads whole ledger instances through a SnapshotTable."""

    def __init__(self, table: SnapshotTable) -> None:
        self._table = table

    @property
    def table(self) -> SnapshotTable:
        return self._table

    def save(self, identifier: Any, instance: str, items: Iterable[LineItem]) -> None:
        """Replace the row for ``(identifier, instance)`` with ``items``."""
        self._table.replace(
            str(identifier),
            instance,
            encode_content(items),
            datetime.now(timezone.utc),
        )

    def load(self, identifier: Any, instance: str) -> tuple[str, list[LineItem]] | None:
        """Return ``(stored_instance, items)`` or None when nothing is stored."""
        row = self._table.fetch(str(identifier), instance)
        if row is None:
            return None
        return row.instance, decode_content(row.content)

    def exists(self, identifier: Any, instance: str) -> bool:
        return self._table.exists(str(identifier), instance)

    def delete(self, identifier: Any) -> int:
        return self._table.delete(str(identifier))
