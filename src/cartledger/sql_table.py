"""SnapshotTable backed by a relational table through SQLAlchemy Core.

One table per kind (``shopping<kind>`` by default) keyed by
``(identifier, instance)``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from sqlalchemy import (
    Column,
    ColumnElement,
    DateTime,
    Engine,
    MetaData,
    String,
    Table,
    Text,
    and_,
    create_engine,
    delete,
    insert,
    select,
)

from cartledger.config import LedgerConfig
from cartledger.errors import UnknownConnection
from cartledger.snapshot import SnapshotRow

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION = "default"


def snapshot_table(name: str, metadata: MetaData) -> Table:
    return Table(
        name,
        metadata,
        Column("identifier", String(255), primary_key=True),
        Column("instance", String(255), primary_key=True),
        Column("content", Text, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )


class SqlSnapshotTable:
    """SnapshotTable over any SQLAlchemy engine.

    ``replace`` deletes and inserts inside one transaction, so a failure
    between the two statements keeps the previous row.
    """

    def __init__(
        self,
        engine: Engine | str,
        table_name: str = "shoppingcart",
        metadata: MetaData | None = None,
    ) -> None:
        self._engine = create_engine(engine) if isinstance(engine, str) else engine
        self._metadata = metadata if metadata is not None else MetaData()
        self._table = snapshot_table(table_name, self._metadata)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def name(self) -> str:
        return self._table.name

    def create(self) -> None:
        """Create the table if it does not exist yet."""
        self._metadata.create_all(self._engine, tables=[self._table])

    def _match(self, identifier: str, instance: str) -> ColumnElement[bool]:
        c = self._table.c
        return and_(c.identifier == identifier, c.instance == instance)

    def replace(
        self, identifier: str, instance: str, content: str, created_at: datetime,
    ) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(self._table).where(self._match(identifier, instance)))
            conn.execute(insert(self._table).values(
                identifier=identifier,
                instance=instance,
                content=content,
                created_at=created_at,
            ))
        logger.debug("Replaced %s row for %s/%s.", self.name, identifier, instance)

    def fetch(self, identifier: str, instance: str) -> SnapshotRow | None:
        stmt = select(self._table).where(self._match(identifier, instance)).limit(1)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return SnapshotRow(
            identifier=row["identifier"],
            instance=row["instance"],
            content=row["content"],
            created_at=row["created_at"],
        )

    def exists(self, identifier: str, instance: str) -> bool:
        stmt = (
            select(self._table.c.identifier)
            .where(self._match(identifier, instance))
            .limit(1)
        )
        with self._engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def delete(self, identifier: str) -> int:
        stmt = delete(self._table).where(self._table.c.identifier == identifier)
        with self._engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount
        logger.debug("Deleted %d %s row(s) for %s.", deleted, self.name, identifier)
        return deleted


def connect_table(
    config: LedgerConfig,
    connections: Mapping[str, Engine | str],
    default: str = DEFAULT_CONNECTION,
) -> SqlSnapshotTable:
    """Build the SqlSnapshotTable for ``config``.

    ``config.connection`` names an entry of ``connections`` (an engine or
    a database URL); ``None`` selects ``default``.
    """
    name = config.connection or default
    if name not in connections:
        raise UnknownConnection(f"Database connection {name!r} is not configured.")
    return SqlSnapshotTable(connections[name], config.table)
