"""cartledger: session-backed line-item ledgers.

Carts, expenses, fees, invoices, bookings and quotations share one
generic Ledger with snapshot persistence to a key-value table.
"""

__version__ = "0.1.0"

from cartledger.config import LedgerConfig
from cartledger.constants import DEFAULT_INSTANCE, LedgerEvent, LedgerKind
from cartledger.errors import (
    InvalidItem,
    InvalidQuantity,
    LedgerError,
    SnapshotsNotConfigured,
    UnknownConnection,
    UnknownKind,
    UnknownModel,
    UnknownRowId,
)
from cartledger.events import EventDispatcher, EventSink, NullEventSink
from cartledger.formatting import number_format
from cartledger.identity import compute_row_id
from cartledger.item import ItemOptions, LineItem, Payable
from cartledger.kinds import (
    LEDGER_CLASSES,
    Booking,
    Cart,
    Expense,
    Fee,
    Invoice,
    Quotation,
    forget_on_logout,
    make_ledger,
)
from cartledger.ledger import Ledger
from cartledger.session import MemorySession, SessionStore
from cartledger.snapshot import MemorySnapshotTable, SnapshotRow, SnapshotStore, SnapshotTable
from cartledger.sql_table import SqlSnapshotTable, connect_table

__all__ = [
    "LedgerConfig",
    "DEFAULT_INSTANCE",
    "LedgerEvent",
    "LedgerKind",
    "LedgerError",
    "UnknownRowId",
    "UnknownModel",
    "InvalidQuantity",
    "InvalidItem",
    "UnknownKind",
    "UnknownConnection",
    "SnapshotsNotConfigured",
    "EventSink",
    "EventDispatcher",
    "NullEventSink",
    "number_format",
    "compute_row_id",
    "ItemOptions",
    "LineItem",
    "Payable",
    "Ledger",
    "Cart",
    "Expense",
    "Fee",
    "Invoice",
    "Booking",
    "Quotation",
    "LEDGER_CLASSES",
    "make_ledger",
    "forget_on_logout",
    "SessionStore",
    "MemorySession",
    "SnapshotTable",
    "SnapshotRow",
    "SnapshotStore",
    "MemorySnapshotTable",
    "SqlSnapshotTable",
    "connect_table",
]
