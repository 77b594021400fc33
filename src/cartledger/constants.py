"""Constants shared by every ledger kind."""

from enum import Enum


DEFAULT_INSTANCE = "default"
DEFAULT_TAX_RATE = 21  # percent, applied when an item has no explicit rate
SNAPSHOT_SCHEMA_VERSION = 1


class LedgerKind(str, Enum):
    """The six ledger kinds; each value is also its session key prefix."""

    CART = "cart"
    EXPENSE = "expense"
    FEE = "fee"
    INVOICE = "invoice"
    BOOKING = "booking"
    QUOTATION = "quotation"


class LedgerEvent(str, Enum):
    """Event suffixes dispatched as ``"<kind>.<suffix>"``."""

    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
    STORED = "stored"
    RESTORED = "restored"
