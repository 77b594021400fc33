"""Exception hierarchy for ledger operations."""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base exception for ledger operations."""


class UnknownRowId(LedgerError, KeyError):
    """The ledger has no item under the given row id."""

    def __init__(self, row_id: str, kind: str = "ledger") -> None:
        super().__init__(f"The {kind} does not contain rowId {row_id}.")
        self.row_id = row_id

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class UnknownModel(LedgerError):
    """An associated model name does not resolve to a class."""

    def __init__(self, model: str) -> None:
        super().__init__(f"The supplied model {model} does not exist.")
        self.model = model


class InvalidQuantity(LedgerError, ValueError):
    """A quantity that is not a number."""

    def __init__(self, qty: Any) -> None:
        super().__init__(f"Please supply a valid quantity, got {qty!r}.")
        self.qty = qty


class InvalidItem(LedgerError, ValueError):
    """Line item attributes failed validation (empty id/name, bad price)."""


class UnknownKind(LedgerError, ValueError):
    """No ledger class is registered for the kind name."""


class UnknownConnection(LedgerError):
    """The configured database connection name is not known."""


class SnapshotsNotConfigured(LedgerError):
    """store/restore was called on a ledger without a snapshot store."""
