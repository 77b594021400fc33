"""The six concrete ledgers and helpers that work across kinds."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cartledger.config import LedgerConfig
from cartledger.constants import LedgerKind
from cartledger.errors import UnknownKind
from cartledger.ledger import Ledger
from cartledger.session import SessionStore

logger = logging.getLogger(__name__)


class Cart(Ledger):
    kind = LedgerKind.CART.value


class Expense(Ledger):
    kind = LedgerKind.EXPENSE.value


class Fee(Ledger):
    kind = LedgerKind.FEE.value


class Invoice(Ledger):
    kind = LedgerKind.INVOICE.value


class Booking(Ledger):
    kind = LedgerKind.BOOKING.value


class Quotation(Ledger):
    kind = LedgerKind.QUOTATION.value


LEDGER_CLASSES: dict[str, type[Ledger]] = {
    cls.kind: cls for cls in (Cart, Expense, Fee, Invoice, Booking, Quotation)
}


def make_ledger(kind: str, session: SessionStore, **kwargs: Any) -> Ledger:
    """Build the ledger registered for ``kind`` (``"cart"``, ``"fee"``, ...)."""
    try:
        cls = LEDGER_CLASSES[str(getattr(kind, "value", kind))]
    except KeyError:
        raise UnknownKind(f"No ledger registered for kind {kind!r}.") from None
    return cls(session, **kwargs)


def forget_on_logout(
    session: SessionStore,
    configs: Mapping[str, LedgerConfig] | Iterable[LedgerConfig],
) -> int:
    """Drop every kind's session content when any kind opts in.

    Call from the host's logout hook. Returns the number of keys removed.
    """
    values = configs.values() if isinstance(configs, Mapping) else configs
    if not any(cfg.destroy_on_logout for cfg in values):
        return 0

    prefixes = tuple(f"{kind}." for kind in LEDGER_CLASSES)
    doomed = [key for key in session.keys() if key in LEDGER_CLASSES or key.startswith(prefixes)]
    for key in doomed:
        session.remove(key)
    logger.info("Logout: cleared %d ledger session key(s).", len(doomed))
    return len(doomed)
