"""Session-backed ledger of line items, generic over the ledger kind.

The live content of an instance lives in the session under
``"<kind>.<instance>"`` as a list of item records. Every operation reads
the records, works on detached LineItem objects and writes the records
back only once it has succeeded, so a raised error leaves the session as
it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from cartledger.config import LedgerConfig
from cartledger.constants import DEFAULT_INSTANCE, LedgerEvent
from cartledger.errors import SnapshotsNotConfigured, UnknownModel, UnknownRowId
from cartledger.events import EventSink, NullEventSink
from cartledger.formatting import number_format
from cartledger.item import LineItem, Payable, as_number, resolve_model
from cartledger.session import SessionStore
from cartledger.snapshot import SnapshotStore, SnapshotTable

logger = logging.getLogger(__name__)


class Ledger:
    """A named, session-scoped collection of line items.

    - ``add``/``update``/``remove`` mutate the active instance and notify
      ``<kind>.added``/``<kind>.updated``/``<kind>.removed``.
    - ``subtotal``/``tax``/``total`` return formatted strings; the
      ``raw_*`` variants return Decimals for further arithmetic.
    - ``store``/``restore`` go through the snapshot store, when one is
      configured.
    """

    kind: str | None = None

    def __init__(
        self,
        session: SessionStore,
        events: EventSink | None = None,
        snapshots: SnapshotStore | SnapshotTable | None = None,
        config: LedgerConfig | None = None,
        kind: str | None = None,
    ) -> None:
        kind = kind or self.kind
        if not kind:
            raise ValueError("Ledger needs a kind, e.g. Ledger(session, kind='cart').")
        self.kind = str(getattr(kind, "value", kind))
        self._session = session
        self._events: EventSink = events if events is not None else NullEventSink()
        if snapshots is not None and not isinstance(snapshots, SnapshotStore):
            snapshots = SnapshotStore(snapshots)
        self._snapshots = snapshots
        self._config = config if config is not None else LedgerConfig.for_kind(self.kind)
        self._instance = ""
        self.instance(DEFAULT_INSTANCE)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._instance}>"

    @property
    def config(self) -> LedgerConfig:
        return self._config

    # -- instances ------------------------------------------------------------

    def instance(self, name: str | None = None) -> Ledger:
        """Switch the active instance. Returns self for chaining."""
        self._instance = f"{self.kind}.{name or DEFAULT_INSTANCE}"
        return self

    def current_instance(self) -> str:
        return self._instance[len(self.kind) + 1:]

    @property
    def session_key(self) -> str:
        return self._instance

    # -- mutations ------------------------------------------------------------

    def add(
        self,
        id: Any,
        name: Any = None,
        qty: Any = None,
        price: Any = None,
        options: Mapping[str, Any] | None = None,
        tax_rate: Any = None,
    ) -> LineItem | list[LineItem | None] | None:
        """Add an item, merging quantities with an item of the same row id.

        ``id`` may be a list of records/payables (each added in turn, not
        atomically), a LineItem, a Payable, a record mapping, or the
        identifier for the positional fields.

        Returns None when the resulting quantity is zero or below: the row
        is not kept, and an existing row it merged with is removed.
        """
        if self._is_multi(id):
            return [self.add(spec) for spec in id]

        if isinstance(id, LineItem):
            item = id.copy()
        else:
            item = self._create_item(id, name, qty, price, options, tax_rate)

        content = self._get_content()
        existing = content.get(item.row_id)
        if existing is not None:
            item.set_quantity(item.qty + existing.qty)

        if item.qty <= 0:
            if existing is not None:
                del content[item.row_id]
                logger.debug("%s: add removed %s.", self._instance, item.row_id)
                self._dispatch(LedgerEvent.REMOVED, existing)
                self._put_content(content)
            return None

        content[item.row_id] = item

        logger.debug("%s: added %s (qty %s).", self._instance, item.row_id, item.qty)
        self._dispatch(LedgerEvent.ADDED, item.copy())
        self._put_content(content)
        return item

    def update(self, row_id: str, change: Any) -> LineItem | None:
        """Apply a Payable, a partial record, or a new quantity to an item.

        Returns the updated item, or None when its quantity dropped to
        zero or below and it was removed.
        """
        item = self.get(row_id)

        if isinstance(change, Payable):
            item.update_from_payable(change)
        elif isinstance(change, Mapping):
            item.update_from_dict(change)
        else:
            item.set_quantity(change)

        content = self._get_content()
        if item.row_id != row_id:
            del content[row_id]
            existing = content.get(item.row_id)
            if existing is not None:
                item.set_quantity(existing.qty + item.qty)

        if item.qty <= 0:
            content.pop(item.row_id, None)
            content.pop(row_id, None)
            logger.debug("%s: update removed %s.", self._instance, row_id)
            self._dispatch(LedgerEvent.REMOVED, item.copy())
            self._put_content(content)
            return None

        content[item.row_id] = item
        logger.debug("%s: updated %s -> %s.", self._instance, row_id, item.row_id)
        self._dispatch(LedgerEvent.UPDATED, item.copy())
        self._put_content(content)
        return item

    def remove(self, row_id: str) -> None:
        item = self.get(row_id)
        content = self._get_content()
        del content[item.row_id]
        logger.debug("%s: removed %s.", self._instance, row_id)
        self._dispatch(LedgerEvent.REMOVED, item)
        self._put_content(content)

    def associate(self, row_id: str, model: Any) -> None:
        """Attach a model class (or dotted path, or instance) to an item."""
        if isinstance(model, str) and resolve_model(model) is None:
            raise UnknownModel(model)
        item = self.get(row_id)
        item.associate(model)
        content = self._get_content()
        content[row_id] = item
        self._put_content(content)

    def set_tax(self, row_id: str, tax_rate: Any) -> None:
        item = self.get(row_id)
        item.set_tax_rate(tax_rate)
        content = self._get_content()
        content[row_id] = item
        self._put_content(content)

    def destroy(self) -> None:
        self._session.remove(self._instance)

    # -- queries --------------------------------------------------------------

    def get(self, row_id: str) -> LineItem:
        """Return a detached copy of the item; raises UnknownRowId."""
        content = self._get_content()
        if row_id not in content:
            raise UnknownRowId(row_id, self.kind)
        return content[row_id]

    def has(self, row_id: str) -> bool:
        return row_id in self._get_content()

    def content(self) -> dict[str, LineItem]:
        """Ordered ``row_id -> LineItem`` copy of the active instance."""
        return self._get_content()

    def search(self, predicate: Callable[[LineItem, str], bool]) -> dict[str, LineItem]:
        return {
            row_id: item
            for row_id, item in self._get_content().items()
            if predicate(item, row_id)
        }

    def count(self) -> Decimal:
        """Sum of quantities (not the number of rows)."""
        return sum((item.qty for item in self._items()), Decimal(0))

    def raw_subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self._items()), Decimal(0))

    def raw_tax(self) -> Decimal:
        return sum((item.tax_total for item in self._items()), Decimal(0))

    def raw_total(self) -> Decimal:
        return sum((item.total for item in self._items()), Decimal(0))

    def subtotal(
        self,
        decimals: int | None = None,
        decimal_point: str | None = None,
        thousands_sep: str | None = None,
    ) -> str:
        return self._format(self.raw_subtotal(), decimals, decimal_point, thousands_sep)

    def tax(
        self,
        decimals: int | None = None,
        decimal_point: str | None = None,
        thousands_sep: str | None = None,
    ) -> str:
        return self._format(self.raw_tax(), decimals, decimal_point, thousands_sep)

    def total(
        self,
        decimals: int | None = None,
        decimal_point: str | None = None,
        thousands_sep: str | None = None,
    ) -> str:
        return self._format(self.raw_total(), decimals, decimal_point, thousands_sep)

    # -- snapshots ------------------------------------------------------------

    def store(self, identifier: Any) -> None:
        """Replace the stored snapshot of the active instance for ``identifier``."""
        snapshots = self._require_snapshots()
        items = self._items()
        snapshots.save(identifier, self.current_instance(), items)
        logger.info(
            "Stored %s for %s (%d item(s)).", self._instance, identifier, len(items),
        )
        self._dispatch(LedgerEvent.STORED)

    def restore(self, identifier: Any) -> None:
        """Merge the stored snapshot for ``identifier`` into the live content.

        Stored items win over live items with the same row id. Does
        nothing when no snapshot exists.
        """
        snapshots = self._require_snapshots()
        current = self.current_instance()
        loaded = snapshots.load(identifier, current)
        if loaded is None:
            return

        stored_instance, items = loaded
        self.instance(stored_instance)
        try:
            content = self._get_content()
            for item in items:
                content[item.row_id] = item
            logger.info(
                "Restored %d item(s) into %s for %s.",
                len(items), self._instance, identifier,
            )
            self._dispatch(LedgerEvent.RESTORED)
            self._put_content(content)
        finally:
            self.instance(current)

    def delete_stored(self, identifier: Any) -> int:
        """Delete every stored snapshot for ``identifier``, in any instance."""
        return self._require_snapshots().delete(identifier)

    # -- internals ------------------------------------------------------------

    def _create_item(
        self,
        id: Any,
        name: Any,
        qty: Any,
        price: Any,
        options: Mapping[str, Any] | None,
        tax_rate: Any,
    ) -> LineItem:
        if isinstance(id, Payable):
            # add(product, 2) / add(product, {"size": "L"}) / add(product, qty=2, options=...)
            quantity: Any = None
            opts: Mapping[str, Any] = options or {}
            for arg in (name, qty):
                if isinstance(arg, Mapping):
                    opts = arg
                elif arg is not None:
                    quantity = arg
            item = LineItem.from_payable(id, opts)
            item.set_quantity(1 if quantity is None else quantity)
            item.associate(id)
        elif isinstance(id, Mapping):
            # qty and tax_rate get the same defaults as the positional form
            record = {k: v for k, v in id.items() if k not in ("qty", "tax_rate")}
            item = LineItem.from_dict(record)
            item.set_quantity(1 if id.get("qty") is None else id["qty"])
            if tax_rate is None:
                tax_rate = id.get("tax_rate")
        else:
            item = LineItem.from_attributes(id, name, price, options)
            item.set_quantity(1 if qty is None else qty)

        rate = as_number(tax_rate)
        item.set_tax_rate(rate if rate is not None else self._config.tax)
        return item

    @staticmethod
    def _is_multi(value: Any) -> bool:
        if not isinstance(value, (list, tuple)) or not value:
            return False
        return all(isinstance(v, (Mapping, Payable)) for v in value)

    def _get_content(self) -> dict[str, LineItem]:
        records = self._session.get(self._instance) if self._session.has(self._instance) else None
        content: dict[str, LineItem] = {}
        for record in records or []:
            item = LineItem.from_dict(record)
            content[item.row_id] = item
        return content

    def _items(self) -> list[LineItem]:
        return list(self._get_content().values())

    def _put_content(self, content: Mapping[str, LineItem]) -> None:
        self._session.put(self._instance, [item.to_dict() for item in content.values()])

    def _dispatch(self, event: LedgerEvent, payload: Any = None) -> None:
        self._events.dispatch(f"{self.kind}.{event.value}", payload)

    def _require_snapshots(self) -> SnapshotStore:
        if self._snapshots is None:
            raise SnapshotsNotConfigured(
                f"{type(self).__name__} has no snapshot store configured."
            )
        return self._snapshots

    def _format(
        self,
        value: Decimal,
        decimals: int | None,
        decimal_point: str | None,
        thousands_sep: str | None,
    ) -> str:
        cfg = self._config
        return number_format(
            value,
            cfg.decimals if decimals is None else decimals,
            cfg.decimal_point if decimal_point is None else decimal_point,
            cfg.thousands_sep if thousands_sep is None else thousands_sep,
        )
