"""Line items: one priced entry in a ledger.

Pure data model, no I/O. Money and quantities are Decimal; the session
and snapshot records carry them as strings so they survive JSON.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, runtime_checkable

from cartledger.errors import InvalidItem, InvalidQuantity
from cartledger.formatting import number_format, to_decimal
from cartledger.identity import compute_row_id


# ---------------------------------------------------------------------------
# Payable
# ---------------------------------------------------------------------------


@runtime_checkable
class Payable(Protocol):
    """Anything that can be put in a ledger directly (a product, a service)."""

    def get_identifier(self, options: Mapping[str, Any] | None = None) -> Any: ...

    def get_description(self, options: Mapping[str, Any] | None = None) -> str: ...

    def get_price(self, options: Mapping[str, Any] | None = None) -> Any: ...


def as_number(value: Any) -> Decimal | None:
    """Return ``value`` as a finite Decimal, or None if it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return number if number.is_finite() else None


def model_path(model: Any) -> str:
    """Dotted path for a class, an instance, or an already-dotted string."""
    if isinstance(model, str):
        return model
    cls = model if isinstance(model, type) else type(model)
    return f"{cls.__module__}.{cls.__qualname__}"


def resolve_model(path: str) -> type | None:
    """Import ``"package.module.Class"`` and return the class, or None."""
    module_name, _, attr_path = path.rpartition(".")
    if not module_name:
        return None
    # Walk back for nested classes: "pkg.mod.Outer.Inner"
    parts = attr_path.split(".")
    while module_name:
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            module_name, _, head = module_name.rpartition(".")
            parts.insert(0, head)
            continue
        for part in parts:
            target = getattr(target, part, None)
            if target is None:
                return None
        return target if isinstance(target, type) else None
    return None


# ---------------------------------------------------------------------------
# ItemOptions
# ---------------------------------------------------------------------------


class ItemOptions(dict):
    """Ordered option mapping with attribute reads (``options.size``)."""

    def __getattr__(self, key: str) -> Any:
        if key.startswith("__"):
            raise AttributeError(key)
        return self.get(key)


# ---------------------------------------------------------------------------
# LineItem
# ---------------------------------------------------------------------------


@dataclass
class LineItem:
    """A priced entry keyed by ``row_id``.

    ``row_id`` is always ``compute_row_id(id, options)``. Anything that
    changes ``id`` or ``options`` goes through a method that recomputes it.
    """

    id: Any
    name: str
    price: Decimal
    options: ItemOptions = field(default_factory=ItemOptions)
    qty: Decimal = Decimal(1)
    tax_rate: Decimal = Decimal(0)
    associated_model: str | None = None
    row_id: str = field(init=False)

    def __post_init__(self) -> None:
        if self.id is None or self.id == "":
            raise InvalidItem("Please supply a valid identifier.")
        if not self.name:
            raise InvalidItem("Please supply a valid name.")
        price = as_number(self.price)
        if price is None:
            raise InvalidItem(f"Please supply a valid price, got {self.price!r}.")
        self.price = price
        self.options = ItemOptions(self.options or {})
        self.set_quantity(self.qty)
        self.set_tax_rate(self.tax_rate)
        self.row_id = compute_row_id(self.id, self.options)

    # -- construction ---------------------------------------------------------

    @classmethod
    def from_attributes(
        cls,
        id: Any,
        name: str,
        price: Any,
        options: Mapping[str, Any] | None = None,
    ) -> LineItem:
        return cls(id=id, name=name, price=price, options=ItemOptions(options or {}))

    @classmethod
    def from_payable(
        cls, payable: Payable, options: Mapping[str, Any] | None = None,
    ) -> LineItem:
        opts = ItemOptions(options or {})
        return cls(
            id=payable.get_identifier(opts),
            name=payable.get_description(opts),
            price=payable.get_price(opts),
            options=opts,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LineItem:
        """Build from a flat record (``id``/``name``/``price``[/``qty``/...]).

        Accepts both caller-supplied records and the output of ``to_dict()``;
        a stored ``row_id`` is ignored and recomputed.
        """
        missing = [k for k in ("id", "name", "price") if k not in data]
        if missing:
            raise InvalidItem(f"Item record is missing {', '.join(missing)}.")
        item = cls(
            id=data["id"],
            name=data["name"],
            price=data["price"],
            options=ItemOptions(data.get("options") or {}),
            associated_model=data.get("associated_model"),
        )
        if "qty" in data:
            item.set_quantity(data["qty"])
        if data.get("tax_rate") is not None:
            item.set_tax_rate(data["tax_rate"])
        return item

    def copy(self) -> LineItem:
        return replace(self, options=ItemOptions(self.options))

    # -- mutations ------------------------------------------------------------

    def set_quantity(self, qty: Any) -> None:
        """Set the quantity. Zero or negative is allowed; the ledger removes it."""
        number = as_number(qty)
        if number is None:
            raise InvalidQuantity(qty)
        self.qty = number

    def set_tax_rate(self, rate: Any) -> None:
        """Set the tax percentage. No range check: negative or >100 pass through."""
        number = as_number(rate)
        if number is None:
            raise InvalidItem(f"Please supply a valid tax rate, got {rate!r}.")
        self.tax_rate = number

    def update_from_payable(self, payable: Payable) -> None:
        """Re-derive id/name/price; the row id only moves if the id does."""
        price = as_number(payable.get_price(self.options))
        name = payable.get_description(self.options)
        if price is None or not name:
            raise InvalidItem("Payable returned an invalid name or price.")
        self.id = payable.get_identifier(self.options)
        self.name = name
        self.price = price
        self.row_id = compute_row_id(self.id, self.options)

    def update_from_dict(self, change: Mapping[str, Any]) -> None:
        """Apply the ``id``/``name``/``price``/``qty``/``options`` keys present."""
        if "price" in change:
            price = as_number(change["price"])
            if price is None:
                raise InvalidItem(f"Please supply a valid price, got {change['price']!r}.")
            self.price = price
        if "qty" in change:
            self.set_quantity(change["qty"])
        if change.get("name"):
            self.name = change["name"]
        if change.get("id") not in (None, ""):
            self.id = change["id"]
        if "options" in change:
            self.options = ItemOptions(change["options"] or {})
        self.row_id = compute_row_id(self.id, self.options)

    def associate(self, model: Any) -> None:
        self.associated_model = model_path(model)

    def model_class(self) -> type | None:
        """The associated class, or None when nothing is associated."""
        if self.associated_model is None:
            return None
        return resolve_model(self.associated_model)

    # -- derived values -------------------------------------------------------

    @property
    def tax(self) -> Decimal:
        return self.price * self.tax_rate / 100

    @property
    def price_tax(self) -> Decimal:
        return self.price + self.tax

    @property
    def subtotal(self) -> Decimal:
        return self.qty * self.price

    @property
    def tax_total(self) -> Decimal:
        return self.qty * self.tax

    @property
    def total(self) -> Decimal:
        return self.qty * self.price_tax

    def format_price(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.price, decimals, decimal_point, thousands_sep)

    def format_price_tax(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.price_tax, decimals, decimal_point, thousands_sep)

    def format_subtotal(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.subtotal, decimals, decimal_point, thousands_sep)

    def format_tax(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.tax, decimals, decimal_point, thousands_sep)

    def format_tax_total(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.tax_total, decimals, decimal_point, thousands_sep)

    def format_total(self, decimals: int = 2, decimal_point: str = ".", thousands_sep: str = ",") -> str:
        return number_format(self.total, decimals, decimal_point, thousands_sep)

    # -- serialization --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly record. ``tax``/``subtotal``/``total`` are display-only."""
        return {
            "row_id": self.row_id,
            "id": self.id,
            "name": self.name,
            "qty": str(self.qty),
            "price": str(self.price),
            "tax_rate": str(self.tax_rate),
            "options": dict(self.options),
            "associated_model": self.associated_model,
            "tax": str(self.tax),
            "subtotal": str(self.subtotal),
            "total": str(self.total),
        }
