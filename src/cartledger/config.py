"""Ledger configuration: a plain frozen dataclass, no pydantic.

The host application builds one per kind from its own settings and passes
it to the ledger. Nothing reads configuration from global state.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from cartledger.constants import DEFAULT_TAX_RATE

logger = logging.getLogger(__name__)

# option key -> LedgerConfig attribute
_OPTION_KEYS = {
    "tax": "tax",
    "database.table": "table",
    "database.connection": "connection",
    "format.decimals": "decimals",
    "format.decimal_point": "decimal_point",
    "format.thousand_seperator": "thousands_sep",
    "destroy_on_logout": "destroy_on_logout",
}


def _flatten(options: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten ``{"format": {"decimals": 2}}`` into ``{"format.decimals": 2}``."""
    flat: dict[str, Any] = {}
    for key, value in options.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


@dataclass(frozen=True)
class LedgerConfig:
    tax: Decimal = Decimal(DEFAULT_TAX_RATE)
    table: str = "shoppingcart"
    connection: str | None = None
    decimals: int = 2
    decimal_point: str = "."
    thousands_sep: str = ","
    destroy_on_logout: bool = False

    @classmethod
    def for_kind(
        cls, kind: str, options: Mapping[str, Any] | None = None,
    ) -> LedgerConfig:
        """Build the config for ``kind`` from a nested or dotted option mapping.

        ``None`` values fall back to the defaults, matching how unset
        options behave in the host's config file.
        """
        values: dict[str, Any] = {"table": f"shopping{kind}"}
        for key, value in _flatten(options or {}).items():
            attr = _OPTION_KEYS.get(key)
            if attr is None:
                logger.debug("Ignoring unknown %s option %r.", kind, key)
                continue
            if value is None:
                continue
            values[attr] = value

        if "tax" in values:
            values["tax"] = Decimal(str(values["tax"]))
        if "decimals" in values:
            values["decimals"] = int(values["decimals"])
        if "destroy_on_logout" in values:
            values["destroy_on_logout"] = bool(values["destroy_on_logout"])
        return cls(**values)
