"""Row identity: a stable key for (identifier, options)."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any


def canonical_options(options: Mapping[str, Any] | None) -> str:
    """Serialize options as sorted-key JSON so key order never matters."""
    return json.dumps(
        dict(options or {}), sort_keys=True, separators=(",", ":"), default=str,
    )


def compute_row_id(identifier: Any, options: Mapping[str, Any] | None = None) -> str:
    """Return the row id for an item identifier and its options.

    The identifier keeps its JSON type, so ``1`` and ``"1"`` map to
    different rows.
    """
    payload = json.dumps(
        [identifier, json.loads(canonical_options(options))],
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:32]
