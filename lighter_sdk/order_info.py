"""Order parameters as carried inside order transactions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

_INT_BOUNDS = {
    "u8": (0, 2**8 - 1),
    "i16": (-(2**15), 2**15 - 1),
    "u16": (0, 2**16 - 1),
    "u32": (0, 2**32 - 1),
    "i64": (-(2**63), 2**63 - 1),
    "u64": (0, 2**64 - 1),
}


def _checked_int(value, width, key):
    """Return ``value`` if it is an integer that fits ``width``; raise ValueError otherwise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r}: expected an integer, got {value!r}")
    low, high = _INT_BOUNDS[width]
    if not low <= value <= high:
        raise ValueError(f"field {key!r}: {value} is out of range for {width}")
    return int(value)


_FIELDS = (
    ("market_index", "MarketIndex", "i16"),
    ("client_order_index", "ClientOrderIndex", "i64"),
    ("base_amount", "BaseAmount", "i64"),
    ("price", "Price", "u32"),
    ("is_ask", "IsAsk", "u8"),
    ("order_type", "Type", "u8"),
    ("time_in_force", "TimeInForce", "u8"),
    ("reduce_only", "ReduceOnly", "u8"),
    ("trigger_price", "TriggerPrice", "u32"),
    ("order_expiry", "OrderExpiry", "i64"),
)


@dataclass
class OrderInfo:
    """The order-specific part of a create-order transaction."""

    market_index: int
    client_order_index: int
    base_amount: int
    price: int
    is_ask: int
    order_type: int
    time_in_force: int
    reduce_only: int
    trigger_price: int
    order_expiry: int

    def to_dict(self):
        """Return the wire-format mapping of this order."""
        return {wire: int(getattr(self, name)) for name, wire, _ in _FIELDS}

    @classmethod
    def from_dict(cls, data):
        """Build an order from its wire-format mapping; unknown keys are ignored."""
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        values = {}
        for name, wire, width in _FIELDS:
            if wire not in data:
                raise ValueError(f"missing field {wire!r}")
            values[name] = _checked_int(data[wire], width, wire)
        return cls(**values)