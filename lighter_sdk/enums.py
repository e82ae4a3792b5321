"""Integer enumerations used in order and transaction payloads."""

from __future__ import annotations

from enum import IntEnum


class OrderType(IntEnum):
    """Kind of order, encoded as a single byte."""

    LIMIT = 0
    MARKET = 1
    STOP_LOSS = 2
    STOP_LOSS_LIMIT = 3
    TAKE_PROFIT = 4
    TAKE_PROFIT_LIMIT = 5
    TWAP = 6
    TWAP_SUB = 7
    LIQUIDATION = 8

    @classmethod
    def from_wire_str(cls, s):
        """Parse the string form returned by the API, or return None if unknown."""
        return _ORDER_TYPE_BY_WIRE.get(s)


_ORDER_TYPE_BY_WIRE = {
    "limit": OrderType.LIMIT,
    "market": OrderType.MARKET,
    "stop-loss": OrderType.STOP_LOSS,
    "stop-loss-limit": OrderType.STOP_LOSS_LIMIT,
    "take-profit": OrderType.TAKE_PROFIT,
    "take-profit-limit": OrderType.TAKE_PROFIT_LIMIT,
    "twap": OrderType.TWAP,
    "twap-sub": OrderType.TWAP_SUB,
    "liquidation": OrderType.LIQUIDATION,
}


class TimeInForce(IntEnum):
    """How long an order stays on the book."""

    IMMEDIATE_OR_CANCEL = 0
    GOOD_TILL_TIME = 1
    POST_ONLY = 2


class GroupingType(IntEnum):
    """How the orders of a grouped-order transaction relate to each other."""

    NONE = 0
    ONE_TRIGGERS_THE_OTHER = 1
    ONE_CANCELS_THE_OTHER = 2
    ONE_TRIGGERS_A_ONE_CANCELS_THE_OTHER = 3


class CancelAllTimeInForce(IntEnum):
    """When a cancel-all request takes effect."""

    IMMEDIATE = 0
    SCHEDULED = 1
    ABORT_SCHEDULED = 2


class MarginMode(IntEnum):
    """Margin mode of a position."""

    CROSS = 0
    ISOLATED = 1


class RouteType(IntEnum):
    """Whether an asset movement targets the perps or the spot side."""

    PERPS = 0
    SPOT = 1


class MarginDirection(IntEnum):
    """Direction of an isolated-margin adjustment."""

    REMOVE = 0
    ADD = 1