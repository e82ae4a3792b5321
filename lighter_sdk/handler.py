"""Local state kept from WebSocket snapshots and delta updates."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any


@dataclass
class PriceLevel:
    """One price level of an order book, with price and size as decimal strings."""

    price: str
    size: str

    def price_value(self):
        """Return the price as a float, or None if it does not parse."""
        return _parse_float(self.price)

    def size_value(self):
        """Return the size as a float, or None if it does not parse."""
        return _parse_float(self.size)


def _parse_float(text):
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


@dataclass
class OrderBookState:
    """The locally maintained order book of one market."""

    asks: list[PriceLevel] = field(default_factory=list)
    bids: list[PriceLevel] = field(default_factory=list)
    nonce: int = 0


@dataclass
class OrderBookDelta:
    """An order book payload as received from the server, snapshot or delta."""

    asks: list[PriceLevel] = field(default_factory=list)
    bids: list[PriceLevel] = field(default_factory=list)
    nonce: int = 0
    begin_nonce: int = 0
    code: int = 0
    offset: int = 0


class OrderBookUpdateError(Exception):
    """A delta could not be applied to the local order book."""


class MissingSnapshotError(OrderBookUpdateError):
    """A delta arrived for a market that has no snapshot yet."""

    def __init__(self, market_id):
        self.market_id = market_id
        super().__init__(
            f"market {market_id} received an order book delta before a snapshot"
        )


class NonContiguousNonceError(OrderBookUpdateError):
    """A delta does not continue from the nonce of the local state."""

    def __init__(self, market_id, expected_begin_nonce, actual_begin_nonce, previous_nonce):
        self.market_id = market_id
        self.expected_begin_nonce = expected_begin_nonce
        self.actual_begin_nonce = actual_begin_nonce
        self.previous_nonce = previous_nonce
        super().__init__(
            f"market {market_id} order book nonce gap: expected begin_nonce "
            f"{expected_begin_nonce}, got {actual_begin_nonce} "
            f"(previous nonce {previous_nonce})"
        )


def _apply_price_level_deltas(existing, deltas):
    """Update, remove (size 0) or append levels in place."""
    for delta in deltas:
        delta_price = delta.price_value()
        if delta_price is None:
            continue
        is_removal = delta.size_value() == 0.0
        pos = next(
            (i for i, level in enumerate(existing) if level.price_value() == delta_price),
            None,
        )
        if pos is not None:
            if is_removal:
                del existing[pos]
            else:
                existing[pos].size = delta.size
        elif not is_removal:
            existing.append(PriceLevel(delta.price, delta.size))


def _sort_price(level):
    value = level.price_value()
    return 0.0 if value is None else value


def _compare(a, b):
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _sort_levels(levels, *, descending):
    def cmp(x, y):
        result = _compare(_sort_price(x), _sort_price(y))
        return -result if descending else result

    levels.sort(key=functools.cmp_to_key(cmp))


class OrderBookHandler:
    """Keeps one order book per market from snapshots and contiguous deltas."""

    def __init__(self):
        self._states: dict[int, OrderBookState] = {}

    def set_snapshot(self, market_id, state):
        """Initialise or replace the full order book of a market."""
        self._states[market_id] = state

    def apply_update(self, market_id, update):
        """Apply a delta and return the updated state.

        Bids end up sorted highest first and asks lowest first, so the first
        level of each side is the best one.
        """
        state = self._states.get(market_id)
        if state is None:
            raise MissingSnapshotError(market_id)
        if update.begin_nonce != state.nonce:
            raise NonContiguousNonceError(
                market_id=market_id,
                expected_begin_nonce=state.nonce,
                actual_begin_nonce=update.begin_nonce,
                previous_nonce=state.nonce,
            )
        _apply_price_level_deltas(state.asks, update.asks)
        _apply_price_level_deltas(state.bids, update.bids)
        _sort_levels(state.asks, descending=False)
        _sort_levels(state.bids, descending=True)
        state.nonce = update.nonce
        return state

    def get(self, market_id):
        """Return the order book of a market, or None if there is none."""
        return self._states.get(market_id)


class StateStore:
    """Keeps the latest payload received for each key."""

    def __init__(self):
        self._states: dict[int, Any] = {}

    def set_state(self, key, state):
        """Set or replace the payload for a key."""
        self._states[key] = state

    def get(self, key):
        """Return the latest payload for a key, or None if there is none."""
        return self._states.get(key)


class AccountHandler(StateStore):
    """Latest account_all payload per account."""


class AccountAllPositionsHandler(StateStore):
    """Latest account_all_positions payload per account."""


class AccountAllAssetsHandler(StateStore):
    """Latest account_all_assets payload per account."""


class AccountSpotAvgEntryPricesHandler(StateStore):
    """Latest account_spot_avg_entry_prices payload per account."""


class AccountAllTradesHandler(StateStore):
    """Latest account_all_trades payload per account."""


class UserStatsHandler(StateStore):
    """Latest user_stats payload per account."""


class MarketStatsHandler(StateStore):
    """Latest market_stats payload per market."""


class AccountOrdersHandler:
    """Open orders per market, and per (account, market) pair."""

    def __init__(self):
        self._by_market: dict[int, list] = {}
        self._by_account_market: dict[tuple[int, int], list] = {}

    def set_orders(self, market_id, orders):
        """Set or replace the orders for a market."""
        self._by_market[market_id] = list(orders)

    def set_orders_for_account(self, account_id, market_id, orders):
        """Set or replace the orders for an (account, market) pair."""
        self._by_account_market[(account_id, market_id)] = list(orders)

    def get(self, market_id):
        """Return the orders for a market, or None if there are none recorded."""
        return self._by_market.get(market_id)

    def get_for_account(self, account_id, market_id):
        """Return the orders for an (account, market) pair, or None."""
        return self._by_account_market.get((account_id, market_id))