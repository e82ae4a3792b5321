"""WebSocket client configuration: subscriptions, callbacks and local state."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .handler import (
    AccountAllAssetsHandler,
    AccountAllPositionsHandler,
    AccountAllTradesHandler,
    AccountHandler,
    AccountOrdersHandler,
    AccountSpotAvgEntryPricesHandler,
    MarketStatsHandler,
    OrderBookHandler,
    UserStatsHandler,
)

KEEPALIVE_INTERVAL = 20.0


@dataclass(frozen=True)
class AccountOrdersSubscription:
    """A subscription to one account's orders on one market."""

    market_id: int
    account_id: int


def _subscribe(channel):
    return {"type": "subscribe", "channel": channel}


class WsClient:
    """Describes what to subscribe to and where updates go.

    Subscription and callback methods return the client so calls can be chained.
    The ``callbacks`` mapping holds the registered callbacks, keyed by update kind:
    ``order_book``, ``ticker``, ``account``, ``account_orders``,
    ``account_all_orders``, ``account_all_positions``, ``account_all_assets``,
    ``account_spot_avg_entry_prices``, ``account_all_trades``, ``user_stats``
    and ``market_stats``.
    """

    def __init__(self, ws_url):
        self.ws_url = ws_url
        self.auth_token: str | None = None
        self.order_book_ids: list[int] = []
        self.ticker_ids: list[int] = []
        self.market_stats_ids: list[int] = []
        self.account_ids: list[int] = []
        self.account_all_positions_ids: list[int] = []
        self.account_all_assets_ids: list[int] = []
        self.account_spot_avg_entry_prices_ids: list[int] = []
        self.account_all_trades_ids: list[int] = []
        self.user_stats_ids: list[int] = []
        self.market_stats_all = False
        self.account_orders_subs: list[AccountOrdersSubscription] = []
        self.account_all_orders_ids: list[int] = []
        self.callbacks: dict[str, Callable[..., Any]] = {}

        self.order_book_handler = OrderBookHandler()
        self.account_handler = AccountHandler()
        self.account_orders_handler = AccountOrdersHandler()
        self.account_all_positions_handler = AccountAllPositionsHandler()
        self.account_all_assets_handler = AccountAllAssetsHandler()
        self.account_spot_avg_entry_prices_handler = AccountSpotAvgEntryPricesHandler()
        self.account_all_trades_handler = AccountAllTradesHandler()
        self.user_stats_handler = UserStatsHandler()
        self.market_stats_handler = MarketStatsHandler()

    def with_auth_token(self, token):
        """Use ``token`` to authenticate private channel subscriptions."""
        self.auth_token = str(token)
        return self

    def subscribe_order_books(self, market_ids: Iterable[int]):
        """Subscribe to the order books of these markets."""
        self.order_book_ids = list(market_ids)
        return self

    def subscribe_ticker(self, market_ids: Iterable[int]):
        """Subscribe to the best bid/ask tickers of these markets."""
        self.ticker_ids = list(market_ids)
        return self

    def subscribe_market_stats(self, market_ids: Iterable[int]):
        """Subscribe to the stats of these markets."""
        self.market_stats_ids = list(market_ids)
        return self

    def subscribe_accounts(self, account_ids: Iterable[int]):
        """Subscribe to the full state of these accounts."""
        self.account_ids = list(account_ids)
        return self

    def subscribe_account_all_positions(self, account_ids: Iterable[int]):
        """Subscribe to the positions of these accounts."""
        self.account_all_positions_ids = list(account_ids)
        return self

    def subscribe_account_all_assets(self, account_ids: Iterable[int]):
        """Subscribe to the assets of these accounts."""
        self.account_all_assets_ids = list(account_ids)
        return self

    def subscribe_account_spot_avg_entry_prices(self, account_ids: Iterable[int]):
        """Subscribe to the spot average entry prices of these accounts."""
        self.account_spot_avg_entry_prices_ids = list(account_ids)
        return self

    def subscribe_account_all_trades(self, account_ids: Iterable[int]):
        """Subscribe to the trades of these accounts."""
        self.account_all_trades_ids = list(account_ids)
        return self

    def subscribe_account_orders(self, market_id, account_id):
        """Add a subscription to one account's orders on one market."""
        self.account_orders_subs.append(AccountOrdersSubscription(market_id, account_id))
        return self

    def subscribe_account_all_orders(self, account_ids: Iterable[int]):
        """Subscribe to the orders of these accounts on every market."""
        self.account_all_orders_ids = list(account_ids)
        return self

    def subscribe_user_stats(self, account_ids: Iterable[int]):
        """Subscribe to the user stats of these accounts."""
        self.user_stats_ids = list(account_ids)
        return self

    def subscribe_market_stats_all(self):
        """Subscribe to the stats of every market."""
        self.market_stats_all = True
        return self

    def _on(self, kind, callback):
        if not callable(callback):
            raise TypeError(f"callback for {kind} must be callable")
        self.callbacks[kind] = callback
        return self

    def on_order_book_update(self, callback):
        """Call ``callback(market_id, state)`` after each order book change."""
        return self._on("order_book", callback)

    def on_ticker_update(self, callback):
        """Call ``callback(market_id, best_bid, best_ask)`` on each ticker."""
        return self._on("ticker", callback)

    def on_account_update(self, callback):
        """Call ``callback(account_id, payload)`` on each account_all update."""
        return self._on("account", callback)

    def on_account_orders_update(self, callback):
        """Call ``callback(market_id, orders)`` on each account_orders update."""
        return self._on("account_orders", callback)

    def on_account_all_orders_update(self, callback):
        """Call ``callback(account_id, orders_by_market)`` on each account_all_orders update."""
        return self._on("account_all_orders", callback)

    def on_account_all_positions_update(self, callback):
        """Call ``callback(account_id, payload)`` on each positions update."""
        return self._on("account_all_positions", callback)

    def on_account_all_assets_update(self, callback):
        """Call ``callback(account_id, payload)`` on each assets update."""
        return self._on("account_all_assets", callback)

    def on_account_spot_avg_entry_prices_update(self, callback):
        """Call ``callback(account_id, payload)`` on each spot entry price update."""
        return self._on("account_spot_avg_entry_prices", callback)

    def on_account_all_trades_update(self, callback):
        """Call ``callback(account_id, payload)`` on each trades update."""
        return self._on("account_all_trades", callback)

    def on_user_stats_update(self, callback):
        """Call ``callback(account_id, payload)`` on each user stats update."""
        return self._on("user_stats", callback)

    def on_market_stats_update(self, callback):
        """Call ``callback(market_id, update)`` on each market stats update."""
        return self._on("market_stats", callback)

    def has_subscriptions(self):
        """Return True if at least one channel is to be subscribed."""
        return bool(
            self.order_book_ids
            or self.ticker_ids
            or self.market_stats_ids
            or self.account_ids
            or self.account_all_positions_ids
            or self.account_all_assets_ids
            or self.account_spot_avg_entry_prices_ids
            or self.account_all_trades_ids
            or self.user_stats_ids
            or self.market_stats_all
            or self.account_orders_subs
            or self.account_all_orders_ids
        )

    def _authed(self, channel):
        message = _subscribe(channel)
        if self.auth_token is not None:
            message["auth"] = self.auth_token
        return message

    def subscription_messages(self):
        """Return the subscribe messages to send once connected, in sending order."""
        messages = []
        messages += [_subscribe(f"order_book/{m}") for m in self.order_book_ids]
        messages += [_subscribe(f"ticker/{m}") for m in self.ticker_ids]
        messages += [_subscribe(f"market_stats/{m}") for m in self.market_stats_ids]
        messages += [_subscribe(f"account_all/{a}") for a in self.account_ids]
        messages += [
            self._authed(f"account_all_positions/{a}") for a in self.account_all_positions_ids
        ]
        messages += [
            self._authed(f"account_all_assets/{a}") for a in self.account_all_assets_ids
        ]
        messages += [
            self._authed(f"account_spot_avg_entry_prices/{a}")
            for a in self.account_spot_avg_entry_prices_ids
        ]
        messages += [
            self._authed(f"account_all_trades/{a}") for a in self.account_all_trades_ids
        ]
        messages += [self._authed(f"user_stats/{a}") for a in self.user_stats_ids]
        if self.market_stats_all:
            messages.append(_subscribe("market_stats/all"))
        messages += [
            self._authed(f"account_orders/{sub.market_id}/{sub.account_id}")
            for sub in self.account_orders_subs
        ]
        messages += [
            self._authed(f"account_all_orders/{a}") for a in self.account_all_orders_ids
        ]
        return messages