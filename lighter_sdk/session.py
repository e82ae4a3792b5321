"""Connection loop that feeds WebSocket messages into a configured client."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping

import websockets
from websockets.exceptions import ConnectionClosedOK

from .client import KEEPALIVE_INTERVAL, WsClient
from .handler import OrderBookDelta, OrderBookState, OrderBookUpdateError, PriceLevel
from .messages import (
    MarketStatsUpdate,
    parse_account_id_from_channel,
    parse_market_id_from_channel,
    parse_market_id_token,
    parse_market_stats_updates,
)

logger = logging.getLogger(__name__)

_PONG = {"type": "pong"}


def _encode(message):
    return json.dumps(message, separators=(",", ":"))


def _require_str(data, key):
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r}: expected a string, got {value!r}")
    return value


def _require_int(data, key):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r}: expected an integer, got {value!r}")
    return value


def _int_or_zero(data, key):
    if data.get(key) is None:
        return 0
    return _require_int(data, key)


def _require_mapping(data, key):
    value = data.get(key)
    if not isinstance(value, Mapping):
        raise ValueError(f"field {key!r}: expected an object, got {value!r}")
    return value


def _optional_float(value):
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{value!r} is not a number") from None
    raise ValueError(f"expected a number, got {value!r}")


def _decode_levels(raw, key):
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"field {key!r}: expected a list of price levels")
    levels = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ValueError(f"field {key!r}: price level must be an object")
        levels.append(PriceLevel(_require_str(item, "price"), _require_str(item, "size")))
    return levels


def _decode_order_book_message(parsed):
    channel = _require_str(parsed, "channel")
    book = _require_mapping(parsed, "order_book")
    delta = OrderBookDelta(
        asks=_decode_levels(book.get("asks"), "asks"),
        bids=_decode_levels(book.get("bids"), "bids"),
        nonce=_int_or_zero(book, "nonce"),
        begin_nonce=_int_or_zero(book, "begin_nonce"),
        code=_int_or_zero(book, "code"),
        offset=_int_or_zero(book, "offset"),
    )
    return channel, delta


def _decode_orders_map(parsed):
    orders = _require_mapping(parsed, "orders")
    result = {}
    for key, value in orders.items():
        if not isinstance(value, list):
            raise ValueError(f"orders for {key!r}: expected a list")
        result[str(key)] = list(value)
    return result


class WsSession:
    """Applies incoming messages to a client's state and callbacks."""

    def __init__(self, client: WsClient):
        self.client = client
        self._handlers = {
            "subscribed/order_book": self._on_order_book_snapshot,
            "update/order_book": self._on_order_book_update,
            "subscribed/ticker": self._on_ticker,
            "update/ticker": self._on_ticker,
            "subscribed/account_all": self._on_account_all,
            "update/account_all": self._on_account_all,
            "subscribed/account_all_positions": self._on_account_channel_state(
                "account_all_positions", client.account_all_positions_handler
            ),
            "update/account_all_positions": self._on_account_channel_state(
                "account_all_positions", client.account_all_positions_handler
            ),
            "subscribed/account_all_assets": self._on_account_channel_state(
                "account_all_assets", client.account_all_assets_handler
            ),
            "update/account_all_assets": self._on_account_channel_state(
                "account_all_assets", client.account_all_assets_handler
            ),
            "subscribed/account_spot_avg_entry_prices": self._on_account_channel_state(
                "account_spot_avg_entry_prices",
                client.account_spot_avg_entry_prices_handler,
            ),
            "update/account_spot_avg_entry_prices": self._on_account_channel_state(
                "account_spot_avg_entry_prices",
                client.account_spot_avg_entry_prices_handler,
            ),
            "subscribed/account_all_trades": self._on_account_channel_state(
                "account_all_trades", client.account_all_trades_handler
            ),
            "update/account_all_trades": self._on_account_channel_state(
                "account_all_trades", client.account_all_trades_handler
            ),
            "subscribed/user_stats": self._on_account_channel_state(
                "user_stats", client.user_stats_handler
            ),
            "update/user_stats": self._on_account_channel_state(
                "user_stats", client.user_stats_handler
            ),
            "subscribed/account_orders": self._on_account_orders,
            "update/account_orders": self._on_account_orders,
            "subscribed/account_all_orders": self._on_account_all_orders,
            "update/account_all_orders": self._on_account_all_orders,
        }

    def handle_message(self, parsed):
        """Process one decoded JSON message and return the messages to send back.

        Payloads that cannot be decoded are logged and skipped; an order book
        delta that cannot be applied raises RuntimeError.
        """
        if not isinstance(parsed, Mapping):
            logger.debug("Unhandled WS message type: ")
            return []
        msg_type = parsed.get("type")
        msg_type = msg_type if isinstance(msg_type, str) else ""
        channel = parsed.get("channel")
        channel = channel if isinstance(channel, str) else "?"

        if msg_type == "connected":
            return self.client.subscription_messages()
        if msg_type == "ping":
            return [dict(_PONG)]
        if msg_type in ("subscribed/market_stats", "update/market_stats"):
            updates = parse_market_stats_updates(parsed)
            if not updates:
                logger.warning(
                    "Failed to decode market_stats update (type=%s, channel=%s)",
                    msg_type,
                    channel,
                )
                logger.debug("Failed to decode market_stats update payload: %s", parsed)
            for update in updates:
                self._on_market_stats(update)
            return []

        handler = self._handlers.get(msg_type)
        if handler is None:
            logger.debug("Unhandled WS message type: %s", msg_type)
            return []
        handler(parsed, msg_type, channel)
        return []

    def _decode_failed(self, what, err, msg_type, channel, parsed):
        logger.warning(
            "Failed to decode %s (err=%s, type=%s, channel=%s)", what, err, msg_type, channel
        )
        logger.debug("Failed to decode %s payload (err=%s): %s", what, err, parsed)

    def _callback(self, kind):
        return self.client.callbacks.get(kind)

    def _on_order_book_snapshot(self, parsed, msg_type, channel):
        try:
            book_channel, book = _decode_order_book_message(parsed)
        except ValueError as err:
            self._decode_failed("order_book snapshot", err, msg_type, channel, parsed)
            return
        market_id = parse_market_id_from_channel(book_channel)
        if market_id is None:
            return
        handler = self.client.order_book_handler
        handler.set_snapshot(
            market_id,
            OrderBookState(asks=list(book.asks), bids=list(book.bids), nonce=book.nonce),
        )
        callback = self._callback("order_book")
        state = handler.get(market_id)
        if callback is not None and state is not None:
            callback(market_id, state)

    def _on_order_book_update(self, parsed, msg_type, channel):
        try:
            book_channel, book = _decode_order_book_message(parsed)
        except ValueError as err:
            self._decode_failed("order_book update", err, msg_type, channel, parsed)
            return
        market_id = parse_market_id_from_channel(book_channel)
        if market_id is None:
            return
        try:
            state = self.client.order_book_handler.apply_update(market_id, book)
        except OrderBookUpdateError as err:
            raise RuntimeError(
                f"failed to apply order book update for market {market_id}: {err}"
            ) from err
        callback = self._callback("order_book")
        if callback is not None:
            callback(market_id, state)

    def _on_ticker(self, parsed, msg_type, channel):
        try:
            ticker_channel = parsed.get("channel")
            if ticker_channel is not None and not isinstance(ticker_channel, str):
                raise ValueError("field 'channel': expected a string")
            ticker = parsed.get("ticker")
            if ticker is None:
                best_bid = best_ask = None
            else:
                if not isinstance(ticker, Mapping):
                    raise ValueError("field 'ticker': expected an object")
                bid = _require_mapping(ticker, "b")
                ask = _require_mapping(ticker, "a")
                best_bid = _optional_float(bid.get("price"))
                best_ask = _optional_float(ask.get("price"))
        except ValueError as err:
            self._decode_failed("ticker update", err, msg_type, channel, parsed)
            return
        market_id = parse_market_id_from_channel(ticker_channel or "")
        if market_id is None:
            return
        callback = self._callback("ticker")
        if callback is not None:
            callback(market_id, best_bid, best_ask)

    def _on_account_all(self, parsed, msg_type, channel):
        try:
            account_id = _require_int(parsed, "account")
        except ValueError as err:
            self._decode_failed("account_all update", err, msg_type, channel, parsed)
            return
        handler = self.client.account_handler
        handler.set_state(account_id, dict(parsed))
        callback = self._callback("account")
        state = handler.get(account_id)
        if callback is not None and state is not None:
            callback(account_id, state)

    def _on_account_channel_state(self, kind, handler):
        def process(parsed, msg_type, channel):
            try:
                state_channel = _require_str(parsed, "channel")
            except ValueError as err:
                self._decode_failed(f"{kind} update", err, msg_type, channel, parsed)
                return
            account_id = parse_account_id_from_channel(state_channel)
            if account_id is None:
                logger.debug("WS %s update missing numeric account_id", kind)
                return
            handler.set_state(account_id, dict(parsed))
            callback = self._callback(kind)
            state = handler.get(account_id)
            if callback is not None and state is not None:
                callback(account_id, state)

        return process

    def _on_market_stats(self, update: MarketStatsUpdate):
        market = update.market
        if market is None:
            logger.debug("WS market_stats update missing market payload")
            return
        market_id = market.market_id
        if market_id is None:
            market_id = parse_market_id_from_channel(update.channel)
        if market_id is None:
            logger.debug("WS market_stats update missing numeric market_id")
            return
        handler = self.client.market_stats_handler
        handler.set_state(market_id, update)
        callback = self._callback("market_stats")
        state = handler.get(market_id)
        if callback is not None and state is not None:
            callback(market_id, state)

    def _on_account_orders(self, parsed, msg_type, channel):
        try:
            orders_channel = _require_str(parsed, "channel")
            account_id = _require_int(parsed, "account")
            orders_by_key = _decode_orders_map(parsed)
        except ValueError as err:
            self._decode_failed("account_orders update", err, msg_type, channel, parsed)
            return
        market_id = parse_market_id_from_channel(orders_channel)
        if market_id is None:
            market_id = next(
                (
                    parsed_id
                    for parsed_id in map(parse_market_id_token, orders_by_key)
                    if parsed_id is not None
                ),
                None,
            )
        if market_id is None:
            logger.debug("WS account_orders update missing numeric market_id")
            return
        orders = [order for group in orders_by_key.values() for order in group]
        handler = self.client.account_orders_handler
        handler.set_orders(market_id, orders)
        handler.set_orders_for_account(account_id, market_id, orders)
        callback = self._callback("account_orders")
        current = handler.get(market_id)
        if callback is not None and current is not None:
            callback(market_id, current)

    def _on_account_all_orders(self, parsed, msg_type, channel):
        try:
            orders_channel = _require_str(parsed, "channel")
            orders_by_key = _decode_orders_map(parsed)
        except ValueError as err:
            self._decode_failed("account_all_orders update", err, msg_type, channel, parsed)
            return
        account_id = parse_account_id_from_channel(orders_channel)
        if account_id is None:
            logger.debug("WS account_all_orders update missing numeric account_id")
            return
        handler = self.client.account_orders_handler
        for market_key, orders in orders_by_key.items():
            market_id = parse_market_id_token(market_key)
            if market_id is not None:
                handler.set_orders_for_account(account_id, market_id, orders)
        callback = self._callback("account_all_orders")
        if callback is not None:
            callback(account_id, orders_by_key)

    async def _send_keepalive(self, ws):
        await ws.ping()
        # Quiet authenticated channels can be dropped unless an application-level
        # frame is also seen, so a text heartbeat follows the control ping.
        await ws.send(_encode(_PONG))

    async def run(self):
        """Connect and process messages until the server closes the connection."""
        if not self.client.has_subscriptions():
            raise ValueError("No subscriptions provided")

        async with websockets.connect(self.client.ws_url, ping_interval=None) as ws:
            loop = asyncio.get_running_loop()
            next_keepalive = loop.time() + KEEPALIVE_INTERVAL
            while True:
                remaining = next_keepalive - loop.time()
                if remaining <= 0:
                    await self._send_keepalive(ws)
                    next_keepalive = loop.time() + KEEPALIVE_INTERVAL
                    continue
                try:
                    raw = await asyncio.wait_for(ws.recv(), remaining)
                except asyncio.TimeoutError:
                    continue
                except ConnectionClosedOK:
                    break
                if not isinstance(raw, str):
                    continue
                for reply in self.handle_message(json.loads(raw)):
                    await ws.send(_encode(reply))


async def run(client):
    """Connect ``client`` and process messages until the connection closes."""
    await WsSession(client).run()