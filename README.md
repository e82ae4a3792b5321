# lighter_sdk

Order and transaction request types, and an asyncio WebSocket client for
streaming market and account data from the Lighter exchange, with local
order book and account state kept up to date from the stream.

## Installation

```
pip install lighter-sdk
```

To run the test suite:

```
pip install "lighter-sdk[test]"
pytest
```

## What is inside

- `lighter_sdk.enums`: wire enums as `IntEnum`s: `OrderType`, `TimeInForce`,
  `GroupingType`, `CancelAllTimeInForce`, `MarginMode`, `RouteType` and
  `MarginDirection`. `OrderType.from_wire_str("stop-loss")` maps the strings
  the API returns onto the enum, and returns `None` for an unknown string.
- `lighter_sdk.order_info`: `OrderInfo`, the order body of order
  transactions. `to_dict()` gives the wire mapping (`MarketIndex`,
  `ClientOrderIndex`, `BaseAmount`, `Price`, `IsAsk`, `Type`, `TimeInForce`,
  `ReduceOnly`, `TriggerPrice`, `OrderExpiry`). `from_dict()` reads it back
  and raises `ValueError` for a missing field, a non-integer or a value out of
  range for its width.
- `lighter_sdk.tx_request`: request dataclasses: `CreateOrderTxReq`,
  `CreateGroupedOrdersTxReq`, `ModifyOrderTxReq`, `CancelOrderTxReq`,
  `CancelAllOrdersTxReq`, `TransferTxReq`, `WithdrawTxReq`, `ChangePubKeyReq`,
  `CreatePublicPoolTxReq`, `UpdatePublicPoolTxReq`, `MintSharesTxReq`,
  `BurnSharesTxReq`, `UpdateLeverageTxReq` and `UpdateMarginTxReq`.
  `CreateOrderTxReq.to_order_info()` builds the matching `OrderInfo`.
  `ChangePubKeyReq.pub_key` must be exactly 40 bytes and `TransferTxReq.memo`
  exactly 32 bytes. Either raises `ValueError` otherwise.
- `lighter_sdk.handler`: local state kept from stream updates.
  `OrderBookHandler` takes a snapshot and then applies deltas. It raises
  `MissingSnapshotError` or `NonContiguousNonceError`, both subclasses of
  `OrderBookUpdateError`, when a delta cannot be applied.
  `AccountOrdersHandler` keeps orders per market and per (account, market)
  pair. The account, positions, assets, spot entry price, trades, user stats
  and market stats handlers are `StateStore`s holding the latest payload per id.
- `lighter_sdk.messages`: channel parsing (`parse_market_id_from_channel`,
  `parse_account_id_from_channel`, `parse_market_id_token`), `MarketStats` and
  `parse_market_stats_updates`. The last splits a market_stats message, for
  one market or for all of them, into one `MarketStatsUpdate` per market.
- `lighter_sdk.client`: `WsClient`, which holds the subscriptions, the
  callbacks and the state handlers.
- `lighter_sdk.session`: `WsSession`, which connects and feeds incoming
  messages into a client, and the coroutine `run(client)`.

## Streaming example

```python
import asyncio

from lighter_sdk.client import WsClient
from lighter_sdk.session import run


def show_book(market_id, state):
    best_bid = state.bids[0].price if state.bids else None
    best_ask = state.asks[0].price if state.asks else None
    print(market_id, best_bid, best_ask, state.nonce)


def show_ticker(market_id, best_bid, best_ask):
    print("ticker", market_id, best_bid, best_ask)


client = (
    WsClient("wss://ws.example.com/stream")
    .subscribe_order_books([0, 1])
    .subscribe_ticker([0])
    .subscribe_market_stats_all()
    .on_order_book_update(show_book)
    .on_ticker_update(show_ticker)
)

asyncio.run(run(client))
```

Authenticated channels take a token. These are account orders, all orders,
positions, assets, spot entry prices, trades and user stats. The token is
added as `auth` to their subscribe messages:

```python
client = (
    WsClient("wss://ws.example.com/stream")
    .with_auth_token("token")
    .subscribe_account_orders(0, 12345)
    .subscribe_user_stats([12345])
)
```

Once the server sends `connected`, the session sends the frames that
`client.subscription_messages()` returns. It answers application `ping`
messages with `{"type": "pong"}`. Every 20 seconds it sends a control ping
and a text `pong`. `client.has_subscriptions()` tells you whether there is
anything to subscribe to. Running a client without subscriptions raises
`ValueError`.

Payloads that cannot be decoded are logged through the `logging` module and
skipped. An order book delta that does not continue from the local nonce
stops the session with `RuntimeError`.

`WsSession(client).handle_message(parsed)` processes one decoded message
without a connection and returns the messages to send back. This is useful
for replaying recorded traffic.

## Order book handling

```python
from lighter_sdk.handler import OrderBookDelta, OrderBookHandler, OrderBookState, PriceLevel

books = OrderBookHandler()
books.set_snapshot(42, OrderBookState(
    asks=[PriceLevel("101", "2")],
    bids=[PriceLevel("99", "4")],
    nonce=10,
))
state = books.apply_update(42, OrderBookDelta(
    begin_nonce=10,
    nonce=11,
    asks=[PriceLevel("101", "1")],
    bids=[PriceLevel("99", "0"), PriceLevel("100", "6")],
))
```

A delta's `begin_nonce` must equal the nonce of the stored book. After each
update, bids are sorted from highest price to lowest and asks from lowest to
highest, so the first level on each side is the best price. A level whose
size is zero is removed from the book.

## What it does not do

The package only describes requests and consumes the stream. It has no
signed transaction payloads and does not validate transactions before
sending. It does not sign or submit transactions, and it has no REST client.
The request objects in `lighter_sdk.tx_request` are plain data for use with
whatever signs and sends them.