import pytest

from lighter_sdk.client import WsClient
from lighter_sdk.handler import OrderBookHandler, OrderBookState

URL = "wss://ws.example.com/stream"


def channels(client):
    return [msg["channel"] for msg in client.subscription_messages()]


def test_subscription_messages_include_direct_market_stats_channels():
    client = WsClient(URL).subscribe_market_stats([91]).subscribe_ticker([91])
    found = channels(client)
    assert "market_stats/91" in found
    assert "ticker/91" in found


def test_direct_market_stats_count_as_subscriptions():
    client = WsClient(URL).subscribe_market_stats([91])
    assert client.has_subscriptions() is True


def test_new_client_has_no_subscriptions():
    client = WsClient(URL)
    assert client.has_subscriptions() is False
    assert client.subscription_messages() == []


def test_market_stats_all_counts_as_subscription():
    client = WsClient(URL).subscribe_market_stats_all()
    assert client.has_subscriptions() is True
    assert client.subscription_messages() == [
        {"type": "subscribe", "channel": "market_stats/all"}
    ]


def test_public_channels_do_not_carry_auth():
    client = (
        WsClient(URL)
        .with_auth_token("token")
        .subscribe_order_books([1])
        .subscribe_accounts([7])
    )
    assert client.subscription_messages() == [
        {"type": "subscribe", "channel": "order_book/1"},
        {"type": "subscribe", "channel": "account_all/7"},
    ]


def test_private_channels_carry_auth_token():
    client = WsClient(URL).with_auth_token("token").subscribe_user_stats([5])
    assert client.subscription_messages() == [
        {"type": "subscribe", "channel": "user_stats/5", "auth": "token"}
    ]


def test_private_channels_without_token_have_no_auth_key():
    client = WsClient(URL).subscribe_account_all_trades([5])
    assert client.subscription_messages() == [
        {"type": "subscribe", "channel": "account_all_trades/5"}
    ]


def test_message_order_follows_channel_kinds():
    client = (
        WsClient(URL)
        .subscribe_account_all_orders([9])
        .subscribe_account_orders(3, 4)
        .subscribe_market_stats_all()
        .subscribe_user_stats([8])
        .subscribe_account_all_trades([7])
        .subscribe_account_spot_avg_entry_prices([6])
        .subscribe_account_all_assets([5])
        .subscribe_account_all_positions([4])
        .subscribe_accounts([3])
        .subscribe_market_stats([2])
        .subscribe_ticker([1])
        .subscribe_order_books([0])
    )
    assert channels(client) == [
        "order_book/0",
        "ticker/1",
        "market_stats/2",
        "account_all/3",
        "account_all_positions/4",
        "account_all_assets/5",
        "account_spot_avg_entry_prices/6",
        "account_all_trades/7",
        "user_stats/8",
        "market_stats/all",
        "account_orders/3/4",
        "account_all_orders/9",
    ]


def test_subscribe_replaces_previous_ids():
    client = WsClient(URL).subscribe_order_books([1, 2]).subscribe_order_books([3])
    assert channels(client) == ["order_book/3"]


def test_account_orders_subscriptions_accumulate():
    client = WsClient(URL).subscribe_account_orders(1, 10).subscribe_account_orders(2, 20)
    assert channels(client) == ["account_orders/1/10", "account_orders/2/20"]
    assert client.has_subscriptions() is True


def test_callbacks_are_registered_by_kind():
    received = []

    def ticker(market_id, bid, ask):
        received.append((market_id, bid, ask))

    client = WsClient(URL).on_ticker_update(ticker)
    client.callbacks["ticker"](1, 2.0, 3.0)
    assert received == [(1, 2.0, 3.0)]
    assert set(client.callbacks) == {"ticker"}


def test_non_callable_callback_is_rejected():
    with pytest.raises(TypeError):
        WsClient(URL).on_order_book_update(42)


def test_handlers_start_empty_and_are_shared():
    client = WsClient(URL)
    assert isinstance(client.order_book_handler, OrderBookHandler)
    assert client.order_book_handler.get(1) is None
    client.order_book_handler.set_snapshot(1, OrderBookState(nonce=5))
    assert client.order_book_handler.get(1).nonce == 5
    assert client.account_orders_handler.get(1) is None


def test_builder_methods_return_same_client():
    client = WsClient(URL)
    assert client.subscribe_ticker([1]) is client
    assert client.with_auth_token("token") is client
    assert client.auth_token == "token"
    assert client.ws_url == URL