import pytest

from lighter_sdk.handler import (
    AccountAllAssetsHandler,
    AccountAllTradesHandler,
    AccountHandler,
    AccountOrdersHandler,
    AccountSpotAvgEntryPricesHandler,
    MarketStatsHandler,
    MissingSnapshotError,
    NonContiguousNonceError,
    OrderBookDelta,
    OrderBookHandler,
    OrderBookState,
    OrderBookUpdateError,
    PriceLevel,
    UserStatsHandler,
)


def level(price, size):
    return PriceLevel(price=price, size=size)


def snapshot_state():
    return OrderBookState(
        asks=[level("101", "2"), level("102", "3")],
        bids=[level("99", "4"), level("98", "5")],
        nonce=10,
    )


def update_book(begin_nonce, nonce, asks, bids):
    return OrderBookDelta(asks=asks, bids=bids, nonce=nonce, begin_nonce=begin_nonce)


def sample_order(order_index, market_index):
    return {"order_index": order_index, "market_index": market_index, "status": "open"}


def test_price_level_values():
    lvl = level("101.5", "0")
    assert lvl.price_value() == 101.5
    assert lvl.size_value() == 0.0
    assert level("abc", "1").price_value() is None


def test_account_scoped_orders_do_not_clobber_each_other():
    handler = AccountOrdersHandler()
    handler.set_orders_for_account(100, 89, [sample_order(1, 89)])
    handler.set_orders_for_account(200, 89, [sample_order(2, 89)])

    a = handler.get_for_account(100, 89)
    b = handler.get_for_account(200, 89)
    assert len(a) == 1
    assert len(b) == 1
    assert a[0]["order_index"] == 1
    assert b[0]["order_index"] == 2


def test_account_orders_by_market():
    handler = AccountOrdersHandler()
    handler.set_orders(89, [sample_order(5, 89)])
    assert handler.get(89)[0]["order_index"] == 5
    assert handler.get(1) is None
    assert handler.get_for_account(100, 89) is None


def test_account_all_assets_state_is_stored_by_account():
    handler = AccountAllAssetsHandler()
    state = {"type": "update/account_all_assets", "channel": "account_all_assets:1234", "assets": []}
    handler.set_state(1234, state)
    assert handler.get(1234) == state
    assert handler.get(9999) is None


def test_account_all_trades_state_is_stored_by_account():
    handler = AccountAllTradesHandler()
    state = {"type": "update/account_all_trades", "channel": "account_all_trades:1234", "trades": {}}
    handler.set_state(1234, state)
    assert handler.get(1234) == state
    assert handler.get(9999) is None


def test_account_spot_avg_entry_prices_state_is_stored_by_account():
    handler = AccountSpotAvgEntryPricesHandler()
    state = {"channel": "account_spot_avg_entry_prices/1234", "avg_entry_prices": {}}
    handler.set_state(1234, state)
    assert handler.get(1234) == state
    assert handler.get(9999) is None


@pytest.mark.parametrize(
    "handler_cls", [AccountHandler, UserStatsHandler, MarketStatsHandler]
)
def test_state_store_replaces_state(handler_cls):
    handler = handler_cls()
    handler.set_state(7, {"v": 1})
    handler.set_state(7, {"v": 2})
    assert handler.get(7) == {"v": 2}


def test_order_book_snapshot_initializes_state_and_nonce():
    handler = OrderBookHandler()
    handler.set_snapshot(42, snapshot_state())

    state = handler.get(42)
    assert state.nonce == 10
    assert state.bids[0].price == "99"
    assert state.asks[0].price == "101"


def test_contiguous_order_book_delta_updates_state():
    handler = OrderBookHandler()
    handler.set_snapshot(42, snapshot_state())

    updated = handler.apply_update(
        42,
        update_book(
            10,
            11,
            [level("101", "1"), level("103", "7")],
            [level("99", "0"), level("100", "6")],
        ),
    )

    assert updated.nonce == 11
    assert len(updated.asks) == 3
    assert updated.asks[0].price == "101"
    assert updated.asks[0].size == "1"
    assert len(updated.bids) == 2
    assert updated.bids[0].price == "100"
    assert updated.bids[0].size == "6"
    assert handler.get(42).nonce == 11


def test_sorting_after_update():
    handler = OrderBookHandler()
    handler.set_snapshot(1, snapshot_state())
    updated = handler.apply_update(
        1, update_book(10, 12, [level("100.5", "1")], [level("99.5", "2")])
    )
    assert [lvl.price for lvl in updated.asks] == ["100.5", "101", "102"]
    assert [lvl.price for lvl in updated.bids] == ["99.5", "99", "98"]


def test_order_book_nonce_gap_is_rejected():
    handler = OrderBookHandler()
    handler.set_snapshot(42, snapshot_state())

    with pytest.raises(NonContiguousNonceError) as info:
        handler.apply_update(42, update_book(9, 11, [level("101", "1")], []))

    err = info.value
    assert (err.market_id, err.expected_begin_nonce, err.actual_begin_nonce, err.previous_nonce) == (
        42,
        10,
        9,
        10,
    )
    assert isinstance(err, OrderBookUpdateError)
    assert handler.get(42).asks[0].size == "2"


def test_delta_before_snapshot_is_rejected():
    handler = OrderBookHandler()
    with pytest.raises(MissingSnapshotError) as info:
        handler.apply_update(5, update_book(0, 1, [], []))
    assert info.value.market_id == 5
    assert "before a snapshot" in str(info.value)